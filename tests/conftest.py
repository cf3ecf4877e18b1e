from io import BytesIO

import pytest
from PIL import Image


@pytest.fixture
def db_path(tmp_path):
    return tmp_path / "data" / "trees.db"


@pytest.fixture
def tree_data():
    """A tree as entered in the form, before id and derived metrics."""
    return {
        "species": "Mahogany",
        "dbh": 35.0,
        "height": 18.0,
        "condition": "Healthy",
        "proximity_to_building": "Near",
        "notes": "Next to the school gate.",
        "photo": "",
        "latitude": -6.2,
        "longitude": 106.8,
        "inventory_date": "2024-05-01T08:00:00+00:00",
    }


def make_image_bytes(width=1600, height=1200, fmt="PNG"):
    buffer = BytesIO()
    Image.new("RGB", (width, height), (34, 139, 34)).save(buffer, format=fmt)
    return buffer.getvalue()


class FakeUpload:
    """Stand-in for a Streamlit UploadedFile."""

    def __init__(self, name, data):
        self.name = name
        self._data = data

    def getvalue(self):
        return self._data


@pytest.fixture
def image_bytes():
    return make_image_bytes()


@pytest.fixture
def make_upload(image_bytes):
    def _make(name, data=None):
        return FakeUpload(name, image_bytes if data is None else data)
    return _make
