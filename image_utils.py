import base64
import logging
from io import BytesIO

from PIL import Image, ImageOps, UnidentifiedImageError

logger = logging.getLogger(__name__)

MAX_WIDTH = 800
JPEG_QUALITY = 70
DATA_URL_PREFIX = "data:image/jpeg;base64,"


def compress_image(data, max_width=MAX_WIDTH, quality=JPEG_QUALITY):
    """
    Scale a photo to `max_width` pixels wide and re-encode it as JPEG.

    Returns a data URL so the photo can be stored inside the tree record.
    Raises ValueError when the bytes are not a readable image.
    """
    try:
        img = Image.open(BytesIO(data))
        img = ImageOps.exif_transpose(img)
    except (UnidentifiedImageError, OSError) as e:
        raise ValueError(f"Could not read image: {e}") from e

    scale = max_width / img.width
    img = img.convert("RGB").resize((max_width, max(1, round(img.height * scale))))

    buffer = BytesIO()
    img.save(buffer, format="JPEG", quality=quality)
    encoded = base64.b64encode(buffer.getvalue()).decode("ascii")
    logger.debug("Compressed image to %d bytes", buffer.tell())
    return DATA_URL_PREFIX + encoded


def data_url_to_base64(data_url):
    """Strip the `data:...;base64,` prefix."""
    return data_url.split(",", 1)[1] if "," in data_url else data_url
