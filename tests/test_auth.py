import pytest

from auth import is_authenticated, login, logout
from config import DEFAULT_ADMIN_PASSWORD, SESSION_AUTH_KEY


@pytest.fixture(autouse=True)
def no_password_override(monkeypatch):
    monkeypatch.delenv("ADMIN_PASSWORD", raising=False)


@pytest.mark.parametrize("attempt", ["", None, "wrong", DEFAULT_ADMIN_PASSWORD + " ", "pohon-ñ"])
def test_wrong_password_never_authenticates(attempt):
    session = {}

    assert login(session, attempt) is False
    assert not is_authenticated(session)
    assert SESSION_AUTH_KEY not in session


def test_correct_password_holds_until_logout():
    session = {}

    assert login(session, DEFAULT_ADMIN_PASSWORD)
    assert is_authenticated(session)
    assert is_authenticated(session)

    logout(session)
    assert not is_authenticated(session)


def test_password_from_environment(monkeypatch):
    monkeypatch.setenv("ADMIN_PASSWORD", "s3cret")
    session = {}

    assert not login(session, DEFAULT_ADMIN_PASSWORD)
    assert login(session, "s3cret")


def test_only_true_flag_counts():
    assert not is_authenticated({SESSION_AUTH_KEY: "yes"})
