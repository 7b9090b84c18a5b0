import pytest

from collab_manager import validators


@pytest.mark.parametrize("value, ok", [
    ("anna@auravisual.dk", True),
    ("first.last@sub.example.com", True),
    ("no-at-sign", False),
    ("a@b", False),
    ("", False),
])
def test_email(value, ok):
    assert (validators.email(value) is None) == ok


def test_password_length():
    assert validators.password("12345") == "Password must be at least 6 characters long"
    assert validators.password("123456") is None


def test_strong_password():
    assert validators.strong_password("short1A") == "Password must be at least 8 characters"
    assert validators.strong_password("alllowercase1") == "Password must contain uppercase, lowercase, and numbers"
    assert validators.strong_password("Secret123") is None


def test_url_is_lenient():
    assert validators.url("https://auravisual.dk") is None
    assert validators.url("www.example") is None
    assert validators.url("instagram.com/aura") is None
    assert validators.url("example.org") is None
    assert validators.url("nope") == "Please enter a valid URL"
    assert validators.url("") is None
    assert validators.url("", required=True) == "Please enter a URL"


def test_ticket_message_bounds():
    assert validators.ticket_message("too short") is not None
    assert validators.ticket_message("x" * 10) is None
    assert validators.ticket_message("x" * 501) is not None


def test_full_name():
    assert validators.full_name(" ") == "Please enter the client's full name"
    assert validators.full_name("A") == "Full name must be at least 2 characters"
    assert validators.full_name("Al") is None
