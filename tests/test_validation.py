import pytest

from app.core.validation import is_valid_email, normalize_email, passwords_match


@pytest.mark.parametrize(
    "email",
    ["a@b.co", "a.b-c@d.e.org", "First.Last@Example.COM", "user_1@mail-host.net"],
)
def test_valid_emails(email):
    assert is_valid_email(email)


@pytest.mark.parametrize(
    "email",
    [
        "not-an-email",
        "@missing-local.com",
        "a@b",
        "a@b.toolong",
        "a..b@c.com",
        "a@b.co\n",
        "",
        None,
    ],
)
def test_invalid_emails(email):
    assert not is_valid_email(email)


def test_non_ascii_word_characters_are_rejected():
    assert not is_valid_email("josé@example.com")


def test_normalize_email():
    assert normalize_email("  Ada@Example.COM ") == "ada@example.com"
    assert normalize_email(None) == ""


def test_passwords_match_is_plain_equality():
    assert passwords_match("abc", "abc")
    assert not passwords_match("abc", "ABC")
    assert passwords_match("", "")


def test_long_non_matching_input_is_rejected():
    assert not is_valid_email("a" * 5000 + "!")
    assert not is_valid_email("a@" + "b" * 5000 + "!")
