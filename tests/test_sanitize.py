import pytest

from glow_wizard.utils.sanitize import (
    normalize_email,
    prevent_injection_attacks,
    sanitize_profile,
    sanitize_user_input,
)


def test_sanitize_user_input():
    result = sanitize_user_input({
        "stringInput": '<script>alert("hi")</script>',
        "emailInput": "  Jane.Doe@Gmail.COM ",
        "urlInput": "  https://cdn.example.com/face.jpg  "
    })

    assert result == {
        "stringInput": "&lt;script&gt;alert(&quot;hi&quot;)&lt;/script&gt;",
        "emailInput": "jane.doe@gmail.com",
        "urlInput": "https://cdn.example.com/face.jpg"
    }


def test_sanitize_missing_fields():
    assert sanitize_user_input({}) == {"stringInput": "", "emailInput": "", "urlInput": ""}


@pytest.mark.parametrize("email", ["not-an-email", "jane@", ""])
def test_invalid_email_is_blanked(email):
    assert normalize_email(email) == ""


@pytest.mark.parametrize("payload", [
    {"name": "Jane", "location": "Austin, TX"},
    {"notes": "selected products for oily skin"},
    [{"concerns": ["acne"]}, {"hydration": 8}],
])
def test_clean_payloads(payload):
    assert prevent_injection_attacks(payload) is True


@pytest.mark.parametrize("payload", [
    {"name": "x'; DROP TABLE profiles"},
    {"name": "admin' --"},
    {"notes": "select * from users"},
    {"notes": "Insert into"},
])
def test_banned_patterns(payload):
    assert prevent_injection_attacks(payload) is False


def test_sanitize_profile(valid_profile):
    profile = {**valid_profile, "name": 'Jane "JD" <Doe>'}

    result = sanitize_profile(profile, email=" Jane.Doe@Gmail.COM ")

    assert result["name"] == "Jane &quot;JD&quot; &lt;Doe&gt;"
    assert result["age"] == 29
    assert result["concerns"] == ["acne", "redness"]
    assert result["email"] == "jane.doe@gmail.com"


def test_sanitize_profile_without_email(valid_profile):
    assert "email" not in sanitize_profile(valid_profile)
