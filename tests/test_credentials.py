"""
Tests for credential parsing and normalization.
"""
import pytest

from icloud_media.auth.credentials import (
    AppleIdCredentials,
    CookieCredentials,
    credentials_from_mapping,
    normalize_cookie,
    normalize_mfa_code,
)


class TestNormalizeCookie:
    """Tests for normalize_cookie."""

    def test_strips_prefix_and_whitespace(self):
        """Test the documented scenario: 'Cookie: a=1; b=2' -> 'a=1; b=2'."""
        assert normalize_cookie("Cookie: a=1; b=2") == "a=1; b=2"

    def test_prefix_is_case_insensitive(self):
        assert normalize_cookie("  cookie:a=1  ") == "a=1"

    def test_bare_header_unchanged(self):
        assert normalize_cookie("a=1; b=2") == "a=1; b=2"

    @pytest.mark.parametrize("value", [None, "", "   ", "Cookie:   "])
    def test_empty_values(self, value):
        assert normalize_cookie(value) == ""


class TestNormalizeMfaCode:
    """Tests for normalize_mfa_code."""

    def test_removes_spaces_and_dashes(self):
        assert normalize_mfa_code(" 123-456 ") == "123456"
        assert normalize_mfa_code("123 456") == "123456"

    def test_blank_code_is_none(self):
        assert normalize_mfa_code("  ") is None
        assert normalize_mfa_code(None) is None

    def test_integer_code(self):
        """YAML may load an unquoted code as an integer."""
        assert normalize_mfa_code(123456) == "123456"


class TestCredentialsFromMapping:
    """Tests for selecting the credential variant."""

    def test_cookie_selects_cookie_variant(self, cookie_header):
        creds = credentials_from_mapping({'cookie': cookie_header, 'appleId': 'me@example.com'})
        assert isinstance(creds, CookieCredentials)
        assert creds.cookie == "X-APPLE-WEBAUTH-USER=abc; X-APPLE-WEBAUTH-TOKEN=def"
        assert creds.apple_id == "me@example.com"

    def test_blank_cookie_falls_back_to_apple_id(self):
        creds = credentials_from_mapping({
            'cookie': 'Cookie: ',
            'appleId': ' me@example.com ',
            'appPassword': ' secret ',
            'mfaCode': '123 456',
            'trustDevice': True,
        })
        assert isinstance(creds, AppleIdCredentials)
        assert creds.apple_id == "me@example.com"
        assert creds.password == "secret"
        assert creds.mfa_code == "123456"
        assert creds.trust_device is True

    def test_snake_case_keys(self):
        creds = credentials_from_mapping({'apple_id': 'me@example.com', 'password': 'pw', 'trust_device': 'yes'})
        assert isinstance(creds, AppleIdCredentials)
        assert creds.trust_device is True

    def test_empty_mapping_gives_blank_apple_id(self):
        creds = credentials_from_mapping({})
        assert isinstance(creds, AppleIdCredentials)
        assert creds.apple_id == ""
        assert creds.password == ""
        assert creds.mfa_code is None
        assert creds.trust_device is False

    def test_repr_hides_secrets(self):
        creds = AppleIdCredentials(apple_id='me@example.com', password='hunter2', mfa_code='123456')
        assert 'hunter2' not in repr(creds)
        assert '123456' not in repr(creds)
        cookie = CookieCredentials(cookie='TOKEN=topsecret')
        assert 'topsecret' not in repr(cookie)

    def test_credentials_are_immutable(self):
        creds = AppleIdCredentials(apple_id='me@example.com', password='pw')
        with pytest.raises(Exception):
            creds.password = 'other'
