"""Credential handling and session establishment."""

from icloud_media.auth.credentials import (
    AppleIdCredentials,
    CookieCredentials,
    Credentials,
    credentials_from_mapping,
    normalize_cookie,
)
from icloud_media.auth.establisher import SessionEstablisher
from icloud_media.auth.session import Session, SessionState

__all__ = [
    'AppleIdCredentials',
    'CookieCredentials',
    'Credentials',
    'credentials_from_mapping',
    'normalize_cookie',
    'SessionEstablisher',
    'Session',
    'SessionState',
]
