"""
iCloud Media Adapter

Authenticates against iCloud Photos with a captured session cookie or an
Apple ID and app-specific password, and lists media assets in one stable
record shape regardless of which client library or upstream schema version
produced them.
"""
__version__ = "1.0.0"

# Import main classes for easy access
from icloud_media.adapter import MediaAdapter
from icloud_media.auth import (
    AppleIdCredentials,
    CookieCredentials,
    SessionEstablisher,
    credentials_from_mapping,
)
from icloud_media.config import AdapterConfig, ListParameters
from icloud_media.exceptions import (
    MediaAdapterError,
    ConfigurationError,
    AuthenticationError,
    MissingCredentialsError,
    MfaRequiredError,
    SessionTimeoutError,
    AuthenticationFailedError,
    ServiceError,
    ServiceUnavailableError,
    UnsupportedServiceShapeError,
    FetchError,
    UnsupportedOperationError,
)
from icloud_media.processor import normalize, project
from icloud_media.services import fetch_assets, locate_photo_service

__all__ = [
    '__version__',
    'MediaAdapter',
    'AppleIdCredentials',
    'CookieCredentials',
    'SessionEstablisher',
    'credentials_from_mapping',
    'AdapterConfig',
    'ListParameters',
    'MediaAdapterError',
    'ConfigurationError',
    'AuthenticationError',
    'MissingCredentialsError',
    'MfaRequiredError',
    'SessionTimeoutError',
    'AuthenticationFailedError',
    'ServiceError',
    'ServiceUnavailableError',
    'UnsupportedServiceShapeError',
    'FetchError',
    'UnsupportedOperationError',
    'normalize',
    'project',
    'fetch_assets',
    'locate_photo_service',
]
