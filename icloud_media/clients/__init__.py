"""Default iCloud client implementations."""

from icloud_media.clients.cookie_client import CookieSessionClient
from icloud_media.clients.pyicloud_client import PyiCloudClient

__all__ = ['CookieSessionClient', 'PyiCloudClient']
