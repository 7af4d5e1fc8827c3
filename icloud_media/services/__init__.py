"""Photos service discovery and asset retrieval."""

from icloud_media.services.fetcher import fetch_assets, resolve_sequence
from icloud_media.services.locator import locate_photo_service, pick_album

__all__ = ['fetch_assets', 'resolve_sequence', 'locate_photo_service', 'pick_album']
