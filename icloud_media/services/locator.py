"""
Locate the photo listing capability on an authenticated client.

Client libraries attach the Photos service in different places
(``get_service('photos')``, ``photos``, ``Photos``...) and expose albums
either as a mapping, a list, or a container object. The probes below are
tried in order and the first non-empty match wins.
"""
import logging
from collections.abc import Iterable, Mapping, Sequence
from typing import Any, Callable, List, Optional, Tuple

from icloud_media.auth.session import Session
from icloud_media.exceptions import ServiceUnavailableError
from icloud_media.utils.async_calls import call_client

logger = logging.getLogger(__name__)

SERVICE_NAME = "Photos"
SERVICE_ACCESSORS = ('get_service', 'getService')
SERVICE_ATTRIBUTES = ('photos', 'Photos', 'photos_service', 'photosService')
ALBUM_ACCESSORS = ('get_albums', 'getAlbums')
DEFAULT_ALBUM_NAMES = ('all', 'All Photos', 'Library')


def safe_getattr(obj: Any, name: str) -> Any:
    """getattr that treats a raising property as absent."""
    try:
        return getattr(obj, name, None)
    except Exception as e:
        logger.debug(f"Error accessing {type(obj).__name__}.{name}: {e}")
        return None


def _is_empty(value: Any) -> bool:
    if value is None:
        return True
    if isinstance(value, (Mapping, Sequence)) and not isinstance(value, (str, bytes)):
        return len(value) == 0
    return False


async def _from_accessor(client: Any) -> Any:
    for name in SERVICE_ACCESSORS:
        accessor = safe_getattr(client, name)
        if not callable(accessor):
            continue
        try:
            service = await call_client(accessor, SERVICE_NAME.lower())
        except Exception as e:
            logger.debug(f"Error calling {name}('{SERVICE_NAME.lower()}'): {e}")
            continue
        if not _is_empty(service):
            logger.debug(f"Found {SERVICE_NAME} service via {name}()")
            return service
    return None


async def _from_attribute(client: Any) -> Any:
    for name in SERVICE_ATTRIBUTES:
        service = safe_getattr(client, name)
        if not _is_empty(service):
            logger.debug(f"Found {SERVICE_NAME} service via .{name}")
            return service
    return None


SERVICE_PROBES: List[Tuple[str, Callable]] = [
    ("accessor", _from_accessor),
    ("attribute", _from_attribute),
]


def pick_album(albums: Any) -> Optional[Any]:
    """
    Choose the canonical "all items" album from a collection.

    Preference: an explicitly named default album, then the first entry of a
    keyed collection, then the first entry of an indexed collection.

    Args:
        albums: Mapping, container with ``find``, sequence or other iterable

    Returns:
        The selected album, or None for an empty/unknown collection
    """
    if albums is None or isinstance(albums, (str, bytes)):
        return None

    if isinstance(albums, Mapping):
        for name in DEFAULT_ALBUM_NAMES:
            if albums.get(name):
                return albums[name]
        return next(iter(albums.values()), None)

    find = safe_getattr(albums, 'find')
    if callable(find):
        for name in DEFAULT_ALBUM_NAMES:
            try:
                album = find(name)
            except Exception as e:
                logger.debug(f"Error looking up album '{name}': {e}")
                continue
            if album:
                return album

    values = safe_getattr(albums, 'values')
    if callable(values):
        try:
            return next(iter(values()), None)
        except Exception as e:
            logger.debug(f"Error reading keyed album collection: {e}")

    if isinstance(albums, Sequence):
        return albums[0] if len(albums) > 0 else None

    if isinstance(albums, Iterable):
        return next(iter(albums), None)

    return None


async def _select_album(service: Any) -> Any:
    if isinstance(service, (Mapping, Sequence)) and not isinstance(service, (str, bytes)):
        return pick_album(service)

    default_album = safe_getattr(service, 'all')
    if default_album is not None and not _is_empty(default_album):
        logger.debug("Using the service's default album")
        return default_album

    for name in ALBUM_ACCESSORS:
        accessor = safe_getattr(service, name)
        if callable(accessor):
            try:
                album = pick_album(await call_client(accessor))
            except Exception as e:
                logger.debug(f"Error calling {name}(): {e}")
                continue
            if album is not None:
                logger.debug(f"Using first album from {name}()")
                return album

    album = pick_album(safe_getattr(service, 'albums'))
    if album is not None:
        logger.debug("Using first album from .albums")
        return album

    # No album layer: the service lists items itself
    return service


async def locate_photo_service(session: Any) -> Any:
    """
    Find the object that lists photos for a session.

    Args:
        session: A :class:`Session` or a bare client handle

    Returns:
        Album or service handle to pass to ``fetch_assets``

    Raises:
        ServiceUnavailableError: No Photos service (or album) could be found
    """
    client = session.client if isinstance(session, Session) else session

    for name, probe in SERVICE_PROBES:
        service = await probe(client)
        if service is None:
            continue
        album = await _select_album(service)
        if album is not None:
            logger.info(f"Located {SERVICE_NAME} service on {type(client).__name__} ({name})")
            return album
        logger.debug(f"{SERVICE_NAME} service found via {name} but it has no albums")

    raise ServiceUnavailableError(SERVICE_NAME)
