"""
Retrieve raw asset records from a located Photos service or album.
"""
import asyncio
import inspect
import logging
from collections.abc import Iterable, Mapping
from itertools import islice
from typing import Any, List, Optional

from icloud_media.exceptions import FetchError, MediaAdapterError, UnsupportedServiceShapeError
from icloud_media.services.locator import safe_getattr
from icloud_media.utils.async_calls import call_client, resolve

logger = logging.getLogger(__name__)

# Retrieval operations, in priority order
FETCH_OPERATIONS = (
    'get_photos', 'getPhotos', 'photos', 'list_photos', 'listPhotos',
    'list', 'fetch', 'get_assets', 'assets', 'items',
)

# Fields that may wrap the asset list in a response object
RESULT_FIELDS = ('items', 'assets', 'data', 'photos')


def _accepts_limit(func: Any) -> bool:
    try:
        parameters = inspect.signature(func).parameters.values()
    except (TypeError, ValueError):
        return False
    return any(
        p.name == 'limit' or p.kind == inspect.Parameter.VAR_KEYWORD
        for p in parameters
    )


def _is_collection(value: Any) -> bool:
    return isinstance(value, Iterable) and not isinstance(value, (str, bytes, Mapping))


def _take(values: Iterable, limit: int) -> List[Any]:
    return list(islice(values, limit)) if limit > 0 else list(values)


async def _take_async(values: Any, limit: int) -> List[Any]:
    taken = []
    async for value in values:
        if 0 < limit <= len(taken):
            break
        taken.append(value)
    return taken


def resolve_sequence(value: Any, limit: int = 0) -> List[Any]:
    """
    Coerce a retrieval result into a flat list.

    Accepts a bare sequence or iterable, or a mapping/object exposing the
    list under ``items``, ``assets``, ``data`` or ``photos``. Anything else
    resolves to an empty list. Lazy iterables are consumed at most ``limit``
    entries when a limit is given.

    Args:
        value: Raw value returned by the upstream call
        limit: Maximum entries to read (0 = no bound)

    Returns:
        List of raw asset records
    """
    if value is None or isinstance(value, (str, bytes)):
        return []

    if isinstance(value, Mapping):
        for field in RESULT_FIELDS:
            inner = value.get(field)
            if _is_collection(inner):
                return _take(inner, limit)
        return []

    if _is_collection(value):
        return _take(value, limit)

    for field in RESULT_FIELDS:
        inner = safe_getattr(value, field)
        if _is_collection(inner):
            return _take(inner, limit)

    return []


async def _invoke(handle: Any, limit: int) -> Any:
    if isinstance(handle, Mapping):
        if any(field in handle for field in RESULT_FIELDS):
            return handle
        raise UnsupportedServiceShapeError(type(handle).__name__)

    for name in FETCH_OPERATIONS:
        operation = safe_getattr(handle, name)
        if operation is None:
            continue
        if callable(operation):
            logger.debug(f"Fetching assets via {type(handle).__name__}.{name}()")
            if limit > 0 and _accepts_limit(operation):
                return await call_client(operation, limit=limit)
            return await call_client(operation)
        logger.debug(f"Fetching assets via {type(handle).__name__}.{name}")
        return await resolve(operation)

    if _is_collection(handle) or hasattr(handle, '__aiter__'):
        logger.debug(f"Iterating {type(handle).__name__} directly")
        return handle

    raise UnsupportedServiceShapeError(type(handle).__name__)


async def fetch_assets(service: Any, limit: Optional[int] = 0) -> List[Any]:
    """
    List raw assets from a service or album handle.

    The limit is passed to the upstream call as a hint where it is accepted,
    and always enforced here by truncation.

    Args:
        service: Handle returned by ``locate_photo_service``
        limit: Maximum number of assets (0 or None = no bound)

    Returns:
        Raw asset records in upstream order

    Raises:
        UnsupportedServiceShapeError: No known retrieval operation exists
        FetchError: The retrieval call or paging through its result failed
    """
    limit = max(int(limit or 0), 0)
    handle_type = type(service).__name__
    try:
        raw = await _invoke(service, limit)

        if hasattr(raw, '__aiter__'):
            assets = await _take_async(raw, limit)
        else:
            # Iterating pyicloud albums performs paged HTTP requests
            assets = await asyncio.to_thread(resolve_sequence, raw, limit)
    except MediaAdapterError:
        raise
    except Exception as e:
        logger.error(f"Failed to list assets from {handle_type}: {e}")
        raise FetchError(handle_type, f"Listing media from {handle_type} failed: {e}") from e

    if limit > 0:
        assets = assets[:limit]
    logger.info(f"Fetched {len(assets)} assets" + (f" (limit {limit})" if limit else ""))
    return assets
