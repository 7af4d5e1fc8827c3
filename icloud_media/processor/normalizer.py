"""
Map raw iCloud asset records onto one canonical shape.

The upstream schema is unversioned. Records arrive either flat (``id``,
``filename``, ``type``...) or as a master record whose ``fields`` hold typed
CloudKit values, and as plain dicts or as pyicloud ``PhotoAsset`` objects
whose properties raise on missing keys. Every accessor here returns None for
anything absent or unreadable, so normalization never fails.
"""
import base64
import binascii
import logging
from collections.abc import Mapping
from typing import Any, Dict, Iterable, List, Optional

logger = logging.getLogger(__name__)

MASTER_RECORD_KEYS = ('masterRecord', 'master_record', '_master_record')
ID_KEYS = ('id', 'recordName')
GUID_KEYS = ('guid', 'uuid', 'assetId')
FILENAME_KEYS = ('filename', 'fileName', 'name')
TYPE_KEYS = ('item_type', 'media_type', 'type', 'mediaType')
CREATED_KEYS = (
    'created', 'creationDate', 'dateCreated', 'creation_date', 'date',
    'assetDate', 'asset_date', 'addedDate', 'added_date',
)
SIZE_KEYS = ('size', 'fileSize', 'file_size', 'dataLength', 'data_length')
VIDEO_RESOLUTION_FIELDS = ('resVidSmallRes', 'resVidMedRes', 'resVidFullRes', 'resOriginalVidComplRes')

MEDIA_PHOTO = 'photo'
MEDIA_VIDEO = 'video'


def get_field(record: Any, key: str) -> Any:
    """Read one field from a mapping or object; None if absent or unreadable."""
    if record is None:
        return None
    if isinstance(record, Mapping):
        return record.get(key)
    try:
        return getattr(record, key, None)
    except Exception as e:
        logger.debug(f"Error reading {type(record).__name__}.{key}: {e}")
        return None


def get_nested(record: Any, *path: str) -> Any:
    """Follow ``path`` through nested mappings/objects; None on any gap."""
    value = record
    for key in path:
        value = get_field(value, key)
        if value is None:
            return None
    return value


def first_present(record: Any, keys: Iterable[str]) -> Any:
    """Value of the first key that is present and not None."""
    for key in keys:
        value = get_field(record, key)
        if value is not None:
            return value
    return None


def get_string(record: Any, keys: Iterable[str]) -> Optional[str]:
    """Like ``first_present`` but only accepts non-empty strings."""
    for key in keys:
        value = get_field(record, key)
        if isinstance(value, str) and value:
            return value
    return None


def _master_record(raw: Any) -> Optional[Any]:
    for key in MASTER_RECORD_KEYS:
        master = get_field(raw, key)
        if master is not None:
            return master
    return None


def _field_value(fields: Any, name: str) -> Any:
    # CloudKit fields are wrapped as {"value": ..., "type": ...}
    value = get_field(fields, name)
    if isinstance(value, Mapping) and 'value' in value:
        return value['value']
    return value


def _decode_filename(fields: Any) -> Optional[str]:
    encoded = _field_value(fields, 'filenameEnc')
    if not isinstance(encoded, str) or not encoded:
        return None
    try:
        return base64.b64decode(encoded).decode('utf-8')
    except (binascii.Error, UnicodeDecodeError, ValueError):
        return None


def _media_type(raw: Any, fields: Optional[Any]) -> Optional[str]:
    if fields is not None:
        if any(get_field(fields, name) is not None for name in VIDEO_RESOLUTION_FIELDS):
            return MEDIA_VIDEO
        return MEDIA_PHOTO
    tag = first_present(raw, TYPE_KEYS)
    if tag is None:
        return None
    return str(tag).lower()


def normalize(raw: Any) -> Dict[str, Any]:
    """
    Build a canonical asset from one raw record.

    Args:
        raw: Mapping or object from the upstream service

    Returns:
        Dict with ``id``, ``filename``, ``mediaType``, ``created``, ``size``
        and ``raw`` keys. Missing values are None.
    """
    master = _master_record(raw)
    fields = get_field(master, 'fields') if master is not None else None
    if fields is not None and not isinstance(fields, Mapping):
        fields = None

    asset_id = first_present(raw, ID_KEYS)
    if asset_id is None and master is not None:
        asset_id = get_field(master, 'recordName')
    if asset_id is None:
        asset_id = first_present(raw, GUID_KEYS)

    filename = get_string(raw, FILENAME_KEYS)
    if filename is None and fields is not None:
        filename = _decode_filename(fields)

    size = first_present(raw, SIZE_KEYS)
    if size is None and fields is not None:
        size = get_nested(fields, 'resOriginalRes', 'value', 'size')

    return {
        'id': asset_id,
        'filename': filename,
        'mediaType': _media_type(raw, fields),
        'created': first_present(raw, CREATED_KEYS),
        'size': size,
        'raw': raw,
    }


def normalize_all(raws: Iterable[Any]) -> List[Dict[str, Any]]:
    """Normalize a sequence of raw records, preserving order."""
    return [normalize(raw) for raw in raws]
