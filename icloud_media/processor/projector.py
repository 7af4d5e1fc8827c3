"""
Filter canonical assets by media type and strip raw payloads.
"""
from typing import Any, Dict, Iterable, List

MEDIA_TYPE_FILTERS = ('all', 'photo', 'video')


def _is_video(asset: Dict[str, Any]) -> bool:
    return str(asset.get('mediaType') or '').lower() == 'video'


def filter_by_media_type(assets: Iterable[Dict[str, Any]], media_type: str = 'all') -> List[Dict[str, Any]]:
    """
    Keep assets matching ``media_type``.

    ``photo`` keeps everything that is not exactly a video, so items with an
    unknown or missing type count as photos.
    """
    if media_type == 'photo':
        return [asset for asset in assets if not _is_video(asset)]
    if media_type == 'video':
        return [asset for asset in assets if _is_video(asset)]
    return list(assets)


def strip_raw(assets: Iterable[Dict[str, Any]]) -> List[Dict[str, Any]]:
    """Return copies of ``assets`` without their ``raw`` entry."""
    return [{key: value for key, value in asset.items() if key != 'raw'} for asset in assets]


def project(assets: Iterable[Dict[str, Any]], media_type: str = 'all',
            include_raw: bool = False) -> List[Dict[str, Any]]:
    """
    Apply the media-type filter and raw-payload projection.

    Args:
        assets: Canonical assets in upstream order
        media_type: ``all``, ``photo`` or ``video``
        include_raw: Keep the ``raw`` entry on each asset

    Returns:
        New list in the same order; input assets are not modified
    """
    filtered = filter_by_media_type(assets, media_type)
    if include_raw:
        return filtered
    return strip_raw(filtered)
