"""Asset normalization and output projection."""

from icloud_media.processor.normalizer import normalize, normalize_all
from icloud_media.processor.projector import filter_by_media_type, project, strip_raw

__all__ = ['normalize', 'normalize_all', 'filter_by_media_type', 'project', 'strip_raw']
