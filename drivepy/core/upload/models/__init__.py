"""Upload models."""
from .upload_models import (
    ContentRange,
    UploadSession,
    UploadOptions,
    UploadProgress,
    NameConflictBehavior,
    ProgressCallback,
    parse_timestamp,
    FRAGMENT_ALIGNMENT_BYTES,
    DEFAULT_FRAGMENT_SIZE,
)

__all__ = [
    'ContentRange',
    'UploadSession',
    'UploadOptions',
    'UploadProgress',
    'NameConflictBehavior',
    'ProgressCallback',
    'parse_timestamp',
    'FRAGMENT_ALIGNMENT_BYTES',
    'DEFAULT_FRAGMENT_SIZE',
]
