"""Upload services module."""
from .file_service import (
    AsyncFileReader,
    BufferReader,
    FileValidator,
    UploadSource,
    open_source,
)
from .fragment_service import BODY_SLICE_SIZE, FragmentUploader

__all__ = [
    'AsyncFileReader',
    'BufferReader',
    'FileValidator',
    'UploadSource',
    'open_source',
    'BODY_SLICE_SIZE',
    'FragmentUploader',
]
