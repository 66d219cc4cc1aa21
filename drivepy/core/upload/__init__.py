"""
Resumable upload module.

Splits a source into aligned fragments and PUTs them in order against a
server-side upload session.
"""
from .coordinator import UploadCoordinator
from .models import (
    ContentRange,
    UploadSession,
    UploadOptions,
    UploadProgress,
    NameConflictBehavior,
    ProgressCallback,
    FRAGMENT_ALIGNMENT_BYTES,
    DEFAULT_FRAGMENT_SIZE,
)
from .progress import ProgressChannel, ProgressReporter
from .services import AsyncFileReader, BufferReader, FileValidator, FragmentUploader, open_source
from .strategies import AlignedFragmentStrategy, BaseChunkingStrategy

__all__ = [
    'UploadCoordinator',
    'ContentRange',
    'UploadSession',
    'UploadOptions',
    'UploadProgress',
    'NameConflictBehavior',
    'ProgressCallback',
    'FRAGMENT_ALIGNMENT_BYTES',
    'DEFAULT_FRAGMENT_SIZE',
    'ProgressChannel',
    'ProgressReporter',
    'AsyncFileReader',
    'BufferReader',
    'FileValidator',
    'FragmentUploader',
    'open_source',
    'AlignedFragmentStrategy',
    'BaseChunkingStrategy',
]
