"""
drivepy - Async Python client engine for OneDrive-style drive services.

Usage:
    >>> from drivepy import DriveClient, StaticTokenAuth, UploadOptions
    >>>
    >>> async with DriveClient(auth=StaticTokenAuth(token)) as drive:
    ...     item = await drive.upload_large_file(
    ...         drive.create_session_url('backup.tar'), 'backup.tar', UploadOptions()
    ...     )
"""
from .client import DriveClient

# Configuration and transport
from .core.api import (
    APIConfig,
    ProxyConfig,
    SSLConfig,
    TimeoutConfig,
    PollConfig,
    AsyncAPIClient,
    AuthProvider,
    StaticTokenAuth,
)

from .core.cancellation import CancellationToken
from .core.exceptions import (
    DriveException,
    TransportError,
    ServiceError,
    FormatError,
    SerializationError,
    OperationCancelled,
)
from .core.errors import DriveError, ErrorDetail, HttpResponseType, classify_status
from .core.results import DriveItem, ResultKind
from .core.upload import (
    ContentRange,
    UploadSession,
    UploadOptions,
    UploadProgress,
    NameConflictBehavior,
    ProgressChannel,
)
from .core.tasks import AsyncJobStatus, AsyncTaskStatus, AsyncTask
from .core.batch import ServiceCommand, ServiceResponse, MultipartBuilder, MultipartContent
from .core.logging import setup_logging

__version__ = '1.0.0'


__all__ = [
    # Main client
    'DriveClient',

    # Configuration
    'APIConfig',
    'ProxyConfig',
    'SSLConfig',
    'TimeoutConfig',
    'PollConfig',
    'AsyncAPIClient',
    'AuthProvider',
    'StaticTokenAuth',

    # Cancellation
    'CancellationToken',

    # Exceptions
    'DriveException',
    'TransportError',
    'ServiceError',
    'FormatError',
    'SerializationError',
    'OperationCancelled',

    # Errors
    'DriveError',
    'ErrorDetail',
    'HttpResponseType',
    'classify_status',

    # Results
    'DriveItem',
    'ResultKind',

    # Upload
    'ContentRange',
    'UploadSession',
    'UploadOptions',
    'UploadProgress',
    'NameConflictBehavior',
    'ProgressChannel',

    # Async operations
    'AsyncJobStatus',
    'AsyncTaskStatus',
    'AsyncTask',

    # Batch
    'ServiceCommand',
    'ServiceResponse',
    'MultipartBuilder',
    'MultipartContent',

    # Logging
    'setup_logging',
]
