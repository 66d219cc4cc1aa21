"""Error classification and service error chains."""
from .classifier import HttpResponseType, classify_status, is_success
from .error_chain import ErrorDetail, DriveError

__all__ = [
    'HttpResponseType',
    'classify_status',
    'is_success',
    'ErrorDetail',
    'DriveError',
]
