"""Batch requests: service commands and the multipart codec."""
from .command import ServiceCommand, ServiceResponse
from .multipart import (
    MultipartBuilder,
    MultipartContent,
    CONTENT_TYPE_HTTP,
    DEFAULT_BOUNDARY,
)
from .parser import MultipartParser, parse_content_type

__all__ = [
    'ServiceCommand',
    'ServiceResponse',
    'MultipartBuilder',
    'MultipartContent',
    'MultipartParser',
    'parse_content_type',
    'CONTENT_TYPE_HTTP',
    'DEFAULT_BOUNDARY',
]
