"""HTTP transport boundary and raw HTTP parsing."""
from .protocols import HttpFactory, HttpRequest, HttpResponse, RequestBody
from .response import StaticHttpResponse, ParsedHttpRequest, SERVICE_TEXT_ENCODING
from .parser import parse_http_response, parse_http_request

__all__ = [
    'HttpFactory',
    'HttpRequest',
    'HttpResponse',
    'RequestBody',
    'StaticHttpResponse',
    'ParsedHttpRequest',
    'SERVICE_TEXT_ENCODING',
    'parse_http_response',
    'parse_http_request',
]
