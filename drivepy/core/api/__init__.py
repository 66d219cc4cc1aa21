"""Drive API module: configuration, transport and the authenticated client."""
from .config import APIConfig, ProxyConfig, SSLConfig, TimeoutConfig, PollConfig
from .auth import AuthProvider, StaticTokenAuth
from .transport import AiohttpHttpFactory, AiohttpRequest
from .async_client import AsyncAPIClient, CONTENT_TYPE_JSON
from .protocols import ApiClientProtocol

__all__ = [
    # Client
    'AsyncAPIClient',
    'ApiClientProtocol',
    'CONTENT_TYPE_JSON',

    # Auth
    'AuthProvider',
    'StaticTokenAuth',

    # Transport
    'AiohttpHttpFactory',
    'AiohttpRequest',

    # Configuration
    'APIConfig',
    'ProxyConfig',
    'SSLConfig',
    'TimeoutConfig',
    'PollConfig',
]
