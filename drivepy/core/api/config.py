"""
Client configuration.

Dataclasses describing how drivepy reaches the service: root URL, TLS,
proxy, timeouts, connection pool and the polling schedule for async jobs.
"""
import logging
import os
import ssl
from dataclasses import dataclass, field
from typing import Any, Dict, Optional, Union

import aiohttp

ROOT_URL_ENV_VAR = 'DRIVEPY_ROOT_URL'
DEFAULT_ROOT_URL = 'https://api.onedrive.com/v1.0'


@dataclass
class ProxyConfig:
    """HTTP(S) proxy with optional basic credentials."""
    url: str
    username: Optional[str] = None
    password: Optional[str] = None

    def request_kwargs(self) -> Dict[str, Any]:
        """Per-request aiohttp proxy arguments."""
        kwargs: Dict[str, Any] = {'proxy': self.url}
        if self.username:
            kwargs['proxy_auth'] = aiohttp.BasicAuth(self.username, self.password or '')
        return kwargs


@dataclass
class SSLConfig:
    """TLS settings. verify=False turns certificate checks off entirely."""
    verify: bool = True
    ca_bundle: Optional[str] = None
    client_cert: Optional[str] = None
    client_key: Optional[str] = None

    def build(self) -> Union[ssl.SSLContext, bool]:
        """Value for the connector's ssl argument."""
        if not self.verify:
            return False
        context = ssl.create_default_context(cafile=self.ca_bundle)
        if self.client_cert:
            context.load_cert_chain(self.client_cert, keyfile=self.client_key)
        return context


@dataclass
class TimeoutConfig:
    """
    Timeouts in seconds.

    total bounds a whole exchange, including a full fragment PUT.
    """
    total: float = 600.0
    connect: float = 30.0
    read: float = 120.0

    def build(self) -> aiohttp.ClientTimeout:
        return aiohttp.ClientTimeout(total=self.total, connect=self.connect, sock_read=self.read)


@dataclass
class PollConfig:
    """
    Schedule for refreshing a long-running operation.

    The wait before poll n is base_delay * exponential_base ** n seconds,
    capped at max_delay. max_polls=None polls until the job ends.
    """
    base_delay: float = 1.0
    max_delay: float = 30.0
    exponential_base: float = 1.5
    max_polls: Optional[int] = None

    def __post_init__(self):
        if self.base_delay < 0 or self.max_delay < 0:
            raise ValueError("Poll delays must not be negative")
        if self.exponential_base < 1:
            raise ValueError("exponential_base must be at least 1")
        if self.max_polls is not None and self.max_polls <= 0:
            raise ValueError("max_polls must be positive")

    def calculate_delay(self, attempt: int) -> float:
        return min(self.max_delay, self.base_delay * self.exponential_base ** attempt)


@dataclass
class APIConfig:
    """
    Everything AsyncAPIClient and its transport need to reach the service.

    Example:
        >>> config = APIConfig(root_url='https://graph.example.test/v1.0', proxy=ProxyConfig('http://proxy:3128'))
    """
    root_url: str = DEFAULT_ROOT_URL
    user_agent: str = 'drivepy/1.0.0'
    extra_headers: Dict[str, str] = field(default_factory=dict)

    ssl: SSLConfig = field(default_factory=SSLConfig)
    proxy: Optional[ProxyConfig] = None
    timeout: TimeoutConfig = field(default_factory=TimeoutConfig)
    poll: PollConfig = field(default_factory=PollConfig)

    max_connections: int = 100
    max_connections_per_host: int = 10

    # Applied to drivepy.api when the application has not configured logging
    log_level: int = logging.INFO

    def __post_init__(self):
        self.root_url = self.root_url.rstrip('/')
        if not self.root_url.startswith(('http://', 'https://')):
            raise ValueError(f"Root URL must be absolute: {self.root_url!r}")
        if self.max_connections <= 0 or self.max_connections_per_host <= 0:
            raise ValueError("Connection limits must be positive")

    @classmethod
    def default(cls) -> 'APIConfig':
        return cls()

    @classmethod
    def from_env(cls, **overrides) -> 'APIConfig':
        """Build a configuration, taking the root URL from DRIVEPY_ROOT_URL if set."""
        root_url = os.environ.get(ROOT_URL_ENV_VAR)
        if root_url and 'root_url' not in overrides:
            overrides['root_url'] = root_url
        return cls(**overrides)

    def connector(self) -> aiohttp.TCPConnector:
        """Create the pooled connector. Must be called inside a running loop."""
        return aiohttp.TCPConnector(
            limit=self.max_connections,
            limit_per_host=self.max_connections_per_host,
            ssl=self.ssl.build()
        )

    def session_kwargs(self) -> Dict[str, Any]:
        """Keyword arguments for aiohttp.ClientSession, except the connector."""
        return {
            'headers': {'User-Agent': self.user_agent, **self.extra_headers},
            'timeout': self.timeout.build(),
        }

    def proxy_kwargs(self) -> Dict[str, Any]:
        """Keyword arguments added to every request."""
        return self.proxy.request_kwargs() if self.proxy is not None else {}
