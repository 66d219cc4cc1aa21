"""
aiohttp transport.

Implements the HttpFactory/HttpRequest boundary on top of a shared
aiohttp.ClientSession. Redirects are never followed so that callers can see
303/302 responses and their Location headers.
"""
import asyncio
import time
from typing import Any, Dict, Optional

import aiohttp
from multidict import CIMultiDict

from .config import APIConfig
from ..cancellation import CancellationToken
from ..exceptions import TransportError
from ..http import RequestBody, StaticHttpResponse
from ..logging import get_logger


class AiohttpRequest:
    """A request sent through an AiohttpHttpFactory."""

    def __init__(self, factory: 'AiohttpHttpFactory', url: str, method: str):
        self._factory = factory
        self.url = url
        self.method = method.upper()
        self.headers: CIMultiDict = CIMultiDict()
        self.content_type: Optional[str] = None
        self._body: Optional[RequestBody] = None

    def set_body(self, body: RequestBody) -> None:
        self._body = body

    def _build_headers(self) -> CIMultiDict:
        headers = CIMultiDict(self.headers)
        if self.content_type:
            headers['Content-Type'] = self.content_type
        return headers

    async def _exchange(self) -> StaticHttpResponse:
        session = await self._factory.get_session()
        async with session.request(
            self.method,
            self.url,
            headers=self._build_headers(),
            data=self._body,
            allow_redirects=False,
            **self._factory.proxy_kwargs
        ) as response:
            body = await response.read()
            return StaticHttpResponse(
                status_code=response.status,
                status_description=response.reason or '',
                headers=CIMultiDict(response.headers),
                body=body,
                url=str(response.url)
            )

    async def get_response(self, cancel_token: Optional[CancellationToken] = None) -> StaticHttpResponse:
        """
        Send the request and read the whole response.

        Raises:
            TransportError: On connection, I/O or timeout failures
            OperationCancelled: If cancel_token is cancelled first
        """
        logger = self._factory.logger
        start = time.time()
        logger.debug(f"{self.method} {self.url}")
        try:
            if cancel_token is not None:
                response = await cancel_token.guard(self._exchange())
            else:
                response = await self._exchange()
        except asyncio.TimeoutError as e:
            elapsed = time.time() - start
            logger.error(f"{self.method} {self.url} timed out after {elapsed:.2f}s")
            raise TransportError(f"{self.method} {self.url} timed out") from e
        except aiohttp.ClientError as e:
            logger.error(f"{self.method} {self.url} failed: {e}")
            raise TransportError(f"{self.method} {self.url} failed: {e}") from e

        elapsed = time.time() - start
        logger.debug(f"{self.method} {self.url} -> {response.status_code} in {elapsed:.2f}s")
        return response


class AiohttpHttpFactory:
    """
    Creates requests sharing one aiohttp session.

    Reuses the HTTP session for all requests (critical for fragment uploads).
    """

    def __init__(
        self,
        config: Optional[APIConfig] = None,
        session: Optional[aiohttp.ClientSession] = None
    ):
        """
        Initialize the factory.

        Args:
            config: API configuration (uses defaults if not provided)
            session: Optional shared session; not closed by this factory
        """
        self._config = config or APIConfig.default()
        self._session = session
        self._owns_session = False
        self.logger = get_logger('drivepy.api.http')

    @property
    def proxy_kwargs(self) -> Dict[str, Any]:
        return self._config.proxy_kwargs()

    async def get_session(self) -> aiohttp.ClientSession:
        """Get or create the HTTP session."""
        if self._session is None or self._session.closed:
            self._session = aiohttp.ClientSession(
                connector=self._config.connector(),
                **self._config.session_kwargs()
            )
            self._owns_session = True
        return self._session

    def create_request(self, url: str, method: str) -> AiohttpRequest:
        return AiohttpRequest(self, url, method)

    async def close(self) -> None:
        """Close session if we own it."""
        if self._owns_session and self._session and not self._session.closed:
            await self._session.close()
        self._session = None
        self._owns_session = False
