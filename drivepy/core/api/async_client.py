"""
Async drive API client.

Authenticated request layer shared by the upload engine, the task monitor
and the batch endpoint.
"""
import json
import logging
from typing import Any, Dict, Optional

from .auth import AuthProvider
from .config import APIConfig
from .transport import AiohttpHttpFactory
from ..cancellation import CancellationToken
from ..errors import classify_status
from ..exceptions import (
    OperationCancelled,
    SerializationError,
    ServiceError,
    TransportError,
)
from ..http import HttpFactory, HttpRequest, HttpResponse, SERVICE_TEXT_ENCODING
from ..logging import get_logger
from ..results import ResultKind, decode_result

CONTENT_TYPE_JSON = 'application/json'


class AsyncAPIClient:
    """
    Asynchronous drive API client.

    Features:
    - Pluggable transport (aiohttp by default)
    - Authorization header from an AuthProvider on every request
    - 4xx/5xx responses converted to ServiceError with the service error chain
    - Transport failures wrapped in TransportError

    Example:
        >>> async with AsyncAPIClient(config, auth=StaticTokenAuth(token)) as client:
        ...     item = await client.request_result(client.url_for('/drive/root'), 'GET', ResultKind.ITEM)
    """

    def __init__(
        self,
        config: Optional[APIConfig] = None,
        auth: Optional[AuthProvider] = None,
        http_factory: Optional[HttpFactory] = None
    ):
        """
        Initialize async API client.

        Args:
            config: API configuration (uses defaults if not provided)
            auth: Authorization header provider
            http_factory: Transport; an AiohttpHttpFactory is created if omitted
        """
        self._config = config or APIConfig.default()
        self._auth = auth
        self._http = http_factory or AiohttpHttpFactory(self._config)
        self._closed = False

        self._logger = get_logger('drivepy.api')
        root_logger = logging.getLogger()
        if not root_logger.handlers:
            self._logger.setLevel(self._config.log_level)

    @property
    def config(self) -> APIConfig:
        """Get current configuration."""
        return self._config

    async def __aenter__(self) -> 'AsyncAPIClient':
        return self

    async def __aexit__(self, exc_type, exc_val, exc_tb):
        await self.close()

    async def close(self):
        """Close client and release resources."""
        if not self._closed:
            self._closed = True
            await self._http.close()

    def url_for(self, path: str) -> str:
        """Join a service path onto the configured root URL."""
        if path.startswith('http://') or path.startswith('https://'):
            return path
        if not path.startswith('/'):
            path = '/' + path
        return f"{self._config.root_url}{path}"

    async def create_request(self, url: str, method: str) -> HttpRequest:
        """
        Create a request with common headers applied.

        Args:
            url: Absolute request URL
            method: HTTP verb
        """
        if self._closed:
            raise TransportError("Client is closed")

        request = self._http.create_request(url, method)
        if self._auth is not None:
            header = await self._auth.authorization_header()
            if header:
                request.headers['Authorization'] = header
        request.headers['Accept'] = CONTENT_TYPE_JSON
        return request

    async def send(
        self,
        request: HttpRequest,
        cancel_token: Optional[CancellationToken] = None
    ) -> HttpResponse:
        """
        Send a request without classifying the response status.

        Raises:
            TransportError: If the transport fails
            OperationCancelled: If cancel_token is cancelled first
        """
        try:
            response = await request.get_response(cancel_token)
        except OperationCancelled:
            raise
        except Exception as e:
            # A body writer aborted by the token surfaces as a transport failure
            if cancel_token is not None and cancel_token.is_cancelled:
                raise OperationCancelled() from e
            if isinstance(e, TransportError):
                raise
            raise TransportError(f"{request.method} {request.url} failed: {e}") from e

        # Cancellation supersedes classification
        if cancel_token is not None:
            cancel_token.raise_if_cancelled()
        return response

    async def get_response(
        self,
        request: HttpRequest,
        cancel_token: Optional[CancellationToken] = None
    ) -> HttpResponse:
        """
        Send a request and raise for error-class statuses.

        Raises:
            ServiceError: For 4xx/5xx responses
            TransportError: If the transport fails
            OperationCancelled: If cancel_token is cancelled first
        """
        response = await self.send(request, cancel_token)
        if classify_status(response.status_code).is_error:
            raise await self.to_exception(response)
        return response

    async def to_exception(self, response: HttpResponse) -> ServiceError:
        """Build a ServiceError carrying the decoded error chain, if any."""
        body = await response.read()
        error = None
        if body:
            try:
                error = decode_result(ResultKind.ERROR, body)
            except SerializationError:
                self._logger.debug(f"Error response {response.status_code} has no error object")
        self._logger.warning(
            f"Service error {response.status_code}"
            + (f" ({error.code}): {error.message}" if error else "")
        )
        return ServiceError(response.status_code, error)

    async def read_result(self, response: HttpResponse, kind: ResultKind) -> Any:
        """Decode a response body as the given result kind."""
        return decode_result(kind, await response.read())

    def set_json_body(self, request: HttpRequest, obj: Any) -> None:
        """Serialize obj as the request's JSON body."""
        request.content_type = CONTENT_TYPE_JSON
        request.set_body(json.dumps(obj).encode(SERVICE_TEXT_ENCODING))

    async def request_result(
        self,
        url: str,
        method: str,
        kind: ResultKind,
        body: Optional[Any] = None,
        headers: Optional[Dict[str, str]] = None,
        cancel_token: Optional[CancellationToken] = None
    ) -> Any:
        """
        Perform a request and decode its body.

        Args:
            url: Absolute request URL
            method: HTTP verb
            kind: Expected result variant
            body: Optional object sent as JSON
            headers: Optional extra headers
            cancel_token: Optional cancellation token

        Returns:
            Decoded result model
        """
        request = await self.create_request(url, method)
        if headers:
            request.headers.update(headers)
        if body is not None:
            self.set_json_body(request, body)
        response = await self.get_response(request, cancel_token)
        return await self.read_result(response, kind)
