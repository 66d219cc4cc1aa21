"""
Protocol definitions for the HTTP transport boundary.

The core never opens sockets itself; it talks to these interfaces. The
aiohttp implementation lives in drivepy.core.api.transport.
"""
from typing import Protocol, Optional, Union, AsyncIterable, Any, runtime_checkable
from multidict import CIMultiDict

RequestBody = Union[bytes, AsyncIterable[bytes]]


@runtime_checkable
class HttpResponse(Protocol):
    """A completed HTTP response."""

    status_code: int
    status_description: str
    headers: CIMultiDict

    @property
    def content_type(self) -> Optional[str]:
        """Value of the Content-Type header, if any."""
        ...

    async def read(self) -> bytes:
        """Return the full response body."""
        ...


@runtime_checkable
class HttpRequest(Protocol):
    """A request being composed."""

    url: str
    method: str
    headers: CIMultiDict
    content_type: Optional[str]

    def set_body(self, body: RequestBody) -> None:
        """
        Set the request body.

        Args:
            body: Bytes, or an async iterable of byte slices written in order
        """
        ...

    async def get_response(self, cancel_token: Optional[Any] = None) -> HttpResponse:
        """
        Send the request and wait for the response.

        Args:
            cancel_token: Optional CancellationToken observed while waiting

        Raises:
            TransportError: On connection-level failures
            OperationCancelled: If the token is cancelled first
        """
        ...


@runtime_checkable
class HttpFactory(Protocol):
    """Creates requests bound to a transport."""

    def create_request(self, url: str, method: str) -> HttpRequest:
        """Create a request for url with the given verb."""
        ...

    async def close(self) -> None:
        """Release transport resources."""
        ...
