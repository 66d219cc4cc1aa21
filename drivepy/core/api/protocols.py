"""
Protocol definitions for components that talk to the service.

The upload engine and the task monitor depend on this interface rather than
on AsyncAPIClient directly, so tests can substitute either side.
"""
from typing import Protocol, Optional, Any

from ..http import HttpRequest, HttpResponse


class ApiClientProtocol(Protocol):
    """Protocol for the authenticated request layer."""

    async def create_request(self, url: str, method: str) -> HttpRequest:
        """Create a request with common headers applied."""
        ...

    async def get_response(
        self,
        request: HttpRequest,
        cancel_token: Optional[Any] = None
    ) -> HttpResponse:
        """Send request; raise ServiceError for 4xx/5xx responses."""
        ...

    async def send(
        self,
        request: HttpRequest,
        cancel_token: Optional[Any] = None
    ) -> HttpResponse:
        """Send request without classifying the status."""
        ...

    async def to_exception(self, response: HttpResponse) -> Exception:
        """Build a ServiceError from an error response."""
        ...
