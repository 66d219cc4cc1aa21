"""
Authentication provider boundary.

Token acquisition and refresh live outside drivepy; the client only asks a
provider for the Authorization header value before each request.
"""
from typing import Protocol, Optional, runtime_checkable


@runtime_checkable
class AuthProvider(Protocol):
    """Supplies the Authorization header value."""

    async def authorization_header(self) -> Optional[str]:
        """
        Return the header value, refreshing the token first if needed.

        Returns:
            Header value (e.g. "bearer <token>") or None for anonymous calls
        """
        ...


class StaticTokenAuth:
    """Bearer token that never refreshes."""

    def __init__(self, access_token: str, scheme: str = 'bearer'):
        if not access_token:
            raise ValueError("Access token must not be empty")
        self._access_token = access_token
        self._scheme = scheme

    async def authorization_header(self) -> Optional[str]:
        return f"{self._scheme} {self._access_token}"
