"""In-memory HTTP response and request values."""
import io
import json
from dataclasses import dataclass, field
from typing import Any, Optional

from multidict import CIMultiDict

SERVICE_TEXT_ENCODING = 'utf-8'


@dataclass
class StaticHttpResponse:
    """
    A fully materialized HTTP response.

    Produced by the aiohttp transport (body read eagerly) and by the raw
    HTTP parser for responses embedded in batch parts.
    """
    status_code: int
    status_description: str = ''
    headers: CIMultiDict = field(default_factory=CIMultiDict)
    body: bytes = b''
    url: Optional[str] = None

    @property
    def content_type(self) -> Optional[str]:
        """Value of the Content-Type header, if any."""
        return self.headers.get('Content-Type')

    @property
    def location(self) -> Optional[str]:
        """Value of the Location header, if any."""
        return self.headers.get('Location')

    async def read(self) -> bytes:
        """Return the full response body."""
        return self.body

    def stream(self) -> io.BytesIO:
        """Return the body as a readable byte stream."""
        return io.BytesIO(self.body)

    def text(self) -> str:
        """Decode the body as service text."""
        return self.body.decode(SERVICE_TEXT_ENCODING)

    def json(self) -> Any:
        """Decode the body as JSON."""
        return json.loads(self.text())


@dataclass
class ParsedHttpRequest:
    """An HTTP request decoded from raw text."""
    method: str
    url: str
    version: str
    headers: CIMultiDict = field(default_factory=CIMultiDict)
    body: bytes = b''

    @property
    def content_type(self) -> Optional[str]:
        """Value of the Content-Type header, if any."""
        return self.headers.get('Content-Type')

    def text(self) -> str:
        """Decode the body as service text."""
        return self.body.decode(SERVICE_TEXT_ENCODING)
