"""
Multipart message model and writer.

Wire layout::

    --<boundary>
    Content-Type: application/http
    Content-Transfer-Encoding: binary

    <body>
    --<boundary>
    ...
    --<boundary>--

The line break before each boundary line belongs to the boundary.
"""
from dataclasses import dataclass, field
from typing import Any, Dict, Iterator, List, Optional

from ..exceptions import FormatError
from ..http import StaticHttpResponse, SERVICE_TEXT_ENCODING, parse_http_response

CRLF = '\r\n'
DEFAULT_BOUNDARY = 'A100x'
CONTENT_TYPE_HTTP = 'application/http'
STREAM_CHUNK_SIZE = 64 * 1024


def _media_type(content_type: Optional[str]) -> str:
    return (content_type or '').split(';', 1)[0].strip().lower()


@dataclass
class MultipartContent:
    """
    One part of a multipart message.

    Attributes:
        content_type: Content-Type of the part
        text_content: Text body
        stream_content: Binary body (bytes or a readable binary file object),
            used instead of text_content when set
        content_id: Optional Content-ID
        transfer_encoding: Content-Transfer-Encoding
        headers: Other part headers
    """
    content_type: Optional[str] = None
    text_content: Optional[str] = None
    stream_content: Optional[Any] = None
    content_id: Optional[str] = None
    transfer_encoding: Optional[str] = 'binary'
    headers: Dict[str, str] = field(default_factory=dict)

    def add_header(self, name: str, value: str) -> None:
        """Set a header, routing well-known names to their fields."""
        lowered = name.lower()
        if lowered == 'content-type':
            self.content_type = value
        elif lowered == 'content-transfer-encoding':
            self.transfer_encoding = value
        elif lowered == 'content-id':
            self.content_id = value
        else:
            self.headers[name] = value

    def header_text(self) -> str:
        """Render part headers followed by the blank separator line."""
        lines = []
        if self.content_id:
            lines.append(f"Content-ID: {self.content_id}")
        if self.content_type:
            lines.append(f"Content-Type: {self.content_type}")
        if self.transfer_encoding:
            lines.append(f"Content-Transfer-Encoding: {self.transfer_encoding}")
        for name, value in self.headers.items():
            lines.append(f"{name}: {value}")
        return ''.join(line + CRLF for line in lines) + CRLF

    def iter_body(self) -> Iterator[bytes]:
        """Yield the part body as byte chunks."""
        if self.stream_content is not None:
            if isinstance(self.stream_content, (bytes, bytearray, memoryview)):
                yield bytes(self.stream_content)
                return
            while True:
                chunk = self.stream_content.read(STREAM_CHUNK_SIZE)
                if not chunk:
                    break
                yield chunk
        elif self.text_content is not None:
            yield self.text_content.encode(SERVICE_TEXT_ENCODING)

    def to_http_response(self) -> StaticHttpResponse:
        """
        Decode this part as an embedded HTTP response.

        Raises:
            FormatError: If the part is not application/http
        """
        if _media_type(self.content_type) != CONTENT_TYPE_HTTP:
            raise FormatError(
                f"Part content type {self.content_type!r} is not {CONTENT_TYPE_HTTP}"
            )
        return parse_http_response(self.text_content or '')


@dataclass
class MultipartBuilder:
    """
    Ordered collection of parts plus the boundary token.

    Example:
        >>> builder = MultipartBuilder(format='multipart/mixed')
        >>> builder.add_part(MultipartContent(content_type='text/plain', text_content='hi'))
        >>> builder.content_type
        'multipart/mixed; boundary="A100x"'
    """
    boundary: str = DEFAULT_BOUNDARY
    format: str = 'multipart/related'
    parts: List[MultipartContent] = field(default_factory=list)

    def __post_init__(self):
        if not self.boundary:
            raise ValueError("Boundary must not be empty")

    @property
    def content_type(self) -> str:
        """Content-Type header value of the whole message."""
        return f'{self.format}; boundary="{self.boundary}"'

    def add_part(self, part: MultipartContent) -> 'MultipartBuilder':
        self.parts.append(part)
        return self

    def iter_bytes(self) -> Iterator[bytes]:
        """Yield the encoded message in order."""
        delimiter = f"--{self.boundary}{CRLF}".encode(SERVICE_TEXT_ENCODING)
        for part in self.parts:
            yield delimiter
            yield part.header_text().encode(SERVICE_TEXT_ENCODING)
            yield from part.iter_body()
            yield CRLF.encode(SERVICE_TEXT_ENCODING)
        yield f"--{self.boundary}--{CRLF}".encode(SERVICE_TEXT_ENCODING)

    def to_bytes(self) -> bytes:
        """Encode the whole message."""
        return b''.join(self.iter_bytes())
