"""
Multipart message parser.

Scans a multipart body line by line:

- a line starting with ``--<boundary>`` ends the current part and starts a
  new one (``--<boundary>--`` ends the message);
- header lines (``Name: Value``) fill the part until an empty line;
- every following line is body, kept verbatim.
"""
import io
from typing import List, Optional, Tuple, Union

from .multipart import MultipartBuilder, MultipartContent
from ..exceptions import FormatError
from ..http import SERVICE_TEXT_ENCODING
from ..logging import get_logger

HEADER_SEPARATOR = ': '

logger = get_logger('drivepy.batch')


def parse_content_type(content_type: str) -> Tuple[str, str]:
    """
    Split a multipart Content-Type into format and boundary.

    Example:
        >>> parse_content_type('multipart/mixed; boundary=batchresponse_0282')
        ('multipart/mixed', 'batchresponse_0282')

    Raises:
        FormatError: If no boundary parameter is present
    """
    components = [c.strip() for c in (content_type or '').split(';')]
    media_format = components[0]
    boundary = None
    for component in components[1:]:
        name, _, value = component.partition('=')
        if name.strip().lower() == 'boundary':
            boundary = value.strip().strip('"')

    if not boundary:
        raise FormatError(f"Content type has no boundary: {content_type!r}")
    return media_format, boundary


def _strip_line_ending(line: str) -> str:
    return line.rstrip('\r\n')


def _decode(data: bytes) -> str:
    try:
        return data.decode(SERVICE_TEXT_ENCODING)
    except UnicodeDecodeError as e:
        raise FormatError(f"Multipart body is not valid {SERVICE_TEXT_ENCODING}: {e}") from e


class MultipartParser:
    """
    Incremental multipart parser.

    Feed raw lines (with their endings) and call finish(), or use the
    parse()/parse_stream() helpers.
    """

    def __init__(self, content_type: str):
        media_format, boundary = parse_content_type(content_type)
        self._builder = MultipartBuilder(boundary=boundary, format=media_format)
        self._delimiter = f"--{boundary}"
        self._terminator = f"--{boundary}--"
        self._current: Optional[MultipartContent] = None
        self._body_lines: List[str] = []
        self._reading_headers = True
        self._done = False

    def _end_part(self) -> None:
        if self._current is None:
            return
        text = ''.join(self._body_lines)
        # The line break before the boundary is part of the delimiter
        if text.endswith('\r\n'):
            text = text[:-2]
        elif text.endswith('\n') or text.endswith('\r'):
            text = text[:-1]
        self._current.text_content = text
        self._builder.parts.append(self._current)
        self._current = None
        self._body_lines = []

    def feed_line(self, line: str) -> None:
        """Process one line, including its line ending."""
        if self._done:
            return

        content = _strip_line_ending(line)
        if content.startswith(self._delimiter):
            self._end_part()
            if content.startswith(self._terminator):
                self._done = True
                return
            self._current = MultipartContent(transfer_encoding=None)
            self._reading_headers = True
            return

        if self._current is None:
            # Preamble before the first boundary
            return

        if self._reading_headers:
            if not content:
                self._reading_headers = False
                return
            split = content.find(HEADER_SEPARATOR)
            if split < 1:
                raise FormatError(f"Invalid part header: {content!r}")
            self._current.add_header(content[:split], content[split + len(HEADER_SEPARATOR):])
        else:
            self._body_lines.append(line)

    def finish(self) -> MultipartBuilder:
        """Close any open part and return the parsed message."""
        if not self._done and self._current is not None:
            logger.warning("Multipart body ended without a closing boundary")
        self._end_part()
        self._done = True
        logger.debug(f"Parsed multipart message with {len(self._builder.parts)} parts")
        return self._builder

    @classmethod
    def parse(cls, content_type: str, data: Union[bytes, str]) -> MultipartBuilder:
        """
        Parse a complete multipart body.

        Args:
            content_type: Content-Type header carrying the boundary
            data: Message body

        Returns:
            MultipartBuilder holding the parts in order
        """
        parser = cls(content_type)
        text = _decode(data) if isinstance(data, bytes) else data
        for line in io.StringIO(text, newline=''):
            parser.feed_line(line)
        return parser.finish()

    @classmethod
    async def parse_stream(cls, content_type: str, reader) -> MultipartBuilder:
        """
        Parse a multipart body from an async line reader.

        Args:
            content_type: Content-Type header carrying the boundary
            reader: Object with ``async readline() -> bytes`` returning b''
                at end of stream (e.g. aiohttp.StreamReader)
        """
        parser = cls(content_type)
        while True:
            raw = await reader.readline()
            if not raw:
                break
            parser.feed_line(_decode(raw))
        return parser.finish()
