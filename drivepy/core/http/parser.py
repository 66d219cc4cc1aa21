"""
Raw HTTP text parser.

Decodes the textual HTTP messages carried inside multipart batch parts.
A line-oriented scan moves through three modes::

    FIRST_LINE -> HEADERS -> BODY

The body is everything after the blank line that ends the headers, kept
byte for byte.
"""
import io
from enum import Enum
from typing import List, Tuple, Union

from multidict import CIMultiDict

from ..exceptions import FormatError
from .response import StaticHttpResponse, ParsedHttpRequest, SERVICE_TEXT_ENCODING

HEADER_SEPARATOR = ': '


class ParserMode(Enum):
    FIRST_LINE = 1
    HEADERS = 2
    BODY = 3


def _strip_line_ending(line: str) -> str:
    return line.rstrip('\r\n')


def _scan(raw: Union[str, bytes]) -> Tuple[List[str], CIMultiDict, bytes]:
    """Split raw message text into first-line tokens, headers and body."""
    if isinstance(raw, bytes):
        try:
            text = raw.decode(SERVICE_TEXT_ENCODING)
        except UnicodeDecodeError as e:
            raise FormatError(f"HTTP message is not valid {SERVICE_TEXT_ENCODING}: {e}") from e
    else:
        text = raw

    mode = ParserMode.FIRST_LINE
    tokens: List[str] = []
    headers: CIMultiDict = CIMultiDict()
    body_lines: List[str] = []

    # newline='' keeps line endings untouched so the body round-trips exactly
    for line in io.StringIO(text, newline=''):
        if mode is ParserMode.FIRST_LINE:
            tokens = _strip_line_ending(line).split(' ')
            if len(tokens) < 3:
                raise FormatError("Text does not contain a proper HTTP first line")
            mode = ParserMode.HEADERS

        elif mode is ParserMode.HEADERS:
            content = _strip_line_ending(line)
            if not content:
                mode = ParserMode.BODY
                continue

            split = content.find(HEADER_SEPARATOR)
            if split < 1:
                raise FormatError(f"Invalid header definition: {content!r}")
            # Last write wins for duplicate names
            headers[content[:split]] = content[split + len(HEADER_SEPARATOR):]

        else:
            body_lines.append(line)

    if mode is ParserMode.FIRST_LINE:
        raise FormatError("Text does not contain a proper HTTP first line")

    return tokens, headers, ''.join(body_lines).encode(SERVICE_TEXT_ENCODING)


def parse_http_response(raw: Union[str, bytes]) -> StaticHttpResponse:
    """
    Parse a raw HTTP response into a structured response.

    Args:
        raw: Status line, headers, blank line and body

    Returns:
        StaticHttpResponse with the body materialized as bytes

    Raises:
        FormatError: If the status line has fewer than 3 tokens, the status
            code is not numeric, or a header lacks the ': ' separator
    """
    tokens, headers, body = _scan(raw)
    try:
        status_code = int(tokens[1])
    except ValueError:
        raise FormatError(f"Invalid HTTP status code: {tokens[1]!r}")

    return StaticHttpResponse(
        status_code=status_code,
        status_description=' '.join(tokens[2:]),
        headers=headers,
        body=body
    )


def parse_http_request(raw: Union[str, bytes]) -> ParsedHttpRequest:
    """
    Parse a raw HTTP request ("VERB URL VERSION", headers, body).

    Raises:
        FormatError: On a malformed request line or header
    """
    tokens, headers, body = _scan(raw)
    return ParsedHttpRequest(
        method=tokens[0],
        url=tokens[1],
        version=' '.join(tokens[2:]),
        headers=headers,
        body=body
    )
