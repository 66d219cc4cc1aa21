"""Service commands and their responses inside a batch."""
from dataclasses import dataclass, field
from typing import Any, Dict, Optional

from ..errors import DriveError
from ..exceptions import SerializationError, ServiceError
from ..http import StaticHttpResponse, SERVICE_TEXT_ENCODING
from ..results import ResultKind, decode_result

CRLF = '\r\n'
HTTP_VERSION = 'HTTP/1.1'


@dataclass(frozen=True)
class ServiceCommand:
    """
    Description of one request, suitable for batching.

    Attributes:
        url: Absolute, already-encoded target URL
        verb: HTTP verb
        headers: Extra request headers
        content_type: Content-Type of body
        body: Body text
        result_kind: Variant expected in the response

    Example:
        >>> cmd = ServiceCommand(url='https://api.onedrive.com/v1.0/drive/root', result_kind=ResultKind.ITEM)
        >>> cmd.raw_http_request().splitlines()[0]
        'GET https://api.onedrive.com/v1.0/drive/root HTTP/1.1'
    """
    url: str
    verb: str = 'GET'
    headers: Dict[str, str] = field(default_factory=dict)
    content_type: Optional[str] = None
    body: Optional[str] = None
    result_kind: ResultKind = ResultKind.NONE

    def raw_http_request(self) -> str:
        """Render the command as raw HTTP/1.1 request text."""
        lines = [f"{self.verb} {self.url} {HTTP_VERSION}"]

        if self.content_type is not None:
            lines.append(f"Content-Type: {self.content_type}")

        for name, value in self.headers.items():
            lines.append(f"{name}: {value}")

        if self.body is not None:
            content_length = len(self.body.encode(SERVICE_TEXT_ENCODING))
            lines.append(f"Content-Length: {content_length}")

        return CRLF.join(lines) + CRLF + CRLF + (self.body or '')


@dataclass
class ServiceResponse:
    """
    Response to one command of a batch.

    Attributes:
        http_response: Parsed embedded HTTP response
        command: Command this response answers
    """
    http_response: StaticHttpResponse
    command: ServiceCommand

    @property
    def status_code(self) -> int:
        return self.http_response.status_code

    @property
    def was_error(self) -> bool:
        """Returns True for 4xx/5xx responses."""
        return self.http_response.status_code >= 400

    def error(self) -> Optional[DriveError]:
        """Decode the service error chain, if the body has one."""
        try:
            return decode_result(ResultKind.ERROR, self.http_response.body)
        except SerializationError:
            return None

    def to_exception(self) -> ServiceError:
        return ServiceError(self.status_code, self.error())

    def data_model(self) -> Any:
        """
        Decode the body as the command's result kind.

        Raises:
            ServiceError: If the response is an error
            SerializationError: If the body does not match the expected kind
        """
        if self.was_error:
            raise self.to_exception()
        return decode_result(self.command.result_kind, self.http_response.body)
