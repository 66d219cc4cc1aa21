"""HTTP status classification."""
from enum import Enum


class HttpResponseType(Enum):
    """Severity class of an HTTP status code."""

    INFORMATIONAL = 'informational'
    SUCCESS = 'success'
    REDIRECTION = 'redirection'
    CLIENT_ERROR = 'client_error'
    SERVER_ERROR = 'server_error'

    @property
    def is_error(self) -> bool:
        """Returns True for client and server errors."""
        return self in (HttpResponseType.CLIENT_ERROR, HttpResponseType.SERVER_ERROR)


def classify_status(status_code: int) -> HttpResponseType:
    """
    Map an HTTP status code to its response class.

    Anything outside 100-499 is treated as a server error.
    """
    if 100 <= status_code < 200:
        return HttpResponseType.INFORMATIONAL
    elif 200 <= status_code < 300:
        return HttpResponseType.SUCCESS
    elif 300 <= status_code < 400:
        return HttpResponseType.REDIRECTION
    elif 400 <= status_code < 500:
        return HttpResponseType.CLIENT_ERROR
    return HttpResponseType.SERVER_ERROR


def is_success(status_code: int) -> bool:
    """Returns True for 2xx status codes."""
    return classify_status(status_code) is HttpResponseType.SUCCESS
