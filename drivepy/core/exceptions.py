"""
Custom exceptions for drive operations.

This module defines the exception taxonomy surfaced to callers of drivepy.
"""
from typing import Optional, Any


class DriveException(Exception):
    """Base exception for all drivepy errors."""

    def __init__(self, message: str, error_code: Optional[str] = None) -> None:
        """
        Initialize the exception.

        Args:
            message: Error message
            error_code: Service error code (if available)
        """
        self.error_code = error_code
        super().__init__(message)


class TransportError(DriveException):
    """Raised when the connection or I/O layer fails.

    The underlying cause is chained via ``__cause__``.
    """
    pass


class FormatError(DriveException):
    """Raised for malformed raw HTTP text or multipart framing."""
    pass


class SerializationError(DriveException):
    """Exception raised when a response body cannot be decoded."""

    def __init__(self, message: str, raw_text: Any = None) -> None:
        """
        Initialize the exception.

        Args:
            message: Error message
            raw_text: Raw response text that failed to decode
        """
        self.raw_text = raw_text
        super().__init__(message)


class OperationCancelled(DriveException):
    """Cooperative cancellation signal, not a fault."""

    def __init__(self, message: str = "Operation was cancelled") -> None:
        super().__init__(message)


class ServiceError(DriveException):
    """
    Exception raised for 4xx/5xx responses from the service.

    Carries the service's nested error chain.
    """

    def __init__(
        self,
        status_code: int,
        error: Optional[Any] = None,
        message: Optional[str] = None
    ) -> None:
        """
        Initialize the exception.

        Args:
            status_code: HTTP status code of the failed response
            error: DriveError describing the service error chain
            message: Optional override for the exception message
        """
        self.status_code = status_code
        self.error = error
        code = error.code if error is not None else None
        if message is None:
            detail = error.message if error is not None else None
            message = f"Service returned HTTP {status_code}"
            if code:
                message += f" ({code})"
            if detail:
                message += f": {detail}"
        super().__init__(message, code)

    @property
    def code(self) -> Optional[str]:
        """Top-level service error code."""
        return self.error_code

    def is_error_code(self, code: str) -> bool:
        """Check whether the error chain contains the given code."""
        if self.error is None:
            return False
        return self.error.is_error_code(code)
