"""
Service error chain.

The service reports failures as a nested structure::

    {"error": {"code": "...", "message": "...", "innererror": {"code": "..."}}}

Each level is decoded once into an immutable ErrorDetail node.
"""
from dataclasses import dataclass
from typing import Any, Dict, Iterator, Optional


@dataclass(frozen=True)
class ErrorDetail:
    """
    One node of the error chain.

    Attributes:
        code: Service error code
        message: Human readable message (may be empty)
        inner_error: Next, more specific node
    """
    code: Optional[str] = None
    message: Optional[str] = None
    inner_error: Optional['ErrorDetail'] = None

    @classmethod
    def from_dict(cls, data: Optional[Dict[str, Any]]) -> Optional['ErrorDetail']:
        """Build a chain from the service JSON (innermost node first)."""
        if not isinstance(data, dict):
            return None

        nodes = []
        current = data
        while isinstance(current, dict):
            nodes.append(current)
            current = current.get('innererror', current.get('innerError'))

        detail = None
        for node in reversed(nodes):
            detail = cls(
                code=node.get('code'),
                message=node.get('message'),
                inner_error=detail
            )
        return detail

    def __iter__(self) -> Iterator['ErrorDetail']:
        node = self
        while node is not None:
            yield node
            node = node.inner_error


@dataclass(frozen=True)
class DriveError:
    """Top-level error object owning the detail chain."""
    error: ErrorDetail

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> 'DriveError':
        """Create from the service error envelope."""
        detail = ErrorDetail.from_dict(data.get('error'))
        if detail is None:
            raise ValueError("Error envelope has no 'error' object")
        return cls(error=detail)

    @property
    def code(self) -> Optional[str]:
        """Top-level error code."""
        return self.error.code

    def innermost_detail(self) -> ErrorDetail:
        """Follow inner_error links to the last node."""
        detail = self.error
        while detail.inner_error is not None:
            detail = detail.inner_error
        return detail

    @property
    def message(self) -> Optional[str]:
        """
        Message of the deepest node that still has one.

        Walks inward only while the next node's message is non-empty.
        """
        detail = self.error
        while detail.inner_error is not None and detail.inner_error.message:
            detail = detail.inner_error
        return detail.message

    def is_error_code(self, expected_code: str) -> bool:
        """
        Check the chain for a code, case-insensitively.

        Every node that has an inner error is checked; the leaf's own code
        is not.
        """
        expected = expected_code.lower()
        detail = self.error
        while detail.inner_error is not None:
            if detail.code is not None and detail.code.lower() == expected:
                return True
            detail = detail.inner_error
        return False
