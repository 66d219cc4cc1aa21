"""Models for server-side long-running operations."""
from dataclasses import dataclass
from enum import Enum
from typing import Any, Dict, Optional


class AsyncJobStatus(Enum):
    """State of a long-running operation."""
    WAITING = 'waiting'
    IN_PROGRESS = 'inProgress'
    COMPLETE = 'completed'
    FAILED = 'failed'

    @classmethod
    def parse(cls, value: Optional[str]) -> 'AsyncJobStatus':
        """Map a service status string onto a member (case-insensitive)."""
        normalized = (value or '').strip().lower()
        try:
            return _STATUS_ALIASES[normalized]
        except KeyError:
            raise ValueError(f"Unknown async job status: {value!r}")

    @property
    def is_terminal(self) -> bool:
        return self in (AsyncJobStatus.COMPLETE, AsyncJobStatus.FAILED)


_STATUS_ALIASES = {
    'notstarted': AsyncJobStatus.WAITING,
    'waiting': AsyncJobStatus.WAITING,
    'inprogress': AsyncJobStatus.IN_PROGRESS,
    'updating': AsyncJobStatus.IN_PROGRESS,
    'complete': AsyncJobStatus.COMPLETE,
    'completed': AsyncJobStatus.COMPLETE,
    'failed': AsyncJobStatus.FAILED,
}


@dataclass
class AsyncTaskStatus:
    """
    Status body returned when polling an operation.

    Attributes:
        operation: Operation name reported by the service ("ItemCopy")
        percent_complete: Progress from 0 to 100
        status: Current job state
    """
    operation: Optional[str] = None
    percent_complete: float = 0.0
    status: AsyncJobStatus = AsyncJobStatus.WAITING

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> 'AsyncTaskStatus':
        """Create from the status JSON."""
        if 'status' not in data:
            raise ValueError("Async status body has no 'status'")
        percent = data.get('percentageComplete', data.get('percentComplete', 0.0))
        return cls(
            operation=data.get('operation'),
            percent_complete=float(percent or 0.0),
            status=AsyncJobStatus.parse(data.get('status'))
        )

    def to_dict(self) -> Dict[str, Any]:
        """Convert to service JSON format."""
        return {
            'operation': self.operation,
            'percentageComplete': self.percent_complete,
            'status': self.status.value,
        }


@dataclass
class AsyncTask:
    """
    A long-running operation being monitored.

    Attributes:
        status_uri: URL polled for status
        request_uri: URL of the request that started the operation
        status: Latest decoded status (None until the first status body)
        finished_item: Resulting item, set once on completion
    """
    status_uri: str
    request_uri: Optional[str] = None
    status: Optional[AsyncTaskStatus] = None
    finished_item: Optional[Any] = None

    @property
    def is_terminal(self) -> bool:
        """Returns True once the job completed or failed."""
        return self.status is not None and self.status.status.is_terminal

    @property
    def percent_complete(self) -> float:
        return self.status.percent_complete if self.status else 0.0
