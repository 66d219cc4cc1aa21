"""
Data models for the upload module.

Uses dataclasses for type-safe data structures.
"""
import re
from dataclasses import dataclass, field
from datetime import datetime
from enum import Enum
from typing import Any, Callable, Dict, List, Optional, Tuple

KIB = 1024

# Fragments must be a multiple of 320 KiB unless the caller overrides it
FRAGMENT_ALIGNMENT_BYTES = 320 * KIB
DEFAULT_FRAGMENT_SIZE = 32 * FRAGMENT_ALIGNMENT_BYTES  # 10 MiB

ProgressCallback = Callable[[int, int, int], None]

_FRACTION = re.compile(r'\.(\d+)')


def parse_timestamp(value: Optional[str]) -> Optional[datetime]:
    """Parse an ISO 8601 service timestamp ("2015-01-29T09:21:55.523Z")."""
    if not value:
        return None
    normalized = _FRACTION.sub(lambda m: '.' + m.group(1)[:6].ljust(6, '0'), value.strip())
    if normalized.endswith('Z'):
        normalized = normalized[:-1] + '+00:00'
    try:
        return datetime.fromisoformat(normalized)
    except ValueError:
        return None


@dataclass(frozen=True)
class ContentRange:
    """
    Byte range of one fragment.

    Attributes:
        first_byte_index: Offset of the first byte
        last_byte_index: Offset of the last byte (inclusive)
        total_length_bytes: Length of the whole upload

    Example:
        >>> ContentRange(0, 4194303, 10485760).to_header()
        'bytes 0-4194303/10485760'
    """
    first_byte_index: int
    last_byte_index: int
    total_length_bytes: int

    def __post_init__(self):
        if not (0 <= self.first_byte_index <= self.last_byte_index < self.total_length_bytes):
            raise ValueError(
                f"Invalid content range {self.first_byte_index}-{self.last_byte_index}"
                f"/{self.total_length_bytes}"
            )

    @property
    def bytes_in_range(self) -> int:
        """Number of bytes covered by the range."""
        return self.last_byte_index - self.first_byte_index + 1

    def to_header(self) -> str:
        """Render as a Content-Range header value."""
        return f"bytes {self.first_byte_index}-{self.last_byte_index}/{self.total_length_bytes}"

    def __str__(self) -> str:
        return self.to_header()


@dataclass
class UploadSession:
    """
    Server-side upload session state.

    Attributes:
        upload_url: Endpoint receiving fragment PUTs (and the teardown DELETE)
        expiration: When the server will discard the session
        next_expected_ranges: Ranges the server still wants ("0-", "26-100")
        accepted_ranges: Inclusive (first, last) ranges acknowledged so far
    """
    upload_url: str
    expiration: Optional[datetime] = None
    next_expected_ranges: List[str] = field(default_factory=list)
    accepted_ranges: List[Tuple[int, int]] = field(default_factory=list)

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> 'UploadSession':
        """
        Create from the session JSON returned by the service.

        Fragment acknowledgements omit uploadUrl; it is left empty then.
        """
        return cls(
            upload_url=data.get('uploadUrl') or '',
            expiration=parse_timestamp(data.get('expirationDateTime')),
            next_expected_ranges=list(data.get('nextExpectedRanges') or [])
        )

    def to_dict(self) -> Dict[str, Any]:
        """Convert to service JSON format."""
        result: Dict[str, Any] = {'uploadUrl': self.upload_url}
        if self.expiration is not None:
            result['expirationDateTime'] = self.expiration.isoformat()
        if self.next_expected_ranges:
            result['nextExpectedRanges'] = list(self.next_expected_ranges)
        return result

    def record_accepted(self, content_range: ContentRange) -> None:
        """Record a fragment acknowledged by the server, merging adjacent ranges."""
        first, last = content_range.first_byte_index, content_range.last_byte_index
        if self.accepted_ranges and self.accepted_ranges[-1][1] + 1 == first:
            self.accepted_ranges[-1] = (self.accepted_ranges[-1][0], last)
        else:
            self.accepted_ranges.append((first, last))

    def update_from(self, other: 'UploadSession') -> None:
        """Refresh bookkeeping from a session body returned with a 202."""
        if other.expiration is not None:
            self.expiration = other.expiration
        self.next_expected_ranges = list(other.next_expected_ranges)

    @property
    def bytes_accepted(self) -> int:
        """Total bytes acknowledged by the server."""
        return sum(last - first + 1 for first, last in self.accepted_ranges)

    @property
    def is_expired(self) -> bool:
        """Returns True if the expiration time has passed."""
        if self.expiration is None:
            return False
        now = datetime.now(self.expiration.tzinfo)
        return now >= self.expiration


class NameConflictBehavior(Enum):
    """How the service resolves a name that already exists."""
    FAIL = 'fail'
    REPLACE = 'replace'
    RENAME = 'rename'


@dataclass
class UploadOptions:
    """
    Options for a fragmented upload.

    Attributes:
        fragment_size: Bytes per fragment PUT
        fragment_alignment: fragment_size must be a multiple of this
        progress_callback: Called as (percent, bytes_transferred, total_bytes)
        progress_channel: ProgressChannel that receives every progress event
            and is closed when the transfer ends
        cancel_token: CancellationToken observed at every suspension point
        allow_parallel_upload: Accepted for compatibility, fragments are
            always sent sequentially
        name_conflict: Conflict behaviour sent when creating the session
        if_match_etag: Optional etag for conditional replace
    """
    fragment_size: int = DEFAULT_FRAGMENT_SIZE
    fragment_alignment: int = FRAGMENT_ALIGNMENT_BYTES
    progress_callback: Optional[ProgressCallback] = None
    progress_channel: Optional[Any] = None
    cancel_token: Optional[Any] = None
    allow_parallel_upload: bool = False
    name_conflict: NameConflictBehavior = NameConflictBehavior.FAIL
    if_match_etag: Optional[str] = None

    def __post_init__(self):
        """Validate fragment sizing."""
        if self.fragment_alignment <= 0:
            raise ValueError("Fragment alignment must be positive")
        if self.fragment_size <= 0:
            raise ValueError("Fragment size must be positive")
        if self.fragment_size % self.fragment_alignment != 0:
            raise ValueError(
                f"Fragment size must be a multiple of {self.fragment_alignment} bytes"
            )
        if isinstance(self.name_conflict, str):
            self.name_conflict = NameConflictBehavior(self.name_conflict)

    def session_body(self) -> Dict[str, Any]:
        """Body for the create-session POST."""
        return {'item': {'@name.conflictBehavior': self.name_conflict.value}}

    def request_headers(self) -> Dict[str, str]:
        """Extra headers for the create-session POST."""
        if self.if_match_etag:
            return {'If-Match': self.if_match_etag}
        return {}


@dataclass
class UploadProgress:
    """
    Upload progress information.

    Attributes:
        bytes_transferred: Cumulative bytes written so far
        total_bytes: Length of the whole upload
        fragments_completed: Fragments acknowledged by the server
        total_fragments: Number of fragments
    """
    bytes_transferred: int = 0
    total_bytes: int = 0
    fragments_completed: int = 0
    total_fragments: int = 0

    @property
    def percent_complete(self) -> int:
        """Whole percent, never above 100."""
        if self.total_bytes <= 0:
            return 0
        return min(100, self.bytes_transferred * 100 // self.total_bytes)

    @property
    def is_complete(self) -> bool:
        """Returns True if every fragment was acknowledged."""
        return self.total_fragments > 0 and self.fragments_completed >= self.total_fragments
