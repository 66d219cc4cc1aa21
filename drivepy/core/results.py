"""
Result variants decoded from service responses.

Instead of deserializing into an arbitrary type token, every call names one
ResultKind; a registry maps each kind to its decoder.
"""
import json
from dataclasses import dataclass, field
from enum import Enum
from functools import lru_cache
from typing import Any, Callable, Dict, Optional, Union

from .errors import DriveError
from .exceptions import SerializationError
from .http import SERVICE_TEXT_ENCODING


@dataclass
class DriveItem:
    """
    Minimal descriptor of a stored object.

    Attributes:
        id: Item identifier
        name: Item name
        size: Size in bytes
        etag: Entity tag
        raw: Full JSON returned by the service
    """
    id: Optional[str] = None
    name: Optional[str] = None
    size: Optional[int] = None
    etag: Optional[str] = None
    raw: Dict[str, Any] = field(default_factory=dict)

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> 'DriveItem':
        """Create from the item JSON."""
        size = data.get('size')
        return cls(
            id=data.get('id'),
            name=data.get('name'),
            size=int(size) if size is not None else None,
            etag=data.get('eTag', data.get('etag')),
            raw=dict(data)
        )


class ResultKind(Enum):
    """Closed set of response variants."""
    NONE = 'none'
    ITEM = 'item'
    UPLOAD_SESSION = 'upload_session'
    ASYNC_TASK_STATUS = 'async_task_status'
    ERROR = 'error'


@lru_cache(maxsize=None)
def decoder_registry() -> Dict[ResultKind, Callable[[Dict[str, Any]], Any]]:
    """Map each ResultKind to the callable building its model."""
    # Imported here: both packages import this module
    from .tasks.models import AsyncTaskStatus
    from .upload.models import UploadSession

    return {
        ResultKind.ITEM: DriveItem.from_dict,
        ResultKind.UPLOAD_SESSION: UploadSession.from_dict,
        ResultKind.ASYNC_TASK_STATUS: AsyncTaskStatus.from_dict,
        ResultKind.ERROR: DriveError.from_dict,
    }


def decode_result(kind: ResultKind, payload: Union[str, bytes]) -> Any:
    """
    Decode a response body into the variant named by kind.

    Args:
        kind: Expected variant
        payload: Raw body text or bytes

    Returns:
        Decoded model, or None for ResultKind.NONE

    Raises:
        SerializationError: If the body is not valid JSON for the variant
    """
    if kind is ResultKind.NONE:
        return None

    if isinstance(payload, bytes):
        text = payload.decode(SERVICE_TEXT_ENCODING, errors='replace')
    else:
        text = payload

    try:
        data = json.loads(text)
    except ValueError as e:
        raise SerializationError(f"Response is not valid JSON: {e}", text) from e

    if not isinstance(data, dict):
        raise SerializationError(f"Expected a JSON object for {kind.value}", text)

    try:
        return decoder_registry()[kind](data)
    except (KeyError, TypeError, ValueError) as e:
        raise SerializationError(f"Could not decode {kind.value}: {e}", text) from e
