"""
Structural interfaces between the upload coordinator and its collaborators.
"""
from typing import Protocol, List

from .models import ContentRange


class ChunkingStrategy(Protocol):
    """
    Protocol for fragment splitting strategies.

    Allows different splitting rules to be plugged in.
    """

    def calculate_fragments(self, total_length: int) -> List[ContentRange]:
        """
        Split an upload into consecutive fragments.

        Args:
            total_length: Total upload size in bytes

        Returns:
            Contiguous ranges in ascending order covering total_length
        """
        ...


class SourceReaderProtocol(Protocol):
    """Sequential reader over the upload source."""

    @property
    def length(self) -> int:
        """Total number of bytes the source will produce."""
        ...

    async def read_exact(self, size: int) -> bytes:
        """
        Read exactly size bytes from the current position.

        Raises:
            ValueError: If the source ends early
        """
        ...

    async def close(self) -> None:
        """Release the source."""
        ...

