"""
Fragment splitting strategies for resumable uploads.

Implements Strategy Pattern for different splitting rules.
"""
from abc import ABC, abstractmethod
from typing import List

from ..models import ContentRange, DEFAULT_FRAGMENT_SIZE, FRAGMENT_ALIGNMENT_BYTES


class BaseChunkingStrategy(ABC):
    """Abstract base class for fragment strategies."""

    @abstractmethod
    def calculate_fragments(self, total_length: int) -> List[ContentRange]:
        """Calculate fragment ranges."""
        pass


class AlignedFragmentStrategy(BaseChunkingStrategy):
    """
    Fixed-size fragments whose size is a multiple of an alignment unit.

    The final fragment is truncated to the remainder.

    Example:
        >>> strategy = AlignedFragmentStrategy(4 * 1024 * 1024, alignment=1024 * 1024)
        >>> [str(r) for r in strategy.calculate_fragments(10 * 1024 * 1024)]
        ['bytes 0-4194303/10485760', 'bytes 4194304-8388607/10485760', 'bytes 8388608-10485759/10485760']
    """

    def __init__(
        self,
        fragment_size: int = DEFAULT_FRAGMENT_SIZE,
        alignment: int = FRAGMENT_ALIGNMENT_BYTES
    ):
        """
        Initialize with fragment size.

        Args:
            fragment_size: Size of each fragment in bytes
            alignment: fragment_size must be a positive multiple of this

        Raises:
            ValueError: If the size is not a positive multiple of alignment
        """
        if alignment <= 0:
            raise ValueError("Alignment must be positive")
        if fragment_size <= 0:
            raise ValueError("Fragment size must be positive")
        if fragment_size % alignment != 0:
            raise ValueError(f"Fragment size must be a multiple of {alignment} bytes")
        self.fragment_size = fragment_size
        self.alignment = alignment

    def calculate_fragments(self, total_length: int) -> List[ContentRange]:
        """
        Calculate fragment ranges.

        Args:
            total_length: Total upload size in bytes

        Returns:
            List of ContentRange in ascending order (empty for 0 bytes)
        """
        if total_length < 0:
            raise ValueError("Total length must not be negative")

        fragments = []
        position = 0

        while position < total_length:
            end = min(position + self.fragment_size, total_length)
            fragments.append(ContentRange(position, end - 1, total_length))
            position = end

        return fragments
