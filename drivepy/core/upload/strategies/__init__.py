"""Upload strategies module."""
from .chunking import BaseChunkingStrategy, AlignedFragmentStrategy

__all__ = [
    'BaseChunkingStrategy',
    'AlignedFragmentStrategy',
]
