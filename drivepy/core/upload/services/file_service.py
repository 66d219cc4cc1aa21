"""
Upload sources.

A source is read strictly front to back, one fragment at a time; at most
one fragment is held in memory.
"""
import io
import os
from pathlib import Path
from typing import Any, BinaryIO, Optional, Tuple, Union

import aiofiles

from ...logging import get_logger

UploadSource = Union[str, Path, bytes, bytearray, memoryview, BinaryIO]


class FileValidator:
    """Checks a local path before an upload session is created."""

    def validate(self, file_path: Union[str, Path]) -> Tuple[Path, int]:
        """
        Resolve a local file and its size.

        Returns:
            (path, size in bytes)

        Raises:
            FileNotFoundError: If nothing exists at file_path
            ValueError: If file_path is a directory or other non-regular file
        """
        path = Path(file_path)
        if not path.exists():
            raise FileNotFoundError(f"No such file: {path}")
        if not path.is_file():
            raise ValueError(f"Upload source is not a file: {path}")
        return path, path.stat().st_size

    def validate_size(self, size: int) -> None:
        """Reject empty sources."""
        if size <= 0:
            raise ValueError("Cannot upload empty source")


class AsyncFileReader:
    """
    Sequential asynchronous file reader.

    Uses aiofiles for non-blocking I/O. The file handle stays open for the
    whole upload and is read strictly front to back.
    """

    def __init__(self, file_path: Path, length: int):
        self._path = file_path
        self._length = length
        self._position = 0
        self._file_handle: Optional[Any] = None
        self._logger = get_logger('drivepy.upload.reader')

    @property
    def length(self) -> int:
        return self._length

    async def open(self) -> None:
        """Open file for reading. Called lazily by read_exact()."""
        if self._file_handle is None:
            self._file_handle = await aiofiles.open(self._path, 'rb')

    async def read_exact(self, size: int) -> bytes:
        """
        Read exactly size bytes from the current position.

        Raises:
            ValueError: If the file ends early
        """
        await self.open()
        data = await self._file_handle.read(size)
        if len(data) != size:
            raise ValueError(
                f"Source ended early: wanted {size} bytes at offset {self._position}, got {len(data)}"
            )
        self._logger.debug(f"Read {self._position}-{self._position + size - 1} from {self._path.name}")
        self._position += size
        return data

    async def close(self) -> None:
        """Close the file if open."""
        if self._file_handle is not None:
            await self._file_handle.close()
            self._file_handle = None


class BufferReader:
    """Sequential reader over bytes or a seekable binary file object."""

    def __init__(self, source: Union[bytes, bytearray, memoryview, BinaryIO], length: Optional[int] = None):
        if isinstance(source, (bytes, bytearray, memoryview)):
            source = io.BytesIO(bytes(source))
        self._stream = source
        self._length = length if length is not None else self._measure(source)
        self._position = 0

    @staticmethod
    def _measure(stream: BinaryIO) -> int:
        """Bytes remaining from the current position."""
        try:
            current = stream.tell()
            end = stream.seek(0, os.SEEK_END)
            stream.seek(current)
        except (AttributeError, OSError, io.UnsupportedOperation) as e:
            raise ValueError("Couldn't get length of source stream; pass total_length") from e
        return end - current

    @property
    def length(self) -> int:
        return self._length

    async def read_exact(self, size: int) -> bytes:
        data = b''
        while len(data) < size:
            chunk = self._stream.read(size - len(data))
            if not chunk:
                raise ValueError(
                    f"Source ended early: wanted {size} bytes at offset {self._position}, got {len(data)}"
                )
            data += chunk
        self._position += size
        return data

    async def close(self) -> None:
        # Caller owns file objects it passed in
        pass


def open_source(source: UploadSource, total_length: Optional[int] = None):
    """
    Wrap an upload source in a sequential reader.

    Args:
        source: File path, bytes, or a binary file object
        total_length: Length override for streams that cannot seek

    Returns:
        AsyncFileReader or BufferReader
    """
    if isinstance(source, (str, Path)):
        path, size = FileValidator().validate(source)
        return AsyncFileReader(path, size if total_length is None else total_length)
    return BufferReader(source, total_length)
