"""
Progress reporting for uploads using Observer Pattern.

Callbacks run in the task performing the I/O. Consumers that must not slow
the transfer down read from a ProgressChannel instead: it keeps a bounded
buffer and drops the oldest event when full.
"""
import asyncio
from collections import deque
from typing import Deque, List, Optional

from .models import ProgressCallback, UploadProgress


class ProgressChannel:
    """
    Bounded, drop-oldest stream of progress snapshots.

    Pass one through UploadOptions.progress_channel and iterate it while
    the upload runs; iteration ends when the transfer finishes or fails.
    A channel serves a single upload.

    Example:
        >>> channel = ProgressChannel(maxsize=16)
        >>> upload = asyncio.ensure_future(drive.upload_large_file(url, path, UploadOptions(progress_channel=channel)))
        >>> async for progress in channel:
        ...     print(progress.percent_complete)
    """

    def __init__(self, maxsize: int = 64):
        if maxsize <= 0:
            raise ValueError("maxsize must be positive")
        self._events: Deque[UploadProgress] = deque(maxlen=maxsize)
        # Created on first wait so it binds to the consumer's loop
        self._ready: Optional[asyncio.Event] = None
        self._closed = False
        self.dropped = 0

    @property
    def closed(self) -> bool:
        return self._closed

    def _wake(self) -> None:
        if self._ready is not None:
            self._ready.set()

    def publish(self, progress: UploadProgress) -> None:
        """Add an event without blocking."""
        if self._closed:
            return
        if len(self._events) == self._events.maxlen:
            self.dropped += 1
        self._events.append(progress)
        self._wake()

    def close(self) -> None:
        """End iteration once buffered events are consumed."""
        self._closed = True
        self._wake()

    def __aiter__(self) -> 'ProgressChannel':
        return self

    async def __anext__(self) -> UploadProgress:
        while not self._events:
            if self._closed:
                raise StopAsyncIteration
            if self._ready is None:
                self._ready = asyncio.Event()
            self._ready.clear()
            await self._ready.wait()
        return self._events.popleft()


class ProgressReporter:
    """Fans cumulative progress out to callbacks and channels."""

    def __init__(
        self,
        total_bytes: int,
        callback: Optional[ProgressCallback] = None,
        total_fragments: int = 0
    ):
        self._progress = UploadProgress(total_bytes=total_bytes, total_fragments=total_fragments)
        self._callbacks: List[ProgressCallback] = []
        self._channels: List[ProgressChannel] = []
        if callback is not None:
            self._callbacks.append(callback)

    @property
    def progress(self) -> UploadProgress:
        return self._progress

    def on(self, callback: ProgressCallback) -> 'ProgressReporter':
        """Register a (percent, bytes_transferred, total_bytes) callback."""
        self._callbacks.append(callback)
        return self

    def attach(self, channel: ProgressChannel) -> ProgressChannel:
        """Send every future event to an existing channel."""
        self._channels.append(channel)
        return channel

    def channel(self, maxsize: int = 64) -> ProgressChannel:
        """Create a channel receiving every future event."""
        return self.attach(ProgressChannel(maxsize))

    def report(self, bytes_transferred: int) -> None:
        """Publish cumulative bytes transferred."""
        self._progress.bytes_transferred = bytes_transferred
        self._emit()

    def fragment_completed(self) -> None:
        self._progress.fragments_completed += 1

    def _emit(self) -> None:
        snapshot = UploadProgress(
            bytes_transferred=self._progress.bytes_transferred,
            total_bytes=self._progress.total_bytes,
            fragments_completed=self._progress.fragments_completed,
            total_fragments=self._progress.total_fragments
        )
        for callback in self._callbacks:
            callback(snapshot.percent_complete, snapshot.bytes_transferred, snapshot.total_bytes)
        for channel in self._channels:
            channel.publish(snapshot)

    def close(self) -> None:
        for channel in self._channels:
            channel.close()
