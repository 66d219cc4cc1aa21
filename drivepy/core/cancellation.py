"""
Cooperative cancellation.

A single CancellationToken is threaded through every suspend-capable
operation of one logical call (fragment PUTs, status polls, batch posts).
"""
import asyncio
from typing import Awaitable, Optional, TypeVar

from .exceptions import OperationCancelled

T = TypeVar('T')


class CancellationToken:
    """
    Cancellation signal shared by reference across one operation.

    The token may be created before the event loop starts; its event is
    bound to whichever loop first waits on it.

    Example:
        >>> token = CancellationToken()
        >>> task = asyncio.create_task(client.upload_large_file(url, path, UploadOptions(cancel_token=token)))
        >>> token.cancel()
    """

    def __init__(self):
        self._cancelled = False
        self._reason = "Operation was cancelled"
        self._event: Optional[asyncio.Event] = None

    def _signal(self) -> asyncio.Event:
        if self._event is None:
            self._event = asyncio.Event()
            if self._cancelled:
                self._event.set()
        return self._event

    @property
    def is_cancelled(self) -> bool:
        """Returns True once cancel() was called."""
        return self._cancelled

    def cancel(self, reason: str = "Operation was cancelled") -> None:
        """Raise the cancellation signal. Calling it again is a no-op."""
        if self._cancelled:
            return
        self._reason = reason
        self._cancelled = True
        if self._event is not None:
            self._event.set()

    def raise_if_cancelled(self) -> None:
        """Raise OperationCancelled if the signal was raised."""
        if self._cancelled:
            raise OperationCancelled(self._reason)

    async def wait(self) -> None:
        """Wait until the token is cancelled."""
        await self._signal().wait()

    async def guard(self, awaitable: Awaitable[T]) -> T:
        """
        Await a network exchange, aborting it if the token is cancelled first.

        Args:
            awaitable: Coroutine performing the exchange

        Returns:
            Result of the awaitable

        Raises:
            OperationCancelled: If cancellation is observed before or during the exchange
        """
        if self._cancelled:
            if asyncio.iscoroutine(awaitable):
                awaitable.close()
            self.raise_if_cancelled()

        work = asyncio.ensure_future(awaitable)
        waiter = asyncio.ensure_future(self._signal().wait())
        try:
            await asyncio.wait({work, waiter}, return_when=asyncio.FIRST_COMPLETED)
        except asyncio.CancelledError:
            work.cancel()
            waiter.cancel()
            raise

        if not self._cancelled:
            waiter.cancel()
            return work.result()

        # Cancellation supersedes whatever the exchange produced
        waiter.cancel()
        if not work.done():
            work.cancel()
        await asyncio.gather(work, return_exceptions=True)
        raise OperationCancelled(self._reason)
