"""Cooperative cancellation for in-flight provider calls.

A `CancellationSignal` is handed to an operation by its caller. The operation
runs its outbound call through `run_cancellable`, which cancels the underlying
task (and with it the pending HTTP request) as soon as the signal fires.
"""

import asyncio
from collections.abc import Awaitable, Callable
from typing import TypeVar

from payapp.common.errors import OperationCancelledError


T = TypeVar("T")


class CancellationSignal:
    """One-shot cancellation token backed by an `asyncio.Event`."""

    def __init__(self) -> None:
        self._event = asyncio.Event()
        self._reason: str | None = None
        self._timer: asyncio.TimerHandle | None = None

    @classmethod
    def with_timeout(cls, seconds: float) -> "CancellationSignal":
        """Create a signal that fires by itself after `seconds`."""

        signal = cls()
        signal.cancel_after(seconds)
        return signal

    @property
    def cancelled(self) -> bool:
        return self._event.is_set()

    @property
    def reason(self) -> str | None:
        return self._reason

    def cancel(self, reason: str = "cancelled by caller") -> None:
        """Fire the signal. Later calls keep the first reason."""

        if self._event.is_set():
            return
        self._reason = reason
        self._event.set()
        if self._timer is not None:
            self._timer.cancel()
            self._timer = None

    def cancel_after(self, seconds: float) -> None:
        """Schedule the signal to fire after `seconds` on the running loop."""

        if self._timer is not None:
            self._timer.cancel()
        loop = asyncio.get_running_loop()
        self._timer = loop.call_later(seconds, self.cancel, f"timed out after {seconds}s")

    def close(self) -> None:
        """Drop a pending `cancel_after` timer without firing the signal."""

        if self._timer is not None:
            self._timer.cancel()
            self._timer = None

    async def wait(self) -> None:
        await self._event.wait()

    def raise_if_cancelled(self) -> None:
        if self._event.is_set():
            raise OperationCancelledError(message=self._reason)


async def run_cancellable(
    factory: Callable[[], Awaitable[T]],
    signal: CancellationSignal | None = None,
) -> T:
    """Await `factory()` unless `signal` fires first.

    The coroutine is only created once the signal is known to be clear, so an
    already-cancelled signal never reaches the provider.
    """

    if signal is None:
        return await factory()
    signal.raise_if_cancelled()

    task = asyncio.ensure_future(factory())
    waiter = asyncio.ensure_future(signal.wait())
    try:
        await asyncio.wait({task, waiter}, return_when=asyncio.FIRST_COMPLETED)
    except asyncio.CancelledError:
        task.cancel()
        waiter.cancel()
        raise

    if task.done():
        waiter.cancel()
        return task.result()

    task.cancel()
    try:
        await task
    except asyncio.CancelledError:
        # The caller's own cancellation during cleanup outranks the signal.
        current = asyncio.current_task()
        if current is not None and current.cancelling():
            raise
    raise OperationCancelledError(message=signal.reason)
