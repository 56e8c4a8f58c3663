"""Cooperative cancellation signal and the cancellable runner."""

import asyncio

import pytest

from payapp.common.cancellation import CancellationSignal, run_cancellable
from payapp.common.errors import OperationCancelledError

pytestmark = pytest.mark.asyncio


async def test_cancel_keeps_first_reason():
    """Only the first cancel() sets the reason."""

    signal = CancellationSignal()
    assert not signal.cancelled
    signal.cancel("first")
    signal.cancel("second")
    assert signal.cancelled
    assert signal.reason == "first"


async def test_precancelled_signal_never_creates_the_coroutine():
    """The factory is not invoked when the signal already fired."""

    calls = []

    async def operation():
        calls.append("called")
        return 1

    signal = CancellationSignal()
    signal.cancel()
    with pytest.raises(OperationCancelledError):
        await run_cancellable(operation, signal)
    assert calls == []


async def test_completed_operation_returns_result():
    """A finished operation wins over a quiet signal."""

    async def operation():
        return "done"

    assert await run_cancellable(operation, CancellationSignal()) == "done"
    assert await run_cancellable(operation, None) == "done"


async def test_signal_aborts_in_flight_operation():
    """Firing the signal cancels the running task instead of waiting for it."""

    aborted = asyncio.Event()

    async def operation():
        try:
            await asyncio.sleep(10)
        except asyncio.CancelledError:
            aborted.set()
            raise

    signal = CancellationSignal()
    asyncio.get_running_loop().call_later(0.01, signal.cancel, "caller gave up")
    with pytest.raises(OperationCancelledError) as exc_info:
        await run_cancellable(operation, signal)
    assert aborted.is_set()
    assert exc_info.value.message == "caller gave up"


async def test_with_timeout_fires_by_itself():
    """A timed signal cancels a slow operation."""

    async def operation():
        await asyncio.sleep(10)

    signal = CancellationSignal.with_timeout(0.01)
    with pytest.raises(OperationCancelledError):
        await run_cancellable(operation, signal)
    assert "timed out" in signal.reason


async def test_close_drops_pending_timer():
    """close() stops a scheduled timeout from firing."""

    signal = CancellationSignal.with_timeout(0.01)
    signal.close()
    await asyncio.sleep(0.03)
    assert not signal.cancelled


async def test_operation_errors_propagate_unmodified():
    """Errors raised by the operation reach the caller as-is."""

    async def operation():
        raise RuntimeError("boom")

    with pytest.raises(RuntimeError, match="boom"):
        await run_cancellable(operation, CancellationSignal())


async def test_caller_cancellation_during_cleanup_propagates():
    """Cancelling the caller while the aborted task winds down is not masked by the signal."""

    async def operation():
        try:
            await asyncio.sleep(10)
        except asyncio.CancelledError:
            await asyncio.sleep(0.05)
            raise

    signal = CancellationSignal()
    outer = asyncio.create_task(run_cancellable(operation, signal))
    await asyncio.sleep(0.01)
    signal.cancel("caller gave up")
    await asyncio.sleep(0.01)
    outer.cancel()
    with pytest.raises(asyncio.CancelledError):
        await outer


async def test_caller_cancellation_before_signal_propagates():
    """Cancelling the caller while the operation runs cancels both."""

    aborted = asyncio.Event()

    async def operation():
        try:
            await asyncio.sleep(10)
        except asyncio.CancelledError:
            aborted.set()
            raise

    outer = asyncio.create_task(run_cancellable(operation, CancellationSignal()))
    await asyncio.sleep(0.01)
    outer.cancel()
    with pytest.raises(asyncio.CancelledError):
        await outer
    await asyncio.sleep(0)
    assert aborted.is_set()
