"""Poll-driven consumption of asynchronous calls.

Game engines and other frame-stepped hosts run one update per frame on a
single thread and cannot ``await``. ``CompletionBridge`` lets them start a
call and check on it once per frame:

    bridge = model.bridge(model.single_shot("ping"), on_reply, on_error)

    def update():                      # called by the host every frame
        bridge.poll()

or, with a generator-based scheduler, drive ``bridge.run()`` as a
coroutine that yields once per step.

Callbacks run synchronously inside ``poll()``, on whatever thread is
polling. Nothing runs on a background thread, and exactly one callback is
invoked, exactly once, per bridge.
"""

from __future__ import annotations

import asyncio
import concurrent.futures
import inspect
import logging
from typing import TYPE_CHECKING, Any, Generic, TypeVar

from gemwire.result import Failure, Success
from gemwire.transport import aclose_shared_client

if TYPE_CHECKING:
    from collections.abc import Awaitable, Callable, Iterator

log = logging.getLogger(__name__)

T = TypeVar("T")

_CANCELLED = (asyncio.CancelledError, concurrent.futures.CancelledError)


class CompletionBridge(Generic[T]):
    """Exposes an in-flight call to a poll-driven caller via one-shot callbacks.

    Args:
        call: A coroutine, ``asyncio.Future``/``Task`` or
            ``concurrent.futures.Future``.
        on_success: Receives the call's value. ``Success`` outcomes are
            unwrapped; a ``None`` sentinel from a fail-soft verb is passed
            through.
        on_failure: Receives the raised exception, a cancellation, or the
            error of a returned ``Failure`` outcome.
        loop: Event loop to schedule a coroutine on. When omitted for a
            coroutine, the bridge creates a private loop, advances it from
            ``poll()`` and closes it once the call settles.
    """

    def __init__(
        self,
        call: Awaitable[T] | concurrent.futures.Future[T],
        on_success: Callable[[Any], None] | None = None,
        on_failure: Callable[[BaseException], None] | None = None,
        *,
        loop: asyncio.AbstractEventLoop | None = None,
    ) -> None:
        self._on_success = on_success
        self._on_failure = on_failure
        self._settled = False
        self._owns_loop = False
        self._loop: asyncio.AbstractEventLoop | None
        self._future: asyncio.Future[Any] | concurrent.futures.Future[Any]

        if isinstance(call, concurrent.futures.Future):
            self._future = call
            self._loop = loop
        elif isinstance(call, asyncio.Future):
            self._future = call
            self._loop = loop or call.get_loop()
        elif inspect.isawaitable(call):
            if loop is None:
                loop = asyncio.new_event_loop()
                self._owns_loop = True
            self._loop = loop
            self._future = asyncio.ensure_future(call, loop=loop)
        else:
            raise TypeError(
                f"Expected a coroutine or future, got {type(call).__name__}"
            )

    @property
    def done(self) -> bool:
        """Whether the underlying call has finished (callbacks may still be pending)."""
        return self._future.done()

    @property
    def settled(self) -> bool:
        """Whether a callback has been delivered."""
        return self._settled

    def poll(self) -> bool:
        """Advance the call without blocking; deliver the outcome once it is ready.

        Returns:
            True once the bridge has settled. Further calls are no-ops.
        """
        if self._settled:
            return True
        self._pump()
        if not self._future.done():
            return False

        self._settled = True
        try:
            self._deliver()
        finally:
            if self._owns_loop:
                self.close()
        return True

    def run(self) -> Iterator[None]:
        """Yield once per scheduler step until the bridge settles."""
        while not self.poll():
            yield None

    def close(self) -> None:
        """Close the private event loop, if the bridge created one.

        A call still in flight is cancelled first, and the cancellation is
        delivered to ``on_failure``; a finished but unpolled call is delivered
        as usual. Either way the bridge settles exactly once.
        """
        loop = self._loop
        if not self._owns_loop or loop is None or loop.is_closed():
            return
        try:
            if not self._future.done():
                log.debug("Cancelling in-flight call before closing its loop")
                self._future.cancel()
                loop.run_until_complete(asyncio.wait([self._future]))
            if not self._settled:
                self._settled = True
                self._deliver()
        finally:
            loop.run_until_complete(aclose_shared_client())
            loop.run_until_complete(loop.shutdown_asyncgens())
            loop.close()

    def _pump(self) -> None:
        """Run exactly one iteration of an idle loop.

        A loop that is already running (the caller polls from inside it)
        progresses on its own between polls.
        """
        loop = self._loop
        if loop is None or loop.is_closed() or loop.is_running():
            return
        try:
            asyncio.get_running_loop()
        except RuntimeError:
            pass
        else:
            # Another loop owns this thread; run_forever() would refuse.
            return
        loop.call_soon(loop.stop)
        loop.run_forever()

    def _deliver(self) -> None:
        future = self._future
        try:
            exc = future.exception()
        except _CANCELLED as cancelled:
            exc = cancelled

        if exc is not None:
            self._fail(exc)
            return

        value = future.result()
        if isinstance(value, Failure):
            self._fail(value.error)
        elif isinstance(value, Success):
            self._succeed(value.value)
        else:
            self._succeed(value)

    def _succeed(self, value: Any) -> None:
        if self._on_success is not None:
            self._on_success(value)

    def _fail(self, exc: BaseException) -> None:
        if self._on_failure is not None:
            self._on_failure(exc)
        else:
            log.debug("Bridged call failed with no failure callback: %r", exc)
