"""CompletionBridge tests: one-shot delivery to poll-driven callers."""

from __future__ import annotations

import asyncio
import concurrent.futures
from dataclasses import dataclass, field
import random
from typing import Any

import httpx
import pytest

from gemwire.bridge import CompletionBridge
from gemwire.config import Config
from gemwire.errors import APIError
from gemwire.generative import GenerativeModel
from gemwire.result import Failure, Success
from tests.helpers import FakeServer, RecordingSink, text_response

pytestmark = pytest.mark.unit


@dataclass
class Recorder:
    successes: list[Any] = field(default_factory=list)
    failures: list[BaseException] = field(default_factory=list)

    @property
    def deliveries(self) -> int:
        return len(self.successes) + len(self.failures)

    def bridge(self, call: Any, **kwargs: Any) -> CompletionBridge[Any]:
        return CompletionBridge(
            call, self.successes.append, self.failures.append, **kwargs
        )


def _poll_until_settled(bridge: CompletionBridge[Any], limit: int = 500) -> int:
    for polls in range(1, limit + 1):
        if bridge.poll():
            return polls
    raise AssertionError(f"bridge did not settle within {limit} polls")


@pytest.fixture
def loop():
    loop = asyncio.new_event_loop()
    yield loop
    loop.close()


# =============================================================================
# Delivery routing
# =============================================================================


def test_value_goes_to_on_success(loop: asyncio.AbstractEventLoop) -> None:
    async def work() -> int:
        await asyncio.sleep(0)
        return 42

    rec = Recorder()
    bridge = rec.bridge(work(), loop=loop)

    assert bridge.poll() is False
    _poll_until_settled(bridge)

    assert rec.successes == [42]
    assert rec.failures == []
    assert bridge.done and bridge.settled


def test_success_outcome_is_unwrapped(loop: asyncio.AbstractEventLoop) -> None:
    async def work() -> Success[str]:
        return Success("pong")

    rec = Recorder()
    _poll_until_settled(rec.bridge(work(), loop=loop))

    assert rec.successes == ["pong"]


def test_failure_outcome_goes_to_on_failure(loop: asyncio.AbstractEventLoop) -> None:
    error = APIError("boom", kind="status", status_code=500)

    async def work() -> Failure:
        return Failure(error)

    rec = Recorder()
    _poll_until_settled(rec.bridge(work(), loop=loop))

    assert rec.failures == [error]
    assert rec.successes == []


def test_none_sentinel_goes_to_on_success(loop: asyncio.AbstractEventLoop) -> None:
    async def work() -> None:
        return None

    rec = Recorder()
    _poll_until_settled(rec.bridge(work(), loop=loop))

    assert rec.successes == [None]


def test_raised_exception_goes_to_on_failure(loop: asyncio.AbstractEventLoop) -> None:
    async def work() -> None:
        raise RuntimeError("kaput")

    rec = Recorder()
    _poll_until_settled(rec.bridge(work(), loop=loop))

    assert len(rec.failures) == 1
    assert isinstance(rec.failures[0], RuntimeError)


def test_cancellation_goes_to_on_failure(loop: asyncio.AbstractEventLoop) -> None:
    future = loop.create_future()
    rec = Recorder()
    bridge = rec.bridge(future)

    future.cancel()
    _poll_until_settled(bridge)

    assert len(rec.failures) == 1
    assert isinstance(rec.failures[0], asyncio.CancelledError)


def test_concurrent_future_is_polled_without_a_loop() -> None:
    future: concurrent.futures.Future[int] = concurrent.futures.Future()
    rec = Recorder()
    bridge = rec.bridge(future)

    assert bridge.poll() is False
    assert bridge.poll() is False
    future.set_result(3)

    assert bridge.poll() is True
    assert rec.successes == [3]


def test_failure_without_callback_is_swallowed_quietly() -> None:
    future: concurrent.futures.Future[int] = concurrent.futures.Future()
    future.set_exception(ValueError("ignored"))

    assert CompletionBridge(future).poll() is True


def test_rejects_non_awaitables() -> None:
    with pytest.raises(TypeError):
        CompletionBridge(42)  # type: ignore[arg-type]


# =============================================================================
# Exactly-once (Property)
# =============================================================================


def test_settled_bridge_ignores_further_polls(loop: asyncio.AbstractEventLoop) -> None:
    async def work() -> str:
        return "once"

    rec = Recorder()
    bridge = rec.bridge(work(), loop=loop)
    _poll_until_settled(bridge)

    for _ in range(10):
        assert bridge.poll() is True
    assert rec.deliveries == 1


def test_exactly_one_callback_across_random_interleavings(
    loop: asyncio.AbstractEventLoop,
) -> None:
    """Property: whatever the poll order and finish order, each bridge delivers once."""
    rng = random.Random(20240517)

    async def work(steps: int, mode: str) -> Any:
        for _ in range(steps):
            await asyncio.sleep(0)
        if mode == "raise":
            raise RuntimeError(mode)
        if mode == "failure":
            return Failure(APIError(mode, kind="transport"))
        return steps

    for _ in range(1000):
        recorders = [Recorder() for _ in range(3)]
        bridges = [
            rec.bridge(
                work(rng.randint(0, 4), rng.choice(["ok", "raise", "failure"])),
                loop=loop,
            )
            for rec in recorders
        ]

        for _ in range(200):
            if all(b.settled for b in bridges):
                break
            rng.choice(bridges).poll()
        # A few extra polls after settling must not deliver again.
        for _ in range(rng.randint(1, 5)):
            rng.choice(bridges).poll()

        assert all(b.settled for b in bridges)
        assert [rec.deliveries for rec in recorders] == [1, 1, 1]


# =============================================================================
# Scheduling
# =============================================================================


def test_run_yields_until_settled(loop: asyncio.AbstractEventLoop) -> None:
    async def work() -> str:
        for _ in range(3):
            await asyncio.sleep(0)
        return "done"

    rec = Recorder()
    bridge = rec.bridge(work(), loop=loop)

    steps = sum(1 for _ in bridge.run())

    assert steps >= 1
    assert bridge.settled
    assert rec.successes == ["done"]


@pytest.mark.asyncio
async def test_poll_inside_a_running_loop_does_not_reenter() -> None:
    async def work() -> int:
        await asyncio.sleep(0)
        return 7

    rec = Recorder()
    bridge = rec.bridge(asyncio.ensure_future(work()))

    while not bridge.poll():
        await asyncio.sleep(0)

    assert rec.successes == [7]


@pytest.mark.integration
def test_private_loop_drives_a_real_call_to_completion(
    config: Config, sink: RecordingSink
) -> None:
    server = FakeServer([(200, text_response("pong"))])
    model = GenerativeModel(config, client=server.client(), sink=sink)
    rec = Recorder()

    bridge = model.bridge(
        model.single_shot("ping"), rec.successes.append, rec.failures.append
    )
    _poll_until_settled(bridge)

    assert rec.failures == []
    assert rec.successes[0].text == "pong"
    assert server.last_body == {"contents": {"role": "user", "parts": [{"text": "ping"}]}}
    # The private loop already shut down on settle; closing again is a no-op.
    bridge.close()
    assert bridge.settled


@pytest.mark.integration
def test_private_loop_delivers_none_on_server_error(
    config: Config, sink: RecordingSink
) -> None:
    server = FakeServer([(503, {"error": {"message": "overloaded"}})])
    model = GenerativeModel(config, client=server.client(), sink=sink)
    rec = Recorder()

    _poll_until_settled(model.bridge(model.single_shot("ping"), rec.successes.append))

    assert rec.successes == [None]
    assert len(sink.errors) == 1


# =============================================================================
# Private loop lifecycle
# =============================================================================


def test_close_mid_flight_cancels_and_delivers_once() -> None:
    async def work() -> str:
        for _ in range(50):
            await asyncio.sleep(0)
        return "late"

    rec = Recorder()
    bridge = rec.bridge(work())

    assert bridge.poll() is False
    bridge.close()

    assert bridge.settled and bridge.done
    assert rec.successes == []
    assert len(rec.failures) == 1
    assert isinstance(rec.failures[0], asyncio.CancelledError)
    assert all(bridge.poll() for _ in range(100))
    assert rec.deliveries == 1


def test_close_is_a_no_op_for_a_caller_owned_loop(
    loop: asyncio.AbstractEventLoop,
) -> None:
    async def work() -> int:
        await asyncio.sleep(0)
        return 1

    rec = Recorder()
    bridge = rec.bridge(work(), loop=loop)
    bridge.close()

    assert not loop.is_closed()
    _poll_until_settled(bridge)
    assert rec.successes == [1]


@pytest.mark.integration
def test_overlapping_private_loops_each_close_their_client(
    config: Config, sink: RecordingSink, monkeypatch: pytest.MonkeyPatch
) -> None:
    real_client = httpx.AsyncClient
    created: list[httpx.AsyncClient] = []

    async def slow_handler(request: httpx.Request) -> httpx.Response:
        for _ in range(5):
            await asyncio.sleep(0)
        return httpx.Response(200, json=text_response("pong"))

    def make_client(*args: Any, **kwargs: Any) -> httpx.AsyncClient:
        client = real_client(transport=httpx.MockTransport(slow_handler))
        created.append(client)
        return client

    monkeypatch.setattr(httpx, "AsyncClient", make_client)
    model = GenerativeModel(config, sink=sink)
    rec = Recorder()
    bridges = [
        model.bridge(model.single_shot(prompt), rec.successes.append, rec.failures.append)
        for prompt in ("first", "second")
    ]

    for _ in range(500):
        if all(b.settled for b in bridges):
            break
        for b in bridges:
            b.poll()

    assert all(b.settled for b in bridges)
    assert rec.failures == []
    assert [r.text for r in rec.successes] == ["pong", "pong"]
    assert len(created) == 2
    assert all(client.is_closed for client in created)
