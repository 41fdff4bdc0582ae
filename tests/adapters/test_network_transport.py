from __future__ import annotations

import asyncio
import logging
from collections.abc import Callable
from typing import Any

import pytest
import requests

from lib_log_fanout.adapters.network import (
    BatchingNetworkTransport,
    RequestsSender,
    build_wire_payload,
    canonical_level,
)
from lib_log_fanout.domain.errors import TransportDeliveryError
from lib_log_fanout.domain.record import LogRecord


class _FakeSender:
    """Records payloads; fails while ``failures`` is positive or for messages in ``fail_once``."""

    def __init__(self, failures: int = 0, fail_once: set[str] | None = None) -> None:
        self.failures = failures
        self.fail_once = set(fail_once or ())
        self.calls = 0
        self.sent: list[dict[str, Any]] = []
        self.closed = False

    async def send(self, payload: dict[str, Any]) -> None:
        self.calls += 1
        if self.failures > 0:
            self.failures -= 1
            raise ConnectionError("collector down")
        if payload["message"] in self.fail_once:
            self.fail_once.discard(payload["message"])
            raise ConnectionError(f"dropped {payload['message']}")
        self.sent.append(payload)

    def close(self) -> None:
        self.closed = True


class _Sleeps:
    def __init__(self) -> None:
        self.delays: list[float] = []

    async def __call__(self, seconds: float) -> None:
        self.delays.append(seconds)


async def _ready(sender: _FakeSender, sleeps: _Sleeps | None = None, **options: Any) -> BatchingNetworkTransport:
    options.setdefault("flush_interval_ms", 0)
    transport = BatchingNetworkTransport(sender=sender, sleep=sleeps or _Sleeps(), **options)
    await transport.setup()
    return transport


@pytest.mark.parametrize(
    "name, expected",
    [("FATAL", "error"), ("severe", "error"), ("warning", "warn"), ("config", "info"), ("finest", "debug"), ("prompt", "info")],
)
def test_canonical_level_maps_onto_four_wire_levels(name: str, expected: str) -> None:
    assert canonical_level(name) == expected


def test_wire_payload_carries_plain_message_level_and_iso_timestamp(make_record: Callable[..., LogRecord]) -> None:
    payload = build_wire_payload(make_record("hello", "verbose"))

    assert payload == {"message": "hello", "level": "debug", "timestamp": "2025-09-23T12:00:00.123000+00:00"}


@pytest.mark.asyncio
async def test_one_failure_is_retried_after_backoff(make_record: Callable[..., LogRecord]) -> None:
    sender = _FakeSender(failures=1)
    sleeps = _Sleeps()
    transport = await _ready(sender, sleeps, retry_attempts=2, batch_size=10)

    transport.emit(make_record("one"))
    transport.emit(make_record("two"))
    await transport.flush()

    assert [payload["message"] for payload in sender.sent] == ["one", "two"]
    assert sender.calls == 3
    assert sleeps.delays == [1.0]
    assert transport.delivered == 2
    assert transport.pending == 0
    assert isinstance(transport.last_error, ConnectionError)


@pytest.mark.asyncio
async def test_partial_failure_requeues_unsent_records_in_order(make_record: Callable[..., LogRecord]) -> None:
    sender = _FakeSender(fail_once={"b"})
    transport = await _ready(sender, batch_size=10)

    for message in ("a", "b", "c"):
        transport.emit(make_record(message))
    await transport.flush()

    assert [payload["message"] for payload in sender.sent] == ["a", "b", "c"]


@pytest.mark.asyncio
async def test_exhausted_retries_raise_and_keep_records_queued(make_record: Callable[..., LogRecord]) -> None:
    sender = _FakeSender(failures=10)
    sleeps = _Sleeps()
    transport = await _ready(sender, sleeps, retry_attempts=3, batch_size=10, backoff_base_ms=100, backoff_ceiling_ms=150)

    transport.emit(make_record("one"))
    transport.emit(make_record("two"))
    with pytest.raises(TransportDeliveryError) as excinfo:
        await transport.flush()

    assert excinfo.value.attempts == 3
    assert excinfo.value.pending == 2
    assert sleeps.delays == [0.1, 0.15]
    assert transport.pending == 2


@pytest.mark.asyncio
async def test_full_batch_triggers_a_background_flush(make_record: Callable[..., LogRecord]) -> None:
    sender = _FakeSender()
    transport = await _ready(sender, batch_size=2)

    transport.emit(make_record("one"))
    await asyncio.sleep(0.01)
    assert sender.sent == []

    transport.emit(make_record("two"))
    await asyncio.sleep(0.01)
    assert [payload["message"] for payload in sender.sent] == ["one", "two"]
    await transport.stop()


@pytest.mark.asyncio
async def test_timer_flushes_partial_batches(make_record: Callable[..., LogRecord]) -> None:
    sender = _FakeSender()
    transport = await _ready(sender, batch_size=50, flush_interval_ms=10)

    transport.emit(make_record("tick"))
    await asyncio.sleep(0.08)

    assert [payload["message"] for payload in sender.sent] == ["tick"]
    await transport.destroy()
    assert sender.closed is True


@pytest.mark.asyncio
async def test_background_failures_are_logged(
    make_record: Callable[..., LogRecord], caplog: pytest.LogCaptureFixture
) -> None:
    sender = _FakeSender(failures=1)
    transport = await _ready(sender, batch_size=1, retry_attempts=1)

    with caplog.at_level(logging.ERROR, logger="lib_log_fanout.adapters.network"):
        transport.emit(make_record("lost"))
        await asyncio.sleep(0.01)

    assert "could not deliver" in caplog.text
    assert transport.pending == 1
    await transport.stop()
    assert [payload["message"] for payload in sender.sent] == ["lost"]


@pytest.mark.asyncio
async def test_stop_surfaces_delivery_failures(make_record: Callable[..., LogRecord]) -> None:
    transport = await _ready(_FakeSender(failures=10), retry_attempts=1, batch_size=10)
    transport.emit(make_record("stuck"))

    with pytest.raises(TransportDeliveryError):
        await transport.stop()

    assert transport.state.value == "stopped"


@pytest.mark.asyncio
async def test_flush_trigger_level_is_sent_without_waiting_for_the_batch(
    make_record: Callable[..., LogRecord],
) -> None:
    sender = _FakeSender()
    transport = await _ready(sender, batch_size=50)

    transport.emit(make_record("routine"))
    transport.emit(make_record("broken", "error"))
    await asyncio.sleep(0.01)

    assert [payload["message"] for payload in sender.sent] == ["routine", "broken"]
    assert transport.pending == 0
    await transport.stop()


@pytest.mark.asyncio
async def test_outage_keeps_a_single_background_flush_in_flight(make_record: Callable[..., LogRecord]) -> None:
    sender = _FakeSender(failures=1000)
    transport = await _ready(sender, batch_size=1, retry_attempts=3)

    for index in range(50):
        transport.emit(make_record(f"record {index}"))
    await asyncio.sleep(0.01)

    assert sender.calls == 3
    assert transport.pending == 50
    sender.failures = 0
    await transport.stop()
    assert len(sender.sent) == 50


def test_backoff_is_exponential_and_capped() -> None:
    transport = BatchingNetworkTransport(sender=_FakeSender(), backoff_base_ms=500, backoff_ceiling_ms=3000)

    assert [transport.backoff_delay_ms(n) for n in range(1, 6)] == [500, 1000, 2000, 3000, 3000]


def test_invalid_batch_options_are_rejected() -> None:
    with pytest.raises(ValueError):
        BatchingNetworkTransport(sender=_FakeSender(), batch_size=0)
    with pytest.raises(ValueError):
        BatchingNetworkTransport(sender=_FakeSender(), retry_attempts=0)


class _Response:
    def __init__(self, status: int) -> None:
        self.status = status

    def raise_for_status(self) -> None:
        if self.status >= 400:
            raise requests.HTTPError(f"{self.status} error")


class _Session:
    def __init__(self, status: int = 200) -> None:
        self.status = status
        self.posts: list[dict[str, Any]] = []
        self.closed = False

    def post(self, url: str, *, json: Any, headers: dict[str, str], timeout: float) -> _Response:
        self.posts.append({"url": url, "json": json, "headers": headers, "timeout": timeout})
        return _Response(self.status)

    def close(self) -> None:
        self.closed = True


def test_requests_sender_builds_headers() -> None:
    sender = RequestsSender("http://collector/logs", api_key="secret", headers={"X-Env": "test"}, session=_Session())  # type: ignore[arg-type]

    assert sender.url == "http://collector/logs"
    assert sender.headers == {
        "Content-Type": "application/json",
        "Authorization": "Bearer secret",
        "X-Env": "test",
    }


@pytest.mark.asyncio
async def test_requests_sender_posts_json_and_raises_http_errors() -> None:
    session = _Session()
    sender = RequestsSender("http://collector/logs", timeout_ms=2500, session=session)  # type: ignore[arg-type]

    await sender.send({"message": "hi", "level": "info", "timestamp": "t"})

    assert session.posts == [
        {
            "url": "http://collector/logs",
            "json": {"message": "hi", "level": "info", "timestamp": "t"},
            "headers": {"Content-Type": "application/json"},
            "timeout": 2.5,
        }
    ]

    failing = RequestsSender(session=_Session(status=503))  # type: ignore[arg-type]
    with pytest.raises(requests.HTTPError):
        await failing.send({"message": "x"})


def test_requests_sender_closes_only_owned_sessions() -> None:
    session = _Session()
    RequestsSender(session=session).close()  # type: ignore[arg-type]

    assert session.closed is False
