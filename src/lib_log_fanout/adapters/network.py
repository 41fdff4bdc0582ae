"""Batching network transport posting records to an HTTP collector.

Purpose
-------
Accumulate records and deliver them one POST at a time, flushing when the
queue reaches ``batch_size`` or a periodic timer elapses, whichever comes
first. Records at a flush-trigger level start a flush right away.

Contents
--------
* ``LEVEL_MAP`` / :func:`canonical_level` - severity name to wire level.
* :class:`RequestsSender` - :class:`SenderPort` backed by :mod:`requests`.
* :class:`BatchingNetworkTransport` - queue, timer, retry and backoff policy.

System Role
-----------
On a failed send the unsent part of the batch is put back at the front of the
queue, preserving order, and retried after an exponential backoff capped at
``backoff_ceiling_ms``. Once ``retry_attempts`` attempts failed,
:meth:`BatchingNetworkTransport.flush` and :meth:`BatchingNetworkTransport.stop`
raise :class:`TransportDeliveryError`; background flushes log the failure and
keep the records queued for the next attempt.
"""

from __future__ import annotations

import asyncio
import contextlib
import logging
from collections import deque
from collections.abc import Awaitable, Callable, Mapping
from typing import Any, Deque

import requests

from lib_log_fanout.adapters.base import TransportBase
from lib_log_fanout.application.ports.sender import SenderPort
from lib_log_fanout.domain.errors import TransportDeliveryError
from lib_log_fanout.domain.record import LogRecord

LOGGER = logging.getLogger(__name__)

DEFAULT_URL = "http://localhost:8080/api/v1/logs"

LEVEL_MAP: Mapping[str, str] = {
    "FATAL": "error",
    "CRITICAL": "error",
    "ERROR": "error",
    "SEVERE": "error",
    "WARN": "warn",
    "WARNING": "warn",
    "INFO": "info",
    "CONFIG": "info",
    "HELP": "info",
    "DATA": "info",
    "DEBUG": "debug",
    "VERBOSE": "debug",
    "TRACE": "debug",
    "FINE": "debug",
    "FINER": "debug",
    "FINEST": "debug",
    "SPAM": "debug",
    "SILLY": "debug",
}


def canonical_level(name: str) -> str:
    """Map a level name onto ``error``/``warn``/``info``/``debug``.

    Examples
    --------
    >>> canonical_level('severe')
    'error'
    >>> canonical_level('PROMPT')
    'info'
    """

    return LEVEL_MAP.get(name.strip().upper(), "info")


def build_wire_payload(record: LogRecord) -> dict[str, str]:
    """Return the JSON body posted for ``record``."""

    return {
        "message": record.text,
        "level": canonical_level(record.level.name),
        "timestamp": record.timestamp.isoformat(),
    }


class RequestsSender(SenderPort):
    """POST payloads with :mod:`requests` in a worker thread."""

    def __init__(
        self,
        url: str = DEFAULT_URL,
        *,
        api_key: str | None = None,
        headers: Mapping[str, str] | None = None,
        timeout_ms: float = 5000,
        session: requests.Session | None = None,
    ) -> None:
        self._url = url
        self._timeout = timeout_ms / 1000
        merged = {"Content-Type": "application/json"}
        if api_key:
            merged["Authorization"] = f"Bearer {api_key}"
        merged.update(headers or {})
        self._headers = merged
        self._owns_session = session is None
        self._session = session or requests.Session()

    @property
    def url(self) -> str:
        return self._url

    @property
    def headers(self) -> dict[str, str]:
        return dict(self._headers)

    async def send(self, payload: Mapping[str, Any]) -> None:
        await asyncio.to_thread(self._post, dict(payload))

    def _post(self, payload: dict[str, Any]) -> None:
        response = self._session.post(self._url, json=payload, headers=self._headers, timeout=self._timeout)
        response.raise_for_status()

    def close(self) -> None:
        if self._owns_session:
            self._session.close()


class BatchingNetworkTransport(TransportBase):
    """Queue records and deliver them to a remote collector in batches.

    Parameters
    ----------
    url, api_key, headers, timeout_ms:
        Forwarded to the default :class:`RequestsSender`.
    batch_size:
        Queue length that triggers a background flush.
    flush_interval_ms:
        Period of the background flush timer; ``0`` disables the timer.
    retry_attempts:
        Total delivery attempts per flush before giving up.
    backoff_base_ms, backoff_ceiling_ms:
        Delay after failed attempt ``n`` is ``min(base * 2 ** (n - 1), ceiling)``.
    sender:
        Custom :class:`SenderPort`; overrides the HTTP settings.
    sleep:
        Coroutine used for backoff delays (injectable for tests).
    """

    kind = "network"

    def __init__(
        self,
        url: str = DEFAULT_URL,
        *,
        api_key: str | None = None,
        batch_size: int = 50,
        flush_interval_ms: float = 2000,
        timeout_ms: float = 5000,
        retry_attempts: int = 2,
        headers: Mapping[str, str] | None = None,
        backoff_base_ms: float = 1000,
        backoff_ceiling_ms: float = 10000,
        sender: SenderPort | None = None,
        sleep: Callable[[float], Awaitable[Any]] = asyncio.sleep,
        threshold: str | None = None,
        name: str | None = None,
    ) -> None:
        if batch_size <= 0:
            raise ValueError("batch_size must be positive")
        if retry_attempts <= 0:
            raise ValueError("retry_attempts must be positive")
        super().__init__(name=name, threshold=threshold)
        self._sender: SenderPort = sender or RequestsSender(
            url, api_key=api_key, headers=headers, timeout_ms=timeout_ms
        )
        self._batch_size = batch_size
        self._flush_interval = flush_interval_ms / 1000
        self._retry_attempts = retry_attempts
        self._backoff_base_ms = backoff_base_ms
        self._backoff_ceiling_ms = backoff_ceiling_ms
        self._sleep = sleep
        self._queue: Deque[dict[str, str]] = deque()
        self._lock = asyncio.Lock()
        self._timer: asyncio.Task[None] | None = None
        self._background: set[asyncio.Task[None]] = set()
        self._pending_flush: asyncio.Task[None] | None = None
        self._last_error: BaseException | None = None
        self._delivered = 0

    @property
    def pending(self) -> int:
        """Records waiting in the queue."""

        return len(self._queue)

    @property
    def delivered(self) -> int:
        return self._delivered

    @property
    def last_error(self) -> BaseException | None:
        """Most recent send failure, including failures of background flushes."""

        return self._last_error

    def backoff_delay_ms(self, attempt: int) -> float:
        """Return the delay after failed attempt number ``attempt`` (1-based).

        Examples
        --------
        >>> transport = BatchingNetworkTransport(sender=object(), backoff_base_ms=1000, backoff_ceiling_ms=10000)
        >>> [transport.backoff_delay_ms(n) for n in (1, 2, 3, 4, 5)]
        [1000, 2000, 4000, 8000, 10000]
        """

        return min(self._backoff_base_ms * 2 ** (attempt - 1), self._backoff_ceiling_ms)

    async def _open(self) -> None:
        if self._flush_interval > 0:
            self._timer = asyncio.create_task(self._run_timer())

    def _write(self, record: LogRecord) -> None:
        self._queue.append(build_wire_payload(record))
        if record.level.flush:
            self._schedule_flush("level")
        elif len(self._queue) >= self._batch_size:
            self._schedule_flush("batch")

    def _schedule_flush(self, trigger: str) -> None:
        try:
            loop = asyncio.get_running_loop()
        except RuntimeError:
            return
        # A pending flush keeps draining until the queue is empty.
        if self._pending_flush is not None and not self._pending_flush.done():
            return
        task = loop.create_task(self._background_flush(trigger))
        self._pending_flush = task
        self._background.add(task)
        task.add_done_callback(self._background.discard)

    async def _run_timer(self) -> None:
        while True:
            await asyncio.sleep(self._flush_interval)
            if self._queue:
                await self._background_flush("timer")

    async def _background_flush(self, trigger: str) -> None:
        try:
            await self._flush()
        except Exception as exc:
            LOGGER.error(
                "Network transport %s could not deliver %d record(s) (%s flush)",
                self.name,
                len(self._queue),
                trigger,
                exc_info=exc,
            )

    async def _flush(self) -> None:
        async with self._lock:
            await self._send_queued()

    async def _send_queued(self) -> None:
        attempt = 0
        while self._queue:
            batch = [self._queue.popleft() for _ in range(min(self._batch_size, len(self._queue)))]
            sent = 0
            try:
                for payload in batch:
                    await self._sender.send(payload)
                    sent += 1
                    self._delivered += 1
            except Exception as exc:
                self._queue.extendleft(reversed(batch[sent:]))
                self._last_error = exc
                attempt += 1
                if attempt >= self._retry_attempts:
                    raise TransportDeliveryError(
                        f"{self.name}: delivery failed after {attempt} attempt(s): {exc}",
                        attempts=attempt,
                        pending=len(self._queue),
                    ) from exc
                await self._sleep(self.backoff_delay_ms(attempt) / 1000)
            else:
                attempt = 0

    async def _close(self) -> None:
        timer, self._timer = self._timer, None
        if timer is not None:
            timer.cancel()
            with contextlib.suppress(asyncio.CancelledError):
                await timer
        if self._background:
            await asyncio.gather(*self._background, return_exceptions=True)

    async def _release(self) -> None:
        close = getattr(self._sender, "close", None)
        if callable(close):
            close()

    def __str__(self) -> str:
        return f"Network[{len(self._queue)} pending]"


__all__ = [
    "BatchingNetworkTransport",
    "DEFAULT_URL",
    "LEVEL_MAP",
    "RequestsSender",
    "build_wire_payload",
    "canonical_level",
]
