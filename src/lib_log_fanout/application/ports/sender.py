"""Port for the wire-level sender used by the batching network transport."""

from __future__ import annotations

from collections.abc import Mapping
from typing import Any, Protocol, runtime_checkable


@runtime_checkable
class SenderPort(Protocol):
    """Deliver one JSON payload to a remote collector."""

    async def send(self, payload: Mapping[str, Any]) -> None:
        """POST ``payload``; raise on any transport or HTTP failure."""


__all__ = ["SenderPort"]
