"""NotificationSink: best-effort delivery of pipeline events to a chat channel.

Delivery is never a dependency of pipeline progress.  A failed, rejected,
or hung post is logged and absorbed here; ``notify`` does not raise.
Every event is appended to the in-memory queue whatever the delivery
outcome.
"""

from __future__ import annotations

import asyncio
import logging
from collections.abc import Awaitable, Callable
from datetime import datetime, timezone
from typing import Any, Protocol

from stepgate.models.events import QueueEntry
from stepgate.routing.formatting import format_event

logger = logging.getLogger(__name__)

PostCallback = Callable[[str, str], Awaitable[Any]]


class SupportsLog(Protocol):
    """The two logging calls the sink needs (``logging.Logger`` fits)."""

    def info(self, msg: str, *args: Any) -> Any: ...

    def warning(self, msg: str, *args: Any) -> Any: ...


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


class NotificationSink:
    """Posts formatted events to an async transport, falling back to logs.

    The sink is *enabled* only when both ``channel_id`` and
    ``post_callback`` are given; otherwise every message goes to the log.

    Parameters
    ----------
    channel_id:
        Destination channel passed through to ``post_callback``.
    post_callback:
        ``async (channel_id, message) -> Any``.  Any exception it raises,
        including a timeout, counts as a failed delivery.
    log:
        Object with ``info`` and ``warning``.  Defaults to this module's
        logger.
    delivery_timeout:
        Seconds to wait for a single post.  ``None`` waits indefinitely.
    clock:
        Returns the current UTC time for queue timestamps.
    """

    def __init__(
        self,
        channel_id: str | None = None,
        post_callback: PostCallback | None = None,
        log: SupportsLog | None = None,
        *,
        delivery_timeout: float | None = 10.0,
        clock: Callable[[], datetime] | None = None,
    ) -> None:
        self.channel_id = channel_id
        self._post_callback = post_callback
        self._log = log or logger
        self.delivery_timeout = delivery_timeout
        self._clock = clock or _utcnow
        self._queue: list[QueueEntry] = []

    @property
    def enabled(self) -> bool:
        return bool(self.channel_id and self._post_callback)

    async def notify(self, event: Any) -> None:
        """Format *event*, try to deliver it, and record it in the queue."""
        message = format_event(event)
        delivered = False

        if self.enabled:
            delivered = await self._deliver(message)
        else:
            self._log.info("[pipeline -> local] %s", message)

        self._queue.append(
            QueueEntry(
                event=event,
                message=message,
                timestamp_utc=self._clock(),
                delivered=delivered,
            )
        )

    async def _deliver(self, message: str) -> bool:
        try:
            await asyncio.wait_for(
                self._post_callback(self.channel_id, message),
                timeout=self.delivery_timeout,
            )
        except asyncio.TimeoutError:
            self._log.warning(
                "Notification delivery failed: timed out after %ss",
                self.delivery_timeout,
            )
        except Exception as exc:  # noqa: BLE001
            self._log.warning("Notification delivery failed: %s", exc)
        else:
            return True

        self._log.info("[pipeline] %s", message)
        return False

    def get_queue(self) -> tuple[QueueEntry, ...]:
        """Return a snapshot of every notified event, in call order."""
        return tuple(self._queue)

    @property
    def undelivered_count(self) -> int:
        """Number of queued events whose delivery did not succeed."""
        return sum(1 for entry in self._queue if not entry.delivered)
