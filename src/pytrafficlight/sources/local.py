"""In-process publish/subscribe event source."""

from __future__ import annotations

import itertools
import logging
import threading
from collections.abc import Mapping
from typing import Any

from pytrafficlight.exceptions import EventSourceError
from pytrafficlight.sources.base import PayloadHandler, SubscriptionHandle

_logger = logging.getLogger(__name__)


class LocalEventBus:
    """Thread-safe channel bus.

    :meth:`publish` calls subscribed handlers synchronously on the
    publishing thread.
    """

    def __init__(self, *, logger: logging.Logger | None = None) -> None:
        self._logger = logger or _logger
        self._lock = threading.Lock()
        self._tokens = itertools.count(1)
        self._handlers: dict[str, dict[int, PayloadHandler]] = {}
        self._closed = False

    @property
    def is_closed(self) -> bool:
        return self._closed

    def subscriber_count(self, channel: str) -> int:
        with self._lock:
            return len(self._handlers.get(channel, {}))

    def subscribe(self, channel: str, handler: PayloadHandler) -> SubscriptionHandle:
        with self._lock:
            if self._closed:
                raise EventSourceError("Event bus is closed", channel=channel)
            token = next(self._tokens)
            self._handlers.setdefault(channel, {})[token] = handler
        self._logger.debug("Subscribed channel=%s token=%s", channel, token)
        return SubscriptionHandle(channel=channel, token=token)

    def unsubscribe(self, handle: SubscriptionHandle) -> None:
        with self._lock:
            handlers = self._handlers.get(handle.channel)
            if handlers is None:
                return
            handlers.pop(handle.token, None)
            if not handlers:
                self._handlers.pop(handle.channel, None)

    def publish(self, channel: str, payload: Mapping[str, Any]) -> int:
        """Deliver *payload* to every handler on *channel*; return the number reached."""
        with self._lock:
            handlers = list(self._handlers.get(channel, {}).values())
        for handler in handlers:
            try:
                handler(payload)
            except Exception:
                self._logger.warning("Handler failed on channel=%s", channel, exc_info=True)
        return len(handlers)

    def close(self) -> None:
        with self._lock:
            self._closed = True
            self._handlers.clear()
