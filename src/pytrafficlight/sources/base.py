"""Event source contract."""

from __future__ import annotations

from collections.abc import Callable, Mapping
from dataclasses import dataclass
from typing import Any, Protocol

PayloadHandler = Callable[[Mapping[str, Any]], None]


@dataclass(frozen=True)
class SubscriptionHandle:
    """Opaque token returned by :meth:`EventSource.subscribe`."""

    channel: str
    token: int


class EventSource(Protocol):
    def subscribe(self, channel: str, handler: PayloadHandler) -> SubscriptionHandle:
        """Register *handler* for payloads on *channel*.

        Raises :class:`~pytrafficlight.exceptions.EventSourceError` if the
        subscription cannot be made.
        """
        ...

    def unsubscribe(self, handle: SubscriptionHandle) -> None:
        """Drop a subscription. Unknown handles are ignored."""
        ...
