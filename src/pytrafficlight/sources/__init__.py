"""Event sources.

Anything that can deliver raw payload maps for a channel satisfies
:class:`~pytrafficlight.sources.base.EventSource`. Deliveries may arrive on
any thread; the pipeline marshals them onto its event loop.
"""

from pytrafficlight.sources.base import EventSource, PayloadHandler, SubscriptionHandle
from pytrafficlight.sources.local import LocalEventBus
from pytrafficlight.sources.mqtt import MqttEventSource

__all__ = [
    "EventSource",
    "LocalEventBus",
    "MqttEventSource",
    "PayloadHandler",
    "SubscriptionHandle",
]
