"""Custom exception hierarchy for pytrafficlight."""

from __future__ import annotations


class TrafficLightError(Exception):
    """Base exception for all pytrafficlight errors."""


class TrafficLightConfigError(TrafficLightError):
    """Invalid or missing configuration."""


class EventSourceError(TrafficLightError):
    """Event source transport or subscription failure."""

    def __init__(
        self,
        message: str,
        *,
        channel: str = "",
    ) -> None:
        self.channel = channel
        super().__init__(message)


class SubscriptionError(EventSourceError):
    """The event source refused a pipeline subscription.

    Raised from :meth:`pytrafficlight.pipeline.TrafficLightPipeline.start`.
    The pipeline stays unregistered and no timers are started, so the
    caller may simply retry ``start()`` later.
    """
