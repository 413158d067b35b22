"""Normalized, display-ready traffic signal model."""

from __future__ import annotations

import enum

from pydantic import BaseModel, ConfigDict, Field

from pytrafficlight._constants import EXPIRE_WINDOW_S, SOURCE_NAVIGATION


class SignalStatus(enum.IntEnum):
    """Internal display status.

    ``NONE`` means "no active signal" and is never emitted to a sink.
    """

    NONE = 0
    GREEN = 1
    RED = 2
    YELLOW = 3

    @property
    def label(self) -> str:
        return self.name.lower()


class LaneDirection(enum.IntEnum):
    """Concrete lane a signal applies to.

    Values match the producer's lane codes so diagnostics line up with raw
    payloads.
    """

    LEFT = 1
    RIGHT = 2
    STRAIGHT = 4

    @property
    def label(self) -> str:
        return self.name.lower()


class NormalizedSignal(BaseModel):
    """The unit handed to a display sink.

    Instances are immutable; every decoded payload produces a new one.
    ``timestamp`` is on the owning pipeline's clock (event-loop seconds).
    """

    model_config = ConfigDict(frozen=True)

    status: SignalStatus
    countdown: int = Field(default=0, description="Seconds remaining; clamped to >= 0 before emission")
    direction: LaneDirection = LaneDirection.STRAIGHT
    wait_round: int = Field(default=0, description="Phase cycles to wait, passed through unmodified")
    source: str = SOURCE_NAVIGATION
    timestamp: float = 0.0

    raw_status: int = Field(default=0, description="External phase code as received")
    raw_direction: int = Field(default=0, description="External direction code as received")
    raw_countdown_alt: int = Field(default=0, description="Green-last seconds as received")

    @property
    def is_valid(self) -> bool:
        return self.status != SignalStatus.NONE and self.countdown >= 0

    def is_expired(self, now: float, expire_window: float = EXPIRE_WINDOW_S) -> bool:
        """Return ``True`` when the signal is older than *expire_window* seconds at *now*."""
        return now - self.timestamp > expire_window

    def clamped(self) -> NormalizedSignal:
        """Return this signal with a non-negative countdown."""
        if self.countdown >= 0:
            return self
        return self.model_copy(update={"countdown": 0})

    def describe(self) -> str:
        return f"{self.status.label} {self.countdown}s {self.direction.label} [{self.source}]"


def is_displayable(signal: NormalizedSignal | None, now: float, expire_window: float = EXPIRE_WINDOW_S) -> bool:
    """Sink-side gate: show *signal* only if it is valid and not expired at *now*."""
    if signal is None:
        return False
    return signal.is_valid and not signal.is_expired(now, expire_window)
