"""Phase/direction normalization.

Maps the navigation producer's phase and lane codes onto the internal
display vocabulary.

The producer intermittently omits the lane (``dir=0``). The normalizer
keeps the last concrete lane it saw and uses it for those ticks, so the
display does not flicker back to straight. Only concrete lane codes write
that history.
"""

from __future__ import annotations

from typing import NamedTuple

from pytrafficlight.ingestion.normalize import non_negative_or_zero
from pytrafficlight.models.codes import ExternalDirection, ExternalPhase
from pytrafficlight.models.signal import LaneDirection, SignalStatus

_STATUS_MAP: dict[ExternalPhase, SignalStatus] = {
    ExternalPhase.RED: SignalStatus.RED,
    ExternalPhase.GREEN: SignalStatus.GREEN,
    ExternalPhase.YELLOW: SignalStatus.YELLOW,
    ExternalPhase.GREEN_COUNTDOWN: SignalStatus.GREEN,
    ExternalPhase.TRANSITION: SignalStatus.YELLOW,
}

# Phases whose countdown is read from the red-countdown field. GREEN_COUNTDOWN
# reuses it for the last seconds of green.
_RED_COUNTDOWN_PHASES: frozenset[ExternalPhase] = frozenset(
    {ExternalPhase.RED, ExternalPhase.GREEN_COUNTDOWN, ExternalPhase.TRANSITION}
)

_CONCRETE_DIRECTIONS: dict[ExternalDirection, LaneDirection] = {
    ExternalDirection.LEFT: LaneDirection.LEFT,
    ExternalDirection.RIGHT: LaneDirection.RIGHT,
    ExternalDirection.STRAIGHT: LaneDirection.STRAIGHT,
}


class Normalized(NamedTuple):
    status: SignalStatus
    direction: LaneDirection
    countdown: int


def map_status(raw_status: int) -> SignalStatus:
    return _STATUS_MAP.get(ExternalPhase(raw_status), SignalStatus.NONE)


def select_countdown(raw_status: int, red_countdown: int) -> int:
    """Pick the authoritative countdown for *raw_status*."""
    if ExternalPhase(raw_status) in _RED_COUNTDOWN_PHASES:
        return red_countdown
    return 0


class PhaseDirectionNormalizer:
    """Stateful normalizer owning the direction history for one pipeline."""

    def __init__(self) -> None:
        self._last_direction = LaneDirection.STRAIGHT

    @property
    def direction_history(self) -> LaneDirection:
        return self._last_direction

    def reset_history(self) -> None:
        self._last_direction = LaneDirection.STRAIGHT

    def resolve_direction(self, raw_direction: int) -> LaneDirection:
        code = ExternalDirection(raw_direction)
        concrete = _CONCRETE_DIRECTIONS.get(code)
        if concrete is not None:
            self._last_direction = concrete
            return concrete
        if code == ExternalDirection.AMBIGUOUS:
            return self._last_direction
        return LaneDirection.STRAIGHT

    def normalize(self, raw_status: int, raw_direction: int, red_countdown: int, green_last: int) -> Normalized:
        """Map raw producer values to display values.

        ``green_last`` is never authoritative for the countdown; it is taken so
        a payload can be passed through unchanged.
        """
        direction = self.resolve_direction(raw_direction)
        status = map_status(raw_status)
        countdown = non_negative_or_zero(select_countdown(raw_status, red_countdown))
        return Normalized(status=status, direction=direction, countdown=countdown)
