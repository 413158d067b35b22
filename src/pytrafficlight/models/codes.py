"""External (navigation producer) code vocabulary."""

from __future__ import annotations

from pytrafficlight.models._base import CodeEnum


class ExternalPhase(CodeEnum):
    """Phase code sent in ``trafficLightStatus``.

    ``GREEN_COUNTDOWN`` is the last seconds of green before the light turns
    red; its timer is carried in the red-countdown field. ``TRANSITION`` is
    a short 2-3 s pulse between phases.
    """

    UNKNOWN = 0
    RED = 1
    GREEN = 2
    YELLOW = 3
    GREEN_COUNTDOWN = 4
    TRANSITION = -1


class ExternalDirection(CodeEnum):
    """Lane direction code sent in ``dir``.

    ``AMBIGUOUS`` (0) is sent on ticks where the producer omits the lane.
    """

    UNKNOWN = -1
    AMBIGUOUS = 0
    LEFT = 1
    RIGHT = 2
    STRAIGHT = 4
