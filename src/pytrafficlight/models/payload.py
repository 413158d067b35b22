"""Raw traffic-light payload model."""

from __future__ import annotations

from collections.abc import Mapping
from typing import Any

from pytrafficlight._constants import (
    KEY_DIRECTION,
    KEY_GREEN_LIGHT_LAST,
    KEY_RED_LIGHT_COUNTDOWN,
    KEY_TRAFFIC_LIGHT_STATUS,
    KEY_TYPE,
    KEY_WAIT_ROUND,
)
from pytrafficlight.ingestion.normalize import get_int
from pytrafficlight.models._base import TrafficLightBaseModel

# wire key -> (attribute, default)
_FIELD_MAP: dict[str, tuple[str, int]] = {
    KEY_TYPE: ("key_type", -1),
    KEY_TRAFFIC_LIGHT_STATUS: ("status", 0),
    KEY_RED_LIGHT_COUNTDOWN: ("red_countdown", 0),
    KEY_GREEN_LIGHT_LAST: ("green_last", 0),
    KEY_DIRECTION: ("direction", 0),
    KEY_WAIT_ROUND: ("wait_round", 0),
}


class TrafficLightPayload(TrafficLightBaseModel):
    """Typed view of a navigation status payload.

    Values are still in the producer's vocabulary; see
    :mod:`pytrafficlight.ingestion.normalizer` for the mapping.
    """

    key_type: int = -1
    """Message type tag (``KEY_TYPE``)."""

    status: int = 0
    """External phase code (``trafficLightStatus``)."""

    red_countdown: int = 0
    """Red countdown seconds (``redLightCountDownSeconds``)."""

    green_last: int = 0
    """Green-last seconds (``greenLightLastSecond``)."""

    direction: int = 0
    """External direction code (``dir``)."""

    wait_round: int = 0
    """Wait-round count (``waitRound``)."""

    @classmethod
    def from_payload(cls, payload: Mapping[str, Any]) -> TrafficLightPayload:
        """Extract every wire field with :func:`~pytrafficlight.ingestion.normalize.get_int`.

        Malformed or missing values fall back to the field default, so this
        never raises for a mapping input.
        """
        fields: dict[str, Any] = {
            attr: get_int(payload, wire_key, default) for wire_key, (attr, default) in _FIELD_MAP.items()
        }
        return cls(**fields, raw=dict(payload))
