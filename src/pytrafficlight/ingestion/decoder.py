"""Payload decoding.

Filters the shared broadcast channel down to traffic-light messages and
extracts their fields into a :class:`~pytrafficlight.models.payload.TrafficLightPayload`.
"""

from __future__ import annotations

from collections.abc import Mapping
from typing import Any

from pytrafficlight._constants import TRAFFIC_LIGHT_TYPE_TAG
from pytrafficlight.models.payload import TrafficLightPayload


def decode_payload(payload: Any, *, type_tag: int = TRAFFIC_LIGHT_TYPE_TAG) -> TrafficLightPayload | None:
    """Decode a raw payload map, or return ``None`` if it is not a traffic-light message.

    The channel multiplexes unrelated message types, so a missing or
    mismatched type tag is not an error.
    """
    if not isinstance(payload, Mapping):
        return None
    decoded = TrafficLightPayload.from_payload(payload)
    if decoded.key_type != type_tag:
        return None
    return decoded
