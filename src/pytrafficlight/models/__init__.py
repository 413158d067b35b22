"""Data models for traffic-light payloads and normalized signals."""

from pytrafficlight.models._base import CodeEnum, TrafficLightBaseModel
from pytrafficlight.models.codes import ExternalDirection, ExternalPhase
from pytrafficlight.models.payload import TrafficLightPayload
from pytrafficlight.models.signal import LaneDirection, NormalizedSignal, SignalStatus, is_displayable

__all__ = [
    "CodeEnum",
    "ExternalDirection",
    "ExternalPhase",
    "LaneDirection",
    "NormalizedSignal",
    "SignalStatus",
    "TrafficLightBaseModel",
    "TrafficLightPayload",
    "is_displayable",
]
