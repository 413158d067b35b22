"""pytrafficlight - Async traffic-light countdown pipeline for navigation broadcasts."""

from importlib.metadata import PackageNotFoundError, version

try:
    __version__ = version("pytrafficlight")
except PackageNotFoundError:
    __version__ = "0+local"
from pytrafficlight.config import TrafficLightConfig
from pytrafficlight.exceptions import (
    EventSourceError,
    SubscriptionError,
    TrafficLightConfigError,
    TrafficLightError,
)
from pytrafficlight.ingestion.decoder import decode_payload
from pytrafficlight.ingestion.normalize import get_int
from pytrafficlight.ingestion.normalizer import PhaseDirectionNormalizer
from pytrafficlight.models import (
    ExternalDirection,
    ExternalPhase,
    LaneDirection,
    NormalizedSignal,
    SignalStatus,
    TrafficLightPayload,
    is_displayable,
)
from pytrafficlight.pipeline import TrafficLightPipeline
from pytrafficlight.sources import EventSource, LocalEventBus, MqttEventSource, SubscriptionHandle
from pytrafficlight.state.freshness import FreshnessEngine, SignalSink

__all__ = [
    "__version__",
    "EventSource",
    "EventSourceError",
    "ExternalDirection",
    "ExternalPhase",
    "FreshnessEngine",
    "LaneDirection",
    "LocalEventBus",
    "MqttEventSource",
    "NormalizedSignal",
    "PhaseDirectionNormalizer",
    "SignalSink",
    "SignalStatus",
    "SubscriptionError",
    "SubscriptionHandle",
    "TrafficLightConfig",
    "TrafficLightConfigError",
    "TrafficLightError",
    "TrafficLightPayload",
    "TrafficLightPipeline",
    "decode_payload",
    "get_int",
    "is_displayable",
]
