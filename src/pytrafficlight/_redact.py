"""Log-safe views of broker settings and navigation payloads.

The broker password must never reach a log line, and navigation payloads
are third-party bundles whose string fields can be arbitrarily long.
"""

from __future__ import annotations

from collections.abc import Mapping
from typing import TYPE_CHECKING, Any

if TYPE_CHECKING:
    from pytrafficlight.config import TrafficLightConfig

_REDACTED = "<redacted>"
_MAX_FIELD_CHARS = 128


def broker_settings_for_log(config: TrafficLightConfig) -> dict[str, Any]:
    """Connection settings of *config* with the password masked.

    An unset password stays ``None`` so "no credentials" remains visible.
    """
    return {
        "host": config.mqtt_host,
        "port": config.mqtt_port,
        "client_id": config.mqtt_client_id,
        "username": config.mqtt_username,
        "password": _REDACTED if config.mqtt_password is not None else None,
        "tls": config.mqtt_tls,
    }


def _field_for_log(value: Any, max_chars: int) -> Any:
    if value is None or isinstance(value, (bool, int, float)):
        return value
    if isinstance(value, str):
        if len(value) > max_chars:
            return f"{value[:max_chars]}…<truncated>"
        return value
    if isinstance(value, (bytes, bytearray)):
        return f"<bytes:{len(value)}b>"
    if isinstance(value, (Mapping, list, tuple)):
        # Navigation bundles are flat; nested values are never decoded.
        return f"<{type(value).__name__}:{len(value)}>"
    return f"<{type(value).__name__}>"


def payload_for_log(payload: Mapping[str, Any], *, max_chars: int = _MAX_FIELD_CHARS) -> dict[str, Any]:
    """Copy of a navigation payload with long strings cut and containers summarized."""
    return {str(key): _field_for_log(value, max_chars) for key, value in payload.items()}
