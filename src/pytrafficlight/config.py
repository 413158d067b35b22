"""Pipeline configuration for pytrafficlight."""

from __future__ import annotations

import dataclasses
import os
from collections.abc import Callable
from typing import Any

from pytrafficlight._constants import (
    AUTO_CLEAR_FALLBACK_S,
    AUTO_CLEAR_GRACE_S,
    DEFAULT_CHANNEL,
    EXPIRE_WINDOW_S,
    HEARTBEAT_INTERVAL_S,
    SOURCE_NAVIGATION,
    TRAFFIC_LIGHT_TYPE_TAG,
)
from pytrafficlight.exceptions import TrafficLightConfigError


def _env_bool(value: str | None, default: bool) -> bool:
    if value is None:
        return default
    normalized = value.strip().lower()
    if normalized in {"1", "true", "yes", "y", "on"}:
        return True
    if normalized in {"0", "false", "no", "n", "off"}:
        return False
    return default


def _env_number(env_key: str, value: str, parse: Callable[[str], Any]) -> Any:
    try:
        return parse(value)
    except ValueError as exc:
        raise TrafficLightConfigError(f"{env_key} must be numeric, got {value!r}") from exc


@dataclasses.dataclass(frozen=True)
class TrafficLightConfig:
    """Pipeline configuration.

    Parameters
    ----------
    channel : str
        Channel identifier the pipeline subscribes to on its event source.
        Defaults to the navigation app's standard broadcast action.
    signal_type_tag : int
        ``KEY_TYPE`` value of traffic-light payloads. Payloads carrying any
        other tag share the channel and are ignored.
    source_tag : str
        Producer tag stamped on signals decoded from live payloads.
    heartbeat_interval : float
        Seconds between staleness sweeps.
    expire_window : float
        Maximum age in seconds of the last event before the signal is
        considered gone.
    auto_clear_grace : float
        Seconds the display is held past a positive countdown.
    auto_clear_fallback : float
        Seconds the display is held for signals without a countdown.
    mqtt_host : str
        Broker host used by :class:`pytrafficlight.sources.mqtt.MqttEventSource`.
    mqtt_port : int
        Broker port.
    mqtt_keepalive : int
        MQTT keepalive in seconds.
    mqtt_username : str or None
        Optional broker username.
    mqtt_password : str or None
        Optional broker password.
    mqtt_tls : bool
        Enable TLS for the broker connection.
    mqtt_client_id : str
        MQTT client id. Empty lets the broker assign one.
    """

    channel: str = DEFAULT_CHANNEL
    signal_type_tag: int = TRAFFIC_LIGHT_TYPE_TAG
    source_tag: str = SOURCE_NAVIGATION
    heartbeat_interval: float = HEARTBEAT_INTERVAL_S
    expire_window: float = EXPIRE_WINDOW_S
    auto_clear_grace: float = AUTO_CLEAR_GRACE_S
    auto_clear_fallback: float = AUTO_CLEAR_FALLBACK_S
    mqtt_host: str = "localhost"
    mqtt_port: int = 1883
    mqtt_keepalive: int = 60
    mqtt_username: str | None = None
    mqtt_password: str | None = None
    mqtt_tls: bool = False
    mqtt_client_id: str = ""

    def __post_init__(self) -> None:
        if not self.channel.strip():
            raise TrafficLightConfigError("channel must be non-empty")
        for name in ("heartbeat_interval", "expire_window", "auto_clear_fallback"):
            if getattr(self, name) <= 0:
                raise TrafficLightConfigError(f"{name} must be positive, got {getattr(self, name)}")
        if self.auto_clear_grace < 0:
            raise TrafficLightConfigError(f"auto_clear_grace must not be negative, got {self.auto_clear_grace}")

    @classmethod
    def from_env(cls, **overrides: Any) -> TrafficLightConfig:
        """Create configuration from environment variables.

        Reads optional ``TRAFFIC_LIGHT_*`` variables. Explicit keyword
        arguments override environment values.

        Parameters
        ----------
        **overrides
            Explicit field values that take precedence over env vars.

        Returns
        -------
        TrafficLightConfig
            Populated configuration.

        Raises
        ------
        TrafficLightConfigError
            If a numeric variable cannot be parsed or a value is out of range.
        """
        env = os.environ

        _ENV_STR_MAP = {
            "TRAFFIC_LIGHT_CHANNEL": "channel",
            "TRAFFIC_LIGHT_SOURCE_TAG": "source_tag",
            "TRAFFIC_LIGHT_MQTT_HOST": "mqtt_host",
            "TRAFFIC_LIGHT_MQTT_USERNAME": "mqtt_username",
            "TRAFFIC_LIGHT_MQTT_PASSWORD": "mqtt_password",
            "TRAFFIC_LIGHT_MQTT_CLIENT_ID": "mqtt_client_id",
        }
        _ENV_NUMBER_MAP: dict[str, tuple[str, Callable[[str], Any]]] = {
            "TRAFFIC_LIGHT_TYPE_TAG": ("signal_type_tag", int),
            "TRAFFIC_LIGHT_HEARTBEAT_INTERVAL": ("heartbeat_interval", float),
            "TRAFFIC_LIGHT_EXPIRE_WINDOW": ("expire_window", float),
            "TRAFFIC_LIGHT_AUTO_CLEAR_GRACE": ("auto_clear_grace", float),
            "TRAFFIC_LIGHT_AUTO_CLEAR_FALLBACK": ("auto_clear_fallback", float),
            "TRAFFIC_LIGHT_MQTT_PORT": ("mqtt_port", int),
            "TRAFFIC_LIGHT_MQTT_KEEPALIVE": ("mqtt_keepalive", int),
        }

        config_kwargs: dict[str, Any] = {}
        for env_key, field_name in _ENV_STR_MAP.items():
            val = env.get(env_key)
            if val is not None:
                config_kwargs[field_name] = val

        for env_key, (field_name, parse) in _ENV_NUMBER_MAP.items():
            val = env.get(env_key)
            if val is not None and field_name not in overrides:
                config_kwargs[field_name] = _env_number(env_key, val, parse)

        if "mqtt_tls" not in overrides:
            config_kwargs["mqtt_tls"] = _env_bool(env.get("TRAFFIC_LIGHT_MQTT_TLS"), False)

        config_kwargs.update(overrides)

        return cls(**config_kwargs)
