"""MQTT event source.

Bridges a broker topic per channel onto the :class:`~pytrafficlight.sources.base.EventSource`
contract. paho-mqtt runs its network loop on its own thread; handlers are
called on that thread with the decoded JSON object.
"""

from __future__ import annotations

import itertools
import json
import logging
import threading
from typing import Any, cast

import paho.mqtt.client as mqtt

from pytrafficlight._redact import broker_settings_for_log, payload_for_log
from pytrafficlight.config import TrafficLightConfig
from pytrafficlight.exceptions import EventSourceError
from pytrafficlight.sources.base import PayloadHandler, SubscriptionHandle

_logger = logging.getLogger(__name__)


def decode_mqtt_payload(payload: bytes) -> dict[str, Any]:
    """Parse MQTT payload bytes into a JSON object."""
    try:
        parsed = json.loads(payload.decode("utf-8"))
    except (UnicodeDecodeError, ValueError) as exc:
        raise EventSourceError(f"MQTT payload is not valid JSON: {exc}") from exc
    if not isinstance(parsed, dict):
        raise EventSourceError("MQTT payload decoded to non-object JSON")
    return parsed


class MqttEventSource:
    """Threaded paho-mqtt client delivering JSON payloads per topic."""

    def __init__(
        self,
        config: TrafficLightConfig,
        *,
        logger: logging.Logger | None = None,
    ) -> None:
        self._config = config
        self._logger = logger or _logger
        self._lock = threading.Lock()
        self._tokens = itertools.count(1)
        self._handlers: dict[str, dict[int, PayloadHandler]] = {}
        self._client: mqtt.Client | None = None
        self._running = False

    @property
    def is_running(self) -> bool:
        """Whether the MQTT network loop is running."""
        return self._running

    def start(self) -> None:
        """Connect to the configured broker and start the network loop.

        Raises :class:`~pytrafficlight.exceptions.EventSourceError` if the
        initial connection cannot be opened.
        """
        self.stop()
        config = self._config
        self._logger.debug("MQTT start requested %s", broker_settings_for_log(config))

        client = mqtt.Client(
            callback_api_version=cast(Any, mqtt).CallbackAPIVersion.VERSION2,
            client_id=config.mqtt_client_id,
            protocol=mqtt.MQTTv311,
        )
        client.enable_logger(self._logger)
        if config.mqtt_username:
            client.username_pw_set(config.mqtt_username, config.mqtt_password)
        if config.mqtt_tls:
            client.tls_set()

        def on_connect(
            c: mqtt.Client,
            _userdata: Any,
            _flags: Any,
            reason_code: Any,
            _properties: Any,
        ) -> None:
            if reason_code.is_failure:
                self._logger.warning("MQTT connect failed: %s", reason_code)
                return
            self._logger.debug("MQTT connected reason=%s", reason_code)
            # Subscriptions do not survive a reconnect with a clean session.
            for channel in self._channels():
                self._logger.debug("MQTT subscribing topic=%s", channel)
                c.subscribe(channel, qos=0)

        def on_message(_c: mqtt.Client, _userdata: Any, msg: mqtt.MQTTMessage) -> None:
            self._dispatch(msg.topic, msg.payload)

        def on_disconnect(
            _client: mqtt.Client,
            _userdata: Any,
            _disconnect_flags: Any,
            reason_code: Any,
            _properties: Any,
        ) -> None:
            if self._running:
                self._logger.debug("MQTT disconnected: %s", reason_code)

        client.on_connect = on_connect
        client.on_message = on_message
        client.on_disconnect = on_disconnect

        try:
            client.connect(config.mqtt_host, config.mqtt_port, keepalive=config.mqtt_keepalive)
        except (OSError, ValueError) as exc:
            raise EventSourceError(
                f"MQTT connect to {config.mqtt_host}:{config.mqtt_port} failed: {exc}",
            ) from exc
        client.loop_start()

        self._client = client
        self._running = True
        self._logger.debug("MQTT network loop started")

    def stop(self) -> None:
        """Stop and disconnect the current client if running."""
        client = self._client
        self._client = None
        was_running = self._running
        self._running = False

        if client is None:
            return
        try:
            if was_running:
                self._logger.debug("MQTT disconnect requested")
                client.disconnect()
        finally:
            client.loop_stop()
            self._logger.debug("MQTT network loop stopped")

    def subscribe(self, channel: str, handler: PayloadHandler) -> SubscriptionHandle:
        if not channel:
            raise EventSourceError("MQTT topic must be non-empty", channel=channel)
        with self._lock:
            token = next(self._tokens)
            handlers = self._handlers.setdefault(channel, {})
            first = not handlers
            handlers[token] = handler
        client = self._client
        if first and client is not None and self._running:
            client.subscribe(channel, qos=0)
        return SubscriptionHandle(channel=channel, token=token)

    def unsubscribe(self, handle: SubscriptionHandle) -> None:
        with self._lock:
            handlers = self._handlers.get(handle.channel)
            if handlers is None or handlers.pop(handle.token, None) is None:
                return
            last = not handlers
            if last:
                self._handlers.pop(handle.channel, None)
        client = self._client
        if last and client is not None and self._running:
            client.unsubscribe(handle.channel)

    def _channels(self) -> list[str]:
        with self._lock:
            return list(self._handlers)

    def _dispatch(self, topic: str, payload: bytes) -> int:
        try:
            parsed = decode_mqtt_payload(payload)
        except EventSourceError:
            self._logger.debug("MQTT payload parse failure topic=%s", topic, exc_info=True)
            return 0
        self._logger.debug("Received PUBLISH topic=%s parsed=%s", topic, payload_for_log(parsed))

        with self._lock:
            handlers = list(self._handlers.get(topic, {}).values())
        for handler in handlers:
            try:
                handler(parsed)
            except Exception:
                self._logger.warning("Handler failed on topic=%s", topic, exc_info=True)
        return len(handlers)
