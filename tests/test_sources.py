from __future__ import annotations

import json
import threading
from typing import Any

import pytest

from pytrafficlight.config import TrafficLightConfig
from pytrafficlight.exceptions import EventSourceError
from pytrafficlight.sources.local import LocalEventBus
from pytrafficlight.sources.mqtt import MqttEventSource, decode_mqtt_payload


class TestLocalEventBus:
    def test_publish_reaches_only_channel_subscribers(self) -> None:
        bus = LocalEventBus()
        received: list[tuple[str, Any]] = []
        bus.subscribe("a", lambda p: received.append(("a", p)))
        bus.subscribe("b", lambda p: received.append(("b", p)))

        assert bus.publish("a", {"x": 1}) == 1
        assert received == [("a", {"x": 1})]

    def test_unsubscribe(self) -> None:
        bus = LocalEventBus()
        received: list[Any] = []
        handle = bus.subscribe("a", received.append)
        bus.unsubscribe(handle)
        bus.unsubscribe(handle)

        assert bus.publish("a", {}) == 0
        assert received == []
        assert bus.subscriber_count("a") == 0

    def test_handler_failure_isolated(self) -> None:
        bus = LocalEventBus()
        received: list[Any] = []

        def broken(_payload: Any) -> None:
            raise RuntimeError("boom")

        bus.subscribe("a", broken)
        bus.subscribe("a", received.append)

        assert bus.publish("a", {"y": 2}) == 2
        assert received == [{"y": 2}]

    def test_closed_bus_refuses_subscriptions(self) -> None:
        bus = LocalEventBus()
        bus.close()

        with pytest.raises(EventSourceError) as excinfo:
            bus.subscribe("a", lambda p: None)
        assert excinfo.value.channel == "a"

    def test_publish_from_many_threads(self) -> None:
        bus = LocalEventBus()
        received: list[Any] = []
        lock = threading.Lock()

        def handler(payload: Any) -> None:
            with lock:
                received.append(payload)

        bus.subscribe("a", handler)
        threads = [threading.Thread(target=bus.publish, args=("a", {"n": n})) for n in range(20)]
        for thread in threads:
            thread.start()
        for thread in threads:
            thread.join()

        assert sorted(p["n"] for p in received) == list(range(20))


class TestMqttPayloadDecoding:
    def test_decodes_json_object(self) -> None:
        assert decode_mqtt_payload(b'{"KEY_TYPE": 60073}') == {"KEY_TYPE": 60073}

    @pytest.mark.parametrize("payload", [b"not json", b"[1, 2]", b"\xff\xfe"])
    def test_rejects_non_object(self, payload: bytes) -> None:
        with pytest.raises(EventSourceError):
            decode_mqtt_payload(payload)


class TestMqttEventSource:
    def test_dispatch_routes_by_topic(self) -> None:
        source = MqttEventSource(TrafficLightConfig())
        received: list[Any] = []
        source.subscribe("nav/traffic", received.append)
        source.subscribe("nav/other", lambda p: received.append(("other", p)))

        body = json.dumps({"KEY_TYPE": 60073, "dir": 1}).encode()
        assert source._dispatch("nav/traffic", body) == 1  # noqa: SLF001
        assert received == [{"KEY_TYPE": 60073, "dir": 1}]

    def test_dispatch_drops_garbage(self) -> None:
        source = MqttEventSource(TrafficLightConfig())
        received: list[Any] = []
        source.subscribe("nav/traffic", received.append)

        assert source._dispatch("nav/traffic", b"\x00garbage") == 0  # noqa: SLF001
        assert received == []

    def test_unsubscribe_stops_delivery(self) -> None:
        source = MqttEventSource(TrafficLightConfig())
        received: list[Any] = []
        handle = source.subscribe("nav/traffic", received.append)
        source.unsubscribe(handle)

        assert source._dispatch("nav/traffic", b"{}") == 0  # noqa: SLF001

    def test_empty_topic_rejected(self) -> None:
        source = MqttEventSource(TrafficLightConfig())

        with pytest.raises(EventSourceError):
            source.subscribe("", lambda p: None)

    def test_connect_failure_raises(self) -> None:
        source = MqttEventSource(TrafficLightConfig(mqtt_host="127.0.0.1", mqtt_port=1))

        with pytest.raises(EventSourceError):
            source.start()
        assert not source.is_running

    def test_stop_without_start_is_noop(self) -> None:
        source = MqttEventSource(TrafficLightConfig())
        source.stop()

        assert not source.is_running
