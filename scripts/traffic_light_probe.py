#!/usr/bin/env python3
"""Traffic-light pipeline probe.

Runs a :class:`~pytrafficlight.pipeline.TrafficLightPipeline` and prints
every display update it produces. Two modes:

1) ``--simulate`` replays a built-in scenario over an in-process bus, which
   exercises decoding, direction history and both clear timers without a
   navigation source;
2) otherwise, connects to the MQTT broker from ``TRAFFIC_LIGHT_MQTT_*`` and
   listens on ``TRAFFIC_LIGHT_CHANNEL``.
"""

from __future__ import annotations

import argparse
import asyncio
import logging
import sys
import time
from pathlib import Path
from typing import Any

# Allow running from repo root without installing the package.
_repo = Path(__file__).resolve().parent.parent
_src = _repo / "src"
if _src.is_dir():
    sys.path.insert(0, str(_src))

from pytrafficlight import (  # noqa: E402
    LocalEventBus,
    MqttEventSource,
    NormalizedSignal,
    TrafficLightConfig,
    TrafficLightError,
    TrafficLightPipeline,
)

_LOG = logging.getLogger("traffic_light_probe")

# (delay before publishing in seconds, payload)
_SCENARIO: list[tuple[float, dict[str, Any]]] = [
    (0.0, {"KEY_TYPE": 60073, "trafficLightStatus": 1, "redLightCountDownSeconds": 12, "dir": 1}),
    (1.0, {"KEY_TYPE": 60073, "trafficLightStatus": "1", "redLightCountDownSeconds": "11", "dir": 0}),
    (1.0, {"KEY_TYPE": 10001, "trafficLightStatus": 1}),
    (1.0, {"KEY_TYPE": 60073, "trafficLightStatus": 4, "redLightCountDownSeconds": 3, "dir": 0}),
    (1.0, {"KEY_TYPE": 60073, "trafficLightStatus": -1, "redLightCountDownSeconds": 2.0, "dir": 2}),
    (1.0, {"KEY_TYPE": 60073, "trafficLightStatus": 0, "dir": 4}),
    (1.0, {"KEY_TYPE": 60073, "trafficLightStatus": 2, "waitRound": 1, "dir": 0}),
]


def _parse_args() -> argparse.Namespace:
    parser = argparse.ArgumentParser(
        description="Print normalized traffic-light updates from a navigation source.",
    )
    parser.add_argument(
        "--simulate",
        action="store_true",
        help="Replay a built-in scenario instead of connecting to MQTT.",
    )
    parser.add_argument(
        "--duration",
        type=float,
        default=0,
        help="Maximum runtime in seconds (0 = until Ctrl+C; simulate defaults to 30).",
    )
    parser.add_argument(
        "--verbose",
        "-v",
        action="store_true",
        help="Enable debug logs.",
    )
    return parser.parse_args()


class _PrintingSink:
    def __init__(self, started_at: float) -> None:
        self._started_at = started_at
        self.updates = 0
        self.clears = 0

    def __call__(self, signal: NormalizedSignal | None) -> None:
        elapsed = time.monotonic() - self._started_at
        if signal is None:
            self.clears += 1
            print(f"[probe] +{elapsed:6.1f}s clear")
            return
        self.updates += 1
        print(
            f"[probe] +{elapsed:6.1f}s {signal.describe()} "
            f"wait={signal.wait_round} raw_status={signal.raw_status} raw_dir={signal.raw_direction}",
        )


async def _replay(bus: LocalEventBus, channel: str) -> None:
    for delay, payload in _SCENARIO:
        await asyncio.sleep(delay)
        _LOG.debug("Publishing %s", payload)
        bus.publish(channel, payload)


async def _run(args: argparse.Namespace, config: TrafficLightConfig) -> _PrintingSink:
    sink = _PrintingSink(time.monotonic())
    duration = args.duration or (30.0 if args.simulate else 0)

    if args.simulate:
        bus = LocalEventBus()
        async with TrafficLightPipeline(bus, sink, config=config):
            await _replay(bus, config.channel)
            await asyncio.sleep(max(0.0, duration - sum(delay for delay, _ in _SCENARIO)))
        return sink

    source = MqttEventSource(config)
    loop = asyncio.get_running_loop()
    await loop.run_in_executor(None, source.start)
    print(f"[probe] Listening on {config.mqtt_host}:{config.mqtt_port} topic={config.channel}")
    try:
        async with TrafficLightPipeline(source, sink, config=config):
            if duration > 0:
                await asyncio.sleep(duration)
            else:
                await asyncio.Event().wait()
    finally:
        await loop.run_in_executor(None, source.stop)
    return sink


def _main() -> int:
    args = _parse_args()
    logging.basicConfig(
        level=logging.DEBUG if args.verbose else logging.INFO,
        format="%(levelname)s %(name)s: %(message)s",
    )

    try:
        config = TrafficLightConfig.from_env()
        sink = asyncio.run(_run(args, config))
    except TrafficLightError as exc:
        print(f"[probe] {exc}", file=sys.stderr)
        return 2
    except KeyboardInterrupt:
        return 0

    print(f"[probe] Summary: updates={sink.updates} clears={sink.clears}")
    return 0


if __name__ == "__main__":
    raise SystemExit(_main())
