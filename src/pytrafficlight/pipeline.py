"""Traffic-light pipeline.

Wires an event source to a display sink:

    event source -> decode -> normalize -> freshness engine -> sink

Everything after the source runs on one asyncio event loop. Sources may
deliver on any thread; each delivery is marshalled onto the loop with
``call_soon_threadsafe`` before it is decoded.
"""

from __future__ import annotations

import asyncio
import logging
from collections.abc import Mapping
from typing import Any

from pytrafficlight._constants import SOURCE_TEST
from pytrafficlight._redact import payload_for_log
from pytrafficlight.config import TrafficLightConfig
from pytrafficlight.exceptions import SubscriptionError
from pytrafficlight.ingestion.decoder import decode_payload
from pytrafficlight.ingestion.normalizer import PhaseDirectionNormalizer
from pytrafficlight.models.signal import LaneDirection, NormalizedSignal
from pytrafficlight.sources.base import EventSource, SubscriptionHandle
from pytrafficlight.state.freshness import FreshnessEngine, SignalSink

_logger = logging.getLogger(__name__)


class TrafficLightPipeline:
    """Turns navigation status payloads into display updates.

    Usage::

        async with TrafficLightPipeline(source, view.update) as pipeline:
            ...

    ``on_update`` receives a :class:`NormalizedSignal` to show or ``None``
    to clear, always on the pipeline's event loop.
    """

    def __init__(
        self,
        source: EventSource,
        on_update: SignalSink,
        *,
        config: TrafficLightConfig | None = None,
        loop: asyncio.AbstractEventLoop | None = None,
        logger: logging.Logger | None = None,
    ) -> None:
        self._source = source
        self._sink = on_update
        self._config = config or TrafficLightConfig()
        self._loop = loop
        self._logger = logger or _logger
        self._normalizer = PhaseDirectionNormalizer()
        self._engine: FreshnessEngine | None = None
        self._subscription: SubscriptionHandle | None = None
        # Bumped on stop; deliveries queued under an older generation are dropped.
        self._generation = 0

    # ------------------------------------------------------------------
    # Context manager lifecycle
    # ------------------------------------------------------------------

    async def __aenter__(self) -> TrafficLightPipeline:
        self.start()
        return self

    async def __aexit__(self, *exc: Any) -> None:
        self.stop()

    # ------------------------------------------------------------------
    # State
    # ------------------------------------------------------------------

    @property
    def config(self) -> TrafficLightConfig:
        return self._config

    @property
    def is_running(self) -> bool:
        """Whether the pipeline holds a subscription on its source."""
        return self._subscription is not None

    @property
    def direction_history(self) -> LaneDirection:
        return self._normalizer.direction_history

    @property
    def last_event_at(self) -> float | None:
        return self._engine.last_event_at if self._engine is not None else None

    def _ensure_loop(self) -> asyncio.AbstractEventLoop:
        if self._loop is None:
            self._loop = asyncio.get_running_loop()
        return self._loop

    def _ensure_engine(self) -> FreshnessEngine:
        if self._engine is None:
            self._engine = FreshnessEngine(
                loop=self._ensure_loop(),
                sink=self._sink,
                config=self._config,
                on_stale=self._normalizer.reset_history,
                logger=self._logger,
            )
        return self._engine

    # ------------------------------------------------------------------
    # Lifecycle
    # ------------------------------------------------------------------

    def start(self) -> None:
        """Subscribe to the source and start the heartbeat.

        No-op if already running. Without an explicit ``loop`` this must be
        called from a running event loop.

        Raises
        ------
        SubscriptionError
            If the source refuses the subscription. The pipeline stays
            stopped and no timers are started.
        """
        if self._subscription is not None:
            self._logger.debug("Pipeline already subscribed; ignoring start()")
            return

        loop = self._ensure_loop()
        generation = self._generation

        def deliver(payload: Mapping[str, Any]) -> None:
            try:
                loop.call_soon_threadsafe(self._handle_payload, generation, payload)
            except RuntimeError:
                self._logger.debug("Event loop closed; dropping payload")

        channel = self._config.channel
        try:
            handle = self._source.subscribe(channel, deliver)
        except Exception as exc:
            raise SubscriptionError(f"Subscribing to {channel!r} failed: {exc}", channel=channel) from exc

        self._subscription = handle
        self._ensure_engine().start()
        self._logger.debug("Traffic light pipeline started channel=%s", channel)

    def stop(self) -> None:
        """Unsubscribe, cancel both timers and forget direction history.

        Safe to call repeatedly.
        """
        self._generation += 1
        handle = self._subscription
        self._subscription = None

        if handle is not None:
            try:
                self._source.unsubscribe(handle)
            except Exception:
                self._logger.warning("Unsubscribe from channel=%s failed", handle.channel, exc_info=True)
            self._logger.debug("Traffic light pipeline stopped channel=%s", handle.channel)

        if self._engine is not None:
            self._engine.stop()
        self._normalizer.reset_history()

    # ------------------------------------------------------------------
    # Processing
    # ------------------------------------------------------------------

    def _handle_payload(self, generation: int, payload: Mapping[str, Any]) -> None:
        if generation != self._generation or self._subscription is None:
            return

        decoded = decode_payload(payload, type_tag=self._config.signal_type_tag)
        if decoded is None:
            return

        self._logger.debug(
            "Traffic light payload status=%s red=%s green_last=%s dir=%s wait=%s raw=%s",
            decoded.status,
            decoded.red_countdown,
            decoded.green_last,
            decoded.direction,
            decoded.wait_round,
            payload_for_log(decoded.raw),
        )
        self._process(
            raw_status=decoded.status,
            raw_direction=decoded.direction,
            red_countdown=decoded.red_countdown,
            green_last=decoded.green_last,
            wait_round=decoded.wait_round,
            source=self._config.source_tag,
        )

    def _process(
        self,
        *,
        raw_status: int,
        raw_direction: int,
        red_countdown: int,
        green_last: int,
        wait_round: int,
        source: str,
    ) -> NormalizedSignal:
        engine = self._ensure_engine()
        normalized = self._normalizer.normalize(raw_status, raw_direction, red_countdown, green_last)
        signal = NormalizedSignal(
            status=normalized.status,
            countdown=normalized.countdown,
            direction=normalized.direction,
            wait_round=wait_round,
            source=source,
            timestamp=engine.now(),
            raw_status=raw_status,
            raw_direction=raw_direction,
            raw_countdown_alt=green_last,
        )
        engine.accept(signal)
        return signal

    def simulate(
        self,
        raw_status: int,
        red_countdown: int,
        raw_direction: int,
        wait_round: int = 0,
        green_last: int = 0,
    ) -> NormalizedSignal | None:
        """Inject raw producer values as if a live payload had arrived.

        Runs normalization and the freshness engine exactly like a live
        payload, tagging the signal with source ``"test"``. Must be called
        on the pipeline's event loop. Returns the signal that was built,
        whether or not it was valid enough to be emitted, or ``None`` if the
        pipeline is not started; nothing is scheduled in that case.
        """
        if self._subscription is None:
            self._logger.debug("Pipeline not started; ignoring simulated payload status=%s", raw_status)
            return None

        signal = self._process(
            raw_status=raw_status,
            raw_direction=raw_direction,
            red_countdown=red_countdown,
            green_last=green_last,
            wait_round=wait_round,
            source=SOURCE_TEST,
        )
        self._logger.debug(
            "Simulated payload status=%s red=%s dir=%s -> %s",
            raw_status,
            red_countdown,
            raw_direction,
            signal.describe(),
        )
        return signal
