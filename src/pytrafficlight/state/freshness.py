"""Freshness engine.

Owns the two timers that take a signal off the display:

- a heartbeat that sweeps for staleness every ``heartbeat_interval``;
- a single auto-clear deadline rearmed on every emitted signal.

Both run as callbacks on the pipeline's event loop, so they are serialized
with signal processing. Cancelling a :class:`asyncio.TimerHandle` is
synchronous; a cancelled timer never fires.
"""

from __future__ import annotations

import asyncio
import logging
from collections.abc import Callable

from pytrafficlight.config import TrafficLightConfig
from pytrafficlight.models.signal import NormalizedSignal
from pytrafficlight.state.policy import auto_clear_delay, is_stale

_logger = logging.getLogger(__name__)

SignalSink = Callable[[NormalizedSignal | None], None]
"""Display sink: receives a signal to show, or ``None`` to clear."""


class FreshnessEngine:
    """Decides when the display sink is updated or cleared."""

    def __init__(
        self,
        *,
        loop: asyncio.AbstractEventLoop,
        sink: SignalSink,
        config: TrafficLightConfig,
        on_stale: Callable[[], None] | None = None,
        logger: logging.Logger | None = None,
    ) -> None:
        self._loop = loop
        self._sink = sink
        self._config = config
        self._on_stale = on_stale
        self._logger = logger or _logger
        self._heartbeat_handle: asyncio.TimerHandle | None = None
        self._auto_clear_handle: asyncio.TimerHandle | None = None
        self._last_event_at: float | None = None
        # Set once the heartbeat has cleared a stale period; re-armed by the next emission.
        self._stale_cleared = False
        # last_event_at seen when staleness was last declared.
        self._stale_event_at: float | None = None

    @property
    def is_running(self) -> bool:
        """Whether the heartbeat is scheduled."""
        return self._heartbeat_handle is not None

    @property
    def last_event_at(self) -> float | None:
        return self._last_event_at

    @property
    def auto_clear_pending(self) -> bool:
        return self._auto_clear_handle is not None

    def now(self) -> float:
        return self._loop.time()

    def start(self) -> None:
        """Start the heartbeat. No-op if already running."""
        if self._heartbeat_handle is not None:
            return
        self._last_event_at = None
        self._stale_cleared = False
        self._heartbeat_handle = self._loop.call_later(self._config.heartbeat_interval, self._heartbeat)

    def stop(self) -> None:
        """Cancel both timers and forget the last event."""
        if self._heartbeat_handle is not None:
            self._heartbeat_handle.cancel()
            self._heartbeat_handle = None
        self._cancel_auto_clear()
        self._last_event_at = None
        self._stale_cleared = False

    def accept(self, signal: NormalizedSignal) -> bool:
        """Process a freshly normalized signal.

        Returns ``True`` if the signal was emitted to the sink.
        """
        self._last_event_at = self.now()

        if not signal.is_valid:
            self._logger.debug(
                "Dropping invalid signal status=%s countdown=%s raw_status=%s",
                signal.status.label,
                signal.countdown,
                signal.raw_status,
            )
            return False

        signal = signal.clamped()
        self._cancel_auto_clear()
        self._stale_cleared = False
        self._emit(signal)

        delay = auto_clear_delay(
            signal.countdown,
            grace=self._config.auto_clear_grace,
            fallback=self._config.auto_clear_fallback,
        )
        self._auto_clear_handle = self._loop.call_later(delay, self._auto_clear)
        self._logger.debug("Auto-clear armed in %.1fs for %s", delay, signal.describe())
        return True

    def _cancel_auto_clear(self) -> None:
        if self._auto_clear_handle is not None:
            self._auto_clear_handle.cancel()
            self._auto_clear_handle = None

    def _heartbeat(self) -> None:
        self._heartbeat_handle = self._loop.call_later(self._config.heartbeat_interval, self._heartbeat)

        if not is_stale(self.now(), self._last_event_at, self._config.expire_window):
            return

        if not self._stale_cleared:
            self._stale_cleared = True
            self._stale_event_at = self._last_event_at
            self._logger.debug("No signal within %.1fs; clearing display", self._config.expire_window)
            self._emit(None)
            self._notify_stale()
            return

        # Only invalid events arrived since the clear; the display is already
        # empty but state they left behind still has to be dropped.
        if self._last_event_at != self._stale_event_at:
            self._stale_event_at = self._last_event_at
            self._logger.debug("Stale again after invalid events; display already clear")
            self._notify_stale()

    def _notify_stale(self) -> None:
        if self._on_stale is not None:
            self._on_stale()

    def _auto_clear(self) -> None:
        self._auto_clear_handle = None
        self._logger.debug("Auto-clear deadline reached")
        self._emit(None)

    def _emit(self, signal: NormalizedSignal | None) -> None:
        try:
            self._sink(signal)
        except Exception:
            self._logger.warning("Display sink failed", exc_info=True)
