from __future__ import annotations

import pytest

from pytrafficlight.config import TrafficLightConfig
from pytrafficlight.models.signal import LaneDirection, NormalizedSignal, SignalStatus
from pytrafficlight.state.freshness import FreshnessEngine
from pytrafficlight.state.policy import auto_clear_delay, is_stale


def _signal(status: SignalStatus = SignalStatus.RED, countdown: int = 20) -> NormalizedSignal:
    return NormalizedSignal(status=status, countdown=countdown, direction=LaneDirection.LEFT)


def _engine(loop, sink, **kwargs) -> FreshnessEngine:
    return FreshnessEngine(loop=loop, sink=sink, config=TrafficLightConfig(), **kwargs)


class TestPolicy:
    def test_never_seen_is_stale(self) -> None:
        assert is_stale(0.0, None, 10.0)

    def test_stale_only_strictly_past_window(self) -> None:
        assert not is_stale(10.0, 0.0, 10.0)
        assert is_stale(10.5, 0.0, 10.0)

    def test_auto_clear_delay(self) -> None:
        assert auto_clear_delay(20, grace=5.0, fallback=15.0) == 25.0
        assert auto_clear_delay(0, grace=5.0, fallback=15.0) == 15.0


class TestAutoClear:
    def test_red_countdown_20_clears_at_25s(self, manual_loop, sink) -> None:
        engine = _engine(manual_loop, sink)

        assert engine.accept(_signal(countdown=20))
        manual_loop.advance(24.5)
        assert sink.clear_times == []
        manual_loop.advance(0.5)

        assert sink.clear_times == [25.0]

    def test_zero_countdown_clears_at_15s(self, manual_loop, sink) -> None:
        engine = _engine(manual_loop, sink)

        engine.accept(_signal(status=SignalStatus.GREEN, countdown=0))
        manual_loop.advance(14.5)
        assert sink.clear_times == []
        manual_loop.advance(0.5)

        assert sink.clear_times == [15.0]

    def test_new_signal_cancels_pending_auto_clear(self, manual_loop, sink) -> None:
        engine = _engine(manual_loop, sink)

        engine.accept(_signal(countdown=3))
        manual_loop.advance(7.0)
        engine.accept(_signal(countdown=10))
        manual_loop.advance(2.0)
        assert sink.clear_times == []
        manual_loop.advance(13.0)

        # 7 + 10 + 5
        assert sink.clear_times == [22.0]
        assert not engine.auto_clear_pending

    def test_emission_order_cancel_emit_rearm(self, manual_loop, sink) -> None:
        engine = _engine(manual_loop, sink)
        engine.accept(_signal(countdown=1))

        assert [s.countdown for s in sink.signals] == [1]
        assert engine.auto_clear_pending
        assert manual_loop.pending() == 1


class TestValidity:
    def test_invalid_signal_dropped_but_refreshes_last_event(self, manual_loop, sink) -> None:
        engine = _engine(manual_loop, sink)
        manual_loop.advance(3.0)

        assert not engine.accept(_signal(status=SignalStatus.NONE, countdown=0))
        assert sink.calls == []
        assert not engine.auto_clear_pending
        assert engine.last_event_at == 3.0

    def test_negative_countdown_is_invalid(self, manual_loop, sink) -> None:
        engine = _engine(manual_loop, sink)

        assert not engine.accept(_signal(countdown=-1))
        assert sink.calls == []

    def test_none_status_never_reaches_sink(self, manual_loop, sink) -> None:
        engine = _engine(manual_loop, sink)
        engine.start()
        engine.accept(_signal(countdown=5))
        engine.accept(_signal(status=SignalStatus.NONE, countdown=0))
        manual_loop.advance(60.0)

        assert all(s is None or s.status != SignalStatus.NONE for _, s in sink.calls)


class TestHeartbeat:
    def test_first_tick_clears_when_nothing_seen(self, manual_loop, sink) -> None:
        stale_calls: list[float] = []
        engine = _engine(manual_loop, sink, on_stale=lambda: stale_calls.append(manual_loop.time()))
        engine.start()

        manual_loop.advance(5.0)

        assert sink.clear_times == [1.0]
        assert stale_calls == [1.0]

    def test_stale_clear_emitted_once(self, manual_loop, sink) -> None:
        stale_calls: list[float] = []
        engine = _engine(manual_loop, sink, on_stale=lambda: stale_calls.append(manual_loop.time()))
        engine.start()
        manual_loop.advance(0.5)
        engine.accept(_signal(countdown=20))

        manual_loop.advance(20.0)

        # Stale at the first tick more than 10s after t=0.5.
        assert sink.clear_times == [11.0]
        assert stale_calls == [11.0]

        manual_loop.advance(30.0)
        # Only the auto-clear joins it; the heartbeat stays quiet.
        assert sink.clear_times == [11.0, 25.5]
        assert stale_calls == [11.0]

    def test_valid_signal_rearms_stale_clear(self, manual_loop, sink) -> None:
        engine = _engine(manual_loop, sink)
        engine.start()
        manual_loop.advance(1.5)
        assert sink.clear_times == [1.0]

        engine.accept(_signal(countdown=30))
        manual_loop.advance(11.0)

        assert sink.clear_times == [1.0, 12.0]

    def test_invalid_signal_does_not_rearm_stale_clear(self, manual_loop, sink) -> None:
        engine = _engine(manual_loop, sink)
        engine.start()
        manual_loop.advance(1.5)
        engine.accept(_signal(status=SignalStatus.NONE, countdown=0))
        manual_loop.advance(30.0)

        assert sink.clear_times == [1.0]

    def test_invalid_events_after_clear_declare_staleness_again(self, manual_loop, sink) -> None:
        stale_calls: list[float] = []
        engine = _engine(manual_loop, sink, on_stale=lambda: stale_calls.append(manual_loop.time()))
        engine.start()
        manual_loop.advance(1.5)
        engine.accept(_signal(status=SignalStatus.NONE, countdown=0))
        manual_loop.advance(30.0)

        # No second clear, but the new stale period is still announced once.
        assert sink.clear_times == [1.0]
        assert stale_calls == [1.0, 12.0]

    def test_fresh_events_keep_heartbeat_quiet(self, manual_loop, sink) -> None:
        engine = _engine(manual_loop, sink)
        engine.start()
        for _ in range(6):
            manual_loop.advance(0.5)
            engine.accept(_signal(countdown=30))
            manual_loop.advance(4.5)

        assert sink.clear_times == []

    def test_heartbeat_survives_sink_failure(self, manual_loop) -> None:
        calls: list[float] = []

        def failing_sink(signal: NormalizedSignal | None) -> None:
            calls.append(manual_loop.time())
            raise RuntimeError("view detached")

        engine = _engine(manual_loop, failing_sink)
        engine.start()
        manual_loop.advance(2.0)
        engine.accept(_signal(countdown=0))
        manual_loop.advance(12.0)

        assert calls == [1.0, 2.0, 13.0]
        assert engine.is_running

    def test_start_is_idempotent(self, manual_loop, sink) -> None:
        engine = _engine(manual_loop, sink)
        engine.start()
        engine.start()

        assert manual_loop.pending() == 1

    def test_stop_cancels_both_timers(self, manual_loop, sink) -> None:
        engine = _engine(manual_loop, sink)
        engine.start()
        manual_loop.advance(0.5)
        engine.accept(_signal(countdown=5))
        engine.stop()
        engine.stop()

        manual_loop.advance(60.0)

        assert sink.clear_times == []
        assert manual_loop.pending() == 0
        assert not engine.is_running
        assert engine.last_event_at is None


@pytest.mark.parametrize("countdown", [1, 7, 42])
def test_auto_clear_tracks_countdown(manual_loop, sink, countdown: int) -> None:
    engine = _engine(manual_loop, sink)
    engine.accept(_signal(countdown=countdown))
    manual_loop.advance(100.0)

    assert sink.clear_times == [countdown + 5.0]
