"""Deterministic freshness policy.

This module intentionally contains *no* timers or payload parsing. The
freshness engine asks it when to clear; the answers depend only on the
arguments.
"""

from __future__ import annotations


def is_stale(now: float, last_event_at: float | None, expire_window: float) -> bool:
    """Whether the last event is older than *expire_window*.

    A pipeline that has not seen any event yet is stale.
    """
    if last_event_at is None:
        return True
    return now - last_event_at > expire_window


def auto_clear_delay(countdown: int, *, grace: float, fallback: float) -> float:
    """Seconds until a freshly emitted signal is cleared if nothing replaces it.

    A positive countdown is held for *grace* seconds past its end, bridging
    the gap until the producer reports the next phase. Signals without a
    countdown are held for *fallback* seconds.
    """
    if countdown > 0:
        return countdown + grace
    return fallback
