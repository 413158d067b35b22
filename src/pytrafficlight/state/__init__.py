"""State/freshness layer.

This package decides how long a normalized signal stays on display: a
periodic staleness sweep plus a per-signal auto-clear deadline.
"""
