"""
Shape Dunk Engine — Combo Tracker

Consecutive Bonus hits inside a sliding time window. Expiry is polled once
per tick against the session's monotonic clock; there are no timers.
"""

from typing import Optional

from dunk_engine.state import SessionState


def register_bonus(state: SessionState, now_ms: float, window_ms: float) -> int:
    """Extend the streak if the previous Bonus is still inside the window, else restart at 1.

    Returns:
        The combo after this Bonus.
    """
    within_window = (
        state.combo > 0
        and state.last_bonus_at_ms is not None
        and now_ms - state.last_bonus_at_ms <= window_ms
    )
    state.set_combo(state.combo + 1 if within_window else 1)
    state.last_bonus_at_ms = now_ms
    return state.combo


def break_combo(state: SessionState) -> None:
    """Any non-Bonus outcome ends the streak."""
    state.set_combo(0)
    state.last_bonus_at_ms = None


def enforce_combo_window(state: SessionState, now_ms: float, window_ms: float) -> bool:
    """Drop a streak whose window has elapsed. Returns True when it expired this call."""
    if state.combo <= 0 or state.last_bonus_at_ms is None:
        return False
    if now_ms - state.last_bonus_at_ms > window_ms:
        break_combo(state)
        return True
    return False


def combo_time_remaining(state: SessionState, now_ms: float, window_ms: float) -> Optional[float]:
    """Milliseconds left in the current streak's window, or None with no active streak."""
    if state.combo <= 0 or state.last_bonus_at_ms is None:
        return None
    return max(0.0, window_ms - (now_ms - state.last_bonus_at_ms))


def is_milestone(combo: int, every: int = 3) -> bool:
    return combo > 0 and combo % every == 0
