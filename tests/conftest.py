"""
Shape Dunk Test Suite — Shared Fixtures

Provides reusable pytest fixtures for all test stages.
"""

import sys
from pathlib import Path

import numpy as np
import pytest

# Add project root to path
sys.path.insert(0, str(Path(__file__).resolve().parent.parent))

from dunk_engine.config import DEFAULT_CONFIG, make_config
from dunk_engine.session import GameSession
from dunk_engine.tokens import COLOR_ORDER, ColorType, ShapeType, Token
from playtest.envs.swipe_match_env import SwipeMatchEnv


class RecordingDisplay:
    """DisplaySink that keeps everything it is handed."""

    def __init__(self):
        self.frames = []
        self.statuses = []
        self.game_overs = []

    def render_frame(self, frame):
        self.frames.append(frame)

    def show_status(self, status):
        self.statuses.append(status)

    def show_game_over(self, summary):
        self.game_overs.append(summary)


def place_token(session, shape, color, position, moving=True, velocity=(0.0, 0.0)):
    """Replace the live token with a hand-built one."""
    session.token = Token(
        shape=shape,
        color_index=COLOR_ORDER.index(color),
        position=np.array(position, dtype=np.float64),
        radius=session.config.token_radius,
        velocity=np.array(velocity, dtype=np.float64),
        moving=moving,
    )
    return session.token


def drop_into_slot(session, slot_index, shape, color, dt=1.0 / 60.0):
    """Put a token dead-center in a slot and run one tick; returns the outcome report."""
    slot = session.slots[slot_index]
    place_token(session, shape, color, slot.area.center)
    return session.tick(dt)


def wait_for_token(session, dt=0.05, max_ticks=100):
    for _ in range(max_ticks):
        if session.token is not None or session.state.over:
            return session.token
        session.tick(dt)
    return session.token


# ---------- Session Fixtures ----------
@pytest.fixture
def display():
    return RecordingDisplay()


@pytest.fixture
def session(display):
    """Running session with a seeded RNG and a recording display."""
    s = GameSession(config=DEFAULT_CONFIG, display=display, seed=42)
    s.reset()
    return s


@pytest.fixture
def idle_session(display):
    """Session that has not been started yet."""
    return GameSession(config=DEFAULT_CONFIG, display=display, seed=7)


@pytest.fixture
def short_session(display):
    """Running session with a two-second countdown."""
    s = GameSession(config=make_config({"round_duration_ms": 2000}), display=display, seed=3)
    s.reset()
    return s


# ---------- Token Fixtures ----------
@pytest.fixture
def centered_token():
    """Resting red circle in the middle of the default world."""
    return Token(
        shape=ShapeType.CIRCLE,
        color_index=COLOR_ORDER.index(ColorType.RED),
        position=np.array([210.0, 380.0]),
    )


# ---------- Environment Fixtures ----------
@pytest.fixture
def default_env():
    env = SwipeMatchEnv()
    yield env
    env.close()


@pytest.fixture
def blitz_env():
    env = SwipeMatchEnv(session_config={"round_duration_ms": 8000, "combo_window_ms": 2000})
    yield env
    env.close()
