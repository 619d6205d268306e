"""
Shape Dunk Play-test — Gymnasium Environment

Wraps a GameSession so scripted or learned policies can play whole sessions
headlessly. One step = pick a color (by tapping), then one swipe; the session
is advanced at a fixed frame rate until that round resolves and the next
token has spawned, or the countdown runs out.

Observation space (14 floats):
    token position / viewport (2) + token velocity / max speed (2) +
    shape one-hot (3) + color one-hot (3) + time left fraction (1) +
    combo / 10 (1) + combo window left fraction (1) + score / 1000 (1)

Action space (3 floats):
    aim [-1,1] → horizontal target across the slot row,
    power [-1,1] → 0× .. 2× the speed that would coast exactly onto the target,
    color [-1,1] → palette index 0..2
"""

import math
import sys
import os
from typing import Callable, Optional, Tuple

import gymnasium as gym
import numpy as np
from gymnasium import spaces

sys.path.insert(0, os.path.join(os.path.dirname(__file__), "..", ".."))

from dunk_engine.config import DEFAULT_CONFIG, GameConfig, make_config
from dunk_engine.display import DisplaySink
from dunk_engine.session import GameSession
from dunk_engine.slots import Slot
from dunk_engine.state import OutcomeKind
from dunk_engine.tokens import COLOR_ORDER, SHAPES, Token

OBS_DIM = 14
FRAME_DT = 1.0 / 60.0
SWIPE_DURATION_MS = 200.0
MAX_FRAMES_PER_STEP = 60 * 15


def coast_speed(distance: float, config: GameConfig = DEFAULT_CONFIG) -> float:
    """Launch speed whose damped glide covers `distance` (v / ln(1/damping) = distance)."""
    return distance * math.log(1.0 / config.damping_per_second)


def swipe_towards(
    token: Token,
    target: np.ndarray,
    power: float = 1.0,
    config: GameConfig = DEFAULT_CONFIG,
    duration_ms: float = SWIPE_DURATION_MS,
) -> Tuple[float, float, float]:
    """Swipe (dx, dy, duration_ms) that throws token towards target.

    power=1.0 asks for the speed that glides to a stop on the target.
    """
    offset = np.asarray(target, dtype=np.float64) - token.position
    distance = float(np.linalg.norm(offset))
    if distance < 1e-8:
        return 0.0, 0.0, duration_ms
    speed = coast_speed(distance, config) * power
    # speed = (length / duration) * speed_scale * 1000  →  solve for swipe length
    length = speed * duration_ms / (config.speed_scale * 1000.0)
    direction = offset / distance
    return float(direction[0] * length), float(direction[1] * length), duration_ms


def matching_slot(session: GameSession) -> Optional[Slot]:
    """Slot expecting the live token's shape."""
    if session.token is None:
        return None
    for slot in session.slots:
        if slot.shape == session.token.shape:
            return slot
    return None


class SwipeMatchEnv(gym.Env):
    """Headless shape-dunk session, one throw per step."""

    metadata = {"render_modes": ["human"]}

    def __init__(
        self,
        session_config: dict = None,
        render_mode: str = None,
        display: Optional[DisplaySink] = None,
    ):
        super().__init__()

        self.config: GameConfig = make_config(session_config)
        self.render_mode = render_mode
        self.display = display

        self.observation_space = spaces.Box(
            low=-np.inf, high=np.inf, shape=(OBS_DIM,), dtype=np.float32
        )
        self.action_space = spaces.Box(
            low=-1.0, high=1.0, shape=(3,), dtype=np.float32
        )

        self.session: GameSession = None

        # Stats tracking
        self.episode_count: int = 0
        self.throw_count: int = 0
        self.bonus_count: int = 0

    # ---------- Action decoding ----------
    def _aim_point(self, aim: float) -> np.ndarray:
        width, _ = self.session.world_size
        row_y = self.session.slots[0].area.center[1]
        return np.array([width / 2.0 + aim * width / 2.0, row_y])

    @staticmethod
    def _color_choice(value: float) -> int:
        return int(np.clip(np.rint(value + 1.0), 0, len(COLOR_ORDER) - 1))

    def heuristic_action(self) -> np.ndarray:
        """Aim at the slot for the current shape with its bonus color.

        Throws at 1.5x coasting power; the token still passes through the
        target slot but gets there in about a second.
        """
        slot = matching_slot(self.session)
        if slot is None:
            return np.zeros(3, dtype=np.float32)
        width, _ = self.session.world_size
        aim = (slot.area.center[0] - width / 2.0) / (width / 2.0)
        color = COLOR_ORDER.index(slot.bonus_color) - 1.0
        return np.array([aim, 0.5, color], dtype=np.float32)

    # ---------- Observation ----------
    def _get_observation(self) -> np.ndarray:
        session = self.session
        config = self.config
        width, height = session.world_size
        obs = np.zeros(OBS_DIM, dtype=np.float64)

        token = session.token
        if token is not None:
            obs[0:2] = token.position / np.array([width, height])
            obs[2:4] = token.velocity / config.max_initial_speed
            obs[4 + SHAPES.index(token.shape)] = 1.0
            obs[7 + token.color_index] = 1.0

        state = session.state
        obs[10] = state.time_remaining_ms / config.round_duration_ms
        obs[11] = state.combo / 10.0
        remaining = session.combo_remaining_ms()
        obs[12] = (remaining / config.combo_window_ms) if remaining is not None else 0.0
        obs[13] = state.score / 1000.0

        obs = np.nan_to_num(obs, nan=0.0, posinf=10.0, neginf=-10.0)
        return obs.astype(np.float32)

    def _info(self) -> dict:
        state = self.session.state
        report = state.last_outcome
        return {
            "score": state.score,
            "combo": state.combo,
            "best_combo": state.best_combo,
            "time_remaining_ms": state.time_remaining_ms,
            "outcome": report.kind.value if report is not None else None,
            "slot_id": report.slot_id if report is not None else None,
            "weak_throw": report.weak_throw if report is not None else False,
            "rounds": state.rounds,
        }

    def _run_until(self, done: Callable[[], bool]) -> None:
        """Tick at FRAME_DT until done() holds, the session ends, or the frame cap is hit."""
        for _ in range(MAX_FRAMES_PER_STEP):
            if self.session.state.over or done():
                return
            self.session.tick(FRAME_DT)

    # ---------- Gym API ----------
    def reset(self, seed=None, options=None):
        super().reset(seed=seed)
        self.session = GameSession(config=self.config, display=self.display, rng=self.np_random)
        self.session.reset()
        self.episode_count += 1
        return self._get_observation(), self._info()

    def step(self, action: np.ndarray):
        session = self.session
        action = np.clip(np.asarray(action, dtype=np.float64), -1.0, 1.0)

        if session.state.over:
            return self._get_observation(), 0.0, True, False, self._info()

        if session.token is None:
            self._run_until(lambda: session.token is not None)
            if session.state.over:
                return self._get_observation(), 0.0, True, False, self._info()

        score_before = session.state.score
        rounds_before = session.state.rounds

        # Colors cycle one step per tap
        wanted = self._color_choice(action[2])
        taps = (wanted - session.token.color_index) % len(COLOR_ORDER)
        for _ in range(taps):
            session.on_tap()

        target = self._aim_point(action[0])
        power = float(action[1]) + 1.0
        dx, dy, duration_ms = swipe_towards(session.token, target, power, self.config)
        session.on_swipe(dx, dy, duration_ms)
        self.throw_count += 1

        self._run_until(lambda: session.state.rounds > rounds_before and session.token is not None)

        report = session.state.last_outcome
        if session.state.rounds > rounds_before and report.kind is OutcomeKind.BONUS:
            self.bonus_count += 1

        reward = float(session.state.score - score_before)
        terminated = session.state.over
        truncated = False
        return self._get_observation(), reward, terminated, truncated, self._info()

    @property
    def bonus_rate(self) -> float:
        if self.throw_count == 0:
            return 0.0
        return self.bonus_count / self.throw_count
