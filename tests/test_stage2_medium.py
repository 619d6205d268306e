"""
Shape Dunk Test Suite — Stage 2: MEDIUM

Integration and behavior tests — do components work together correctly
inside a running session?

Tests:
    - Miss / Basic / Bonus resolution and their score effects
    - Weak throws short-circuit into a Miss
    - Combo window, expiry and milestone bonus
    - Session clock countdown and deferred spawning
    - Tap / swipe gesture handling and pointer classification
    - Session presets file
"""

from pathlib import Path

import numpy as np
import pytest
import yaml

from dunk_engine.combo import (
    break_combo,
    combo_time_remaining,
    enforce_combo_window,
    register_bonus,
)
from dunk_engine.config import make_config
from dunk_engine.gestures import GestureInterpreter, GestureKind, classify
from dunk_engine.slots import FlashType
from dunk_engine.state import OutcomeKind, SessionPhase, SessionState
from dunk_engine.tokens import ColorType, LaunchResult, ShapeType

from conftest import drop_into_slot, place_token, wait_for_token

CONFIGS_DIR = Path(__file__).resolve().parent.parent / "playtest" / "configs"


# ============================================================
# 1. Outcome Resolution
# ============================================================

class TestOutcomes:
    """Each way a round can end."""

    def test_bonus(self, session):
        report = drop_into_slot(session, 0, ShapeType.RECT, ColorType.RED)
        assert report.kind is OutcomeKind.BONUS
        assert report.slot_id == 1
        assert report.points == 100 + 150 + 40
        assert session.state.score == 290
        assert session.state.combo == 1
        assert session.slots[0].flash is FlashType.BONUS

    def test_basic_success(self, session):
        report = drop_into_slot(session, 1, ShapeType.CIRCLE, ColorType.RED)
        assert report.kind is OutcomeKind.BASIC
        assert session.state.score == 100
        assert session.state.combo == 0
        assert session.slots[1].flash is FlashType.SUCCESS

    def test_shape_mismatch_is_miss(self, session):
        session.state.score = 200
        report = drop_into_slot(session, 2, ShapeType.RECT, ColorType.BLUE)
        assert report.kind is OutcomeKind.MISS
        assert report.slot_id == 3
        assert session.state.score == 150
        assert session.slots[2].flash is FlashType.MISS

    def test_miss_floors_score_at_zero(self, session):
        report = drop_into_slot(session, 0, ShapeType.TRIANGLE, ColorType.RED)
        assert report.kind is OutcomeKind.MISS
        assert report.points == 0
        assert session.state.score == 0

    def test_no_slot_at_rest_is_miss(self, session):
        spawn = session.token.position.copy()
        place_token(session, ShapeType.RECT, ColorType.RED, spawn)
        reports = [session.tick(0.1) for _ in range(4)]
        assert reports[:3] == [None, None, None]
        assert reports[3].kind is OutcomeKind.MISS
        assert reports[3].slot_id is None
        assert all(slot.flash is None for slot in session.slots)

    def test_outcome_clears_token_and_schedules_spawn(self, session):
        drop_into_slot(session, 0, ShapeType.RECT, ColorType.RED)
        assert session.token is None
        assert session.state.pending_spawn is not None
        assert session.state.rounds == 1

    def test_outcome_sends_status(self, session, display):
        drop_into_slot(session, 0, ShapeType.RECT, ColorType.GREEN)
        assert display.statuses[-1].variant == "success"

    def test_basic_breaks_streak(self, session):
        session.state.combo = 2
        session.state.last_bonus_at_ms = session.state.clock_ms
        drop_into_slot(session, 0, ShapeType.RECT, ColorType.BLUE)
        assert session.state.combo == 0
        assert session.state.last_bonus_at_ms is None


class TestWeakThrow:
    """A weak swipe is an immediate Miss with no slot evaluation."""

    def test_tiny_swipe_is_miss(self, session):
        session.state.score = 500
        session.state.combo = 2
        session.state.last_bonus_at_ms = session.state.clock_ms
        result = session.on_swipe(3.5, -3.5, 1000.0)
        assert result is LaunchResult.WEAK
        report = session.state.last_outcome
        assert report.kind is OutcomeKind.MISS
        assert report.weak_throw is True
        assert session.state.score == 450
        assert session.state.combo == 0
        assert session.token is None

    def test_weak_throw_flashes_nothing(self, session):
        session.on_swipe(300.0, 0.0, 100.0)
        assert all(slot.flash is None for slot in session.slots)

    def test_weak_throw_message_is_distinct(self, session, display):
        session.on_swipe(3.5, -3.5, 1000.0)
        assert display.statuses[-1].text == session.state.last_outcome.message
        assert "weak" in display.statuses[-1].text.lower()


# ============================================================
# 2. Combo Tracker
# ============================================================

class TestComboTracker:
    """Time-windowed streak counting."""

    def test_first_bonus_starts_at_one(self):
        state = SessionState()
        assert register_bonus(state, 1000.0, 3000.0) == 1
        assert state.last_bonus_at_ms == 1000.0

    def test_within_window_increments(self):
        state = SessionState()
        register_bonus(state, 0.0, 3000.0)
        assert register_bonus(state, 3000.0, 3000.0) == 2

    def test_outside_window_restarts(self):
        state = SessionState()
        register_bonus(state, 0.0, 3000.0)
        register_bonus(state, 1000.0, 3000.0)
        assert register_bonus(state, 4500.0, 3000.0) == 1
        assert state.best_combo == 2

    def test_expiry(self):
        state = SessionState()
        register_bonus(state, 0.0, 3000.0)
        assert enforce_combo_window(state, 3000.0, 3000.0) is False
        assert state.combo == 1
        assert enforce_combo_window(state, 3001.0, 3000.0) is True
        assert state.combo == 0
        assert state.last_bonus_at_ms is None

    def test_time_remaining(self):
        state = SessionState()
        assert combo_time_remaining(state, 0.0, 3000.0) is None
        register_bonus(state, 1000.0, 3000.0)
        assert combo_time_remaining(state, 3000.0, 3000.0) == 1000.0
        break_combo(state)
        assert combo_time_remaining(state, 3000.0, 3000.0) is None

    def test_third_bonus_hits_milestone_once(self, session):
        session.state.combo = 2
        session.state.last_bonus_at_ms = session.state.clock_ms
        report = drop_into_slot(session, 0, ShapeType.RECT, ColorType.RED)
        assert session.state.combo == 3
        assert report.milestone_bonus == 200
        assert report.points == 100 + 150 + 3 * 40 + 200

        wait_for_token(session)
        report = drop_into_slot(session, 1, ShapeType.CIRCLE, ColorType.GREEN)
        assert session.state.combo == 4
        assert report.milestone_bonus == 0
        assert report.points == 100 + 150 + 4 * 40
        assert session.state.score == 570 + 410

    def test_streak_expires_during_ticks(self, session):
        drop_into_slot(session, 0, ShapeType.RECT, ColorType.RED)
        assert session.state.combo == 1
        for _ in range(31):
            session.tick(0.1)
        assert session.state.combo == 0
        assert session.combo_remaining_ms() is None

    def test_back_to_back_bonuses_chain(self, session):
        drop_into_slot(session, 0, ShapeType.RECT, ColorType.RED)
        wait_for_token(session)
        drop_into_slot(session, 2, ShapeType.TRIANGLE, ColorType.BLUE)
        assert session.state.combo == 2
        assert session.state.best_combo == 2
        assert session.state.score == 290 + 330


# ============================================================
# 3. Session Clock & Spawning
# ============================================================

class TestSessionClock:
    """Countdown and lifecycle."""

    def test_not_started_is_inert(self, idle_session):
        assert idle_session.phase is SessionPhase.NOT_STARTED
        idle_session.tick(1.0)
        assert idle_session.state.time_remaining_ms == 60000.0
        assert idle_session.token is None

    def test_reset_starts_running(self, idle_session):
        idle_session.reset()
        assert idle_session.phase is SessionPhase.RUNNING
        assert idle_session.token is not None
        assert idle_session.token.moving is False

    def test_countdown(self, session):
        session.tick(0.5)
        assert session.state.time_remaining_ms == pytest.approx(59500.0)
        assert session.frame().time_remaining_s == 60

    def test_time_up_ends_game(self, short_session, display):
        for _ in range(25):
            short_session.tick(0.1)
        assert short_session.phase is SessionPhase.GAME_OVER
        assert short_session.state.time_remaining_ms == 0.0
        assert short_session.token is None
        assert len(display.game_overs) == 1
        assert display.game_overs[0].final_score == short_session.state.score

    def test_spawn_is_deferred(self, session):
        drop_into_slot(session, 0, ShapeType.RECT, ColorType.RED)
        session.tick(0.2)
        assert session.token is None
        session.tick(0.15)
        assert session.token is not None
        assert session.state.pending_spawn is None

    def test_spawned_token_at_bottom_center(self, session):
        token = session.token
        assert token.position[0] == pytest.approx(session.world_size[0] / 2)
        assert token.position[1] == pytest.approx(session.world_size[1] - 32 - 18)

    def test_frame_snapshot(self, session, display):
        session.tick(0.01)
        frame = display.frames[-1]
        assert frame.phase is SessionPhase.RUNNING
        assert frame.token is not None
        assert len(frame.slots) == 3
        assert frame.combo_remaining_ms is None


# ============================================================
# 4. Gestures
# ============================================================

class TestSessionGestures:
    """on_tap / on_swipe preconditions."""

    def test_tap_cycles_color(self, session):
        before = session.token.color_index
        assert session.on_tap() is True
        assert session.token.color_index == (before + 1) % 3

    def test_tap_without_token_ignored(self, session):
        session.token = None
        assert session.on_tap() is False

    def test_swipe_launches(self, session):
        assert session.on_swipe(0.0, -200.0, 1000.0) is LaunchResult.LAUNCHED
        assert np.allclose(session.token.velocity, [0.0, -340.0])

    def test_gestures_ignored_while_moving(self, session):
        session.on_swipe(0.0, -200.0, 1000.0)
        color = session.token.color_index
        assert session.on_tap() is False
        assert session.on_swipe(0.0, -200.0, 1000.0) is LaunchResult.REJECTED
        assert session.token.color_index == color

    def test_gestures_ignored_before_start(self, idle_session):
        assert idle_session.on_swipe(0.0, -200.0, 1000.0) is LaunchResult.REJECTED


class TestGestureInterpreter:
    """Pointer events → tap / swipe."""

    def test_classify(self):
        assert classify(0.0, 0.0, 100.0, moved=False).kind is GestureKind.TAP
        assert classify(0.0, -200.0, 300.0, moved=True).kind is GestureKind.SWIPE
        # Moved but too short a distance falls back to tap
        assert classify(0.0, -15.0, 300.0, moved=True).kind is GestureKind.TAP
        # Long but too quick falls back to tap
        assert classify(0.0, -200.0, 20.0, moved=True).kind is GestureKind.TAP

    def test_tap_on_token(self, session):
        gi = GestureInterpreter(session)
        x, y = session.token.position
        before = session.token.color_index
        assert gi.pointer_down(1, x, y, 0.0) is True
        gesture = gi.pointer_up(1, 100.0)
        assert gesture.kind is GestureKind.TAP
        assert session.token.color_index == (before + 1) % 3
        assert gi.capturing is False

    def test_swipe_launches_token(self, session):
        gi = GestureInterpreter(session)
        x, y = session.token.position
        gi.pointer_down(1, x, y, 0.0)
        gi.pointer_move(1, x, y - 200.0)
        gesture = gi.pointer_up(1, 1000.0)
        assert gesture.kind is GestureKind.SWIPE
        assert session.token.moving is True
        assert np.allclose(session.token.velocity, [0.0, -340.0])

    def test_pointer_away_from_token_ignored(self, session):
        gi = GestureInterpreter(session)
        assert gi.pointer_down(1, 10.0, 10.0, 0.0) is False

    def test_second_pointer_rejected(self, session):
        gi = GestureInterpreter(session)
        x, y = session.token.position
        assert gi.pointer_down(1, x, y, 0.0) is True
        assert gi.pointer_down(2, x, y, 5.0) is False
        gi.pointer_move(2, x, y - 300.0)
        assert gi.pointer.moved is False
        assert gi.pointer_up(2, 50.0) is None

    def test_cancel_releases_capture(self, session):
        gi = GestureInterpreter(session)
        x, y = session.token.position
        gi.pointer_down(1, x, y, 0.0)
        gi.pointer_cancel(1)
        assert gi.capturing is False
        assert gi.pointer_up(1, 100.0) is None
        assert gi.pointer_down(2, x, y, 200.0) is True


# ============================================================
# 5. Session Presets
# ============================================================

class TestSessionPresets:
    """Preset configuration file loading and validity."""

    def test_presets_file_exists(self):
        assert (CONFIGS_DIR / "presets.yaml").exists()

    def test_presets_have_names(self):
        with open(CONFIGS_DIR / "presets.yaml") as f:
            presets = yaml.safe_load(f)["presets"]
        assert len(presets) >= 3
        assert "standard" in {p["name"] for p in presets}

    def test_every_preset_builds(self):
        with open(CONFIGS_DIR / "presets.yaml") as f:
            presets = yaml.safe_load(f)["presets"]
        for preset in presets:
            cfg = make_config(preset)
            assert cfg.round_duration_ms > 0

    def test_practice_longer_than_blitz(self):
        with open(CONFIGS_DIR / "presets.yaml") as f:
            presets = {p["name"]: p for p in yaml.safe_load(f)["presets"]}
        practice = make_config(presets["practice"])
        blitz = make_config(presets["blitz"])
        assert practice.round_duration_ms > blitz.round_duration_ms
        assert practice.combo_window_ms > blitz.combo_window_ms
