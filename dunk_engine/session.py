"""
Shape Dunk Engine — Session Driver

GameSession owns the session context, the three slots and the single live
token, and runs one frame of the game per tick():

    clock → slot flash decay → countdown → due spawn → combo expiry
          → token step → mid-air match → rest detection → at-rest judgment

Gestures (on_tap / on_swipe) and viewport changes (resize) arrive between
ticks on the same thread. Nothing here raises during play; inputs that make
no sense in the current state are ignored.
"""

import logging
from typing import Optional, Tuple

import numpy as np

from dunk_engine.combo import combo_time_remaining, enforce_combo_window
from dunk_engine.config import DEFAULT_CONFIG, GameConfig
from dunk_engine.display import DisplaySink, Frame, NullDisplay, SlotView, StatusMessage, TokenView
from dunk_engine.scoring import resolve_match, resolve_slot_outcome, resolve_weak_throw
from dunk_engine.slots import clear_flashes, decay_flashes, find_matching_slot, layout_slots, make_slots
from dunk_engine.state import GameSummary, OutcomeReport, ScheduledSpawn, SessionPhase, SessionState
from dunk_engine.tokens import (
    COLOR_MAP,
    LaunchResult,
    Token,
    clamp_into_bounds,
    cycle_color,
    launch_token,
    spawn_token,
    step_token,
    update_rest_timer,
)

logger = logging.getLogger(__name__)


class GameSession:
    """One countdown session of the matching game."""

    def __init__(
        self,
        config: GameConfig = DEFAULT_CONFIG,
        display: Optional[DisplaySink] = None,
        rng: Optional[np.random.Generator] = None,
        seed: Optional[int] = None,
    ):
        self.config = config
        self.display = display or NullDisplay()
        self.rng = rng if rng is not None else np.random.default_rng(seed)

        self.world_size: Tuple[float, float] = (config.world_width, config.world_height)
        self.slots = make_slots()
        layout_slots(self.slots, self.world_size, config)

        self.state = SessionState(time_remaining_ms=config.round_duration_ms)
        self.token: Optional[Token] = None

    # ---------- Queries ----------
    @property
    def phase(self) -> SessionPhase:
        return self.state.phase

    @property
    def accepts_gestures(self) -> bool:
        """A resting token exists in a running session."""
        return self.state.running and self.token is not None and not self.token.moving

    def combo_remaining_ms(self) -> Optional[float]:
        return combo_time_remaining(self.state, self.state.clock_ms, self.config.combo_window_ms)

    def frame(self) -> Frame:
        return Frame(
            phase=self.phase,
            score=self.state.score,
            combo=self.state.combo,
            combo_remaining_ms=self.combo_remaining_ms(),
            time_remaining_ms=self.state.time_remaining_ms,
            slots=tuple(SlotView.of(slot) for slot in self.slots),
            token=TokenView.of(self.token) if self.token is not None else None,
        )

    # ---------- Lifecycle ----------
    def reset(self) -> None:
        """Start (or restart) a session. Valid from any phase."""
        previous = self.state
        self.state = SessionState(
            time_remaining_ms=self.config.round_duration_ms,
            started=True,
            clock_ms=previous.clock_ms,
            spawn_generation=previous.spawn_generation + 1,
        )
        clear_flashes(self.slots)
        self.token = None
        self._spawn()
        self.display.show_status(StatusMessage("New shape! Tap to change color, then swipe", "info"))
        self.display.render_frame(self.frame())
        logger.debug("session reset at clock=%.0fms", self.state.clock_ms)

    def end_game(self) -> bool:
        """Stop a running session. Idempotent; returns False if it never started or was already over."""
        state = self.state
        if state.over or not state.started:
            return False
        state.over = True
        state.last_bonus_at_ms = None
        self.cancel_pending_spawn()
        self.token = None
        state.summary = GameSummary(final_score=state.score, best_combo=state.best_combo)
        self.display.show_status(StatusMessage("Time's up! Press restart to play again", "miss", 2200.0))
        self.display.show_game_over(state.summary)
        logger.debug("game over: score=%d best_combo=%d", state.score, state.best_combo)
        return True

    def resize(self, width: float, height: float) -> None:
        """Re-layout slots for a new viewport and keep the token inside it."""
        self.world_size = (float(width), float(height))
        layout_slots(self.slots, self.world_size, self.config)
        if self.token is not None:
            clamp_into_bounds(self.token, self.world_size)

    # ---------- Spawning ----------
    def cancel_pending_spawn(self) -> None:
        self.state.spawn_generation += 1
        self.state.pending_spawn = None

    def schedule_spawn(self) -> ScheduledSpawn:
        self.cancel_pending_spawn()
        spawn = ScheduledSpawn(
            due_at_ms=self.state.clock_ms + self.config.next_token_delay_ms,
            generation=self.state.spawn_generation,
        )
        self.state.pending_spawn = spawn
        return spawn

    def _fire_due_spawn(self) -> None:
        pending = self.state.pending_spawn
        if pending is None:
            return
        if pending.generation != self.state.spawn_generation:
            self.state.pending_spawn = None
            return
        if self.state.clock_ms >= pending.due_at_ms:
            self.state.pending_spawn = None
            self._spawn()

    def _spawn(self) -> None:
        if not self.state.running or self.token is not None:
            return
        self.token = spawn_token(self.world_size, self.rng, self.config)

    def _finish_round(self, report: OutcomeReport) -> None:
        """Every outcome ends the round: drop the token and queue the next one."""
        self.token = None
        self.state.rounds += 1
        self.state.last_outcome = report
        self.display.show_status(StatusMessage.from_outcome(report))
        if self.state.over:
            return
        self.schedule_spawn()

    # ---------- Gestures ----------
    def on_tap(self) -> bool:
        """Cycle the resting token's color."""
        if not self.accepts_gestures:
            return False
        cycle_color(self.token)
        label = COLOR_MAP[self.token.color].label
        self.display.show_status(StatusMessage(f"Color: {label}", "info", 600.0))
        return True

    def on_swipe(self, dx: float, dy: float, duration_ms: float) -> LaunchResult:
        """Throw the resting token along (dx, dy)."""
        if not self.accepts_gestures:
            return LaunchResult.REJECTED

        result = launch_token(self.token, dx, dy, duration_ms, self.config)
        if result is LaunchResult.WEAK:
            self._finish_round(resolve_weak_throw(self.state, self.config))
        elif result is LaunchResult.LAUNCHED:
            self.display.show_status(StatusMessage("Thrown! Walls bounce it back", "info", 800.0))
        return result

    # ---------- Tick ----------
    def tick(self, dt: float) -> Optional[OutcomeReport]:
        """Advance the game by dt seconds.

        Returns:
            The outcome resolved during this tick, if any.
        """
        dt = max(0.0, float(dt))
        report = self._advance(dt)
        self.display.render_frame(self.frame())
        return report

    def _advance(self, dt: float) -> Optional[OutcomeReport]:
        state = self.state
        config = self.config
        state.clock_ms += dt * 1000.0
        decay_flashes(self.slots, dt)

        if not state.running:
            return None

        state.time_remaining_ms = max(0.0, state.time_remaining_ms - dt * 1000.0)
        if state.time_remaining_ms <= 0:
            self.end_game()
            return None

        self._fire_due_spawn()
        enforce_combo_window(state, state.clock_ms, config.combo_window_ms)

        token = self.token
        if token is None or not token.moving:
            return None

        step_token(token, dt, self.world_size, config)

        match = find_matching_slot(token, self.slots, config)
        if match is not None:
            token.moving = False
            token.velocity = np.zeros(2)
            report = resolve_slot_outcome(state, token, match.slot, state.clock_ms, config)
            self._finish_round(report)
            return report

        if update_rest_timer(token, dt, config):
            report = resolve_match(
                state, token, find_matching_slot(token, self.slots, config), state.clock_ms, config,
            )
            self._finish_round(report)
            return report
        return None
