"""
Shape Dunk Engine — Session Context

Plain data carried through every component call. GameSession owns one
instance; nothing in the engine keeps module-level state.
"""

from dataclasses import dataclass
from enum import Enum
from typing import Optional

from dunk_engine.config import DEFAULT_CONFIG


class SessionPhase(Enum):
    NOT_STARTED = "not_started"
    RUNNING = "running"
    GAME_OVER = "game_over"


class OutcomeKind(Enum):
    MISS = "miss"
    BASIC = "basic"
    BONUS = "bonus"


@dataclass(frozen=True)
class ScheduledSpawn:
    """A deferred 'spawn next token' request.

    Only fires while its generation equals the session's spawn_generation;
    cancelling bumps the session counter instead of hunting the event down.
    """
    due_at_ms: float
    generation: int


@dataclass(frozen=True)
class OutcomeReport:
    """What a resolved round did to the session."""
    kind: OutcomeKind
    slot_id: Optional[int]
    points: int                 # applied score delta (after the zero floor)
    combo: int                  # combo after the outcome
    milestone_bonus: int
    message: str
    weak_throw: bool = False


@dataclass(frozen=True)
class GameSummary:
    final_score: int
    best_combo: int


@dataclass
class SessionState:
    """Score, combo and clock for one play session."""
    score: int = 0
    combo: int = 0
    best_combo: int = 0
    last_bonus_at_ms: Optional[float] = None
    time_remaining_ms: float = DEFAULT_CONFIG.round_duration_ms
    started: bool = False
    over: bool = False
    clock_ms: float = 0.0               # monotonic; never rewound, not even by reset
    pending_spawn: Optional[ScheduledSpawn] = None
    spawn_generation: int = 0
    rounds: int = 0
    last_outcome: Optional[OutcomeReport] = None
    summary: Optional[GameSummary] = None

    @property
    def phase(self) -> SessionPhase:
        if self.over:
            return SessionPhase.GAME_OVER
        if self.started:
            return SessionPhase.RUNNING
        return SessionPhase.NOT_STARTED

    @property
    def running(self) -> bool:
        return self.started and not self.over

    def add_score(self, delta: int) -> int:
        """Apply a score change floored at zero. Returns the delta actually applied."""
        before = self.score
        self.score = max(0, self.score + delta)
        return self.score - before

    def set_combo(self, value: int) -> None:
        self.combo = max(0, value)
        self.best_combo = max(self.best_combo, self.combo)
