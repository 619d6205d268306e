"""
Shape Dunk Engine — Display Sink

One-way interface from the engine to whatever draws the HUD and the scene.
The engine only ever hands out frozen snapshots, never its live objects.
"""

import math
from dataclasses import dataclass
from typing import Optional, Protocol, Tuple

from dunk_engine.slots import FlashType, Slot
from dunk_engine.state import GameSummary, OutcomeKind, OutcomeReport, SessionPhase
from dunk_engine.tokens import COLOR_MAP, ColorType, ShapeType, Token


_OUTCOME_VARIANT = {
    OutcomeKind.MISS: "miss",
    OutcomeKind.BASIC: "success",
    OutcomeKind.BONUS: "bonus",
}


@dataclass(frozen=True)
class StatusMessage:
    text: str
    variant: str = "info"
    duration_ms: float = 1200.0

    @classmethod
    def from_outcome(cls, report: OutcomeReport) -> "StatusMessage":
        return cls(text=report.message, variant=_OUTCOME_VARIANT[report.kind])


@dataclass(frozen=True)
class TokenView:
    shape: ShapeType
    color: ColorType
    hex: str
    position: Tuple[float, float]
    radius: float
    moving: bool

    @classmethod
    def of(cls, token: Token) -> "TokenView":
        return cls(
            shape=token.shape,
            color=token.color,
            hex=COLOR_MAP[token.color].hex,
            position=(float(token.position[0]), float(token.position[1])),
            radius=token.radius,
            moving=token.moving,
        )


@dataclass(frozen=True)
class SlotView:
    id: int
    shape: ShapeType
    bonus_color: ColorType
    rect: Tuple[float, float, float, float]   # x, y, width, height
    flash: Optional[FlashType]
    flash_timer: float

    @classmethod
    def of(cls, slot: Slot) -> "SlotView":
        area = slot.area
        return cls(
            id=slot.id,
            shape=slot.shape,
            bonus_color=slot.bonus_color,
            rect=(area.x, area.y, area.width, area.height),
            flash=slot.flash,
            flash_timer=slot.flash_timer,
        )


@dataclass(frozen=True)
class Frame:
    """Everything the HUD and renderer need for one tick."""
    phase: SessionPhase
    score: int
    combo: int
    combo_remaining_ms: Optional[float]
    time_remaining_ms: float
    slots: Tuple[SlotView, ...]
    token: Optional[TokenView]

    @property
    def time_remaining_s(self) -> int:
        return max(0, math.ceil(self.time_remaining_ms / 1000.0))


class DisplaySink(Protocol):
    def render_frame(self, frame: Frame) -> None: ...

    def show_status(self, status: StatusMessage) -> None: ...

    def show_game_over(self, summary: GameSummary) -> None: ...


class NullDisplay:
    """Discards everything. Default sink for headless sessions."""

    def render_frame(self, frame: Frame) -> None:
        pass

    def show_status(self, status: StatusMessage) -> None:
        pass

    def show_game_over(self, summary: GameSummary) -> None:
        pass
