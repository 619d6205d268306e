"""
Shape Dunk Engine — Gesture Interpreter

Turns raw pointer events into the two gestures the session understands:
a tap (cycle color) or a swipe vector (launch). Only one pointer is tracked
at a time; overlapping gestures are dropped at pointer-down.
"""

import math
from dataclasses import dataclass
from enum import Enum
from typing import Optional

from dunk_engine.config import DEFAULT_CONFIG, GameConfig
from dunk_engine.session import GameSession


class GestureKind(Enum):
    TAP = "tap"
    SWIPE = "swipe"


@dataclass(frozen=True)
class Gesture:
    kind: GestureKind
    dx: float = 0.0
    dy: float = 0.0
    duration_ms: float = 0.0


@dataclass
class PointerState:
    """The single captured pointer, if any."""
    active: bool = False
    pointer_id: Optional[int] = None
    start_x: float = 0.0
    start_y: float = 0.0
    last_x: float = 0.0
    last_y: float = 0.0
    start_ms: float = 0.0
    moved: bool = False


class GestureInterpreter:
    """Feeds classified gestures into a GameSession."""

    def __init__(self, session: GameSession):
        self.session = session
        self.pointer = PointerState()

    @property
    def capturing(self) -> bool:
        return self.pointer.active

    def pointer_down(self, pointer_id: int, x: float, y: float, t_ms: float) -> bool:
        """Capture the pointer if it grabs the resting token. Returns True on capture."""
        session = self.session
        if self.pointer.active or not session.accepts_gestures:
            return False
        token = session.token
        grab_radius = token.radius + session.config.grab_margin
        if math.hypot(x - token.position[0], y - token.position[1]) > grab_radius:
            return False

        self.pointer = PointerState(
            active=True,
            pointer_id=pointer_id,
            start_x=x,
            start_y=y,
            last_x=x,
            last_y=y,
            start_ms=t_ms,
        )
        return True

    def pointer_move(self, pointer_id: int, x: float, y: float) -> None:
        p = self.pointer
        if not p.active or pointer_id != p.pointer_id:
            return
        p.last_x = x
        p.last_y = y
        if math.hypot(x - p.start_x, y - p.start_y) > self.session.config.tap_distance:
            p.moved = True

    def pointer_up(self, pointer_id: int, t_ms: float) -> Optional[Gesture]:
        """Release the capture, classify, and dispatch to the session."""
        p = self.pointer
        if not p.active or pointer_id != p.pointer_id:
            return None
        self.pointer = PointerState()

        gesture = classify(
            dx=p.last_x - p.start_x,
            dy=p.last_y - p.start_y,
            duration_ms=t_ms - p.start_ms,
            moved=p.moved,
            config=self.session.config,
        )
        if gesture.kind is GestureKind.SWIPE:
            self.session.on_swipe(gesture.dx, gesture.dy, gesture.duration_ms)
        else:
            self.session.on_tap()
        return gesture

    def pointer_cancel(self, pointer_id: int) -> None:
        if self.pointer.active and pointer_id == self.pointer.pointer_id:
            self.pointer = PointerState()


def classify(
    dx: float,
    dy: float,
    duration_ms: float,
    moved: bool,
    config: GameConfig = DEFAULT_CONFIG,
) -> Gesture:
    """Short and still → tap; long enough and far enough → swipe; anything else → tap."""
    if not moved and duration_ms < config.tap_time_ms:
        return Gesture(GestureKind.TAP, duration_ms=duration_ms)
    if math.hypot(dx, dy) >= config.min_swipe_distance and duration_ms > config.min_swipe_time_ms:
        return Gesture(GestureKind.SWIPE, dx=dx, dy=dy, duration_ms=duration_ms)
    return Gesture(GestureKind.TAP, duration_ms=duration_ms)
