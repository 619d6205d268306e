"""
Shape Dunk Engine — Slot Match Evaluator

Target slot layout and the coverage test that decides whether a token has
landed in a slot. The same find_matching_slot() call serves the mid-flight
dunk check and the final at-rest judgment.
"""

from dataclasses import dataclass, field
from enum import Enum
from typing import List, Optional, Sequence, Tuple

import numpy as np

from dunk_engine.config import DEFAULT_CONFIG, GameConfig
from dunk_engine.tokens import ColorType, ShapeType, Token


class FlashType(Enum):
    MISS = "miss"
    SUCCESS = "success"
    BONUS = "bonus"


# ---------- Data Classes ----------
@dataclass
class Rect:
    """Axis-aligned rectangle with closed bounds."""
    x: float = 0.0
    y: float = 0.0
    width: float = 0.0
    height: float = 0.0

    @property
    def right(self) -> float:
        return self.x + self.width

    @property
    def bottom(self) -> float:
        return self.y + self.height

    @property
    def center(self) -> np.ndarray:
        return np.array([self.x + self.width / 2.0, self.y + self.height / 2.0])

    def intersects(self, other: "Rect") -> bool:
        return not (
            self.right < other.x or other.right < self.x
            or self.bottom < other.y or other.bottom < self.y
        )


@dataclass
class Slot:
    """One of the three target regions."""
    id: int
    shape: ShapeType
    bonus_color: ColorType
    area: Rect = field(default_factory=Rect)
    flash: Optional[FlashType] = None
    flash_timer: float = 0.0


@dataclass(frozen=True)
class SlotMatch:
    slot: Slot
    coverage: float


SLOT_BLUEPRINT: Tuple[Tuple[int, ShapeType, ColorType], ...] = (
    (1, ShapeType.RECT, ColorType.RED),
    (2, ShapeType.CIRCLE, ColorType.GREEN),
    (3, ShapeType.TRIANGLE, ColorType.BLUE),
)


# ---------- Layout ----------
def make_slots() -> List[Slot]:
    """Fresh slots from the blueprint. Call layout_slots() before judging."""
    return [Slot(id=sid, shape=shape, bonus_color=color) for sid, shape, color in SLOT_BLUEPRINT]


def layout_slots(
    slots: Sequence[Slot],
    world_size: Tuple[float, float],
    config: GameConfig = DEFAULT_CONFIG,
) -> None:
    """Place slots in a row along the top edge of the world.

    Neighbouring slots are separated by slot_gap so their closed bounds never
    share an edge.
    """
    width, height = world_size
    slot_height = min(config.slot_max_height, height * config.slot_height_ratio)
    count = len(slots)
    slot_width = max(0.0, (width - config.slot_padding_x * 2 - config.slot_gap * (count - 1)) / count)
    for index, slot in enumerate(slots):
        slot.area = Rect(
            x=config.slot_padding_x + index * (slot_width + config.slot_gap),
            y=config.slot_top,
            width=slot_width,
            height=slot_height,
        )


def flash_slot(slot: Optional[Slot], flash: FlashType, config: GameConfig = DEFAULT_CONFIG) -> None:
    if slot is None:
        return
    slot.flash = flash
    slot.flash_timer = config.flash_duration


def decay_flashes(slots: Sequence[Slot], dt: float) -> None:
    """Count down slot highlights and clear them once expired."""
    for slot in slots:
        if slot.flash_timer > 0:
            slot.flash_timer -= dt
            if slot.flash_timer <= 0:
                slot.flash = None
                slot.flash_timer = 0.0


def clear_flashes(slots: Sequence[Slot]) -> None:
    for slot in slots:
        slot.flash = None
        slot.flash_timer = 0.0


# ---------- Coverage ----------
def circle_coverage_in_rect(
    token: Token,
    rect: Rect,
    slices: int = DEFAULT_CONFIG.coverage_slices,
) -> float:
    """Approximate the fraction of the token's disc lying inside rect.

    Samples a slices x slices grid over the token's bounding square, keeps
    the samples that fall in the disc (offset^2 <= r^2), and returns the
    share of those that are also inside the rectangle.

    Returns:
        Coverage in [0, 1]. 0.0 for a non-positive radius or an empty sample set.
    """
    r = token.radius
    if r <= 0:
        return 0.0

    offsets = np.linspace(-r, r, slices)
    ox, oy = np.meshgrid(offsets, offsets)
    in_disc = ox * ox + oy * oy <= r * r
    total = int(np.count_nonzero(in_disc))
    if total == 0:
        return 0.0

    sx = token.position[0] + ox[in_disc]
    sy = token.position[1] + oy[in_disc]
    inside = (sx >= rect.x) & (sx <= rect.right) & (sy >= rect.y) & (sy <= rect.bottom)
    return int(np.count_nonzero(inside)) / total


def find_matching_slot(
    token: Token,
    slots: Sequence[Slot],
    config: GameConfig = DEFAULT_CONFIG,
) -> Optional[SlotMatch]:
    """Best slot the token covers by at least match_coverage.

    Replacement requires strictly greater coverage, so ties go to the
    earlier slot.
    """
    best: Optional[SlotMatch] = None
    for slot in slots:
        coverage = circle_coverage_in_rect(token, slot.area, config.coverage_slices)
        if coverage >= config.match_coverage:
            if best is None or coverage > best.coverage:
                best = SlotMatch(slot=slot, coverage=coverage)
    return best
