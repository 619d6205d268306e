"""
Shape Dunk Engine — Outcome Resolver

Turns a slot match (or the lack of one) into Miss / Basic / Bonus and applies
it to the session: score, combo and slot highlight.

Score rule (defaults):
    Miss   → -50 (score floored at 0), combo broken
    Basic  → +100, combo broken
    Bonus  → +100 base +150 bonus +40 × combo, +200 when combo hits a multiple of 3
The combo used in the Bonus formula is the value after this hit is counted.
"""

import logging
from typing import Optional

from dunk_engine.combo import break_combo, is_milestone, register_bonus
from dunk_engine.config import DEFAULT_CONFIG, GameConfig
from dunk_engine.slots import FlashType, Slot, SlotMatch, flash_slot
from dunk_engine.state import OutcomeKind, OutcomeReport, SessionState
from dunk_engine.tokens import Token

logger = logging.getLogger(__name__)

MISS_MESSAGE = "MISS! The shape doesn't fit that slot"
NO_SLOT_MESSAGE = "MISS! No slot was covered"
WEAK_THROW_MESSAGE = "Throw was too weak!"


def resolve_miss(
    state: SessionState,
    slot: Optional[Slot] = None,
    message: str = MISS_MESSAGE,
    config: GameConfig = DEFAULT_CONFIG,
    weak_throw: bool = False,
) -> OutcomeReport:
    flash_slot(slot, FlashType.MISS, config)
    applied = state.add_score(-config.miss_penalty)
    break_combo(state)
    return OutcomeReport(
        kind=OutcomeKind.MISS,
        slot_id=slot.id if slot is not None else None,
        points=applied,
        combo=state.combo,
        milestone_bonus=0,
        message=message,
        weak_throw=weak_throw,
    )


def resolve_basic(state: SessionState, slot: Slot, config: GameConfig = DEFAULT_CONFIG) -> OutcomeReport:
    """Shape matched, color did not. A plain hit still breaks the streak."""
    flash_slot(slot, FlashType.SUCCESS, config)
    applied = state.add_score(config.base_points)
    break_combo(state)
    return OutcomeReport(
        kind=OutcomeKind.BASIC,
        slot_id=slot.id,
        points=applied,
        combo=state.combo,
        milestone_bonus=0,
        message=f"Shape match! +{config.base_points}",
    )


def resolve_bonus(
    state: SessionState,
    slot: Slot,
    now_ms: float,
    config: GameConfig = DEFAULT_CONFIG,
) -> OutcomeReport:
    flash_slot(slot, FlashType.BONUS, config)
    combo = register_bonus(state, now_ms, config.combo_window_ms)

    gained = config.base_points + config.bonus_points + combo * config.combo_step_bonus
    milestone = config.milestone_bonus if is_milestone(combo, config.milestone_every) else 0
    applied = state.add_score(gained + milestone)

    message = f"Perfect color! x{combo} combo"
    if milestone:
        message += f" +{milestone} bonus!"
    return OutcomeReport(
        kind=OutcomeKind.BONUS,
        slot_id=slot.id,
        points=applied,
        combo=combo,
        milestone_bonus=milestone,
        message=message,
    )


def resolve_slot_outcome(
    state: SessionState,
    token: Token,
    slot: Slot,
    now_ms: float,
    config: GameConfig = DEFAULT_CONFIG,
) -> OutcomeReport:
    """Judge a token that landed in slot by shape first, then color."""
    if token.shape != slot.shape:
        report = resolve_miss(state, slot, MISS_MESSAGE, config)
    elif token.color == slot.bonus_color:
        report = resolve_bonus(state, slot, now_ms, config)
    else:
        report = resolve_basic(state, slot, config)
    logger.debug(
        "slot %d: %s %s -> %s (%+d, combo %d)",
        slot.id, token.color.value, token.shape.value, report.kind.value, report.points, report.combo,
    )
    return report


def resolve_match(
    state: SessionState,
    token: Token,
    match: Optional[SlotMatch],
    now_ms: float,
    config: GameConfig = DEFAULT_CONFIG,
) -> OutcomeReport:
    """At-rest judgment: no qualifying slot is a Miss without a highlight."""
    if match is None:
        return resolve_miss(state, None, NO_SLOT_MESSAGE, config)
    return resolve_slot_outcome(state, token, match.slot, now_ms, config)


def resolve_weak_throw(state: SessionState, config: GameConfig = DEFAULT_CONFIG) -> OutcomeReport:
    """A swipe that failed the strength/verticality test. No slot is evaluated."""
    return resolve_miss(state, None, WEAK_THROW_MESSAGE, config, weak_throw=True)
