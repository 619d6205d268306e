"""
Shape Dunk Engine
Token physics, slot judgment, scoring and session lifecycle.
"""

from dunk_engine.config import (
    ConfigError,
    GameConfig,
    DEFAULT_CONFIG,
    make_config,
    load_config,
)
from dunk_engine.tokens import (
    ShapeType,
    ColorType,
    PALETTE,
    Token,
    LaunchResult,
    step_token,
    compute_launch_velocity,
    launch_token,
)
from dunk_engine.slots import (
    Rect,
    Slot,
    FlashType,
    circle_coverage_in_rect,
    find_matching_slot,
)
from dunk_engine.state import OutcomeKind, OutcomeReport, SessionPhase, SessionState
from dunk_engine.display import DisplaySink, Frame, NullDisplay, StatusMessage
from dunk_engine.session import GameSession
from dunk_engine.gestures import GestureInterpreter, GestureKind

__all__ = [
    "ConfigError",
    "GameConfig",
    "DEFAULT_CONFIG",
    "make_config",
    "load_config",
    "ShapeType",
    "ColorType",
    "PALETTE",
    "Token",
    "LaunchResult",
    "step_token",
    "compute_launch_velocity",
    "launch_token",
    "Rect",
    "Slot",
    "FlashType",
    "circle_coverage_in_rect",
    "find_matching_slot",
    "OutcomeKind",
    "OutcomeReport",
    "SessionPhase",
    "SessionState",
    "DisplaySink",
    "Frame",
    "NullDisplay",
    "StatusMessage",
    "GameSession",
    "GestureInterpreter",
    "GestureKind",
]
