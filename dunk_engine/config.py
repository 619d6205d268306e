"""
Shape Dunk Engine — Tuning Configuration

Every gameplay constant lives in one dataclass so a session can be built from
the defaults, from a dict of overrides, or from a named YAML preset.

Units: pixels, seconds for physics, milliseconds for session timers.
"""

from dataclasses import asdict, dataclass, fields
from pathlib import Path
from typing import List, Optional

import yaml


class ConfigError(ValueError):
    """Raised when a preset or override cannot be turned into a GameConfig."""


@dataclass(frozen=True)
class GameConfig:
    """All tuning constants for a session."""
    # Score rule
    base_points: int = 100
    bonus_points: int = 150
    miss_penalty: int = 50
    combo_step_bonus: int = 40
    milestone_bonus: int = 200
    milestone_every: int = 3

    # Token
    token_radius: float = 32.0
    spawn_margin: float = 18.0       # px between token and bottom edge at spawn

    # Gestures
    min_swipe_distance: float = 22.0
    tap_distance: float = 8.0
    tap_time_ms: float = 240.0
    min_swipe_time_ms: float = 30.0
    grab_margin: float = 12.0        # px of slack around the token for pointer-down

    # Launch
    speed_scale: float = 1.7
    min_initial_speed: float = 120.0
    max_initial_speed: float = 1200.0
    min_throw_speed: float = 250.0   # px/s
    min_vertical_speed: float = 200.0  # px/s upward

    # Motion
    stop_speed: float = 35.0
    stop_delay: float = 0.35         # s
    bounce_factor: float = 0.75
    damping_per_second: float = 0.5  # speed halves per second

    # Judgment
    match_coverage: float = 0.7
    coverage_slices: int = 15
    flash_duration: float = 0.45     # s

    # Session
    next_token_delay_ms: float = 300.0
    combo_window_ms: float = 3000.0
    round_duration_ms: float = 60000.0

    # Layout
    world_width: float = 420.0
    world_height: float = 760.0
    slot_padding_x: float = 18.0
    slot_top: float = 14.0
    slot_gap: float = 8.0
    slot_max_height: float = 120.0
    slot_height_ratio: float = 0.2

    def to_dict(self) -> dict:
        return asdict(self)


DEFAULT_CONFIG = GameConfig()

_FIELD_NAMES = {f.name for f in fields(GameConfig)}


def make_config(overrides: Optional[dict] = None, base: GameConfig = DEFAULT_CONFIG) -> GameConfig:
    """Merge overrides on top of a base config.

    Raises:
        ConfigError: on unknown keys or values that break basic sanity rules.
    """
    overrides = dict(overrides or {})
    overrides.pop("name", None)
    overrides.pop("description", None)

    unknown = set(overrides) - _FIELD_NAMES
    if unknown:
        raise ConfigError(f"Unknown config keys: {sorted(unknown)}")

    config = GameConfig(**{**base.to_dict(), **overrides})
    _validate(config)
    return config


def _validate(config: GameConfig) -> None:
    if config.token_radius <= 0:
        raise ConfigError("token_radius must be positive")
    if config.coverage_slices < 2:
        raise ConfigError("coverage_slices must be at least 2")
    if not 0.0 < config.match_coverage <= 1.0:
        raise ConfigError("match_coverage must be in (0, 1]")
    if not 0.0 < config.damping_per_second <= 1.0:
        raise ConfigError("damping_per_second must be in (0, 1]")
    if not 0.0 <= config.bounce_factor < 1.0:
        raise ConfigError("bounce_factor must be in [0, 1)")
    if config.min_initial_speed > config.max_initial_speed:
        raise ConfigError("min_initial_speed exceeds max_initial_speed")
    if config.round_duration_ms <= 0 or config.combo_window_ms <= 0:
        raise ConfigError("round_duration_ms and combo_window_ms must be positive")
    if config.milestone_every <= 0:
        raise ConfigError("milestone_every must be positive")


def load_presets(path: Path) -> List[dict]:
    """Load the raw preset list from YAML."""
    with open(path) as f:
        data = yaml.safe_load(f) or {}
    presets = data.get("presets")
    if not isinstance(presets, list):
        raise ConfigError(f"{path}: expected a top-level 'presets' list")
    return presets


def load_config(path: Path, preset: str = "standard") -> GameConfig:
    """Build a GameConfig from the named preset in a YAML presets file."""
    for entry in load_presets(path):
        if entry.get("name") == preset:
            return make_config(entry)
    raise ConfigError(f"Preset '{preset}' not found in {path}")
