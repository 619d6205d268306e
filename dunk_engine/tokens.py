"""
Shape Dunk Engine — Token Simulator

Per-frame motion of the thrown token: velocity integration, exponential
damping, lossy wall bounce, swipe-to-velocity launch and rest detection.

Coordinate system: screen space, x=right, y=down (so "upward" is negative y).
Units: pixels and seconds; swipe durations arrive in milliseconds.
"""

import logging
from dataclasses import dataclass, field
from enum import Enum
from typing import Optional, Tuple

import numpy as np

from dunk_engine.config import DEFAULT_CONFIG, GameConfig

logger = logging.getLogger(__name__)


# ---------- Tags ----------
class ShapeType(Enum):
    RECT = "RECT"
    CIRCLE = "CIRCLE"
    TRIANGLE = "TRIANGLE"


class ColorType(Enum):
    RED = "RED"
    GREEN = "GREEN"
    BLUE = "BLUE"


@dataclass(frozen=True)
class PaletteEntry:
    """Display attributes for a color tag."""
    color: ColorType
    label: str
    hex: str


# Ordered palette; a token's color_index points into this tuple
PALETTE = (
    PaletteEntry(ColorType.RED, "RED", "#ff5f5f"),
    PaletteEntry(ColorType.GREEN, "GREEN", "#3dd598"),
    PaletteEntry(ColorType.BLUE, "BLUE", "#4a7fff"),
)
COLOR_ORDER = tuple(entry.color for entry in PALETTE)
COLOR_MAP = {entry.color: entry for entry in PALETTE}
SHAPES = tuple(ShapeType)


class LaunchResult(Enum):
    REJECTED = "rejected"   # non-positive duration or token already moving
    WEAK = "weak"           # below speed floor or not thrown upward enough
    LAUNCHED = "launched"


# ---------- Data Classes ----------
@dataclass
class Token:
    """The thrown shape under simulation."""
    shape: ShapeType
    color_index: int
    position: np.ndarray                 # [x, y]
    radius: float = DEFAULT_CONFIG.token_radius
    velocity: np.ndarray = field(default_factory=lambda: np.zeros(2))
    moving: bool = False
    rest_timer: float = 0.0              # s spent below stop speed

    def __post_init__(self):
        self.position = np.asarray(self.position, dtype=np.float64)
        self.velocity = np.asarray(self.velocity, dtype=np.float64)

    @property
    def color(self) -> ColorType:
        return COLOR_ORDER[self.color_index]

    @property
    def speed(self) -> float:
        return float(np.linalg.norm(self.velocity))


def spawn_token(
    world_size: Tuple[float, float],
    rng: np.random.Generator,
    config: GameConfig = DEFAULT_CONFIG,
) -> Token:
    """Create a resting token with a random shape and color at the bottom center."""
    width, height = world_size
    shape = SHAPES[int(rng.integers(0, len(SHAPES)))]
    color_index = int(rng.integers(0, len(COLOR_ORDER)))
    return Token(
        shape=shape,
        color_index=color_index,
        position=np.array([width / 2.0, height - config.token_radius - config.spawn_margin]),
        radius=config.token_radius,
    )


def cycle_color(token: Optional[Token]) -> bool:
    """Advance the token to the next palette color. Only a resting token changes."""
    if token is None or token.moving:
        return False
    token.color_index = (token.color_index + 1) % len(COLOR_ORDER)
    return True


# ---------- Physics Functions ----------
def handle_boundary_bounce(
    token: Token,
    world_size: Tuple[float, float],
    bounce_factor: float = DEFAULT_CONFIG.bounce_factor,
) -> bool:
    """Clamp the token inside the world and reflect the offending velocity component.

    Returns:
        True if any wall was hit this call.
    """
    bounced = False
    r = token.radius
    for axis, extent in enumerate(world_size):
        low, high = r, max(r, extent - r)
        if token.position[axis] < low:
            token.position[axis] = low
            token.velocity[axis] *= -bounce_factor
            bounced = True
        elif token.position[axis] > high:
            token.position[axis] = high
            token.velocity[axis] *= -bounce_factor
            bounced = True
    return bounced


def step_token(
    token: Token,
    dt: float,
    world_size: Tuple[float, float],
    config: GameConfig = DEFAULT_CONFIG,
) -> None:
    """Advance one frame: integrate, damp, bounce.

    Damping is damping_per_second ** dt, so the speed decay over one second
    is the same regardless of how that second is sliced into frames.
    """
    token.position = token.position + token.velocity * dt
    token.velocity = token.velocity * (config.damping_per_second ** dt)
    handle_boundary_bounce(token, world_size, config.bounce_factor)


def update_rest_timer(token: Token, dt: float, config: GameConfig = DEFAULT_CONFIG) -> bool:
    """Accumulate time spent below stop speed and force the token to rest.

    Returns:
        True on the frame the token comes to rest (velocity zeroed, moving cleared).
    """
    if token.speed < config.stop_speed:
        token.rest_timer += dt
    else:
        token.rest_timer = 0.0

    if token.rest_timer > config.stop_delay:
        token.moving = False
        token.velocity = np.zeros(2)
        return True
    return False


def clamp_into_bounds(token: Token, world_size: Tuple[float, float]) -> None:
    """Pull a token back inside a (possibly shrunk) viewport without touching velocity."""
    width, height = world_size
    r = token.radius
    token.position[0] = np.clip(token.position[0], r, max(r, width - r))
    token.position[1] = np.clip(token.position[1], r, max(r, height - r))


# ---------- Launch ----------
def compute_launch_velocity(
    dx: float,
    dy: float,
    duration_ms: float,
    config: GameConfig = DEFAULT_CONFIG,
) -> Optional[np.ndarray]:
    """Convert a swipe vector into an initial velocity.

    Args:
        dx, dy: Swipe displacement in pixels (screen space).
        duration_ms: Time the swipe took.
        config: Speed scale and clamp limits.

    Returns:
        Velocity [vx, vy] in px/s, or None when the duration is not positive.
    """
    if duration_ms <= 0:
        return None
    length = max(float(np.hypot(dx, dy)), 1.0)
    direction = np.array([dx, dy], dtype=np.float64) / length
    px_per_ms = (length / duration_ms) * config.speed_scale
    speed = np.clip(px_per_ms * 1000.0, config.min_initial_speed, config.max_initial_speed)
    return direction * speed


def is_weak_throw(velocity: np.ndarray, config: GameConfig = DEFAULT_CONFIG) -> bool:
    """Too slow overall OR not heading upward fast enough; either alone disqualifies."""
    speed = float(np.linalg.norm(velocity))
    return speed < config.min_throw_speed or velocity[1] > -config.min_vertical_speed


def launch_token(
    token: Token,
    dx: float,
    dy: float,
    duration_ms: float,
    config: GameConfig = DEFAULT_CONFIG,
) -> LaunchResult:
    """Apply a swipe to a resting token.

    A weak throw leaves the token's velocity at zero; the caller records the Miss.
    """
    if token.moving:
        return LaunchResult.REJECTED
    velocity = compute_launch_velocity(dx, dy, duration_ms, config)
    if velocity is None:
        return LaunchResult.REJECTED

    if is_weak_throw(velocity, config):
        logger.debug("weak throw: swipe=(%.1f, %.1f) over %.0fms -> v=%s", dx, dy, duration_ms, velocity)
        return LaunchResult.WEAK

    token.velocity = velocity
    token.moving = True
    token.rest_timer = 0.0
    logger.debug("launched %s at v=(%.1f, %.1f)", token.shape.value, velocity[0], velocity[1])
    return LaunchResult.LAUNCHED
