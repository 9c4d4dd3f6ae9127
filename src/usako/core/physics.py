"""Shared kinematics and AABB collision for both modes.

Integration is explicit Euler at a fixed per-tick step: there is no
delta-time scaling, one call advances one simulation tick.
"""

from dataclasses import dataclass
from typing import Iterable, Tuple


@dataclass(frozen=True)
class Box:
    """Axis-aligned bounding box, y grows downwards."""

    x: float
    y: float
    width: float
    height: float

    @property
    def right(self) -> float:
        return self.x + self.width

    @property
    def bottom(self) -> float:
        return self.y + self.height

    def shrink(self, amount: float) -> "Box":
        """Return the box pulled inwards by ``amount`` on every side."""
        return Box(
            self.x + amount,
            self.y + amount,
            self.width - 2 * amount,
            self.height - 2 * amount,
        )

    def overlaps(self, other: "Box") -> bool:
        return overlaps(self, other)


def overlaps(a: Box, b: Box) -> bool:
    """Standard strict 2D AABB intersection test."""
    return (
        a.x < b.right and a.right > b.x
        and a.y < b.bottom and a.bottom > b.y
    )


def collides(actor: Box, obstacles: Iterable[Box], buffer: float = 0.0) -> bool:
    """True if the actor, shrunk by ``buffer``, touches any obstacle box."""
    hitbox = actor.shrink(buffer) if buffer else actor
    return any(overlaps(hitbox, box) for box in obstacles)


def integrate(position: float, velocity: float, gravity: float) -> Tuple[float, float]:
    """Advance one tick: ``velocity += gravity; position += velocity``.

    Returns:
        (position, velocity) after the step
    """
    velocity += gravity
    position += velocity
    return position, velocity


def clamp_to_floor(position: float, velocity: float, floor: float) -> Tuple[float, float]:
    """Stop at the floor, killing vertical velocity on contact."""
    if position > floor:
        return floor, 0.0
    return position, velocity


def on_floor(position: float, floor: float, epsilon: float) -> bool:
    return abs(position - floor) < epsilon
