"""Obstacle model and procedural obstacle generation.

Generators hold no state of their own: every call draws from the random
source handed in, so tests can script exact placements.
"""

import random
from dataclasses import dataclass
from enum import Enum
from typing import List, Protocol, Tuple

from usako.core.physics import Box


class RandomSource(Protocol):
    def random(self) -> float: ...

    def randrange(self, stop: int) -> int: ...


class ObstacleCategory(Enum):
    PIPE = "pipe"      # flappy top/bottom pair sharing one gap
    GROUND = "ground"  # runner, anchored to the floor
    AIR = "air"        # runner, floating at head height


@dataclass
class Obstacle:
    """A live obstacle.

    For ``PIPE`` obstacles ``y`` and ``height`` describe the gap: the top
    segment spans ``[0, y]`` and the bottom one ``[y + height, floor]``.
    """

    x: float
    y: float
    width: float
    height: float
    category: ObstacleCategory
    scored: bool = False

    @property
    def right(self) -> float:
        return self.x + self.width

    @property
    def gap_top(self) -> float:
        return self.y

    @property
    def gap_bottom(self) -> float:
        return self.y + self.height

    def hit_boxes(self, floor: float) -> List[Box]:
        """Solid parts of the obstacle."""
        if self.category is ObstacleCategory.PIPE:
            return [
                Box(self.x, 0.0, self.width, self.gap_top),
                Box(self.x, self.gap_bottom, self.width, floor - self.gap_bottom),
            ]
        return [Box(self.x, self.y, self.width, self.height)]


# Flappy

def spawn_pipe_pair(
    rng: RandomSource,
    x: float,
    floor: float,
    gap: float,
    width: float,
    min_height: float,
) -> Obstacle:
    """Create one pipe pair with a gap top drawn uniformly from
    ``[min_height, floor - gap - min_height]``."""
    max_height = floor - gap - min_height
    gap_top = min_height + rng.random() * (max_height - min_height)
    return Obstacle(x=x, y=gap_top, width=width, height=gap, category=ObstacleCategory.PIPE)


# Runner

def air_offset_bounds(
    stand_height: float,
    crouch_height: float,
    air_height: float,
    buffer: float,
) -> Tuple[float, float]:
    """Offsets (floor to obstacle top) that clear a crouch but hit a stander.

    The lower bound is inclusive, the upper one exclusive.
    """
    lowest = crouch_height - buffer + air_height
    highest = stand_height - buffer + air_height
    return lowest, highest


def check_air_calibration(
    offset_min: float,
    offset_max: float,
    stand_height: float,
    crouch_height: float,
    air_height: float,
    buffer: float,
) -> None:
    """Raise ValueError if air obstacles could hit a crouch or miss a stander."""
    lowest, highest = air_offset_bounds(stand_height, crouch_height, air_height, buffer)
    if offset_min >= offset_max:
        raise ValueError(f"empty air offset range [{offset_min}, {offset_max})")
    if offset_min < lowest:
        raise ValueError(
            f"air offset {offset_min} would hit a crouching runner (minimum {lowest})"
        )
    if offset_max > highest:
        raise ValueError(
            f"air offset {offset_max} would clear a standing runner (maximum {highest})"
        )


def spawn_runner_obstacle(
    rng: RandomSource,
    x: float,
    ground_y: float,
    ground_chance: float,
    ground_size: Tuple[float, float],
    air_size: Tuple[float, float],
    air_offsets: Tuple[float, float],
) -> Obstacle:
    """Create a ground block (``ground_chance``) or an air block.

    A single uniform draw picks the category; air blocks then draw their
    offset above the floor from ``[air_offsets[0], air_offsets[1])``.
    """
    if rng.random() < ground_chance:
        width, height = ground_size
        return Obstacle(x, ground_y - height, width, height, ObstacleCategory.GROUND)

    width, height = air_size
    low, high = air_offsets
    offset = low + rng.random() * (high - low)
    return Obstacle(x, ground_y - offset, width, height, ObstacleCategory.AIR)


def next_spawn_delay(rng: RandomSource, base: float, speed: float, jitter: int) -> float:
    """Ticks until the next runner spawn: faster games spawn more often."""
    return base / speed + rng.randrange(jitter)


def default_rng() -> random.Random:
    return random.Random()
