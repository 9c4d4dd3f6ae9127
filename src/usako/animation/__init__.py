"""Animation module for the arcade."""

from usako.animation.frames import (
    Sequence,
    SpriteFrame,
    cycle_frame,
    jump_frame,
    select_flappy_frame,
    select_runner_frame,
)

__all__ = [
    "Sequence",
    "SpriteFrame",
    "cycle_frame",
    "jump_frame",
    "select_flappy_frame",
    "select_runner_frame",
]
