"""Sprite frame selection.

Pure functions mapping simulation state to a discrete sprite frame. They
are evaluated once per rendered frame, not per simulation tick.
"""

from dataclasses import dataclass
from enum import Enum


class Sequence(Enum):
    """Sprite sequences known to the renderer."""

    FLAPPY_NORMAL = "usako_normal"
    FLAPPY_JUMP = "usako_jump"
    RUN = "run"
    CROUCH = "squat"
    JUMP = "jump"


@dataclass(frozen=True)
class SpriteFrame:
    sequence: Sequence
    index: int = 0

    @property
    def asset_name(self) -> str:
        """File stem of the frame, e.g. ``run3`` or ``usako_jump``."""
        if self.sequence in (Sequence.FLAPPY_NORMAL, Sequence.FLAPPY_JUMP):
            return self.sequence.value
        return f"{self.sequence.value}{self.index + 1}"


def jump_frame(velocity: float, jump_impulse: float, frame_count: int) -> int:
    """Map vertical velocity onto a rise-then-fall frame index.

    ``jump_impulse`` (negative, take-off speed) maps to frame 0 and
    ``-jump_impulse`` to the last frame; anything outside is clamped.
    """
    progress = (velocity - jump_impulse) / (-jump_impulse - jump_impulse)
    frame = int(progress * frame_count)
    return max(0, min(frame_count - 1, frame))


def cycle_frame(anim_tick: float, ticks_per_frame: int, frame_count: int) -> int:
    """Loop through a sequence, one frame every ``ticks_per_frame``."""
    return (int(anim_tick) // ticks_per_frame) % frame_count


def select_runner_frame(
    airborne: bool,
    crouching: bool,
    velocity: float,
    anim_tick: float,
    jump_impulse: float,
    ticks_per_frame: int = 5,
    run_frames: int = 6,
    crouch_frames: int = 5,
    jump_frames: int = 6,
) -> SpriteFrame:
    """Pick the runner sprite.

    ``anim_tick`` advances proportionally to the obstacle speed, so the run
    cycle speeds up together with the game.
    """
    if airborne:
        return SpriteFrame(Sequence.JUMP, jump_frame(velocity, jump_impulse, jump_frames))
    if crouching:
        return SpriteFrame(Sequence.CROUCH, cycle_frame(anim_tick, ticks_per_frame, crouch_frames))
    return SpriteFrame(Sequence.RUN, cycle_frame(anim_tick, ticks_per_frame, run_frames))


def select_flappy_frame(velocity: float) -> SpriteFrame:
    # Wings up while rising
    if velocity < 0:
        return SpriteFrame(Sequence.FLAPPY_JUMP)
    return SpriteFrame(Sequence.FLAPPY_NORMAL)
