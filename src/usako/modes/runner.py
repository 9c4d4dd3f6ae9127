"""Runner mode - jump over ground blocks, duck under air blocks.

Score ticks up while running, obstacle speed ramps up over time and the
spawn cadence follows the speed.
"""

import logging
from typing import List, Optional, Tuple

from usako.animation.frames import SpriteFrame, select_runner_frame
from usako.core.events import EventType
from usako.core.physics import Box, clamp_to_floor, integrate, on_floor
from usako.modes.base import GameMode, GamePhase, Simulation, SimulationState
from usako.modes.obstacles import Obstacle, next_spawn_delay, spawn_runner_obstacle

logger = logging.getLogger(__name__)


class RunnerMode(Simulation):
    mode = GameMode.RUNNER
    display_name = "Usako Run!"
    settings_section = "runner"

    idle_prompt = "PRESS UP TO START"

    def __init__(self, *args, **kwargs):
        self._sizes: Optional[dict] = None
        super().__init__(*args, **kwargs)

    # Sizes
    def _pose_sizes(self) -> dict:
        """Display sizes derived from the sprites, configured sizes otherwise."""
        if self._sizes is not None:
            return self._sizes

        cfg = self.config
        scale = 1.0
        stand = (cfg.stand_width, cfg.stand_height)
        crouch = (cfg.crouch_width, cfg.crouch_height)

        run = self.sprites.get("run1")
        if run is not None:
            scale = cfg.stand_height / run.height
            stand = (run.width * scale, cfg.stand_height)
        squat = self.sprites.get("squat1")
        if squat is not None:
            squat_scale = scale * cfg.crouch_scale
            crouch = (squat.width * squat_scale, squat.height * squat_scale)

        self._sizes = {"scale": scale, "stand": stand, "crouch": crouch}
        return self._sizes

    def _jump_size(self) -> Tuple[float, float]:
        """Airborne size follows the current jump frame's sprite."""
        sizes = self._pose_sizes()
        sprite = self.sprites.get(self.sprite_frame().asset_name)
        if sprite is None:
            return sizes["stand"]
        factor = sizes["scale"] * self.config.jump_scale
        return sprite.width * factor, sprite.height * factor

    @property
    def airborne(self) -> bool:
        return abs(self.state.actor_y - self.config.ground_y) > self.config.airborne_epsilon

    @property
    def scroll_speed(self) -> float:
        return self.state.speed

    @property
    def hitbox_buffer(self) -> float:
        return self.config.hitbox_buffer

    def initial_state(self) -> SimulationState:
        cfg = self.config
        return SimulationState(
            actor_y=cfg.ground_y,
            speed=cfg.initial_speed,
            spawn_delay=next_spawn_delay(
                self.rng, cfg.spawn_base, cfg.initial_speed, cfg.spawn_jitter
            ),
        )

    # Input
    def on_jump(self) -> None:
        # Grounded only: no double or air jumps
        if on_floor(self.state.actor_y, self.config.ground_y, self.config.floor_epsilon):
            self.state.actor_vy = self.config.jump_strength

    def on_crouch(self, pressed: bool) -> bool:
        state = self.state
        if not pressed:
            state.crouching = False
            return True
        if state.phase is not GamePhase.RUNNING:
            return False

        state.crouching = True
        if state.actor_y < self.config.ground_y:
            # Fast fall
            state.actor_vy += self.config.fast_fall_impulse
        return True

    def on_game_over_select(self) -> None:
        self.reset()
        self.start()

    # Tick
    def apply_physics(self) -> None:
        state = self.state
        cfg = self.config
        state.anim_tick += state.speed / cfg.initial_speed

        y, vy = integrate(state.actor_y, state.actor_vy, cfg.gravity)
        state.actor_y, state.actor_vy = clamp_to_floor(y, vy, cfg.ground_y)

    def spawn(self) -> List[Obstacle]:
        state = self.state
        cfg = self.config
        state.spawn_timer += 1
        if state.spawn_timer <= state.spawn_delay:
            return []

        state.spawn_timer = 0
        state.spawn_delay = next_spawn_delay(self.rng, cfg.spawn_base, state.speed, cfg.spawn_jitter)
        return [spawn_runner_obstacle(
            self.rng,
            x=float(self.display.width),
            ground_y=cfg.ground_y,
            ground_chance=cfg.ground_chance,
            ground_size=(cfg.ground_width, cfg.ground_height),
            air_size=(cfg.air_width, cfg.air_height),
            air_offsets=(cfg.air_offset_min, cfg.air_offset_max),
        )]

    def is_offscreen(self, obstacle: Obstacle) -> bool:
        return obstacle.x < self.config.retire_x

    def after_tick(self) -> None:
        state = self.state
        cfg = self.config

        if state.tick % cfg.score_interval == 0:
            self.add_score(1)
            if state.score % cfg.milestone_every == 0:
                state.milestone_text = f"{state.score} POINTS!"
                state.milestone_timer = cfg.milestone_ticks
                logger.info(f"runner: milestone {state.score}")
                self._emit(EventType.MILESTONE, score=state.score)
        if state.milestone_timer > 0:
            state.milestone_timer -= 1

        # Difficulty ramp, uncapped
        if state.tick % cfg.speed_interval == 0:
            state.speed += cfg.speed_increment

    # Boxes
    def actor_box(self) -> Box:
        cfg = self.config
        if self.airborne:
            width, height = self._jump_size()
        elif self.state.crouching:
            width, height = self._pose_sizes()["crouch"][0], cfg.crouch_hitbox_height
        else:
            width, height = self._pose_sizes()["stand"]
        return Box(cfg.actor_x, self.state.actor_y - height, width, height)

    def display_box(self) -> Box:
        cfg = self.config
        if self.airborne:
            width, height = self._jump_size()
        elif self.state.crouching:
            width, height = self._pose_sizes()["crouch"]
        else:
            width, height = self._pose_sizes()["stand"]
        return Box(cfg.actor_x, self.state.actor_y - height, width, height)

    def sprite_frame(self) -> SpriteFrame:
        cfg = self.config
        return select_runner_frame(
            airborne=self.airborne,
            crouching=self.state.crouching and not self.state.game_over,
            velocity=self.state.actor_vy,
            anim_tick=self.state.anim_tick,
            jump_impulse=cfg.jump_strength,
            ticks_per_frame=cfg.ticks_per_frame,
            run_frames=cfg.run_frames,
            crouch_frames=cfg.crouch_frames,
            jump_frames=cfg.jump_frames,
        )

    def message(self) -> str:
        if self.state.running and self.state.milestone_timer > 0:
            return self.state.milestone_text
        return ""
