"""Flappy mode - fly between the pipes."""

import math
from typing import List

from usako.animation.frames import SpriteFrame, select_flappy_frame
from usako.core.physics import Box, integrate
from usako.modes.base import GameMode, GamePhase, Simulation, SimulationState
from usako.modes.obstacles import Obstacle, spawn_pipe_pair


class FlappyMode(Simulation):
    mode = GameMode.FLAPPY
    display_name = "Flappy Usako"
    settings_section = "flappy"

    idle_prompt = "PRESS SPACE / UP TO START"

    def __init__(self, *args, **kwargs):
        self._actor_height = None
        super().__init__(*args, **kwargs)

    @property
    def rest_y(self) -> float:
        return self.display.height / 2.0

    @property
    def actor_width(self) -> float:
        return self.config.actor_width

    @property
    def actor_height(self) -> float:
        # Keep the sprite's aspect ratio when we have one
        if self._actor_height is None:
            sprite = self.sprites.get("usako_normal")
            if sprite is not None:
                self._actor_height = self.config.actor_width * sprite.height / sprite.width
            else:
                self._actor_height = self.config.actor_height
        return self._actor_height

    @property
    def scroll_speed(self) -> float:
        return self.config.pipe_speed

    @property
    def hitbox_buffer(self) -> float:
        return self.config.hitbox_buffer

    def initial_state(self) -> SimulationState:
        return SimulationState(actor_y=self.rest_y, actor_vy=0.0)

    def on_jump(self) -> None:
        # Reset, never accumulate
        self.state.actor_vy = self.config.jump_strength

    def apply_physics(self) -> None:
        state = self.state
        state.actor_y, state.actor_vy = integrate(
            state.actor_y, state.actor_vy, self.config.gravity
        )

    def spawn(self) -> List[Obstacle]:
        if self.state.tick % self.config.spawn_interval != 0:
            return []
        return [spawn_pipe_pair(
            self.rng,
            x=float(self.display.width),
            floor=float(self.display.height),
            gap=self.config.pipe_gap,
            width=self.config.pipe_width,
            min_height=self.config.min_pipe_height,
        )]

    def passed(self, obstacle: Obstacle) -> bool:
        return obstacle.right < self.config.actor_x

    def is_offscreen(self, obstacle: Obstacle) -> bool:
        return obstacle.right < -self.config.retire_margin

    def actor_box(self) -> Box:
        return Box(self.config.actor_x, self.state.actor_y, self.actor_width, self.actor_height)

    def out_of_bounds(self) -> bool:
        y = self.state.actor_y
        return y < 0 or y + self.actor_height > self.display.height

    def display_box(self) -> Box:
        box = self.actor_box()
        if self.state.phase is GamePhase.IDLE:
            # Hover while waiting; never touches the simulated position
            phase = self.clock() / self.config.hover_period_ms
            y = self.rest_y + math.sin(phase) * self.config.hover_amplitude
            return Box(box.x, y, box.width, box.height)
        return box

    def sprite_frame(self) -> SpriteFrame:
        return select_flappy_frame(self.state.actor_vy)
