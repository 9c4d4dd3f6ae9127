"""Draws simulation snapshots into a numpy frame buffer.

Text (score, prompts, milestone messages) is left to the window, which
has access to real fonts.
"""

import logging
from typing import Optional

import numpy as np
from numpy.typing import NDArray

from usako.graphics.primitives import draw_ellipse, draw_image, draw_rect, fill
from usako.graphics.sprites import SpriteSet
from usako.modes.base import GameMode, Snapshot
from usako.modes.obstacles import ObstacleCategory

logger = logging.getLogger(__name__)

SKY = (135, 206, 235)
PIPE = (116, 191, 46)
OUTLINE = (0, 0, 0)
WHITE = (255, 255, 255)
BIRD_PLACEHOLDER = (255, 255, 0)
RUNNER_PLACEHOLDER = (0, 0, 255)

PIPE_CAP_HEIGHT = 20


class Renderer:
    """Rasterizes a ``Snapshot``; sprites that are missing become rectangles."""

    def __init__(
        self,
        width: int,
        height: int,
        sprites: Optional[SpriteSet] = None,
        ground_y: Optional[float] = None,
    ):
        self.width = width
        self.height = height
        self.sprites = sprites or SpriteSet()
        self.ground_y = ground_y
        self.buffer: NDArray[np.uint8] = np.zeros((height, width, 3), dtype=np.uint8)

    def __call__(self, snapshot: Snapshot) -> NDArray[np.uint8]:
        return self.render(snapshot)

    def render(self, snapshot: Snapshot) -> NDArray[np.uint8]:
        if snapshot.mode is GameMode.FLAPPY:
            self._render_flappy(snapshot)
        else:
            self._render_runner(snapshot)
        self._render_actor(snapshot)
        return self.buffer

    def _render_flappy(self, snapshot: Snapshot) -> None:
        buffer = self.buffer
        fill(buffer, SKY)

        for pipe in snapshot.obstacles:
            for seg in pipe.segments:
                x, y, w, h = int(seg.x), int(seg.y), int(seg.width), int(seg.height)
                draw_rect(buffer, x, y, w, h, PIPE)
                draw_rect(buffer, x, y, w, h, OUTLINE, filled=False, thickness=2)

            # Caps on both sides of the gap
            x = int(pipe.x) - 2
            w = int(pipe.width) + 4
            top_cap = int(pipe.y) - PIPE_CAP_HEIGHT
            bottom_cap = int(pipe.y + pipe.height)
            for cap_y in (top_cap, bottom_cap):
                draw_rect(buffer, x, cap_y, w, PIPE_CAP_HEIGHT, PIPE)
                draw_rect(buffer, x, cap_y, w, PIPE_CAP_HEIGHT, OUTLINE, filled=False, thickness=2)

    def _render_runner(self, snapshot: Snapshot) -> None:
        buffer = self.buffer
        fill(buffer, WHITE)

        if self.ground_y is not None:
            draw_rect(buffer, 0, int(self.ground_y) - 1, self.width, 2, OUTLINE)

        for obs in snapshot.obstacles:
            x, y, w, h = int(obs.x), int(obs.y), int(obs.width), int(obs.height)
            if obs.category is ObstacleCategory.AIR:
                draw_ellipse(buffer, x, y, w, h, OUTLINE)
                draw_ellipse(buffer, x + 2, y + 2, w - 4, h - 4, WHITE)
            else:
                draw_rect(buffer, x, y, w, h, WHITE)
                draw_rect(buffer, x, y, w, h, OUTLINE, filled=False, thickness=2)

    def _render_actor(self, snapshot: Snapshot) -> None:
        box = snapshot.actor
        x, y = int(box.x), int(box.y)
        w, h = int(box.width), int(box.height)

        sprite = self.sprites.get(snapshot.sprite.asset_name)
        if sprite is not None:
            draw_image(self.buffer, sprite.pixels(w, h), x, y)
            return

        color = BIRD_PLACEHOLDER if snapshot.mode is GameMode.FLAPPY else RUNNER_PLACEHOLDER
        draw_rect(self.buffer, x, y, w, h, color)
