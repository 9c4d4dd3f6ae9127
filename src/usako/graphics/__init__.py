"""Graphics module for the arcade."""

from usako.graphics.primitives import fill, draw_rect, draw_ellipse, draw_image
from usako.graphics.sprites import Sprite, SpriteSet, load_sprite

__all__ = [
    "fill",
    "draw_rect",
    "draw_ellipse",
    "draw_image",
    "Sprite",
    "SpriteSet",
    "load_sprite",
]
