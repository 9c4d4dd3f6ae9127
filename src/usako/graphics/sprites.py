"""Sprite loading with placeholder fallback.

A sprite that cannot be read is stored as ``None``: simulations then fall
back to their configured hitbox sizes and the renderer draws a plain
rectangle instead.
"""

import logging
from dataclasses import dataclass, field
from pathlib import Path
from typing import Dict, Iterable, Optional, Tuple

import numpy as np
from numpy.typing import NDArray
from PIL import Image

logger = logging.getLogger(__name__)

FLAPPY_SPRITES = ("usako_normal", "usako_jump")
RUNNER_SPRITES = (
    tuple(f"run{i}" for i in range(1, 7))
    + tuple(f"squat{i}" for i in range(1, 6))
    + tuple(f"jump{i}" for i in range(1, 7))
)


@dataclass
class Sprite:
    """A decoded RGBA image and a cache of resized copies."""

    name: str
    image: Image.Image
    _scaled: Dict[Tuple[int, int], NDArray[np.uint8]] = field(default_factory=dict, repr=False)

    @property
    def width(self) -> int:
        return self.image.width

    @property
    def height(self) -> int:
        return self.image.height

    @property
    def aspect(self) -> float:
        return self.width / self.height

    def pixels(self, width: int, height: int) -> NDArray[np.uint8]:
        """RGBA array resized to ``width`` x ``height``."""
        size = (max(1, int(width)), max(1, int(height)))
        if size not in self._scaled:
            resized = self.image.resize(size, Image.Resampling.NEAREST)
            self._scaled[size] = np.asarray(resized, dtype=np.uint8)
        return self._scaled[size]


class SpriteSet:
    """Named sprites, ``None`` for the ones that failed to load."""

    def __init__(self, sprites: Optional[Dict[str, Optional[Sprite]]] = None):
        self._sprites: Dict[str, Optional[Sprite]] = dict(sprites or {})

    def get(self, name: str) -> Optional[Sprite]:
        return self._sprites.get(name)

    def __contains__(self, name: str) -> bool:
        return self._sprites.get(name) is not None

    @property
    def missing(self) -> list:
        return [name for name, sprite in self._sprites.items() if sprite is None]

    @classmethod
    def load(cls, directory: Path, names: Iterable[str]) -> "SpriteSet":
        """Load ``<directory>/<name>.png`` for every name."""
        sprites: Dict[str, Optional[Sprite]] = {}
        for name in names:
            sprites[name] = load_sprite(Path(directory) / f"{name}.png")
        result = cls(sprites)
        if result.missing:
            logger.warning(f"Missing sprites, using placeholders: {', '.join(result.missing)}")
        return result


def load_sprite(path: Path) -> Optional[Sprite]:
    """Decode one image, returning None instead of raising."""
    try:
        with Image.open(path) as img:
            image = img.convert("RGBA")
    except (OSError, ValueError) as e:
        logger.debug(f"Sprite {path} failed: {e}")
        return None
    return Sprite(name=Path(path).stem, image=image)
