"""numpy drawing helpers for the ``(H, W, 3)`` frame buffer.

Coordinates are play-field pixels and may fall partly or wholly outside
the buffer; everything is clipped.
"""

from typing import Optional, Tuple

import numpy as np
from numpy.typing import NDArray

RGB = Tuple[int, int, int]
Frame = NDArray[np.uint8]


def _clip(frame: Frame, x: int, y: int, width: int, height: int) -> Optional[Tuple[slice, slice]]:
    """Row/column slices of the visible part of a box, None if off-frame."""
    rows, cols = frame.shape[:2]
    top, bottom = max(0, y), min(rows, y + height)
    left, right = max(0, x), min(cols, x + width)
    if bottom <= top or right <= left:
        return None
    return slice(top, bottom), slice(left, right)


def fill(frame: Frame, color: RGB) -> None:
    frame[...] = color


def draw_rect(
    frame: Frame,
    x: int,
    y: int,
    width: int,
    height: int,
    color: RGB,
    filled: bool = True,
    thickness: int = 1,
) -> None:
    """Solid rectangle, or its outline ``thickness`` pixels wide."""
    if filled:
        area = _clip(frame, x, y, width, height)
        if area is not None:
            frame[area] = color
        return

    t = max(1, thickness)
    for edge in (
        (x, y, width, t),
        (x, y + height - t, width, t),
        (x, y, t, height),
        (x + width - t, y, t, height),
    ):
        area = _clip(frame, *edge)
        if area is not None:
            frame[area] = color


def draw_ellipse(frame: Frame, x: int, y: int, width: int, height: int, color: RGB) -> None:
    """Filled ellipse inscribed in the box."""
    if width <= 0 or height <= 0:
        return
    area = _clip(frame, x, y, width, height)
    if area is None:
        return

    rows, cols = area
    py = np.arange(rows.start, rows.stop)[:, None] + 0.5
    px = np.arange(cols.start, cols.stop)[None, :] + 0.5
    nx = (px - (x + width / 2.0)) / (width / 2.0)
    ny = (py - (y + height / 2.0)) / (height / 2.0)
    frame[area][nx * nx + ny * ny <= 1.0] = color


def draw_image(frame: Frame, image: Frame, x: int, y: int) -> None:
    """Composite an RGB or RGBA image with its top-left corner at (x, y)."""
    img_h, img_w = image.shape[:2]
    area = _clip(frame, x, y, img_w, img_h)
    if area is None:
        return

    rows, cols = area
    src = image[rows.start - y:rows.stop - y, cols.start - x:cols.stop - x]
    if src.shape[2] == 3:
        frame[area] = src
        return

    # Straight alpha over the current frame contents
    alpha = src[:, :, 3:4].astype(np.float32) / 255.0
    under = frame[area].astype(np.float32)
    frame[area] = (src[:, :, :3] * alpha + under * (1.0 - alpha)).astype(np.uint8)
