from __future__ import annotations

from PIL import Image

from usako.graphics.sprites import RUNNER_SPRITES, SpriteSet, load_sprite


def test_load_with_placeholders(tmp_path) -> None:
    Image.new("RGB", (20, 10), (1, 2, 3)).save(tmp_path / "usako_normal.png")
    (tmp_path / "usako_jump.png").write_bytes(b"not an image")

    sprites = SpriteSet.load(tmp_path, ["usako_normal", "usako_jump", "run1"])

    assert "usako_normal" in sprites
    assert "usako_jump" not in sprites
    assert sprites.missing == ["usako_jump", "run1"]
    assert sprites.get("usako_normal").aspect == 2.0


def test_scaled_pixels_are_rgba(tmp_path) -> None:
    Image.new("RGB", (20, 10), (1, 2, 3)).save(tmp_path / "run1.png")
    sprite = load_sprite(tmp_path / "run1.png")

    pixels = sprite.pixels(40, 30)

    assert pixels.shape == (30, 40, 4)
    assert tuple(pixels[0, 0]) == (1, 2, 3, 255)
    assert sprite.pixels(40, 30) is pixels


def test_runner_sprite_names() -> None:
    assert len(RUNNER_SPRITES) == 17
    assert RUNNER_SPRITES[0] == "run1"
    assert RUNNER_SPRITES[-1] == "jump6"
