from __future__ import annotations

import math

import pytest
from PIL import Image

from usako.core.events import EventBus, EventType, jump_event, restart_event
from usako.graphics.sprites import Sprite, SpriteSet
from usako.leaderboard.store import LeaderboardStore
from usako.modes.base import GamePhase
from usako.modes.flappy import FlappyMode
from usako.modes.obstacles import Obstacle, ObstacleCategory
from usako.settings import FlappySettings, Settings


def _floating(**kwargs) -> FlappyMode:
    """A running bird that neither rises nor falls."""
    sim = FlappyMode(Settings(flappy=FlappySettings(gravity=0.0)), **kwargs)
    sim.handle_input(jump_event())
    sim.state.actor_vy = 0.0
    return sim


def test_first_jump_starts_and_follows_gravity() -> None:
    sim = FlappyMode(Settings())
    assert sim.phase is GamePhase.IDLE
    assert sim.state.actor_y == 300.0

    sim.handle_input(jump_event())
    assert sim.phase is GamePhase.RUNNING
    assert sim.state.actor_vy == -10.0

    velocities = []
    positions = []
    for _ in range(5):
        sim.update()
        velocities.append(sim.state.actor_vy)
        positions.append(sim.state.actor_y)

    assert velocities == pytest.approx([-9.4, -8.8, -8.2, -7.6, -7.0])
    assert positions == pytest.approx([290.6, 281.8, 273.6, 266.0, 259.0])


def test_jump_resets_velocity_instead_of_adding() -> None:
    sim = FlappyMode(Settings())
    sim.handle_input(jump_event())
    sim.update()
    sim.handle_input(jump_event())

    assert sim.state.actor_vy == -10.0


def test_idle_does_not_tick() -> None:
    sim = FlappyMode(Settings())
    for _ in range(10):
        sim.update()

    assert sim.state.tick == 0
    assert sim.state.actor_y == 300.0


def test_pipes_spawn_every_interval() -> None:
    sim = _floating()
    for _ in range(109):
        sim.update()
    assert sim.state.obstacles == []

    sim.update()
    assert sim.state.tick == 110
    assert len(sim.state.obstacles) == 1
    pipe = sim.state.obstacles[0]
    assert pipe.x == 597.0
    assert 50 <= pipe.gap_top <= 320


def test_pipe_scores_once() -> None:
    sim = _floating()
    sim.state.obstacles.append(Obstacle(40.0, 200.0, 60.0, 230.0, ObstacleCategory.PIPE))

    sim.update()
    assert sim.state.score == 1
    assert sim.state.obstacles[0].scored

    for _ in range(20):
        sim.update()
    assert sim.state.score == 1
    assert sim.phase is GamePhase.RUNNING


def test_offscreen_pipes_are_retired() -> None:
    sim = _floating()
    sim.state.obstacles.append(Obstacle(-45.0, 200.0, 60.0, 230.0, ObstacleCategory.PIPE))

    sim.update()  # right edge at 12
    assert len(sim.state.obstacles) == 1
    for _ in range(8):
        sim.update()
    assert sim.state.obstacles == []


def test_pipe_collision_ends_game() -> None:
    bus = EventBus()
    over = []
    bus.subscribe(EventType.GAME_OVER, over.append)
    sim = _floating(event_bus=bus)
    sim.state.obstacles.append(Obstacle(100.0, 400.0, 60.0, 100.0, ObstacleCategory.PIPE))

    sim.update()

    assert sim.phase is GamePhase.GAME_OVER
    assert len(over) == 1
    assert over[0].data == {"score": 0, "mode": "flappy"}


def test_game_over_freezes_state() -> None:
    sim = _floating()
    sim.state.obstacles.append(Obstacle(100.0, 400.0, 60.0, 100.0, ObstacleCategory.PIPE))
    sim.update()
    tick = sim.state.tick

    for _ in range(5):
        sim.update()
    assert sim.state.tick == tick
    assert sim.state.obstacles[0].x == 97.0


def test_ceiling_and_floor_end_game() -> None:
    sim = FlappyMode(Settings())
    sim.handle_input(jump_event())
    sim.state.actor_y = 2.0
    sim.state.actor_vy = -5.0
    sim.update()
    assert sim.phase is GamePhase.GAME_OVER

    sim = FlappyMode(Settings())
    sim.handle_input(jump_event())
    sim.state.actor_y = 559.0
    sim.state.actor_vy = 2.0
    sim.update()
    assert sim.phase is GamePhase.GAME_OVER


def test_restart_restores_initial_state() -> None:
    settings = Settings()
    sim = FlappyMode(settings)
    sim.handle_input(jump_event())
    sim.state.score = 3
    sim.state.obstacles.append(Obstacle(100.0, 400.0, 60.0, 100.0, ObstacleCategory.PIPE))

    assert sim.handle_input(restart_event()) is False
    sim.update()
    assert sim.phase is GamePhase.GAME_OVER

    assert sim.handle_input(restart_event()) is True
    assert sim.state == FlappyMode(settings).state


def test_jump_after_game_over_returns_to_idle() -> None:
    sim = FlappyMode(Settings())
    sim.handle_input(jump_event())
    sim.game_over()

    sim.handle_input(jump_event())

    assert sim.phase is GamePhase.IDLE
    assert sim.state.tick == 0


def test_idle_hover_is_display_only() -> None:
    sim = FlappyMode(Settings(), clock=lambda: 300.0 * math.pi / 2)

    snapshot = sim.snapshot()

    assert snapshot.actor.y == pytest.approx(310.0)
    assert sim.state.actor_y == 300.0
    assert snapshot.prompt == "PRESS SPACE / UP TO START"


def test_running_snapshot_uses_simulated_position() -> None:
    sim = FlappyMode(Settings(), clock=lambda: 300.0 * math.pi / 2)
    sim.handle_input(jump_event())
    sim.update()

    snapshot = sim.snapshot()

    assert snapshot.actor.y == pytest.approx(290.6)
    assert snapshot.prompt is None
    assert snapshot.sprite.asset_name == "usako_jump"


def test_high_score_comes_from_leaderboard(tmp_path) -> None:
    store = LeaderboardStore(tmp_path / "scores.json")
    store.submit("flappy", "Ann", 42)
    store.submit("runner", "Bob", 99)

    sim = FlappyMode(Settings(), leaderboard=store)

    assert sim.high_score == 42


def test_sprite_aspect_sets_actor_height() -> None:
    sprites = SpriteSet({"usako_normal": Sprite("usako_normal", Image.new("RGBA", (80, 40)))})

    sim = FlappyMode(Settings(), sprites=sprites)

    assert sim.actor_box().height == 20.0
    assert sim.actor_box().width == 40.0
