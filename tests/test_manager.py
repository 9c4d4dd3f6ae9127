from __future__ import annotations

import random

import pytest

from usako.core.events import EventBus, EventType, exit_event, jump_event
from usako.core.state import State, StateMachine
from usako.leaderboard.store import LeaderboardStore, ScoreEntry
from usako.modes.base import GameMode, GamePhase
from usako.modes.flappy import FlappyMode
from usako.modes.manager import ModeManager
from usako.modes.obstacles import Obstacle, ObstacleCategory
from usako.modes.runner import RunnerMode
from usako.settings import LeaderboardSettings, Settings


def _manager(tmp_path) -> ModeManager:
    settings = Settings(leaderboard=LeaderboardSettings(path=tmp_path / "scores.json"))
    manager = ModeManager(
        state_machine=StateMachine(),
        event_bus=EventBus(),
        leaderboard=LeaderboardStore.from_settings(settings.leaderboard),
        settings=settings,
        rng=random.Random(5),
    )
    manager.register_mode(FlappyMode)
    manager.register_mode(RunnerMode)
    return manager


def _crash(manager: ModeManager, score: int = 0) -> None:
    """Start the current flappy life and fly into a pipe."""
    manager.event_bus.emit(jump_event())
    manager.current.state.score = score
    manager.current.state.obstacles.append(
        Obstacle(100.0, 400.0, 60.0, 100.0, ObstacleCategory.PIPE)
    )
    manager.frame()


def test_start_mode_creates_fresh_simulation(tmp_path) -> None:
    manager = _manager(tmp_path)

    sim = manager.start_mode(GameMode.FLAPPY)

    assert manager.state_machine.state is State.FLAPPY
    assert manager.current is sim
    assert sim.phase is GamePhase.IDLE
    assert manager.get_available_modes() == [GameMode.FLAPPY, GameMode.RUNNER]


def test_start_mode_from_game_is_rejected(tmp_path) -> None:
    manager = _manager(tmp_path)
    manager.start_mode(GameMode.FLAPPY)

    with pytest.raises(ValueError):
        manager.start_mode(GameMode.RUNNER)


def test_frame_renders_before_update(tmp_path) -> None:
    manager = _manager(tmp_path)
    manager.start_mode(GameMode.FLAPPY)
    manager.event_bus.emit(jump_event())
    seen = []

    manager.frame(lambda snapshot: seen.append(snapshot.tick))
    manager.frame(lambda snapshot: seen.append(snapshot.tick))

    assert seen == [0, 1]
    assert manager.current.state.tick == 2


def test_frame_without_mode_returns_none(tmp_path) -> None:
    manager = _manager(tmp_path)

    assert manager.frame() is None
    assert manager.snapshot() is None


def test_game_over_report_and_default_name(tmp_path) -> None:
    manager = _manager(tmp_path)
    submitted = []
    manager.event_bus.subscribe(EventType.SCORE_SUBMITTED, submitted.append)
    manager.start_mode(GameMode.FLAPPY)

    _crash(manager)

    report = manager.report
    assert report is not None
    assert report.score == 0
    assert report.rank_in
    assert report.status == "Enter Name"

    report = manager.submit_name("   ")
    assert report.submitted
    assert report.status == "Registered!"
    assert report.top_scores == [ScoreEntry("NoName", 0)]
    assert len(submitted) == 1

    manager.submit_name("Again")
    assert manager.leaderboard.top_scores("flappy") == [ScoreEntry("NoName", 0)]
    assert len(submitted) == 1
    assert (tmp_path / "scores.json").exists()


def test_rank_out_cannot_submit(tmp_path) -> None:
    manager = _manager(tmp_path)
    for i in range(5):
        manager.leaderboard.submit("flappy", f"P{i}", 10)
    manager.start_mode(GameMode.FLAPPY)

    _crash(manager)

    assert not manager.report.rank_in
    assert manager.report.status == "Rank Out"
    manager.submit_name("Me")
    assert all(e.name != "Me" for e in manager.leaderboard.top_scores("flappy"))


def test_game_over_callback(tmp_path) -> None:
    manager = _manager(tmp_path)
    reports = []
    manager.set_on_game_over(reports.append)
    manager.start_mode(GameMode.FLAPPY)

    _crash(manager)

    assert reports == [manager.report]


def test_exit_refused_while_running(tmp_path) -> None:
    manager = _manager(tmp_path)
    manager.start_mode(GameMode.FLAPPY)
    manager.event_bus.emit(jump_event())

    manager.event_bus.emit(exit_event())

    assert manager.state_machine.state is State.FLAPPY
    assert manager.current is not None


def test_exit_after_game_over(tmp_path) -> None:
    manager = _manager(tmp_path)
    manager.start_mode(GameMode.FLAPPY)
    _crash(manager)

    manager.event_bus.emit(exit_event())

    assert manager.state_machine.state is State.TITLE
    assert manager.current is None
    assert manager.report is None


def test_exit_from_idle(tmp_path) -> None:
    manager = _manager(tmp_path)
    manager.start_mode(GameMode.RUNNER)

    assert manager.exit_to_menu()
    assert manager.state_machine.state is State.TITLE


def test_leaving_game_over_clears_report(tmp_path) -> None:
    manager = _manager(tmp_path)
    manager.start_mode(GameMode.FLAPPY)
    _crash(manager)
    assert manager.report is not None

    manager.event_bus.emit(jump_event())

    assert manager.current.phase is GamePhase.IDLE
    assert manager.report is None


def test_retry_resets_current_mode(tmp_path) -> None:
    manager = _manager(tmp_path)
    manager.start_mode(GameMode.FLAPPY)
    _crash(manager)

    manager.retry()

    assert manager.current.phase is GamePhase.IDLE
    assert manager.report is None


def test_ranking_screen(tmp_path) -> None:
    manager = _manager(tmp_path)
    manager.leaderboard.submit("runner", "R", 12)

    assert manager.show_ranking()
    columns = manager.ranking()
    assert columns[GameMode.FLAPPY] == []
    assert columns[GameMode.RUNNER] == [ScoreEntry("R", 12)]

    manager.event_bus.emit(jump_event())
    assert manager.state_machine.state is State.TITLE


def test_submitted_score_updates_high_score(tmp_path) -> None:
    manager = _manager(tmp_path)
    manager.start_mode(GameMode.FLAPPY)
    _crash(manager, score=7)
    assert manager.report.score == 7
    assert manager.current.high_score == 0

    manager.submit_name("Ann")

    assert manager.current.high_score == 7
    assert manager.leaderboard.top_scores(GameMode.FLAPPY) == [ScoreEntry("Ann", 7)]


def test_clear_scores_empties_every_ranking(tmp_path) -> None:
    manager = _manager(tmp_path)
    cleared = []
    manager.event_bus.subscribe(EventType.SCORES_CLEARED, cleared.append)
    manager.leaderboard.submit("flappy", "F", 3)
    manager.leaderboard.submit("runner", "R", 12)
    manager.show_ranking()

    manager.clear_scores()

    assert manager.ranking() == {GameMode.FLAPPY: [], GameMode.RUNNER: []}
    assert not (tmp_path / "scores.json").exists()
    assert len(cleared) == 1
    assert manager.state_machine.state is State.RANKING


def test_clear_scores_resets_running_high_score(tmp_path) -> None:
    manager = _manager(tmp_path)
    manager.leaderboard.submit("flappy", "F", 30)
    sim = manager.start_mode(GameMode.FLAPPY)
    assert sim.high_score == 30

    manager.clear_scores()

    assert sim.high_score == 0


def test_submit_name_rejects_non_string(tmp_path) -> None:
    manager = _manager(tmp_path)
    manager.start_mode(GameMode.FLAPPY)
    _crash(manager, score=4)

    with pytest.raises(ValueError):
        manager.submit_name(None)

    assert not manager.report.submitted
    assert manager.leaderboard.top_scores("flappy") == []
    assert manager.submit_name("Ann").submitted
