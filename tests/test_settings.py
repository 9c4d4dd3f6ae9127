from __future__ import annotations

import sys
from pathlib import Path

import pytest
from pydantic import ValidationError

from usako.settings import LeaderboardSettings, Settings, data_dir


def test_defaults(monkeypatch, tmp_path) -> None:
    monkeypatch.chdir(tmp_path)
    settings = Settings()

    assert (settings.display.width, settings.display.height) == (600, 600)
    assert settings.flappy.spawn_interval == 110
    assert settings.runner.initial_speed == 6.0
    assert settings.leaderboard.capacity == 5


def test_nested_environment_override(monkeypatch, tmp_path) -> None:
    monkeypatch.chdir(tmp_path)
    monkeypatch.setenv("USAKO_RUNNER__GRAVITY", "0.9")
    monkeypatch.setenv("USAKO_DEBUG", "true")

    settings = Settings()

    assert settings.runner.gravity == 0.9
    assert settings.debug is True


def test_environment_cannot_break_calibration(monkeypatch, tmp_path) -> None:
    monkeypatch.chdir(tmp_path)
    monkeypatch.setenv("USAKO_RUNNER__AIR_OFFSET_MIN", "10")

    with pytest.raises(ValidationError):
        Settings()


def test_explicit_leaderboard_path(tmp_path) -> None:
    path = tmp_path / "board.json"

    assert LeaderboardSettings(path=path).resolved_path == path


def test_data_dir_per_platform(monkeypatch, tmp_path) -> None:
    monkeypatch.setattr(Path, "home", classmethod(lambda cls: tmp_path))

    monkeypatch.setattr(sys, "platform", "linux")
    assert data_dir() == tmp_path / "UsakoGame"

    monkeypatch.setattr(sys, "platform", "darwin")
    assert data_dir() == tmp_path / "Library" / "Application Support" / "UsakoGame"

    monkeypatch.setattr(sys, "platform", "win32")
    monkeypatch.setenv("APPDATA", str(tmp_path / "Roaming"))
    assert data_dir() == tmp_path / "Roaming" / "UsakoGame"

    monkeypatch.delenv("APPDATA")
    assert data_dir("Other") == tmp_path / "Other"
