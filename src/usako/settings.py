"""
Application settings using Pydantic.

Settings are loaded from environment variables with .env file support.
Nested sections use ``__`` as delimiter, e.g. ``USAKO_RUNNER__GRAVITY=0.9``.
"""

import os
import sys
from functools import lru_cache
from pathlib import Path
from typing import Optional

from pydantic import BaseModel, Field, model_validator
from pydantic_settings import BaseSettings, SettingsConfigDict


class DisplaySettings(BaseModel):
    """Play-field and window settings."""

    width: int = 600
    height: int = 600
    fps: int = 60
    scale: int = 1


class FlappySettings(BaseModel):
    """Tuning for the flappy mode."""

    gravity: float = 0.6
    jump_strength: float = -10.0
    pipe_speed: float = 3.0
    pipe_width: float = 60.0
    pipe_gap: float = 230.0
    spawn_interval: int = Field(default=110, gt=0)  # ticks
    min_pipe_height: float = 50.0

    actor_x: float = 100.0
    actor_width: float = 40.0
    actor_height: float = 40.0
    hitbox_buffer: float = 2.0

    # Pipes are dropped once their right edge is this far off-screen
    retire_margin: float = 10.0

    # Idle hover (render hint only)
    hover_amplitude: float = 10.0
    hover_period_ms: float = 300.0


class RunnerSettings(BaseModel):
    """Tuning for the runner mode."""

    gravity: float = 0.8
    jump_strength: float = -15.0
    ground_y: float = 500.0
    actor_x: float = 80.0

    # Hitbox / display sizes
    stand_width: float = 60.0
    stand_height: float = 90.0
    crouch_width: float = 50.0
    crouch_height: float = 90.0
    crouch_hitbox_height: float = 55.0
    jump_scale: float = 1.2
    crouch_scale: float = 1.2
    hitbox_buffer: float = 5.0

    floor_epsilon: float = 1.0
    airborne_epsilon: float = 5.0
    fast_fall_impulse: float = 5.0

    # Difficulty
    initial_speed: float = 6.0
    speed_increment: float = 0.5
    speed_interval: int = Field(default=300, gt=0)  # ticks

    # Scoring
    score_interval: int = Field(default=10, gt=0)  # ticks
    milestone_every: int = Field(default=100, gt=0)
    milestone_ticks: int = 60

    # Spawning
    spawn_base: float = 1200.0
    spawn_jitter: int = Field(default=30, gt=0)
    ground_chance: float = Field(default=0.6, ge=0.0, le=1.0)
    ground_width: float = 50.0
    ground_height: float = 60.0
    air_width: float = 45.0
    air_height: float = 45.0
    air_offset_min: float = 95.0
    air_offset_max: float = 130.0
    retire_x: float = -100.0

    # Animation
    ticks_per_frame: int = Field(default=5, gt=0)
    run_frames: int = 6
    crouch_frames: int = 5
    jump_frames: int = 6

    @model_validator(mode="after")
    def _check_air_offsets(self) -> "RunnerSettings":
        from usako.modes.obstacles import check_air_calibration

        check_air_calibration(
            self.air_offset_min,
            self.air_offset_max,
            stand_height=self.stand_height,
            crouch_height=self.crouch_hitbox_height,
            air_height=self.air_height,
            buffer=self.hitbox_buffer,
        )
        return self


class LeaderboardSettings(BaseModel):
    """Persistent score table settings."""

    capacity: int = Field(default=5, gt=0)
    path: Optional[Path] = None
    file_name: str = "scores.json"
    dir_name: str = "UsakoGame"
    default_name: str = "NoName"

    @property
    def resolved_path(self) -> Path:
        """File holding the leaderboard, explicit path first."""
        if self.path is not None:
            return self.path
        return data_dir(self.dir_name) / self.file_name


def data_dir(dir_name: str = "UsakoGame") -> Path:
    """Platform-dependent directory for persistent user data."""
    home = Path.home()
    if sys.platform.startswith("win"):
        appdata = os.environ.get("APPDATA")
        base = Path(appdata) if appdata else home
    elif sys.platform == "darwin":
        base = home / "Library" / "Application Support"
    else:
        base = home
    return base / dir_name


class Settings(BaseSettings):
    """Main application settings."""

    model_config = SettingsConfigDict(
        env_prefix="USAKO_",
        env_file=".env",
        env_file_encoding="utf-8",
        env_nested_delimiter="__",
        extra="ignore",
    )

    debug: bool = False

    # Paths
    base_path: Path = Field(default_factory=lambda: Path(__file__).parent)
    assets_path: Path = Field(default_factory=lambda: Path(__file__).parent / "assets")

    # Nested settings
    display: DisplaySettings = Field(default_factory=DisplaySettings)
    flappy: FlappySettings = Field(default_factory=FlappySettings)
    runner: RunnerSettings = Field(default_factory=RunnerSettings)
    leaderboard: LeaderboardSettings = Field(default_factory=LeaderboardSettings)


@lru_cache
def get_settings() -> Settings:
    """Get cached settings instance."""
    return Settings()
