"""Game modes for the arcade."""

from usako.modes.base import GameMode, GamePhase, Simulation, SimulationState, Snapshot
from usako.modes.flappy import FlappyMode
from usako.modes.runner import RunnerMode
from usako.modes.manager import ModeManager, GameOverReport

__all__ = [
    "GameMode",
    "GamePhase",
    "Simulation",
    "SimulationState",
    "Snapshot",
    "FlappyMode",
    "RunnerMode",
    "ModeManager",
    "GameOverReport",
]
