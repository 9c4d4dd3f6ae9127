"""Usako arcade: flappy and runner simulations with a persistent leaderboard."""

__version__ = "1.0.0"
