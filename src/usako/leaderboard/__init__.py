"""Persistent per-mode leaderboards."""

from usako.leaderboard.store import LeaderboardStore, ScoreEntry

__all__ = ["LeaderboardStore", "ScoreEntry"]
