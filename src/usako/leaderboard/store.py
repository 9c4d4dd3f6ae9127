"""Persistent top-N score table, one partition per game mode.

On disk the table is a flat JSON object with keys ``<mode>.<rank>.name``
and ``<mode>.<rank>.score`` for rank in ``[0, capacity)``. A missing score
key means the slot is empty. The file is loaded once and rewritten in full
after every submission.
"""

import json
import logging
import os
import secrets
import threading
from dataclasses import dataclass
from pathlib import Path
from typing import Dict, List, Optional

logger = logging.getLogger(__name__)

DEFAULT_NAME = "NoName"


@dataclass(frozen=True)
class ScoreEntry:
    name: str
    score: int


def _mode_key(mode) -> str:
    # Accept GameMode members as well as plain strings
    return str(getattr(mode, "value", mode))


class LeaderboardStore:
    """Ranked score table with an explicit load/save lifecycle.

    All reads and writes go through a single lock so concurrent callers
    cannot lose each other's submissions.

    Persistence failures never raise: a failed load starts from an empty
    table, a failed save leaves the in-memory table authoritative for the
    rest of the session.
    """

    def __init__(
        self,
        path: Optional[Path] = None,
        capacity: int = 5,
        default_name: str = DEFAULT_NAME,
    ):
        self.path = Path(path) if path is not None else None
        self.capacity = capacity
        self.default_name = default_name
        self._values: Dict[str, str] = {}
        self._lock = threading.RLock()

    @classmethod
    def from_settings(cls, settings) -> "LeaderboardStore":
        """Create and load a store from ``LeaderboardSettings``."""
        store = cls(
            path=settings.resolved_path,
            capacity=settings.capacity,
            default_name=settings.default_name,
        )
        store.load()
        return store

    # Lifecycle
    def load(self) -> None:
        """Read the table from disk, replacing the in-memory state."""
        with self._lock:
            self._values = {}
            if self.path is None or not self.path.exists():
                return
            try:
                payload = json.loads(self.path.read_text(encoding="utf-8"))
            except (OSError, ValueError) as e:
                logger.error(f"Failed to load high scores from {self.path}: {e}")
                return

            if not isinstance(payload, dict):
                logger.error(f"Ignoring malformed high score file {self.path}")
                return
            self._values = {str(k): str(v) for k, v in payload.items()}
            logger.info(f"Loaded high scores from {self.path}")

    def save(self) -> bool:
        """Rewrite the whole table. Returns False if the write failed."""
        with self._lock:
            if self.path is None:
                return True
            tmp = self.path.with_name(
                f"{self.path.name}.{os.getpid()}.{secrets.token_hex(6)}.tmp"
            )
            try:
                self.path.parent.mkdir(parents=True, exist_ok=True)
                tmp.write_text(
                    json.dumps(self._values, indent=2, sort_keys=True) + "\n",
                    encoding="utf-8",
                )
                tmp.replace(self.path)
            except OSError as e:
                try:
                    tmp.unlink(missing_ok=True)
                except OSError:
                    logger.warning(f"Could not remove {tmp}")
                logger.error(f"Failed to save high scores to {self.path}: {e}")
                return False
            return True

    # Queries
    def top_scores(self, mode) -> List[ScoreEntry]:
        """Entries of ``mode``, best first (at most ``capacity``)."""
        key = _mode_key(mode)
        with self._lock:
            entries = []
            for rank in range(self.capacity):
                score_key = f"{key}.{rank}.score"
                if score_key not in self._values:
                    continue
                try:
                    score = int(self._values[score_key])
                except ValueError:
                    logger.warning(f"Skipping malformed score slot {score_key}")
                    continue
                name = self._values.get(f"{key}.{rank}.name", self.default_name)
                entries.append(ScoreEntry(name, score))
        entries.sort(key=lambda e: e.score, reverse=True)
        return entries

    def high_score(self, mode) -> int:
        entries = self.top_scores(mode)
        return entries[0].score if entries else 0

    def is_rank_in(self, mode, score: int) -> bool:
        """True if ``score`` would enter the table.

        Ties with the last slot do not rank in; the older record keeps it.
        """
        entries = self.top_scores(mode)
        if len(entries) < self.capacity:
            return True
        return score > entries[-1].score

    # Mutations
    def submit(self, mode, name: str, score: int) -> List[ScoreEntry]:
        """Insert a score, keep the best ``capacity`` entries and persist.

        New entries sort after existing equal scores. Submitting a losing
        score is harmless: it is truncated away.

        Raises:
            ValueError: If ``name`` is not a string

        Returns:
            The updated table for ``mode``
        """
        if not isinstance(name, str):
            raise ValueError(f"Player name must be a string, got {type(name).__name__}")
        key = _mode_key(mode)
        with self._lock:
            entries = self.top_scores(mode)
            entries.append(ScoreEntry(name, int(score)))
            # sort() is stable, so the new entry stays behind equal scores
            entries.sort(key=lambda e: e.score, reverse=True)
            entries = entries[:self.capacity]

            for rank in range(self.capacity):
                name_key = f"{key}.{rank}.name"
                score_key = f"{key}.{rank}.score"
                if rank < len(entries):
                    self._values[name_key] = entries[rank].name
                    self._values[score_key] = str(entries[rank].score)
                else:
                    self._values.pop(name_key, None)
                    self._values.pop(score_key, None)

            logger.info(f"Score submitted: {key} {name}={score}")
            self.save()
            return list(entries)

    def clear_all(self) -> None:
        """Forget every mode's scores and delete the file."""
        with self._lock:
            self._values.clear()
            if self.path is None:
                return
            try:
                self.path.unlink(missing_ok=True)
            except OSError as e:
                logger.error(f"Failed to delete high scores at {self.path}: {e}")
            logger.info("High scores cleared")

    def snapshot(self) -> Dict[str, str]:
        """Copy of the flat key/value map as it would be written."""
        with self._lock:
            return dict(self._values)
