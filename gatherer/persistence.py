"""
HighScoreStore interface for local best-score caching.

The only thing Gatherer persists between runs is the best score reached for
each budget. Two implementations are included:
1. InMemoryHighScores - Dict-based storage, lost on exit (tests, batch runs)
2. JsonHighScores - One small JSON file mapping budget -> best score

Async design mirrors the rest of the session lifecycle: initialize() before the
first episode, close() after the last one. File I/O runs in a worker thread so
the session's update loop is never blocked.

Usage pattern:
    store = JsonHighScores("high_scores.json")
    await store.initialize()
    is_new_best = await store.record_score(budget=200, score=120)
    await store.close()
"""

import asyncio
import json
from abc import ABC, abstractmethod
from pathlib import Path
from typing import Dict

from .config import Config
from .logging_utils import log_error


class HighScoreStore(ABC):
    """Abstract base class for best-score persistence keyed by budget."""

    @abstractmethod
    async def initialize(self) -> None:
        """Prepare the backend (load files, open handles)."""
        pass

    @abstractmethod
    async def close(self) -> None:
        """Flush and release the backend."""
        pass

    @abstractmethod
    async def get_high_score(self, budget: int) -> int:
        """Return the best score recorded for ``budget`` (0 when none)."""
        pass

    @abstractmethod
    async def record_score(self, budget: int, score: int) -> bool:
        """Store ``score`` if it beats the current best. Returns True on a new best."""
        pass


class InMemoryHighScores(HighScoreStore):
    """Dict-backed store; data is lost when the process exits."""

    def __init__(self) -> None:
        self._scores: Dict[int, int] = {}

    async def initialize(self) -> None:
        pass

    async def close(self) -> None:
        pass

    async def get_high_score(self, budget: int) -> int:
        return self._scores.get(budget, 0)

    async def record_score(self, budget: int, score: int) -> bool:
        if score <= self._scores.get(budget, 0):
            return False
        self._scores[budget] = score
        return True


class JsonHighScores(HighScoreStore):
    """Best scores stored as ``{"<budget>": <score>, ...}`` in a JSON file.

    A missing or unreadable file starts from an empty table; it is rewritten on
    every new best.
    """

    def __init__(self, path: Path | str = Config.HIGH_SCORE_PATH):
        self.path = Path(path)
        self._scores: Dict[int, int] = {}

    async def initialize(self) -> None:
        self._scores = await asyncio.to_thread(self._read)

    async def close(self) -> None:
        pass

    async def get_high_score(self, budget: int) -> int:
        return self._scores.get(budget, 0)

    async def record_score(self, budget: int, score: int) -> bool:
        if score <= self._scores.get(budget, 0):
            return False
        self._scores[budget] = score
        await asyncio.to_thread(self._write, dict(self._scores))
        return True

    def _read(self) -> Dict[int, int]:
        if not self.path.exists():
            return {}
        try:
            raw = json.loads(self.path.read_text())
        except (OSError, json.JSONDecodeError) as exc:
            log_error(f"Ignoring unreadable high-score file {self.path}: {exc}")
            return {}
        if not isinstance(raw, dict):
            log_error(f"Ignoring high-score file {self.path}: expected a JSON object")
            return {}
        scores: Dict[int, int] = {}
        for budget, score in raw.items():
            try:
                scores[int(budget)] = int(score)
            except (TypeError, ValueError):
                continue
        return scores

    def _write(self, scores: Dict[int, int]) -> None:
        self.path.parent.mkdir(parents=True, exist_ok=True)
        payload = {str(budget): score for budget, score in sorted(scores.items())}
        self.path.write_text(json.dumps(payload, indent=2))
