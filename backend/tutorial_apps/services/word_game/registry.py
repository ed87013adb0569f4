"""In-memory registry of live rounds. Rounds are never persisted."""

from __future__ import annotations

import time
from dataclasses import dataclass, field
from threading import Lock
from typing import Dict, List, Optional, Tuple
from uuid import uuid4

from .round import RoundController


@dataclass
class LiveRound:
    round_id: str
    controller: RoundController
    vocabulary: Tuple[str, ...]
    duration_seconds: int
    tick_interval_seconds: int
    warning_threshold_seconds: int
    # Serializes ticks against user actions on the same round
    lock: Lock = field(default_factory=Lock)

    @property
    def alive(self) -> bool:
        return self.controller.alive

    def settings(self):
        return {
            'vocabulary': list(self.vocabulary),
            'duration_seconds': self.duration_seconds,
            'tick_interval_seconds': self.tick_interval_seconds,
            'warning_threshold_seconds': self.warning_threshold_seconds,
        }


class RoundRegistry:
    """Live rounds by id.

    A finished round stays readable (score screen, play again) for
    ``retention_seconds`` after it ends; ``sweep`` closes it after that.
    """

    def __init__(self, retention_seconds: float = 300) -> None:
        if retention_seconds < 0:
            raise ValueError("Retention must not be negative.")
        self._rounds: Dict[str, LiveRound] = {}
        self._lock = Lock()
        self.retention_seconds = retention_seconds

    def open(self, vocabulary, duration_seconds: int, tick_interval_seconds: int,
             warning_threshold_seconds: int, rng=None) -> LiveRound:
        self.sweep()
        controller = RoundController(warning_threshold_seconds=warning_threshold_seconds, rng=rng)
        controller.start(vocabulary, duration_seconds, tick_interval_seconds)
        live = LiveRound(
            round_id=uuid4().hex[:8].upper(),
            controller=controller,
            vocabulary=controller.vocabulary,
            duration_seconds=duration_seconds,
            tick_interval_seconds=tick_interval_seconds,
            warning_threshold_seconds=warning_threshold_seconds,
        )
        with self._lock:
            self._rounds[live.round_id] = live
        return live

    def get(self, round_id: str) -> Optional[LiveRound]:
        with self._lock:
            return self._rounds.get((round_id or '').upper())

    def close(self, round_id: str) -> Optional[LiveRound]:
        with self._lock:
            live = self._rounds.pop((round_id or '').upper(), None)
        if live is not None:
            with live.lock:
                live.controller.close()
        return live

    def sweep(self, now: Optional[float] = None) -> List[LiveRound]:
        """Close finished rounds older than the retention window."""
        now = time.monotonic() if now is None else now
        with self._lock:
            expired = [
                round_id for round_id, live in self._rounds.items()
                if live.controller.finished_at is not None
                and now - live.controller.finished_at >= self.retention_seconds
            ]
        closed = []
        for round_id in expired:
            live = self.close(round_id)
            if live is not None:
                closed.append(live)
        return closed

    def close_all(self) -> None:
        with self._lock:
            ids = list(self._rounds)
        for round_id in ids:
            self.close(round_id)

    def __len__(self) -> int:
        with self._lock:
            return len(self._rounds)
