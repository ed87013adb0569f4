"""Round state machine for the guess-the-word game."""

from __future__ import annotations

import enum
import random
import time
from collections import deque
from dataclasses import dataclass
from typing import Callable, Deque, Dict, Iterable, List, Optional, Tuple


DEFAULT_VOCABULARY: Tuple[str, ...] = (
    'queen', 'hospital', 'basketball', 'cat', 'change', 'snail', 'soup',
    'calendar', 'sad', 'desk', 'guitar', 'home', 'railway', 'zebra', 'jelly',
    'car', 'crow', 'trade', 'bag', 'roll', 'bubble',
)

EVENT_QUEUE_LIMIT = 256


class BuzzSignal(enum.Enum):
    CORRECT = 'correct'
    SKIP = 'skip'
    COUNTDOWN_WARNING = 'countdown_warning'
    GAME_OVER = 'game_over'
    NONE = 'none'


# Vibration patterns in milliseconds (wait, buzz, wait, buzz, ...)
BUZZ_PATTERNS: Dict[BuzzSignal, Tuple[int, ...]] = {
    BuzzSignal.CORRECT: (100, 100, 100, 100, 100, 100),
    BuzzSignal.COUNTDOWN_WARNING: (0, 200),
    BuzzSignal.GAME_OVER: (0, 2000),
    BuzzSignal.SKIP: (0,),
    BuzzSignal.NONE: (0,),
}


def format_elapsed_time(seconds: int) -> str:
    """Render seconds as MM:SS, or H:MM:SS from one hour up."""
    seconds = max(0, int(seconds))
    hours, rest = divmod(seconds, 3600)
    minutes, secs = divmod(rest, 60)
    if hours:
        return f"{hours}:{minutes:02d}:{secs:02d}"
    return f"{minutes:02d}:{secs:02d}"


@dataclass(frozen=True)
class RoundEvent:
    """One-shot notification produced by a round mutation."""

    kind: str  # 'buzz' or 'finished'
    buzz: BuzzSignal = BuzzSignal.NONE
    score: int = 0

    def to_dict(self):
        return {'kind': self.kind, 'buzz': self.buzz.value, 'score': self.score}


@dataclass
class RoundSnapshot:
    score: int
    current_word: str
    remaining_words: List[str]
    time_remaining_seconds: int
    finished: bool
    finish_pending: bool
    buzz: BuzzSignal

    def to_dict(self):
        return {
            'score': self.score,
            'current_word': self.current_word,
            'remaining_word_count': len(self.remaining_words),
            'time_remaining_seconds': self.time_remaining_seconds,
            'time_remaining': format_elapsed_time(self.time_remaining_seconds),
            'finished': self.finished,
            'finish_pending': self.finish_pending,
            'buzz': self.buzz.value,
            'buzz_pattern': list(BUZZ_PATTERNS[self.buzz]),
        }


class RoundController:
    """Drives one timed word-guessing round.

    Mutations happen only through ``start``, ``on_tick``, ``correct`` and
    ``skip``. Callers are expected to serialize calls; the controller itself
    holds no lock.

    Two ways of consuming notifications are offered. The pending-field style
    reads ``buzz`` / ``finish_pending`` and clears them with
    ``acknowledge_buzz`` / ``acknowledge_finish``. The queue style calls
    ``drain_events`` and receives each event exactly once.
    """

    def __init__(self, warning_threshold_seconds: int = 5, rng: Optional[random.Random] = None):
        if warning_threshold_seconds < 0:
            raise ValueError("Warning threshold must not be negative.")
        self._warning_threshold = warning_threshold_seconds
        self._rng = rng or random.Random()
        self._vocabulary: Tuple[str, ...] = ()
        self._remaining: Deque[str] = deque()
        self._listeners: List[Callable[[RoundSnapshot, List[RoundEvent]], None]] = []
        # Oldest events are dropped once nobody drains the queue
        self._events: Deque[RoundEvent] = deque(maxlen=EVENT_QUEUE_LIMIT)
        # Events produced since the last listener notification
        self._fresh: List[RoundEvent] = []
        self._alive = True

        self.score = 0
        self.current_word = ''
        self.time_remaining_seconds = 0
        self.tick_interval_seconds = 1
        self.duration_seconds = 0
        self.finished = False
        self.finish_pending = False
        self.buzz = BuzzSignal.NONE
        self.started = False
        # time.monotonic() when the round ended, None while running
        self.finished_at: Optional[float] = None

    # --- Actions ---

    def start(self, vocabulary: Iterable[str], duration_seconds: int, tick_interval_seconds: int) -> None:
        words = tuple(dict.fromkeys(w for w in vocabulary if w and w.strip()))
        if not words:
            raise ValueError("Vocabulary must contain at least one word.")
        if duration_seconds <= 0:
            raise ValueError("Duration must be a positive number of seconds.")
        if tick_interval_seconds <= 0:
            raise ValueError("Tick interval must be a positive number of seconds.")

        self._vocabulary = words
        self.duration_seconds = duration_seconds
        self.tick_interval_seconds = tick_interval_seconds
        self.time_remaining_seconds = duration_seconds
        self.score = 0
        self.finished = False
        self.finish_pending = False
        self.finished_at = None
        self.buzz = BuzzSignal.NONE
        self._events.clear()
        self._fresh = []
        self._remaining.clear()
        self.started = True
        self._reset_list()
        self._next_word()
        self._notify()

    def on_tick(self) -> None:
        if not self.started or self.finished:
            return
        self.time_remaining_seconds = max(0, self.time_remaining_seconds - self.tick_interval_seconds)
        if self.time_remaining_seconds == 0:
            self.finished = True
            self.finish_pending = True
            self.finished_at = time.monotonic()
            self._emit_buzz(BuzzSignal.GAME_OVER)
            self._push_event(RoundEvent(kind='finished', score=self.score))
        elif self.time_remaining_seconds <= self._warning_threshold:
            self._emit_buzz(BuzzSignal.COUNTDOWN_WARNING)
        self._notify()

    def correct(self) -> None:
        if not self.started or self.finished:
            return
        self.score += 1
        self._emit_buzz(BuzzSignal.CORRECT)
        self._next_word()
        self._notify()

    def skip(self) -> None:
        if not self.started or self.finished:
            return
        self.score -= 1
        self._emit_buzz(BuzzSignal.SKIP)
        self._next_word()
        self._notify()

    def acknowledge_buzz(self) -> None:
        self.buzz = BuzzSignal.NONE

    def acknowledge_finish(self) -> None:
        self.finish_pending = False

    # --- Consumers ---

    def drain_events(self) -> List[RoundEvent]:
        events = list(self._events)
        self._events.clear()
        return events

    def subscribe(self, listener: Callable[[RoundSnapshot, List[RoundEvent]], None]) -> Callable[[], None]:
        """Register a listener called as ``listener(snapshot, new_events)``
        after every mutation. Returns a callable that unregisters it."""
        self._listeners.append(listener)

        def _unsubscribe():
            if listener in self._listeners:
                self._listeners.remove(listener)

        return _unsubscribe

    def close(self) -> None:
        self._alive = False
        self._listeners.clear()

    @property
    def alive(self) -> bool:
        return self._alive

    @property
    def vocabulary(self) -> Tuple[str, ...]:
        return self._vocabulary

    @property
    def remaining_words(self) -> List[str]:
        return list(self._remaining)

    def snapshot(self) -> RoundSnapshot:
        return RoundSnapshot(
            score=self.score,
            current_word=self.current_word,
            remaining_words=list(self._remaining),
            time_remaining_seconds=self.time_remaining_seconds,
            finished=self.finished,
            finish_pending=self.finish_pending,
            buzz=self.buzz,
        )

    # --- Internals ---

    def _reset_list(self) -> None:
        shuffled = list(self._vocabulary)
        self._rng.shuffle(shuffled)
        self._remaining.extend(shuffled)

    def _next_word(self) -> None:
        if not self._remaining:
            self._reset_list()
        self.current_word = self._remaining.popleft()

    def _emit_buzz(self, signal: BuzzSignal) -> None:
        self.buzz = signal
        self._push_event(RoundEvent(kind='buzz', buzz=signal, score=self.score))

    def _push_event(self, event: RoundEvent) -> None:
        self._events.append(event)
        self._fresh.append(event)

    def _notify(self) -> None:
        fresh, self._fresh = self._fresh, []
        if not self._alive:
            return
        snapshot = self.snapshot()
        for listener in list(self._listeners):
            listener(snapshot, fresh)
