"""Sleep tracking state with storage calls dispatched off the caller's thread."""

from __future__ import annotations

import logging
from collections import deque
from concurrent.futures import Future, ThreadPoolExecutor
from threading import Lock
from typing import Callable, Deque, List, Optional, Set

from tutorial_apps.models import current_time_milli
from .diffing import diff_nights
from .formatting import format_nights

EVENT_QUEUE_LIMIT = 64


class SleepTracker:
    """Tracks tonight's sleep against a SleepNightRepository.

    Every operation returns a ``concurrent.futures.Future``. The storage
    work and the resulting state update both run on a worker thread; the
    state update only happens while the tracker is alive, so work that
    completes after ``close()`` leaves the tracker untouched.

    With ``run_inline=True`` the work runs on the calling thread and the
    returned future is already resolved.
    """

    def __init__(self, repository, max_workers: int = 1, run_inline: bool = False,
                 logger: Optional[logging.Logger] = None):
        self._repository = repository
        self._run_inline = run_inline
        self._executor = None if run_inline else ThreadPoolExecutor(
            max_workers=max(1, max_workers), thread_name_prefix='sleep-io'
        )
        self._logger = logger or logging.getLogger(__name__)
        self._pending: Set[Future] = set()
        self._lock = Lock()
        self._alive = True
        self._listeners: List[Callable[[dict], None]] = []
        self._events: Deque[dict] = deque(maxlen=EVENT_QUEUE_LIMIT)
        self._nights: List[dict] = []
        self.tonight: Optional[dict] = None

    # --- Operations ---

    def initialize_tonight(self) -> Future:
        def _work():
            return self._load_tonight(), self._repository.get_all_nights()
        return self._launch('initialize_tonight', _work, self._apply_refresh)

    def start_tracking(self) -> Future:
        def _work():
            self._repository.insert()
            return self._load_tonight(), self._repository.get_all_nights()
        return self._launch('start_tracking', _work, self._apply_refresh)

    def stop_tracking(self) -> Future:
        def _work():
            night = self.tonight or self._load_tonight()
            if night is None:
                return None
            # A stopped night must end after it starts or it would still read as open
            end = max(current_time_milli(), night['start_time_milli'] + 1)
            stopped = self._repository.update(night['night_id'], end_time_milli=end)
            return stopped, self._load_tonight(), self._repository.get_all_nights()

        def _apply(result):
            if result is None:
                return None
            stopped, tonight, nights = result
            if stopped is not None:
                self._events.append({'kind': 'navigate_to_quality', 'night': stopped})
            self._apply_refresh((tonight, nights))
            return stopped

        return self._launch('stop_tracking', _work, _apply)

    def set_quality(self, night_id: int, quality: int) -> Future:
        if isinstance(quality, bool) or not isinstance(quality, int) or not 0 <= quality <= 5:
            raise ValueError("Sleep quality must be an integer between 0 and 5.")

        def _work():
            updated = self._repository.update(night_id, sleep_quality=quality)
            return updated, self._load_tonight(), self._repository.get_all_nights()

        def _apply(result):
            updated, tonight, nights = result
            self._apply_refresh((tonight, nights))
            return updated

        return self._launch('set_quality', _work, _apply)

    def clear(self) -> Future:
        def _work():
            return self._repository.clear()

        def _apply(deleted):
            self._events.append({'kind': 'show_snackbar', 'deleted': deleted})
            self._apply_refresh((None, []))
            return deleted

        return self._launch('clear', _work, _apply)

    def nights(self) -> Future:
        def _work():
            return self._load_tonight(), self._repository.get_all_nights()

        def _apply(result):
            self._apply_refresh(result)
            return list(self._nights)

        return self._launch('nights', _work, _apply)

    # --- Consumers ---

    def drain_events(self) -> List[dict]:
        with self._lock:
            events = list(self._events)
            self._events.clear()
        return events

    def subscribe(self, listener: Callable[[dict], None]) -> None:
        self._listeners.append(listener)

    def state(self) -> dict:
        with self._lock:
            return {
                'tonight': self.tonight,
                'start_button_visible': self.tonight is None,
                'stop_button_visible': self.tonight is not None,
                'clear_button_visible': bool(self._nights),
                'nights': list(self._nights),
                'nights_text': format_nights(self._nights),
            }

    @property
    def alive(self) -> bool:
        return self._alive

    def close(self) -> None:
        """Cancel outstanding work and stop accepting new operations."""
        with self._lock:
            if not self._alive:
                return
            self._alive = False
            pending = list(self._pending)
            self._listeners.clear()
        for future in pending:
            future.cancel()
        if self._executor is not None:
            self._executor.shutdown(wait=False, cancel_futures=True)
        self._logger.info(f"[sleep-tracker-close] cancelled={len(pending)}")

    # --- Internals ---

    def _load_tonight(self):
        night = self._repository.get_tonight()
        # A night is still open while its end equals its start
        if night is not None and night['end_time_milli'] != night['start_time_milli']:
            return None
        return night

    def _apply_refresh(self, result):
        tonight, nights = result
        previous, self._nights = self._nights, list(nights)
        self.tonight = tonight
        changes = diff_nights(previous, self._nights)
        if changes:
            payload = {'changes': changes, 'tonight': tonight}
            for listener in list(self._listeners):
                listener(payload)
        return tonight

    def _launch(self, operation: str, work, apply) -> Future:
        def _run():
            result = work()
            with self._lock:
                if not self._alive:
                    self._logger.info(f"[sleep-tracker-drop] op={operation} tracker closed")
                    return None
                return apply(result)

        if self._run_inline:
            future: Future = Future()
            if not self._alive:
                future.cancel()
                return future
            try:
                future.set_result(_run())
            except Exception as exc:
                future.set_exception(exc)
            return future

        with self._lock:
            if not self._alive:
                future = Future()
                future.cancel()
                return future
            future = self._executor.submit(_run)
            self._pending.add(future)
        future.add_done_callback(self._forget)
        return future

    def _forget(self, future: Future) -> None:
        with self._lock:
            self._pending.discard(future)
