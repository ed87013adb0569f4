from typing import Set

from tutorial_apps import socketio
from .round import BUZZ_PATTERNS


_scheduled_rounds: Set[str] = set()


def round_room(round_id: str) -> str:
    return f"round:{round_id}"


def make_round_publisher(round_id: str):
    """Build a round listener that pushes state and one-shot events over /ws."""
    room = round_room(round_id)

    def _publish(snapshot, new_events):
        socketio.emit('state_update', {'round_id': round_id, 'state': snapshot.to_dict()}, to=room, namespace='/ws')
        for event in new_events:
            if event.kind == 'buzz':
                socketio.emit('buzz', {
                    'round_id': round_id,
                    'buzz': event.buzz.value,
                    'pattern': list(BUZZ_PATTERNS[event.buzz]),
                }, to=room, namespace='/ws')
            elif event.kind == 'finished':
                socketio.emit('game_finished', {'round_id': round_id, 'score': event.score}, to=room, namespace='/ws')

    return _publish


def schedule_round_ticker(app, round_id: str) -> None:
    """Start the interval clock for a live round.

    - No-ops in TESTING mode unless ENABLE_SCHEDULER_IN_TESTS is set
    - Ensures a single ticker per round
    - Calls on_tick() once per tick interval until the round finishes or is closed
    """
    if app.config.get('TESTING') and not app.config.get('ENABLE_SCHEDULER_IN_TESTS'):
        return

    registry = app.extensions['word_game']
    live = registry.get(round_id)
    if live is None or not live.alive:
        return

    if live.round_id in _scheduled_rounds:
        app.logger.info(f"[ticker-skip] round={live.round_id} already scheduled")
        return
    _scheduled_rounds.add(live.round_id)
    app.logger.info(
        f"[ticker-set] round={live.round_id} duration={live.duration_seconds}s interval={live.tick_interval_seconds}s"
    )

    def _worker(rid: str, interval: int):
        try:
            while True:
                socketio.sleep(interval)
                current = registry.get(rid)
                if current is None or not current.alive:
                    app.logger.info(f"[ticker-abort] round={rid} closed")
                    return
                with current.lock:
                    # Teardown may have won the lock while we slept
                    if not current.alive:
                        app.logger.info(f"[ticker-abort] round={rid} closed")
                        return
                    current.controller.on_tick()
                    remaining = current.controller.time_remaining_seconds
                    finished = current.controller.finished
                app.logger.debug(f"[tick] round={rid} remaining={remaining}s")
                if finished:
                    app.logger.info(f"[ticker-done] round={rid} score={current.controller.score}")
                    return
        finally:
            _scheduled_rounds.discard(rid)

    if app.config.get('TESTING'):
        _worker(live.round_id, live.tick_interval_seconds)
    else:
        socketio.start_background_task(_worker, live.round_id, live.tick_interval_seconds)
