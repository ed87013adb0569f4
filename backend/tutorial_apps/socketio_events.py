from flask_socketio import join_room, leave_room, emit
from tutorial_apps import socketio
from flask import current_app, request
from tutorial_apps.services.word_game.scheduler import round_room
from typing import Dict, Any
import time


def handle_connect():
    emit('connected', {'message': 'Connected to /ws'})


def handle_disconnect(*args):
    # An owning screen going away tears its round down once no other owner
    # is attached
    ctx = _sid_to_ctx.pop(_get_sid(), None)
    if not ctx:
        return
    round_id = ctx.get('round_id')
    if ctx.get('is_owner') and round_id:
        _owner_count[round_id] = max(0, _owner_count.get(round_id, 0) - 1)
        app = current_app._get_current_object()
        # In tests, close immediately for determinism; in prod, allow a grace period
        if app.config.get('TESTING'):
            if _owner_count.get(round_id, 0) == 0:
                _close_round(app, round_id)
            return
        _schedule_close_if_no_owner(app, round_id)


def handle_join_round(data):
    round_id = (data or {}).get('round_id')
    is_owner = bool((data or {}).get('is_owner'))
    if not round_id or not isinstance(round_id, str):
        emit('error', {'message': 'round_id must be a non-empty string'})
        return
    round_id = round_id.upper()
    live = current_app.extensions['word_game'].get(round_id)
    if live is None:
        emit('error', {'message': 'Round not found'})
        return
    room = round_room(round_id)
    join_room(room)
    _sid_to_ctx[_get_sid()] = {'round_id': round_id, 'is_owner': is_owner}
    if is_owner:
        _owner_count[round_id] = _owner_count.get(round_id, 0) + 1
        _cancel_scheduled_close(round_id)
    with live.lock:
        state = live.controller.snapshot().to_dict()
    emit('joined', {'room': room, 'state': state})


def handle_leave_round(data):
    round_id = (data or {}).get('round_id')
    if not round_id or not isinstance(round_id, str):
        emit('error', {'message': 'round_id must be a non-empty string'})
        return
    round_id = round_id.upper()
    room = round_room(round_id)
    leave_room(room)
    emit('left', {'room': room})
    # An owner leaving explicitly closes the round right away
    ctx = _sid_to_ctx.get(_get_sid())
    if ctx and ctx.get('is_owner') and ctx.get('round_id') == round_id:
        _sid_to_ctx.pop(_get_sid(), None)
        _close_round(current_app._get_current_object(), round_id)


def handle_watch_sleep(data=None):
    join_room('sleep')
    emit('joined', {'room': 'sleep', 'state': current_app.extensions['sleep_tracker'].state()})


def handle_ping(data):
    emit('pong', data or {})

# ---- Round owner lifecycle helpers ----

_sid_to_ctx: Dict[str, Dict[str, Any]] = {}
_owner_count: Dict[str, int] = {}
_close_deadline: Dict[str, float] = {}

def _get_sid() -> str:
    # request.sid exists in Socket.IO context
    return request.sid  # type: ignore

def _close_round(app, round_id: str) -> None:
    """Tear the round down: cancel its ticker and notify watchers."""
    live = app.extensions['word_game'].close(round_id)
    if live is not None:
        app.logger.info(f"[round-teardown] round={round_id} score={live.controller.score}")
        socketio.emit('round_closed', {'round_id': round_id}, to=round_room(round_id), namespace='/ws')
    _owner_count.pop(round_id, None)
    _close_deadline.pop(round_id, None)

def _schedule_close_if_no_owner(app, round_id: str, delay_sec: float = 2.0) -> None:
    if _owner_count.get(round_id, 0) > 0:
        return
    _close_deadline[round_id] = time.time() + delay_sec

    def _runner(rid: str, deadline: float):
        sleep_for = max(0.0, deadline - time.time())
        if sleep_for:
            socketio.sleep(sleep_for)
        if _owner_count.get(rid, 0) == 0 and _close_deadline.get(rid) == deadline:
            _close_round(app, rid)

    socketio.start_background_task(_runner, round_id, _close_deadline[round_id])

def _cancel_scheduled_close(round_id: str) -> None:
    _close_deadline.pop(round_id, None)



def register_socketio_handlers(testing: bool = False) -> None:
    """Register Socket.IO event handlers.

    Always register on namespace '/ws'. When testing is True, also mirror
    handlers on the default namespace '/' to accommodate the test harness.
    """
    namespaces = ['/ws', '/'] if testing else ['/ws']
    for namespace in namespaces:
        socketio.on_event('connect', handle_connect, namespace=namespace)
        socketio.on_event('disconnect', handle_disconnect, namespace=namespace)
        socketio.on_event('join_round', handle_join_round, namespace=namespace)
        socketio.on_event('leave_round', handle_leave_round, namespace=namespace)
        socketio.on_event('watch_sleep', handle_watch_sleep, namespace=namespace)
        socketio.on_event('ping', handle_ping, namespace=namespace)
