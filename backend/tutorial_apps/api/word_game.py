from flask import Blueprint, jsonify, request, current_app
from tutorial_apps.services.word_game.round import DEFAULT_VOCABULARY
from tutorial_apps.services.word_game.scheduler import make_round_publisher, schedule_round_ticker


word_game = Blueprint('word_game', __name__)


def _registry():
    return current_app.extensions['word_game']


def _round_payload(live):
    payload = live.controller.snapshot().to_dict()
    payload['round_id'] = live.round_id
    payload['settings'] = live.settings()
    return payload


def _open_round(vocabulary, duration, interval, warning):
    live = _registry().open(vocabulary, duration, interval, warning)
    live.controller.subscribe(make_round_publisher(live.round_id))
    current_app.logger.info(
        f"[round-open] round={live.round_id} words={len(live.vocabulary)} duration={duration}s"
    )
    schedule_round_ticker(current_app._get_current_object(), live.round_id)
    return live


def _parse_positive_int(data, key, default):
    value = data.get(key)
    if value is None:
        return default
    try:
        value = int(value)
    except (TypeError, ValueError):
        raise ValueError(f"{key} must be an integer")
    if value <= 0:
        raise ValueError(f"{key} must be positive")
    return value


@word_game.route('/create', methods=['POST'])
def create_round():
    data = request.get_json(silent=True) or {}
    cfg = current_app.config
    try:
        duration = _parse_positive_int(data, 'duration_seconds', int(cfg.get('WORD_GAME_DURATION_SEC', 15)))
        interval = _parse_positive_int(data, 'tick_interval_seconds', int(cfg.get('WORD_GAME_TICK_SEC', 1)))
        vocabulary = data.get('vocabulary') or list(DEFAULT_VOCABULARY)
        if not isinstance(vocabulary, list) or not all(isinstance(w, str) for w in vocabulary):
            raise ValueError("vocabulary must be a list of strings")
        live = _open_round(vocabulary, duration, interval, int(cfg.get('WORD_GAME_WARNING_SEC', 5)))
    except ValueError as exc:
        return jsonify({'error': str(exc)}), 400
    return jsonify(_round_payload(live)), 201


@word_game.route('/<string:round_id>/state', methods=['GET'])
def get_round_state(round_id):
    live = _registry().get(round_id)
    if live is None:
        return jsonify({'error': 'Round not found'}), 404
    with live.lock:
        return jsonify(_round_payload(live))


def _apply(round_id, action):
    live = _registry().get(round_id)
    if live is None:
        return jsonify({'error': 'Round not found'}), 404
    with live.lock:
        getattr(live.controller, action)()
        return jsonify(_round_payload(live))


@word_game.route('/<string:round_id>/correct', methods=['POST'])
def correct(round_id):
    return _apply(round_id, 'correct')


@word_game.route('/<string:round_id>/skip', methods=['POST'])
def skip(round_id):
    return _apply(round_id, 'skip')


@word_game.route('/<string:round_id>/buzz/ack', methods=['POST'])
def acknowledge_buzz(round_id):
    return _apply(round_id, 'acknowledge_buzz')


@word_game.route('/<string:round_id>/finish/ack', methods=['POST'])
def acknowledge_finish(round_id):
    return _apply(round_id, 'acknowledge_finish')


@word_game.route('/<string:round_id>/events', methods=['GET'])
def drain_events(round_id):
    live = _registry().get(round_id)
    if live is None:
        return jsonify({'error': 'Round not found'}), 404
    with live.lock:
        events = live.controller.drain_events()
    return jsonify({'round_id': live.round_id, 'events': [e.to_dict() for e in events]})


@word_game.route('/<string:round_id>/score', methods=['GET'])
def final_score(round_id):
    live = _registry().get(round_id)
    if live is None:
        return jsonify({'error': 'Round not found'}), 404
    with live.lock:
        finished = live.controller.finished
        score = live.controller.score
    if not finished:
        return jsonify({'error': 'Round is still running'}), 409
    return jsonify({'round_id': live.round_id, 'final_score': score})


@word_game.route('/<string:round_id>/play-again', methods=['POST'])
def play_again(round_id):
    old = _registry().close(round_id)
    if old is None:
        return jsonify({'error': 'Round not found'}), 404
    current_app.logger.info(f"[play-again] round={old.round_id} final_score={old.controller.score}")
    live = _open_round(old.vocabulary, old.duration_seconds, old.tick_interval_seconds, old.warning_threshold_seconds)
    return jsonify(_round_payload(live)), 201


@word_game.route('/<string:round_id>', methods=['DELETE'])
def close_round(round_id):
    live = _registry().close(round_id)
    if live is None:
        return jsonify({'error': 'Round not found'}), 404
    current_app.logger.info(f"[round-close] round={live.round_id} score={live.controller.score}")
    return jsonify({'message': 'Round closed', 'round_id': live.round_id})
