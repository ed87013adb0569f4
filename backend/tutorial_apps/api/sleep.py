from flask import Blueprint, jsonify, request, current_app


sleep = Blueprint('sleep', __name__)


def _tracker():
    return current_app.extensions['sleep_tracker']


@sleep.route('/tonight', methods=['GET'])
def get_tonight():
    tracker = _tracker()
    tracker.initialize_tonight().result()
    return jsonify(tracker.state())


@sleep.route('/start', methods=['POST'])
def start_tracking():
    tracker = _tracker()
    tonight = tracker.start_tracking().result()
    current_app.logger.info(f"[sleep-start] night={tonight['night_id'] if tonight else None}")
    return jsonify(tracker.state()), 201


@sleep.route('/stop', methods=['POST'])
def stop_tracking():
    tracker = _tracker()
    stopped = tracker.stop_tracking().result()
    if stopped is None:
        return jsonify({'error': 'Sleep tracking has not been started'}), 400
    current_app.logger.info(f"[sleep-stop] night={stopped['night_id']}")
    payload = tracker.state()
    payload['stopped'] = stopped
    return jsonify(payload)


@sleep.route('/<int:night_id>/quality', methods=['POST'])
def set_quality(night_id):
    data = request.get_json(silent=True) or {}
    quality = data.get('quality')
    try:
        future = _tracker().set_quality(night_id, quality)
    except ValueError as exc:
        return jsonify({'error': str(exc)}), 400
    updated = future.result()
    if updated is None:
        return jsonify({'error': 'Night not found'}), 404
    return jsonify(updated)


@sleep.route('/nights', methods=['GET'])
def get_nights():
    tracker = _tracker()
    tracker.nights().result()
    state = tracker.state()
    return jsonify({'nights': state['nights'], 'nights_text': state['nights_text']})


@sleep.route('/nights', methods=['DELETE'])
def clear_nights():
    tracker = _tracker()
    deleted = tracker.clear().result()
    current_app.logger.info(f"[sleep-clear] deleted={deleted}")
    return jsonify({'deleted': deleted})


@sleep.route('/events', methods=['GET'])
def drain_events():
    return jsonify({'events': _tracker().drain_events()})
