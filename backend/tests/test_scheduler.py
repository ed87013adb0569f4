import logging
from threading import Lock

from tutorial_apps.services.word_game import scheduler
from tutorial_apps.services.word_game.scheduler import schedule_round_ticker


def test_ticker_disabled_in_tests_by_default(flask_app, registry):
    live = registry.open(['cat', 'dog'], 1, 1, 5)
    schedule_round_ticker(flask_app, live.round_id)
    assert live.controller.time_remaining_seconds == 1
    assert not live.controller.finished


def test_ticker_runs_round_to_completion(flask_app, client):
    flask_app.config['ENABLE_SCHEDULER_IN_TESTS'] = True
    res = client.post('/api/word-game/create', json={
        'vocabulary': ['cat'], 'duration_seconds': 1, 'tick_interval_seconds': 1,
    })
    assert res.status_code == 201
    data = res.get_json()
    assert data['finished'] is True
    assert data['time_remaining_seconds'] == 0
    assert data['buzz'] == 'game_over'
    assert data['round_id'] not in scheduler._scheduled_rounds


def test_ticker_ignores_closed_round(flask_app, registry):
    flask_app.config['ENABLE_SCHEDULER_IN_TESTS'] = True
    live = registry.open(['cat'], 1, 1, 5)
    registry.close(live.round_id)
    schedule_round_ticker(flask_app, live.round_id)
    assert live.controller.time_remaining_seconds == 1
    assert not live.controller.finished


class CloseOnAcquire:
    """Lock that lets a teardown run just before the ticker gets in."""

    def __init__(self, live):
        self._live = live
        self._lock = Lock()

    def __enter__(self):
        self._live.controller.close()
        return self._lock.__enter__()

    def __exit__(self, *exc):
        return self._lock.__exit__(*exc)


def test_ticker_aborts_when_round_closes_while_sleeping(flask_app, registry, monkeypatch, caplog):
    flask_app.config['ENABLE_SCHEDULER_IN_TESTS'] = True
    caplog.set_level(logging.INFO, logger=flask_app.logger.name)
    live = registry.open(['cat'], 3, 1, 5)
    monkeypatch.setattr(scheduler.socketio, 'sleep', lambda seconds: registry.close(live.round_id))

    schedule_round_ticker(flask_app, live.round_id)

    assert live.controller.time_remaining_seconds == 3
    assert not live.controller.finished
    assert f'[ticker-abort] round={live.round_id} closed' in caplog.text
    assert live.round_id not in scheduler._scheduled_rounds


def test_ticker_rechecks_liveness_under_the_round_lock(flask_app, registry, monkeypatch, caplog):
    flask_app.config['ENABLE_SCHEDULER_IN_TESTS'] = True
    caplog.set_level(logging.INFO, logger=flask_app.logger.name)
    live = registry.open(['cat'], 3, 1, 5)
    live.lock = CloseOnAcquire(live)
    monkeypatch.setattr(scheduler.socketio, 'sleep', lambda seconds: None)

    schedule_round_ticker(flask_app, live.round_id)

    assert live.controller.time_remaining_seconds == 3
    assert live.controller.drain_events() == []
    assert '[ticker-abort]' in caplog.text
    assert '[tick]' not in caplog.text
