def create_round(client, **overrides):
    body = {'vocabulary': ['cat', 'dog'], 'duration_seconds': 2, 'tick_interval_seconds': 1}
    body.update(overrides)
    res = client.post('/api/word-game/create', json=body)
    assert res.status_code == 201
    return res.get_json()


def test_index(client):
    res = client.get('/')
    assert res.status_code == 200
    assert 'word-game' in res.get_json()['apps']


def test_create_round_with_defaults(client):
    res = client.post('/api/word-game/create')
    assert res.status_code == 201
    data = res.get_json()
    assert data['score'] == 0
    assert data['time_remaining_seconds'] == 15
    assert data['time_remaining'] == '00:15'
    assert data['finished'] is False
    assert data['current_word'] in data['settings']['vocabulary']
    assert len(data['settings']['vocabulary']) == 21


def test_create_round_rejects_bad_parameters(client):
    assert client.post('/api/word-game/create', json={'duration_seconds': 0}).status_code == 400
    assert client.post('/api/word-game/create', json={'tick_interval_seconds': 'soon'}).status_code == 400
    assert client.post('/api/word-game/create', json={'vocabulary': ['  ']}).status_code == 400
    assert client.post('/api/word-game/create', json={'vocabulary': 'cat'}).status_code == 400


def test_correct_and_skip_update_score(client):
    data = create_round(client)
    rid = data['round_id']
    first = data['current_word']

    res = client.post(f'/api/word-game/{rid}/correct').get_json()
    assert res['score'] == 1
    assert res['buzz'] == 'correct'
    assert res['buzz_pattern'] == [100, 100, 100, 100, 100, 100]
    assert res['current_word'] != first

    res = client.post(f'/api/word-game/{rid}/skip').get_json()
    assert res['score'] == 0
    assert res['buzz'] == 'skip'

    res = client.post(f'/api/word-game/{rid}/buzz/ack').get_json()
    assert res['buzz'] == 'none'


def test_round_finishes_on_ticks_and_reports_score(client, registry):
    rid = create_round(client)['round_id']
    client.post(f'/api/word-game/{rid}/correct')
    client.post(f'/api/word-game/{rid}/correct')

    # Still running
    assert client.get(f'/api/word-game/{rid}/score').status_code == 409

    live = registry.get(rid)
    live.controller.on_tick()
    live.controller.on_tick()

    state = client.get(f'/api/word-game/{rid}/state').get_json()
    assert state['finished'] is True
    assert state['buzz'] == 'game_over'
    assert state['finish_pending'] is True

    state = client.post(f'/api/word-game/{rid}/finish/ack').get_json()
    assert state['finish_pending'] is False
    assert state['finished'] is True

    score = client.get(f'/api/word-game/{rid}/score').get_json()
    assert score['final_score'] == 2

    # Actions after the end are ignored
    state = client.post(f'/api/word-game/{rid}/correct').get_json()
    assert state['score'] == 2


def test_events_are_drained_once(client, registry):
    rid = create_round(client)['round_id']
    client.post(f'/api/word-game/{rid}/correct')
    client.post(f'/api/word-game/{rid}/skip')

    events = client.get(f'/api/word-game/{rid}/events').get_json()['events']
    assert [e['buzz'] for e in events] == ['correct', 'skip']
    assert client.get(f'/api/word-game/{rid}/events').get_json()['events'] == []

    live = registry.get(rid)
    live.controller.on_tick()
    live.controller.on_tick()
    events = client.get(f'/api/word-game/{rid}/events').get_json()['events']
    kinds = [(e['kind'], e['buzz']) for e in events]
    assert kinds.count(('buzz', 'game_over')) == 1
    assert ('finished', 'none') in kinds


def test_play_again_opens_fresh_round(client, registry):
    rid = create_round(client)['round_id']
    client.post(f'/api/word-game/{rid}/correct')

    res = client.post(f'/api/word-game/{rid}/play-again')
    assert res.status_code == 201
    data = res.get_json()
    assert data['round_id'] != rid
    assert data['score'] == 0
    assert data['settings']['duration_seconds'] == 2
    assert sorted(data['settings']['vocabulary']) == ['cat', 'dog']
    assert registry.get(rid) is None


def test_delete_closes_round(client, registry):
    rid = create_round(client)['round_id']
    live = registry.get(rid)

    res = client.delete(f'/api/word-game/{rid}')
    assert res.status_code == 200
    assert not live.alive
    assert client.get(f'/api/word-game/{rid}/state').status_code == 404
    assert client.post(f'/api/word-game/{rid}/correct').status_code == 404
    assert client.delete(f'/api/word-game/{rid}').status_code == 404


def test_unknown_round_is_404(client):
    assert client.get('/api/word-game/NOPE/state').status_code == 404
    assert client.get('/api/word-game/NOPE/events').status_code == 404
    assert client.post('/api/word-game/NOPE/play-again').status_code == 404


def test_create_round_keeps_words_verbatim(client):
    data = create_round(client, vocabulary=[' cat '])
    assert data['current_word'] == ' cat '
    assert data['settings']['vocabulary'] == [' cat ']


def test_finished_rounds_are_swept_after_retention(client, registry):
    rid = create_round(client)['round_id']
    running = create_round(client)['round_id']
    live = registry.get(rid)
    live.controller.on_tick()
    live.controller.on_tick()

    # Still inside the retention window
    assert registry.sweep(now=live.controller.finished_at + 1) == []
    assert client.get(f'/api/word-game/{rid}/score').get_json()['final_score'] == 0

    swept = registry.sweep(now=live.controller.finished_at + registry.retention_seconds)
    assert [r.round_id for r in swept] == [rid]
    assert not live.alive
    assert client.get(f'/api/word-game/{rid}/score').status_code == 404
    assert registry.get(running) is not None


def test_opening_a_round_sweeps_expired_ones(client, registry):
    registry.retention_seconds = 0
    rid = create_round(client)['round_id']
    live = registry.get(rid)
    live.controller.on_tick()
    live.controller.on_tick()
    assert len(registry) == 1

    create_round(client)
    assert registry.get(rid) is None
    assert len(registry) == 1
