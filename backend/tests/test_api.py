def test_index(client):
    res = client.get('/')
    assert res.status_code == 200
    assert 'message' in res.get_json()


def test_state_when_idle(client):
    res = client.get('/api/game/state')
    assert res.status_code == 200
    state = res.get_json()
    assert state['phase'] == 'idle'
    assert state['players'] == []
    assert state['state']['active'] is False
    assert state['durations'] == {
        'countdown': 20,
        'round': 60,
        'intermission': 5,
        'session': 600,
        'score_reset': 10,
    }


def test_state_during_round(flask_app, client, clock):
    game = flask_app.extensions['game_session']
    game.join('sid-a', 'Alice')
    game.join('sid-b', 'Bob')
    state = client.get('/api/game/state').get_json()
    assert state['phase'] == 'countdown'
    assert state['countdown'] == 20

    clock.advance(20)
    state = client.get('/api/game/state').get_json()
    assert state['players'] == ['Alice', 'Bob']
    assert state['state']['currentDrawerName'] == 'Alice'
    assert state['state']['roundSecondsRemaining'] == 60
    # The secret word is never exposed over HTTP
    assert 'cat' not in str(state)


def test_leaderboard(flask_app, client, clock):
    game = flask_app.extensions['game_session']
    game.join('sid-a', 'Alice')
    game.join('sid-b', 'Bob')
    assert client.get('/api/game/leaderboard').get_json()['leader'] is None

    clock.advance(20)
    game.guess('sid-b', None, 'Cat')
    board = client.get('/api/game/leaderboard').get_json()
    assert board['leader'] == 'Bob'
    assert board['leaderboard'] == [
        {'name': 'Bob', 'points': 10},
        {'name': 'Alice', 'points': 5},
    ]
