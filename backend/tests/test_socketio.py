def _events(test_client, name):
    return [pkt['args'] for pkt in test_client.get_received('/ws') if pkt['name'] == name]


def _names(received):
    return [pkt['name'] for pkt in received]


def test_connect_receives_snapshot(sio_factory):
    alice = sio_factory()
    assert alice.is_connected('/ws')
    received = alice.get_received('/ws')
    assert {'scoreUpdate', 'userList', 'gameState'} <= set(_names(received))


def test_join_broadcasts_roster_and_starts_countdown(sio_factory):
    alice = sio_factory()
    bob = sio_factory()
    alice.emit('join', 'Alice', namespace='/ws')
    bob.emit('join', {'name': 'Bob'}, namespace='/ws')

    received = alice.get_received('/ws')
    user_lists = [pkt['args'][0] for pkt in received if pkt['name'] == 'userList']
    assert user_lists[-1] == ['Alice', 'Bob']
    countdown = [pkt['args'][0] for pkt in received if pkt['name'] == 'countdown']
    assert countdown == [{'secondsRemaining': 20}]


def test_round_flow_over_socket(sio_factory, clock):
    alice = sio_factory()
    bob = sio_factory()
    alice.emit('join', 'Alice', namespace='/ws')
    bob.emit('join', 'Bob', namespace='/ws')
    alice.get_received('/ws')
    bob.get_received('/ws')

    clock.advance(20)
    assert _events(alice, 'yourWord') == [[{'word': 'cat'}]]
    assert _events(bob, 'yourWord') == []

    stroke = {'from': {'x': 0, 'y': 0}, 'to': {'x': 5, 'y': 5}}
    bob.emit('stroke', stroke, namespace='/ws')
    assert _events(alice, 'remoteStroke') == []

    alice.emit('stroke', stroke, namespace='/ws')
    assert _events(bob, 'remoteStroke') == [[stroke]]
    assert _events(alice, 'remoteStroke') == []

    bob.emit('guess', {'from': 'Bob', 'text': 'cat'}, namespace='/ws')
    scores = _events(alice, 'scoreUpdate')
    assert scores[-1] == [{'scores': {'Alice': 5, 'Bob': 10}}]


def test_disconnect_ends_session_for_remaining_player(sio_factory, clock):
    alice = sio_factory()
    bob = sio_factory()
    alice.emit('join', 'Alice', namespace='/ws')
    bob.emit('join', 'Bob', namespace='/ws')
    clock.advance(20)
    alice.get_received('/ws')

    bob.disconnect(namespace='/ws')
    ended = _events(alice, 'sessionEnded')
    assert len(ended) == 1
    assert ended[0][0]['winner'] is None


def test_manual_start_is_answered_privately(sio_factory):
    alice = sio_factory()
    bob = sio_factory()
    alice.emit('join', 'Alice', namespace='/ws')
    alice.get_received('/ws')
    bob.get_received('/ws')

    alice.emit('startGame', namespace='/ws')
    notes = _events(alice, 'chatMessage')
    assert notes == [[{'from': 'System', 'text': 'At least 2 players are required to start.'}]]
    assert _events(bob, 'chatMessage') == []
