from type2live import socketio


def _names(packets):
    return [pkt['name'] for pkt in packets]


def _first(packets, name):
    return next(pkt['args'][0] for pkt in packets if pkt['name'] == name)


def test_socket_connect_and_join(sio_client):
    # Ensure we are connected to /ws
    if not sio_client.is_connected('/ws'):
        sio_client.connect(namespace='/ws')
    assert sio_client.is_connected('/ws')
    assert 'connected' in _names(sio_client.get_received('/ws'))

    sio_client.emit('join_room', {'room_code': 'abcd'}, namespace='/ws')
    joined = _first(sio_client.get_received('/ws'), 'joined')
    assert joined['room'] == 'room:ABCD'
    assert joined['is_session_owner'] is False
    assert joined['session'] is None


def test_join_requires_room_code(sio_client):
    sio_client.get_received('/ws')
    sio_client.emit('join_room', {}, namespace='/ws')
    error = _first(sio_client.get_received('/ws'), 'error')
    assert error['code'] == 'malformed_input'


def test_ping(sio_client):
    sio_client.get_received('/ws')
    sio_client.emit('ping', {'t': 1}, namespace='/ws')
    assert _first(sio_client.get_received('/ws'), 'pong') == {'t': 1}


def test_submit_before_join(sio_client):
    sio_client.get_received('/ws')
    sio_client.emit('submit_word', {'word': 'git'}, namespace='/ws')
    error = _first(sio_client.get_received('/ws'), 'error')
    assert error['code'] == 'invalid_state'


def test_game_events_are_broadcast_to_the_room(client, sio_client, terms, make_room):
    code, host, (bob,) = make_room('Alice', 'Bob')
    sio_client.emit('join_room', {'room_code': code, 'player_id': bob['id']}, namespace='/ws')
    sio_client.get_received('/ws')

    client.post(f'/api/rooms/{code}/start', json={'player_id': host['id']})
    turn = _first(sio_client.get_received('/ws'), 'turn_update')['turn']
    assert turn['sequence_number'] == 1

    sio_client.emit('submit_word', {'word': turn['target_word']}, namespace='/ws')
    packets = sio_client.get_received('/ws')
    names = _names(packets)
    assert 'submission_ack' in names
    assert names.index('submission_result') < names.index('turn_update')
    result = _first(packets, 'submission_result')
    assert result['player_id'] == bob['id']
    assert result['is_valid'] is True
    assert _first(packets, 'turn_update')['turn']['sequence_number'] == 2

    sio_client.emit('pass_turn', {}, namespace='/ws')
    packets = sio_client.get_received('/ws')
    assert _first(packets, 'pass_ack')['turn']['sequence_number'] == 3
    assert 'state_update' in _names(packets)

    sio_client.emit('submit_word', {'word': ''}, namespace='/ws')
    assert _first(sio_client.get_received('/ws'), 'error')['code'] == 'malformed_input'


def test_host_disconnect_ends_session(flask_app, sio_client, client, terms, make_room):
    code, host, (bob,) = make_room('Alice', 'Bob')
    client.post(f'/api/rooms/{code}/start', json={'player_id': host['id']})

    host_client = socketio.test_client(flask_app, namespace='/ws')
    host_client.emit('join_room', {'room_code': code, 'player_id': host['id']}, namespace='/ws')
    assert _first(host_client.get_received('/ws'), 'joined')['is_session_owner'] is True

    # Guest joins
    sio_client.emit('join_room', {'room_code': code, 'player_id': bob['id']}, namespace='/ws')
    sio_client.get_received('/ws')  # flush

    # Disconnect host -> expect session_ended for guest
    host_client.disconnect(namespace='/ws')
    ended = _first(sio_client.get_received('/ws'), 'session_ended')
    assert ended['end_reason'] == 'host_left'

    state = client.get(f'/api/rooms/{code}/state').get_json()
    assert state['status'] == 'finished'
    assert state['game']['end_reason'] == 'host_left'


def test_host_leaving_lobby_notifies_guests(flask_app, sio_client, make_room):
    code, host, (bob,) = make_room('Alice', 'Bob')
    host_client = socketio.test_client(flask_app, namespace='/ws')
    host_client.emit('join_room', {'room_code': code, 'player_id': host['id']}, namespace='/ws')
    sio_client.emit('join_room', {'room_code': code, 'player_id': bob['id']}, namespace='/ws')
    sio_client.get_received('/ws')

    host_client.emit('leave_room', {'room_code': code}, namespace='/ws')
    assert 'left' in _names(host_client.get_received('/ws'))
    assert _first(sio_client.get_received('/ws'), 'session_ended')['end_reason'] == 'host_left'
    host_client.disconnect(namespace='/ws')


def test_bad_typing_start_is_reported_to_the_sender(client, sio_client, terms, make_room):
    code, host, (bob,) = make_room('Alice', 'Bob')
    sio_client.emit('join_room', {'room_code': code, 'player_id': bob['id']}, namespace='/ws')
    client.post(f'/api/rooms/{code}/start', json={'player_id': host['id']})
    turn = _first(sio_client.get_received('/ws'), 'turn_update')['turn']

    sio_client.emit('submit_word', {'word': turn['target_word'], 'typing_started_at': '2026-01-01T00:00:00Z'},
                    namespace='/ws')
    packets = sio_client.get_received('/ws')
    assert _first(packets, 'error')['code'] == 'malformed_input'
    assert 'submission_result' not in _names(packets)
