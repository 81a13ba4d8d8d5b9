from flipcard.services.games import registry


def test_socket_connect_and_join(sio_client):
    # Ensure we are connected to /ws
    if not sio_client.is_connected('/ws'):
        sio_client.connect(namespace='/ws')
    assert sio_client.is_connected('/ws')

    sio_client.emit('join_game', {'game_code': 'ABCD'}, namespace='/ws')
    received = sio_client.get_received('/ws')
    assert any(pkt['name'] in ('connected', 'joined') for pkt in received)


def test_ping_pong(sio_client):
    sio_client.get_received('/ws')
    sio_client.emit('ping', {'n': 1}, namespace='/ws')
    received = sio_client.get_received('/ws')
    assert any(pkt['name'] == 'pong' and pkt['args'][0] == {'n': 1} for pkt in received)


def test_state_updates_reach_the_room(sio_client, client):
    code = client.post('/api/games/create').get_json()['game_code']
    sio_client.emit('join_game', {'game_code': code}, namespace='/ws')
    sio_client.get_received('/ws')  # flush

    client.post(f'/api/games/{code}/start')
    events = sio_client.get_received('/ws')
    assert any(e['name'] == 'state_update' and e['args'][0] == {'game_code': code} for e in events)


def test_owner_disconnect_disposes_game(flask_app, sio_client, client):
    code = client.post('/api/games/create').get_json()['game_code']

    from flipcard import socketio as _sio
    owner_client = _sio.test_client(flask_app, namespace='/ws')
    owner_client.emit('join_game', {'game_code': code, 'is_session_owner': True}, namespace='/ws')

    sio_client.emit('join_game', {'game_code': code}, namespace='/ws')
    sio_client.get_received('/ws')  # flush

    owner_client.disconnect(namespace='/ws')
    events = sio_client.get_received('/ws')
    assert any(e['name'] == 'session_ended' for e in events)
    assert registry.get_session(code) is None
    assert client.get(f'/api/games/{code}/state').status_code == 404


def test_owner_leaving_the_room_disposes_game(flask_app, sio_client, client):
    code = client.post('/api/games/create').get_json()['game_code']

    from flipcard import socketio as _sio
    owner_client = _sio.test_client(flask_app, namespace='/ws')
    owner_client.emit('join_game', {'game_code': code, 'is_session_owner': True}, namespace='/ws')

    sio_client.emit('join_game', {'game_code': code}, namespace='/ws')
    sio_client.get_received('/ws')  # flush

    # The owner stays connected but leaves the board
    owner_client.emit('leave_game', {'game_code': code}, namespace='/ws')
    assert owner_client.is_connected('/ws')
    assert any(e['name'] == 'left' for e in owner_client.get_received('/ws'))
    events = sio_client.get_received('/ws')
    assert any(e['name'] == 'session_ended' and e['args'][0] == {'game_code': code} for e in events)
    assert client.get(f'/api/games/{code}/state').status_code == 404
    owner_client.disconnect(namespace='/ws')


def test_guest_leaving_keeps_the_game(flask_app, sio_client, client):
    code = client.post('/api/games/create').get_json()['game_code']

    from flipcard import socketio as _sio
    owner_client = _sio.test_client(flask_app, namespace='/ws')
    owner_client.emit('join_game', {'game_code': code, 'is_session_owner': True}, namespace='/ws')

    sio_client.emit('join_game', {'game_code': code}, namespace='/ws')
    sio_client.emit('leave_game', {'game_code': code}, namespace='/ws')
    sio_client.disconnect(namespace='/ws')
    assert registry.get_session(code) is not None
    owner_client.disconnect(namespace='/ws')
    assert registry.get_session(code) is None
