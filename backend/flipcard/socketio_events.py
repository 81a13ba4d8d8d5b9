import time
from typing import Any, Dict

from flask import current_app, request
from flask_socketio import emit, join_room, leave_room

from flipcard import socketio
from flipcard.services.games import registry
from flipcard.services.games.scheduler import emit_session_ended

# The browser tab that created a board is its owner; when the last owner
# socket goes away the board is disposed after a short grace period.
OWNER_GRACE_SEC = 2.0

_sid_to_ctx: Dict[str, Dict[str, Any]] = {}
_owner_count: Dict[str, int] = {}
_end_deadline: Dict[str, float] = {}


def _get_sid() -> str:
    return request.sid  # type: ignore[attr-defined]


def handle_connect():
    emit('connected', {'message': 'Connected to /ws'})


def handle_disconnect(reason=None):
    ctx = _sid_to_ctx.pop(_get_sid(), None)
    if ctx and ctx.get('is_session_owner'):
        _release_owner(ctx['game_code'])


def handle_join_game(data):
    game_code = (data or {}).get('game_code')
    is_session_owner = bool((data or {}).get('is_session_owner'))
    if not game_code:
        emit('error', {'message': 'game_code is required'})
        return
    code = game_code.upper()
    room = f"game:{code}"
    join_room(room)
    previous = _sid_to_ctx.get(_get_sid())
    already_owner = bool(previous and previous['game_code'] == code and previous.get('is_session_owner'))
    if previous and previous.get('is_session_owner') and previous['game_code'] != code:
        _release_owner(previous['game_code'])
    _sid_to_ctx[_get_sid()] = {'game_code': code, 'is_session_owner': is_session_owner or already_owner}
    if is_session_owner and not already_owner:
        _owner_count[code] = _owner_count.get(code, 0) + 1
        _end_deadline.pop(code, None)
    emit('joined', {'room': room})


def handle_leave_game(data):
    game_code = (data or {}).get('game_code')
    if not game_code:
        emit('error', {'message': 'game_code is required'})
        return
    code = game_code.upper()
    room = f"game:{code}"
    leave_room(room)
    emit('left', {'room': room})
    ctx = _sid_to_ctx.get(_get_sid())
    if ctx and ctx['game_code'] == code:
        _sid_to_ctx.pop(_get_sid(), None)
        if ctx.get('is_session_owner'):
            _release_owner(code)


def handle_ping(data):
    emit('pong', data or {})


def _release_owner(game_code: str) -> None:
    """One owner socket is gone; end the board once none are left."""
    _owner_count[game_code] = max(0, _owner_count.get(game_code, 0) - 1)
    if current_app.config.get('TESTING'):
        if _owner_count.get(game_code, 0) == 0:
            _end_session(game_code)
        return
    _schedule_end_if_no_owner(game_code)


def _end_session(game_code: str) -> None:
    """Dispose the board and tell any remaining viewers."""
    registry.dispose_session(game_code)
    emit_session_ended(game_code)
    _owner_count.pop(game_code, None)
    _end_deadline.pop(game_code, None)


def _schedule_end_if_no_owner(game_code: str, delay_sec: float = OWNER_GRACE_SEC) -> None:
    if _owner_count.get(game_code, 0) > 0:
        return
    _end_deadline[game_code] = time.time() + delay_sec

    def _runner(code: str, deadline: float):
        sleep_for = max(0.0, deadline - time.time())
        if sleep_for:
            socketio.sleep(sleep_for)
        # A new owner joining in the meantime clears the deadline
        if _owner_count.get(code, 0) == 0 and _end_deadline.get(code) == deadline:
            _end_session(code)

    socketio.start_background_task(_runner, game_code, _end_deadline[game_code])


def register_socketio_handlers(testing: bool = False) -> None:
    """Register Socket.IO event handlers.

    Always register on namespace '/ws'. When testing is True, also mirror
    handlers on the default namespace '/' to accommodate the test harness.
    """
    namespaces = ['/ws', '/'] if testing else ['/ws']
    for namespace in namespaces:
        socketio.on_event('connect', handle_connect, namespace=namespace)
        socketio.on_event('disconnect', handle_disconnect, namespace=namespace)
        socketio.on_event('join_game', handle_join_game, namespace=namespace)
        socketio.on_event('leave_game', handle_leave_game, namespace=namespace)
        socketio.on_event('ping', handle_ping, namespace=namespace)
