from flask import current_app, request
from drawguess import socketio
from typing import Any, Dict


def _get_sid() -> str:
    # type: ignore: request.sid exists in Socket.IO context
    return request.sid  # type: ignore


def _game():
    return current_app.extensions['game_session']


def _payload(data) -> Dict[str, Any]:
    return data if isinstance(data, dict) else {}


def handle_connect(auth=None):
    _game().connect(_get_sid())


def handle_disconnect(*args):
    _game().leave(_get_sid())


def handle_join(data=None):
    # Clients send either the bare display name or {'name': ...}
    name = data.get('name') if isinstance(data, dict) else data
    _game().join(_get_sid(), name)


def handle_leave_game(data=None):
    _game().leave(_get_sid())


def handle_stroke(data=None):
    _game().stroke(_get_sid(), data)


def handle_clear(data=None):
    _game().clear(_get_sid())


def handle_chat(data=None):
    data = _payload(data)
    _game().chat(_get_sid(), data.get('from'), data.get('text'))


def handle_guess(data=None):
    data = _payload(data)
    _game().guess(_get_sid(), data.get('from'), data.get('text'))


def handle_start_game(data=None):
    _game().start_game(_get_sid())


def handle_stop_game(data=None):
    _game().stop_game(_get_sid())


def register_socketio_handlers(namespace: str = '/ws') -> None:
    """Register Socket.IO event handlers on the game namespace."""
    socketio.on_event('connect', handle_connect, namespace=namespace)
    socketio.on_event('disconnect', handle_disconnect, namespace=namespace)
    socketio.on_event('join', handle_join, namespace=namespace)
    socketio.on_event('leaveGame', handle_leave_game, namespace=namespace)
    socketio.on_event('stroke', handle_stroke, namespace=namespace)
    socketio.on_event('clear', handle_clear, namespace=namespace)
    socketio.on_event('chat', handle_chat, namespace=namespace)
    socketio.on_event('guess', handle_guess, namespace=namespace)
    socketio.on_event('startGame', handle_start_game, namespace=namespace)
    socketio.on_event('stopGame', handle_stop_game, namespace=namespace)
