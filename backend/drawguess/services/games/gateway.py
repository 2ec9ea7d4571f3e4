from typing import Any


class SocketIOGateway:
    """Delivers controller notifications through Flask-SocketIO.

    ``socketio.emit`` is used rather than the context-bound ``emit`` so that
    notifications can be sent from timer background tasks as well as from
    event handlers.
    """

    def __init__(self, socketio, namespace: str = '/ws'):
        self._socketio = socketio
        self.namespace = namespace

    def _emit(self, event: str, data: Any = None, **kwargs) -> None:
        if data is None:
            self._socketio.emit(event, namespace=self.namespace, **kwargs)
        else:
            self._socketio.emit(event, data, namespace=self.namespace, **kwargs)

    def emit_all(self, event: str, data: Any = None) -> None:
        self._emit(event, data)

    def emit_to(self, sid: str, event: str, data: Any = None) -> None:
        self._emit(event, data, to=sid)

    def emit_others(self, sid: str, event: str, data: Any = None) -> None:
        self._emit(event, data, skip_sid=sid)
