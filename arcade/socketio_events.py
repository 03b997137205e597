from typing import Any

from flask import current_app, request
from flask_socketio import emit

from arcade import socketio
from arcade.services.games.errors import GameError


class SocketIONotifier:
    """Deliver session events over Socket.IO, one Socket.IO room per PIN.

    Uses the server object directly so it also works from background tasks
    that run without a request context.
    """

    def __init__(self, sio, namespace: str = '/'):
        self.socketio = sio
        self.namespace = namespace

    def join(self, peer_id: str, pin: str) -> None:
        self.socketio.server.enter_room(peer_id, pin, namespace=self.namespace)

    def leave(self, peer_id: str, pin: str) -> None:
        self.socketio.server.leave_room(peer_id, pin, namespace=self.namespace)

    def _emit(self, event: str, payload: Any, **kwargs) -> None:
        args = () if payload is None else (payload,)
        self.socketio.emit(event, *args, namespace=self.namespace, **kwargs)

    def to_peer(self, peer_id: str, event: str, payload: Any) -> None:
        self._emit(event, payload, to=peer_id)

    def to_room(self, pin: str, event: str, payload: Any) -> None:
        self._emit(event, payload, to=pin)

    def to_all(self, event: str, payload: Any) -> None:
        self._emit(event, payload)


def _sessions():
    return current_app.extensions['arcade']


def _get_sid() -> str:
    # type: ignore: request.sid exists in Socket.IO context
    return request.sid  # type: ignore


def _payload(data) -> dict:
    return data if isinstance(data, dict) else {}


def _pin_from(data) -> Any:
    # leave/reset send the bare PIN; accept {'pin': ...} too
    if isinstance(data, dict):
        return data.get('pin')
    return data


def _run(action, *args) -> None:
    """Invoke a session action for the current socket, keeping errors local to it."""
    sid = _get_sid()
    try:
        action(sid, *args)
    except GameError as exc:
        if exc.notify_sender:
            emit('errorMsg', exc.message)
        current_app.logger.debug(f"[rejected] sid={sid} action={action.__name__} error={type(exc).__name__} reason={exc.message}")


def handle_connect(auth=None):
    current_app.logger.info(f"[connect] sid={_get_sid()}")
    emit('updateLeaderboard', _sessions().leaderboard_snapshot())


def handle_disconnect(reason=None):
    sid = _get_sid()
    current_app.logger.info(f"[disconnect] sid={sid} reason={reason}")
    _sessions().disconnect(sid)


def handle_create_game(data):
    data = _payload(data)
    _run(_sessions().create, data.get('gameType'), data.get('username'))


def handle_join_game(data):
    data = _payload(data)
    _run(_sessions().join, data.get('pin'), data.get('username'))


def handle_make_move(data):
    data = _payload(data)
    _run(_sessions().move, data.get('pin'), 'tictactoe', data)


def handle_make_move_memory(data):
    data = _payload(data)
    _run(_sessions().move, data.get('pin'), 'memory', data)


def handle_submit_math_answer(data):
    data = _payload(data)
    _run(_sessions().move, data.get('pin'), 'mathwars', data)


def handle_send_message(data):
    data = _payload(data)
    _run(_sessions().chat, data.get('pin'), data.get('message'), data.get('username'))


def handle_leave_game(data):
    _run(_sessions().leave, _pin_from(data))


def handle_reset_game(data):
    _run(_sessions().reset, _pin_from(data))


def handle_error(exc):
    current_app.logger.exception(f"[socket-error] sid={_get_sid()} event handler failed: {exc}")


def register_socketio_handlers(namespace: str = '/') -> None:
    """Register Socket.IO event handlers on the given namespace."""
    socketio.on_event('connect', handle_connect, namespace=namespace)
    socketio.on_event('disconnect', handle_disconnect, namespace=namespace)
    socketio.on_event('createGame', handle_create_game, namespace=namespace)
    socketio.on_event('joinGame', handle_join_game, namespace=namespace)
    socketio.on_event('makeMove', handle_make_move, namespace=namespace)
    socketio.on_event('makeMoveMemory', handle_make_move_memory, namespace=namespace)
    socketio.on_event('submitMathAnswer', handle_submit_math_answer, namespace=namespace)
    socketio.on_event('sendMessage', handle_send_message, namespace=namespace)
    socketio.on_event('leaveGame', handle_leave_game, namespace=namespace)
    socketio.on_event('resetGame', handle_reset_game, namespace=namespace)
    socketio.on_error(namespace)(handle_error)
