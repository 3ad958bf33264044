from flask import current_app, request

from pongserver import socketio
from pongserver.services.pong import relay
from pongserver.transport import SocketConnection

NAMESPACE = '/'


def _matchmaker():
    return current_app.extensions['pong']


def _get_sid() -> str:
    # request.sid exists in Socket.IO context
    return request.sid  # type: ignore


def handle_connect(auth=None):
    current_app.logger.debug(f"[connect] {_get_sid()}")


def handle_disconnect(reason=None):
    current_app.logger.info(f"[disconnect] {_get_sid()} reason={reason}")
    _matchmaker().disconnect(_get_sid())


def handle_login(name=None):
    connection = SocketConnection(_get_sid(), namespace=NAMESPACE)
    player = _matchmaker().login(connection, name)
    current_app.logger.info(f"[login] {player}")


def handle_set_name(name=None):
    if _matchmaker().rename(_get_sid(), name) is None:
        current_app.logger.debug(f"[setName] ignored for unknown connection {_get_sid()}")


def handle_leave(*args):
    _matchmaker().leave(_get_sid())


def _relay_handler(event: str):
    def handler(*args):
        relay.dispatch(_matchmaker(), _get_sid(), event, *args)
    handler.__name__ = f"handle_{event}"
    return handler


def register_socketio_handlers(namespace: str = NAMESPACE) -> None:
    """Register Socket.IO event handlers on ``namespace``.

    Gameplay events are bound once here for every connection; whether they
    are forwarded is decided per event from the sender's current pairing.
    """
    socketio.on_event('connect', handle_connect, namespace=namespace)
    socketio.on_event('disconnect', handle_disconnect, namespace=namespace)
    socketio.on_event('login', handle_login, namespace=namespace)
    socketio.on_event('setName', handle_set_name, namespace=namespace)
    socketio.on_event('leave', handle_leave, namespace=namespace)
    for event in relay.RELAY_EVENTS:
        socketio.on_event(event, _relay_handler(event), namespace=namespace)
