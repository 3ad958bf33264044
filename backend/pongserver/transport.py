import threading

from flask_socketio import disconnect
from socketio.exceptions import TimeoutError as AckTimeout

from pongserver import socketio


def pack_payload(args):
    """Shape positional event arguments into the single ``data`` value Socket.IO sends.

    No arguments -> None, one -> the value itself, several -> a tuple, which
    Socket.IO delivers to the client as separate arguments.
    """
    if not args:
        return None
    if len(args) == 1:
        return args[0]
    return tuple(args)


class SocketConnection:
    """One Socket.IO session, addressed by its sid."""

    def __init__(self, sid: str, namespace: str = '/'):
        self.sid = sid
        self.namespace = namespace
        self.closed = False

    @property
    def connected(self) -> bool:
        return not self.closed

    def emit(self, event: str, *args, callback=None) -> None:
        if self.closed:
            return
        data = pack_payload(args)
        if data is None:
            socketio.emit(event, to=self.sid, namespace=self.namespace, callback=callback)
        else:
            socketio.emit(event, data, to=self.sid, namespace=self.namespace, callback=callback)

    def call(self, event: str, timeout: float, *args) -> None:
        """Send ``event`` and block until the client acknowledges it.

        Raises ``socketio.exceptions.TimeoutError`` when no acknowledgement
        arrives within ``timeout`` seconds. Must not run on the handler
        thread of this same client, which is the thread that reads the ack.
        """
        acked = threading.Event()
        self.emit(event, *args, callback=lambda *_: acked.set())
        if not acked.wait(timeout):
            raise AckTimeout(f"no ack for {event!r} from {self.sid} within {timeout}s")

    def mark_closed(self) -> None:
        self.closed = True

    def close(self) -> None:
        if self.closed:
            return
        self.closed = True
        disconnect(sid=self.sid, namespace=self.namespace)

    def __repr__(self):
        return f"<SocketConnection {self.sid} {'closed' if self.closed else 'open'}>"
