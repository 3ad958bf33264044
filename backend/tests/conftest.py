import itertools
import os
import sys
import pytest

# Ensure the backend root (containing the `pongserver` package) is on sys.path
CURRENT_DIR = os.path.dirname(__file__)
BACKEND_ROOT = os.path.abspath(os.path.join(CURRENT_DIR, '..'))
if BACKEND_ROOT not in sys.path:
    sys.path.insert(0, BACKEND_ROOT)

from socketio.exceptions import TimeoutError as AckTimeout

from pongserver import create_app, socketio
from pongserver.services.pong import Matchmaker
from pongserver.transport import pack_payload


class TestConfig:
    TESTING = True
    SECRET_KEY = os.environ.get('SECRET_KEY', 'test-secret')
    HOST = '127.0.0.1'
    PORT = 9387
    ALLOWED_ORIGINS = ['http://localhost']
    WIN_SCORE = 7
    NAME_MAX_LENGTH = 40
    HEARTBEAT_TIMEOUT_MS = 200
    # The Socket.IO test client never acknowledges server-initiated calls
    HEARTBEAT_ENABLED = False
    LOG_LEVEL = 'DEBUG'


class FakeConnection:
    """In-memory stand-in for a Socket.IO session."""

    _ids = itertools.count(1)

    def __init__(self, sid=None, alive=True):
        self.sid = sid or f"sid-{next(self._ids)}"
        self.alive = alive
        self.closed = False
        self.sent = []
        self.calls = []

    @property
    def connected(self):
        return not self.closed

    def emit(self, event, *args):
        if self.closed:
            return
        # Record what the client would receive after Socket.IO packing
        data = pack_payload(args)
        if data is None:
            delivered = ()
        elif isinstance(data, tuple):
            delivered = data
        else:
            delivered = (data,)
        self.sent.append((event, delivered))

    def call(self, event, timeout, *args):
        self.calls.append((event, timeout))
        if not self.alive:
            raise AckTimeout()

    def mark_closed(self):
        self.closed = True

    def close(self):
        self.closed = True

    def events(self, name=None):
        return [args for event, args in self.sent if name is None or event == name]

    def clear(self):
        self.sent.clear()


@pytest.fixture()
def matchmaker():
    return Matchmaker(win_score=7, name_max_length=40, heartbeat_timeout_ms=200, heartbeat_enabled=True)


@pytest.fixture()
def connect(matchmaker):
    """Log a fake client in: connect('Alice') -> (player, connection)."""
    def _connect(name, alive=True):
        conn = FakeConnection(alive=alive)
        player = matchmaker.login(conn, name)
        return player, conn
    return _connect


@pytest.fixture()
def flask_app():
    application = create_app(TestConfig)
    with application.app_context():
        yield application


@pytest.fixture()
def client(flask_app):
    return flask_app.test_client()


@pytest.fixture()
def sio_factory(flask_app):
    clients = []

    def _make():
        test_client = socketio.test_client(flask_app, flask_test_client=flask_app.test_client())
        clients.append(test_client)
        return test_client

    yield _make
    for test_client in clients:
        if test_client.is_connected():
            test_client.disconnect()
