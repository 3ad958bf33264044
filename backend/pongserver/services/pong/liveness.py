import logging

from socketio.exceptions import SocketIOError

HEARTBEAT_EVENT = 'ping'
DEFAULT_TIMEOUT_MS = 200

logger = logging.getLogger(__name__)


def probe(connection, timeout_ms: int = DEFAULT_TIMEOUT_MS, enabled: bool = True) -> bool:
    """Heartbeat round-trip to one client.

    Returns False when the connection is already closed, or when the client
    does not acknowledge within ``timeout_ms``. With ``enabled`` off only the
    open/closed check is made.
    """
    if not connection.connected:
        return False
    if not enabled:
        return True
    try:
        connection.call(HEARTBEAT_EVENT, timeout=timeout_ms / 1000.0)
    except SocketIOError as exc:
        logger.warning(f"[heartbeat-fail] {connection!r} no ack within {timeout_ms}ms: {exc!r}")
        return False
    return True
