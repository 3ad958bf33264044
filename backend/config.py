import os

DEFAULT_PORT = 9387


def _flag(name, default):
    return os.environ.get(name, default).strip().lower() not in ('0', 'false', 'no', 'off', '')


class Config:
    SECRET_KEY = os.environ.get('SECRET_KEY') or 'you-will-never-guess'
    HOST = os.environ.get('HOST', '0.0.0.0')
    PORT = int(os.environ.get('PORT', str(DEFAULT_PORT)))
    ALLOWED_ORIGINS = [
        origin.strip()
        for origin in os.environ.get(
            'ALLOWED_ORIGINS',
            'http://localhost:5173,http://127.0.0.1:5173,http://localhost:9387',
        ).split(',')
        if origin.strip()
    ]
    # First player to this score wins the room
    WIN_SCORE = int(os.environ.get('WIN_SCORE', '7'))
    NAME_MAX_LENGTH = int(os.environ.get('NAME_MAX_LENGTH', '40'))
    # Heartbeat response window (ms). Disabling only skips the round-trip;
    # closed connections still fail the probe.
    HEARTBEAT_TIMEOUT_MS = int(os.environ.get('HEARTBEAT_TIMEOUT_MS', '200'))
    HEARTBEAT_ENABLED = _flag('HEARTBEAT_ENABLED', '1')
    LOG_LEVEL = os.environ.get('LOG_LEVEL', 'INFO')
