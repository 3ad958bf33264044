"""Pong domain services: players, rooms, matchmaking, relay and liveness.

This package holds the pairing and session logic. It only talks to clients
through connection objects exposing ``emit``/``call``/``close``, keeping
Socket.IO concerns in ``pongserver.transport`` and ``pongserver.socketio_events``.
"""

from .players import PairingError, Player, PlayerRegistry
from .rooms import ACTIVE, ENDED, LOBBY, Room
from .matchmaking import Matchmaker

__all__ = [
    'ACTIVE',
    'ENDED',
    'LOBBY',
    'Matchmaker',
    'PairingError',
    'Player',
    'PlayerRegistry',
    'Room',
]
