import logging
from typing import Dict, Iterator, Optional

from . import liveness

NOT_PRESENT = 'not present'

logger = logging.getLogger(__name__)


class PairingError(RuntimeError):
    """A player's room/opponent was used while the pairing was not set."""


class Player:
    """Per-connection state: display name, score and the current pairing.

    ``room`` and ``opponent`` are set together by ``join_room`` and cleared
    together by ``leave_room``. While waiting for an opponent a player has
    neither; it only sits in the matchmaker's accepting room.
    """

    def __init__(self, connection, name: str, matchmaker):
        self.connection = connection
        self.name = name
        self.score = 0
        self.room = None
        self.opponent: Optional['Player'] = None
        self.matchmaker = matchmaker

    @property
    def id(self) -> str:
        return self.connection.sid

    @property
    def connected(self) -> bool:
        return self.connection.connected

    @property
    def paired(self) -> bool:
        return self.room is not None and self.opponent is not None

    def require_opponent(self) -> 'Player':
        if self.opponent is None:
            raise PairingError(f"{self} has no opponent")
        return self.opponent

    def require_room(self):
        if self.room is None:
            raise PairingError(f"{self} is not in a room")
        return self.room

    def emit(self, event: str, *args) -> None:
        self.connection.emit(event, *args)

    def set_name(self, name: str) -> None:
        self.name = name

    def join_room(self, room, opponent: 'Player') -> None:
        self.room = room
        self.opponent = opponent
        self.emit('inRoom')
        self.emit('opponentName', opponent.name)

    def leave_room(self) -> None:
        self.opponent = None
        self.room = None
        self.score = 0
        self.emit('cancelGame')
        self.emit('opponentName', NOT_PRESENT)
        if self.connected:
            self.matchmaker.enqueue(self)

    def delete(self) -> None:
        """Drop this player for good: close the connection, forget it, detach it."""
        self.matchmaker.players.remove(self.id)
        self.connection.close()
        self.leave_room()

    def ping(self, on_failure) -> bool:
        # The round-trip runs without the state lock so relays keep flowing
        mm = self.matchmaker
        if liveness.probe(self.connection, mm.heartbeat_timeout_ms, mm.heartbeat_enabled):
            return True
        with mm.lock:
            logger.info(f"[ping] {self} unresponsive, deleting")
            self.delete()
            on_failure()
        return False

    def __str__(self):
        return f"{self.name}:{self.id}"

    def __repr__(self):
        return f"<Player {self}>"


class PlayerRegistry:
    """Live players keyed by connection id."""

    def __init__(self):
        self._players: Dict[str, Player] = {}

    def register(self, player: Player) -> Player:
        stale = self._players.get(player.id)
        if stale is not None and stale is not player:
            logger.warning(f"[registry] replacing stale entry {stale} with {player}")
        self._players[player.id] = player
        return player

    def lookup(self, sid: str) -> Optional[Player]:
        return self._players.get(sid)

    def remove(self, sid: str) -> None:
        self._players.pop(sid, None)

    def __contains__(self, sid) -> bool:
        return sid in self._players

    def __iter__(self) -> Iterator[Player]:
        return iter(list(self._players.values()))

    def __len__(self) -> int:
        return len(self._players)
