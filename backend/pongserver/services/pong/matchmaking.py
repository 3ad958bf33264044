import logging
import threading
from typing import Callable, Dict, Optional

from .liveness import DEFAULT_TIMEOUT_MS
from .players import Player, PlayerRegistry
from .rooms import Room

logger = logging.getLogger(__name__)


def run_inline(fn, *args):
    return fn(*args)


class Matchmaker:
    """Process-wide coordination context.

    Owns the player registry, the room registry and the single room that is
    currently accepting players. Rooms are filled one at a time: an arriving
    player joins the accepting room, and a new room is opened only once that
    one is full.

    Every state mutation happens under ``lock``, which is never held across a
    heartbeat round-trip. Allocation and disconnect cleanup, the two places
    that probe clients, run through ``spawn`` and are serialized by
    ``allocation_lock``; lock order is always allocation_lock, then lock.
    Both are re-entrant because tearing down a room re-enqueues its players
    from inside the teardown.
    """

    def __init__(
        self,
        win_score: int = 7,
        name_max_length: int = 40,
        heartbeat_timeout_ms: int = DEFAULT_TIMEOUT_MS,
        heartbeat_enabled: bool = True,
        spawn: Optional[Callable] = None,
    ):
        self.win_score = win_score
        self.name_max_length = name_max_length
        self.heartbeat_timeout_ms = heartbeat_timeout_ms
        self.heartbeat_enabled = heartbeat_enabled
        self.players = PlayerRegistry()
        self.rooms: Dict[str, Room] = {}
        self.accepting_room: Optional[Room] = None
        self.lock = threading.RLock()
        self.allocation_lock = threading.RLock()
        # spawn(fn, *args): run matchmaking work; inline unless a background runner is given
        self.spawn = spawn or run_inline

    @classmethod
    def from_config(cls, config, spawn: Optional[Callable] = None) -> 'Matchmaker':
        return cls(
            win_score=int(config.get('WIN_SCORE', 7)),
            name_max_length=int(config.get('NAME_MAX_LENGTH', 40)),
            heartbeat_timeout_ms=int(config.get('HEARTBEAT_TIMEOUT_MS', DEFAULT_TIMEOUT_MS)),
            heartbeat_enabled=bool(config.get('HEARTBEAT_ENABLED', True)),
            spawn=spawn,
        )

    # ---- rooms ----

    def open_room(self) -> Room:
        room = Room(self)
        self.rooms[room.id] = room
        self.accepting_room = room
        logger.info(f"[matchmaking] opened room {room.id}")
        return room

    def discard_room(self, room: Room) -> None:
        self.rooms.pop(room.id, None)
        if self.accepting_room is room:
            self.accepting_room = None

    def room_of(self, player: Player) -> Optional[Room]:
        if player.room is not None:
            return player.room
        if self.accepting_room is not None and player in self.accepting_room.players:
            return self.accepting_room
        return None

    def enqueue(self, player: Player):
        """Queue ``player`` for the accepting room.

        The work runs through ``spawn``: inline it returns the room the player
        was seated in, with a background runner it returns immediately.
        """
        logger.debug(f"[matchmaking] queuing {player}")
        return self.spawn(self.allocate, player)

    def allocate(self, player: Player) -> Optional[Room]:
        with self.allocation_lock:
            while True:
                with self.lock:
                    if self.players.lookup(player.id) is not player or not player.connected:
                        logger.debug(f"[matchmaking] {player} gone before seating")
                        return None
                    seated = self.room_of(player)
                    if seated is not None:
                        return seated
                    room = self.accepting_room
                    if room is None or room.full:
                        room = self.open_room()
                # Evict a dead occupant before pairing against it; an ended
                # room drops out of accepting_room, so the loop reallocates.
                if not room.refresh():
                    continue
                with self.lock:
                    if room is self.accepting_room and not room.full:
                        room.add_player(player)
                        return room

    # ---- connection events ----

    def login(self, connection, name) -> Player:
        name = str(name if name is not None else '')[:self.name_max_length]
        with self.lock:
            existing = self.players.lookup(connection.sid)
            if existing is not None and existing.connected:
                logger.warning(f"[login] {existing} logged in again, renaming to {name!r}")
                existing.set_name(name)
                return existing
            player = self.players.register(Player(connection, name, self))
            logger.info(f"[login] {player}; online: {', '.join(str(p) for p in self.players)}")
        self.enqueue(player)
        return player

    def rename(self, sid: str, name) -> Optional[Player]:
        with self.lock:
            player = self.players.lookup(sid)
            if player is not None:
                player.set_name(name)
            return player

    def leave(self, sid: str) -> None:
        logger.info(f"[leave] received from {sid}")

    def disconnect(self, sid: str) -> None:
        with self.lock:
            player = self.players.lookup(sid)
            if player is None:
                return
            player.connection.mark_closed()
            logger.info(f"[disconnect] {player}")
        self.spawn(self.drop, player)

    def drop(self, player: Player) -> None:
        """Tear down after a disconnect: refresh the player's room, then forget it."""
        with self.allocation_lock:
            with self.lock:
                room = self.room_of(player)
            if room is not None:
                room.refresh()
            with self.lock:
                if self.players.lookup(player.id) is player:
                    player.delete()

    def status(self) -> dict:
        with self.lock:
            return {
                'players': len(self.players),
                'rooms': len(self.rooms),
                'active_rooms': sum(1 for r in self.rooms.values() if r.full),
                'accepting_room': self.accepting_room.id if self.accepting_room else None,
            }
