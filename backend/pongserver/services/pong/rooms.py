import logging
import uuid
from typing import List

from .players import Player

logger = logging.getLogger(__name__)

LOBBY = 'lobby'
ACTIVE = 'active'
ENDED = 'ended'

CAPACITY = 2


class Room:
    """A two-player session: lobby -> active -> ended, never reused."""

    def __init__(self, matchmaker):
        self.id = str(uuid.uuid4())
        self.players: List[Player] = []
        self.ended = False
        self.matchmaker = matchmaker

    @property
    def full(self) -> bool:
        return len(self.players) >= CAPACITY

    @property
    def state(self) -> str:
        if self.ended:
            return ENDED
        return ACTIVE if self.full else LOBBY

    def add_player(self, player: Player) -> bool:
        if self.ended:
            logger.warning(f"[room] {self.id} adding {player} to ended room")
            return False
        if self.full:
            logger.warning(f"[room] {self.id} adding {player} to full room")
            return False
        if player in self.players:
            logger.warning(f"[room] {self.id} {player} already seated")
            return False
        self.players.append(player)
        logger.info(f"[room] {self.id} seated {player} ({len(self.players)}/{CAPACITY})")
        if self.full:
            self.setup()
        return True

    def setup(self) -> None:
        first, second = self.players
        first.join_room(self, second)
        second.join_room(self, first)
        logger.info(f"[room] {self.id} active: {first} vs {second}")

    def end(self) -> None:
        if self.ended:
            return
        self.ended = True
        occupants, self.players = self.players, []
        self.matchmaker.discard_room(self)
        logger.info(f"[room] {self.id} ended, releasing {', '.join(str(p) for p in occupants) or 'nobody'}")
        # Each still-connected occupant re-enters matchmaking from leave_room
        for player in occupants:
            player.leave_room()

    def refresh(self) -> bool:
        """Ping every occupant; one dead peer ends the room for both."""
        with self.matchmaker.lock:
            occupants = list(self.players)
        for player in occupants:
            if not player.ping(self.end):
                return False
        return not self.ended

    def increment_opponent_score(self, source_sid: str) -> None:
        # The sender reports that its opponent just scored against it
        player = self.matchmaker.players.lookup(source_sid)
        if player is None:
            logger.debug(f"[score] {self.id} unknown sender {source_sid}")
            return
        opponent = player.require_opponent()
        opponent.score += 1
        logger.info(f"[score] {self.id} {opponent} -> {opponent.score} (reported by {player})")
        opponent.emit('scores', {'self': opponent.score, 'opponent': player.score})
        player.emit('scores', {'self': player.score, 'opponent': opponent.score})
        if opponent.score >= self.matchmaker.win_score:
            logger.info(f"[score] {self.id} {opponent} wins {opponent.score}-{player.score}")
            self.end()

    def __repr__(self):
        return f"<Room {self.id} {self.state} {[str(p) for p in self.players]}>"
