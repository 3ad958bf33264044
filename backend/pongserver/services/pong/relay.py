"""Gameplay event relay between paired players.

Handlers are looked up by inbound event name and run against the sender's
current pairing; payloads are passed through untouched. The physics runs in
the browsers, so nothing here inspects ball or paddle values.
"""

import logging
from typing import Callable, Dict

logger = logging.getLogger(__name__)

SCORE_EVENT = 'opponentScored'

# inbound name -> name the opponent receives. 'paddingPosition' is what
# deployed clients listen for, so it is not renamed to match the inbound event.
RELAY_EVENTS: Dict[str, str] = {
    'paddleHit': 'paddleHit',
    'paddleSpeedChange': 'paddleSpeedChange',
    'startGame': 'startGame',
    SCORE_EVENT: 'scored',
    'paddlePosition': 'paddingPosition',
}


def _forward(outbound: str) -> Callable:
    def handler(player, *args):
        player.require_opponent().emit(outbound, *args)
    handler.__name__ = f"forward_{outbound}"
    return handler


_forward_scored = _forward(RELAY_EVENTS[SCORE_EVENT])


def _opponent_scored(player, *args):
    _forward_scored(player, *args)
    player.require_room().increment_opponent_score(player.id)


HANDLERS: Dict[str, Callable] = {
    inbound: _forward(outbound) for inbound, outbound in RELAY_EVENTS.items()
}
HANDLERS[SCORE_EVENT] = _opponent_scored


def dispatch(matchmaker, sid: str, event: str, *args) -> bool:
    """Apply the relay handler for ``event`` sent by ``sid``.

    Returns False when the event was dropped: the sender is gone (a disconnect
    can be processed while its events are still in flight) or not paired.
    """
    handler = HANDLERS.get(event)
    if handler is None:
        raise KeyError(f"no relay handler for {event!r}")
    with matchmaker.lock:
        player = matchmaker.players.lookup(sid)
        if player is None or not player.paired:
            logger.debug(f"[relay] dropping {event} from {player or sid}: not paired")
            return False
        handler(player, *args)
        return True
