from pongserver.services.pong import ACTIVE, ENDED, LOBBY, Player, Room
from conftest import FakeConnection


def _pair(connect):
    alice, c1 = connect('Alice')
    bob, c2 = connect('Bob')
    return alice, c1, bob, c2


def test_single_login_stays_in_lobby(matchmaker, connect):
    alice, conn = connect('Alice')
    room = matchmaker.accepting_room
    assert room.state == LOBBY
    assert room.players == [alice]
    assert conn.events('inRoom') == []


def test_pairing_is_symmetric(matchmaker, connect):
    alice, c1, bob, c2 = _pair(connect)
    room = alice.room
    assert room is not None and room.state == ACTIVE
    assert alice.opponent is bob and bob.opponent is alice
    assert bob.room is room
    assert c1.events('inRoom') == [()] and c2.events('inRoom') == [()]
    assert c1.events('opponentName') == [('Bob',)]
    assert c2.events('opponentName') == [('Alice',)]


def test_full_room_rejects_third_player(matchmaker, connect):
    alice, _, bob, _ = _pair(connect)
    room = alice.room
    stranger = matchmaker.players.register(
        Player(FakeConnection(), 'Eve', matchmaker)
    )
    assert room.add_player(stranger) is False
    assert room.players == [alice, bob]
    assert stranger.room is None


def test_six_points_keep_room_active(connect):
    alice, c1, bob, c2 = _pair(connect)
    room = alice.room
    for _ in range(6):
        room.increment_opponent_score(alice.id)
    assert room.state == ACTIVE
    assert bob.score == 6 and alice.score == 0
    assert c2.events('scores')[-1] == ({'self': 6, 'opponent': 0},)
    assert c1.events('scores')[-1] == ({'self': 0, 'opponent': 6},)


def test_seventh_point_ends_room_and_requeues_both(matchmaker, connect):
    alice, c1, bob, c2 = _pair(connect)
    room = alice.room
    for _ in range(7):
        room.increment_opponent_score(alice.id)

    assert room.state == ENDED
    assert room.id not in matchmaker.rooms
    assert c1.events('cancelGame') == [()] and c2.events('cancelGame') == [()]
    assert ('not present',) in c1.events('opponentName')

    # both still connected, so they seed the next room together
    new_room = alice.room
    assert new_room is not None and new_room is not room
    assert new_room.state == ACTIVE
    assert alice.opponent is bob and bob.room is new_room
    assert alice.score == 0 and bob.score == 0


def test_end_is_idempotent(matchmaker, connect):
    alice, c1, bob, c2 = _pair(connect)
    room = alice.room
    room.end()
    c1.clear()
    room.end()
    assert c1.sent == []


def test_refresh_failure_tears_down_both(matchmaker, connect):
    alice, c1, bob, c2 = _pair(connect)
    room = alice.room
    alice.score, bob.score = 3, 2
    c2.alive = False

    assert room.refresh() is False

    assert room.state == ENDED
    assert bob.room is None and bob.opponent is None and bob.score == 0
    assert c2.closed and c2.sid not in matchmaker.players
    # alice survives and waits alone in a fresh lobby
    assert alice.room is None and alice.opponent is None and alice.score == 0
    assert matchmaker.accepting_room.players == [alice]
    assert c1.events('cancelGame') == [()]


def test_refresh_pings_every_occupant(connect):
    alice, c1, bob, c2 = _pair(connect)
    calls_before = (len(c1.calls), len(c2.calls))
    assert alice.room.refresh() is True
    assert (len(c1.calls), len(c2.calls)) == (calls_before[0] + 1, calls_before[1] + 1)


def test_room_ids_are_unique(matchmaker):
    ids = {Room(matchmaker).id for _ in range(50)}
    assert len(ids) == 50
