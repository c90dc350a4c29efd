"""Room-level orchestration around the game engine.

Keeps one live ``GameSession`` per room code and wires its events to
storage (player scores, turn state, the submission log) and to Socket.IO
broadcasts on the ``room:<CODE>`` channel.
"""

import threading
import time
from contextlib import contextmanager
from typing import Dict, Optional, Tuple

from flask import current_app, has_app_context

from type2live import db, socketio
from type2live.models import GameRecord, Player, Room, WordSubmission
from type2live.services.game import (
    DictionaryExhausted,
    GameError,
    GameSession,
    InvalidSubmissionState,
    TurnPolicy,
    UnauthorizedMutation,
)
from type2live.services.terms import load_dictionary


class PassCooldown(GameError):
    code = 'pass_cooldown'
    status = 429


class RoomFull(GameError):
    code = 'room_full'
    status = 403


def room_channel(room_code: str) -> str:
    return f"room:{room_code}"


@contextmanager
def app_scope(app):
    # Reuse the caller's context (and its db session) when there is one.
    if has_app_context():
        yield
    else:
        with app.app_context():
            yield


class SessionRegistry:
    """Room code -> the single authoritative session for that room."""

    def __init__(self):
        self._sessions: Dict[str, GameSession] = {}
        self._lock = threading.Lock()

    def get(self, room_code: str) -> Optional[GameSession]:
        with self._lock:
            return self._sessions.get(room_code.upper())

    def require(self, room_code: str) -> GameSession:
        session = self.get(room_code)
        if session is None:
            raise InvalidSubmissionState(f'No game in progress in room {room_code.upper()}')
        return session

    def open(self, app, room: Room, game: GameRecord) -> GameSession:
        session = GameSession(
            room_code=room.room_code,
            authority_id=room.host_player_id,
            dictionary=load_dictionary(),
            players=[p.id for p in room.players],
            policy=TurnPolicy.from_config(app.config),
        )
        session.add_listener(_make_listener(app, room.room_code, room.id, game.id))
        with self._lock:
            self._sessions[room.room_code] = session
        return session

    def discard(self, room_code: str) -> None:
        with self._lock:
            self._sessions.pop(room_code.upper(), None)

    def clear(self) -> None:
        with self._lock:
            self._sessions.clear()


registry = SessionRegistry()
_last_pass: Dict[Tuple[str, int], float] = {}


def _make_listener(app, room_code: str, room_id: int, game_id: int):
    def listener(event, payload):
        with app_scope(app):
            try:
                _persist_event(app, event, payload, room_id, game_id)
            except Exception as exc:
                db.session.rollback()
                app.logger.error(f"[persist-error] room={room_code} event={event} error={exc}")
            socketio.emit(event, payload, to=room_channel(room_code), namespace='/ws')
            if event == 'turn_update':
                from type2live.services.scheduler import schedule_turn_timeout
                schedule_turn_timeout(app, room_code, payload['turn']['sequence_number'])
    return listener


def _sync_standing(player_id, combo, max_combo, total_score):
    player = db.session.get(Player, player_id)
    if player is None:
        return
    player.combo = combo
    player.max_combo = max(player.max_combo or 0, max_combo)
    player.score = total_score
    db.session.add(player)


def _persist_event(app, event, payload, room_id, game_id):
    game = db.session.get(GameRecord, game_id)
    if event == 'turn_update':
        turn = payload['turn']
        game.current_turn_type = turn['kind']
        game.current_target_word = turn['target_word']
        game.current_constraint_char = turn['constraint_char']
        game.turn_start_time = turn['started_at']
        game.turn_sequence_number = turn['sequence_number']
        db.session.add(game)
    elif event == 'submission_result':
        turn = payload['turn']
        db.session.add(WordSubmission(
            game_id=game_id,
            player_id=payload['player_id'],
            word=payload['word'],
            score=payload['points_awarded'],
            combo_at_time=payload['combo'],
            is_valid=payload['is_valid'],
            turn_type=turn['kind'],
            turn_sequence_number=turn['sequence_number'],
            target_word=turn['target_word'],
            constraint_char=turn['constraint_char'],
            typing_duration_ms=payload['duration_ms'],
            coefficient=payload['coefficient'],
        ))
        _sync_standing(payload['player_id'], payload['combo'], payload['max_combo'], payload['total_score'])
    elif event == 'state_update':
        for standing in payload['players']:
            _sync_standing(standing['player_id'], standing['combo'], standing['max_combo'], standing['total_score'])
    elif event == 'session_ended':
        game.ended_at = payload['ended_at']
        game.end_reason = payload['end_reason']
        db.session.add(game)
        room = db.session.get(Room, room_id)
        if room is not None and room.status == 'playing':
            room.status = 'finished'
            db.session.add(room)
    db.session.commit()


# ---- room operations used by HTTP routes and socket handlers ----

def get_room(room_code: str) -> Room:
    return Room.query.filter_by(room_code=room_code.upper()).first_or_404()


def get_player(room: Room, player_id) -> Player:
    player = Player.query.filter_by(id=player_id, room_id=room.id).first()
    if player is None:
        raise UnauthorizedMutation(f'Player {player_id} is not in room {room.room_code}')
    return player


def create_room(host_name: str, time_limit_sec: Optional[int] = None) -> Tuple[Room, Player]:
    cfg = current_app.config
    room = Room(
        time_limit_sec=time_limit_sec or int(cfg.get('GAME_DURATION_SEC', 120)),
        max_players=int(cfg.get('MAX_PLAYERS', 8)),
    )
    db.session.add(room)
    db.session.commit()
    host = Player(name=host_name, room_id=room.id)
    db.session.add(host)
    db.session.commit()
    room.host_player_id = host.id
    db.session.add(room)
    db.session.commit()
    current_app.logger.info(f"[room-create] room={room.room_code} host={host.id}")
    return room, host


def join_room(room: Room, name: str) -> Player:
    if room.status != 'waiting':
        raise InvalidSubmissionState('This room is not accepting players')
    if room.max_players and len(room.players) >= room.max_players:
        raise RoomFull(f'Room {room.room_code} is full')
    player = Player(name=name, room_id=room.id)
    db.session.add(player)
    db.session.commit()
    socketio.emit('state_update', {'room_code': room.room_code}, to=room_channel(room.room_code), namespace='/ws')
    return player


def start_game(room: Room, actor_id) -> GameSession:
    """Host-only. Loads the dictionary and opens turn #1. Idempotent while playing."""
    if room.status == 'playing':
        session = registry.get(room.room_code)
        if session is not None:
            session.require_authority(actor_id)
            return session
    if room.status != 'waiting':
        raise InvalidSubmissionState('Game has already finished')
    if actor_id != room.host_player_id:
        raise UnauthorizedMutation('Only the host may start the game')

    app = current_app._get_current_object()
    game = GameRecord(room_id=room.id, started_at=time.time())
    db.session.add(game)
    db.session.commit()
    room.status = 'playing'
    db.session.add(room)
    db.session.commit()

    session = registry.open(app, room, game)
    try:
        session.start(actor_id)
    except DictionaryExhausted:
        registry.discard(room.room_code)
        room.status = 'waiting'
        db.session.add(room)
        db.session.commit()
        raise

    from type2live.services.scheduler import schedule_game_end
    schedule_game_end(app, room.room_code, room.time_limit_sec or int(app.config.get('GAME_DURATION_SEC', 120)))
    return session


def submit_word(room: Room, player_id, word, typing_started_at=None, sequence_number=None):
    player = get_player(room, player_id)
    session = registry.require(room.room_code)
    return session.submit(player.id, word, typing_started_at=typing_started_at,
                          sequence_number=sequence_number)


def pass_turn(room: Room, player_id):
    player = get_player(room, player_id)
    session = registry.require(room.room_code)
    cooldown = float(current_app.config.get('PASS_COOLDOWN_SEC', 0) or 0)
    key = (room.room_code, player.id)
    now = time.time()
    if cooldown > 0 and now - _last_pass.get(key, float('-inf')) < cooldown:
        raise PassCooldown(f'Pass is available again in {cooldown - (now - _last_pass[key]):.0f}s')
    turn = session.pass_turn(player.id)
    _last_pass[key] = now
    return turn


def end_game(room_code: str, reason: str, actor_id=None) -> bool:
    """End the live session for a room. ``actor_id`` must be the host when given."""
    session = registry.get(room_code)
    if session is None:
        return False
    if actor_id is not None:
        ended = session.end_by(actor_id, reason)
    else:
        ended = session.end(reason)
    registry.discard(room_code)
    for key in [k for k in _last_pass if k[0] == room_code.upper()]:
        _last_pass.pop(key, None)
    return ended
