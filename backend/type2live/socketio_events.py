from flask_socketio import join_room, leave_room, emit
from flask import current_app, request
from type2live import socketio
from type2live.models import Room
from type2live.services.game import GameError, InvalidSubmissionState
from type2live.services import rooms as room_service
from typing import Dict, Any
import time


def handle_connect():
    emit('connected', {'message': 'Connected to /ws'})


def handle_disconnect():
    # If this socket was the host of a room and no other host socket remains,
    # end the session for that room after a grace period
    ctx = _sid_to_ctx.pop(_get_sid(), None)
    if not ctx:
        return
    room_code = ctx.get('room_code')
    if ctx.get('is_session_owner') and room_code:
        _owner_count[room_code] = max(0, _owner_count.get(room_code, 0) - 1)
        # In tests, end immediately for determinism; in prod, allow grace period
        try:
            if current_app and current_app.config.get('TESTING'):
                if _owner_count.get(room_code, 0) == 0:
                    _end_session(room_code)
                return
        except Exception:
            pass
        _schedule_end_if_no_owner(room_code)


def handle_join_room(data):
    room_code = (data or {}).get('room_code')
    player_id = (data or {}).get('player_id')
    if not room_code:
        emit('error', {'error': 'room_code is required', 'code': 'malformed_input'})
        return
    room_code = room_code.upper()
    room = Room.query.filter_by(room_code=room_code).first()
    is_session_owner = bool(room and player_id is not None and room.host_player_id == player_id)
    channel = room_service.room_channel(room_code)
    join_room(channel)
    # Track session owner presence and socket context
    _sid_to_ctx[_get_sid()] = {'room_code': room_code, 'player_id': player_id, 'is_session_owner': is_session_owner}
    if is_session_owner:
        _owner_count[room_code] = _owner_count.get(room_code, 0) + 1
        _cancel_scheduled_end(room_code)
    session = room_service.registry.get(room_code)
    emit('joined', {'room': channel, 'is_session_owner': is_session_owner,
                    'session': session.snapshot() if session else None})


def handle_leave_room(data):
    room_code = (data or {}).get('room_code')
    if not room_code:
        emit('error', {'error': 'room_code is required', 'code': 'malformed_input'})
        return
    room_code = room_code.upper()
    channel = room_service.room_channel(room_code)
    leave_room(channel)
    emit('left', {'room': channel})
    # Explicit quit by the host ends the session immediately
    ctx = _sid_to_ctx.get(_get_sid())
    if ctx and ctx.get('is_session_owner') and ctx.get('room_code') == room_code:
        _end_session(room_code)


def _joined_room():
    ctx = _sid_to_ctx.get(_get_sid())
    if not ctx:
        raise InvalidSubmissionState('Join a room first')
    room = Room.query.filter_by(room_code=ctx['room_code']).first()
    if room is None:
        raise InvalidSubmissionState(f"Room {ctx['room_code']} does not exist")
    return ctx, room


def handle_submit_word(data):
    data = data or {}
    try:
        ctx, room = _joined_room()
        outcome = room_service.submit_word(
            room, ctx['player_id'], data.get('word'), typing_started_at=data.get('typing_started_at'),
            sequence_number=data.get('sequence_number'),
        )
    except GameError as exc:
        emit('error', exc.to_dict())
        return
    emit('submission_ack', outcome.to_dict())


def handle_pass_turn(data):
    try:
        ctx, room = _joined_room()
        turn = room_service.pass_turn(room, ctx['player_id'])
    except GameError as exc:
        emit('error', exc.to_dict())
        return
    emit('pass_ack', {'turn': turn.to_dict()})


def handle_ping(data):
    emit('pong', data or {})

# ---- Session owner lifecycle helpers ----

_sid_to_ctx: Dict[str, Dict[str, Any]] = {}
_owner_count: Dict[str, int] = {}
_end_deadline: Dict[str, float] = {}

def _get_sid() -> str:
    # request.sid exists in Socket.IO context
    return request.sid  # type: ignore

def _end_session(room_code: str) -> None:
    """End the live game for a room and notify clients."""
    try:
        ended = room_service.end_game(room_code, 'host_left')
    finally:
        _owner_count.pop(room_code, None)
        _end_deadline.pop(room_code, None)
    if not ended:
        # No live game (lobby or already over): still tell clients the host is gone
        socketio.emit('session_ended', {'room_code': room_code, 'end_reason': 'host_left'},
                      to=room_service.room_channel(room_code), namespace='/ws')

def _schedule_end_if_no_owner(room_code: str) -> None:
    if _owner_count.get(room_code, 0) > 0:
        return
    app = current_app._get_current_object()
    delay_sec = float(app.config.get('SESSION_END_GRACE_SEC', 2.0))
    _end_deadline[room_code] = time.time() + delay_sec

    def _runner(code: str, deadline: float):
        sleep_for = max(0.0, deadline - time.time())
        if sleep_for:
            time.sleep(sleep_for)
        if _owner_count.get(code, 0) == 0 and _end_deadline.get(code) == deadline:
            with app.app_context():
                _end_session(code)

    socketio.start_background_task(_runner, room_code, _end_deadline[room_code])

def _cancel_scheduled_end(room_code: str) -> None:
    _end_deadline.pop(room_code, None)



def register_socketio_handlers(testing: bool = False) -> None:
    """Register Socket.IO event handlers.

    Always register on namespace '/ws'. When testing is True, also mirror
    handlers on the default namespace '/' to accommodate the test harness.
    """
    handlers = {
        'connect': handle_connect,
        'disconnect': handle_disconnect,
        'join_room': handle_join_room,
        'leave_room': handle_leave_room,
        'submit_word': handle_submit_word,
        'pass_turn': handle_pass_turn,
        'ping': handle_ping,
    }
    namespaces = ['/ws', '/'] if testing else ['/ws']
    for namespace in namespaces:
        for event, handler in handlers.items():
            socketio.on_event(event, handler, namespace=namespace)
