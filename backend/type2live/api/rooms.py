from flask import Blueprint, jsonify, request, current_app
from type2live import db, socketio
from type2live.services.game import GameError, MalformedInput, UnauthorizedMutation
from type2live.services import rooms as room_service
from type2live.services.results import build_results


rooms = Blueprint('rooms', __name__)


@rooms.errorhandler(GameError)
def handle_game_error(exc):
    try:
        current_app.logger.info(f"[rejected] path={request.path} code={exc.code} message={exc.message}")
    except Exception:
        pass
    return jsonify(exc.to_dict()), exc.status


def _room_payload(room):
    payload = room.to_dict()
    session = room_service.registry.get(room.room_code)
    payload['session'] = session.snapshot() if session else None
    game = room.current_game
    if game and game.started_at and room.time_limit_sec:
        payload['deadline'] = game.started_at + room.time_limit_sec
    else:
        payload['deadline'] = None
    return payload


def _require(data, *fields):
    missing = [f for f in fields if data.get(f) in (None, '')]
    if missing:
        raise MalformedInput(f"Missing field(s): {', '.join(missing)}")


@rooms.route('/create', methods=['POST'])
def create_room():
    data = request.get_json(silent=True) or {}
    _require(data, 'name')
    time_limit = data.get('time_limit_sec')
    try:
        time_limit = int(time_limit) if time_limit is not None else None
    except (TypeError, ValueError):
        raise MalformedInput('time_limit_sec must be an integer')
    room, host = room_service.create_room(data['name'], time_limit)
    return jsonify({'room': room.to_dict(), 'player': host.to_dict()}), 201


@rooms.route('/join', methods=['POST'])
def join_room():
    data = request.get_json(silent=True) or {}
    _require(data, 'room_code', 'name')
    room = room_service.get_room(data['room_code'])
    player = room_service.join_room(room, data['name'])
    return jsonify(player.to_dict()), 201


@rooms.route('/<string:room_code>/state', methods=['GET'])
def get_room_state(room_code):
    room = room_service.get_room(room_code)
    return jsonify(_room_payload(room))


@rooms.route('/<string:room_code>/start', methods=['POST'])
def start_game(room_code):
    data = request.get_json(silent=True) or {}
    room = room_service.get_room(room_code)
    room_service.start_game(room, data.get('player_id'))
    return jsonify(_room_payload(room))


@rooms.route('/<string:room_code>/submit', methods=['POST'])
def submit_word(room_code):
    data = request.get_json(silent=True) or {}
    _require(data, 'player_id')
    room = room_service.get_room(room_code)
    outcome = room_service.submit_word(
        room, data['player_id'], data.get('word'), typing_started_at=data.get('typing_started_at'),
        sequence_number=data.get('sequence_number'),
    )
    return jsonify(outcome.to_dict())


@rooms.route('/<string:room_code>/pass', methods=['POST'])
def pass_turn(room_code):
    data = request.get_json(silent=True) or {}
    _require(data, 'player_id')
    room = room_service.get_room(room_code)
    turn = room_service.pass_turn(room, data['player_id'])
    return jsonify({'turn': turn.to_dict()})


@rooms.route('/<string:room_code>/authority', methods=['POST'])
def transfer_authority(room_code):
    data = request.get_json(silent=True) or {}
    _require(data, 'player_id', 'new_host_id')
    room = room_service.get_room(room_code)
    new_host = room_service.get_player(room, data['new_host_id'])
    if data['player_id'] != room.host_player_id:
        raise UnauthorizedMutation('Only the host may hand over control')
    session = room_service.registry.get(room.room_code)
    if session is not None:
        session.transfer_authority(data['player_id'], new_host.id)
    room.host_player_id = new_host.id
    db.session.add(room)
    db.session.commit()
    socketio.emit('state_update', {'room_code': room.room_code},
                  to=room_service.room_channel(room.room_code), namespace='/ws')
    return jsonify(_room_payload(room))


@rooms.route('/<string:room_code>/end', methods=['POST'])
def end_game(room_code):
    data = request.get_json(silent=True) or {}
    room = room_service.get_room(room_code)
    if data.get('player_id') != room.host_player_id:
        raise UnauthorizedMutation('Only the host may end the game')
    # Ending twice is fine: the second call finds no live session
    room_service.end_game(room.room_code, 'host_ended', actor_id=room.host_player_id)
    return jsonify(_room_payload(room))


@rooms.route('/<string:room_code>/results', methods=['GET'])
def get_results(room_code):
    room = room_service.get_room(room_code)
    return jsonify(build_results(room))
