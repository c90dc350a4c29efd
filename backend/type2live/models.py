from type2live import db
import string
import random
import time


class Term(db.Model):
    __tablename__ = 'it_term'
    id = db.Column(db.Integer, primary_key=True)
    display_text = db.Column(db.String(128), unique=True, nullable=False, index=True)
    difficulty_id = db.Column(db.Integer, nullable=False, default=1)
    category = db.Column(db.String(64), nullable=True)
    description = db.Column(db.Text, nullable=True)

    def to_dict(self):
        return {
            'id': self.id,
            'display_text': self.display_text,
            'difficulty_id': self.difficulty_id,
            'category': self.category,
            'description': self.description,
        }


def generate_room_code(length=4):
    """Generate a unique, short room code."""
    while True:
        code = ''.join(random.choices(string.ascii_uppercase + string.digits, k=length))
        if not Room.query.filter_by(room_code=code).first():
            return code


class Room(db.Model):
    __tablename__ = 'room'
    id = db.Column(db.Integer, primary_key=True)
    room_code = db.Column(db.String(4), unique=True, index=True)
    status = db.Column(db.String(32), default='waiting')  # waiting, playing, finished
    host_player_id = db.Column(db.Integer, nullable=True)
    time_limit_sec = db.Column(db.Integer, nullable=True)
    max_players = db.Column(db.Integer, nullable=True)
    created_at = db.Column(db.Float, default=time.time)
    players = db.relationship('Player', back_populates='room', order_by='Player.id')
    games = db.relationship('GameRecord', back_populates='room', lazy='dynamic')

    def __init__(self, **kwargs):
        super(Room, self).__init__(**kwargs)
        if not self.room_code:
            self.room_code = generate_room_code()

    @property
    def current_game(self):
        return self.games.order_by(GameRecord.id.desc()).first()

    def to_dict(self):
        game = self.current_game
        return {
            'id': self.id,
            'room_code': self.room_code,
            'status': self.status,
            'host_player_id': self.host_player_id,
            'time_limit_sec': self.time_limit_sec,
            'max_players': self.max_players,
            'players': [p.to_dict() for p in self.players],
            'game': game.to_dict() if game else None,
        }


class Player(db.Model):
    __tablename__ = 'player'
    id = db.Column(db.Integer, primary_key=True)
    name = db.Column(db.String(64), nullable=False)
    room_id = db.Column(db.Integer, db.ForeignKey('room.id'), nullable=False)
    score = db.Column(db.Integer, default=0, nullable=False)
    combo = db.Column(db.Integer, default=0, nullable=False)
    max_combo = db.Column(db.Integer, default=0, nullable=False)
    room = db.relationship('Room', back_populates='players')

    def to_dict(self):
        return {
            'id': self.id,
            'name': self.name,
            'room_id': self.room_id,
            'score': self.score,
            'combo': self.combo,
            'max_combo': self.max_combo,
            'is_host': self.room is not None and self.room.host_player_id == self.id,
        }


class GameRecord(db.Model):
    """One played game in a room, with the last persisted turn."""
    __tablename__ = 'game_record'
    id = db.Column(db.Integer, primary_key=True)
    room_id = db.Column(db.Integer, db.ForeignKey('room.id'), nullable=False)
    started_at = db.Column(db.Float, nullable=True)
    ended_at = db.Column(db.Float, nullable=True)
    end_reason = db.Column(db.String(64), nullable=True)
    current_turn_type = db.Column(db.String(16), nullable=True)  # typing, constraint
    current_target_word = db.Column(db.String(128), nullable=True)
    current_constraint_char = db.Column(db.String(1), nullable=True)
    turn_start_time = db.Column(db.Float, nullable=True)
    turn_sequence_number = db.Column(db.Integer, default=0, nullable=False)
    room = db.relationship('Room', back_populates='games')
    submissions = db.relationship('WordSubmission', backref='game', lazy='dynamic')

    def to_dict(self):
        return {
            'id': self.id,
            'started_at': self.started_at,
            'ended_at': self.ended_at,
            'end_reason': self.end_reason,
            'current_turn_type': self.current_turn_type,
            'current_target_word': self.current_target_word,
            'current_constraint_char': self.current_constraint_char,
            'turn_start_time': self.turn_start_time,
            'turn_sequence_number': self.turn_sequence_number,
        }


class WordSubmission(db.Model):
    __tablename__ = 'word_submission'
    id = db.Column(db.Integer, primary_key=True)
    game_id = db.Column(db.Integer, db.ForeignKey('game_record.id'), nullable=False)
    player_id = db.Column(db.Integer, db.ForeignKey('player.id'), nullable=False)
    word = db.Column(db.String(128), nullable=False)
    score = db.Column(db.Integer, default=0, nullable=False)
    combo_at_time = db.Column(db.Integer, default=0, nullable=False)
    is_valid = db.Column(db.Boolean, default=False, nullable=False)
    turn_type = db.Column(db.String(16), nullable=False)
    turn_sequence_number = db.Column(db.Integer, nullable=False)
    target_word = db.Column(db.String(128), nullable=True)
    constraint_char = db.Column(db.String(1), nullable=True)
    typing_duration_ms = db.Column(db.Float, nullable=True)
    coefficient = db.Column(db.Float, nullable=True)
    submitted_at = db.Column(db.Float, default=time.time)

    player = db.relationship('Player')
