import os
import sys
import pytest

# Ensure the backend root (containing the `type2live` package) is on sys.path
CURRENT_DIR = os.path.dirname(__file__)
BACKEND_ROOT = os.path.abspath(os.path.join(CURRENT_DIR, '..'))
if BACKEND_ROOT not in sys.path:
    sys.path.insert(0, BACKEND_ROOT)

from type2live import create_app, db, socketio


class TestConfig:
    TESTING = True
    SECRET_KEY = os.environ.get('SECRET_KEY', 'test-secret')
    SQLALCHEMY_DATABASE_URI = 'sqlite://'
    SQLALCHEMY_TRACK_MODIFICATIONS = False
    LOG_LEVEL = 'DEBUG'
    GAME_DURATION_SEC = 120
    TURN_TIMEOUT_SEC = 0
    PASS_COOLDOWN_SEC = 0
    SESSION_END_GRACE_SEC = 0
    MAX_PLAYERS = 8
    # Always typing turns so HTTP/socket tests can read the target word
    TYPING_TURN_RATIO = 1.0
    TYPING_MIN_TIER = 1
    TYPING_MAX_TIER = 7
    PREFERRED_MIN_LENGTH = 3
    PREFERRED_MAX_LENGTH = 12


class SequenceRandom:
    """RandomSource that replays the given values in a loop."""

    def __init__(self, values):
        self.values = list(values)
        self.calls = 0

    def uniform(self):
        value = self.values[self.calls % len(self.values)]
        self.calls += 1
        return value


class FakeClock:
    """ClockProvider that only moves when told to."""

    def __init__(self, start=1000.0):
        self.current = start

    def now(self):
        return self.current

    def advance(self, seconds):
        self.current += seconds


def _reset_live_state():
    from type2live.services import rooms as room_service
    from type2live.services import scheduler
    from type2live import socketio_events
    room_service.registry.clear()
    room_service._last_pass.clear()
    scheduler._scheduled_keys.clear()
    socketio_events._sid_to_ctx.clear()
    socketio_events._owner_count.clear()
    socketio_events._end_deadline.clear()


@pytest.fixture()
def flask_app():
    application = create_app(TestConfig)
    with application.app_context():
        # Ensure models are imported so tables are created
        import type2live.models  # noqa: F401
        db.create_all()
        _reset_live_state()
        yield application
        _reset_live_state()
        db.session.remove()
        db.drop_all()


@pytest.fixture()
def client(flask_app):
    return flask_app.test_client()


@pytest.fixture()
def sio_client(flask_app):
    test_client = socketio.test_client(
        flask_app,
        flask_test_client=flask_app.test_client(),
        namespace='/ws'
    )
    yield test_client
    try:
        test_client.disconnect(namespace='/ws')
    except Exception:
        pass


@pytest.fixture()
def terms(flask_app):
    """A tiny vocabulary: every typing turn targets one of these two words."""
    from type2live.services.terms import upsert_term
    upsert_term('git', 2, 'tools')
    upsert_term('sql', 3, 'database')
    db.session.commit()
    return {'git': 2, 'sql': 3}


@pytest.fixture()
def make_room(client):
    """Create a room with a host and optional guests; returns (code, host, guests)."""
    def _make(host='Alice', *guests):
        res = client.post('/api/rooms/create', json={'name': host})
        assert res.status_code == 201
        body = res.get_json()
        code = body['room']['room_code']
        joined = [
            client.post('/api/rooms/join', json={'room_code': code, 'name': name}).get_json()
            for name in guests
        ]
        return code, body['player'], joined
    return _make
