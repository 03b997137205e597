import os
import random
import sys
import pytest

# Ensure the project root (containing the `arcade` package) is on sys.path
CURRENT_DIR = os.path.dirname(__file__)
PROJECT_ROOT = os.path.abspath(os.path.join(CURRENT_DIR, '..'))
if PROJECT_ROOT not in sys.path:
    sys.path.insert(0, PROJECT_ROOT)

from arcade import create_app, db, socketio
from arcade.services.games import build_variants
from arcade.services.games.rooms import RoomRegistry
from arcade.services.games.session import SessionManager


class TestConfig:
    TESTING = True
    SECRET_KEY = os.environ.get('SECRET_KEY', 'test-secret')
    SQLALCHEMY_DATABASE_URI = 'sqlite://'
    SQLALCHEMY_TRACK_MODIFICATIONS = False
    MATCH_SETTLE_DELAY_SEC = 0
    RANDOM_SEED = 7


class RecordingNotifier:
    """Collects everything the session manager sends, for assertions."""

    def __init__(self):
        self.sent = []
        self.members = {}

    def join(self, peer_id, pin):
        self.members.setdefault(pin, set()).add(peer_id)

    def leave(self, peer_id, pin):
        self.members.get(pin, set()).discard(peer_id)

    def to_peer(self, peer_id, event, payload):
        self.sent.append(('peer', peer_id, event, payload))

    def to_room(self, pin, event, payload):
        self.sent.append(('room', pin, event, payload))

    def to_all(self, event, payload):
        self.sent.append(('all', None, event, payload))

    def named(self, event):
        return [s for s in self.sent if s[2] == event]

    def payloads(self, event):
        return [s[3] for s in self.named(event)]

    def clear(self):
        self.sent = []


class ManualScheduler:
    """Holds deferred jobs until the test fires them."""

    def __init__(self):
        self.jobs = []

    def schedule(self, delay, fn, *args):
        self.jobs.append((delay, fn, args))

    def run_all(self):
        jobs, self.jobs = self.jobs, []
        for _, fn, args in jobs:
            fn(*args)


class FakeLeaderboard:
    def __init__(self):
        self.players = []
        self.wins = []

    def ensure_player(self, username):
        if username and username not in self.players:
            self.players.append(username)

    def award_win(self, username, game_type):
        if not username:
            return None
        self.wins.append((username, game_type))
        return [{'name': username, 'wins': sum(1 for w in self.wins if w[0] == username)}]

    def top(self, limit=None):
        return []


@pytest.fixture()
def flask_app():
    application = create_app(TestConfig)
    with application.app_context():
        # Ensure models are imported so tables are created
        import arcade.models  # noqa: F401
        db.create_all()
        yield application
        db.session.remove()
        db.drop_all()


@pytest.fixture()
def client(flask_app):
    return flask_app.test_client()


@pytest.fixture()
def make_sio_client(flask_app):
    clients = []

    def _make():
        test_client = socketio.test_client(flask_app, flask_test_client=flask_app.test_client())
        clients.append(test_client)
        return test_client

    yield _make
    for test_client in clients:
        try:
            if test_client.is_connected():
                test_client.disconnect()
        except Exception:
            pass


@pytest.fixture()
def notifier():
    return RecordingNotifier()


@pytest.fixture()
def scheduler():
    return ManualScheduler()


@pytest.fixture()
def leaderboard():
    return FakeLeaderboard()


@pytest.fixture()
def registry():
    rng = random.Random(1234)
    return RoomRegistry(build_variants(rng), rng=rng)


@pytest.fixture()
def sessions(registry, leaderboard, notifier, scheduler):
    return SessionManager(registry, leaderboard, notifier, scheduler=scheduler, settle_delay=1.0, chat_max_length=20)


@pytest.fixture()
def paired(sessions):
    """Return a helper that creates a room for `game_type` and seats two peers."""

    def _pair(game_type, host='alice', guest='bob'):
        room = sessions.create('sid-1', game_type, host)
        sessions.join('sid-2', room.pin, guest)
        sessions.notifier.clear()
        return room

    return _pair
