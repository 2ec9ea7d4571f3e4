import os
import sys
import pytest

# Ensure the backend root (containing the `drawguess` package) is on sys.path
CURRENT_DIR = os.path.dirname(__file__)
BACKEND_ROOT = os.path.abspath(os.path.join(CURRENT_DIR, '..'))
if BACKEND_ROOT not in sys.path:
    sys.path.insert(0, BACKEND_ROOT)

from drawguess import create_app, socketio
from drawguess.services.games.scheduler import TimerHandle
from drawguess.services.games.session import GameSession
from drawguess.services.games.words import WordPool


class TestConfig:
    TESTING = True
    SECRET_KEY = os.environ.get('SECRET_KEY', 'test-secret')
    CORS_ORIGINS = ['http://localhost:5173']
    SOCKETIO_NAMESPACE = '/ws'
    LOG_LEVEL = 'DEBUG'
    MIN_PLAYERS = 2
    COUNTDOWN_DURATION_SEC = 20
    ROUND_DURATION_SEC = 60
    INTERMISSION_SEC = 5
    SESSION_DURATION_SEC = 600
    SCORE_RESET_DELAY_SEC = 10
    STATE_TICK_SEC = 1
    GUESS_POINTS = 10
    DRAWER_POINTS = 5
    CANCEL_COUNTDOWN_BELOW_MIN = True
    WORD_LIST = ['cat']


class ManualScheduler:
    """Deterministic clock: timers only fire when the test advances time."""

    def __init__(self, start=1000.0):
        self.clock = start
        self._pending = []
        self._seq = 0

    def now(self):
        return self.clock

    def call_later(self, delay, callback, label=''):
        handle = TimerHandle(self.clock + delay, callback, label)
        self._seq += 1
        self._pending.append((handle.deadline, self._seq, handle))
        return handle

    def advance(self, seconds):
        target = self.clock + seconds
        while True:
            due = [entry for entry in self._pending if entry[0] <= target]
            if not due:
                break
            entry = min(due, key=lambda e: (e[0], e[1]))
            self._pending.remove(entry)
            self.clock = max(self.clock, entry[0])
            entry[2].run()
        self.clock = target

    def pending_labels(self):
        return sorted(h.label for _, _, h in self._pending if h.pending)


class RecordingGateway:
    """Collects notifications as (target, event, data) tuples.

    target is 'all', ('to', sid) or ('others', sid).
    """

    def __init__(self):
        self.sent = []

    def emit_all(self, event, data=None):
        self.sent.append(('all', event, data))

    def emit_to(self, sid, event, data=None):
        self.sent.append((('to', sid), event, data))

    def emit_others(self, sid, event, data=None):
        self.sent.append((('others', sid), event, data))

    def events(self, name):
        return [data for _, event, data in self.sent if event == name]

    def chat_texts(self):
        return [data['text'] for data in self.events('chatMessage')]

    def system_texts(self):
        return [data['text'] for data in self.events('chatMessage') if data['from'] == 'System']

    def clear(self):
        self.sent = []


@pytest.fixture()
def clock():
    return ManualScheduler()


@pytest.fixture()
def gateway():
    return RecordingGateway()


@pytest.fixture()
def make_game(clock, gateway):
    def _make(words=('cat',), **settings):
        return GameSession(gateway, clock, words=WordPool(list(words)), settings=settings)
    return _make


@pytest.fixture()
def game(make_game):
    return make_game()


@pytest.fixture()
def flask_app(clock):
    application = create_app(TestConfig, scheduler=clock)
    with application.app_context():
        yield application


@pytest.fixture()
def client(flask_app):
    return flask_app.test_client()


@pytest.fixture()
def sio_factory(flask_app):
    clients = []

    def _connect():
        test_client = socketio.test_client(
            flask_app,
            flask_test_client=flask_app.test_client(),
            namespace='/ws'
        )
        clients.append(test_client)
        return test_client

    yield _connect
    for test_client in clients:
        try:
            test_client.disconnect(namespace='/ws')
        except Exception:
            pass
