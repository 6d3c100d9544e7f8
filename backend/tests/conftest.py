import os
import random
import sys

import pytest

# Ensure the backend root (containing the `brandquiz` package) is on sys.path
CURRENT_DIR = os.path.dirname(__file__)
BACKEND_ROOT = os.path.abspath(os.path.join(CURRENT_DIR, '..'))
if BACKEND_ROOT not in sys.path:
    sys.path.insert(0, BACKEND_ROOT)

from brandquiz.config import Config
from brandquiz.game.models import MULTI_TIME_LIMIT, Question
from brandquiz.game.registry import RoomRegistry
from brandquiz.game.scheduler import Scheduler
from brandquiz.game.service import GameService
from brandquiz.leaderboard.store import LeaderboardStore
from brandquiz.server import create_app


class TestConfig(Config):
    TESTING = True
    SECRET_KEY = 'test-secret'
    TRUST_PROXY_HEADERS = False
    SOCKETIO_ASYNC_MODE = 'threading'
    SCHEDULER_INLINE = True
    GEMINI_API_KEY = ''
    ADMIN_PASSWORD = '12345'
    AUTO_ADVANCE_SEC = 0
    SERVER_TIME_UP_GRACE_SEC = 0


def make_questions(n=6):
    """Deterministic question set: question 2 is multi-select, the rest single."""
    questions = []
    for i in range(n):
        if i == 2:
            questions.append(Question(
                text=f'Multi {i}',
                options=('A', 'B', 'C', 'D', 'E', 'F'),
                type='multi-select',
                correct_answers=(0, 2, 4),
                time_limit=MULTI_TIME_LIMIT,
            ))
        else:
            questions.append(Question(text=f'Single {i}', options=('A', 'B', 'C', 'D'), correct_answer=i % 4))
    return questions


class RecordingTransport:
    def __init__(self):
        self.sent = []
        self.members = {}

    def broadcast(self, room, event, payload=None):
        self.sent.append((room, event, payload))

    def send(self, sid, event, payload=None):
        self.sent.append((sid, event, payload))

    def subscribe(self, sid, room):
        self.members.setdefault(room, set()).add(sid)

    def unsubscribe(self, sid, room):
        self.members.get(room, set()).discard(sid)

    def events(self, name):
        return [(to, payload) for to, event, payload in self.sent if event == name]

    def clear(self):
        self.sent.clear()


class FixedSource:
    def __init__(self, questions=None):
        self.questions = questions or make_questions()
        self.calls = []

    def build(self, count, group_ids):
        self.calls.append((count, list(group_ids)))
        return [self.questions[i % len(self.questions)] for i in range(count)], 'fixed'


@pytest.fixture()
def transport():
    return RecordingTransport()


@pytest.fixture()
def source():
    return FixedSource()


@pytest.fixture()
def game(transport, source):
    return GameService(
        registry=RoomRegistry(rng=random.Random(7)),
        leaderboard=LeaderboardStore(),
        transport=transport,
        questions=source,
        scheduler=Scheduler(inline=True),
        config={'ADMIN_PASSWORD': '12345', 'ANSWER_GRACE_MS': 0},
    )


@pytest.fixture()
def app_and_socketio():
    return create_app(TestConfig)


@pytest.fixture()
def flask_app(app_and_socketio):
    return app_and_socketio[0]


@pytest.fixture()
def service(flask_app):
    return flask_app.extensions['brandquiz']


@pytest.fixture()
def client(flask_app):
    return flask_app.test_client()


@pytest.fixture()
def sio_factory(app_and_socketio):
    app, socketio = app_and_socketio
    clients = []

    def _make():
        test_client = socketio.test_client(app, flask_test_client=app.test_client())
        clients.append(test_client)
        return test_client

    yield _make
    for test_client in clients:
        try:
            if test_client.is_connected():
                test_client.disconnect()
        except Exception:
            pass
