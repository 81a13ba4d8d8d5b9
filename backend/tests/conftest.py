import os
import sys
import pytest

# Ensure the backend root (containing the `flipcard` package) is on sys.path
CURRENT_DIR = os.path.dirname(__file__)
BACKEND_ROOT = os.path.abspath(os.path.join(CURRENT_DIR, '..'))
if BACKEND_ROOT not in sys.path:
    sys.path.insert(0, BACKEND_ROOT)

from requests.structures import CaseInsensitiveDict

from flipcard import create_app, db, socketio
from flipcard.services.games import registry


class TestConfig:
    TESTING = True
    SECRET_KEY = os.environ.get('SECRET_KEY', 'test-secret')
    SQLALCHEMY_DATABASE_URI = 'sqlite://'
    SQLALCHEMY_TRACK_MODIFICATIONS = False
    CORS_ALLOWED_ORIGINS = ['http://localhost:5173']
    RELAY_URL = 'http://relay.test/'
    RELAY_BACKEND_URL = 'http://scoring.test/exec'
    # Delayed actions fire immediately and inline
    MISMATCH_DELAY_SEC = 0
    WIN_REVEAL_DELAY_SEC = 0
    CARD_PAIRS = None
    SESSION_TTL_SEC = 60
    RELAY_CLIENT_TIMEOUT_SEC = 5
    ENABLE_SCHEDULER_IN_TESTS = False


class FakeResponse:
    """Just enough of requests.Response for the relay and the game client."""

    def __init__(self, status_code=200, payload=None, headers=None, reason='OK'):
        self.status_code = status_code
        self._payload = payload
        self.headers = CaseInsensitiveDict(headers or {})
        self.reason = reason

    @property
    def ok(self):
        return self.status_code < 400

    @property
    def is_redirect(self):
        return 'location' in self.headers and self.status_code in (301, 302, 303, 307, 308)

    def json(self):
        if self._payload is None:
            raise ValueError('Expecting value: line 1 column 1 (char 0)')
        return self._payload


@pytest.fixture()
def fake_response():
    return FakeResponse


@pytest.fixture()
def flask_app():
    application = create_app(TestConfig)
    with application.app_context():
        # Ensure models are imported so tables are created
        import flipcard.models  # noqa: F401
        db.create_all()
        yield application
        db.session.remove()
        db.drop_all()
    registry.clear_sessions()


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
