import os
import sys
import pytest

# Ensure the project root (containing the `musical_statues` package) is on sys.path
CURRENT_DIR = os.path.dirname(__file__)
PROJECT_ROOT = os.path.abspath(os.path.join(CURRENT_DIR, '..'))
if PROJECT_ROOT not in sys.path:
    sys.path.insert(0, PROJECT_ROOT)

from musical_statues import create_app, db, socketio, get_runtime


class TestConfig:
    __test__ = False
    TESTING = True
    SECRET_KEY = os.environ.get('SECRET_KEY', 'test-secret')
    SQLALCHEMY_DATABASE_URI = 'sqlite://'
    SQLALCHEMY_TRACK_MODIFICATIONS = False
    TIMER_INTERVAL_MS = 16
    START_SETTLE_DELAY_MS = 0
    HAPTIC_PULSE_MS = 100
    MAX_SLIDER_SECONDS = 120
    CONTROLLER_DEBOUNCE_MS = 0


@pytest.fixture()
def app_config():
    return TestConfig


@pytest.fixture()
def flask_app(app_config):
    application = create_app(app_config)
    with application.app_context():
        yield application
        # Never leave a timer task running into the next test
        get_runtime(application).scheduler.stop()
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
def media_agent(flask_app):
    """A connected media agent that reports audio as flowing."""
    agent = socketio.test_client(flask_app, namespace='/ws')
    agent.emit('register_media_agent', {'active': True}, namespace='/ws')
    agent.get_received('/ws')  # flush
    yield agent
    try:
        agent.disconnect(namespace='/ws')
    except Exception:
        pass
