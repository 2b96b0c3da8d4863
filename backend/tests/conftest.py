import os
import sys
import pytest

# Ensure the backend root (containing the `turn_timer` package) is on sys.path
CURRENT_DIR = os.path.dirname(__file__)
BACKEND_ROOT = os.path.abspath(os.path.join(CURRENT_DIR, '..'))
if BACKEND_ROOT not in sys.path:
    sys.path.insert(0, BACKEND_ROOT)

from turn_timer import create_app, db, socketio
from turn_timer.services.timers.persistence import MemoryPersistenceAdapter
from turn_timer.services.timers.store import PlayerTimerStore
from turn_timer.services.timers.controller import ActiveTimerController


class TestConfig:
    TESTING = True
    SECRET_KEY = os.environ.get('SECRET_KEY', 'test-secret')
    SQLALCHEMY_DATABASE_URI = 'sqlite://'
    SQLALCHEMY_TRACK_MODIFICATIONS = False
    TICK_INTERVAL_SEC = 1
    PLAYERS_STORAGE_KEY = 'players'


@pytest.fixture()
def flask_app():
    application = create_app(TestConfig)
    with application.app_context():
        yield application
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
def adapter():
    return MemoryPersistenceAdapter()


@pytest.fixture()
def store(adapter):
    timer_store = PlayerTimerStore(adapter)
    timer_store.initialize()
    return timer_store


@pytest.fixture()
def controller(store):
    # No background task: tests drive ticks by hand
    return ActiveTimerController(store)
