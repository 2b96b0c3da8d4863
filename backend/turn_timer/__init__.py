from flask import Flask
from flask_sqlalchemy import SQLAlchemy
from flask_cors import CORS
from flask_socketio import SocketIO
import click
from config import Config

db = SQLAlchemy()
allowed_origins = [
    "http://localhost:5173",
    "http://127.0.0.1:5173",
    "http://localhost:5174",
    "http://127.0.0.1:5174",
]
socketio = SocketIO(cors_allowed_origins=allowed_origins, async_mode=None)


def create_app(config_class=Config):
    flask_app = Flask(__name__)
    flask_app.config.from_object(config_class)

    db.init_app(flask_app)
    CORS(flask_app, supports_credentials=True, origins=allowed_origins)

    # Initialize Socket.IO after app is created
    socketio.init_app(flask_app, cors_allowed_origins=allowed_origins)

    # Ensure the stored_value table exists before the store loads from it
    from turn_timer import models  # noqa: F401
    with flask_app.app_context():
        db.create_all()

    from turn_timer.services.timers.persistence import SqlPersistenceAdapter
    from turn_timer.services.timers.store import PlayerTimerStore
    from turn_timer.services.timers.controller import ActiveTimerController

    store = PlayerTimerStore(
        SqlPersistenceAdapter(flask_app, flask_app.config.get('PLAYERS_STORAGE_KEY', 'players'))
    )
    store.initialize()

    # Background ticking is disabled in tests unless explicitly enabled
    scheduler_enabled = not flask_app.config.get('TESTING') or flask_app.config.get('ENABLE_SCHEDULER_IN_TESTS')
    # Whole-second ticks; a zero interval would spin the worker
    interval = max(1, int(flask_app.config.get('TICK_INTERVAL_SEC', 1)))
    controller = ActiveTimerController(
        store,
        interval=interval,
        start_background_task=socketio.start_background_task if scheduler_enabled else None,
        sleep=socketio.sleep,
        on_tick=broadcast_state,
        heartbeat=int(flask_app.config.get('TIMER_HEARTBEAT_SEC', 0)) // interval,
    )
    flask_app.extensions['turn_timer'] = {'store': store, 'controller': controller}

    from turn_timer.main import main
    flask_app.register_blueprint(main)

    from turn_timer.api.timers import timers
    flask_app.register_blueprint(timers, url_prefix='/api/timers')

    from turn_timer.socketio_events import register_socketio_handlers
    register_socketio_handlers(testing=flask_app.config.get('TESTING', False))

    @click.command('timers-reset')
    def timers_reset_command():
        """Stops the running clock and restores the four default players."""
        controller.stop()
        snapshot = store.reset_all()
        if snapshot.persistence_warning:
            click.echo(f'Reset applied in memory only: {snapshot.persistence_warning}')
        else:
            click.echo(f'Timers have been reset to {len(snapshot.players)} players!')

    flask_app.cli.add_command(timers_reset_command)

    return flask_app


def get_store(app):
    return app.extensions['turn_timer']['store']


def get_controller(app):
    return app.extensions['turn_timer']['controller']


def broadcast_state(snapshot) -> None:
    # Use socketio.emit since this may be called from a background task
    socketio.emit('state_update', snapshot.to_dict(), namespace='/ws')
