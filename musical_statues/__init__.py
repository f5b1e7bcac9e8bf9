from flask import Flask, current_app, has_app_context
from flask_sqlalchemy import SQLAlchemy
from flask_cors import CORS
from flask_socketio import SocketIO
import click
from musical_statues.config import Config

db = SQLAlchemy()
allowed_origins = [
    "http://localhost:5173",
    "http://127.0.0.1:5173",
    "http://localhost:5174",
    "http://127.0.0.1:5174",
]
socketio = SocketIO(cors_allowed_origins=allowed_origins, async_mode=None)


class GameRuntime:
    """Per-app wiring of the scheduler and its collaborators."""

    def __init__(self, scheduler, sensor, media):
        self.scheduler = scheduler
        self.sensor = sensor
        self.media = media


def get_runtime(app=None) -> GameRuntime:
    app = app or current_app
    return app.extensions['musical_statues']


def _build_runtime(flask_app) -> GameRuntime:
    from musical_statues.models import GameSettings
    from musical_statues.services.games.media import EventRelay, PlaybackActivitySensor, SocketIOMediaController
    from musical_statues.services.games.scheduler import GameScheduler
    from musical_statues.services.games.timer import RoundTimer

    cfg = flask_app.config
    sensor = PlaybackActivitySensor()
    media = SocketIOMediaController(
        socketio,
        haptic_ms=int(cfg.get('HAPTIC_PULSE_MS', 100)),
        logger=flask_app.logger,
    )

    def settings_provider():
        if has_app_context():
            return GameSettings.load().to_configuration()
        with flask_app.app_context():
            return GameSettings.load().to_configuration()

    def timer_factory(lock):
        return RoundTimer(
            interval_ms=int(cfg.get('TIMER_INTERVAL_MS', 16)),
            lock=lock,
            sleep=socketio.sleep,
            spawn=socketio.start_background_task,
            logger=flask_app.logger,
            heartbeat_sec=int(cfg.get('TIMER_HEARTBEAT_SEC', 0)),
        )

    scheduler = GameScheduler(
        media,
        sensor,
        settings_provider,
        timer_factory=timer_factory,
        settle_delay_ms=int(cfg.get('START_SETTLE_DELAY_MS', 500)),
        sleep=socketio.sleep,
        logger=flask_app.logger,
    )

    scheduler.subscribe(EventRelay(socketio, logger=flask_app.logger))
    return GameRuntime(scheduler, sensor, media)


def create_app(config_class=Config):
    flask_app = Flask(__name__)
    flask_app.config.from_object(config_class)

    db.init_app(flask_app)
    CORS(flask_app, supports_credentials=True, origins=allowed_origins)

    # Initialize Socket.IO after app is created
    socketio.init_app(flask_app, cors_allowed_origins=allowed_origins)

    # Import and register blueprints here
    from musical_statues.routes import main
    flask_app.register_blueprint(main)

    from musical_statues.api.game import game
    from musical_statues.api.settings import settings
    from musical_statues.api.media import media
    flask_app.register_blueprint(game, url_prefix='/api/game')
    flask_app.register_blueprint(settings, url_prefix='/api/settings')
    flask_app.register_blueprint(media, url_prefix='/api/media')

    with flask_app.app_context():
        import musical_statues.models  # noqa: F401
        db.create_all()

    flask_app.extensions['musical_statues'] = _build_runtime(flask_app)

    # Register Socket.IO event handlers
    from musical_statues.socketio_events import register_socketio_handlers
    register_socketio_handlers(testing=flask_app.config.get('TESTING', False))

    @click.command('settings-reset')
    def settings_reset_command():
        """Restores the stored game settings to their defaults."""
        from musical_statues.models import GameSettings
        with flask_app.app_context():
            db.create_all()
            current = GameSettings.load()
            current.reset()
            db.session.add(current)
            db.session.commit()
            print('Game settings have been reset to defaults!')

    flask_app.cli.add_command(settings_reset_command)

    return flask_app
