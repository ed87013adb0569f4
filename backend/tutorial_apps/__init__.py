from flask import Flask
from flask_sqlalchemy import SQLAlchemy
from flask_cors import CORS
from flask_migrate import Migrate
from flask_socketio import SocketIO
import atexit
import click
from config import Config

db = SQLAlchemy()
migrate = Migrate()
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
    migrate.init_app(flask_app, db)
    CORS(flask_app, supports_credentials=True, origins=allowed_origins)

    # Initialize Socket.IO after app is created
    socketio.init_app(flask_app, cors_allowed_origins=allowed_origins)

    from tutorial_apps.errors import register_error_handlers
    register_error_handlers(flask_app)

    # Import and register blueprints here
    from tutorial_apps.main import main
    flask_app.register_blueprint(main)

    from tutorial_apps.api.word_game import word_game
    flask_app.register_blueprint(word_game, url_prefix='/api/word-game')

    from tutorial_apps.api.sleep import sleep
    flask_app.register_blueprint(sleep, url_prefix='/api/sleep')

    from tutorial_apps.api.calculator import calculator
    flask_app.register_blueprint(calculator, url_prefix='/api/calculator')

    # Live rounds are owned by the app, never by a module global
    from tutorial_apps.services.word_game.registry import RoundRegistry
    flask_app.extensions['word_game'] = RoundRegistry(
        retention_seconds=int(flask_app.config.get('WORD_GAME_RETENTION_SEC', 300)),
    )

    # The storage handle is constructed here and handed to the tracker explicitly
    from tutorial_apps.services.sleep.repository import SleepNightRepository
    from tutorial_apps.services.sleep.tracker import SleepTracker
    tracker = SleepTracker(
        SleepNightRepository(flask_app, db),
        max_workers=int(flask_app.config.get('SLEEP_WORKERS', 1)),
        run_inline=bool(flask_app.config.get('TESTING')),
        logger=flask_app.logger,
    )
    tracker.subscribe(_push_nights_update)
    flask_app.extensions['sleep_tracker'] = tracker
    atexit.register(tracker.close)

    from tutorial_apps.socketio_events import register_socketio_handlers
    register_socketio_handlers(testing=flask_app.config.get('TESTING', False))

    @click.command('db-reset')
    def db_reset_command():
        """Drops and recreates the database."""
        with flask_app.app_context():
            db.drop_all()
            db.create_all()
            print('Database has been reset!')

    flask_app.cli.add_command(db_reset_command)

    return flask_app


def _push_nights_update(change):
    socketio.emit('nights_update', change, to='sleep', namespace='/ws')
