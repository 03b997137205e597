import logging
import random

import click
from flask import Flask
from flask_sqlalchemy import SQLAlchemy
from flask_cors import CORS
from flask_migrate import Migrate
from flask_socketio import SocketIO
from config import Config

db = SQLAlchemy()
migrate = Migrate()
socketio = SocketIO(async_mode=None)

def create_app(config_class=Config):
    flask_app = Flask(__name__)
    flask_app.config.from_object(config_class)
    flask_app.logger.setLevel(getattr(logging, str(flask_app.config.get('LOG_LEVEL', 'INFO')).upper(), logging.INFO))

    allowed_origins = flask_app.config.get('CORS_ORIGINS') or '*'
    db.init_app(flask_app)
    migrate.init_app(flask_app, db)
    CORS(flask_app, origins=allowed_origins)

    # Initialize Socket.IO after app is created
    socketio.init_app(flask_app, cors_allowed_origins=allowed_origins)

    # Import and register blueprints here
    from arcade.main import main
    flask_app.register_blueprint(main)

    from arcade.api.leaderboard import leaderboard
    flask_app.register_blueprint(leaderboard, url_prefix='/api/leaderboard')

    # Room registry and session manager live on the app, one set per app instance
    from arcade.services.games import build_variants
    from arcade.services.games.rooms import RoomRegistry
    from arcade.services.games.scheduler import BackgroundScheduler, start_idle_sweeper
    from arcade.services.games.session import SessionManager
    from arcade.services.leaderboard import LeaderboardStore
    from arcade.socketio_events import SocketIONotifier, register_socketio_handlers

    namespace = flask_app.config.get('SOCKETIO_NAMESPACE', '/')
    rng = random.Random(flask_app.config['RANDOM_SEED']) if flask_app.config.get('RANDOM_SEED') is not None else random.Random()
    registry = RoomRegistry(
        build_variants(rng, win_score=int(flask_app.config.get('SPEED_DUEL_WIN_SCORE', 10))),
        rng=rng,
    )
    sessions = SessionManager(
        registry,
        LeaderboardStore(size=int(flask_app.config.get('LEADERBOARD_SIZE', 10)), logger=flask_app.logger),
        SocketIONotifier(socketio, namespace=namespace),
        scheduler=BackgroundScheduler(flask_app, socketio),
        settle_delay=float(flask_app.config.get('MATCH_SETTLE_DELAY_SEC', 1.0)),
        chat_max_length=int(flask_app.config.get('CHAT_MAX_LENGTH', 500)),
        logger=flask_app.logger,
    )
    flask_app.extensions['arcade'] = sessions

    # Register Socket.IO event handlers
    register_socketio_handlers(namespace)
    start_idle_sweeper(flask_app, socketio, sessions)

    @click.command('db-reset')
    def db_reset_command():
        """Drops and recreates the leaderboard tables."""
        from arcade import models  # noqa: F401
        with flask_app.app_context():
            db.drop_all()
            db.create_all()
            print('Database has been reset!')

    flask_app.cli.add_command(db_reset_command)

    return flask_app
