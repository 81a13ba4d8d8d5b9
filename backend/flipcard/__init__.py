from flask import Flask
from flask_sqlalchemy import SQLAlchemy
from flask_cors import CORS
from flask_migrate import Migrate
from flask_socketio import SocketIO
import click
from config import Config

db = SQLAlchemy()
migrate = Migrate()
socketio = SocketIO(async_mode=None)

def create_app(config_class=Config):
    flask_app = Flask(__name__)
    flask_app.config.from_object(config_class)

    allowed_origins = flask_app.config.get('CORS_ALLOWED_ORIGINS') or '*'

    db.init_app(flask_app)
    migrate.init_app(flask_app, db)
    # The relay answers its own preflights with permissive headers
    CORS(flask_app, resources={r'/api/*': {'origins': allowed_origins}})

    # Initialize Socket.IO after app is created
    socketio.init_app(flask_app, cors_allowed_origins=allowed_origins)

    from flipcard.main import main
    flask_app.register_blueprint(main)

    from flipcard.api.games import games
    flask_app.register_blueprint(games, url_prefix='/api/games')

    from flipcard.api.scoring import scoring
    flask_app.register_blueprint(scoring, url_prefix='/api/scoring')

    from flipcard.api.relay import relay
    flask_app.register_blueprint(relay, url_prefix='/relay')

    from flipcard.socketio_events import register_socketio_handlers
    register_socketio_handlers(testing=flask_app.config.get('TESTING', False))

    @click.command('db-reset')
    def db_reset_command():
        """Drops and recreates the time and contact tables."""
        import flipcard.models  # noqa: F401
        with flask_app.app_context():
            db.drop_all()
            db.create_all()
            print('Database has been reset!')

    flask_app.cli.add_command(db_reset_command)

    return flask_app
