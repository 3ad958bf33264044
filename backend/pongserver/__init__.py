import logging

from flask import Flask
from flask_cors import CORS
from flask_socketio import SocketIO
from config import Config

# Handlers run synchronously on each client's receive thread, so one client's
# events are processed in arrival order. Heartbeats run in background tasks.
socketio = SocketIO(async_mode='threading', async_handlers=False)


def _background_runner(flask_app):
    def spawn(fn, *args):
        def _runner():
            with flask_app.app_context():
                fn(*args)
        return socketio.start_background_task(_runner)
    return spawn


def create_app(config_class=Config):
    flask_app = Flask(__name__)
    flask_app.config.from_object(config_class)

    level = flask_app.config.get('LOG_LEVEL', 'INFO')
    flask_app.logger.setLevel(level)
    logging.getLogger('pongserver').setLevel(level)

    allowed_origins = flask_app.config.get('ALLOWED_ORIGINS', [])
    CORS(flask_app, origins=allowed_origins)

    # Initialize Socket.IO after app is created
    socketio.init_app(flask_app, cors_allowed_origins=allowed_origins)

    # One matchmaking context per app: registries start empty on every boot.
    # In tests matchmaking runs inline for determinism.
    from pongserver.services.pong import Matchmaker
    spawn = None if flask_app.config.get('TESTING') else _background_runner(flask_app)
    flask_app.extensions['pong'] = Matchmaker.from_config(flask_app.config, spawn=spawn)

    from pongserver.main import main
    flask_app.register_blueprint(main)

    # Importing here ensures the handlers bind to the initialized socketio instance
    from pongserver.socketio_events import register_socketio_handlers
    register_socketio_handlers()

    return flask_app
