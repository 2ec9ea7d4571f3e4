from flask import Flask
from flask_cors import CORS
from flask_socketio import SocketIO
from config import Config

socketio = SocketIO(async_mode=None)


def create_app(config_class=Config, scheduler=None, gateway=None):
    flask_app = Flask(__name__)
    flask_app.config.from_object(config_class)
    flask_app.logger.setLevel(flask_app.config.get('LOG_LEVEL', 'INFO'))

    allowed_origins = flask_app.config.get('CORS_ORIGINS') or '*'
    CORS(flask_app, supports_credentials=True, origins=allowed_origins)

    # Initialize Socket.IO after app is created
    socketio.init_app(flask_app, cors_allowed_origins=allowed_origins)

    # One game per process, shared by every socket handler and route
    from drawguess.services.games.gateway import SocketIOGateway
    from drawguess.services.games.scheduler import SocketIOScheduler
    from drawguess.services.games.session import GameSession

    namespace = flask_app.config.get('SOCKETIO_NAMESPACE', '/ws')
    game_session = GameSession.from_config(
        flask_app.config,
        gateway=gateway or SocketIOGateway(socketio, namespace=namespace),
        scheduler=scheduler or SocketIOScheduler(socketio, logger=flask_app.logger),
        logger=flask_app.logger,
    )
    flask_app.extensions['game_session'] = game_session

    # Import and register blueprints here
    from drawguess.main import main
    flask_app.register_blueprint(main)

    from drawguess.api.game import game
    flask_app.register_blueprint(game, url_prefix='/api/game')

    # Register Socket.IO event handlers
    # Importing here ensures the handlers bind to the initialized socketio instance
    from drawguess.socketio_events import register_socketio_handlers
    register_socketio_handlers(namespace=namespace)

    flask_app.logger.info(f"[startup] namespace={namespace} words={len(game_session.words)}")
    return flask_app
