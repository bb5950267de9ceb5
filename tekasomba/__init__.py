from flask import Flask, jsonify
from flask_sqlalchemy import SQLAlchemy
from flask_cors import CORS
from flask_limiter import Limiter
from flask_limiter.util import get_remote_address
import logging
from dotenv import load_dotenv

load_dotenv()

db = SQLAlchemy()
limiter = Limiter(key_func=get_remote_address, default_limits=[])

logger = logging.getLogger(__name__)


def configure_logging(level):
    """Configure root logging once for the process."""
    logging.basicConfig(
        level=level,
        format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
    )


def create_app(config_name='development'):
    from tekasomba.config import get_config

    app = Flask(__name__)
    app.config.from_object(get_config(config_name))

    configure_logging(app.config['LOG_LEVEL'])

    # Initialize extensions
    db.init_app(app)
    limiter.init_app(app)
    CORS(app)

    from tekasomba.errors import register_error_handlers
    register_error_handlers(app)

    # Import models so their tables are known before create_all
    from tekasomba import models  # noqa: F401

    with app.app_context():
        db.create_all()

    from tekasomba.routes import register_routes
    register_routes(app)

    from tekasomba.services.session import register_session_listeners
    register_session_listeners()

    @app.route('/health', methods=['GET'])
    def health():
        return jsonify({'status': 'ok'}), 200

    logger.info(f'Application created with {config_name} config')
    return app
