"""
Flask Application Factory
"""

import logging
import os

from flask import Flask
from flask_socketio import SocketIO

socketio = SocketIO()


def create_app(config_class=None):
    """Create and configure the Flask application"""

    app = Flask(__name__)

    # Load configuration
    if config_class:
        app.config.from_object(config_class)
    else:
        from porthunt.config import Config
        app.config.from_object(Config)

    logging.basicConfig(
        level=app.config.get('LOG_LEVEL', 'INFO'),
        format='%(asctime)s - %(name)s - %(levelname)s - %(message)s'
    )

    from porthunt.routes.recon import recon_bp
    from porthunt.routes.api import api_bp

    # Initialize extensions
    socketio.init_app(app, cors_allowed_origins="*", async_mode='threading')

    # Register blueprints
    app.register_blueprint(recon_bp, url_prefix='/recon')
    app.register_blueprint(api_bp, url_prefix='/api')

    os.makedirs(app.config['REPORTS_FOLDER'], exist_ok=True)

    return app
