# LOGGING MUST BE CONFIGURED BEFORE ANY OTHER IMPORTS OR LOGGING USAGE
import logging
from cutquote import config as app_config

logging.basicConfig(
    level=getattr(logging, app_config.LOG_LEVEL, logging.INFO),
    format='%(asctime)s - %(levelname)s - %(message)s',
    handlers=[
        logging.StreamHandler(),
        logging.FileHandler(app_config.LOG_FILE, encoding='utf-8')
    ]
)

import traceback

from flask import Flask, jsonify
from flask_cors import CORS
from werkzeug.exceptions import HTTPException


def create_app(config=None):
    app = Flask(__name__)
    app.config['SECRET_KEY'] = app_config.SECRET_KEY
    app.config['MAX_CONTENT_LENGTH'] = app_config.MAX_CONTENT_LENGTH
    app.config['RATES_FILE'] = app_config.RATES_FILE
    CORS(app, supports_credentials=True)

    if config:
        app.config.update(config)

    # Error Handler
    @app.errorhandler(Exception)
    def handle_exception(e):
        if isinstance(e, HTTPException):
            return jsonify({"error": e.description}), e.code
        tb = traceback.format_exc()
        logging.error(f"Exception: {e}\nTraceback:\n{tb}")
        return jsonify({"error": "Internal server error"}), 500

    # Register blueprints
    from .routes.main import main_bp
    app.register_blueprint(main_bp)
    for rule in app.url_map.iter_rules():
        logging.debug(f"Registered route: {rule.rule} | methods={rule.methods} | endpoint={rule.endpoint}")

    logging.info(f"App created: MAX_CONTENT_LENGTH={app.config['MAX_CONTENT_LENGTH']}, RATES_FILE={app.config['RATES_FILE']}")
    return app
