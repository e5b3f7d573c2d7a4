"""
Flask Application Factory
Creates and configures the Flask application with all necessary components.
"""

import logging
from flask import Flask
from flask_caching import Cache
from flask_cors import CORS

from config import get_config
from prediction.service import PredictionService
from utils.logging_config import setup_logging
from routes.api import api_bp

logger = logging.getLogger(__name__)


def create_app(config_class=None, service=None):
    """
    Create and configure the Flask application.

    Args:
        config_class: Config class, or a name understood by ``get_config``
        service: Prebuilt PredictionService, built from config when omitted
    """
    if config_class is None or isinstance(config_class, str):
        config_class = get_config(config_class)

    setup_logging()

    app = Flask(__name__)
    app.config.from_object(config_class)
    app.config['SERVICE_CONFIG'] = config_class
    # Band responses keep band-table order
    app.json.sort_keys = False

    logger.info("Initializing services...")

    for problem in config_class.validate():
        logger.warning(f"Configuration: {problem}")

    # Initialize CORS
    CORS(app)

    # Initialize cache
    cache = Cache(app)

    # Initialize services
    if service is None:
        service = initialize_service(config_class)

    app.config['PREDICTION_SERVICE'] = service
    app.config['PREDICTION_CACHE'] = cache

    register_blueprints(app)

    logger.info("Application created successfully")
    return app


def initialize_service(config_class) -> PredictionService:
    """Build the prediction service from configuration."""
    try:
        service = PredictionService.from_config(config_class)
        logger.info(f"Prediction service initialized (engine: {config_class.ITURHFPROP_PATH})")
        return service
    except Exception as e:
        logger.error(f"Failed to initialize prediction service: {e}")
        raise


def register_blueprints(app):
    """Register Flask blueprints."""
    app.register_blueprint(api_bp, url_prefix='/api')
    logger.info("Blueprints registered")
