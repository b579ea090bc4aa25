import logging

from flask import Flask
from flask_cors import CORS
from flask_limiter import Limiter
from flask_limiter.util import get_remote_address

from marto.config.settings import Config
from marto.models.database import db
from marto.api import auth_bp, deliveries_bp, health_bp, orders_bp, products_bp
from marto.middleware.error_handler import register_error_handlers

LOG_FORMAT = "%(asctime)s %(levelname)s: %(message)s [in %(pathname)s:%(lineno)d]"


def configure_logging(app: Flask) -> None:
    log_level = getattr(logging, str(app.config.get("LOG_LEVEL", "INFO")).upper(), logging.INFO)

    handler = logging.StreamHandler()
    handler.setFormatter(logging.Formatter(LOG_FORMAT))
    handler.setLevel(log_level)

    # app.logger ("marto.app") and the service loggers all propagate here.
    package_logger = logging.getLogger("marto")
    if not package_logger.handlers:
        package_logger.addHandler(handler)
    package_logger.setLevel(log_level)


def create_app(config_object=Config) -> Flask:
    """Application factory."""
    app = Flask(__name__)
    app.config.from_object(config_object)

    if not app.config.get("JWT_SECRET"):
        raise RuntimeError("JWT_SECRET must be set to sign authentication tokens")

    configure_logging(app)

    # Initialize extensions
    db.init_app(app)

    CORS(app, origins=app.config["CORS_ORIGINS"])

    Limiter(
        key_func=get_remote_address,
        app=app,
        default_limits=[app.config["RATE_LIMIT_DEFAULT"]],
    )

    # Register blueprints
    app.register_blueprint(health_bp)
    app.register_blueprint(auth_bp)
    app.register_blueprint(products_bp)
    app.register_blueprint(orders_bp)
    app.register_blueprint(deliveries_bp)

    # Register error handlers
    register_error_handlers(app)

    with app.app_context():
        db.create_all()

    app.logger.info(f"Marto API initialised with config {config_object.__name__}")
    return app
