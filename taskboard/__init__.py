"""Flask application factory with OpenTelemetry instrumentation."""

import logging

from flask import Flask

from taskboard.extensions import db, ma
from taskboard.telemetry import telemetry_enabled


def create_app(config_class: type | None = None) -> Flask:
    """Create and configure the Flask application.

    Args:
        config_class: Configuration class to use. Defaults to Config.

    Returns:
        Configured Flask application instance.
    """
    with_telemetry = telemetry_enabled()

    # Initialize telemetry BEFORE creating Flask app
    if with_telemetry:
        from taskboard.telemetry import get_otel_log_handler, instrument_flask_app, setup_telemetry

        setup_telemetry()

    app = Flask(__name__)

    # Instrument Flask app (needed for Gunicorn worker forks)
    if with_telemetry:
        instrument_flask_app(app)

    if config_class is None:
        from taskboard.config import Config

        config_class = Config
    app.config.from_object(config_class)

    db.init_app(app)
    ma.init_app(app)

    _register_blueprints(app)

    from taskboard.errors import register_error_handlers
    from taskboard.middleware.cors import register_cors_headers

    register_error_handlers(app)
    register_cors_headers(app)

    if with_telemetry:
        from taskboard.middleware.metrics import register_metrics_middleware

        register_metrics_middleware(app)

        # Attach OTel log handler after app setup
        handler = get_otel_log_handler()
        if handler:
            root_logger = logging.getLogger()
            if handler not in root_logger.handlers:
                root_logger.addHandler(handler)

    _configure_logging()

    with app.app_context():
        db.create_all()

    return app


def _register_blueprints(app: Flask) -> None:
    """Mount the API at the root and again under /api."""
    from taskboard.routes.auth import auth_bp
    from taskboard.routes.health import health_bp
    from taskboard.routes.tasks import tasks_bp

    app.register_blueprint(health_bp)
    app.register_blueprint(auth_bp)
    app.register_blueprint(tasks_bp)

    app.register_blueprint(health_bp, url_prefix="/api", name="api_health")
    app.register_blueprint(auth_bp, url_prefix="/api/auth", name="api_auth")
    app.register_blueprint(tasks_bp, url_prefix="/api/tasks", name="api_tasks")


def _configure_logging() -> None:
    """Configure logging for the application."""
    # App loggers propagate to root, where the OTel handler lives
    logging.getLogger("taskboard").setLevel(logging.DEBUG)
    logging.getLogger("taskboard").propagate = True

    logging.getLogger("werkzeug").setLevel(logging.WARNING)
    logging.getLogger("werkzeug").propagate = False

    logging.getLogger("sqlalchemy.engine").setLevel(logging.WARNING)
