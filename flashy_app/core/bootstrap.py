"""Bootstrap helpers for configuring the Flask application."""

from __future__ import annotations

from flask import Flask, send_from_directory

from ..extensions import csrf_protect, db, login_manager, migrate
from .error_handlers import error_response, register_error_handlers
from .logging_config import setup_logging
from .module_registry import register_default_modules


def configure_logging(app: Flask) -> None:
    """Configure the ``flashy`` logger and route ``app.logger`` through it."""

    setup_logging(
        app,
        log_level=app.config.get("LOG_LEVEL", "INFO"),
        log_dir=app.config.get("LOG_DIR"),
        json_format=app.config.get("LOG_JSON", False),
    )
    app.logger.info("Flask app logger configured successfully.")


def register_extensions(app: Flask) -> None:
    """Initialize shared extensions with the Flask app instance."""

    db.init_app(app)
    migrate.init_app(app, db)
    login_manager.init_app(app)
    csrf_protect.init_app(app)

    @login_manager.user_loader
    def load_user(user_id: str):
        from ..models import User

        return db.session.get(User, int(user_id))

    @login_manager.unauthorized_handler
    def unauthorized():
        return error_response("Authentication required", "UNAUTHENTICATED", 401)


def configure_static_uploads(app: Flask) -> None:
    """Serve cached card media from the uploads directory."""

    media_dir = app.config["MEDIA_CACHE_DIR"]
    url_prefix = app.config["MEDIA_URL_PREFIX"]

    @app.route(f"{url_prefix}/<path:filename>")
    def card_media(filename: str):
        return send_from_directory(media_dir, filename)

    app.logger.info("Serving card media from %s at %s", media_dir, url_prefix)


def register_blueprints(app: Flask) -> None:
    """Register all default blueprints and the error handlers with the app."""

    register_error_handlers(app)
    register_default_modules(app)


def initialize_database(app: Flask) -> None:
    """Create database tables when they do not exist yet."""

    from .. import models  # noqa: F401  registers the mappers

    db.create_all()
    app.logger.info("Database ready at %s", app.config["SQLALCHEMY_DATABASE_URI"].split("?")[0])

