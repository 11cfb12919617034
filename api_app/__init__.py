"""
Taskflow API Flask application factory.

Provides the ``create_app`` factory that assembles the REST service behind
the task manager: user registration/login under ``/api/auth`` and the
per-user task resource under ``/api/tasks``.  The factory pattern lets the
test-suite build an isolated instance with the testing configuration.

The service registers two blueprints:
  * **auth_bp** -- account endpoints (register, login, me, profile).
  * **tasks_bp** -- task CRUD plus the statistics snapshot.
"""

from __future__ import annotations

import logging
import os
from pathlib import Path

from flask import Flask
from flask_sqlalchemy import SQLAlchemy

from config import get_config, load_jwt_keys

# Shared SQLAlchemy instance -- initialised with a concrete app inside create_app()
db = SQLAlchemy()

logging.basicConfig(
    level=logging.INFO,
    format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
)
logger = logging.getLogger(__name__)


def _ensure_sqlite_db_parent_exists(database_uri: str) -> None:
    """Create parent directories for file-based SQLite URIs when missing."""
    sqlite_prefix = "sqlite:///"
    if not database_uri.startswith(sqlite_prefix):
        return

    sqlite_path = database_uri[len(sqlite_prefix) :].split("?", 1)[0]
    if sqlite_path == ":memory:":
        return

    Path(sqlite_path).parent.mkdir(parents=True, exist_ok=True)


def create_app(config_name: str | None = None) -> Flask:
    """
    Create and configure the API application.

    Loads the configuration class, resolves the JWT key pair, initialises
    SQLAlchemy, registers the blueprints and creates missing tables.

    Args:
        config_name: Configuration environment name.  When ``None``, the
            ``FLASK_ENV`` environment variable is consulted.

    Returns:
        A fully configured Flask application instance.
    """
    app = Flask(__name__, instance_relative_config=True)
    config_class = get_config(config_name)
    app.config.from_object(config_class)
    private_key, public_key = load_jwt_keys(testing=bool(app.config.get("TESTING")))
    app.config["JWT_PRIVATE_KEY"] = private_key
    app.config["JWT_PUBLIC_KEY"] = public_key

    logger.info("Creating API app with config: %s", config_class.__name__)

    os.makedirs(app.instance_path, exist_ok=True)
    _ensure_sqlite_db_parent_exists(app.config.get("SQLALCHEMY_DATABASE_URI", ""))

    db.init_app(app)

    # Import inside the factory: the blueprint modules reference ``db``.
    from .routes.auth import auth_bp
    from .routes.tasks import tasks_bp

    app.register_blueprint(auth_bp, url_prefix="/api/auth")
    app.register_blueprint(tasks_bp, url_prefix="/api")

    with app.app_context():
        db.create_all()
        logger.info("API database tables created")

    return app
