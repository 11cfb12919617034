"""
Web views Flask application factory.

The frontend is a stateless Backend-for-Frontend: it renders Jinja pages and
performs every read and write through :mod:`task_client`, never touching the
database.  The session (token + user) lives in the signed Flask session
cookie via :class:`frontend_app.session.CookieSessionStore`.
"""

from __future__ import annotations

import logging
from typing import Any

import requests
from flask import Flask

from config import get_config

logging.basicConfig(
    level=logging.INFO,
    format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
)
logger = logging.getLogger(__name__)


def create_app(config_name: str | None = None, *, http: Any = None) -> Flask:
    """
    Create and configure the web views application.

    Args:
        config_name: Configuration environment name.  When ``None``, the
            ``FLASK_ENV`` environment variable is consulted.
        http: Transport handed to every :class:`~task_client.ApiClient`
            (anything with a ``requests``-style ``request`` method).
            Defaults to the ``requests`` module, so each API call is a
            one-off request and no cookie jar is shared between users.

    Returns:
        A configured Flask application serving the HTML pages.
    """
    app = Flask(__name__, instance_relative_config=True)
    config_class = get_config(config_name)
    app.config.from_object(config_class)
    app.extensions["taskflow_http"] = http if http is not None else requests

    logger.info("Creating frontend app with config: %s", config_class.__name__)

    from .routes.views import views_bp

    app.register_blueprint(views_bp)
    return app
