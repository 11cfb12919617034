"""WSGI entry point for the web views (``gunicorn frontend_app.wsgi:app``)."""

import os

from frontend_app import create_app

app = create_app(os.getenv("FLASK_ENV", "production"))
