"""WSGI entry point for the API (``gunicorn api_app.wsgi:app``)."""

import os

from api_app import create_app

app = create_app(os.getenv("FLASK_ENV", "production"))
