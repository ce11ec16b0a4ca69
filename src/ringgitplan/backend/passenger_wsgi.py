"""WSGI entrypoint for serving the ringgitplan API behind Passenger or gunicorn."""

import logging
import os

from ringgitplan.backend.app import create_app

logging.basicConfig(level=os.getenv("RINGGITPLAN_LOG_LEVEL", "INFO").upper())

# Passenger expects a module-level variable named ``application``.
application = create_app()
