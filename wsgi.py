"""
WSGI Entry Point for Production Deployment
Reading Club backend

This file serves as the entry point for WSGI servers (Gunicorn, uWSGI, etc.)
in production environments.

Usage with Gunicorn:
    gunicorn --config gunicorn_config.py wsgi:app
"""
import os

# Set production environment if not already set
if 'FLASK_ENV' not in os.environ:
    os.environ['FLASK_ENV'] = 'production'

from reading_club import create_app, init_db
from reading_club.config import get_config

# Fail fast on missing production secrets
get_config(os.environ['FLASK_ENV'], validate=True)

# Create the application instance
app = create_app()

# Create tables when no migration has been applied yet
init_db(app)

# This is the WSGI application object
application = app

if __name__ == "__main__":
    # In production, use a WSGI server like Gunicorn
    app.run(debug=True, host='0.0.0.0', port=5000)
