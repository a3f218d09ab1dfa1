"""
WSGI / Flask CLI entry point.

Usage:
    gunicorn wsgi:app
    flask --app wsgi seed-admin
    flask --app wsgi db upgrade
"""

from crm import create_app

app = create_app()
