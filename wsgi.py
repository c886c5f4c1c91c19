"""
WSGI / Flask-Migrate entry point.

Usage:
    flask --app wsgi db upgrade
    flask --app wsgi clear-github-token <firebase_uid>
"""

from repo_gateway import create_app

app = create_app()
