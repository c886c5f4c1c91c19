"""
Repository Access Gateway
Flask Application Factory.

Usage:
    from repo_gateway import create_app
    app = create_app()           # defaults to APP_ENV, else "development"
    app = create_app("testing")  # explicit config
"""

import logging
import os

import click
from flask import Flask, request
from flask_cors import CORS
from flask_migrate import Migrate

from repo_gateway.config import config
from repo_gateway.integrations.github_gateway import init_github_gateway
from repo_gateway.models import db
from repo_gateway.middleware.diagnostics import run_startup_diagnostics
from repo_gateway.middleware.jwt_auth import init_jwt_middleware
from repo_gateway.middleware.logging_config import configure_logging
from repo_gateway.middleware.security_headers import init_security_headers
from repo_gateway.middleware.timing import init_request_timing
from repo_gateway.utils.errors import E, api_error

logger = logging.getLogger(__name__)

migrate = Migrate()


def create_app(config_name=None):
    """
    Create and configure the Flask application.

    Args:
        config_name: Configuration environment name.
                     One of: "development", "testing", "production".
                     Defaults to APP_ENV env var, or "development" if unset.

    Returns:
        Configured Flask application instance.
    """
    if config_name is None:
        config_name = os.getenv("APP_ENV", "development")

    app = Flask(__name__, instance_relative_config=True)
    # Instantiate so ProductionConfig can refuse to start without its env vars
    app.config.from_object(config[config_name]())

    # ── Structured logging (must be first) ───────────────────────────────
    configure_logging(app)

    # ── Extensions ───────────────────────────────────────────────────────
    db_uri = app.config.get("SQLALCHEMY_DATABASE_URI") or ""
    if db_uri.startswith("sqlite:///") and ":memory:" not in db_uri:
        os.makedirs(os.path.dirname(db_uri[len("sqlite:///"):]), exist_ok=True)
    db.init_app(app)
    migrate.init_app(app, db)
    cors_origins = app.config.get("CORS_ORIGINS", "*")
    if cors_origins and cors_origins != "*":
        CORS(app, origins=[o.strip() for o in cors_origins.split(",") if o.strip()])
    else:
        CORS(app)

    # ── Outbound GitHub gateway (one per app, injected into services) ────
    init_github_gateway(app)

    # ── Security headers ─────────────────────────────────────────────────
    init_security_headers(app)

    # ── Request timing middleware ────────────────────────────────────────
    init_request_timing(app)

    # ── JWT auth middleware (sets g.caller_identity) ─────────────────────
    init_jwt_middleware(app)

    # ── Import models so Alembic can detect them ─────────────────────────
    from repo_gateway.models import user as _user_models  # noqa: F401

    # ── Auto-create tables (CREATE IF NOT EXISTS) ───────────────────────
    with app.app_context():
        try:
            db.create_all()
            app.logger.info("db.create_all() completed successfully")
        except Exception as e:
            app.logger.warning("db.create_all() failed: %s", e)

    # ── Blueprints ───────────────────────────────────────────────────────
    from repo_gateway.blueprints.health_bp import health_bp
    from repo_gateway.blueprints.repositories_bp import repositories_bp

    app.register_blueprint(health_bp)
    app.register_blueprint(repositories_bp)

    # ── CLI commands ─────────────────────────────────────────────────────
    @app.cli.command("clear-github-token")
    @click.argument("identity")
    def clear_github_token_cmd(identity):
        """Clear the stored GitHub token for a firebase_uid."""
        from repo_gateway.services.credential_service import invalidate

        if invalidate(identity):
            click.echo(f"Cleared GitHub token for {identity}.")
        else:
            click.echo(f"No token cleared for {identity}.")

    # ── Error handlers ───────────────────────────────────────────────────
    @app.errorhandler(404)
    def not_found(e):
        return api_error(E.NOT_FOUND, "Not found", details={"path": request.path})

    @app.errorhandler(405)
    def method_not_allowed(e):
        return api_error(E.METHOD_NOT_ALLOWED, "Method not allowed")

    @app.errorhandler(500)
    def server_error(e):
        logger.error("500 error: %s", e, exc_info=True)
        return api_error(E.INTERNAL, "Internal server error")

    # ── Startup diagnostics ──────────────────────────────────────────────
    run_startup_diagnostics(app)

    return app
