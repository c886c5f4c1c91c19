"""
Startup diagnostics — runs once when the Flask app starts.

Checks critical dependencies and logs a summary banner.
"""

import logging
import sys

from flask import Flask

from repo_gateway.models import db

logger = logging.getLogger(__name__)


def run_startup_diagnostics(app: Flask):
    """Run diagnostic checks during app startup (inside app context)."""
    if app.config.get("TESTING"):
        return  # skip during tests for speed

    issues: list[str] = []

    with app.app_context():
        # ── Python version ───────────────────────────────────────────
        py = f"{sys.version_info.major}.{sys.version_info.minor}.{sys.version_info.micro}"

        # ── Database connectivity ────────────────────────────────────
        db_status = "ok"
        db_uri = str(app.config.get("SQLALCHEMY_DATABASE_URI", ""))
        db_type = "PostgreSQL" if "postgresql" in db_uri else "SQLite" if "sqlite" in db_uri else "unknown"
        try:
            db.session.execute(db.text("SELECT 1"))
        except Exception as exc:
            db_status = "FAILED"
            issues.append(f"Database unreachable: {exc}")

        # ── users table ──────────────────────────────────────────────
        try:
            from sqlalchemy import inspect as sa_inspect
            has_users = "users" in sa_inspect(db.engine).get_table_names()
            users_status = "present" if has_users else "MISSING"
            if not has_users:
                issues.append("users table not found — run 'flask db upgrade'")
        except Exception:
            users_status = "?"

        # ── GitHub ───────────────────────────────────────────────────
        github_url = app.config.get("GITHUB_API_URL", "")
        timeout = app.config.get("GITHUB_TIMEOUT")
        debug_sample = bool(app.config.get("GITHUB_DEBUG_USER_SAMPLE"))
        if debug_sample and not app.debug:
            issues.append("GITHUB_DEBUG_USER_SAMPLE is on outside development")

        # ── Caller token key ─────────────────────────────────────────
        jwt_key = "JWT_SECRET_KEY" if app.config.get("JWT_SECRET_KEY") else "SECRET_KEY (fallback)"

        # ── Banner ───────────────────────────────────────────────────
        banner = f"""
╔══════════════════════════════════════════════════════════════╗
║  Repository Access Gateway — Startup Diagnostics             ║
╠══════════════════════════════════════════════════════════════╣
║  Python      : {py:<46s}║
║  Debug       : {str(app.debug):<46s}║
║  Database    : {f'{db_type} ({db_status})':<46s}║
║  users table : {users_status:<46s}║
║  GitHub API  : {github_url[:46]:<46s}║
║  Timeout     : {f'{timeout}s':<46s}║
║  JWT key     : {jwt_key:<46s}║
║  User sample : {'ON' if debug_sample else 'off':<46s}║
╚══════════════════════════════════════════════════════════════╝"""
        logger.info(banner)

        if issues:
            logger.warning("Startup issues detected:")
            for issue in issues:
                logger.warning("  ⚠ %s", issue)
        else:
            logger.info("✅ All startup checks passed")
