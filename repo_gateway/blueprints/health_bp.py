"""
Health check blueprint.

Endpoints:
    GET /api/v1/health/ready  — simple 200 for load balancers
    GET /api/v1/health/live   — dependency status (database, GitHub config)
"""

import logging
import time

from flask import Blueprint, current_app, jsonify

from repo_gateway.models import db

logger = logging.getLogger(__name__)

health_bp = Blueprint("health_bp", __name__, url_prefix="/api/v1/health")


@health_bp.route("/ready", methods=["GET"])
def ready():
    """Simple readiness probe — always 200 if app is running."""
    return jsonify({"status": "ok"}), 200


@health_bp.route("/live", methods=["GET"])
def live():
    """Liveness check with dependency status.

    GitHub itself is not probed: a probe would need a user token and would
    spend that user's rate limit.
    """
    checks = {}
    overall = True

    # ── Database ─────────────────────────────────────────────────────
    try:
        t0 = time.perf_counter()
        db.session.execute(db.text("SELECT 1"))
        db_ms = (time.perf_counter() - t0) * 1000
        checks["database"] = {"status": "ok", "latency_ms": round(db_ms, 1)}
    except Exception as exc:
        checks["database"] = {"status": "error", "detail": str(exc)}
        overall = False
        logger.error("Health check — database failed: %s", exc)

    # ── GitHub gateway ───────────────────────────────────────────────
    gateway = current_app.extensions.get("github_gateway")
    if gateway is None:
        checks["github"] = {"status": "not_configured"}
        overall = False
    else:
        checks["github"] = {
            "status": "configured",
            "api_url": gateway.api_url,
            "timeout_s": gateway.timeout,
        }

    status_code = 200 if overall else 503
    return jsonify({"status": "ok" if overall else "degraded", "checks": checks}), status_code
