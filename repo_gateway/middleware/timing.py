"""
Request timing middleware.

Records request duration and logs slow requests.
Adds X-Request-ID and X-Request-Duration-Ms headers to all responses.
"""

import logging
import time
import uuid

from flask import Flask, g, request

logger = logging.getLogger(__name__)

# Endpoints excluded from timing logs (high frequency, low value)
_SKIP_LOG = frozenset({"/api/v1/health/ready", "/api/v1/health/live"})

# Slow request threshold (ms); GitHub round trips dominate
SLOW_THRESHOLD_MS = 3000


def init_request_timing(app: Flask):
    """Register before/after hooks for request timing."""

    @app.before_request
    def _start_timer():
        g.request_start = time.perf_counter()
        g.request_id = request.headers.get("X-Request-ID", uuid.uuid4().hex[:12])

    @app.after_request
    def _log_request(response):
        start = getattr(g, "request_start", None)
        if start is None:
            return response

        duration_ms = (time.perf_counter() - start) * 1000
        response.headers["X-Request-Duration-Ms"] = f"{duration_ms:.1f}"
        response.headers["X-Request-ID"] = getattr(g, "request_id", "")

        if request.path in _SKIP_LOG or request.path.startswith("/static"):
            return response

        # request id, caller and path are stamped by RequestContextFilter
        extra = {"status": response.status_code, "duration_ms": duration_ms}
        if duration_ms > SLOW_THRESHOLD_MS:
            logger.warning("Slow request: %s %s %d",
                           request.method, request.path,
                           response.status_code, extra=extra)
        elif response.status_code >= 500:
            logger.error("Server error: %s %s %d",
                         request.method, request.path,
                         response.status_code, extra=extra)
        else:
            logger.debug("Request: %s %s %d",
                         request.method, request.path,
                         response.status_code, extra=extra)

        return response
