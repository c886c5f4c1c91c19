"""
JWT Auth Middleware — Parses JWT from Authorization header, sets g.caller_*.

The identity provider in front of this service issues the bearer token;
this hook only verifies it and exposes the caller:

  g.jwt_claims       verified claims dict (empty when absent/invalid)
  g.caller_identity  first present claim of uid, firebase_uid, id, sub

Routes that need a caller wrap themselves in `require_caller`, which
answers 401 when no identity was established.
"""

import functools
import logging

import jwt as pyjwt
from flask import g, request

from repo_gateway.services.jwt_service import decode_access_token, identity_from_claims
from repo_gateway.utils.errors import E, api_error

logger = logging.getLogger(__name__)

# Paths that skip JWT auth entirely
JWT_SKIP_PREFIXES = (
    "/api/v1/health",
    "/static/",
)


def init_jwt_middleware(app):
    """Register JWT middleware as a before_request hook."""

    @app.before_request
    def _jwt_auth():
        # Clear JWT context
        g.jwt_claims = {}
        g.caller_identity = None

        # Skip non-API routes and probes
        path = request.path
        if not path.startswith("/api/v1/"):
            return
        for prefix in JWT_SKIP_PREFIXES:
            if path.startswith(prefix):
                return

        # Check for Bearer token
        auth_header = request.headers.get("Authorization", "")
        if not auth_header.startswith("Bearer "):
            return  # no JWT; require_caller decides

        token = auth_header[7:]  # Strip "Bearer "

        try:
            payload = decode_access_token(token)
        except pyjwt.ExpiredSignatureError:
            logger.debug("Expired caller token on %s", path)
            return
        except pyjwt.InvalidTokenError as exc:
            logger.debug("Invalid caller token on %s: %s", path, exc)
            return

        g.jwt_claims = payload
        g.caller_identity = identity_from_claims(payload)


def require_caller(view):
    """Route decorator: 401 unless the request carried a verified identity."""

    @functools.wraps(view)
    def wrapper(*args, **kwargs):
        if not getattr(g, "caller_identity", None):
            return api_error(E.UNAUTHENTICATED, "Authentication required")
        return view(*args, **kwargs)

    return wrapper
