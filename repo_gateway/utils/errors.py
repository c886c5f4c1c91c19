"""Standardised API error responses.

Usage
-----
    from repo_gateway.utils.errors import api_error, E

    return api_error(E.UNAUTHENTICATED, "Authentication required")
    return api_error(E.NOT_FOUND, "Not found", details={"path": request.path})

Errors raised from the service layer carry their own code and status
(see ``repo_gateway.core.exceptions``); this helper covers responses
built directly in hooks and app-level error handlers.
"""

from __future__ import annotations

from flask import jsonify


# ── Error code constants ──────────────────────────────────────────────
class E:
    """Machine-readable error code constants.

    The GitHub-facing codes match ``GatewayError.code`` on the
    corresponding exception classes.
    """

    # Caller – HTTP 401
    UNAUTHENTICATED = "Unauthenticated"
    GITHUB_AUTH_REQUIRED = "GitHubAuthRequired"

    # Input – HTTP 400
    INVALID_REPOSITORY_URL = "InvalidRepositoryUrl"

    # Access – HTTP 403
    REPOSITORY_NOT_ACCESSIBLE = "RepositoryNotAccessible"

    # Routing – HTTP 404 / 405
    NOT_FOUND = "NotFound"
    METHOD_NOT_ALLOWED = "MethodNotAllowed"

    # Upstream / server – HTTP 5xx
    UPSTREAM = "UpstreamError"
    INTERNAL = "InternalError"


# ── Default HTTP status mapping ───────────────────────────────────────
_DEFAULT_STATUS: dict[str, int] = {
    E.UNAUTHENTICATED: 401,
    E.GITHUB_AUTH_REQUIRED: 401,
    E.INVALID_REPOSITORY_URL: 400,
    E.REPOSITORY_NOT_ACCESSIBLE: 403,
    E.NOT_FOUND: 404,
    E.METHOD_NOT_ALLOWED: 405,
    E.UPSTREAM: 500,
    E.INTERNAL: 500,
}


def api_error(
    code: str,
    message: str,
    *,
    status: int | None = None,
    details: dict | None = None,
):
    """Return a standard JSON error response.

    Parameters
    ----------
    code : str
        Machine-readable error code (use ``E.*`` constants).
    message : str
        Human-readable explanation, returned as ``error``.
    status : int, optional
        HTTP status override.  Falls back to ``_DEFAULT_STATUS[code]``,
        then to ``400``.
    details : dict, optional
        Extra structured payload.

    Returns
    -------
    tuple[Response, int]
        ``(jsonify(body), http_status)`` – drop-in for Flask views.
    """

    http_status = status or _DEFAULT_STATUS.get(code, 400)

    body: dict = {
        "error": message,
        "code": code,
    }
    if details:
        body["details"] = details

    return jsonify(body), http_status
