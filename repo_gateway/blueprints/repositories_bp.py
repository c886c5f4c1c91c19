"""GitHub repositories blueprint.

Endpoints
─────────
  GET  /api/v1/repositories                         — caller's repositories
  GET  /api/v1/repositories/<owner>/<repo>/branches — branches of one repository
  POST /api/v1/repositories/validate                — body {repositoryUrl}

Every route needs a verified caller identity (see middleware.jwt_auth).
Service layer owns lookups, GitHub calls and token invalidation; this
module only parses requests and maps exceptions to JSON.
"""

from __future__ import annotations

import logging

from flask import Blueprint, g, jsonify, request
from werkzeug.exceptions import HTTPException

import repo_gateway.services.repository_service as repo_svc
from repo_gateway.core.exceptions import GatewayError
from repo_gateway.integrations.github_gateway import get_github_gateway
from repo_gateway.middleware.jwt_auth import require_caller
from repo_gateway.utils.errors import E, api_error

logger = logging.getLogger(__name__)

repositories_bp = Blueprint("repositories", __name__, url_prefix="/api/v1")

# Generic 500 messages per endpoint, used when something unexpected breaks
_FAILURE_MESSAGES = {
    "repositories.list_repositories": "Failed to fetch repositories",
    "repositories.list_branches": "Failed to fetch repository branches",
    "repositories.validate_repository": "Failed to validate repository",
}


# ── Error handlers ────────────────────────────────────────────────────────────


@repositories_bp.errorhandler(GatewayError)
def _handle_gateway_error(error: GatewayError):
    return jsonify(error.to_dict()), error.status


@repositories_bp.errorhandler(Exception)
def _handle_unexpected(error: Exception):
    if isinstance(error, HTTPException):
        return error
    logger.exception("Unexpected error in repositories_bp endpoint=%s", request.endpoint)
    message = _FAILURE_MESSAGES.get(request.endpoint, "Internal server error")
    return api_error(E.INTERNAL, message, status=500)


# ══════════════════════════════════════════════════════════════════
# Routes
# ══════════════════════════════════════════════════════════════════


@repositories_bp.route("/repositories", methods=["GET"])
@require_caller
def list_repositories():
    """List the caller's GitHub repositories (max 100, most recently updated first).

    Returns:
        200: {repositories: [{id, name, full_name, html_url, description,
                              default_branch, visibility, updated_at}]}
        401: GitHubAuthRequired
        4xx/5xx: UpstreamError with GitHub's status
    """
    repositories = repo_svc.list_repositories(g.caller_identity, get_github_gateway())
    return jsonify({"repositories": repositories}), 200


@repositories_bp.route("/repositories/<owner>/<repo>/branches", methods=["GET"])
@require_caller
def list_branches(owner: str, repo: str):
    """List branches of owner/repo exactly as GitHub returns them.

    Returns:
        200: {branches: [...]}
        401: GitHubAuthRequired
        4xx/5xx: UpstreamError with GitHub's status
    """
    branches = repo_svc.list_branches(g.caller_identity, owner, repo, get_github_gateway())
    return jsonify({"branches": branches}), 200


@repositories_bp.route("/repositories/validate", methods=["POST"])
@require_caller
def validate_repository():
    """Check the caller can read the repository behind a GitHub URL.

    Body: {repositoryUrl: "https://github.com/<owner>/<repo>"}

    Returns:
        200: {valid: true, repository: {id, name, full_name, default_branch, visibility}}
        400: InvalidRepositoryUrl
        401: GitHubAuthRequired
        403: RepositoryNotAccessible
    """
    data = request.get_json(silent=True)
    if not isinstance(data, dict):
        data = {}
    result = repo_svc.validate_repository(
        g.caller_identity, data.get("repositoryUrl"), get_github_gateway()
    )
    return jsonify(result), 200
