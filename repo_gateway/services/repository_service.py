"""
Repository Service — GitHub repository listing, branch listing, validation.

Each operation is one sequential round trip:

    resolve stored token → one GitHub call → reshape or classify the error

All outbound HTTP: delegated to the `GitHubGateway` passed in by the caller
(the blueprint takes it from `app.extensions`). Nothing is retried.

Error mapping:
    no stored token                  → CredentialNotFound (401)
    GitHub 401 on repository list    → token cleared, CredentialInvalid (401)
    other GitHub failure on listings → UpstreamError (upstream status or 500)
    bad repository URL               → InvalidRepositoryUrl (400)
    GitHub failure on validation     → RepositoryNotAccessible (403)
"""

from __future__ import annotations

import logging
import re

from repo_gateway.core.exceptions import (
    CredentialInvalid,
    InvalidRepositoryUrl,
    RepositoryNotAccessible,
    UpstreamError,
)
from repo_gateway.integrations.github_gateway import GitHubGateway
from repo_gateway.services import credential_service

logger = logging.getLogger(__name__)

# Fields kept from a GitHub repository object in listings
SUMMARY_FIELDS = (
    "id",
    "name",
    "full_name",
    "html_url",
    "description",
    "default_branch",
    "visibility",
    "updated_at",
)

# Fields kept in the validation response
VALIDATION_FIELDS = ("id", "name", "full_name", "default_branch", "visibility")

# Unanchored: matches anywhere in the string, scheme and trailing path ignored
_REPO_URL_RE = re.compile(r"github\.com/([^/]+)/([^/]+)")


# ═════════════════════════════════════════════════════════════════════════════
# Shaping helpers
# ═════════════════════════════════════════════════════════════════════════════


def summarize_repository(repo: dict, fields: tuple[str, ...] = SUMMARY_FIELDS) -> dict:
    """Project a GitHub repository object onto `fields`; missing keys → None."""
    return {field: repo.get(field) for field in fields}


def parse_repository_url(repository_url) -> tuple[str, str]:
    """Extract (owner, repo) from a `github.com/<owner>/<repo>` URL.

    A trailing ".git" on the repo segment is dropped.

    Raises:
        InvalidRepositoryUrl: If the value is not a string or has no match.
    """
    if not isinstance(repository_url, str):
        raise InvalidRepositoryUrl("repositoryUrl is required")
    match = _REPO_URL_RE.search(repository_url)
    if not match:
        raise InvalidRepositoryUrl(f"Not a GitHub repository URL: {repository_url[:200]}")
    owner, repo = match.group(1), match.group(2)
    if repo.endswith(".git") and len(repo) > 4:
        repo = repo[:-4]
    return owner, repo


# ═════════════════════════════════════════════════════════════════════════════
# Operations
# ═════════════════════════════════════════════════════════════════════════════


def list_repositories(identity: str, gateway: GitHubGateway) -> list[dict]:
    """Return the caller's repositories as summaries, most recently updated first.

    Order and length follow GitHub's response exactly.

    Raises:
        CredentialNotFound: No stored token.
        CredentialInvalid: GitHub rejected the token; it has been cleared.
        UpstreamError: Any other GitHub failure.
    """
    credential = credential_service.resolve_credential(identity)
    result = gateway.list_user_repos(credential.token)

    if not result.ok:
        if result.status_code == 401:
            logger.warning("GitHub rejected stored token identity=%s, clearing it", identity)
            credential_service.invalidate(identity)
            raise CredentialInvalid()
        raise UpstreamError(
            "Failed to fetch repositories from GitHub",
            status=result.status_code,
            message=result.error,
        )

    repositories = result.data or []
    logger.info("Fetched %d repositories from GitHub identity=%s", len(repositories), identity)
    return [summarize_repository(repo) for repo in repositories]


def list_branches(identity: str, owner: str, repo: str, gateway: GitHubGateway) -> list:
    """Return GitHub's branch array for owner/repo unchanged.

    Raises:
        CredentialNotFound: No stored token.
        UpstreamError: GitHub failure, carrying GitHub's status code.
    """
    credential = credential_service.resolve_credential(identity)
    result = gateway.list_branches(credential.token, owner, repo)

    if not result.ok:
        logger.error(
            "GitHub API error listing branches %s/%s status=%s error=%s",
            owner, repo, result.status_code, result.error,
        )
        raise UpstreamError(
            "Failed to fetch branches from GitHub",
            status=result.status_code,
            message=result.error,
        )
    return result.data or []


def validate_repository(identity: str, repository_url, gateway: GitHubGateway) -> dict:
    """Check that the caller's GitHub token can read the repository at `repository_url`.

    The URL is parsed before any lookup, so a malformed URL costs no database
    or GitHub call. Only the firebase_uid key is used to find the token.

    `identity` comes from the shared claim order (uid, firebase_uid, id,
    sub). Older clients read only `uid` then `id` here, so a token carrying
    `firebase_uid` but no `uid` now resolves by that claim first.

    Returns:
        {"valid": True, "repository": {id, name, full_name, default_branch, visibility}}

    Raises:
        InvalidRepositoryUrl: URL has no github.com/<owner>/<repo> part.
        CredentialNotFound: No stored token under firebase_uid.
        RepositoryNotAccessible: GitHub returned any non-2xx (or was unreachable).
    """
    owner, repo = parse_repository_url(repository_url)
    credential = credential_service.resolve_credential(
        identity, keys=(credential_service.IDENTITY_KEY,)
    )
    result = gateway.get_repository(credential.token, owner, repo)

    if not result.ok:
        logger.info(
            "Repository %s/%s not accessible identity=%s status=%s",
            owner, repo, identity, result.status_code,
        )
        raise RepositoryNotAccessible()

    return {
        "valid": True,
        "repository": summarize_repository(result.data or {}, VALIDATION_FIELDS),
    }
