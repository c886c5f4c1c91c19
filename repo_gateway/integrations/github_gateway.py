"""
GitHub REST API gateway.

All outbound HTTP calls to GitHub go through this class.
Direct `requests` calls in services or blueprints are FORBIDDEN.

  - Auth: the caller's stored token, sent as `Authorization: token <value>`
  - Accept: `application/vnd.github.v3+json` (pins the REST API version)
  - Timeout: explicit on every call (GITHUB_TIMEOUT, default 10 s)
  - No retries, no token cache: one shot per call, failures surface as
    a GatewayResult with ok=False

The gateway is built once in `create_app()` and stored in
`app.extensions["github_gateway"]`. Services receive it as an argument.

Testability: pass a mock `session` to GitHubGateway() in tests instead of
letting it create a real requests.Session internally.
"""

from __future__ import annotations

import logging
import time
from typing import Any
from urllib.parse import quote

import requests

logger = logging.getLogger(__name__)

DEFAULT_API_URL = "https://api.github.com"
DEFAULT_TIMEOUT = 10
ACCEPT_HEADER = "application/vnd.github.v3+json"

# Repository listing parameters
REPOS_PER_PAGE = 100
REPOS_SORT = "updated"


class GatewayResult:
    """Structured return value from GitHubGateway calls.

    Attributes:
        ok:             True if the call succeeded (HTTP 2xx + no exception).
        status_code:    HTTP status code (None if network-level failure).
        data:           Parsed JSON response body (dict or list), else None.
        error:          Human-readable error message or None.
        duration_ms:    Round-trip latency in milliseconds.
    """

    def __init__(
        self,
        ok: bool,
        status_code: int | None,
        data: dict | list | None,
        error: str | None,
        duration_ms: int,
    ) -> None:
        self.ok = ok
        self.status_code = status_code
        self.data = data
        self.error = error
        self.duration_ms = duration_ms

    def __repr__(self) -> str:
        return (
            f"<GatewayResult ok={self.ok} status={self.status_code} "
            f"duration_ms={self.duration_ms}>"
        )


def _error_message(resp: requests.Response) -> str:
    """Pull GitHub's `message` field out of an error body, if any."""
    try:
        body = resp.json()
    except ValueError:
        body = None
    if isinstance(body, dict) and body.get("message"):
        return str(body["message"])[:500]
    return f"HTTP {resp.status_code}: {resp.text[:500]}"


class GitHubGateway:
    """GitHub REST API gateway.

    Usage:
        gateway = GitHubGateway(api_url="https://api.github.com", timeout=10)
        result = gateway.list_user_repos(token)
        if result.ok:
            repos = result.data
    """

    def __init__(
        self,
        api_url: str = DEFAULT_API_URL,
        timeout: float = DEFAULT_TIMEOUT,
        session: requests.Session | None = None,
    ) -> None:
        self.api_url = (api_url or DEFAULT_API_URL).rstrip("/")
        self.timeout = timeout
        # Inject custom session for testing; create real one lazily otherwise.
        self._session: requests.Session | None = session

    # ── HTTP session ─────────────────────────────────────────────────────────

    @property
    def session(self) -> requests.Session:
        """Return (or lazily create) the requests.Session."""
        if self._session is None:
            self._session = requests.Session()
        return self._session

    # ── Core request dispatcher ───────────────────────────────────────────────

    @staticmethod
    def _headers(token: str) -> dict:
        return {
            "Authorization": f"token {token}",
            "Accept": ACCEPT_HEADER,
        }

    def request(
        self,
        method: str,
        path: str,
        *,
        token: str,
        params: dict | None = None,
    ) -> GatewayResult:
        """Execute one authenticated request against the GitHub API.

        Args:
            method: HTTP verb ("GET", ...).
            path:   API path starting with "/", already URL-escaped.
            token:  The caller's GitHub access token.
            params: URL query params (optional).

        Returns:
            GatewayResult — always returns (never raises). Callers check .ok.
        """
        url = f"{self.api_url}{path}"
        kwargs: dict[str, Any] = {"headers": self._headers(token), "timeout": self.timeout}
        if params:
            kwargs["params"] = params

        t0 = time.perf_counter()
        try:
            resp = self.session.request(method, url, **kwargs)
        except requests.Timeout:
            duration_ms = int((time.perf_counter() - t0) * 1000)
            logger.warning("GitHub request timed out after %ss: %s %s", self.timeout, method, path)
            return GatewayResult(
                ok=False,
                status_code=None,
                data=None,
                error=f"Request timed out after {self.timeout}s",
                duration_ms=duration_ms,
            )
        except requests.RequestException as exc:
            duration_ms = int((time.perf_counter() - t0) * 1000)
            logger.warning("GitHub network error: %s %s error=%s", method, path, exc)
            return GatewayResult(
                ok=False,
                status_code=None,
                data=None,
                error=str(exc)[:500],
                duration_ms=duration_ms,
            )

        duration_ms = int((time.perf_counter() - t0) * 1000)

        if resp.ok:
            try:
                data = resp.json() if resp.content else None
            except ValueError:
                data = None
            logger.debug(
                "GitHub %s %s -> %d (%dms)", method, path, resp.status_code, duration_ms
            )
            return GatewayResult(
                ok=True,
                status_code=resp.status_code,
                data=data,
                error=None,
                duration_ms=duration_ms,
            )

        error = _error_message(resp)
        logger.warning(
            "GitHub request failed status=%d %s %s error=%s",
            resp.status_code, method, path, error,
        )
        return GatewayResult(
            ok=False,
            status_code=resp.status_code,
            data=None,
            error=error,
            duration_ms=duration_ms,
        )

    # ── GitHub specific operations ────────────────────────────────────────────

    def list_user_repos(self, token: str) -> GatewayResult:
        """GET /user/repos — repositories of the token owner.

        Up to 100 items, most recently updated first.
        """
        return self.request(
            "GET", "/user/repos",
            token=token,
            params={"sort": REPOS_SORT, "per_page": REPOS_PER_PAGE},
        )

    def list_branches(self, token: str, owner: str, repo: str) -> GatewayResult:
        """GET /repos/{owner}/{repo}/branches.

        No pagination: GitHub's default page size applies, so repositories
        with more branches than one page return a truncated list.
        """
        path = f"/repos/{quote(owner, safe='')}/{quote(repo, safe='')}/branches"
        return self.request("GET", path, token=token)

    def get_repository(self, token: str, owner: str, repo: str) -> GatewayResult:
        """GET /repos/{owner}/{repo}."""
        path = f"/repos/{quote(owner, safe='')}/{quote(repo, safe='')}"
        return self.request("GET", path, token=token)


def init_github_gateway(app) -> GitHubGateway:
    """Build the gateway from app config and register it on the app."""
    gateway = GitHubGateway(
        api_url=app.config.get("GITHUB_API_URL", DEFAULT_API_URL),
        timeout=app.config.get("GITHUB_TIMEOUT", DEFAULT_TIMEOUT),
    )
    app.extensions["github_gateway"] = gateway
    return gateway


def get_github_gateway() -> GitHubGateway:
    """Return the gateway registered on the current app."""
    from flask import current_app

    return current_app.extensions["github_gateway"]
