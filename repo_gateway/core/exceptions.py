"""
Gateway-wide exception hierarchy.

Services raise these; the repositories blueprint registers a single
handler for `GatewayError` and turns every subclass into a JSON body of
the same shape:

    {"error": <short summary>, "code": <machine code>, "message": <detail>}

Usage:
    from repo_gateway.core.exceptions import CredentialNotFound, UpstreamError

    raise CredentialNotFound()
    raise UpstreamError("Failed to fetch branches from GitHub", status=404)
"""

from __future__ import annotations

from repo_gateway.utils.errors import E


class GatewayError(Exception):
    """Base class for every error this service reports to callers.

    Args:
        message: Human-readable detail. Returned as `message` in the body.
        status: HTTP status code for the response.
        code: Machine-readable code, one of `E.*`.
        error: Short summary returned as `error` in the body.
    """

    status: int = 500
    code: str = E.INTERNAL
    error: str = "Internal server error"

    def __init__(
        self,
        message: str | None = None,
        *,
        status: int | None = None,
        code: str | None = None,
        error: str | None = None,
    ) -> None:
        if status is not None:
            self.status = status
        if code is not None:
            self.code = code
        if error is not None:
            self.error = error
        self.message = message
        super().__init__(message or self.error)

    def to_dict(self) -> dict:
        body = {"error": self.error, "code": self.code}
        if self.message:
            body["message"] = self.message
        return body


class CredentialNotFound(GatewayError):
    """No usable GitHub token is stored for the caller. Maps to 401."""

    status = 401
    code = E.GITHUB_AUTH_REQUIRED
    error = "GitHub authentication required"

    def __init__(self, message: str | None = None) -> None:
        super().__init__(
            message
            or "No GitHub access token found for your account. "
               "Please sign in with GitHub again."
        )


class CredentialInvalid(GatewayError):
    """GitHub rejected the stored token (HTTP 401). Maps to 401.

    Raised after the stored token has been cleared (best effort).
    """

    status = 401
    code = E.GITHUB_AUTH_REQUIRED
    error = "GitHub authentication required"

    def __init__(self, message: str | None = None) -> None:
        super().__init__(
            message
            or "Your GitHub token has expired or is invalid. "
               "Please reconnect your GitHub account."
        )


class UpstreamError(GatewayError):
    """GitHub answered non-2xx (other than the cases above) or was unreachable.

    `status` mirrors the upstream status code; 500 when there was none
    (timeout, connection error).
    """

    code = E.UPSTREAM

    def __init__(
        self,
        error: str,
        *,
        status: int | None = None,
        message: str | None = None,
    ) -> None:
        super().__init__(message, status=status or 500, error=error)


class InvalidRepositoryUrl(GatewayError):
    """The submitted repository URL has no `github.com/<owner>/<repo>` part."""

    status = 400
    code = E.INVALID_REPOSITORY_URL
    error = "Invalid GitHub repository URL"


class RepositoryNotAccessible(GatewayError):
    """GitHub would not return the repository.

    Covers both "does not exist" and "no permission" (404 and 403 upstream)
    so callers cannot probe for private repository names.
    """

    status = 403
    code = E.REPOSITORY_NOT_ACCESSIBLE
    error = "Repository not found or no access"
