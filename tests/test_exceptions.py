"""Error bodies and codes raised by the service layer."""

import pytest

from repo_gateway.core.exceptions import (
    CredentialInvalid,
    CredentialNotFound,
    GatewayError,
    InvalidRepositoryUrl,
    RepositoryNotAccessible,
    UpstreamError,
)
from repo_gateway.utils.errors import E, _DEFAULT_STATUS


@pytest.mark.parametrize(
    "exc, code, status",
    [
        (CredentialNotFound(), E.GITHUB_AUTH_REQUIRED, 401),
        (CredentialInvalid(), E.GITHUB_AUTH_REQUIRED, 401),
        (UpstreamError("Failed"), E.UPSTREAM, 500),
        (InvalidRepositoryUrl(), E.INVALID_REPOSITORY_URL, 400),
        (RepositoryNotAccessible(), E.REPOSITORY_NOT_ACCESSIBLE, 403),
        (GatewayError(), E.INTERNAL, 500),
    ],
)
def test_codes_and_statuses_agree_with_api_error_table(exc, code, status):
    assert exc.code == code
    assert exc.status == status
    assert _DEFAULT_STATUS[code] == status


def test_upstream_error_keeps_github_status_and_detail():
    exc = UpstreamError("Failed to fetch branches from GitHub", status=404, message="Not Found")

    assert exc.to_dict() == {
        "error": "Failed to fetch branches from GitHub",
        "code": "UpstreamError",
        "message": "Not Found",
    }
    assert exc.status == 404


def test_body_omits_empty_message():
    assert InvalidRepositoryUrl().to_dict() == {
        "error": "Invalid GitHub repository URL",
        "code": "InvalidRepositoryUrl",
    }
