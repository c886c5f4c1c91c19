"""
Shared pytest fixtures for the Repository Access Gateway test suite.

Provides:
    - app: Flask application (session-scoped)
    - _setup_db: Database table creation/teardown (session-scoped)
    - session: Per-test DB cleanup w/ rollback + recreate (autouse)
    - client: Flask test client (function-scoped)
    - fake_session: MagicMock requests.Session wired into the app's gateway
    - github_response: factory for canned GitHub HTTP responses
    - make_user: factory for persisted User rows
    - auth_headers: factory for Authorization headers with a signed caller JWT
"""

import json
from unittest.mock import MagicMock

import pytest
import requests

from repo_gateway import create_app
from repo_gateway.integrations.github_gateway import GitHubGateway
from repo_gateway.models import db as _db
from repo_gateway.models.user import User
from repo_gateway.services.jwt_service import generate_access_token


# ── App & DB fixtures ────────────────────────────────────────────────────


@pytest.fixture(scope="session")
def app():
    """Create the Flask application once per test session."""
    application = create_app("testing")
    return application


@pytest.fixture(scope="session")
def _setup_db(app):
    """Create all tables at session start, drop at end."""
    with app.app_context():
        _db.create_all()
    yield
    with app.app_context():
        _db.drop_all()


@pytest.fixture(autouse=True)
def session(app, _setup_db):
    """Per-test: open app context, rollback after test, recreate tables."""
    with app.app_context():
        yield
        _db.session.rollback()
        _db.drop_all()
        _db.create_all()


@pytest.fixture()
def client(app):
    """Flask test client."""
    return app.test_client()


# ── GitHub fakes ─────────────────────────────────────────────────────────


@pytest.fixture()
def github_response():
    """Return a factory building real requests.Response objects.

    Usage:
        github_response(200, [{"id": 1}])
        github_response(401, {"message": "Bad credentials"})
    """

    def _build(status_code: int = 200, body=None) -> requests.Response:
        resp = requests.Response()
        resp.status_code = status_code
        resp.encoding = "utf-8"
        resp._content = json.dumps(body).encode("utf-8") if body is not None else b""
        resp.headers["Content-Type"] = "application/json"
        return resp

    return _build


@pytest.fixture()
def fake_session(app):
    """Swap the app's gateway for one backed by a MagicMock session.

    Tests set `fake_session.request.return_value` (or side_effect) and
    assert on `fake_session.request.call_args`.
    """
    mock_session = MagicMock(spec=requests.Session)
    previous = app.extensions["github_gateway"]
    app.extensions["github_gateway"] = GitHubGateway(
        api_url=app.config["GITHUB_API_URL"],
        timeout=app.config["GITHUB_TIMEOUT"],
        session=mock_session,
    )
    yield mock_session
    app.extensions["github_gateway"] = previous


# ── Data & auth factories ────────────────────────────────────────────────


@pytest.fixture()
def make_user():
    """Return a factory that persists and returns a User row."""

    def _make(**kwargs) -> User:
        user = User(**kwargs)
        _db.session.add(user)
        _db.session.commit()
        return user

    return _make


@pytest.fixture()
def auth_headers():
    """Return a factory for Authorization headers carrying a caller JWT.

    The identity is placed in `claim` (default "uid", as the identity
    provider issues it).
    """

    def _headers(identity: str = "fb-uid-1", claim: str = "uid") -> dict:
        token = generate_access_token(identity, {claim: identity})
        return {"Authorization": f"Bearer {token}"}

    return _headers
