"""Unit tests for repo_gateway.services.credential_service.

Coverage
--------
    - first_usable_credential: order, short-circuit, empty tokens
    - resolve_credential: firebase_uid hit, id fallback, restricted keys, misses
    - invalidate: clears, idempotent, scoped to firebase_uid, swallows DB errors
    - debug user sample: logged only when enabled
"""

import logging
from unittest.mock import MagicMock, patch

import pytest
from sqlalchemy.exc import SQLAlchemyError

from repo_gateway.core.exceptions import CredentialNotFound
from repo_gateway.models import db
from repo_gateway.models.user import User
import repo_gateway.services.credential_service as cred_svc


def _user(token):
    """Unsaved stand-in row for the pure resolver."""
    return User(firebase_uid="x", github_access_token=token)


class TestFirstUsableCredential:
    def test_first_usable_wins_and_later_loaders_are_not_called(self):
        """
        Given: two loaders, the first returning a user with a token
        When:  first_usable_credential runs
        Then:  it returns that token and never invokes the second loader
        """
        first = MagicMock(return_value=_user("tok-1"))
        second = MagicMock(return_value=_user("tok-2"))

        resolved = cred_svc.first_usable_credential([("firebase_uid", first), ("id", second)])

        assert resolved.token == "tok-1"
        assert resolved.matched_key == "firebase_uid"
        first.assert_called_once()
        second.assert_not_called()

    def test_falls_through_missing_row_to_next_key(self):
        first = MagicMock(return_value=None)
        second = MagicMock(return_value=_user("tok-2"))

        resolved = cred_svc.first_usable_credential([("firebase_uid", first), ("id", second)])

        assert resolved.token == "tok-2"
        assert resolved.matched_key == "id"

    @pytest.mark.parametrize("empty", [None, ""])
    def test_row_with_empty_token_is_not_usable(self, empty):
        first = MagicMock(return_value=_user(empty))
        second = MagicMock(return_value=_user("tok-2"))

        resolved = cred_svc.first_usable_credential([("firebase_uid", first), ("id", second)])

        assert resolved.matched_key == "id"
        second.assert_called_once()

    def test_no_usable_row_returns_none(self):
        loaders = [("firebase_uid", MagicMock(return_value=None)),
                   ("id", MagicMock(return_value=_user("")))]

        assert cred_svc.first_usable_credential(loaders) is None


class TestResolveCredential:
    def test_resolves_by_firebase_uid(self, make_user):
        make_user(firebase_uid="fb-1", github_access_token="gho_fb")

        resolved = cred_svc.resolve_credential("fb-1")

        assert resolved.token == "gho_fb"
        assert resolved.matched_key == "firebase_uid"

    def test_falls_back_to_internal_id(self, make_user):
        """A caller identified by users.id still finds its token."""
        user = make_user(firebase_uid=None, github_access_token="gho_id")

        resolved = cred_svc.resolve_credential(user.id)

        assert resolved.token == "gho_id"
        assert resolved.matched_key == "id"

    def test_firebase_row_without_token_falls_back_to_id_row(self, make_user):
        """
        Given: row A has firebase_uid=X but no token, row B has id=X and a token
        When:  resolving X with the default keys
        Then:  row B's token is used
        """
        make_user(id="shared-ident", firebase_uid="other", github_access_token="gho_b")
        make_user(firebase_uid="shared-ident", github_access_token=None)

        resolved = cred_svc.resolve_credential("shared-ident")

        assert resolved.token == "gho_b"
        assert resolved.matched_key == "id"

    def test_restricted_keys_skip_id_fallback(self, make_user):
        user = make_user(firebase_uid=None, github_access_token="gho_id")

        with pytest.raises(CredentialNotFound):
            cred_svc.resolve_credential(user.id, keys=(cred_svc.IDENTITY_KEY,))

    def test_unknown_identity_raises(self):
        with pytest.raises(CredentialNotFound) as exc_info:
            cred_svc.resolve_credential("nobody")

        assert exc_info.value.status == 401
        assert exc_info.value.code == "GitHubAuthRequired"

    @pytest.mark.parametrize("identity", [None, ""])
    def test_empty_identity_raises_without_query(self, identity):
        with patch.object(cred_svc, "first_usable_credential") as mock_first:
            with pytest.raises(CredentialNotFound):
                cred_svc.resolve_credential(identity)

        mock_first.assert_not_called()


class TestInvalidate:
    def test_clears_token_for_firebase_uid(self, make_user):
        user = make_user(firebase_uid="fb-1", github_access_token="gho_fb")

        assert cred_svc.invalidate("fb-1") is True

        db.session.expire_all()
        assert db.session.get(User, user.id).github_access_token is None

    def test_is_idempotent(self, make_user):
        make_user(firebase_uid="fb-1", github_access_token="gho_fb")

        cred_svc.invalidate("fb-1")
        cred_svc.invalidate("fb-1")

        with pytest.raises(CredentialNotFound):
            cred_svc.resolve_credential("fb-1")

    def test_only_matches_firebase_uid_column(self, make_user):
        """A row reachable only through the id fallback keeps its token."""
        user = make_user(firebase_uid=None, github_access_token="gho_id")

        assert cred_svc.invalidate(user.id) is False

        db.session.expire_all()
        assert db.session.get(User, user.id).github_access_token == "gho_id"

    def test_unknown_identity_returns_false(self):
        assert cred_svc.invalidate("nobody") is False
        assert cred_svc.invalidate(None) is False

    def test_database_failure_is_logged_not_raised(self, make_user, caplog):
        make_user(firebase_uid="fb-1", github_access_token="gho_fb")

        with patch.object(cred_svc, "update", side_effect=SQLAlchemyError("db down")):
            with caplog.at_level(logging.WARNING, logger=cred_svc.logger.name):
                assert cred_svc.invalidate("fb-1") is False

        assert "Could not clear GitHub token" in caplog.text
        assert cred_svc.resolve_credential("fb-1").token == "gho_fb"


class TestDebugUserSample:
    def test_sample_logged_when_enabled(self, app, make_user, caplog):
        make_user(firebase_uid="fb-1", github_username="octo", github_access_token="secret-token")

        with patch.dict(app.config, {"GITHUB_DEBUG_USER_SAMPLE": True}):
            with caplog.at_level(logging.DEBUG, logger=cred_svc.logger.name):
                with pytest.raises(CredentialNotFound):
                    cred_svc.resolve_credential("nobody")

        assert "Available users in database" in caplog.text
        assert "octo" in caplog.text
        assert "secret-token" not in caplog.text

    def test_sample_not_logged_when_disabled(self, make_user, caplog):
        make_user(firebase_uid="fb-1", github_username="octo")

        with caplog.at_level(logging.DEBUG, logger=cred_svc.logger.name):
            with pytest.raises(CredentialNotFound):
                cred_svc.resolve_credential("nobody")

        assert "Available users in database" not in caplog.text
