"""Tests for caller token verification and identity extraction."""

from datetime import datetime, timedelta, timezone

import jwt
import pytest
from flask import g

from repo_gateway.services.jwt_service import (
    ALGORITHM,
    decode_access_token,
    generate_access_token,
    identity_from_claims,
)


class TestIdentityFromClaims:
    @pytest.mark.parametrize(
        "claims, expected",
        [
            ({"uid": "u1", "firebase_uid": "f1", "id": "i1", "sub": "s1"}, "u1"),
            ({"firebase_uid": "f1", "id": "i1", "sub": "s1"}, "f1"),
            ({"id": "i1", "sub": "s1"}, "i1"),
            ({"sub": "s1"}, "s1"),
            ({"uid": "", "sub": "s1"}, "s1"),
            ({"id": 42}, "42"),
            ({}, None),
        ],
    )
    def test_claim_precedence(self, claims, expected):
        assert identity_from_claims(claims) == expected


class TestTokenRoundTrip:
    def test_generated_token_decodes_with_extra_claims(self):
        token = generate_access_token("subject-1", {"uid": "fb-1"})

        payload = decode_access_token(token)

        assert payload["sub"] == "subject-1"
        assert payload["uid"] == "fb-1"
        assert "jti" in payload

    def test_expired_token_is_rejected(self, app):
        now = datetime.now(timezone.utc)
        token = jwt.encode(
            {"sub": "x", "iat": now - timedelta(hours=2), "exp": now - timedelta(hours=1)},
            app.config["JWT_SECRET_KEY"],
            algorithm=ALGORITHM,
        )

        with pytest.raises(jwt.ExpiredSignatureError):
            decode_access_token(token)


class TestMiddleware:
    def test_valid_token_sets_caller_identity(self, app, auth_headers):
        with app.test_request_context("/api/v1/repositories", headers=auth_headers("fb-9")):
            app.preprocess_request()
            assert g.caller_identity == "fb-9"
            assert g.jwt_claims["uid"] == "fb-9"

    def test_expired_token_leaves_caller_unset(self, app, client):
        now = datetime.now(timezone.utc)
        token = jwt.encode(
            {"uid": "fb-1", "exp": now - timedelta(minutes=1)},
            app.config["JWT_SECRET_KEY"],
            algorithm=ALGORITHM,
        )

        res = client.get("/api/v1/repositories", headers={"Authorization": f"Bearer {token}"})

        assert res.status_code == 401
        assert res.get_json() == {"error": "Authentication required", "code": "Unauthenticated"}

    def test_wrong_signing_key_is_rejected(self, client):
        token = jwt.encode({"uid": "fb-1"}, "some-other-secret-that-is-long-enough", algorithm=ALGORITHM)

        res = client.get("/api/v1/repositories", headers={"Authorization": f"Bearer {token}"})

        assert res.status_code == 401

    def test_health_paths_skip_verification(self, app):
        with app.test_request_context(
            "/api/v1/health/ready", headers={"Authorization": "Bearer garbage"}
        ):
            app.preprocess_request()
            assert g.caller_identity is None
            assert g.jwt_claims == {}
