"""
JWT Service — caller token verification.

Caller tokens are issued by the identity provider in front of this service;
we verify the signature and expiry and read the claims.

Algorithm:     HS256
Key:           JWT_SECRET_KEY (falls back to SECRET_KEY)
Audience:      JWT_AUDIENCE (optional; verified only when configured)

Expected claims (any one identifies the caller, first match wins):
{
    "uid": <external auth subject>,
    "firebase_uid": <external auth subject>,
    "id": <internal user id>,
    "sub": <subject>,
    "iat": <issued_at>,
    "exp": <expires_at>
}

`generate_access_token` exists for operator tooling and tests.
"""

import uuid
from datetime import datetime, timedelta, timezone

import jwt
from flask import current_app


# ─── Defaults ────────────────────────────────────────────────
DEFAULT_ACCESS_EXPIRES = 900       # 15 minutes
ALGORITHM = "HS256"

# Claims that can carry the caller identity, in precedence order
IDENTITY_CLAIMS = ("uid", "firebase_uid", "id", "sub")


def _get_secret():
    """Get the JWT secret key from app config."""
    return current_app.config.get("JWT_SECRET_KEY") or current_app.config["SECRET_KEY"]


def _get_audience():
    return current_app.config.get("JWT_AUDIENCE") or None


def _get_access_expires():
    return current_app.config.get("JWT_ACCESS_EXPIRES", DEFAULT_ACCESS_EXPIRES)


# ═══════════════════════════════════════════════════════════════
# Token Generation
# ═══════════════════════════════════════════════════════════════
def generate_access_token(subject: str, claims: dict | None = None) -> str:
    """Generate a short-lived access token for `subject`.

    Extra `claims` (e.g. {"uid": ...}) are merged into the payload.
    """
    now = datetime.now(timezone.utc)
    payload = {
        "sub": subject,
        "iat": now,
        "exp": now + timedelta(seconds=_get_access_expires()),
        "jti": str(uuid.uuid4()),
    }
    audience = _get_audience()
    if audience:
        payload["aud"] = audience
    if claims:
        payload.update(claims)
    return jwt.encode(payload, _get_secret(), algorithm=ALGORITHM)


# ═══════════════════════════════════════════════════════════════
# Token Verification
# ═══════════════════════════════════════════════════════════════
def decode_access_token(token: str) -> dict:
    """
    Decode and verify a caller token.

    Returns the payload dict on success.
    Raises jwt.exceptions on failure (ExpiredSignatureError, InvalidTokenError, etc.)
    """
    audience = _get_audience()
    options = {} if audience else {"verify_aud": False}
    return jwt.decode(
        token,
        _get_secret(),
        algorithms=[ALGORITHM],
        audience=audience,
        options=options,
    )


def identity_from_claims(claims: dict) -> str | None:
    """Return the caller identity from verified claims, or None."""
    for claim in IDENTITY_CLAIMS:
        value = claims.get(claim)
        if value not in (None, ""):
            return str(value)
    return None
