"""
Credential Service — resolve and invalidate stored GitHub tokens.

A caller identity may be either the external auth subject
(`users.firebase_uid`) or the internal row id (`users.id`); upstream
identity shape is not consistent across callers. Resolution therefore
tries an ordered list of lookup keys and stops at the first row that
holds a usable token:

    1. firebase_uid == identity
    2. id           == identity

The precedence logic lives in `first_usable_credential`, which only sees
(key, loader) pairs and never touches the database itself.

Invalidation clears the token on the row matched by `firebase_uid` and is
best effort: a failed write is logged, never raised.
"""

from __future__ import annotations

import logging
from collections.abc import Callable, Iterable, Sequence
from typing import NamedTuple

from flask import current_app
from sqlalchemy import select, update
from sqlalchemy.exc import SQLAlchemyError

from repo_gateway.core.exceptions import CredentialNotFound
from repo_gateway.models import db
from repo_gateway.models.user import User

logger = logging.getLogger(__name__)

IDENTITY_KEY = "firebase_uid"
ID_KEY = "id"

# Lookup precedence for the repository/branch listers
DEFAULT_LOOKUP_KEYS: tuple[str, ...] = (IDENTITY_KEY, ID_KEY)

DEFAULT_DEBUG_SAMPLE_LIMIT = 10


class ResolvedCredential(NamedTuple):
    user: User
    token: str
    matched_key: str


LookupAttempt = tuple[str, Callable[[], "User | None"]]


# ═════════════════════════════════════════════════════════════════════════════
# Pure resolution
# ═════════════════════════════════════════════════════════════════════════════


def first_usable_credential(attempts: Iterable[LookupAttempt]) -> ResolvedCredential | None:
    """Return the first attempt whose user row carries a non-empty token.

    Loaders are called lazily in order; later loaders are never invoked once
    an earlier one yields a usable token.
    """
    for key, loader in attempts:
        user = loader()
        if user is not None and user.has_github_token:
            return ResolvedCredential(user=user, token=user.github_access_token, matched_key=key)
        logger.debug("No usable GitHub token via key=%s", key)
    return None


# ═════════════════════════════════════════════════════════════════════════════
# Database lookups
# ═════════════════════════════════════════════════════════════════════════════


def _find_by_identity(identity: str) -> User | None:
    stmt = select(User).where(User.firebase_uid == identity)
    return db.session.execute(stmt).scalar_one_or_none()


def _find_by_id(identity: str) -> User | None:
    return db.session.get(User, identity)


_LOADERS: dict[str, Callable[[str], "User | None"]] = {
    IDENTITY_KEY: _find_by_identity,
    ID_KEY: _find_by_id,
}


def _lookup_attempts(identity: str, keys: Sequence[str]) -> list[LookupAttempt]:
    attempts = []
    for key in keys:
        loader = _LOADERS[key]
        attempts.append((key, lambda loader=loader: loader(identity)))
    return attempts


def _log_user_sample() -> None:
    """Log a bounded sample of user rows to help operators debug lookups.

    Enabled only when GITHUB_DEBUG_USER_SAMPLE is set (development default).
    """
    if not current_app.config.get("GITHUB_DEBUG_USER_SAMPLE", False):
        return
    limit = current_app.config.get("GITHUB_DEBUG_USER_SAMPLE_LIMIT", DEFAULT_DEBUG_SAMPLE_LIMIT)
    rows = db.session.execute(select(User).limit(limit)).scalars().all()
    logger.debug("Available users in database: %s", [u.to_debug_dict() for u in rows])


def resolve_credential(
    identity: str | None,
    keys: Sequence[str] = DEFAULT_LOOKUP_KEYS,
) -> ResolvedCredential:
    """Resolve the caller's stored GitHub token.

    Args:
        identity: Caller identity from the verified bearer token.
        keys: Lookup keys in precedence order. The validator passes
              (IDENTITY_KEY,) only.

    Returns:
        ResolvedCredential(user, token, matched_key).

    Raises:
        CredentialNotFound: If no key yields a row with a usable token.
    """
    if not identity:
        raise CredentialNotFound()

    resolved = first_usable_credential(_lookup_attempts(identity, keys))
    logger.info(
        "GitHub credential lookup identity=%s keys=%s found=%s matched_key=%s",
        identity, ",".join(keys), resolved is not None,
        resolved.matched_key if resolved else None,
    )
    if resolved is None:
        _log_user_sample()
        raise CredentialNotFound()
    return resolved


# ═════════════════════════════════════════════════════════════════════════════
# Invalidation
# ═════════════════════════════════════════════════════════════════════════════


def invalidate(identity: str | None) -> bool:
    """Clear the stored GitHub token for the row whose firebase_uid matches.

    Idempotent and best effort: database failures are rolled back and logged,
    never raised, so the caller's primary error response is unaffected.

    Returns:
        True if a row was updated.
    """
    if not identity:
        return False
    try:
        result = db.session.execute(
            update(User)
            .where(User.firebase_uid == identity)
            .values(github_access_token=None)
        )
        db.session.commit()
    except SQLAlchemyError as exc:
        db.session.rollback()
        logger.warning("Could not clear GitHub token for identity=%s: %s", identity, exc)
        return False

    cleared = bool(result.rowcount)
    logger.info("Cleared GitHub token identity=%s rows=%d", identity, result.rowcount or 0)
    return cleared
