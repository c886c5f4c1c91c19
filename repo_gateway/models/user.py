"""
User model — the `users` table.

Rows are created and linked to a GitHub account by the external sign-in
flow. This service only reads them and, when GitHub rejects a stored token,
nulls `github_access_token`.

Two columns can identify a caller:
  - firebase_uid  external identity subject (primary lookup key)
  - id            internal row id (fallback lookup key)
"""

import uuid
from datetime import datetime, timezone

from repo_gateway.models import db


class User(db.Model):
    __tablename__ = "users"

    id = db.Column(db.String(36), primary_key=True, default=lambda: str(uuid.uuid4()))
    firebase_uid = db.Column(db.String(128), unique=True, nullable=True)
    email = db.Column(db.String(200))
    github_username = db.Column(db.String(100))
    github_access_token = db.Column(db.Text, nullable=True)
    created_at = db.Column(db.DateTime, default=lambda: datetime.now(timezone.utc))
    updated_at = db.Column(
        db.DateTime,
        default=lambda: datetime.now(timezone.utc),
        onupdate=lambda: datetime.now(timezone.utc),
    )

    __table_args__ = (
        db.Index("ix_users_firebase_uid", "firebase_uid"),
    )

    @property
    def has_github_token(self) -> bool:
        """True when a non-empty GitHub token is stored."""
        return bool(self.github_access_token)

    def to_debug_dict(self):
        """Reduced view used only for operator debug logging."""
        return {
            "id": self.id,
            "firebase_uid": self.firebase_uid,
            "github_username": self.github_username,
        }

    def __repr__(self):
        return f"<User {self.id} github={self.github_username!r}>"
