"""create_users_table

Create the `users` table holding the linked GitHub account per user:
  - firebase_uid          external identity subject (primary lookup key)
  - github_access_token   nullable; cleared when GitHub rejects it
  - github_username

Created conditionally so the migration is a no-op against databases that
already received the table via db.create_all() in development.

Revision ID: 7c1e2f9a4b30
Revises:
Create Date: 2026-10-18 09:12:41.000000
"""

from alembic import op
import sqlalchemy as sa
from sqlalchemy import inspect as sa_inspect


# revision identifiers, used by Alembic.
revision = "7c1e2f9a4b30"
down_revision = None
branch_labels = None
depends_on = None


def upgrade():
    bind = op.get_bind()
    inspector = sa_inspect(bind)
    existing_tables = set(inspector.get_table_names())

    if "users" not in existing_tables:
        op.create_table(
            "users",
            sa.Column("id", sa.String(length=36), nullable=False),
            sa.Column("firebase_uid", sa.String(length=128), nullable=True),
            sa.Column("email", sa.String(length=200), nullable=True),
            sa.Column("github_username", sa.String(length=100), nullable=True),
            sa.Column("github_access_token", sa.Text(), nullable=True),
            sa.Column("created_at", sa.DateTime(), nullable=True),
            sa.Column("updated_at", sa.DateTime(), nullable=True),
            sa.PrimaryKeyConstraint("id"),
            sa.UniqueConstraint("firebase_uid"),
        )

    indexes = {ix["name"] for ix in sa_inspect(bind).get_indexes("users")}
    if "ix_users_firebase_uid" not in indexes:
        op.create_index("ix_users_firebase_uid", "users", ["firebase_uid"])


def downgrade():
    op.drop_index("ix_users_firebase_uid", table_name="users")
    op.drop_table("users")
