"""create users, follows and follow_requests tables

Revision ID: 20261018_create_social_graph_tables
Revises:
Create Date: 2026-10-18
"""
from __future__ import annotations

from alembic import op
import sqlalchemy as sa
from sqlalchemy.dialects import postgresql

# revision identifiers, used by Alembic.
revision = "20261018_create_social_graph_tables"
down_revision = None
branch_labels = None
depends_on = None


def upgrade() -> None:
    op.create_table(
        "users",
        sa.Column("id", postgresql.UUID(as_uuid=True), primary_key=True, nullable=False),
        sa.Column("username", sa.String(150), nullable=False),
        sa.Column("full_name", sa.String(150), nullable=False, server_default=""),
        sa.Column("email", sa.String(255), nullable=True, unique=True),
        sa.Column("bio", sa.String(500), nullable=True),
        sa.Column("profile_picture_url", sa.String(1024), nullable=True),
        sa.Column("instagram_username", sa.String(150), nullable=True),
        sa.Column("is_private", sa.Boolean(), nullable=False, server_default=sa.false()),
        sa.Column("created_at", sa.DateTime(timezone=True), server_default=sa.func.now(), nullable=False),
        sa.Column("updated_at", sa.DateTime(timezone=True), server_default=sa.func.now(), nullable=False),
    )
    op.create_index("ix_users_username", "users", ["username"], unique=True)

    op.create_table(
        "follows",
        sa.Column("id", postgresql.UUID(as_uuid=True), primary_key=True, nullable=False),
        sa.Column("follower_id", postgresql.UUID(as_uuid=True), sa.ForeignKey("users.id", ondelete="CASCADE"), nullable=False),
        sa.Column("following_id", postgresql.UUID(as_uuid=True), sa.ForeignKey("users.id", ondelete="CASCADE"), nullable=False),
        sa.Column("created_at", sa.DateTime(timezone=True), server_default=sa.func.now(), nullable=False),
        sa.UniqueConstraint("follower_id", "following_id", name="uq_follow_pair"),
        sa.CheckConstraint("follower_id <> following_id", name="ck_follow_not_self"),
    )
    op.create_index("ix_follows_follower_id", "follows", ["follower_id"])
    op.create_index("ix_follows_following_id", "follows", ["following_id"])

    follow_request_status = sa.Enum("PENDING", "ACCEPTED", "REJECTED", name="follow_request_status")
    op.create_table(
        "follow_requests",
        sa.Column("id", postgresql.UUID(as_uuid=True), primary_key=True, nullable=False),
        sa.Column("sender_id", postgresql.UUID(as_uuid=True), sa.ForeignKey("users.id", ondelete="CASCADE"), nullable=False),
        sa.Column("receiver_id", postgresql.UUID(as_uuid=True), sa.ForeignKey("users.id", ondelete="CASCADE"), nullable=False),
        sa.Column("status", follow_request_status, nullable=False, server_default="PENDING"),
        sa.Column("created_at", sa.DateTime(timezone=True), server_default=sa.func.now(), nullable=False),
        sa.Column("updated_at", sa.DateTime(timezone=True), server_default=sa.func.now(), nullable=False),
        sa.CheckConstraint("sender_id <> receiver_id", name="ck_follow_request_not_self"),
    )
    op.create_index("ix_follow_requests_sender_id", "follow_requests", ["sender_id"])
    op.create_index("ix_follow_requests_receiver_id", "follow_requests", ["receiver_id"])
    op.create_index(
        "uq_follow_request_pending_pair",
        "follow_requests",
        ["sender_id", "receiver_id"],
        unique=True,
        postgresql_where=sa.text("status = 'PENDING'"),
        sqlite_where=sa.text("status = 'PENDING'"),
    )


def downgrade() -> None:
    op.drop_index("uq_follow_request_pending_pair", table_name="follow_requests")
    op.drop_index("ix_follow_requests_receiver_id", table_name="follow_requests")
    op.drop_index("ix_follow_requests_sender_id", table_name="follow_requests")
    op.drop_table("follow_requests")
    sa.Enum(name="follow_request_status").drop(op.get_bind(), checkfirst=True)
    op.drop_index("ix_follows_following_id", table_name="follows")
    op.drop_index("ix_follows_follower_id", table_name="follows")
    op.drop_table("follows")
    op.drop_index("ix_users_username", table_name="users")
    op.drop_table("users")
