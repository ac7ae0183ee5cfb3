"""Initial migration: users, addresses, representative directory, prayers, and outreach queue.

Revision ID: 001
Revises: None
Create Date: 2026-10-17
"""

from collections.abc import Sequence

import sqlalchemy as sa
from alembic import op
from sqlalchemy.dialects.postgresql import JSONB, UUID

revision: str = "001"
down_revision: str | None = None
branch_labels: str | Sequence[str] | None = None
depends_on: str | Sequence[str] | None = None


def _timestamps() -> list[sa.Column]:
    return [
        sa.Column("created_at", sa.DateTime(timezone=True), server_default=sa.func.now(), nullable=False),
        sa.Column("updated_at", sa.DateTime(timezone=True), server_default=sa.func.now(), nullable=False),
    ]


def upgrade() -> None:
    # Users (profile of identity-provider users)
    op.create_table(
        "users",
        sa.Column("id", UUID(as_uuid=True), primary_key=True),
        sa.Column("username", sa.String(100), nullable=False),
        sa.Column("email", sa.String(255), nullable=True),
        sa.Column("display_name", sa.String(200), nullable=True),
        sa.Column("tier", sa.String(20), nullable=False, server_default="free"),
        sa.Column("created_at", sa.DateTime(timezone=True), server_default=sa.func.now(), nullable=False),
        sa.CheckConstraint("tier IN ('free', 'supporter', 'patron', 'admin')", name="ck_users_tier"),
    )
    op.create_index("ix_users_username", "users", ["username"], unique=True)

    # Addresses with detected districts
    op.create_table(
        "user_addresses",
        sa.Column("id", UUID(as_uuid=True), primary_key=True),
        sa.Column("user_id", UUID(as_uuid=True), sa.ForeignKey("users.id", ondelete="CASCADE"), nullable=False),
        sa.Column("line1", sa.String(200), nullable=True),
        sa.Column("line2", sa.String(200), nullable=True),
        sa.Column("city", sa.String(100), nullable=True),
        sa.Column("state", sa.String(2), nullable=True),
        sa.Column("postal_code", sa.String(10), nullable=True),
        sa.Column("country", sa.String(2), nullable=False, server_default="US"),
        sa.Column("cd", sa.String(20), nullable=True),
        sa.Column("sd", sa.String(20), nullable=True),
        sa.Column("hd", sa.String(20), nullable=True),
        sa.Column("is_primary", sa.Boolean, nullable=False, server_default="false"),
        *_timestamps(),
    )
    op.create_index("ix_user_addresses_user_id", "user_addresses", ["user_id"])
    op.create_index(
        "uq_user_addresses_one_primary",
        "user_addresses",
        ["user_id"],
        unique=True,
        postgresql_where=sa.text("is_primary"),
    )

    # Representative directory
    op.create_table(
        "representatives",
        sa.Column("id", UUID(as_uuid=True), primary_key=True),
        sa.Column("external_id", sa.String(200), nullable=True, unique=True),
        sa.Column("source", sa.String(50), nullable=False),
        sa.Column("name", sa.String(200), nullable=False),
        sa.Column("party", sa.String(100), nullable=True),
        sa.Column("photo_url", sa.Text, nullable=True),
        sa.Column("office_name", sa.String(200), nullable=True),
        sa.Column("level", sa.String(20), nullable=False),
        sa.Column("chamber", sa.String(20), nullable=True),
        sa.Column("state", sa.String(2), nullable=True),
        sa.Column("district", sa.String(20), nullable=True),
        sa.Column("division_id", sa.String(200), nullable=True),
        sa.Column("email", sa.Text, nullable=True),
        sa.Column("contact_form_url", sa.Text, nullable=True),
        sa.Column("phone", sa.String(50), nullable=True),
        sa.Column("website", sa.Text, nullable=True),
        sa.Column("twitter_handle", sa.String(100), nullable=True),
        sa.Column("facebook_page_url", sa.Text, nullable=True),
        sa.Column("active", sa.Boolean, nullable=False, server_default="true"),
        sa.Column("last_synced", sa.DateTime(timezone=True), nullable=True),
        sa.Column("raw_data", JSONB, nullable=True),
        *_timestamps(),
        sa.CheckConstraint("level IN ('federal', 'state', 'local')", name="ck_representatives_level"),
    )
    op.create_index("ix_representatives_slot", "representatives", ["level", "chamber", "state", "district"])
    op.create_index("ix_representatives_state", "representatives", ["state"])

    # User to representative bindings
    op.create_table(
        "user_representatives",
        sa.Column(
            "user_id", UUID(as_uuid=True), sa.ForeignKey("users.id", ondelete="CASCADE"), primary_key=True
        ),
        sa.Column(
            "rep_id", UUID(as_uuid=True), sa.ForeignKey("representatives.id", ondelete="CASCADE"), primary_key=True
        ),
        sa.Column("level", sa.String(20), nullable=False),
        sa.Column("created_at", sa.DateTime(timezone=True), server_default=sa.func.now(), nullable=False),
        sa.CheckConstraint("level IN ('federal', 'state', 'local')", name="ck_user_representatives_level"),
    )

    # Prayers (owned by the social feed; minimal columns)
    op.create_table(
        "prayers",
        sa.Column("id", UUID(as_uuid=True), primary_key=True),
        sa.Column("author_id", UUID(as_uuid=True), sa.ForeignKey("users.id", ondelete="CASCADE"), nullable=False),
        sa.Column("content", sa.Text, nullable=False),
        sa.Column("created_at", sa.DateTime(timezone=True), server_default=sa.func.now(), nullable=False),
    )

    # Outreach queue
    op.create_table(
        "outreach_requests",
        sa.Column("id", UUID(as_uuid=True), primary_key=True),
        sa.Column("user_id", UUID(as_uuid=True), sa.ForeignKey("users.id", ondelete="CASCADE"), nullable=False),
        sa.Column("prayer_id", UUID(as_uuid=True), sa.ForeignKey("prayers.id", ondelete="CASCADE"), nullable=False),
        sa.Column(
            "target_rep_id",
            UUID(as_uuid=True),
            sa.ForeignKey("representatives.id", ondelete="SET NULL"),
            nullable=True,
        ),
        sa.Column("channels", JSONB, nullable=False, server_default=sa.text("'[]'::jsonb")),
        sa.Column("status", sa.String(20), nullable=False, server_default="queued"),
        sa.Column("subject", sa.Text, nullable=True),
        sa.Column("body", sa.Text, nullable=True),
        sa.Column("error", sa.Text, nullable=True),
        sa.Column("send_date", sa.Date, nullable=False, server_default=sa.text("CURRENT_DATE")),
        sa.Column("sent_at", sa.DateTime(timezone=True), nullable=True),
        *_timestamps(),
        sa.UniqueConstraint("user_id", "target_rep_id", "prayer_id", "send_date", name="uq_outreach_daily"),
        sa.CheckConstraint(
            "status IN ('queued', 'sent', 'failed', 'throttled')", name="ck_outreach_requests_status"
        ),
    )
    op.create_index("ix_outreach_requests_status", "outreach_requests", ["status"])
    op.create_index("ix_outreach_requests_user_id", "outreach_requests", ["user_id"])
    op.create_index("ix_outreach_requests_prayer_id", "outreach_requests", ["prayer_id"])


def downgrade() -> None:
    op.drop_table("outreach_requests")
    op.drop_table("prayers")
    op.drop_table("user_representatives")
    op.drop_table("representatives")
    op.drop_table("user_addresses")
    op.drop_table("users")
