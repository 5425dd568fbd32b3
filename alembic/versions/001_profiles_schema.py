"""profiles schema

Revision ID: 001_profiles_schema
Revises:
Create Date: 2026-10-19 00:00:00.000000
"""
from typing import Sequence, Union

import sqlalchemy as sa
from sqlalchemy.dialects.postgresql import ENUM, JSONB, UUID

from alembic import op

revision: str = "001_profiles_schema"
down_revision: Union[str, None] = None
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None

profile_platform = ENUM("instagram", "linkedin", name="profile_platform", create_type=False)
scrape_status = ENUM(
    "pending",
    "fetching",
    "scraping",
    "completed",
    "failed",
    name="scrape_status",
    create_type=False,
)


def upgrade() -> None:
    bind = op.get_bind()
    profile_platform.create(bind, checkfirst=True)
    scrape_status.create(bind, checkfirst=True)

    # One row per (user, platform, handle)
    op.create_table(
        "profiles",
        sa.Column("id", UUID(as_uuid=True), primary_key=True),
        sa.Column("user_id", sa.String(255), nullable=False),
        sa.Column("platform", profile_platform, nullable=False),
        sa.Column("username", sa.String(512), nullable=False),
        # Scrape lifecycle
        sa.Column("scrape_status", scrape_status, nullable=False, server_default="pending"),
        sa.Column("scrape_error", sa.Text(), nullable=True),
        sa.Column("last_scraped", sa.DateTime(timezone=True), nullable=True),
        sa.Column("status_changed_at", sa.DateTime(timezone=True), nullable=False),
        # Apify run correlation
        sa.Column("apify_run_id", sa.String(64), nullable=True),
        sa.Column("scrape_generation", sa.Integer(), nullable=False, server_default="0"),
        sa.Column(
            "created_at",
            sa.DateTime(timezone=True),
            nullable=False,
            server_default=sa.text("now()"),
        ),
        sa.Column(
            "updated_at",
            sa.DateTime(timezone=True),
            nullable=False,
            server_default=sa.text("now()"),
        ),
        sa.UniqueConstraint("user_id", "platform", "username", name="uq_profiles_user_platform_username"),
    )

    op.create_index("ix_profiles_user_id", "profiles", ["user_id"])
    op.create_index("ix_profiles_scrape_status", "profiles", ["scrape_status"])
    op.create_index("ix_profiles_user_last_scraped", "profiles", ["user_id", "last_scraped"])

    # Latest scraped snapshot, replaced wholesale on each successful run
    op.create_table(
        "profile_data",
        sa.Column("id", UUID(as_uuid=True), primary_key=True),
        sa.Column(
            "profile_id",
            UUID(as_uuid=True),
            sa.ForeignKey("profiles.id", ondelete="CASCADE"),
            nullable=False,
            unique=True,
        ),
        sa.Column("raw_data", JSONB, nullable=False, server_default=sa.text("'[]'")),
        sa.Column("platform_specific_data", JSONB, nullable=False, server_default=sa.text("'{}'")),
        sa.Column("dataset_id", sa.String(64), nullable=True),
        sa.Column("item_count", sa.Integer(), nullable=False, server_default="0"),
        sa.Column(
            "created_at",
            sa.DateTime(timezone=True),
            nullable=False,
            server_default=sa.text("now()"),
        ),
    )


def downgrade() -> None:
    op.drop_table("profile_data")
    op.drop_table("profiles")
    sa.Enum(name="scrape_status").drop(op.get_bind(), checkfirst=True)
    sa.Enum(name="profile_platform").drop(op.get_bind(), checkfirst=True)
