"""
SQLAlchemy ORM models.

These are purely infrastructure concerns; domain entities are mapped to/from
these models inside the repository implementations.
"""
import uuid
from datetime import datetime, timezone
from typing import Any, Optional

from sqlalchemy import (
    DateTime,
    Enum as SAEnum,
    ForeignKey,
    Index,
    Integer,
    String,
    Text,
    UniqueConstraint,
    func,
)
from sqlalchemy.dialects.postgresql import JSONB, UUID
from sqlalchemy.orm import Mapped, mapped_column, relationship

from socialscope.domain.enums.platform import Platform
from socialscope.domain.enums.scrape_status import ScrapeStatus
from socialscope.infrastructure.database.connection import Base

_platform_enum = SAEnum(
    Platform,
    name="profile_platform",
    values_callable=lambda obj: [e.value for e in obj],
)

_scrape_status_enum = SAEnum(
    ScrapeStatus,
    name="scrape_status",
    values_callable=lambda obj: [e.value for e in obj],
)


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


class ProfileModel(Base):
    __tablename__ = "profiles"

    id: Mapped[uuid.UUID] = mapped_column(UUID(as_uuid=True), primary_key=True, default=uuid.uuid4)
    user_id: Mapped[str] = mapped_column(String(255), nullable=False, index=True)
    platform: Mapped[Platform] = mapped_column(_platform_enum, nullable=False)
    username: Mapped[str] = mapped_column(String(512), nullable=False)

    # Scrape lifecycle
    scrape_status: Mapped[ScrapeStatus] = mapped_column(
        _scrape_status_enum, nullable=False, default=ScrapeStatus.PENDING, index=True
    )
    scrape_error: Mapped[str | None] = mapped_column(Text, nullable=True)
    last_scraped: Mapped[datetime | None] = mapped_column(DateTime(timezone=True), nullable=True)
    status_changed_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), nullable=False, default=_utcnow
    )

    # External run correlation
    apify_run_id: Mapped[str | None] = mapped_column(String(64), nullable=True)
    scrape_generation: Mapped[int] = mapped_column(Integer, nullable=False, default=0)

    # Timestamps
    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), nullable=False, server_default=func.now()
    )
    updated_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), nullable=False, server_default=func.now(), onupdate=func.now()
    )

    data: Mapped[Optional["ProfileDataModel"]] = relationship(
        "ProfileDataModel",
        back_populates="profile",
        cascade="all, delete-orphan",
        passive_deletes=True,
        uselist=False,
        lazy="noload",
    )

    __table_args__ = (
        UniqueConstraint("user_id", "platform", "username", name="uq_profiles_user_platform_username"),
        Index("ix_profiles_user_last_scraped", "user_id", "last_scraped"),
    )


class ProfileDataModel(Base):
    __tablename__ = "profile_data"

    id: Mapped[uuid.UUID] = mapped_column(UUID(as_uuid=True), primary_key=True, default=uuid.uuid4)
    profile_id: Mapped[uuid.UUID] = mapped_column(
        UUID(as_uuid=True),
        ForeignKey("profiles.id", ondelete="CASCADE"),
        nullable=False,
        unique=True,
    )
    raw_data: Mapped[list[Any]] = mapped_column(JSONB, nullable=False, default=list)
    platform_specific_data: Mapped[dict[str, Any]] = mapped_column(JSONB, nullable=False, default=dict)
    dataset_id: Mapped[str | None] = mapped_column(String(64), nullable=True)
    item_count: Mapped[int] = mapped_column(Integer, nullable=False, default=0)
    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), nullable=False, server_default=func.now()
    )

    profile: Mapped[ProfileModel] = relationship("ProfileModel", back_populates="data")
