"""User ORM: one row per purchaser email.

Invariants:
    - id is UUID primary key
    - email is unique and stored lowercased
    - plan is "free" or "paid" (Plan enum values); never downgraded by upsert
    - deleting a user cascades to their reports
"""

import uuid
from datetime import datetime, timezone

from sqlalchemy import String, Text, DateTime
from sqlalchemy.orm import Mapped, mapped_column, relationship
from sqlalchemy.dialects.postgresql import UUID

from geni.core.domain_types import Plan
from geni.db.base import Base


class User(Base):
    """User aggregate root: owns purchased reports."""
    __tablename__ = "users"

    id: Mapped[uuid.UUID] = mapped_column(
        UUID(as_uuid=True), primary_key=True, default=uuid.uuid4,
    )
    email: Mapped[str] = mapped_column(Text, nullable=False, unique=True)
    name: Mapped[str | None] = mapped_column(Text, nullable=True)
    plan: Mapped[str] = mapped_column(
        String(10), nullable=False, default=Plan.FREE.value,
    )
    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        nullable=False,
        default=lambda: datetime.now(timezone.utc),
    )
    updated_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        nullable=False,
        default=lambda: datetime.now(timezone.utc),
    )

    reports: Mapped[list["Report"]] = relationship(
        "Report", back_populates="user",
        cascade="all, delete-orphan", passive_deletes=True,
    )
