"""MagicLink ORM: single-use emailed sign-in tokens (hash only).

Invariants:
    - Composite primary key (identifier, token_hash)
    - identifier is the lowercased email
    - used flips to True exactly once; expired rows are purged by cleanup
"""

from datetime import datetime, timezone

from sqlalchemy import Boolean, Text, DateTime
from sqlalchemy.orm import Mapped, mapped_column

from geni.db.base import Base


class MagicLink(Base):
    __tablename__ = "magic_links"

    identifier: Mapped[str] = mapped_column(Text, primary_key=True)
    token_hash: Mapped[str] = mapped_column(Text, primary_key=True)
    expires_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), nullable=False,
    )
    used: Mapped[bool] = mapped_column(Boolean, nullable=False, default=False)
    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        nullable=False,
        default=lambda: datetime.now(timezone.utc),
    )
