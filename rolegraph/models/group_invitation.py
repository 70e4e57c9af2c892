"""Invitation codes granting entry into a group."""

from __future__ import annotations

import uuid
from datetime import datetime
from typing import Optional

from sqlalchemy import Boolean, DateTime, ForeignKey, Index, Integer, String, UniqueConstraint
from sqlalchemy.orm import Mapped, mapped_column, relationship

from rolegraph.models.base import Base, TimestampMixin
from rolegraph.models.types import GUID


class GroupInvitation(TimestampMixin, Base):
    """A reusable join code limited by ``max_uses`` and an optional expiry."""

    __tablename__ = "group_invitations"
    __table_args__ = (
        UniqueConstraint("code", name="uq_group_invitations_code"),
        Index("ix_group_invitations_group", "group_id"),
    )

    id: Mapped[uuid.UUID] = mapped_column(GUID(), primary_key=True, default=uuid.uuid4)
    group_id: Mapped[uuid.UUID] = mapped_column(
        GUID(),
        ForeignKey("groups.id", ondelete="CASCADE"),
        nullable=False,
    )
    invited_by_id: Mapped[uuid.UUID] = mapped_column(GUID(), nullable=False)
    code: Mapped[str] = mapped_column(String(length=64), nullable=False)
    max_uses: Mapped[int] = mapped_column(Integer, default=1, nullable=False)
    used_count: Mapped[int] = mapped_column(Integer, default=0, nullable=False)
    expires_at: Mapped[Optional[datetime]] = mapped_column(DateTime(timezone=True), nullable=True)
    is_active: Mapped[bool] = mapped_column(Boolean, default=True, nullable=False)
    default_role: Mapped[str] = mapped_column(String(length=120), nullable=False)

    group: Mapped["Group"] = relationship("Group", back_populates="invitations")
