"""Group membership bound to a single role template."""

from __future__ import annotations

import uuid
from datetime import datetime, timezone

from sqlalchemy import Boolean, DateTime, ForeignKey, Index, UniqueConstraint
from sqlalchemy.orm import Mapped, mapped_column, relationship

from rolegraph.models.base import Base, TimestampMixin
from rolegraph.models.types import GUID


class GroupMember(TimestampMixin, Base):
    """A user's membership in a group.

    ``can_delegate`` is a snapshot of the appointment edge used the last time
    this member was appointed. It is not recomputed when the edge changes.
    """

    __tablename__ = "group_members"
    __table_args__ = (
        UniqueConstraint("group_id", "user_id", name="uq_group_members_group_user"),
        Index("ix_group_members_user", "user_id"),
        Index("ix_group_members_role", "role_template_id"),
    )

    id: Mapped[uuid.UUID] = mapped_column(GUID(), primary_key=True, default=uuid.uuid4)
    group_id: Mapped[uuid.UUID] = mapped_column(
        GUID(),
        ForeignKey("groups.id", ondelete="CASCADE"),
        nullable=False,
    )
    user_id: Mapped[uuid.UUID] = mapped_column(GUID(), nullable=False)
    role_template_id: Mapped[uuid.UUID] = mapped_column(
        GUID(),
        ForeignKey("role_templates.id", ondelete="RESTRICT"),
        nullable=False,
    )
    can_delegate: Mapped[bool] = mapped_column(Boolean, default=False, nullable=False)
    joined_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        nullable=False,
        default=lambda: datetime.now(timezone.utc),
    )

    group: Mapped["Group"] = relationship("Group", back_populates="members")
    role_template: Mapped["RoleTemplate"] = relationship("RoleTemplate", back_populates="members")
