"""Per-group role definitions."""

from __future__ import annotations

import uuid
from typing import FrozenSet, List

from sqlalchemy import Boolean, ForeignKey, Index, Integer, String, UniqueConstraint
from sqlalchemy.orm import Mapped, mapped_column, relationship

from rolegraph.models.base import Base, TimestampMixin
from rolegraph.models.permission import Permission
from rolegraph.models.types import GUID


class RoleTemplate(TimestampMixin, Base):
    """A named authority level inside one group.

    Lower ``level`` means more authority; the creator role sits at 0.
    """

    __tablename__ = "role_templates"
    __table_args__ = (
        UniqueConstraint("group_id", "name", name="uq_role_templates_group_name"),
        Index("ix_role_templates_group_level", "group_id", "level"),
    )

    id: Mapped[uuid.UUID] = mapped_column(GUID(), primary_key=True, default=uuid.uuid4)
    group_id: Mapped[uuid.UUID] = mapped_column(
        GUID(),
        ForeignKey("groups.id", ondelete="CASCADE"),
        nullable=False,
    )
    name: Mapped[str] = mapped_column(String(length=120), nullable=False)
    description: Mapped[str | None] = mapped_column(String(length=512), nullable=True)
    level: Mapped[int] = mapped_column(Integer, default=0, nullable=False)
    is_system: Mapped[bool] = mapped_column(Boolean, default=False, nullable=False)
    is_active: Mapped[bool] = mapped_column(Boolean, default=True, nullable=False)

    group: Mapped["Group"] = relationship("Group", back_populates="roles")
    permission_links: Mapped[List["RolePermission"]] = relationship(
        "RolePermission",
        back_populates="role_template",
        cascade="all, delete-orphan",
        lazy="selectin",
    )
    members: Mapped[List["GroupMember"]] = relationship("GroupMember", back_populates="role_template")
    outbound_appointments: Mapped[List["RoleAppointment"]] = relationship(
        "RoleAppointment",
        foreign_keys="RoleAppointment.from_role_id",
        back_populates="from_role",
        cascade="all, delete-orphan",
    )
    inbound_appointments: Mapped[List["RoleAppointment"]] = relationship(
        "RoleAppointment",
        foreign_keys="RoleAppointment.to_role_id",
        back_populates="to_role",
        cascade="all, delete-orphan",
    )

    @property
    def permissions(self) -> FrozenSet[Permission]:
        return frozenset(link.permission for link in self.permission_links)
