"""Group model: the tenancy boundary for roles, appointments and members."""

from __future__ import annotations

import uuid
from enum import Enum
from typing import List

from sqlalchemy import Enum as SqlEnum
from sqlalchemy import Index, Integer, String
from sqlalchemy.orm import Mapped, mapped_column, relationship

from rolegraph.models.base import Base, TimestampMixin
from rolegraph.models.types import GUID


class GroupType(str, Enum):
    CLASS = "class"
    STUDY = "study"
    TEAM = "team"
    OTHER = "other"


class Group(TimestampMixin, Base):
    """A collaboration group owned by exactly one creator."""

    __tablename__ = "groups"
    __table_args__ = (Index("ix_groups_creator", "creator_id"),)

    id: Mapped[uuid.UUID] = mapped_column(GUID(), primary_key=True, default=uuid.uuid4)
    name: Mapped[str] = mapped_column(String(length=120), nullable=False)
    description: Mapped[str | None] = mapped_column(String(length=1024), nullable=True)
    type: Mapped[GroupType] = mapped_column(
        SqlEnum(GroupType, name="group_type", native_enum=False, values_callable=lambda x: [e.value for e in x]),
        default=GroupType.OTHER,
        nullable=False,
    )
    creator_id: Mapped[uuid.UUID] = mapped_column(GUID(), nullable=False)
    max_members: Mapped[int] = mapped_column(Integer, default=100, nullable=False)

    roles: Mapped[List["RoleTemplate"]] = relationship(
        "RoleTemplate",
        back_populates="group",
        cascade="all, delete-orphan",
    )
    members: Mapped[List["GroupMember"]] = relationship(
        "GroupMember",
        back_populates="group",
        cascade="all, delete-orphan",
    )
    invitations: Mapped[List["GroupInvitation"]] = relationship(
        "GroupInvitation",
        back_populates="group",
        cascade="all, delete-orphan",
    )
    tasks: Mapped[List["GroupTask"]] = relationship(
        "GroupTask",
        back_populates="group",
        cascade="all, delete-orphan",
    )
