"""Appointment edges between roles of the same group."""

from __future__ import annotations

import uuid

from sqlalchemy import Boolean, ForeignKey, Index
from sqlalchemy.orm import Mapped, mapped_column, relationship

from rolegraph.models.base import Base, TimestampMixin
from rolegraph.models.types import GUID


class RoleAppointment(TimestampMixin, Base):
    """Holders of ``from_role`` may appoint members into ``to_role``.

    ``can_delegate`` is copied onto members appointed through this edge.
    """

    __tablename__ = "role_appointments"
    __table_args__ = (Index("ix_role_appointments_to_role", "to_role_id"),)

    from_role_id: Mapped[uuid.UUID] = mapped_column(
        GUID(),
        ForeignKey("role_templates.id", ondelete="CASCADE"),
        primary_key=True,
    )
    to_role_id: Mapped[uuid.UUID] = mapped_column(
        GUID(),
        ForeignKey("role_templates.id", ondelete="CASCADE"),
        primary_key=True,
    )
    can_delegate: Mapped[bool] = mapped_column(Boolean, default=False, nullable=False)

    from_role: Mapped["RoleTemplate"] = relationship(
        "RoleTemplate",
        foreign_keys=[from_role_id],
        back_populates="outbound_appointments",
    )
    to_role: Mapped["RoleTemplate"] = relationship(
        "RoleTemplate",
        foreign_keys=[to_role_id],
        back_populates="inbound_appointments",
    )
