"""Association rows between role templates and catalog permissions."""

from __future__ import annotations

import uuid

from sqlalchemy import Enum as SqlEnum
from sqlalchemy import ForeignKey
from sqlalchemy.orm import Mapped, mapped_column, relationship

from rolegraph.models.base import Base
from rolegraph.models.permission import Permission
from rolegraph.models.types import GUID


class RolePermission(Base):
    """One permission held by one role; the composite key keeps it unique per role."""

    __tablename__ = "role_permissions"

    role_template_id: Mapped[uuid.UUID] = mapped_column(
        GUID(),
        ForeignKey("role_templates.id", ondelete="CASCADE"),
        primary_key=True,
    )
    permission: Mapped[Permission] = mapped_column(
        SqlEnum(Permission, name="permission", native_enum=False, length=32),
        primary_key=True,
    )

    role_template: Mapped["RoleTemplate"] = relationship("RoleTemplate", back_populates="permission_links")
