"""Tasks published to a group's members."""

from __future__ import annotations

import uuid
from datetime import datetime
from enum import Enum
from typing import Optional

from sqlalchemy import Boolean, DateTime
from sqlalchemy import Enum as SqlEnum
from sqlalchemy import ForeignKey, Index, String
from sqlalchemy.orm import Mapped, mapped_column, relationship

from rolegraph.models.base import Base, TimestampMixin
from rolegraph.models.types import GUID


class TaskType(str, Enum):
    HOMEWORK = "homework"
    PRACTICE = "practice"
    EXAM = "exam"
    OTHER = "other"


class GroupTask(TimestampMixin, Base):
    __tablename__ = "group_tasks"
    __table_args__ = (Index("ix_group_tasks_group", "group_id"),)

    id: Mapped[uuid.UUID] = mapped_column(GUID(), primary_key=True, default=uuid.uuid4)
    group_id: Mapped[uuid.UUID] = mapped_column(
        GUID(),
        ForeignKey("groups.id", ondelete="CASCADE"),
        nullable=False,
    )
    created_by_id: Mapped[uuid.UUID] = mapped_column(GUID(), nullable=False)
    title: Mapped[str] = mapped_column(String(length=255), nullable=False)
    description: Mapped[str | None] = mapped_column(String(length=2048), nullable=True)
    type: Mapped[TaskType] = mapped_column(
        SqlEnum(TaskType, name="task_type", native_enum=False, values_callable=lambda x: [e.value for e in x]),
        default=TaskType.HOMEWORK,
        nullable=False,
    )
    due_date: Mapped[Optional[datetime]] = mapped_column(DateTime(timezone=True), nullable=True)
    is_published: Mapped[bool] = mapped_column(Boolean, default=True, nullable=False)

    group: Mapped["Group"] = relationship("Group", back_populates="tasks")
