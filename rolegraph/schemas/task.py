"""Group task schemas."""

from __future__ import annotations

from datetime import datetime
from typing import Optional
from uuid import UUID

from pydantic import BaseModel, ConfigDict, Field

from rolegraph.models.group_task import TaskType


class TaskCreate(BaseModel):
    title: str = Field(..., min_length=1, max_length=255)
    description: Optional[str] = Field(default=None, max_length=2048)
    type: TaskType = TaskType.HOMEWORK
    due_date: Optional[datetime] = None


class TaskResponse(TaskCreate):
    id: UUID
    group_id: UUID
    created_by_id: UUID
    is_published: bool
    created_at: datetime

    model_config = ConfigDict(from_attributes=True)


class TaskUpdate(BaseModel):
    title: Optional[str] = Field(default=None, min_length=1, max_length=255)
    description: Optional[str] = Field(default=None, max_length=2048)
    type: Optional[TaskType] = None
    due_date: Optional[datetime] = None
    is_published: Optional[bool] = None
