"""Group tasks."""

from __future__ import annotations

import logging
from typing import List, Optional
from uuid import UUID

from sqlalchemy import select
from sqlalchemy.orm import Session

from rolegraph.models.group_task import GroupTask
from rolegraph.models.permission import Permission
from rolegraph.schemas.task import TaskCreate, TaskUpdate
from rolegraph.services.authorization import AuthorizationService
from rolegraph.services.errors import ForbiddenError, NotFoundError


class TaskNotFoundError(NotFoundError):
    """Raised when a task cannot be found."""


class TaskOwnershipError(ForbiddenError):
    """Raised when someone other than the task's author edits it."""


class TaskService:
    def __init__(self, session: Session, authorization: Optional[AuthorizationService] = None) -> None:
        self._session = session
        self._authorization = authorization or AuthorizationService(session)
        self._logger = logging.getLogger("rolegraph.services.tasks")

    def create_task(self, group_id: UUID, payload: TaskCreate, *, actor_id: UUID) -> GroupTask:
        self._authorization.require_permission(group_id, actor_id, Permission.CREATE_TASKS)
        task = GroupTask(
            group_id=group_id,
            created_by_id=actor_id,
            title=payload.title,
            description=payload.description,
            type=payload.type,
            due_date=payload.due_date,
            is_published=True,
        )
        self._session.add(task)
        self._session.flush()
        self._logger.info("task_created", extra={"task_id": str(task.id), "group_id": str(group_id)})
        return task

    def list_tasks(self, group_id: UUID, *, actor_id: UUID) -> List[GroupTask]:
        self._authorization.require_group(group_id)
        self._authorization.require_member(group_id, actor_id)
        stmt = select(GroupTask).where(GroupTask.group_id == group_id).order_by(GroupTask.created_at.desc())
        return list(self._session.scalars(stmt))

    def get_task(self, task_id: UUID, *, actor_id: UUID) -> GroupTask:
        task = self._get_task(task_id)
        self._authorization.require_member(task.group_id, actor_id)
        return task

    def update_task(self, task_id: UUID, payload: TaskUpdate, *, actor_id: UUID) -> GroupTask:
        task = self._get_task(task_id)
        if task.created_by_id != actor_id:
            raise TaskOwnershipError("Only the task's author can update it")
        updates = payload.model_dump(exclude_unset=True, exclude_none=True)
        for field, value in updates.items():
            setattr(task, field, value)
        self._session.flush()
        self._logger.info("task_updated", extra={"task_id": str(task_id), "changes": sorted(updates)})
        return task

    def delete_task(self, task_id: UUID, *, actor_id: UUID) -> None:
        task = self._get_task(task_id)
        if task.created_by_id != actor_id:
            raise TaskOwnershipError("Only the task's author can delete it")
        self._session.delete(task)
        self._session.flush()
        self._logger.info("task_deleted", extra={"task_id": str(task_id)})

    def _get_task(self, task_id: UUID) -> GroupTask:
        task = self._session.get(GroupTask, task_id)
        if task is None:
            raise TaskNotFoundError(f"Task {task_id} not found")
        return task
