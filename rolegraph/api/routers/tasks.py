"""Group task endpoints."""

from __future__ import annotations

from typing import List
from uuid import UUID

from fastapi import APIRouter, Depends, status

from rolegraph.api.dependencies import get_actor_id, get_task_service
from rolegraph.schemas.task import TaskCreate, TaskResponse, TaskUpdate
from rolegraph.services.tasks import TaskService

router = APIRouter()


@router.post(
    "/groups/{group_id}/tasks",
    response_model=TaskResponse,
    status_code=status.HTTP_201_CREATED,
)
def create_task(
    group_id: UUID,
    payload: TaskCreate,
    service: TaskService = Depends(get_task_service),
    actor_id: UUID = Depends(get_actor_id),
) -> TaskResponse:
    return TaskResponse.model_validate(service.create_task(group_id, payload, actor_id=actor_id))


@router.get(
    "/groups/{group_id}/tasks",
    response_model=List[TaskResponse],
)
def list_tasks(
    group_id: UUID,
    service: TaskService = Depends(get_task_service),
    actor_id: UUID = Depends(get_actor_id),
) -> List[TaskResponse]:
    return [TaskResponse.model_validate(task) for task in service.list_tasks(group_id, actor_id=actor_id)]


@router.delete(
    "/tasks/{task_id}",
    status_code=status.HTTP_200_OK,
)
def delete_task(
    task_id: UUID,
    service: TaskService = Depends(get_task_service),
    actor_id: UUID = Depends(get_actor_id),
) -> dict[str, str]:
    service.delete_task(task_id, actor_id=actor_id)
    return {"status": "deleted", "task_id": str(task_id)}


@router.get(
    "/tasks/{task_id}",
    response_model=TaskResponse,
)
def get_task(
    task_id: UUID,
    service: TaskService = Depends(get_task_service),
    actor_id: UUID = Depends(get_actor_id),
) -> TaskResponse:
    return TaskResponse.model_validate(service.get_task(task_id, actor_id=actor_id))


@router.patch(
    "/tasks/{task_id}",
    response_model=TaskResponse,
)
def update_task(
    task_id: UUID,
    payload: TaskUpdate,
    service: TaskService = Depends(get_task_service),
    actor_id: UUID = Depends(get_actor_id),
) -> TaskResponse:
    return TaskResponse.model_validate(service.update_task(task_id, payload, actor_id=actor_id))
