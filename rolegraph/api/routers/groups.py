"""Group lifecycle endpoints."""

from __future__ import annotations

from typing import Optional
from uuid import UUID

from fastapi import APIRouter, Depends, Query, status

from rolegraph.api.dependencies import get_actor_id, get_group_service
from rolegraph.schemas.group import (
    GroupCreate,
    GroupResponse,
    GroupUpdate,
    JoinedGroupResponse,
    UserGroupsResponse,
)
from rolegraph.services.groups import GroupService

router = APIRouter()


@router.post(
    "",
    response_model=GroupResponse,
    status_code=status.HTTP_201_CREATED,
)
def create_group(
    payload: GroupCreate,
    service: GroupService = Depends(get_group_service),
    actor_id: UUID = Depends(get_actor_id),
) -> GroupResponse:
    group = service.create_group(payload, actor_id=actor_id)
    return GroupResponse.model_validate(group)


@router.get(
    "",
    response_model=UserGroupsResponse,
)
def list_user_groups(
    user_id: Optional[UUID] = Query(default=None),
    service: GroupService = Depends(get_group_service),
    actor_id: UUID = Depends(get_actor_id),
) -> UserGroupsResponse:
    groups = service.list_user_groups(user_id or actor_id)
    return UserGroupsResponse(
        created=[GroupResponse.model_validate(group) for group in groups.created],
        joined=[
            JoinedGroupResponse(
                **GroupResponse.model_validate(entry.group).model_dump(),
                my_role=entry.membership.role_template.name,
                can_delegate=entry.membership.can_delegate,
            )
            for entry in groups.joined
        ],
    )


@router.get(
    "/{group_id}",
    response_model=GroupResponse,
)
def get_group(
    group_id: UUID,
    service: GroupService = Depends(get_group_service),
    actor_id: UUID = Depends(get_actor_id),
) -> GroupResponse:
    return GroupResponse.model_validate(service.get_group(group_id, actor_id=actor_id))


@router.patch(
    "/{group_id}",
    response_model=GroupResponse,
)
def update_group(
    group_id: UUID,
    payload: GroupUpdate,
    service: GroupService = Depends(get_group_service),
    actor_id: UUID = Depends(get_actor_id),
) -> GroupResponse:
    group = service.update_group(group_id, payload, actor_id=actor_id)
    return GroupResponse.model_validate(group)


@router.delete(
    "/{group_id}",
    status_code=status.HTTP_200_OK,
)
def delete_group(
    group_id: UUID,
    service: GroupService = Depends(get_group_service),
    actor_id: UUID = Depends(get_actor_id),
) -> dict[str, str]:
    service.delete_group(group_id, actor_id=actor_id)
    return {"status": "deleted", "group_id": str(group_id)}
