"""Group membership endpoints."""

from __future__ import annotations

from typing import List
from uuid import UUID

from fastapi import APIRouter, Depends, status

from rolegraph.api.dependencies import get_actor_id, get_membership_service
from rolegraph.schemas.member import MemberAdd, MemberAppoint, MemberResponse, MemberRoleChange
from rolegraph.services.members import MembershipService

router = APIRouter()


@router.get(
    "/{group_id}/members",
    response_model=List[MemberResponse],
)
def list_members(
    group_id: UUID,
    service: MembershipService = Depends(get_membership_service),
    actor_id: UUID = Depends(get_actor_id),
) -> List[MemberResponse]:
    members = service.list_members(group_id, actor_id=actor_id)
    return [MemberResponse.model_validate(member) for member in members]


@router.post(
    "/{group_id}/members",
    response_model=MemberResponse,
    status_code=status.HTTP_201_CREATED,
)
def add_member(
    group_id: UUID,
    payload: MemberAdd,
    service: MembershipService = Depends(get_membership_service),
    actor_id: UUID = Depends(get_actor_id),
) -> MemberResponse:
    member = service.add_member(
        group_id,
        payload.user_id,
        actor_id=actor_id,
        role_template_id=payload.role_template_id,
    )
    return MemberResponse.model_validate(member)


@router.post(
    "/{group_id}/members/appoint",
    response_model=MemberResponse,
)
def appoint_member(
    group_id: UUID,
    payload: MemberAppoint,
    service: MembershipService = Depends(get_membership_service),
    actor_id: UUID = Depends(get_actor_id),
) -> MemberResponse:
    member = service.appoint_member(group_id, payload.user_id, payload.role_template_id, actor_id=actor_id)
    return MemberResponse.model_validate(member)


@router.patch(
    "/{group_id}/members/{member_id}",
    response_model=MemberResponse,
)
def change_member_role(
    group_id: UUID,
    member_id: UUID,
    payload: MemberRoleChange,
    service: MembershipService = Depends(get_membership_service),
    actor_id: UUID = Depends(get_actor_id),
) -> MemberResponse:
    member = service.change_member_role(group_id, member_id, payload.role_template_id, actor_id=actor_id)
    return MemberResponse.model_validate(member)


@router.delete(
    "/{group_id}/members/{member_id}",
    status_code=status.HTTP_200_OK,
)
def remove_member(
    group_id: UUID,
    member_id: UUID,
    service: MembershipService = Depends(get_membership_service),
    actor_id: UUID = Depends(get_actor_id),
) -> dict[str, str]:
    service.remove_member(group_id, member_id, actor_id=actor_id)
    return {"status": "removed", "member_id": str(member_id)}


@router.post(
    "/{group_id}/leave",
    status_code=status.HTTP_200_OK,
)
def leave_group(
    group_id: UUID,
    service: MembershipService = Depends(get_membership_service),
    actor_id: UUID = Depends(get_actor_id),
) -> dict[str, str]:
    service.leave_group(group_id, user_id=actor_id)
    return {"status": "left", "group_id": str(group_id)}
