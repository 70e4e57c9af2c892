"""Invitation endpoints."""

from __future__ import annotations

from typing import List
from uuid import UUID

from fastapi import APIRouter, Depends, status

from rolegraph.api.dependencies import get_actor_id, get_invitation_service
from rolegraph.schemas.invitation import (
    InvitationAcceptResponse,
    InvitationCreate,
    InvitationResponse,
    InvitationUpdate,
)
from rolegraph.services.invitations import InvitationService

router = APIRouter()


@router.post(
    "/groups/{group_id}/invitations",
    response_model=InvitationResponse,
    status_code=status.HTTP_201_CREATED,
)
def create_invitation(
    group_id: UUID,
    payload: InvitationCreate,
    service: InvitationService = Depends(get_invitation_service),
    actor_id: UUID = Depends(get_actor_id),
) -> InvitationResponse:
    invitation = service.create_invitation(group_id, payload, actor_id=actor_id)
    return InvitationResponse.model_validate(invitation)


@router.get(
    "/groups/{group_id}/invitations",
    response_model=List[InvitationResponse],
)
def list_invitations(
    group_id: UUID,
    service: InvitationService = Depends(get_invitation_service),
    actor_id: UUID = Depends(get_actor_id),
) -> List[InvitationResponse]:
    invitations = service.list_invitations(group_id, actor_id=actor_id)
    return [InvitationResponse.model_validate(invitation) for invitation in invitations]


@router.patch(
    "/invitations/{invitation_id}",
    response_model=InvitationResponse,
)
def update_invitation(
    invitation_id: UUID,
    payload: InvitationUpdate,
    service: InvitationService = Depends(get_invitation_service),
    actor_id: UUID = Depends(get_actor_id),
) -> InvitationResponse:
    invitation = service.update_invitation(invitation_id, payload, actor_id=actor_id)
    return InvitationResponse.model_validate(invitation)


@router.delete(
    "/invitations/{invitation_id}",
    status_code=status.HTTP_200_OK,
)
def delete_invitation(
    invitation_id: UUID,
    service: InvitationService = Depends(get_invitation_service),
    actor_id: UUID = Depends(get_actor_id),
) -> dict[str, str]:
    service.delete_invitation(invitation_id, actor_id=actor_id)
    return {"status": "deleted", "invitation_id": str(invitation_id)}


@router.post(
    "/invitations/{code}/accept",
    response_model=InvitationAcceptResponse,
)
def accept_invitation(
    code: str,
    service: InvitationService = Depends(get_invitation_service),
    actor_id: UUID = Depends(get_actor_id),
) -> InvitationAcceptResponse:
    accepted = service.accept_invitation(code, user_id=actor_id)
    return InvitationAcceptResponse(
        group_id=accepted.group.id,
        group_name=accepted.group.name,
        role_name=accepted.role.name,
        member_id=accepted.member.id,
    )
