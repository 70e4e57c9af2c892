"""Authorization query endpoints."""

from __future__ import annotations

from typing import Optional
from uuid import UUID

from fastapi import APIRouter, Depends, Query

from rolegraph.api.dependencies import (
    get_appointment_service,
    get_authorization_service,
    require_group_member,
)
from rolegraph.models.permission import Permission
from rolegraph.schemas.appointment import AppointmentCheckResponse
from rolegraph.schemas.authorization import PermissionCheckResponse, UserPermissionsResponse
from rolegraph.services.appointments import AppointmentService
from rolegraph.services.authorization import AuthorizationService

router = APIRouter()


@router.get(
    "/permissions",
    response_model=UserPermissionsResponse,
)
def get_user_permissions(
    group_id: UUID,
    user_id: Optional[UUID] = Query(default=None),
    actor_id: UUID = Depends(require_group_member),
    service: AuthorizationService = Depends(get_authorization_service),
) -> UserPermissionsResponse:
    subject = user_id or actor_id
    member = service.get_member(group_id, subject)
    held = service.get_user_permissions(group_id, subject)
    return UserPermissionsResponse(
        group_id=group_id,
        user_id=subject,
        is_member=member is not None,
        is_creator=service.is_group_creator(group_id, subject),
        can_delegate=service.can_delegate(member.id) if member else False,
        permissions=[permission for permission in Permission if permission in held],
    )


@router.get(
    "/permissions/{permission}",
    response_model=PermissionCheckResponse,
)
def check_permission(
    group_id: UUID,
    permission: Permission,
    user_id: Optional[UUID] = Query(default=None),
    actor_id: UUID = Depends(require_group_member),
    service: AuthorizationService = Depends(get_authorization_service),
) -> PermissionCheckResponse:
    granted = service.has_permission_in_group(group_id, user_id or actor_id, permission)
    return PermissionCheckResponse(permission=permission, granted=granted)


@router.get(
    "/can-appoint",
    response_model=AppointmentCheckResponse,
    dependencies=[Depends(require_group_member)],
)
def can_appoint(
    group_id: UUID,
    member_id: UUID = Query(...),
    role_id: UUID = Query(...),
    service: AppointmentService = Depends(get_appointment_service),
) -> AppointmentCheckResponse:
    check = service.can_appoint(member_id, role_id)
    return AppointmentCheckResponse(can_appoint=check.can_appoint, can_delegate=check.can_delegate)
