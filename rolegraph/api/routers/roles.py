"""Role template endpoints, scoped to one group."""

from __future__ import annotations

from typing import List
from uuid import UUID

from fastapi import APIRouter, Depends, status

from rolegraph.api.dependencies import (
    get_actor_id,
    get_appointment_service,
    get_authorization_service,
    get_role_service,
    require_group_member,
)
from rolegraph.models.permission import Permission
from rolegraph.schemas.appointment import AppointableRoleResponse
from rolegraph.schemas.role import (
    PermissionGrant,
    RoleTemplateCreate,
    RoleTemplateResponse,
    RoleTemplateUpdate,
)
from rolegraph.services.appointments import AppointmentService
from rolegraph.services.authorization import AuthorizationService
from rolegraph.services.roles import RoleTemplateService, RoleView

router = APIRouter()


@router.post(
    "",
    response_model=RoleTemplateResponse,
    status_code=status.HTTP_201_CREATED,
)
def create_role(
    group_id: UUID,
    payload: RoleTemplateCreate,
    service: RoleTemplateService = Depends(get_role_service),
    authorization: AuthorizationService = Depends(get_authorization_service),
    actor_id: UUID = Depends(get_actor_id),
) -> RoleTemplateResponse:
    authorization.require_role_authority(group_id, actor_id, level=payload.level)
    return _to_role_response(service.create_role(group_id, payload))


@router.get(
    "",
    response_model=List[RoleTemplateResponse],
    dependencies=[Depends(require_group_member)],
)
def list_roles(
    group_id: UUID,
    service: RoleTemplateService = Depends(get_role_service),
) -> List[RoleTemplateResponse]:
    return [_to_role_response(view) for view in service.list_group_roles(group_id)]


@router.get(
    "/{role_id}",
    response_model=RoleTemplateResponse,
    dependencies=[Depends(require_group_member)],
)
def get_role(
    group_id: UUID,
    role_id: UUID,
    service: RoleTemplateService = Depends(get_role_service),
) -> RoleTemplateResponse:
    return _to_role_response(service.get_role(role_id, group_id=group_id))


@router.patch(
    "/{role_id}",
    response_model=RoleTemplateResponse,
)
def update_role(
    group_id: UUID,
    role_id: UUID,
    payload: RoleTemplateUpdate,
    service: RoleTemplateService = Depends(get_role_service),
    authorization: AuthorizationService = Depends(get_authorization_service),
    actor_id: UUID = Depends(get_actor_id),
) -> RoleTemplateResponse:
    authorization.require_role_authority(group_id, actor_id, role_id=role_id, level=payload.level)
    return _to_role_response(service.update_role(role_id, payload, group_id=group_id))


@router.delete(
    "/{role_id}",
    status_code=status.HTTP_200_OK,
)
def delete_role(
    group_id: UUID,
    role_id: UUID,
    service: RoleTemplateService = Depends(get_role_service),
    authorization: AuthorizationService = Depends(get_authorization_service),
    actor_id: UUID = Depends(get_actor_id),
) -> dict[str, str]:
    authorization.require_role_authority(group_id, actor_id, role_id=role_id)
    service.delete_role(role_id, group_id=group_id)
    return {"status": "deleted", "role_id": str(role_id)}


@router.post(
    "/{role_id}/permissions",
    response_model=RoleTemplateResponse,
    status_code=status.HTTP_201_CREATED,
)
def add_permission(
    group_id: UUID,
    role_id: UUID,
    payload: PermissionGrant,
    service: RoleTemplateService = Depends(get_role_service),
    authorization: AuthorizationService = Depends(get_authorization_service),
    actor_id: UUID = Depends(get_actor_id),
) -> RoleTemplateResponse:
    authorization.require_role_authority(group_id, actor_id, role_id=role_id)
    return _to_role_response(service.add_permission(role_id, payload.permission, group_id=group_id))


@router.delete(
    "/{role_id}/permissions/{permission}",
    response_model=RoleTemplateResponse,
)
def remove_permission(
    group_id: UUID,
    role_id: UUID,
    permission: Permission,
    service: RoleTemplateService = Depends(get_role_service),
    authorization: AuthorizationService = Depends(get_authorization_service),
    actor_id: UUID = Depends(get_actor_id),
) -> RoleTemplateResponse:
    authorization.require_role_authority(group_id, actor_id, role_id=role_id)
    return _to_role_response(service.remove_permission(role_id, permission, group_id=group_id))


@router.get(
    "/{role_id}/appointable",
    response_model=List[AppointableRoleResponse],
    dependencies=[Depends(require_group_member)],
)
def list_appointable_roles(
    group_id: UUID,
    role_id: UUID,
    roles: RoleTemplateService = Depends(get_role_service),
    appointments: AppointmentService = Depends(get_appointment_service),
) -> List[AppointableRoleResponse]:
    roles.get_role(role_id, group_id=group_id)
    return [
        AppointableRoleResponse(
            id=entry.role.id,
            name=entry.role.name,
            description=entry.role.description,
            level=entry.role.level,
            can_delegate=entry.can_delegate,
        )
        for entry in appointments.list_appointable_roles(role_id)
    ]


def _to_role_response(view: RoleView) -> RoleTemplateResponse:
    role = view.role
    return RoleTemplateResponse(
        id=role.id,
        group_id=role.group_id,
        name=role.name,
        description=role.description,
        level=role.level,
        is_system=role.is_system,
        is_active=role.is_active,
        permissions=view.permissions,
        member_count=view.member_count,
        created_at=role.created_at,
        updated_at=role.updated_at,
    )
