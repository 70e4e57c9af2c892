"""Appointment graph endpoints, scoped to one group."""

from __future__ import annotations

from typing import List
from uuid import UUID

from fastapi import APIRouter, Depends, status

from rolegraph.api.dependencies import (
    get_actor_id,
    get_appointment_service,
    get_authorization_service,
    require_group_member,
)
from rolegraph.schemas.appointment import AppointmentResponse, AppointmentSet
from rolegraph.services.appointments import AppointmentService
from rolegraph.services.authorization import AuthorizationService

router = APIRouter()


@router.put(
    "",
    response_model=AppointmentResponse,
)
def set_appointment(
    group_id: UUID,
    payload: AppointmentSet,
    service: AppointmentService = Depends(get_appointment_service),
    authorization: AuthorizationService = Depends(get_authorization_service),
    actor_id: UUID = Depends(get_actor_id),
) -> AppointmentResponse:
    authorization.require_appointment_authority(group_id, actor_id, payload.from_role_id)
    appointment = service.set_appointment(payload.from_role_id, payload.to_role_id, payload.can_delegate)
    return AppointmentResponse.model_validate(appointment)


@router.get(
    "",
    response_model=List[AppointmentResponse],
    dependencies=[Depends(require_group_member)],
)
def list_appointments(
    group_id: UUID,
    service: AppointmentService = Depends(get_appointment_service),
) -> List[AppointmentResponse]:
    return [AppointmentResponse.model_validate(edge) for edge in service.list_group_appointments(group_id)]


@router.delete(
    "/{from_role_id}/{to_role_id}",
    status_code=status.HTTP_200_OK,
)
def remove_appointment(
    group_id: UUID,
    from_role_id: UUID,
    to_role_id: UUID,
    service: AppointmentService = Depends(get_appointment_service),
    authorization: AuthorizationService = Depends(get_authorization_service),
    actor_id: UUID = Depends(get_actor_id),
) -> dict[str, str]:
    authorization.require_appointment_authority(group_id, actor_id, from_role_id)
    service.remove_appointment(from_role_id, to_role_id)
    return {"status": "removed", "from_role_id": str(from_role_id), "to_role_id": str(to_role_id)}
