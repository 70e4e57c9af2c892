"""Appointment graph schemas."""

from __future__ import annotations

from typing import Optional
from uuid import UUID

from pydantic import BaseModel, ConfigDict, Field

from rolegraph.schemas.role import RoleSummary


class AppointmentSet(BaseModel):
    from_role_id: UUID
    to_role_id: UUID
    can_delegate: bool = False


class AppointmentResponse(BaseModel):
    from_role_id: UUID
    to_role_id: UUID
    can_delegate: bool
    from_role: RoleSummary
    to_role: RoleSummary

    model_config = ConfigDict(from_attributes=True)


class AppointableRoleResponse(BaseModel):
    id: UUID
    name: str
    description: Optional[str] = None
    level: int
    can_delegate: bool


class AppointmentCheckResponse(BaseModel):
    can_appoint: bool = Field(..., description="An edge exists from the member's role to the target role.")
    can_delegate: bool
