"""Group membership schemas."""

from __future__ import annotations

from datetime import datetime
from typing import Optional
from uuid import UUID

from pydantic import BaseModel, ConfigDict

from rolegraph.schemas.role import RoleSummary


class MemberAdd(BaseModel):
    user_id: UUID
    role_template_id: Optional[UUID] = None


class MemberAppoint(BaseModel):
    user_id: UUID
    role_template_id: UUID


class MemberRoleChange(BaseModel):
    role_template_id: UUID


class MemberResponse(BaseModel):
    id: UUID
    group_id: UUID
    user_id: UUID
    role_template_id: UUID
    can_delegate: bool
    joined_at: datetime
    role_template: RoleSummary

    model_config = ConfigDict(from_attributes=True)
