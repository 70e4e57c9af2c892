"""Role template schemas."""

from __future__ import annotations

from datetime import datetime
from typing import List, Optional
from uuid import UUID

from pydantic import BaseModel, ConfigDict, Field

from rolegraph.models.permission import Permission


class RoleTemplateBase(BaseModel):
    name: str = Field(..., min_length=1, max_length=120)
    description: Optional[str] = Field(default=None, max_length=512)
    level: int = Field(default=0, ge=0, description="Lower level means more authority.")


class RoleTemplateCreate(RoleTemplateBase):
    permissions: List[Permission] = Field(default_factory=list)


class RoleTemplateUpdate(BaseModel):
    name: Optional[str] = Field(default=None, min_length=1, max_length=120)
    description: Optional[str] = Field(default=None, max_length=512)
    level: Optional[int] = Field(default=None, ge=0)
    is_active: Optional[bool] = None


class PermissionGrant(BaseModel):
    permission: Permission


class RoleTemplateResponse(RoleTemplateBase):
    id: UUID
    group_id: UUID
    is_system: bool
    is_active: bool
    permissions: List[Permission]
    member_count: int
    created_at: datetime
    updated_at: datetime

    model_config = ConfigDict(from_attributes=True)


class RoleSummary(BaseModel):
    id: UUID
    name: str
    level: int

    model_config = ConfigDict(from_attributes=True)
