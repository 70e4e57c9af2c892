"""Group schemas."""

from __future__ import annotations

from datetime import datetime
from typing import List, Optional
from uuid import UUID

from pydantic import BaseModel, ConfigDict, Field

from rolegraph.models.group import GroupType


class GroupBase(BaseModel):
    name: str = Field(..., min_length=1, max_length=120)
    description: Optional[str] = Field(default=None, max_length=1024)
    type: GroupType = GroupType.OTHER


class GroupCreate(GroupBase):
    max_members: Optional[int] = Field(default=None, ge=1)


class GroupUpdate(BaseModel):
    name: Optional[str] = Field(default=None, min_length=1, max_length=120)
    description: Optional[str] = Field(default=None, max_length=1024)
    type: Optional[GroupType] = None
    max_members: Optional[int] = Field(default=None, ge=1)


class GroupResponse(GroupBase):
    id: UUID
    creator_id: UUID
    max_members: int
    created_at: datetime
    updated_at: datetime

    model_config = ConfigDict(from_attributes=True)


class JoinedGroupResponse(GroupResponse):
    my_role: str
    can_delegate: bool


class UserGroupsResponse(BaseModel):
    created: List[GroupResponse]
    joined: List[JoinedGroupResponse]
