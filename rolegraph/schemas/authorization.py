"""Authorization query schemas."""

from __future__ import annotations

from typing import List
from uuid import UUID

from pydantic import BaseModel

from rolegraph.models.permission import Permission


class UserPermissionsResponse(BaseModel):
    group_id: UUID
    user_id: UUID
    is_member: bool
    is_creator: bool
    can_delegate: bool
    permissions: List[Permission]


class PermissionCheckResponse(BaseModel):
    permission: Permission
    granted: bool
