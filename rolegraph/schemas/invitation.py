"""Invitation schemas."""

from __future__ import annotations

from datetime import datetime, timezone
from typing import Optional
from uuid import UUID

from pydantic import BaseModel, ConfigDict, Field, field_validator


class InvitationCreate(BaseModel):
    max_uses: int = Field(default=1, ge=1)
    expires_at: Optional[datetime] = None
    default_role: Optional[str] = Field(
        default=None,
        max_length=120,
        description="Name of the role new members receive; defaults to the member role.",
    )

    @field_validator("expires_at")
    @classmethod
    def _ensure_utc(cls, value: Optional[datetime]) -> Optional[datetime]:
        if value is None:
            return None
        if value.tzinfo is None:
            return value.replace(tzinfo=timezone.utc)
        return value.astimezone(timezone.utc)


class InvitationUpdate(BaseModel):
    max_uses: Optional[int] = Field(default=None, ge=1)
    expires_at: Optional[datetime] = None
    is_active: Optional[bool] = None

    @field_validator("expires_at")
    @classmethod
    def _ensure_utc(cls, value: Optional[datetime]) -> Optional[datetime]:
        if value is None:
            return None
        if value.tzinfo is None:
            return value.replace(tzinfo=timezone.utc)
        return value.astimezone(timezone.utc)


class InvitationResponse(BaseModel):
    id: UUID
    group_id: UUID
    invited_by_id: UUID
    code: str
    max_uses: int
    used_count: int
    expires_at: Optional[datetime]
    is_active: bool
    default_role: str
    created_at: datetime

    model_config = ConfigDict(from_attributes=True)


class InvitationAcceptResponse(BaseModel):
    group_id: UUID
    group_name: str
    role_name: str
    member_id: UUID
