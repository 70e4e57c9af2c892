"""Pydantic schemas for API payloads."""

from rolegraph.schemas.appointment import (
    AppointableRoleResponse,
    AppointmentCheckResponse,
    AppointmentResponse,
    AppointmentSet,
)
from rolegraph.schemas.authorization import PermissionCheckResponse, UserPermissionsResponse
from rolegraph.schemas.group import GroupCreate, GroupResponse, GroupUpdate, UserGroupsResponse
from rolegraph.schemas.invitation import InvitationCreate, InvitationResponse, InvitationUpdate
from rolegraph.schemas.member import MemberAdd, MemberAppoint, MemberResponse, MemberRoleChange
from rolegraph.schemas.role import (
    PermissionGrant,
    RoleSummary,
    RoleTemplateCreate,
    RoleTemplateResponse,
    RoleTemplateUpdate,
)
from rolegraph.schemas.task import TaskCreate, TaskResponse, TaskUpdate

__all__ = [
    "AppointableRoleResponse",
    "AppointmentCheckResponse",
    "AppointmentResponse",
    "AppointmentSet",
    "GroupCreate",
    "GroupResponse",
    "GroupUpdate",
    "InvitationCreate",
    "InvitationResponse",
    "InvitationUpdate",
    "MemberAdd",
    "MemberAppoint",
    "MemberResponse",
    "MemberRoleChange",
    "PermissionCheckResponse",
    "PermissionGrant",
    "RoleSummary",
    "RoleTemplateCreate",
    "RoleTemplateResponse",
    "RoleTemplateUpdate",
    "TaskCreate",
    "TaskResponse",
    "TaskUpdate",
    "UserGroupsResponse",
    "UserPermissionsResponse",
]
