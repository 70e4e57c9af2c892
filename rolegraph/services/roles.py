"""Role template store: per-group role definitions and their permission sets."""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import List, Optional
from uuid import UUID

from sqlalchemy import func, select
from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from rolegraph.models.group import Group
from rolegraph.models.group_member import GroupMember
from rolegraph.models.permission import Permission, normalize_permissions
from rolegraph.models.role_permission import RolePermission
from rolegraph.models.role_template import RoleTemplate
from rolegraph.schemas.role import RoleTemplateCreate, RoleTemplateUpdate
from rolegraph.services.errors import ConflictError, ForbiddenError, GroupNotFoundError, NotFoundError


class RoleNotFoundError(NotFoundError):
    """Raised when a role template cannot be found."""


class RoleConflictError(ConflictError):
    """Raised when a role name is already taken within its group."""


class RoleInUseError(ConflictError):
    """Raised when deleting a role that members still hold."""


class RoleLevelConflictError(ConflictError):
    """Raised when a level change would break an existing appointment edge."""


class SystemRoleError(ForbiddenError):
    """Raised when attempting to modify or delete a system role."""


class PermissionAlreadyGrantedError(ConflictError):
    """Raised when a role already holds the permission."""


class PermissionNotGrantedError(NotFoundError):
    """Raised when removing a permission the role does not hold."""


@dataclass(frozen=True)
class RoleView:
    """A role together with the number of members currently holding it."""

    role: RoleTemplate
    member_count: int

    @property
    def permissions(self) -> List[Permission]:
        held = self.role.permissions
        return [permission for permission in Permission if permission in held]


class RoleTemplateService:
    """CRUD over group role templates."""

    def __init__(self, session: Session) -> None:
        self._session = session
        self._logger = logging.getLogger("rolegraph.services.roles")

    def create_role(self, group_id: UUID, payload: RoleTemplateCreate, *, is_system: bool = False) -> RoleView:
        if self._session.get(Group, group_id) is None:
            raise GroupNotFoundError(f"Group {group_id} not found")
        if self._find_by_name(group_id, payload.name) is not None:
            raise RoleConflictError(f"Role '{payload.name}' already exists in group {group_id}")

        role = RoleTemplate(
            group_id=group_id,
            name=payload.name,
            description=payload.description,
            level=payload.level,
            is_system=is_system,
            is_active=True,
        )
        role.permission_links = [
            RolePermission(permission=permission) for permission in normalize_permissions(payload.permissions)
        ]
        self._session.add(role)
        try:
            self._session.flush()
        except IntegrityError as exc:
            self._session.rollback()
            raise RoleConflictError(f"Role '{payload.name}' already exists in group {group_id}") from exc

        self._logger.info(
            "role_created",
            extra={"role_id": str(role.id), "group_id": str(group_id), "level": role.level, "is_system": is_system},
        )
        return RoleView(role=role, member_count=0)

    def get_role(self, role_id: UUID, *, group_id: Optional[UUID] = None) -> RoleView:
        role = self._get_role(role_id, group_id=group_id)
        return RoleView(role=role, member_count=self._count_members(role.id))

    def list_group_roles(self, group_id: UUID) -> List[RoleView]:
        member_count = (
            select(func.count(GroupMember.id))
            .where(GroupMember.role_template_id == RoleTemplate.id)
            .correlate(RoleTemplate)
            .scalar_subquery()
        )
        stmt = (
            select(RoleTemplate, member_count)
            .where(RoleTemplate.group_id == group_id, RoleTemplate.is_active.is_(True))
            .order_by(RoleTemplate.level.asc(), RoleTemplate.name.asc())
        )
        return [RoleView(role=role, member_count=count) for role, count in self._session.execute(stmt).all()]

    def update_role(self, role_id: UUID, payload: RoleTemplateUpdate, *, group_id: Optional[UUID] = None) -> RoleView:
        role = self._get_role(role_id, group_id=group_id)
        if role.is_system:
            raise SystemRoleError(f"System role '{role.name}' cannot be modified")

        updates = payload.model_dump(exclude_unset=True)
        if updates.get("name") is not None and updates["name"] != role.name:
            if self._find_by_name(role.group_id, updates["name"]) is not None:
                raise RoleConflictError(f"Role '{updates['name']}' already exists in group {role.group_id}")
            role.name = updates["name"]
        if "description" in updates:
            role.description = updates["description"]
        if updates.get("level") is not None and updates["level"] != role.level:
            self._ensure_level_keeps_edges_descending(role, updates["level"])
            role.level = updates["level"]
        if updates.get("is_active") is not None:
            role.is_active = updates["is_active"]

        try:
            self._session.flush()
        except IntegrityError as exc:
            self._session.rollback()
            raise RoleConflictError(f"Role '{updates.get('name')}' already exists") from exc

        self._logger.info("role_updated", extra={"role_id": str(role.id), "changes": sorted(updates)})
        return RoleView(role=role, member_count=self._count_members(role.id))

    def delete_role(self, role_id: UUID, *, group_id: Optional[UUID] = None) -> None:
        """Delete a custom role along with its permission and appointment edges."""

        role = self._get_role(role_id, group_id=group_id)
        if role.is_system:
            raise SystemRoleError(f"System role '{role.name}' cannot be deleted")
        members = self._count_members(role.id)
        if members > 0:
            raise RoleInUseError(f"Role '{role.name}' is still held by {members} member(s)")

        # The relationship cascades remove outbound/inbound appointment edges
        # and permission rows in the same flush.
        self._session.delete(role)
        try:
            self._session.flush()
        except IntegrityError as exc:
            self._session.rollback()
            raise RoleInUseError(f"Role {role_id} gained members while being deleted") from exc

        self._logger.info("role_deleted", extra={"role_id": str(role_id)})

    def add_permission(self, role_id: UUID, permission: Permission, *, group_id: Optional[UUID] = None) -> RoleView:
        role = self._get_role(role_id, group_id=group_id)
        if permission in role.permissions:
            raise PermissionAlreadyGrantedError(f"Role '{role.name}' already holds {permission.value}")

        role.permission_links.append(RolePermission(permission=permission))
        try:
            self._session.flush()
        except IntegrityError as exc:
            self._session.rollback()
            raise PermissionAlreadyGrantedError(f"Role {role_id} already holds {permission.value}") from exc

        self._logger.info("role_permission_added", extra={"role_id": str(role.id), "permission": permission.value})
        return RoleView(role=role, member_count=self._count_members(role.id))

    def remove_permission(self, role_id: UUID, permission: Permission, *, group_id: Optional[UUID] = None) -> RoleView:
        role = self._get_role(role_id, group_id=group_id)
        link = next((link for link in role.permission_links if link.permission == permission), None)
        if link is None:
            raise PermissionNotGrantedError(f"Role '{role.name}' does not hold {permission.value}")

        role.permission_links.remove(link)
        self._session.flush()

        self._logger.info("role_permission_removed", extra={"role_id": str(role.id), "permission": permission.value})
        return RoleView(role=role, member_count=self._count_members(role.id))

    def find_by_name(self, group_id: UUID, name: str) -> RoleTemplate:
        role = self._find_by_name(group_id, name)
        if role is None:
            raise RoleNotFoundError(f"Role '{name}' not found in group {group_id}")
        return role

    def _ensure_level_keeps_edges_descending(self, role: RoleTemplate, level: int) -> None:
        for edge in role.outbound_appointments:
            if level >= edge.to_role.level:
                raise RoleLevelConflictError(
                    f"Level {level} would not be above appointable role '{edge.to_role.name}' (level {edge.to_role.level})"
                )
        for edge in role.inbound_appointments:
            if edge.from_role.level >= level:
                raise RoleLevelConflictError(
                    f"Level {level} would not be below appointing role '{edge.from_role.name}' (level {edge.from_role.level})"
                )

    def _count_members(self, role_id: UUID) -> int:
        stmt = select(func.count(GroupMember.id)).where(GroupMember.role_template_id == role_id)
        return self._session.scalar(stmt) or 0

    def _find_by_name(self, group_id: UUID, name: str) -> Optional[RoleTemplate]:
        stmt = select(RoleTemplate).where(RoleTemplate.group_id == group_id, RoleTemplate.name == name)
        return self._session.scalar(stmt)

    def _get_role(self, role_id: UUID, *, group_id: Optional[UUID] = None) -> RoleTemplate:
        role = self._session.get(RoleTemplate, role_id)
        if not role or (group_id is not None and role.group_id != group_id):
            raise RoleNotFoundError(f"Role {role_id} not found")
        return role
