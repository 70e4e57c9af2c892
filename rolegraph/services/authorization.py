"""Authorization evaluation service."""

from __future__ import annotations

import logging
from typing import FrozenSet, Optional
from uuid import UUID

from sqlalchemy import select
from sqlalchemy.orm import Session, joinedload

from rolegraph.models.group import Group
from rolegraph.models.group_member import GroupMember
from rolegraph.models.permission import Permission
from rolegraph.models.role_template import RoleTemplate
from rolegraph.services.errors import ForbiddenError, GroupNotFoundError
from rolegraph.services.roles import RoleNotFoundError


class NotGroupMemberError(ForbiddenError):
    """Raised when the caller is not a member of the group."""


class PermissionDeniedError(ForbiddenError):
    """Raised when the caller's role lacks the required permission."""


class CreatorOnlyError(ForbiddenError):
    """Raised when an operation is reserved for the group creator."""


class DelegationDeniedError(ForbiddenError):
    """Raised when the caller may not edit the appointment graph."""


class RoleRankError(ForbiddenError):
    """Raised when a role admin targets a role at or above their own level."""


class AuthorizationService:
    """Answers permission questions about group members.

    The predicates (``has_permission`` and friends) never raise for missing
    rows; they answer ``False``. The ``require_*`` guards raise
    ``ForbiddenError`` subclasses and are what group operations call before
    mutating state.
    """

    def __init__(self, session: Session) -> None:
        self._session = session
        self._logger = logging.getLogger("rolegraph.services.authorization")

    def has_permission(self, member_id: UUID, permission: Permission) -> bool:
        member = self._session.get(GroupMember, member_id)
        if member is None:
            return False
        return permission in member.role_template.permissions

    def has_permission_in_group(self, group_id: UUID, user_id: UUID, permission: Permission) -> bool:
        return permission in self.get_user_permissions(group_id, user_id)

    def get_user_permissions(self, group_id: UUID, user_id: UUID) -> FrozenSet[Permission]:
        member = self.get_member(group_id, user_id)
        if member is None:
            return frozenset()
        return member.role_template.permissions

    def is_group_creator(self, group_id: UUID, user_id: UUID) -> bool:
        creator_id = self._session.scalar(select(Group.creator_id).where(Group.id == group_id))
        return creator_id is not None and creator_id == user_id

    def is_group_member(self, group_id: UUID, user_id: UUID) -> bool:
        return self.get_member(group_id, user_id) is not None

    def can_delegate(self, member_id: UUID) -> bool:
        # Snapshot taken at the member's last appointment; not recomputed.
        member = self._session.get(GroupMember, member_id)
        return bool(member and member.can_delegate)

    def get_member(self, group_id: UUID, user_id: UUID) -> Optional[GroupMember]:
        stmt = (
            select(GroupMember)
            .where(GroupMember.group_id == group_id, GroupMember.user_id == user_id)
            .options(joinedload(GroupMember.role_template))
        )
        return self._session.scalar(stmt)

    def require_group(self, group_id: UUID) -> Group:
        group = self._session.get(Group, group_id)
        if group is None:
            raise GroupNotFoundError(f"Group {group_id} not found")
        return group

    def require_member(self, group_id: UUID, user_id: UUID) -> GroupMember:
        member = self.get_member(group_id, user_id)
        if member is None:
            self._deny("not_member", group_id, user_id)
            raise NotGroupMemberError(f"User {user_id} is not a member of group {group_id}")
        return member

    def require_creator(self, group_id: UUID, user_id: UUID) -> Group:
        group = self.require_group(group_id)
        if group.creator_id != user_id:
            self._deny("not_creator", group_id, user_id)
            raise CreatorOnlyError("Only the group creator can perform this action")
        return group

    def require_permission(self, group_id: UUID, user_id: UUID, permission: Permission) -> GroupMember:
        """Return the caller's membership if it grants ``permission``.

        The group creator passes regardless of what their role holds.
        """

        group = self.require_group(group_id)
        member = self.require_member(group_id, user_id)
        if group.creator_id == user_id:
            return member
        if permission not in member.role_template.permissions:
            self._deny("missing_permission", group_id, user_id, permission=permission.value)
            raise PermissionDeniedError(f"Missing permission {permission.value} in group {group_id}")
        return member

    def require_appointment_authority(self, group_id: UUID, user_id: UUID, from_role_id: UUID) -> GroupMember:
        """Guard edits to edges leaving ``from_role_id``.

        Besides the creator, only members holding DELEGATE_APPOINTMENT whose
        cached delegation flag is set may edit edges, and only edges leaving
        their own role or a role below it.
        """

        group = self.require_group(group_id)
        member = self.require_member(group_id, user_id)
        is_creator = group.creator_id == user_id
        if not is_creator and (
            Permission.DELEGATE_APPOINTMENT not in member.role_template.permissions or not member.can_delegate
        ):
            self._deny("cannot_delegate", group_id, user_id)
            raise DelegationDeniedError("You are not allowed to manage appointments in this group")

        from_role = self._session.get(RoleTemplate, from_role_id)
        if from_role is None or from_role.group_id != group_id:
            raise RoleNotFoundError(f"Role {from_role_id} not found")
        if is_creator:
            return member
        if from_role.id != member.role_template_id and from_role.level <= member.role_template.level:
            self._deny("role_above_actor", group_id, user_id, from_role_id=str(from_role_id))
            raise DelegationDeniedError(f"Role '{from_role.name}' is not below your own role")
        return member

    def require_role_authority(
        self,
        group_id: UUID,
        user_id: UUID,
        *,
        role_id: Optional[UUID] = None,
        level: Optional[int] = None,
    ) -> GroupMember:
        """Guard role template edits.

        Besides CREATE_ROLE, a non-creator may only touch roles strictly below
        their own (which excludes the role they hold) and may only create or
        move a role to a level below theirs.
        """

        group = self.require_group(group_id)
        member = self.require_permission(group_id, user_id, Permission.CREATE_ROLE)
        if group.creator_id == user_id:
            return member

        own_level = member.role_template.level
        if role_id is not None:
            role = self._session.get(RoleTemplate, role_id)
            if role is None or role.group_id != group_id:
                raise RoleNotFoundError(f"Role {role_id} not found")
            if role.level <= own_level:
                self._deny("role_above_actor", group_id, user_id, role_id=str(role_id))
                raise RoleRankError(f"Role '{role.name}' is not below your own role")
        if level is not None and level <= own_level:
            self._deny("level_above_actor", group_id, user_id, level=str(level))
            raise RoleRankError(f"Level {level} is not below your own level {own_level}")
        return member

    def _deny(self, reason: str, group_id: UUID, user_id: UUID, **details: str) -> None:
        self._logger.info(
            "authorization_denied",
            extra={"reason": reason, "group_id": str(group_id), "user_id": str(user_id), **details},
        )
