"""Group membership: direct adds, appointments, removal and leaving."""

from __future__ import annotations

import logging
from typing import List, Optional
from uuid import UUID

from sqlalchemy import case, func, select
from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session, joinedload

from rolegraph.core.config import AppSettings, get_settings
from rolegraph.models.group import Group
from rolegraph.models.group_member import GroupMember
from rolegraph.models.permission import Permission
from rolegraph.models.role_template import RoleTemplate
from rolegraph.services.appointments import AppointmentService
from rolegraph.services.authorization import AuthorizationService
from rolegraph.services.errors import ConflictError, ForbiddenError, NotFoundError
from rolegraph.services.roles import RoleNotFoundError, RoleTemplateService


class MemberNotFoundError(NotFoundError):
    """Raised when a membership cannot be found in the group."""


class MemberConflictError(ConflictError):
    """Raised when the user already belongs to the group."""


class GroupFullError(ConflictError):
    """Raised when the group already holds max_members members."""


class AppointmentDeniedError(ForbiddenError):
    """Raised when no appointment edge lets the appointer grant the role."""


class CreatorMembershipError(ForbiddenError):
    """Raised when an operation would change or end the creator's membership."""


class RoleOutrankedError(ForbiddenError):
    """Raised when acting on a role at or above the actor's own level."""


class MembershipService:
    def __init__(
        self,
        session: Session,
        authorization: Optional[AuthorizationService] = None,
        appointments: Optional[AppointmentService] = None,
        roles: Optional[RoleTemplateService] = None,
        settings: Optional[AppSettings] = None,
    ) -> None:
        self._session = session
        self._authorization = authorization or AuthorizationService(session)
        self._appointments = appointments or AppointmentService(session)
        self._roles = roles or RoleTemplateService(session)
        self._settings = settings or get_settings()
        self._logger = logging.getLogger("rolegraph.services.members")

    def list_members(self, group_id: UUID, *, actor_id: UUID) -> List[GroupMember]:
        group = self._authorization.require_group(group_id)
        self._authorization.require_member(group_id, actor_id)
        creator_first = case((GroupMember.user_id == group.creator_id, 0), else_=1)
        stmt = (
            select(GroupMember)
            .join(RoleTemplate, GroupMember.role_template_id == RoleTemplate.id)
            .where(GroupMember.group_id == group_id)
            .options(joinedload(GroupMember.role_template))
            .order_by(creator_first, RoleTemplate.level.asc(), GroupMember.joined_at.asc())
        )
        return list(self._session.scalars(stmt))

    def get_member(self, group_id: UUID, member_id: UUID) -> GroupMember:
        member = self._session.get(GroupMember, member_id)
        if member is None or member.group_id != group_id:
            raise MemberNotFoundError(f"Member {member_id} not found in group {group_id}")
        return member

    def add_member(
        self,
        group_id: UUID,
        user_id: UUID,
        *,
        actor_id: UUID,
        role_template_id: Optional[UUID] = None,
    ) -> GroupMember:
        """Add a user directly, bypassing the appointment graph.

        Direct adds never carry delegation rights. Without an explicit role the
        member system role is used; an explicit role must sit below the actor's
        own role unless the actor created the group.
        """

        operator = self._authorization.require_permission(group_id, actor_id, Permission.INVITE_MEMBERS)
        group = operator.group

        if self._authorization.get_member(group_id, user_id) is not None:
            raise MemberConflictError(f"User {user_id} is already a member of group {group_id}")

        if role_template_id is None:
            role = self._roles.find_by_name(group_id, self._settings.member_role_name)
        else:
            role = self._roles.get_role(role_template_id, group_id=group_id).role
            if group.creator_id != actor_id and role.level <= operator.role_template.level:
                raise RoleOutrankedError(f"Role '{role.name}' is not below your own role")

        member = self.create_member(group, user_id, role, can_delegate=False)
        self._logger.info(
            "member_added",
            extra={"group_id": str(group_id), "user_id": str(user_id), "role_id": str(role.id), "actor_id": str(actor_id)},
        )
        return member

    def appoint_member(
        self,
        group_id: UUID,
        target_user_id: UUID,
        role_template_id: UUID,
        *,
        actor_id: UUID,
    ) -> GroupMember:
        """Appoint a user into a role through the appointment graph.

        The target's role and delegation flag are replaced by the target role
        and the edge's ``can_delegate``. Re-appointing into the current role
        refreshes the flag. Two appointers racing on the same new user: the
        later insert fails on the (group_id, user_id) constraint; on an existing
        member the last committed update wins.
        """

        group = self._authorization.require_group(group_id)
        appointer = self._authorization.require_member(group_id, actor_id)

        check = self._appointments.can_appoint(appointer.id, role_template_id)
        if not check.can_appoint:
            self._logger.info(
                "appointment_denied",
                extra={"group_id": str(group_id), "actor_id": str(actor_id), "role_id": str(role_template_id)},
            )
            raise AppointmentDeniedError("You are not allowed to appoint members into this role")

        if target_user_id == group.creator_id:
            raise CreatorMembershipError("The group creator's role cannot be changed")

        role = self._session.get(RoleTemplate, role_template_id)
        if role is None:
            raise RoleNotFoundError(f"Role {role_template_id} no longer exists")

        existing = self._authorization.get_member(group_id, target_user_id)
        if existing is not None:
            existing.role_template = role
            existing.can_delegate = check.can_delegate
            try:
                self._session.flush()
            except IntegrityError as exc:
                self._session.rollback()
                raise RoleNotFoundError(f"Role {role_template_id} no longer exists") from exc
            member = existing
        else:
            member = self.create_member(group, target_user_id, role, can_delegate=check.can_delegate)

        self._logger.info(
            "member_appointed",
            extra={
                "group_id": str(group_id),
                "user_id": str(target_user_id),
                "role_id": str(role_template_id),
                "can_delegate": check.can_delegate,
                "actor_id": str(actor_id),
            },
        )
        return member

    def change_member_role(
        self,
        group_id: UUID,
        member_id: UUID,
        role_template_id: UUID,
        *,
        actor_id: UUID,
    ) -> GroupMember:
        member = self.get_member(group_id, member_id)
        return self.appoint_member(group_id, member.user_id, role_template_id, actor_id=actor_id)

    def remove_member(self, group_id: UUID, member_id: UUID, *, actor_id: UUID) -> None:
        operator = self._authorization.require_permission(group_id, actor_id, Permission.REMOVE_MEMBERS)
        group = operator.group
        member = self.get_member(group_id, member_id)

        if member.user_id == group.creator_id:
            raise CreatorMembershipError("The group creator cannot be removed")
        if group.creator_id != actor_id and member.role_template.level <= operator.role_template.level:
            raise RoleOutrankedError("You can only remove members whose role is below your own")

        self._session.delete(member)
        self._session.flush()
        self._logger.info(
            "member_removed",
            extra={"group_id": str(group_id), "member_id": str(member_id), "actor_id": str(actor_id)},
        )

    def leave_group(self, group_id: UUID, *, user_id: UUID) -> None:
        group = self._authorization.require_group(group_id)
        if group.creator_id == user_id:
            raise CreatorMembershipError("The group creator cannot leave the group")

        member = self._authorization.get_member(group_id, user_id)
        if member is None:
            raise MemberNotFoundError(f"User {user_id} is not a member of group {group_id}")

        self._session.delete(member)
        self._session.flush()
        self._logger.info("member_left", extra={"group_id": str(group_id), "user_id": str(user_id)})

    def create_member(self, group: Group, user_id: UUID, role: RoleTemplate, *, can_delegate: bool) -> GroupMember:
        """Insert a membership row after checking the group's capacity.

        The group row is locked before counting so concurrent joins queue up
        behind each other on PostgreSQL. SQLite ignores ``FOR UPDATE`` but only
        admits one writer at a time, which gives the same ordering.
        """

        group_id, role_id, max_members = group.id, role.id, group.max_members
        self._session.execute(select(Group.id).where(Group.id == group_id).with_for_update(nowait=False))
        current = self._session.scalar(select(func.count(GroupMember.id)).where(GroupMember.group_id == group_id)) or 0
        if current >= max_members:
            raise GroupFullError(f"Group {group_id} is full ({max_members} members)")

        member = GroupMember(
            group_id=group_id,
            user_id=user_id,
            role_template_id=role_id,
            can_delegate=can_delegate,
        )
        member.role_template = role
        self._session.add(member)
        try:
            self._session.flush()
        except IntegrityError as exc:
            self._session.rollback()
            raise MemberConflictError(
                f"User {user_id} joined group {group_id} concurrently or role {role_id} no longer exists"
            ) from exc
        return member
