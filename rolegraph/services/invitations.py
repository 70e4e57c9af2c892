"""Invitation codes and the join-by-code flow."""

from __future__ import annotations

import logging
import secrets
from datetime import datetime, timezone
from typing import Callable, List, NamedTuple, Optional
from uuid import UUID

from sqlalchemy import select, update
from sqlalchemy.orm import Session

from rolegraph.core.config import AppSettings, get_settings
from rolegraph.models.group import Group
from rolegraph.models.group_invitation import GroupInvitation
from rolegraph.models.group_member import GroupMember
from rolegraph.models.permission import Permission
from rolegraph.models.role_template import RoleTemplate
from rolegraph.schemas.invitation import InvitationCreate, InvitationUpdate
from rolegraph.services.authorization import AuthorizationService
from rolegraph.services.errors import ConflictError, ForbiddenError, NotFoundError
from rolegraph.services.members import MemberConflictError, MembershipService
from rolegraph.services.roles import RoleTemplateService


class InvitationNotFoundError(NotFoundError):
    """Raised when an invitation id or code is unknown."""


class InvitationInactiveError(ForbiddenError):
    """Raised when the invitation was deactivated."""


class InvitationExpiredError(ForbiddenError):
    """Raised when the invitation's expiry has passed."""


class InvitationExhaustedError(ForbiddenError):
    """Raised when the invitation has no uses left."""


class InvitationCodeError(ConflictError):
    """Raised when no unique code could be generated."""


class AcceptedInvitation(NamedTuple):
    group: Group
    member: GroupMember
    role: RoleTemplate


def generate_invitation_code(num_bytes: int) -> str:
    return secrets.token_urlsafe(num_bytes)


def _as_utc(value: datetime) -> datetime:
    # SQLite hands back naive datetimes; they were stored as UTC.
    if value.tzinfo is None:
        return value.replace(tzinfo=timezone.utc)
    return value


class InvitationService:
    """Manages invitation codes and admits users who redeem them."""

    _CODE_ATTEMPTS = 5

    def __init__(
        self,
        session: Session,
        authorization: Optional[AuthorizationService] = None,
        members: Optional[MembershipService] = None,
        roles: Optional[RoleTemplateService] = None,
        settings: Optional[AppSettings] = None,
        code_generator: Optional[Callable[[int], str]] = None,
    ) -> None:
        self._session = session
        self._authorization = authorization or AuthorizationService(session)
        self._roles = roles or RoleTemplateService(session)
        self._members = members or MembershipService(session, authorization=self._authorization, roles=self._roles)
        self._settings = settings or get_settings()
        self._generate_code = code_generator or generate_invitation_code
        self._logger = logging.getLogger("rolegraph.services.invitations")

    def create_invitation(self, group_id: UUID, payload: InvitationCreate, *, actor_id: UUID) -> GroupInvitation:
        self._authorization.require_permission(group_id, actor_id, Permission.INVITE_MEMBERS)
        role = self._roles.find_by_name(group_id, payload.default_role or self._settings.member_role_name)

        invitation = GroupInvitation(
            group_id=group_id,
            invited_by_id=actor_id,
            code=self._unique_code(),
            max_uses=payload.max_uses,
            used_count=0,
            expires_at=payload.expires_at,
            is_active=True,
            default_role=role.name,
        )
        self._session.add(invitation)
        self._session.flush()

        self._logger.info(
            "invitation_created",
            extra={"invitation_id": str(invitation.id), "group_id": str(group_id), "actor_id": str(actor_id)},
        )
        return invitation

    def list_invitations(self, group_id: UUID, *, actor_id: UUID) -> List[GroupInvitation]:
        self._authorization.require_group(group_id)
        self._authorization.require_member(group_id, actor_id)
        stmt = (
            select(GroupInvitation)
            .where(GroupInvitation.group_id == group_id)
            .order_by(GroupInvitation.created_at.desc())
        )
        return list(self._session.scalars(stmt))

    def update_invitation(self, invitation_id: UUID, payload: InvitationUpdate, *, actor_id: UUID) -> GroupInvitation:
        invitation = self._get_invitation(invitation_id)
        self._authorization.require_permission(invitation.group_id, actor_id, Permission.INVITE_MEMBERS)

        updates = payload.model_dump(exclude_unset=True)
        if updates.get("max_uses") is not None:
            invitation.max_uses = updates["max_uses"]
        if "expires_at" in updates:
            invitation.expires_at = updates["expires_at"]
        if updates.get("is_active") is not None:
            invitation.is_active = updates["is_active"]
        self._session.flush()

        self._logger.info("invitation_updated", extra={"invitation_id": str(invitation_id), "changes": sorted(updates)})
        return invitation

    def delete_invitation(self, invitation_id: UUID, *, actor_id: UUID) -> None:
        invitation = self._get_invitation(invitation_id)
        self._authorization.require_permission(invitation.group_id, actor_id, Permission.INVITE_MEMBERS)
        self._session.delete(invitation)
        self._session.flush()
        self._logger.info("invitation_deleted", extra={"invitation_id": str(invitation_id)})

    def accept_invitation(self, code: str, *, user_id: UUID) -> AcceptedInvitation:
        invitation = self._session.scalar(select(GroupInvitation).where(GroupInvitation.code == code))
        if invitation is None:
            raise InvitationNotFoundError("Invitation code not found")
        if not invitation.is_active:
            raise InvitationInactiveError("Invitation is no longer active")
        if invitation.expires_at is not None and _as_utc(invitation.expires_at) < datetime.now(timezone.utc):
            raise InvitationExpiredError("Invitation has expired")
        if invitation.used_count >= invitation.max_uses:
            raise InvitationExhaustedError("Invitation has reached its maximum number of uses")

        group = self._authorization.require_group(invitation.group_id)
        if self._authorization.get_member(group.id, user_id) is not None:
            raise MemberConflictError(f"User {user_id} is already a member of group {group.id}")
        role = self._roles.find_by_name(group.id, invitation.default_role)

        self._claim_use(invitation)
        member = self._members.create_member(group, user_id, role, can_delegate=False)

        self._logger.info(
            "invitation_accepted",
            extra={"invitation_id": str(invitation.id), "group_id": str(group.id), "user_id": str(user_id)},
        )
        return AcceptedInvitation(group=group, member=member, role=role)

    def _claim_use(self, invitation: GroupInvitation) -> None:
        """Consume one use with a conditional UPDATE.

        Concurrent acceptances all pass the checks above on their own reads;
        the WHERE clause lets at most ``max_uses`` of them through.
        """

        result = self._session.execute(
            update(GroupInvitation)
            .where(
                GroupInvitation.id == invitation.id,
                GroupInvitation.is_active.is_(True),
                GroupInvitation.used_count < GroupInvitation.max_uses,
            )
            .values(used_count=GroupInvitation.used_count + 1)
            .execution_options(synchronize_session=False)
        )
        if result.rowcount != 1:
            self._logger.info("invitation_exhausted", extra={"invitation_id": str(invitation.id)})
            raise InvitationExhaustedError("Invitation has reached its maximum number of uses")
        self._session.expire(invitation, ["used_count"])

    def _unique_code(self) -> str:
        for _ in range(self._CODE_ATTEMPTS):
            code = self._generate_code(self._settings.invitation_code_bytes)
            exists = self._session.scalar(select(GroupInvitation.id).where(GroupInvitation.code == code))
            if exists is None:
                return code
        raise InvitationCodeError("Could not generate a unique invitation code")

    def _get_invitation(self, invitation_id: UUID) -> GroupInvitation:
        invitation = self._session.get(GroupInvitation, invitation_id)
        if invitation is None:
            raise InvitationNotFoundError(f"Invitation {invitation_id} not found")
        return invitation
