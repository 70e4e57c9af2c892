"""Group lifecycle, including the creator/member role bootstrap."""

from __future__ import annotations

import logging
from typing import List, NamedTuple, Optional
from uuid import UUID

from sqlalchemy import func, select
from sqlalchemy.orm import Session, joinedload

from rolegraph.core.config import AppSettings, get_settings
from rolegraph.models.group import Group
from rolegraph.models.group_member import GroupMember
from rolegraph.models.permission import get_all_permissions
from rolegraph.schemas.group import GroupCreate, GroupUpdate
from rolegraph.schemas.role import RoleTemplateCreate
from rolegraph.services.authorization import AuthorizationService
from rolegraph.services.errors import ConflictError
from rolegraph.services.roles import RoleTemplateService


class GroupCapacityError(ConflictError):
    """Raised when max_members would drop below the current member count."""


class JoinedGroup(NamedTuple):
    group: Group
    membership: GroupMember


class UserGroups(NamedTuple):
    created: List[Group]
    joined: List[JoinedGroup]


class GroupService:
    """Creates, reads, updates and deletes groups.

    Update and delete are reserved for the creator; role permissions play no
    part in that decision.
    """

    def __init__(
        self,
        session: Session,
        authorization: Optional[AuthorizationService] = None,
        roles: Optional[RoleTemplateService] = None,
        settings: Optional[AppSettings] = None,
    ) -> None:
        self._session = session
        self._authorization = authorization or AuthorizationService(session)
        self._roles = roles or RoleTemplateService(session)
        self._settings = settings or get_settings()
        self._logger = logging.getLogger("rolegraph.services.groups")

    def create_group(self, payload: GroupCreate, *, actor_id: UUID) -> Group:
        group = Group(
            name=payload.name,
            description=payload.description,
            type=payload.type,
            creator_id=actor_id,
            max_members=payload.max_members or self._settings.default_max_members,
        )
        self._session.add(group)
        self._session.flush()

        creator_role = self._roles.create_role(
            group.id,
            RoleTemplateCreate(
                name=self._settings.creator_role_name,
                description="Group creator, holds every permission",
                level=0,
                permissions=sorted(get_all_permissions(), key=lambda permission: permission.value),
            ),
            is_system=True,
        ).role
        self._roles.create_role(
            group.id,
            RoleTemplateCreate(
                name=self._settings.member_role_name,
                description="Regular member",
                level=self._settings.member_role_level,
            ),
            is_system=True,
        )

        # The creator is never reached through an appointment edge, so the
        # delegation flag is seeded here.
        self._session.add(
            GroupMember(
                group_id=group.id,
                user_id=actor_id,
                role_template_id=creator_role.id,
                can_delegate=True,
            )
        )
        self._session.flush()

        self._logger.info("group_created", extra={"group_id": str(group.id), "creator_id": str(actor_id)})
        return group

    def get_group(self, group_id: UUID, *, actor_id: UUID) -> Group:
        group = self._authorization.require_group(group_id)
        self._authorization.require_member(group_id, actor_id)
        return group

    def list_user_groups(self, user_id: UUID) -> UserGroups:
        created = list(
            self._session.scalars(
                select(Group).where(Group.creator_id == user_id).order_by(Group.created_at.desc())
            )
        )
        memberships = self._session.scalars(
            select(GroupMember)
            .where(GroupMember.user_id == user_id)
            .options(joinedload(GroupMember.group), joinedload(GroupMember.role_template))
            .order_by(GroupMember.joined_at.desc())
        )
        joined = [JoinedGroup(group=membership.group, membership=membership) for membership in memberships]
        return UserGroups(created=created, joined=joined)

    def update_group(self, group_id: UUID, payload: GroupUpdate, *, actor_id: UUID) -> Group:
        group = self._authorization.require_creator(group_id, actor_id)
        updates = payload.model_dump(exclude_unset=True, exclude_none=True)

        if "max_members" in updates:
            current = self.count_members(group_id)
            if updates["max_members"] < current:
                raise GroupCapacityError(
                    f"Group {group_id} already has {current} members, cannot lower the limit to {updates['max_members']}"
                )
        for field, value in updates.items():
            setattr(group, field, value)
        self._session.flush()

        self._logger.info("group_updated", extra={"group_id": str(group_id), "changes": sorted(updates)})
        return group

    def delete_group(self, group_id: UUID, *, actor_id: UUID) -> None:
        group = self._authorization.require_creator(group_id, actor_id)
        self._session.delete(group)
        self._session.flush()
        self._logger.info("group_deleted", extra={"group_id": str(group_id), "actor_id": str(actor_id)})

    def count_members(self, group_id: UUID) -> int:
        return self._session.scalar(select(func.count(GroupMember.id)).where(GroupMember.group_id == group_id)) or 0
