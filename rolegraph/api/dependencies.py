"""Dependency injection helpers for FastAPI routes."""

from __future__ import annotations

from typing import Optional
from uuid import UUID

from fastapi import Depends, Header, HTTPException, status
from sqlalchemy.orm import Session

from rolegraph.core.database import get_session
from rolegraph.services.appointments import AppointmentService
from rolegraph.services.authorization import AuthorizationService
from rolegraph.services.groups import GroupService
from rolegraph.services.invitations import InvitationService
from rolegraph.services.members import MembershipService
from rolegraph.services.roles import RoleTemplateService
from rolegraph.services.tasks import TaskService


def get_db_session() -> Session:
    yield from get_session()


def get_actor_id(x_actor_id: Optional[UUID] = Header(default=None, alias="X-Actor-Id")) -> UUID:
    if x_actor_id is None:
        raise HTTPException(status_code=status.HTTP_401_UNAUTHORIZED, detail="X-Actor-Id header is required")
    return x_actor_id


def get_authorization_service(session: Session = Depends(get_db_session)) -> AuthorizationService:
    return AuthorizationService(session)


def get_role_service(session: Session = Depends(get_db_session)) -> RoleTemplateService:
    return RoleTemplateService(session)


def get_appointment_service(session: Session = Depends(get_db_session)) -> AppointmentService:
    return AppointmentService(session)


def get_group_service(
    session: Session = Depends(get_db_session),
    authorization: AuthorizationService = Depends(get_authorization_service),
) -> GroupService:
    return GroupService(session, authorization=authorization)


def get_membership_service(
    session: Session = Depends(get_db_session),
    authorization: AuthorizationService = Depends(get_authorization_service),
) -> MembershipService:
    return MembershipService(session, authorization=authorization)


def get_invitation_service(
    session: Session = Depends(get_db_session),
    authorization: AuthorizationService = Depends(get_authorization_service),
) -> InvitationService:
    return InvitationService(session, authorization=authorization)


def get_task_service(
    session: Session = Depends(get_db_session),
    authorization: AuthorizationService = Depends(get_authorization_service),
) -> TaskService:
    return TaskService(session, authorization=authorization)


def require_group_member(
    group_id: UUID,
    actor_id: UUID = Depends(get_actor_id),
    authorization: AuthorizationService = Depends(get_authorization_service),
) -> UUID:
    authorization.require_group(group_id)
    authorization.require_member(group_id, actor_id)
    return actor_id
