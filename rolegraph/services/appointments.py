"""Appointment graph: which roles may appoint members into which lower roles."""

from __future__ import annotations

import logging
from typing import List, NamedTuple, Optional
from uuid import UUID

from sqlalchemy import select
from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session, aliased, joinedload

from rolegraph.models.group_member import GroupMember
from rolegraph.models.role_appointment import RoleAppointment
from rolegraph.models.role_template import RoleTemplate
from rolegraph.services.errors import ConflictError, NotFoundError
from rolegraph.services.roles import RoleNotFoundError


class AppointmentNotFoundError(NotFoundError):
    """Raised when no edge exists between the two roles."""


class AppointmentConflictError(ConflictError):
    """Raised when an edge would violate the graph invariants."""


class CrossGroupAppointmentError(AppointmentConflictError):
    """Raised when the two roles belong to different groups."""


class AppointmentLevelError(AppointmentConflictError):
    """Raised when the target role is not strictly below the appointing role."""


class AppointmentCheck(NamedTuple):
    can_appoint: bool
    can_delegate: bool


class AppointableRole(NamedTuple):
    role: RoleTemplate
    can_delegate: bool


class EdgeViolation(NamedTuple):
    appointment: RoleAppointment
    reason: str


DENIED = AppointmentCheck(can_appoint=False, can_delegate=False)


class AppointmentService:
    """Maintains the appointment edges of each group and answers appointment checks.

    Edges always point from a role to a role of the same group with a strictly
    greater level. The graph is evaluated one hop at a time: a role may only
    appoint into roles it has a direct edge to.
    """

    def __init__(self, session: Session) -> None:
        self._session = session
        self._logger = logging.getLogger("rolegraph.services.appointments")

    def set_appointment(self, from_role_id: UUID, to_role_id: UUID, can_delegate: bool) -> RoleAppointment:
        from_role = self._session.get(RoleTemplate, from_role_id)
        to_role = self._session.get(RoleTemplate, to_role_id)
        if from_role is None or to_role is None:
            missing = from_role_id if from_role is None else to_role_id
            raise RoleNotFoundError(f"Role {missing} not found")

        if from_role.group_id != to_role.group_id:
            raise CrossGroupAppointmentError("Appointment roles must belong to the same group")
        if from_role.level >= to_role.level:
            raise AppointmentLevelError(
                f"Role '{from_role.name}' (level {from_role.level}) can only appoint roles below it, "
                f"not '{to_role.name}' (level {to_role.level})"
            )

        appointment = self._session.get(RoleAppointment, (from_role_id, to_role_id))
        if appointment is None:
            appointment = RoleAppointment(
                from_role_id=from_role_id,
                to_role_id=to_role_id,
                can_delegate=can_delegate,
            )
            self._session.add(appointment)
        else:
            appointment.can_delegate = can_delegate

        try:
            self._session.flush()
        except IntegrityError as exc:
            self._session.rollback()
            raise AppointmentConflictError(
                f"Appointment {from_role_id} -> {to_role_id} was modified concurrently"
            ) from exc

        self._logger.info(
            "appointment_set",
            extra={
                "from_role_id": str(from_role_id),
                "to_role_id": str(to_role_id),
                "can_delegate": can_delegate,
                "group_id": str(from_role.group_id),
            },
        )
        return appointment

    def remove_appointment(self, from_role_id: UUID, to_role_id: UUID) -> None:
        appointment = self.get_appointment(from_role_id, to_role_id)
        self._session.delete(appointment)
        self._session.flush()
        self._logger.info(
            "appointment_removed",
            extra={"from_role_id": str(from_role_id), "to_role_id": str(to_role_id)},
        )

    def get_appointment(self, from_role_id: UUID, to_role_id: UUID) -> RoleAppointment:
        appointment = self._session.get(RoleAppointment, (from_role_id, to_role_id))
        if appointment is None:
            raise AppointmentNotFoundError(f"Appointment {from_role_id} -> {to_role_id} not found")
        return appointment

    def list_group_appointments(self, group_id: UUID) -> List[RoleAppointment]:
        from_role = aliased(RoleTemplate)
        to_role = aliased(RoleTemplate)
        stmt = (
            select(RoleAppointment)
            .join(from_role, RoleAppointment.from_role_id == from_role.id)
            .join(to_role, RoleAppointment.to_role_id == to_role.id)
            .where(from_role.group_id == group_id)
            .options(joinedload(RoleAppointment.from_role), joinedload(RoleAppointment.to_role))
            .order_by(from_role.level.asc(), to_role.level.asc(), to_role.name.asc())
        )
        return list(self._session.scalars(stmt).unique())

    def list_appointable_roles(self, role_id: UUID) -> List[AppointableRole]:
        stmt = (
            select(RoleTemplate, RoleAppointment.can_delegate)
            .join(RoleAppointment, RoleAppointment.to_role_id == RoleTemplate.id)
            .where(RoleAppointment.from_role_id == role_id)
            .order_by(RoleTemplate.level.asc(), RoleTemplate.name.asc())
        )
        return [AppointableRole(role=role, can_delegate=flag) for role, flag in self._session.execute(stmt).all()]

    def can_appoint(self, appointer_member_id: UUID, target_role_id: UUID) -> AppointmentCheck:
        """Check the single edge from the appointer's current role to ``target_role_id``.

        Missing members and missing edges both answer ``DENIED``. Role
        permissions are not consulted.
        """

        appointer = self._session.get(GroupMember, appointer_member_id)
        if appointer is None:
            return DENIED

        appointment = self._session.get(RoleAppointment, (appointer.role_template_id, target_role_id))
        if appointment is None:
            return DENIED

        return AppointmentCheck(can_appoint=True, can_delegate=appointment.can_delegate)

    def find_invalid_edges(self, group_id: Optional[UUID] = None) -> List[EdgeViolation]:
        """Scan stored edges for ones that break the same-group, strictly-descending rule.

        The service never writes such edges; this catches rows edited outside it.
        """

        from_role = aliased(RoleTemplate)
        stmt = (
            select(RoleAppointment)
            .join(from_role, RoleAppointment.from_role_id == from_role.id)
            .options(joinedload(RoleAppointment.from_role), joinedload(RoleAppointment.to_role))
        )
        if group_id is not None:
            stmt = stmt.where(from_role.group_id == group_id)

        violations: List[EdgeViolation] = []
        for edge in self._session.scalars(stmt).unique():
            if edge.from_role.group_id != edge.to_role.group_id:
                violations.append(EdgeViolation(edge, "cross_group"))
            elif edge.from_role.level >= edge.to_role.level:
                violations.append(EdgeViolation(edge, "not_descending"))

        self._logger.info(
            "appointment_graph_checked",
            extra={"group_id": str(group_id) if group_id else None, "violations": len(violations)},
        )
        return violations
