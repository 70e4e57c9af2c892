"""Closed catalog of permissions a group role may hold."""

from __future__ import annotations

from enum import Enum
from typing import FrozenSet, Iterable


class Permission(str, Enum):
    # Group administration
    MANAGE_GROUP = "MANAGE_GROUP"
    INVITE_MEMBERS = "INVITE_MEMBERS"
    REMOVE_MEMBERS = "REMOVE_MEMBERS"

    # Roles and appointments
    APPOINT_ROLE = "APPOINT_ROLE"
    CREATE_ROLE = "CREATE_ROLE"
    DELEGATE_APPOINTMENT = "DELEGATE_APPOINTMENT"

    # Tasks
    CREATE_TASKS = "CREATE_TASKS"
    ASSIGN_TASKS = "ASSIGN_TASKS"
    REVIEW_TASKS = "REVIEW_TASKS"

    # Members
    VIEW_ALL_MEMBERS = "VIEW_ALL_MEMBERS"
    EDIT_MEMBER_INFO = "EDIT_MEMBER_INFO"

    # Statistics
    VIEW_STATS = "VIEW_STATS"
    VIEW_REPORTS = "VIEW_REPORTS"

    # Games
    MANAGE_GAMES = "MANAGE_GAMES"
    VIEW_GAME_RECORDS = "VIEW_GAME_RECORDS"


def get_all_permissions() -> FrozenSet[Permission]:
    """Return the full catalog, as granted to a group's creator role."""
    return frozenset(Permission)


def normalize_permissions(permissions: Iterable[Permission | str] | None) -> FrozenSet[Permission]:
    """Collapse an input collection into a set of catalog members.

    Raises ``ValueError`` for names outside the catalog.
    """
    if not permissions:
        return frozenset()
    return frozenset(Permission(permission) for permission in permissions)
