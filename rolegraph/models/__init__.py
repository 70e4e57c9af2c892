"""SQLAlchemy ORM models for the rolegraph service."""

from rolegraph.models.base import Base  # noqa: F401
from rolegraph.models.group import Group, GroupType  # noqa: F401
from rolegraph.models.group_invitation import GroupInvitation  # noqa: F401
from rolegraph.models.group_member import GroupMember  # noqa: F401
from rolegraph.models.group_task import GroupTask, TaskType  # noqa: F401
from rolegraph.models.permission import Permission  # noqa: F401
from rolegraph.models.role_appointment import RoleAppointment  # noqa: F401
from rolegraph.models.role_permission import RolePermission  # noqa: F401
from rolegraph.models.role_template import RoleTemplate  # noqa: F401
