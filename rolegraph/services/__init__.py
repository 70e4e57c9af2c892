"""Business logic service layer."""

from rolegraph.services.appointments import AppointmentService  # noqa: F401
from rolegraph.services.authorization import AuthorizationService  # noqa: F401
from rolegraph.services.groups import GroupService  # noqa: F401
from rolegraph.services.invitations import InvitationService  # noqa: F401
from rolegraph.services.members import MembershipService  # noqa: F401
from rolegraph.services.roles import RoleTemplateService  # noqa: F401
from rolegraph.services.tasks import TaskService  # noqa: F401
