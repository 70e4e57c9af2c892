"""Error taxonomy shared by every service.

Each service raises subclasses of one of the three categories below; the API
layer maps a category to its status code and ``code`` string.
"""

from __future__ import annotations


class ServiceError(Exception):
    """Base class for service errors."""

    code = "error"


class NotFoundError(ServiceError):
    """A referenced group, role, appointment, member or invitation does not exist."""

    code = "not_found"


class ForbiddenError(ServiceError):
    """The caller lacks the permission, delegation right or membership required."""

    code = "forbidden"


class ConflictError(ServiceError):
    """A uniqueness or structural invariant would be violated."""

    code = "conflict"


class GroupNotFoundError(NotFoundError):
    """Raised when a group cannot be found."""
