"""Router registrations."""

from fastapi import APIRouter

from rolegraph.api.routers import (
    appointments,
    authorization,
    groups,
    health,
    invitations,
    members,
    roles,
    tasks,
)


def get_api_router() -> APIRouter:
    router = APIRouter()
    router.include_router(health.router, tags=["health"])
    router.include_router(groups.router, prefix="/api/v1/groups", tags=["groups"])
    router.include_router(members.router, prefix="/api/v1/groups", tags=["members"])
    router.include_router(roles.router, prefix="/api/v1/groups/{group_id}/roles", tags=["roles"])
    router.include_router(
        appointments.router,
        prefix="/api/v1/groups/{group_id}/appointments",
        tags=["appointments"],
    )
    router.include_router(authorization.router, prefix="/api/v1/groups/{group_id}", tags=["authorization"])
    router.include_router(invitations.router, prefix="/api/v1", tags=["invitations"])
    router.include_router(tasks.router, prefix="/api/v1", tags=["tasks"])
    return router
