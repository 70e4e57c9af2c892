"""Exception handlers for the FastAPI app."""

from __future__ import annotations

from fastapi import FastAPI, Request
from fastapi.responses import JSONResponse

from rolegraph.services.errors import ConflictError, ForbiddenError, NotFoundError, ServiceError


def _error_response(status_code: int, exc: ServiceError) -> JSONResponse:
    return JSONResponse(status_code=status_code, content={"detail": str(exc), "code": exc.code})


def register_exception_handlers(app: FastAPI) -> None:
    @app.exception_handler(NotFoundError)
    async def not_found_handler(request: Request, exc: NotFoundError) -> JSONResponse:  # noqa: WPS430
        return _error_response(404, exc)

    @app.exception_handler(ForbiddenError)
    async def forbidden_handler(request: Request, exc: ForbiddenError) -> JSONResponse:  # noqa: WPS430
        return _error_response(403, exc)

    @app.exception_handler(ConflictError)
    async def conflict_handler(request: Request, exc: ConflictError) -> JSONResponse:  # noqa: WPS430
        return _error_response(409, exc)

    @app.exception_handler(ServiceError)
    async def service_error_handler(request: Request, exc: ServiceError) -> JSONResponse:  # noqa: WPS430
        return _error_response(400, exc)
