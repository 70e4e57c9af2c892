"""Liveness and readiness probes."""

from __future__ import annotations

from fastapi import APIRouter

from rolegraph.core.database import check_connection

router = APIRouter()


@router.get("/healthz", summary="Liveness probe")
def health_check() -> dict[str, str]:
    return {"status": "ok"}


@router.get("/readyz", summary="Readiness probe")
def readiness_check() -> dict[str, str]:
    check_connection()
    return {"status": "ready"}
