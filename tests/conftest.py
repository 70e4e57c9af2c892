from __future__ import annotations

import os
import sys
from pathlib import Path
from typing import Callable, Dict
from uuid import UUID, uuid4

import pytest
from fastapi.testclient import TestClient

os.environ.setdefault("RG_ENVIRONMENT", "test")
os.environ.setdefault("RG_DATABASE_URL", "sqlite:///:memory:")
os.environ.setdefault("RG_LOG_JSON", "false")

PROJECT_ROOT = Path(__file__).resolve().parents[1]
sys.path.insert(0, str(PROJECT_ROOT))

from rolegraph.core.config import get_settings  # noqa: E402

get_settings.cache_clear()

from rolegraph.core.database import SessionLocal, engine  # noqa: E402
from rolegraph.main import create_app  # noqa: E402
from rolegraph.models import Base  # noqa: E402


@pytest.fixture(autouse=True)
def reset_database():
    Base.metadata.drop_all(bind=engine)
    Base.metadata.create_all(bind=engine)
    yield
    Base.metadata.drop_all(bind=engine)


@pytest.fixture()
def client() -> TestClient:  # noqa: ANN001
    app = create_app()
    with TestClient(app) as test_client:
        yield test_client


@pytest.fixture()
def session():
    db = SessionLocal()
    try:
        yield db
    finally:
        db.rollback()
        db.close()


def actor(user_id: UUID | str) -> Dict[str, str]:
    return {"X-Actor-Id": str(user_id)}


class GroupContext:
    """A group created through the API together with its system role ids."""

    def __init__(self, data: Dict[str, object], creator_id: UUID, roles: Dict[str, str]) -> None:
        self.data = data
        self.id = str(data["id"])
        self.creator_id = creator_id
        self.roles = roles

    @property
    def creator_role_id(self) -> str:
        return self.roles["creator"]

    @property
    def member_role_id(self) -> str:
        return self.roles["member"]


@pytest.fixture()
def group_factory(client: TestClient) -> Callable[..., GroupContext]:
    def _create(creator_id: UUID | None = None, **overrides: object) -> GroupContext:
        creator_id = creator_id or uuid4()
        payload = {"name": "Physics 101", "type": "class", **overrides}
        response = client.post("/api/v1/groups", json=payload, headers=actor(creator_id))
        response.raise_for_status()
        group = response.json()

        roles_resp = client.get(f"/api/v1/groups/{group['id']}/roles", headers=actor(creator_id))
        roles_resp.raise_for_status()
        roles = {role["name"]: role["id"] for role in roles_resp.json()}
        return GroupContext(group, creator_id, roles)

    return _create


@pytest.fixture()
def role_factory(client: TestClient) -> Callable[..., Dict[str, object]]:
    def _create(
        group: GroupContext,
        name: str,
        level: int,
        permissions: list[str] | None = None,
        actor_id: UUID | None = None,
    ) -> Dict[str, object]:
        response = client.post(
            f"/api/v1/groups/{group.id}/roles",
            json={"name": name, "level": level, "permissions": permissions or []},
            headers=actor(actor_id or group.creator_id),
        )
        response.raise_for_status()
        return response.json()

    return _create


@pytest.fixture()
def headers() -> Callable[[UUID | str], Dict[str, str]]:
    return actor
