from __future__ import annotations

import json
import logging
from uuid import uuid4

import pytest

from rolegraph.core.config import AppSettings
from rolegraph.core.logging import JsonFormatter
from rolegraph.schemas.group import GroupCreate
from rolegraph.services.groups import GroupService


def test_settings_read_prefixed_environment(monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.setenv("RG_LOG_LEVEL", "debug")
    monkeypatch.setenv("RG_CORS_ORIGINS", "http://a.example, http://b.example")
    monkeypatch.setenv("RG_MEMBER_ROLE_LEVEL", "20")

    settings = AppSettings(_env_file=None)
    assert settings.log_level == "DEBUG"
    assert settings.cors_origins == ["http://a.example", "http://b.example"]
    assert settings.member_role_level == 20
    assert settings.creator_role_name == "creator"


def test_json_formatter_carries_extra_fields() -> None:
    record = logging.makeLogRecord(
        {"name": "rolegraph.services.groups", "levelno": logging.INFO, "levelname": "INFO", "msg": "group_created"}
    )
    record.group_id = "g-1"

    payload = json.loads(JsonFormatter("rolegraph").format(record))
    assert payload["event"] == "group_created"
    assert payload["service"] == "rolegraph"
    assert payload["extra"] == {"group_id": "g-1"}


def test_services_log_events(session, caplog: pytest.LogCaptureFixture) -> None:
    creator_id = uuid4()
    with caplog.at_level(logging.INFO, logger="rolegraph.services"):
        group = GroupService(session).create_group(GroupCreate(name="Logged"), actor_id=creator_id)

    events = [(record.name, record.getMessage()) for record in caplog.records]
    assert ("rolegraph.services.groups", "group_created") in events
    assert [message for name, message in events if name == "rolegraph.services.roles"] == [
        "role_created",
        "role_created",
    ]
    created = next(record for record in caplog.records if record.getMessage() == "group_created")
    assert created.group_id == str(group.id)
