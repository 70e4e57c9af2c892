from __future__ import annotations

from uuid import uuid4

from fastapi.testclient import TestClient


def test_task_lifecycle(client: TestClient, group_factory, role_factory, headers) -> None:
    group = group_factory()
    tutor = role_factory(group, "tutor", 2, ["CREATE_TASKS"])
    client.put(
        f"/api/v1/groups/{group.id}/appointments",
        json={"from_role_id": group.creator_role_id, "to_role_id": tutor["id"]},
        headers=headers(group.creator_id),
    ).raise_for_status()
    tutor_id = uuid4()
    client.post(
        f"/api/v1/groups/{group.id}/members/appoint",
        json={"user_id": str(tutor_id), "role_template_id": tutor["id"]},
        headers=headers(group.creator_id),
    ).raise_for_status()
    student_id = uuid4()
    client.post(
        f"/api/v1/groups/{group.id}/members",
        json={"user_id": str(student_id)},
        headers=headers(group.creator_id),
    ).raise_for_status()

    created = client.post(
        f"/api/v1/groups/{group.id}/tasks",
        json={"title": "Chapter 3 exercises", "type": "practice"},
        headers=headers(tutor_id),
    )
    assert created.status_code == 201
    task = created.json()
    assert task["created_by_id"] == str(tutor_id)
    assert task["is_published"] is True

    denied = client.post(
        f"/api/v1/groups/{group.id}/tasks",
        json={"title": "Skip homework"},
        headers=headers(student_id),
    )
    assert denied.status_code == 403

    listing = client.get(f"/api/v1/groups/{group.id}/tasks", headers=headers(student_id))
    listing.raise_for_status()
    assert [item["title"] for item in listing.json()] == ["Chapter 3 exercises"]

    not_author = client.delete(f"/api/v1/tasks/{task['id']}", headers=headers(group.creator_id))
    assert not_author.status_code == 403

    removed = client.delete(f"/api/v1/tasks/{task['id']}", headers=headers(tutor_id))
    removed.raise_for_status()
    assert client.delete(f"/api/v1/tasks/{task['id']}", headers=headers(tutor_id)).status_code == 404


def test_creator_can_create_tasks(client: TestClient, group_factory, headers) -> None:
    group = group_factory()
    response = client.post(
        f"/api/v1/groups/{group.id}/tasks",
        json={"title": "Midterm", "type": "exam", "due_date": "2030-01-15T09:00:00Z"},
        headers=headers(group.creator_id),
    )
    response.raise_for_status()
    assert response.json()["type"] == "exam"


def test_get_and_update_task(client: TestClient, group_factory, headers) -> None:
    group = group_factory()
    student_id = uuid4()
    client.post(
        f"/api/v1/groups/{group.id}/members",
        json={"user_id": str(student_id)},
        headers=headers(group.creator_id),
    ).raise_for_status()
    created = client.post(
        f"/api/v1/groups/{group.id}/tasks",
        json={"title": "Lab report", "description": "Pendulum"},
        headers=headers(group.creator_id),
    )
    created.raise_for_status()
    task_id = created.json()["id"]

    fetched = client.get(f"/api/v1/tasks/{task_id}", headers=headers(student_id))
    fetched.raise_for_status()
    assert fetched.json()["title"] == "Lab report"

    outsider = client.get(f"/api/v1/tasks/{task_id}", headers=headers(uuid4()))
    assert outsider.status_code == 403
    assert client.get(f"/api/v1/tasks/{uuid4()}", headers=headers(student_id)).status_code == 404

    not_author = client.patch(f"/api/v1/tasks/{task_id}", json={"title": "Skipped"}, headers=headers(student_id))
    assert not_author.status_code == 403

    updated = client.patch(
        f"/api/v1/tasks/{task_id}",
        json={"title": "Lab report v2", "is_published": False},
        headers=headers(group.creator_id),
    )
    updated.raise_for_status()
    body = updated.json()
    assert body["title"] == "Lab report v2"
    assert body["description"] == "Pendulum"
    assert body["is_published"] is False

    missing = client.patch(f"/api/v1/tasks/{uuid4()}", json={"title": "x"}, headers=headers(group.creator_id))
    assert missing.status_code == 404
