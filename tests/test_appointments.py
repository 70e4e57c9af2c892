from __future__ import annotations

from uuid import uuid4

from fastapi.testclient import TestClient
from sqlalchemy import update

from rolegraph.models.role_template import RoleTemplate
from rolegraph.schemas.group import GroupCreate
from rolegraph.services.appointments import AppointmentService
from rolegraph.services.groups import GroupService
from rolegraph.services.roles import RoleTemplateService


def set_edge(client: TestClient, group, actor_id, from_role_id, to_role_id, headers, can_delegate: bool = False):
    return client.put(
        f"/api/v1/groups/{group.id}/appointments",
        json={"from_role_id": str(from_role_id), "to_role_id": str(to_role_id), "can_delegate": can_delegate},
        headers=headers(actor_id),
    )


def appoint(client: TestClient, group, actor_id, user_id, role_id, headers):
    return client.post(
        f"/api/v1/groups/{group.id}/members/appoint",
        json={"user_id": str(user_id), "role_template_id": str(role_id)},
        headers=headers(actor_id),
    )


def test_appoint_member_through_edge(client: TestClient, group_factory, headers) -> None:
    group = group_factory()
    edge = set_edge(client, group, group.creator_id, group.creator_role_id, group.member_role_id, headers)
    edge.raise_for_status()
    assert edge.json()["can_delegate"] is False
    assert edge.json()["from_role"]["name"] == "creator"
    assert edge.json()["to_role"]["name"] == "member"

    student = uuid4()
    response = appoint(client, group, group.creator_id, student, group.member_role_id, headers)
    response.raise_for_status()
    member = response.json()
    assert member["user_id"] == str(student)
    assert member["role_template_id"] == group.member_role_id
    assert member["can_delegate"] is False

    # A member role has no outbound edges and no DELEGATE_APPOINTMENT.
    for from_role, to_role in (
        (group.member_role_id, group.member_role_id),
        (group.creator_role_id, group.member_role_id),
    ):
        denied = set_edge(client, group, student, from_role, to_role, headers)
        assert denied.status_code == 403

    blocked = appoint(client, group, student, uuid4(), group.member_role_id, headers)
    assert blocked.status_code == 403


def test_upward_and_sideways_edges_conflict(client: TestClient, group_factory, role_factory, headers) -> None:
    group = group_factory()

    upward = set_edge(
        client, group, group.creator_id, group.member_role_id, group.creator_role_id, headers, can_delegate=True
    )
    assert upward.status_code == 409
    assert upward.json()["code"] == "conflict"

    peer = role_factory(group, "peer", 10)
    sideways = set_edge(client, group, group.creator_id, group.member_role_id, peer["id"], headers)
    assert sideways.status_code == 409

    self_loop = set_edge(client, group, group.creator_id, group.member_role_id, group.member_role_id, headers)
    assert self_loop.status_code == 409


def test_cross_group_edge_conflicts(client: TestClient, group_factory, headers) -> None:
    first = group_factory()
    second = group_factory(creator_id=first.creator_id, name="Other")

    response = set_edge(client, first, first.creator_id, first.creator_role_id, second.member_role_id, headers)
    assert response.status_code == 409


def test_edge_to_unknown_role_is_not_found(client: TestClient, group_factory, headers) -> None:
    group = group_factory()
    response = set_edge(client, group, group.creator_id, group.creator_role_id, uuid4(), headers)
    assert response.status_code == 404


def test_non_delegate_is_forbidden_before_role_lookup(client: TestClient, group_factory, headers) -> None:
    group = group_factory()
    other = group_factory(name="Other")
    student = uuid4()
    client.post(
        f"/api/v1/groups/{group.id}/members",
        json={"user_id": str(student)},
        headers=headers(group.creator_id),
    ).raise_for_status()

    for from_role_id in (other.creator_role_id, uuid4()):
        denied = set_edge(client, group, student, from_role_id, group.member_role_id, headers)
        assert denied.status_code == 403
        assert denied.json()["code"] == "forbidden"

        removal = client.delete(
            f"/api/v1/groups/{group.id}/appointments/{from_role_id}/{group.member_role_id}",
            headers=headers(student),
        )
        assert removal.status_code == 403

    # The creator still learns that the role does not exist.
    missing = set_edge(client, group, group.creator_id, uuid4(), group.member_role_id, headers)
    assert missing.status_code == 404


def test_rejected_edge_writes_leave_graph_untouched(
    client: TestClient, group_factory, role_factory, headers
) -> None:
    group = group_factory()
    other = group_factory(creator_id=group.creator_id, name="Other")
    mentor = role_factory(group, "mentor", 3)
    peer = role_factory(group, "peer", 10)
    set_edge(
        client, group, group.creator_id, mentor["id"], group.member_role_id, headers, can_delegate=True
    ).raise_for_status()

    rejected = [
        (group.member_role_id, mentor["id"]),
        (group.member_role_id, peer["id"]),
        (mentor["id"], mentor["id"]),
        (mentor["id"], other.member_role_id),
    ]
    for from_role_id, to_role_id in rejected:
        response = set_edge(client, group, group.creator_id, from_role_id, to_role_id, headers)
        assert response.status_code == 409

    flattened = client.patch(
        f"/api/v1/groups/{group.id}/roles/{mentor['id']}",
        json={"level": 10},
        headers=headers(group.creator_id),
    )
    assert flattened.status_code == 409
    reversed_edge = set_edge(client, group, group.creator_id, group.member_role_id, mentor["id"], headers)
    assert reversed_edge.status_code == 409

    edges = client.get(f"/api/v1/groups/{group.id}/appointments", headers=headers(group.creator_id))
    edges.raise_for_status()
    body = edges.json()
    assert [(edge["from_role_id"], edge["to_role_id"]) for edge in body] == [(mentor["id"], group.member_role_id)]
    assert body[0]["can_delegate"] is True

    role = client.get(f"/api/v1/groups/{group.id}/roles/{mentor['id']}", headers=headers(group.creator_id))
    assert role.json()["level"] == 3


def test_set_edge_upserts_can_delegate(client: TestClient, group_factory, headers) -> None:
    group = group_factory()
    set_edge(client, group, group.creator_id, group.creator_role_id, group.member_role_id, headers).raise_for_status()
    updated = set_edge(
        client, group, group.creator_id, group.creator_role_id, group.member_role_id, headers, can_delegate=True
    )
    updated.raise_for_status()
    assert updated.json()["can_delegate"] is True

    edges = client.get(f"/api/v1/groups/{group.id}/appointments", headers=headers(group.creator_id))
    edges.raise_for_status()
    assert len(edges.json()) == 1


def test_remove_edge(client: TestClient, group_factory, headers) -> None:
    group = group_factory()
    set_edge(client, group, group.creator_id, group.creator_role_id, group.member_role_id, headers).raise_for_status()

    url = f"/api/v1/groups/{group.id}/appointments/{group.creator_role_id}/{group.member_role_id}"
    removed = client.delete(url, headers=headers(group.creator_id))
    removed.raise_for_status()
    assert removed.json()["status"] == "removed"

    again = client.delete(url, headers=headers(group.creator_id))
    assert again.status_code == 404

    denied = appoint(client, group, group.creator_id, uuid4(), group.member_role_id, headers)
    assert denied.status_code == 403


def test_graph_is_not_transitive(client: TestClient, group_factory, role_factory, headers) -> None:
    group = group_factory()
    lead = role_factory(group, "lead", 2)
    set_edge(client, group, group.creator_id, group.creator_role_id, lead["id"], headers).raise_for_status()
    set_edge(client, group, group.creator_id, lead["id"], group.member_role_id, headers).raise_for_status()

    # creator -> lead -> member does not let the creator appoint members directly.
    response = appoint(client, group, group.creator_id, uuid4(), group.member_role_id, headers)
    assert response.status_code == 403

    lead_user = uuid4()
    appoint(client, group, group.creator_id, lead_user, lead["id"], headers).raise_for_status()
    appoint(client, group, lead_user, uuid4(), group.member_role_id, headers).raise_for_status()


def test_delegated_appointer_can_manage_lower_edges(
    client: TestClient, group_factory, role_factory, headers
) -> None:
    group = group_factory()
    lead = role_factory(group, "lead", 2, ["DELEGATE_APPOINTMENT", "APPOINT_ROLE"])
    helper = role_factory(group, "helper", 5)
    set_edge(
        client, group, group.creator_id, group.creator_role_id, lead["id"], headers, can_delegate=True
    ).raise_for_status()

    lead_user = uuid4()
    appointed = appoint(client, group, group.creator_id, lead_user, lead["id"], headers)
    appointed.raise_for_status()
    assert appointed.json()["can_delegate"] is True

    own_edge = set_edge(client, group, lead_user, lead["id"], helper["id"], headers)
    own_edge.raise_for_status()
    lower_edge = set_edge(client, group, lead_user, helper["id"], group.member_role_id, headers)
    lower_edge.raise_for_status()

    above = set_edge(client, group, lead_user, group.creator_role_id, helper["id"], headers)
    assert above.status_code == 403


def test_delegation_requires_snapshot_flag(client: TestClient, group_factory, role_factory, headers) -> None:
    group = group_factory()
    lead = role_factory(group, "lead", 2, ["DELEGATE_APPOINTMENT"])
    helper = role_factory(group, "helper", 5)
    set_edge(client, group, group.creator_id, group.creator_role_id, lead["id"], headers).raise_for_status()

    lead_user = uuid4()
    appoint(client, group, group.creator_id, lead_user, lead["id"], headers).raise_for_status()

    # The permission alone is not enough without can_delegate on the membership.
    response = set_edge(client, group, lead_user, lead["id"], helper["id"], headers)
    assert response.status_code == 403


def test_can_delegate_is_a_snapshot(client: TestClient, group_factory, role_factory, headers) -> None:
    group = group_factory()
    lead = role_factory(group, "lead", 2)
    set_edge(
        client, group, group.creator_id, group.creator_role_id, lead["id"], headers, can_delegate=True
    ).raise_for_status()

    lead_user = uuid4()
    member = appoint(client, group, group.creator_id, lead_user, lead["id"], headers)
    member.raise_for_status()
    assert member.json()["can_delegate"] is True

    set_edge(
        client, group, group.creator_id, group.creator_role_id, lead["id"], headers, can_delegate=False
    ).raise_for_status()

    perms = client.get(
        f"/api/v1/groups/{group.id}/permissions",
        params={"user_id": str(lead_user)},
        headers=headers(group.creator_id),
    )
    perms.raise_for_status()
    assert perms.json()["can_delegate"] is True

    # Re-appointing refreshes the flag from the edge.
    refreshed = appoint(client, group, group.creator_id, lead_user, lead["id"], headers)
    refreshed.raise_for_status()
    assert refreshed.json()["can_delegate"] is False


def test_appointment_replaces_existing_role(client: TestClient, group_factory, role_factory, headers) -> None:
    group = group_factory()
    helper = role_factory(group, "helper", 5)
    set_edge(client, group, group.creator_id, group.creator_role_id, helper["id"], headers).raise_for_status()

    user_id = uuid4()
    added = client.post(
        f"/api/v1/groups/{group.id}/members",
        json={"user_id": str(user_id)},
        headers=headers(group.creator_id),
    )
    added.raise_for_status()

    promoted = client.patch(
        f"/api/v1/groups/{group.id}/members/{added.json()['id']}",
        json={"role_template_id": helper["id"]},
        headers=headers(group.creator_id),
    )
    promoted.raise_for_status()
    assert promoted.json()["id"] == added.json()["id"]
    assert promoted.json()["role_template"]["name"] == "helper"


def test_creator_cannot_be_reappointed(client: TestClient, group_factory, role_factory, headers) -> None:
    group = group_factory()
    helper = role_factory(group, "helper", 5)
    set_edge(client, group, group.creator_id, group.creator_role_id, helper["id"], headers).raise_for_status()

    response = appoint(client, group, group.creator_id, group.creator_id, helper["id"], headers)
    assert response.status_code == 403


def test_list_appointable_roles(client: TestClient, group_factory, role_factory, headers) -> None:
    group = group_factory()
    helper = role_factory(group, "helper", 5)
    set_edge(
        client, group, group.creator_id, group.creator_role_id, helper["id"], headers, can_delegate=True
    ).raise_for_status()
    set_edge(client, group, group.creator_id, group.creator_role_id, group.member_role_id, headers).raise_for_status()

    response = client.get(
        f"/api/v1/groups/{group.id}/roles/{group.creator_role_id}/appointable",
        headers=headers(group.creator_id),
    )
    response.raise_for_status()
    assert [(role["name"], role["can_delegate"]) for role in response.json()] == [
        ("helper", True),
        ("member", False),
    ]

    empty = client.get(
        f"/api/v1/groups/{group.id}/roles/{group.member_role_id}/appointable",
        headers=headers(group.creator_id),
    )
    empty.raise_for_status()
    assert empty.json() == []


def test_find_invalid_edges_reports_rows_written_around_the_service(session) -> None:
    group = GroupService(session).create_group(GroupCreate(name="Audit"), actor_id=uuid4())
    roles = RoleTemplateService(session)
    creator_role = roles.find_by_name(group.id, "creator")
    member_role = roles.find_by_name(group.id, "member")
    service = AppointmentService(session)
    service.set_appointment(creator_role.id, member_role.id, False)
    assert service.find_invalid_edges(group.id) == []

    session.execute(
        update(RoleTemplate)
        .where(RoleTemplate.id == member_role.id)
        .values(level=0)
        .execution_options(synchronize_session=False)
    )
    session.expire_all()

    (violation,) = service.find_invalid_edges()
    assert violation.reason == "not_descending"
    assert violation.appointment.to_role_id == member_role.id
