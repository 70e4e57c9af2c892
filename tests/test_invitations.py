from __future__ import annotations

from datetime import datetime, timedelta, timezone
from uuid import uuid4

import pytest
from fastapi.testclient import TestClient
from sqlalchemy import func, select, update

from rolegraph.models.group_invitation import GroupInvitation
from rolegraph.models.group_member import GroupMember
from rolegraph.schemas.group import GroupCreate
from rolegraph.schemas.invitation import InvitationCreate
from rolegraph.services.groups import GroupService
from rolegraph.services.invitations import (
    InvitationCodeError,
    InvitationExhaustedError,
    InvitationService,
)


def create_invitation(client: TestClient, group, headers, actor_id=None, **payload):
    return client.post(
        f"/api/v1/groups/{group.id}/invitations",
        json=payload,
        headers=headers(actor_id or group.creator_id),
    )


def test_accept_invitation_joins_with_default_role(client: TestClient, group_factory, headers) -> None:
    group = group_factory(name="Robotics")
    created = create_invitation(client, group, headers, max_uses=2)
    assert created.status_code == 201
    invitation = created.json()
    assert invitation["used_count"] == 0
    assert invitation["default_role"] == "member"
    assert invitation["is_active"] is True

    user_id = uuid4()
    accepted = client.post(f"/api/v1/invitations/{invitation['code']}/accept", headers=headers(user_id))
    accepted.raise_for_status()
    body = accepted.json()
    assert body["group_id"] == group.id
    assert body["group_name"] == "Robotics"
    assert body["role_name"] == "member"

    again = client.post(f"/api/v1/invitations/{invitation['code']}/accept", headers=headers(user_id))
    assert again.status_code == 409

    listing = client.get(f"/api/v1/groups/{group.id}/invitations", headers=headers(group.creator_id))
    listing.raise_for_status()
    assert listing.json()[0]["used_count"] == 1


def test_invitation_with_custom_default_role(client: TestClient, group_factory, role_factory, headers) -> None:
    group = group_factory()
    role_factory(group, "guest", 12)

    created = create_invitation(client, group, headers, default_role="guest")
    created.raise_for_status()

    accepted = client.post(f"/api/v1/invitations/{created.json()['code']}/accept", headers=headers(uuid4()))
    accepted.raise_for_status()
    assert accepted.json()["role_name"] == "guest"

    unknown = create_invitation(client, group, headers, default_role="ghost")
    assert unknown.status_code == 404


def test_invitation_exhausted_after_max_uses(client: TestClient, group_factory, headers) -> None:
    group = group_factory()
    code = create_invitation(client, group, headers, max_uses=1).json()["code"]

    client.post(f"/api/v1/invitations/{code}/accept", headers=headers(uuid4())).raise_for_status()
    second = client.post(f"/api/v1/invitations/{code}/accept", headers=headers(uuid4()))
    assert second.status_code == 403
    assert "maximum" in second.json()["detail"]


def test_inactive_and_expired_invitations_are_rejected(client: TestClient, group_factory, headers) -> None:
    group = group_factory()
    invitation = create_invitation(client, group, headers, max_uses=5).json()

    deactivated = client.patch(
        f"/api/v1/invitations/{invitation['id']}",
        json={"is_active": False},
        headers=headers(group.creator_id),
    )
    deactivated.raise_for_status()
    assert deactivated.json()["is_active"] is False
    inactive = client.post(f"/api/v1/invitations/{invitation['code']}/accept", headers=headers(uuid4()))
    assert inactive.status_code == 403

    past = (datetime.now(timezone.utc) - timedelta(hours=1)).isoformat()
    expired_invite = create_invitation(client, group, headers, expires_at=past).json()
    expired = client.post(f"/api/v1/invitations/{expired_invite['code']}/accept", headers=headers(uuid4()))
    assert expired.status_code == 403
    assert "expired" in expired.json()["detail"]

    unknown = client.post("/api/v1/invitations/not-a-code/accept", headers=headers(uuid4()))
    assert unknown.status_code == 404


def test_invitation_management_requires_invite_permission(client: TestClient, group_factory, headers) -> None:
    group = group_factory()
    member_id = uuid4()
    client.post(
        f"/api/v1/groups/{group.id}/members",
        json={"user_id": str(member_id)},
        headers=headers(group.creator_id),
    ).raise_for_status()
    invitation = create_invitation(client, group, headers).json()

    assert create_invitation(client, group, headers, actor_id=member_id).status_code == 403
    patch = client.patch(
        f"/api/v1/invitations/{invitation['id']}", json={"max_uses": 9}, headers=headers(member_id)
    )
    assert patch.status_code == 403
    delete = client.delete(f"/api/v1/invitations/{invitation['id']}", headers=headers(member_id))
    assert delete.status_code == 403

    removed = client.delete(f"/api/v1/invitations/{invitation['id']}", headers=headers(group.creator_id))
    removed.raise_for_status()
    missing = client.delete(f"/api/v1/invitations/{invitation['id']}", headers=headers(group.creator_id))
    assert missing.status_code == 404


def test_accepting_into_full_group_conflicts(client: TestClient, group_factory, headers) -> None:
    group = group_factory(max_members=1)
    code = create_invitation(client, group, headers, max_uses=3).json()["code"]

    response = client.post(f"/api/v1/invitations/{code}/accept", headers=headers(uuid4()))
    assert response.status_code == 409


@pytest.fixture()
def invitation_setup(session):
    creator_id = uuid4()
    group = GroupService(session).create_group(GroupCreate(name="Debate"), actor_id=creator_id)
    service = InvitationService(session)
    invitation = service.create_invitation(group.id, InvitationCreate(max_uses=1), actor_id=creator_id)
    return service, group, invitation


def test_concurrent_acceptance_claims_single_use(session, invitation_setup) -> None:
    service, group, invitation = invitation_setup
    assert invitation.used_count == 0

    # Another worker consumes the only use behind this session's back; the
    # loaded invitation still reports used_count == 0.
    session.execute(
        update(GroupInvitation)
        .where(GroupInvitation.id == invitation.id)
        .values(used_count=GroupInvitation.used_count + 1)
        .execution_options(synchronize_session=False)
    )
    assert invitation.used_count == 0

    with pytest.raises(InvitationExhaustedError):
        service.accept_invitation(invitation.code, user_id=uuid4())

    stored = session.scalar(select(GroupInvitation.used_count).where(GroupInvitation.id == invitation.id))
    assert stored == 1
    members = session.scalar(select(func.count(GroupMember.id)).where(GroupMember.group_id == group.id))
    assert members == 1


def test_accept_increments_used_count(session, invitation_setup) -> None:
    service, group, invitation = invitation_setup

    accepted = service.accept_invitation(invitation.code, user_id=uuid4())
    assert accepted.group.id == group.id
    assert accepted.role.name == "member"
    assert invitation.used_count == 1

    with pytest.raises(InvitationExhaustedError):
        service.accept_invitation(invitation.code, user_id=uuid4())


def test_code_collisions_are_retried(session) -> None:
    creator_id = uuid4()
    group = GroupService(session).create_group(GroupCreate(name="Collisions"), actor_id=creator_id)
    codes = iter(["same", "same", "other"])
    service = InvitationService(session, code_generator=lambda _: next(codes))

    first = service.create_invitation(group.id, InvitationCreate(), actor_id=creator_id)
    second = service.create_invitation(group.id, InvitationCreate(), actor_id=creator_id)
    assert (first.code, second.code) == ("same", "other")

    stuck = InvitationService(session, code_generator=lambda _: "same")
    with pytest.raises(InvitationCodeError):
        stuck.create_invitation(group.id, InvitationCreate(), actor_id=creator_id)
