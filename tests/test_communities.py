from datetime import timedelta

import pytest
from fastapi import HTTPException

from wayfarer_app.core.base.base import utc_now
from wayfarer_app.communities.models.community_models import (
    CommunityPrivacy,
    EventInviteModel,
    EventModel,
    GroupInviteModel,
    GroupModel,
    InviteStatus,
)
from wayfarer_app.communities.schemas.community_schemas import EventCreate, GroupCreate
from wayfarer_app.communities.utils import events as event_service
from wayfarer_app.communities.utils import groups as group_service
from wayfarer_app.communities.utils.invites import accept_into
from wayfarer_app.notifications.models import NotificationModel, NotificationType


def event_payload(**fields):
    start = utc_now() + timedelta(days=3)
    fields.setdefault("name", "Night market walk")
    return EventCreate(start_date=start, end_date=start + timedelta(hours=3), **fields)


async def test_public_group_join_and_private_group_request(make_user):
    leader, hiker = await make_user(), await make_user()
    public = await group_service.create_group(leader, GroupCreate(name="Open trails"))
    private = await group_service.create_group(leader, GroupCreate(name="Summit crew", privacy=CommunityPrivacy.PRIVATE))

    joined = await group_service.join_group(public.id, hiker)
    assert hiker.id in joined.members

    queued = await group_service.join_group(private.id, hiker)
    assert hiker.id in queued.pending_requests
    assert hiker.id not in queued.members

    approved = await group_service.approve_join_request(private.id, leader, hiker.id)
    assert hiker.id in approved.members
    assert hiker.id not in approved.pending_requests


async def test_only_leaders_approve_requests(make_user):
    leader, member, applicant = await make_user(), await make_user(), await make_user()
    group = await group_service.create_group(leader, GroupCreate(name="Closed", privacy=CommunityPrivacy.PRIVATE))
    await GroupModel.find_one({"_id": group.id}).update({"$push": {"members": member.id}})
    await group_service.join_group(group.id, applicant)

    with pytest.raises(HTTPException) as exc:
        await group_service.approve_join_request(group.id, member, applicant.id)
    assert exc.value.status_code == 403


async def test_group_invite_accepted_twice_fails_without_duplicating_membership(make_user, publisher):
    leader, guest = await make_user(), await make_user()
    group = await group_service.create_group(leader, GroupCreate(name="Backpackers", privacy=CommunityPrivacy.PRIVATE))

    invite = await group_service.send_invite(group.id, leader, guest.id, publisher)
    notification = await NotificationModel.find_one({"receiver_id": guest.id})
    assert notification.type == NotificationType.GROUP

    accepted = await group_service.accept_invite(invite.id, guest)
    assert accepted.status == InviteStatus.ACCEPTED

    with pytest.raises(HTTPException) as exc:
        await group_service.accept_invite(invite.id, guest)
    assert exc.value.status_code == 409

    stored = await GroupModel.get(group.id)
    assert stored.members.count(guest.id) == 1


async def test_stale_accept_loses_the_race(make_user, publisher):
    leader, guest = await make_user(), await make_user()
    group = await group_service.create_group(leader, GroupCreate(name="Racers"))
    invite = await group_service.send_invite(group.id, leader, guest.id, publisher)
    stale = await GroupInviteModel.get(invite.id)

    await group_service.accept_invite(invite.id, guest)

    with pytest.raises(HTTPException) as exc:
        await accept_into(stale, GroupModel, group.id, "members", "pending_requests")
    assert exc.value.status_code == 409
    assert (await GroupModel.get(group.id)).members.count(guest.id) == 1


async def test_accept_after_decline_leaves_membership_untouched(make_user, publisher):
    leader, guest = await make_user(), await make_user()
    group = await group_service.create_group(leader, GroupCreate(name="Changed minds"))
    invite = await group_service.send_invite(group.id, leader, guest.id, publisher)
    stale = await GroupInviteModel.get(invite.id)

    await group_service.decline_invite(invite.id, guest)

    with pytest.raises(HTTPException) as exc:
        await accept_into(stale, GroupModel, group.id, "members", "pending_requests")
    assert exc.value.status_code == 409
    assert guest.id not in (await GroupModel.get(group.id)).members
    assert (await GroupInviteModel.get(invite.id)).status == InviteStatus.DECLINED


async def test_group_search_treats_input_literally(make_user):
    leader = await make_user()
    await group_service.create_group(leader, GroupCreate(name="Trip (2024) crew"))
    await group_service.create_group(leader, GroupCreate(name="Trip 2024"))

    result = await group_service.get_my_groups(leader, search="Trip (2024")
    assert [g.name for g in result["results"]] == ["Trip (2024) crew"]

    assert (await group_service.get_my_groups(leader, search=".*"))["total_results"] == 0


async def test_group_search_route_accepts_regex_characters(make_user, client_as):
    leader = await make_user()
    await group_service.create_group(leader, GroupCreate(name="Trip (2024) crew"))

    async with client_as(leader) as client:
        response = await client.get("/api/v1/groups/mine", params={"search": "Trip (2024"})

    assert response.status_code == 200
    assert response.json()["total_results"] == 1


async def test_invite_is_for_its_recipient_only(make_user, publisher):
    leader, guest, other = await make_user(), await make_user(), await make_user()
    group = await group_service.create_group(leader, GroupCreate(name="Mine"))
    invite = await group_service.send_invite(group.id, leader, guest.id, publisher)

    with pytest.raises(HTTPException) as exc:
        await group_service.decline_invite(invite.id, other)
    assert exc.value.status_code == 403


async def test_group_invite_rules(make_user, publisher):
    leader, guest, outsider = await make_user(), await make_user(), await make_user()
    group = await group_service.create_group(leader, GroupCreate(name="Rules"))
    await group_service.send_invite(group.id, leader, guest.id, publisher)

    with pytest.raises(HTTPException) as exc:
        await group_service.send_invite(group.id, leader, guest.id, publisher)
    assert exc.value.status_code == 400

    with pytest.raises(HTTPException) as exc:
        await group_service.send_invite(group.id, outsider, guest.id, publisher)
    assert exc.value.status_code == 403


async def test_creator_cannot_leave_and_private_group_is_hidden(make_user):
    leader, stranger = await make_user(), await make_user()
    group = await group_service.create_group(leader, GroupCreate(name="Secret", privacy=CommunityPrivacy.PRIVATE))

    with pytest.raises(HTTPException) as exc:
        await group_service.leave_group(group.id, leader)
    assert exc.value.status_code == 400

    with pytest.raises(HTTPException) as exc:
        await group_service.get_group(group.id, stranger)
    assert exc.value.status_code == 403


async def test_event_invites_reuse_pending_and_reopen_declined(make_user, publisher):
    host, guest = await make_user(), await make_user()
    event = await event_service.create_event(host, event_payload())

    first = await event_service.send_invites(event.id, host, [guest.id], publisher)
    again = await event_service.send_invites(event.id, host, [guest.id], publisher)
    assert first[0].id == again[0].id
    assert await EventInviteModel.find({"event_id": event.id}).count() == 1

    await event_service.decline_invite(first[0].id, guest)
    reopened = await event_service.send_invites(event.id, host, [guest.id], publisher)
    assert reopened[0].id == first[0].id
    assert reopened[0].status == InviteStatus.PENDING

    await event_service.accept_invite(first[0].id, guest)
    stored = await EventModel.get(event.id)
    assert guest.id in stored.interests


async def test_event_invite_accepted_twice_is_409(make_user, publisher):
    host, guest = await make_user(), await make_user()
    event = await event_service.create_event(host, event_payload(privacy=CommunityPrivacy.PRIVATE))
    [invite] = await event_service.send_invites(event.id, host, [guest.id], publisher)

    await event_service.accept_invite(invite.id, guest)
    with pytest.raises(HTTPException) as exc:
        await event_service.accept_invite(invite.id, guest)
    assert exc.value.status_code == 409
    assert (await EventModel.get(event.id)).interests.count(guest.id) == 1


async def test_event_join_requests_and_cancel(make_user, publisher):
    host, applicant, guest = await make_user(), await make_user(), await make_user()
    event = await event_service.create_event(host, event_payload(privacy=CommunityPrivacy.PRIVATE))

    await event_service.join_event(event.id, applicant)
    rejected = await event_service.reject_join(event.id, host, applicant.id)
    assert applicant.id not in rejected.pending_interests
    assert applicant.id not in rejected.interests

    [invite] = await event_service.send_invites(event.id, host, [guest.id], publisher)
    await event_service.cancel_invite(invite.id, host)
    assert await EventInviteModel.get(invite.id) is None


def test_event_dates_must_be_ordered():
    start = utc_now()
    with pytest.raises(ValueError):
        EventCreate(name="Backwards", start_date=start, end_date=start - timedelta(hours=1))


async def test_group_routes_end_to_end(make_user, client_as):
    leader, guest = await make_user(), await make_user()

    async with client_as(leader) as client:
        created = await client.post("/api/v1/groups/", json={"name": "Cyclists"})
        group_id = created.json()["id"]
        invite = await client.post(f"/api/v1/groups/{group_id}/invites", json={"to_user": str(guest.id)})
    assert created.status_code == 201
    assert invite.status_code == 201

    async with client_as(guest) as client:
        pending = await client.get("/api/v1/groups/invites")
        accepted = await client.patch(f"/api/v1/groups/invites/{invite.json()['id']}/accept")
        again = await client.patch(f"/api/v1/groups/invites/{invite.json()['id']}/accept")

    assert pending.json()["total_results"] == 1
    assert accepted.status_code == 200
    assert accepted.json()["status"] == "accepted"
    assert again.status_code == 409
