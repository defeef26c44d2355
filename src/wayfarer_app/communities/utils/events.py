import logging
from typing import List, Optional
from uuid import UUID
from fastapi import HTTPException
from wayfarer_app.core.base.base import paginate, utc_now
from wayfarer_app.core.realtime.connection_manager import RealtimePublisher
from wayfarer_app.communities.models.community_models import (
    EventModel,
    EventInviteModel,
    CommunityPrivacy,
    InviteStatus,
)
from wayfarer_app.communities.schemas.community_schemas import EventCreate
from wayfarer_app.communities.utils.invites import get_invite_for_recipient, transition_invite, accept_into
from wayfarer_app.notifications.models import NotificationType
from wayfarer_app.notifications.utils import send_notification
from wayfarer_app.users.models.user_models import UserModel
from wayfarer_app.users.utils.user_lookup import load_users

logger = logging.getLogger(__name__)


async def get_live_event(event_id: UUID) -> EventModel:
    event = await EventModel.get(event_id)
    if not event or event.is_deleted:
        raise HTTPException(status_code=404, detail="Event not found")
    return event


def _ensure_host(event: EventModel, user_id: UUID):
    if not event.is_host(user_id):
        raise HTTPException(status_code=403, detail="Only the creator or co-hosts can manage this event")


async def create_event(creator: UserModel, data: EventCreate) -> EventModel:
    event = EventModel(
        name=data.name,
        description=data.description or "",
        event_image=data.event_image,
        privacy=data.privacy,
        start_date=data.start_date,
        end_date=data.end_date,
        location_name=data.location_name,
        creator_id=creator.id,
        interests=[creator.id],
    )
    await event.insert()
    logger.info(f"Event {event.id} created by {creator.id}")
    return event


async def get_event(event_id: UUID, viewer: UserModel) -> EventModel:
    event = await get_live_event(event_id)
    if event.privacy == CommunityPrivacy.PRIVATE and not (
        event.is_member(viewer.id) or viewer.id in event.pending_interests
    ):
        invited = await EventInviteModel.find_one(
            {"event_id": event.id, "to_user": viewer.id, "status": InviteStatus.PENDING.value}
        )
        if not invited:
            raise HTTPException(status_code=403, detail="Cannot access private event")
    return event


async def join_event(event_id: UUID, user: UserModel) -> EventModel:
    event = await get_live_event(event_id)
    if event.is_member(user.id):
        raise HTTPException(status_code=400, detail="You are already interested in this event")

    if event.privacy == CommunityPrivacy.PUBLIC:
        update = {"$addToSet": {"interests": user.id}}
    else:
        if user.id in event.pending_interests:
            raise HTTPException(status_code=400, detail="Join request already pending")
        update = {"$addToSet": {"pending_interests": user.id}}

    await EventModel.find_one({"_id": event.id}).update(update)
    return await EventModel.get(event.id)


async def approve_join(event_id: UUID, host: UserModel, user_id: UUID) -> EventModel:
    event = await get_live_event(event_id)
    _ensure_host(event, host.id)

    result = await EventModel.find_one({"_id": event.id, "pending_interests": user_id}).update(
        {"$pull": {"pending_interests": user_id}, "$addToSet": {"interests": user_id}}
    )
    if result.modified_count == 0:
        raise HTTPException(status_code=400, detail="No pending join request")
    return await EventModel.get(event.id)


async def reject_join(event_id: UUID, host: UserModel, user_id: UUID) -> EventModel:
    event = await get_live_event(event_id)
    _ensure_host(event, host.id)

    result = await EventModel.find_one({"_id": event.id, "pending_interests": user_id}).update(
        {"$pull": {"pending_interests": user_id}}
    )
    if result.modified_count == 0:
        raise HTTPException(status_code=400, detail="No pending join request")
    return await EventModel.get(event.id)


async def send_invites(
    event_id: UUID, sender: UserModel, to_user_ids: List[UUID], publisher: RealtimePublisher
) -> List[EventInviteModel]:
    """
    Invite several users at once.

    Users already in the event are skipped. A pending invite for the same
    user is returned as is, and a declined one is reopened, since the pair
    (event_id, to_user) holds at most one invite.
    """
    event = await get_live_event(event_id)
    if not event.is_member(sender.id):
        raise HTTPException(status_code=403, detail="Only interested users or hosts can send invites")

    targets = [uid for uid in dict.fromkeys(to_user_ids) if uid != sender.id]
    users = await load_users(targets)
    missing = [uid for uid in targets if uid not in users or users[uid].is_deleted]
    if missing:
        raise HTTPException(status_code=404, detail=f"Users not found: {', '.join(str(m) for m in missing)}")

    invites = []
    for uid in targets:
        if event.is_member(uid):
            continue

        invite = await EventInviteModel.find_one({"event_id": event.id, "to_user": uid})
        if invite and invite.status == InviteStatus.PENDING:
            invites.append(invite)
            continue

        if invite:
            invite.from_user = sender.id
            invite.status = InviteStatus.PENDING
            await invite.save()
        else:
            invite = EventInviteModel(from_user=sender.id, to_user=uid, event_id=event.id)
            await invite.insert()
        invites.append(invite)

        await send_notification(
            publisher,
            sender_id=sender.id,
            receiver_id=uid,
            type=NotificationType.EVENT,
            title="Event invitation",
            message=f"{sender.full_name or sender.user_name or 'Someone'} invited you to {event.name}",
            link_id=event.id,
            image=event.event_image,
        )

    return invites


async def accept_invite(invite_id: UUID, user: UserModel) -> EventInviteModel:
    invite = await get_invite_for_recipient(EventInviteModel, invite_id, user.id)
    await accept_into(invite, EventModel, invite.event_id, "interests", "pending_interests")
    return invite


async def decline_invite(invite_id: UUID, user: UserModel) -> EventInviteModel:
    invite = await get_invite_for_recipient(EventInviteModel, invite_id, user.id)
    await transition_invite(invite, InviteStatus.DECLINED)
    return invite


async def cancel_invite(invite_id: UUID, user: UserModel) -> dict:
    invite = await EventInviteModel.get(invite_id)
    if not invite:
        raise HTTPException(status_code=404, detail="Invite not found")

    event = await get_live_event(invite.event_id)
    if invite.from_user != user.id and not event.is_host(user.id):
        raise HTTPException(status_code=403, detail="You cannot cancel this invite")

    result = await EventInviteModel.find_one({"_id": invite.id, "status": InviteStatus.PENDING.value}).delete()
    if result.deleted_count == 0:
        raise HTTPException(status_code=409, detail="Only pending invites can be cancelled")
    return {"message": "Invite cancelled successfully"}


async def get_my_invites(user: UserModel, page: int = 1, limit: int = 10) -> dict:
    query = EventInviteModel.find({"to_user": user.id, "status": InviteStatus.PENDING.value})
    return await paginate(query, page, limit)


async def leave_event(event_id: UUID, user: UserModel) -> EventModel:
    event = await get_live_event(event_id)
    if event.creator_id == user.id:
        raise HTTPException(status_code=400, detail="Creator cannot leave the event")
    if not event.is_member(user.id):
        raise HTTPException(status_code=400, detail="You are not part of this event")

    await EventModel.find_one({"_id": event.id}).update({"$pull": {"interests": user.id, "co_hosts": user.id}})
    return await EventModel.get(event.id)


async def delete_event(event_id: UUID, user: UserModel) -> dict:
    event = await get_live_event(event_id)
    if event.creator_id != user.id:
        raise HTTPException(status_code=403, detail="Only the creator can delete the event")
    event.is_deleted = True
    await event.save()
    return {"message": "Event deleted successfully"}


async def get_my_events(user: UserModel, upcoming: Optional[bool] = None, page: int = 1, limit: int = 10) -> dict:
    query = {"interests": user.id, "is_deleted": {"$ne": True}}
    if upcoming:
        query["end_date"] = {"$gte": utc_now()}
    return await paginate(EventModel.find(query), page, limit, sort="start_date")
