import re
import logging
from typing import Optional
from uuid import UUID
from fastapi import HTTPException
from wayfarer_app.core.base.base import paginate
from wayfarer_app.core.realtime.connection_manager import RealtimePublisher
from wayfarer_app.communities.models.community_models import (
    GroupModel,
    GroupInviteModel,
    CommunityPrivacy,
    InviteStatus,
)
from wayfarer_app.communities.schemas.community_schemas import GroupCreate
from wayfarer_app.communities.utils.invites import get_invite_for_recipient, transition_invite, accept_into
from wayfarer_app.notifications.models import NotificationType
from wayfarer_app.notifications.utils import send_notification
from wayfarer_app.users.models.user_models import UserModel
from wayfarer_app.users.utils.user_lookup import get_live_user

logger = logging.getLogger(__name__)


async def get_live_group(group_id: UUID) -> GroupModel:
    group = await GroupModel.get(group_id)
    if not group or group.is_deleted:
        raise HTTPException(status_code=404, detail="Group not found")
    return group


async def create_group(creator: UserModel, data: GroupCreate) -> GroupModel:
    group = GroupModel(
        name=data.name,
        description=data.description or "",
        group_image=data.group_image,
        privacy=data.privacy,
        creator_id=creator.id,
        members=[creator.id],
    )
    await group.insert()
    logger.info(f"Group {group.id} created by {creator.id}")
    return group


async def get_group(group_id: UUID, viewer: UserModel) -> GroupModel:
    group = await get_live_group(group_id)
    if group.privacy == CommunityPrivacy.PRIVATE and not (
        group.is_member(viewer.id) or viewer.id in group.pending_requests
    ):
        invited = await GroupInviteModel.find_one(
            {"group_id": group.id, "to_user": viewer.id, "status": InviteStatus.PENDING.value}
        )
        if not invited:
            raise HTTPException(status_code=403, detail="Cannot access private group")
    return group


async def join_group(group_id: UUID, user: UserModel) -> GroupModel:
    group = await get_live_group(group_id)
    if group.is_member(user.id):
        raise HTTPException(status_code=400, detail="You are already a member")

    if group.privacy == CommunityPrivacy.PUBLIC:
        update = {"$addToSet": {"members": user.id}}
    else:
        if user.id in group.pending_requests:
            raise HTTPException(status_code=400, detail="Join request already pending")
        update = {"$addToSet": {"pending_requests": user.id}}

    await GroupModel.find_one({"_id": group.id}).update(update)
    return await GroupModel.get(group.id)


async def approve_join_request(group_id: UUID, leader: UserModel, user_id: UUID) -> GroupModel:
    group = await get_live_group(group_id)
    if not group.is_leader(leader.id):
        raise HTTPException(status_code=403, detail="Only the creator or co-leaders can approve requests")

    result = await GroupModel.find_one({"_id": group.id, "pending_requests": user_id}).update(
        {"$pull": {"pending_requests": user_id}, "$addToSet": {"members": user_id}}
    )
    if result.modified_count == 0:
        raise HTTPException(status_code=400, detail="No pending join request")
    return await GroupModel.get(group.id)


async def send_invite(
    group_id: UUID, sender: UserModel, to_user_id: UUID, publisher: RealtimePublisher
) -> GroupInviteModel:
    group = await get_live_group(group_id)
    await get_live_user(to_user_id)

    if not group.is_member(sender.id):
        raise HTTPException(status_code=403, detail="Only members can send invites")
    if group.is_member(to_user_id):
        raise HTTPException(status_code=400, detail="User is already a member")

    existing = await GroupInviteModel.find_one(
        {"group_id": group.id, "to_user": to_user_id, "status": InviteStatus.PENDING.value}
    )
    if existing:
        raise HTTPException(status_code=400, detail="Invite already sent")

    invite = GroupInviteModel(from_user=sender.id, to_user=to_user_id, group_id=group.id)
    await invite.insert()

    await send_notification(
        publisher,
        sender_id=sender.id,
        receiver_id=to_user_id,
        type=NotificationType.GROUP,
        title="Group invitation",
        message=f"{sender.full_name or sender.user_name or 'Someone'} invited you to join {group.name}",
        link_id=group.id,
        image=group.group_image,
    )
    return invite


async def accept_invite(invite_id: UUID, user: UserModel) -> GroupInviteModel:
    invite = await get_invite_for_recipient(GroupInviteModel, invite_id, user.id)
    await accept_into(invite, GroupModel, invite.group_id, "members", "pending_requests")
    return invite


async def decline_invite(invite_id: UUID, user: UserModel) -> GroupInviteModel:
    invite = await get_invite_for_recipient(GroupInviteModel, invite_id, user.id)
    await transition_invite(invite, InviteStatus.DECLINED)
    return invite


async def get_my_invites(user: UserModel, page: int = 1, limit: int = 10) -> dict:
    query = GroupInviteModel.find({"to_user": user.id, "status": InviteStatus.PENDING.value})
    return await paginate(query, page, limit)


async def leave_group(group_id: UUID, user: UserModel) -> GroupModel:
    group = await get_live_group(group_id)
    if group.creator_id == user.id:
        raise HTTPException(status_code=400, detail="Creator cannot leave the group")
    if not group.is_member(user.id):
        raise HTTPException(status_code=400, detail="You are not a member of this group")

    await GroupModel.find_one({"_id": group.id}).update({"$pull": {"members": user.id, "co_leaders": user.id}})
    return await GroupModel.get(group.id)


async def delete_group(group_id: UUID, user: UserModel) -> dict:
    group = await get_live_group(group_id)
    if group.creator_id != user.id:
        raise HTTPException(status_code=403, detail="Only the creator can delete the group")
    group.is_deleted = True
    await group.save()
    return {"message": "Group deleted successfully"}


async def get_my_groups(user: UserModel, search: Optional[str] = None, page: int = 1, limit: int = 10) -> dict:
    query = {"members": user.id, "is_deleted": {"$ne": True}}
    if search:
        query["name"] = {"$regex": re.escape(search), "$options": "i"}
    return await paginate(GroupModel.find(query), page, limit, sort="-updated_at")
