import logging
from typing import Optional
from uuid import UUID
from fastapi import HTTPException
from wayfarer_app.core.base.base import paginate
from wayfarer_app.core.realtime.connection_manager import RealtimePublisher
from wayfarer_app.notifications.models import NotificationType
from wayfarer_app.notifications.utils import send_notification
from wayfarer_app.social.models.social_models import (
    ConnectionModel,
    ConnectionStatus,
    FollowerModel,
    BlockedUserModel,
)
from wayfarer_app.social.utils.graph import validate_users, accepted_connection_ids
from wayfarer_app.users.models.user_models import UserModel
from wayfarer_app.users.utils.user_lookup import load_users, get_live_user

logger = logging.getLogger(__name__)


def _display_name(user: UserModel) -> str:
    return user.full_name or user.user_name or "Someone"


async def _with_users(page: dict, user_key) -> dict:
    """Swap each relation in `results` for a dict carrying the other user."""
    users = await load_users(user_key(r) for r in page["results"])
    page["results"] = [
        {**r.model_dump(), "user": users.get(user_key(r))}
        for r in page["results"]
    ]
    return page


# Connections

async def _get_connection(connection_id: UUID) -> ConnectionModel:
    connection = await ConnectionModel.get(connection_id)
    if not connection:
        raise HTTPException(status_code=404, detail="Connection not found")
    return connection


async def add_connection(sender_id: UUID, receiver_id: UUID, publisher: RealtimePublisher) -> ConnectionModel:
    sender, _ = await validate_users(sender_id, receiver_id, "Connect")

    existing = await ConnectionModel.find_one(
        {
            "$or": [
                {"sent_by": sender_id, "received_by": receiver_id},
                {"sent_by": receiver_id, "received_by": sender_id},
            ]
        }
    )
    if existing:
        raise HTTPException(status_code=400, detail=f"Connection already exists with status: {existing.status.value}")

    connection = ConnectionModel(sent_by=sender_id, received_by=receiver_id)
    await connection.insert()

    await send_notification(
        publisher,
        sender_id=sender_id,
        receiver_id=receiver_id,
        type=NotificationType.CONNECTION,
        title="New connection request",
        message=f"{_display_name(sender)} sent you a connection request",
        link_id=connection.id,
        image=sender.profile_image,
    )
    return connection


async def accept_connection(connection_id: UUID, user: UserModel, publisher: RealtimePublisher) -> ConnectionModel:
    connection = await _get_connection(connection_id)
    if connection.received_by != user.id:
        raise HTTPException(status_code=403, detail="You are not authorized to accept this connection")
    if connection.status != ConnectionStatus.PENDING:
        raise HTTPException(status_code=400, detail=f"Connection is already {connection.status.value}")

    connection.status = ConnectionStatus.ACCEPTED
    await connection.save()

    await send_notification(
        publisher,
        sender_id=user.id,
        receiver_id=connection.sent_by,
        type=NotificationType.CONNECTION,
        title="Connection accepted",
        message=f"{_display_name(user)} accepted your connection request",
        link_id=connection.id,
        image=user.profile_image,
    )
    return connection


async def decline_connection(connection_id: UUID, user: UserModel) -> ConnectionModel:
    connection = await _get_connection(connection_id)
    if connection.received_by != user.id:
        raise HTTPException(status_code=403, detail="You are not authorized to decline this connection")
    if connection.status != ConnectionStatus.PENDING:
        raise HTTPException(status_code=400, detail=f"Connection is already {connection.status.value}")

    connection.status = ConnectionStatus.DECLINED
    await connection.save()
    return connection


async def remove_connection(connection_id: UUID, user: UserModel) -> dict:
    connection = await _get_connection(connection_id)
    if user.id not in (connection.sent_by, connection.received_by):
        raise HTTPException(status_code=403, detail="You are not authorized to remove this connection")
    if connection.status != ConnectionStatus.ACCEPTED:
        raise HTTPException(status_code=400, detail="Only accepted connections can be removed")

    await connection.delete()
    return {"message": "Connection removed successfully"}


async def cancel_request(connection_id: UUID, user: UserModel) -> dict:
    connection = await _get_connection(connection_id)
    if connection.sent_by != user.id:
        raise HTTPException(status_code=403, detail="You are not authorized to cancel this request")
    if connection.status != ConnectionStatus.PENDING:
        raise HTTPException(status_code=400, detail="Only pending requests can be cancelled")

    await connection.delete()
    return {"message": "Connection request cancelled successfully"}


async def get_my_connections(user_id: UUID, page: int = 1, limit: int = 10) -> dict:
    query = ConnectionModel.find(
        {
            "$or": [{"sent_by": user_id}, {"received_by": user_id}],
            "status": ConnectionStatus.ACCEPTED.value,
        }
    )
    result = await paginate(query, page, limit, sort="-updated_at")
    return await _with_users(result, lambda c: c.received_by if c.sent_by == user_id else c.sent_by)


async def get_incoming_requests(user_id: UUID, page: int = 1, limit: int = 10) -> dict:
    query = ConnectionModel.find({"received_by": user_id, "status": ConnectionStatus.PENDING.value})
    result = await paginate(query, page, limit)
    return await _with_users(result, lambda c: c.sent_by)


async def get_sent_requests(user_id: UUID, page: int = 1, limit: int = 10) -> dict:
    query = ConnectionModel.find({"sent_by": user_id, "status": ConnectionStatus.PENDING.value})
    result = await paginate(query, page, limit)
    return await _with_users(result, lambda c: c.received_by)


async def check_connection_status(a: UUID, b: UUID) -> Optional[ConnectionStatus]:
    connection = await ConnectionModel.find_one(
        {
            "$or": [
                {"sent_by": a, "received_by": b},
                {"sent_by": b, "received_by": a},
            ]
        }
    )
    return connection.status if connection else None


async def get_mutual_connections(a: UUID, b: UUID) -> list:
    mutual = (await accepted_connection_ids(a)) & (await accepted_connection_ids(b))
    users = await load_users(mutual)
    return list(users.values())


# Followers

async def follow_user(follower_id: UUID, followed_id: UUID) -> FollowerModel:
    await validate_users(follower_id, followed_id, "Follow")

    if await FollowerModel.find_one({"follower_id": follower_id, "followed_id": followed_id}):
        raise HTTPException(status_code=400, detail="You are already following this user")

    follow = FollowerModel(follower_id=follower_id, followed_id=followed_id)
    await follow.insert()
    return follow


async def unfollow_user(follower_id: UUID, followed_id: UUID) -> dict:
    follow = await FollowerModel.find_one({"follower_id": follower_id, "followed_id": followed_id})
    if not follow:
        raise HTTPException(status_code=404, detail="You are not following this user")
    await follow.delete()
    return {"message": "Unfollowed successfully"}


async def get_followers(user_id: UUID, page: int = 1, limit: int = 10) -> dict:
    result = await paginate(FollowerModel.find({"followed_id": user_id}), page, limit)
    return await _with_users(result, lambda f: f.follower_id)


async def get_following(user_id: UUID, page: int = 1, limit: int = 10) -> dict:
    result = await paginate(FollowerModel.find({"follower_id": user_id}), page, limit)
    return await _with_users(result, lambda f: f.followed_id)


# Blocks

async def block_user(blocker_id: UUID, blocked_id: UUID) -> BlockedUserModel:
    if blocker_id == blocked_id:
        raise HTTPException(status_code=400, detail="You cannot block yourself")
    await get_live_user(blocked_id)

    if await BlockedUserModel.find_one({"blocker_id": blocker_id, "blocked_id": blocked_id}):
        raise HTTPException(status_code=400, detail="User is already blocked")

    block = BlockedUserModel(blocker_id=blocker_id, blocked_id=blocked_id)
    await block.insert()

    # A block severs every relation between the two users
    pair = [
        {"sent_by": blocker_id, "received_by": blocked_id},
        {"sent_by": blocked_id, "received_by": blocker_id},
    ]
    await ConnectionModel.find({"$or": pair}).delete()
    await FollowerModel.find(
        {
            "$or": [
                {"follower_id": blocker_id, "followed_id": blocked_id},
                {"follower_id": blocked_id, "followed_id": blocker_id},
            ]
        }
    ).delete()
    logger.info(f"User {blocker_id} blocked {blocked_id}")
    return block


async def unblock_user(blocker_id: UUID, blocked_id: UUID) -> dict:
    block = await BlockedUserModel.find_one({"blocker_id": blocker_id, "blocked_id": blocked_id})
    if not block:
        raise HTTPException(status_code=404, detail="Block relationship not found")
    await block.delete()
    return {"message": "User unblocked successfully"}


async def get_blocked_users(blocker_id: UUID, page: int = 1, limit: int = 10) -> dict:
    result = await paginate(BlockedUserModel.find({"blocker_id": blocker_id}), page, limit)
    return await _with_users(result, lambda b: b.blocked_id)
