from typing import Set, Tuple
from uuid import UUID
from fastapi import HTTPException
from wayfarer_app.social.models.social_models import (
    ConnectionModel,
    ConnectionStatus,
    FollowerModel,
    BlockedUserModel,
)
from wayfarer_app.users.models.user_models import UserModel
from wayfarer_app.users.utils.user_lookup import get_live_user


def _other_side(connection: ConnectionModel, user_id: UUID) -> UUID:
    return connection.received_by if connection.sent_by == user_id else connection.sent_by


async def accepted_connection_ids(user_id: UUID) -> Set[UUID]:
    connections = await ConnectionModel.find(
        {
            "$or": [{"sent_by": user_id}, {"received_by": user_id}],
            "status": ConnectionStatus.ACCEPTED.value,
        }
    ).to_list()
    return {_other_side(c, user_id) for c in connections}


async def followed_ids(user_id: UUID) -> Set[UUID]:
    follows = await FollowerModel.find({"follower_id": user_id}).to_list()
    return {f.followed_id for f in follows}


async def blocked_ids(blocker_id: UUID) -> Set[UUID]:
    blocks = await BlockedUserModel.find({"blocker_id": blocker_id}).to_list()
    return {b.blocked_id for b in blocks}


async def is_connected(a: UUID, b: UUID) -> bool:
    connection = await ConnectionModel.find_one(
        {
            "$or": [
                {"sent_by": a, "received_by": b},
                {"sent_by": b, "received_by": a},
            ],
            "status": ConnectionStatus.ACCEPTED.value,
        }
    )
    return connection is not None


async def follows(a: UUID, b: UUID) -> bool:
    return await FollowerModel.find_one({"follower_id": a, "followed_id": b}) is not None


async def is_blocked_between(a: UUID, b: UUID) -> bool:
    block = await BlockedUserModel.find_one(
        {
            "$or": [
                {"blocker_id": a, "blocked_id": b},
                {"blocker_id": b, "blocked_id": a},
            ]
        }
    )
    return block is not None


async def validate_users(a: UUID, b: UUID, action: str) -> Tuple[UserModel, UserModel]:
    """
    Common guard for any user-to-user action: both users exist and are not
    deleted, they differ, and neither has blocked the other.
    """
    if a == b:
        raise HTTPException(status_code=400, detail=f"You cannot {action.lower()} yourself")

    user1 = await get_live_user(a)
    user2 = await get_live_user(b)

    if await is_blocked_between(a, b):
        raise HTTPException(status_code=403, detail=f"Cannot {action.lower()}: a block exists between these users")

    return user1, user2
