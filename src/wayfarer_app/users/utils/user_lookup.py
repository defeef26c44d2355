from typing import Dict, Iterable
from uuid import UUID
from fastapi import HTTPException
from wayfarer_app.users.models.user_models import UserModel


async def load_users(user_ids: Iterable[UUID]) -> Dict[UUID, UserModel]:
    ids = list({uid for uid in user_ids if uid is not None})
    if not ids:
        return {}
    users = await UserModel.find({"_id": {"$in": ids}}).to_list()
    return {user.id: user for user in users}


async def get_live_user(user_id: UUID, detail: str = "User not found") -> UserModel:
    user = await UserModel.get(user_id)
    if not user or user.is_deleted:
        raise HTTPException(status_code=404, detail=detail)
    return user
