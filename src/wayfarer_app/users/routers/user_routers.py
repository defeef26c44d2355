from fastapi import APIRouter, Depends, HTTPException
from uuid import UUID
from wayfarer_app.users.utils.get_current_user import get_current_user
from wayfarer_app.users.models.user_models import UserModel
from wayfarer_app.users.schemas.user_schemas import UserResponse, UserPublic, UserUpdate
from wayfarer_app.social.utils.graph import is_blocked_between

user_router = APIRouter(prefix="/users", tags=["Users"])


@user_router.get("/me", response_model=UserResponse)
async def get_me(current_user: UserModel = Depends(get_current_user)):
    return current_user


@user_router.patch("/me", response_model=UserResponse)
async def update_me(data: UserUpdate, current_user: UserModel = Depends(get_current_user)):
    update_data = data.model_dump(exclude_unset=True)
    for key, value in update_data.items():
        setattr(current_user, key, value)
    await current_user.save()
    return current_user


@user_router.get("/{user_id}", response_model=UserPublic)
async def get_user_profile(user_id: UUID, current_user: UserModel = Depends(get_current_user)):
    user = await UserModel.get(user_id)
    if not user or user.is_deleted:
        raise HTTPException(status_code=404, detail="User not found")
    if user.id != current_user.id and await is_blocked_between(current_user.id, user.id):
        raise HTTPException(status_code=404, detail="User not found")
    return user
