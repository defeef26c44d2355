import logging
from datetime import timedelta
from fastapi import APIRouter, Depends, HTTPException
from uuid import UUID
from wayfarer_app.core.base.base import utc_now
from wayfarer_app.users.utils.get_current_user import get_admin_user
from wayfarer_app.users.utils.ban_expiry import auto_unban_users
from wayfarer_app.users.utils.user_role import UserRole
from wayfarer_app.users.models.user_models import UserModel
from wayfarer_app.users.schemas.user_schemas import UserResponse, BanRequest, SweepResult

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/admin", tags=["Admin"])


@router.post("/users/{user_id}/ban", response_model=UserResponse)
async def ban_user(user_id: UUID, data: BanRequest, admin: UserModel = Depends(get_admin_user)):
    user = await UserModel.get(user_id)
    if not user or user.is_deleted:
        raise HTTPException(status_code=404, detail="User not found")
    if user.role == UserRole.ADMIN:
        raise HTTPException(status_code=400, detail="Admins cannot be banned")

    ban_until = data.ban_until
    if data.days is not None:
        ban_until = utc_now() + timedelta(days=data.days)
    elif ban_until.tzinfo is not None:
        ban_until = ban_until.replace(tzinfo=None) - ban_until.utcoffset()

    if ban_until <= utc_now():
        raise HTTPException(status_code=400, detail="ban_until must be in the future")

    user.is_banned = True
    user.ban_until = ban_until
    user.is_online = False
    await user.save()
    logger.info(f"Admin {admin.id} banned {user.id} until {ban_until.isoformat()}")
    return user


@router.post("/users/{user_id}/unban", response_model=UserResponse)
async def unban_user(user_id: UUID, admin: UserModel = Depends(get_admin_user)):
    user = await UserModel.get(user_id)
    if not user:
        raise HTTPException(status_code=404, detail="User not found")
    if not user.is_banned:
        raise HTTPException(status_code=400, detail="User is not banned")

    user.is_banned = False
    user.ban_until = None
    await user.save()
    logger.info(f"Admin {admin.id} unbanned {user.id}")
    return user


@router.post("/bans/sweep", response_model=SweepResult)
async def run_ban_sweep(admin: UserModel = Depends(get_admin_user)):
    return {"unbanned": await auto_unban_users()}
