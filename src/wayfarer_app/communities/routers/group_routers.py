from fastapi import APIRouter, Depends, Query
from typing import Optional
from uuid import UUID
from wayfarer_app.core.realtime.connection_manager import RealtimePublisher, get_publisher
from wayfarer_app.users.utils.get_current_user import get_current_user
from wayfarer_app.users.models.user_models import UserModel
from wayfarer_app.communities.schemas.community_schemas import (
    GroupCreate,
    GroupResponse,
    GroupPage,
    GroupInviteCreate,
    GroupInviteResponse,
    GroupInvitePage,
)
from wayfarer_app.communities.utils import groups as group_service

router = APIRouter(
    prefix="/groups",
    tags=["Groups"]
)


@router.post("/", response_model=GroupResponse, status_code=201)
async def create_group(data: GroupCreate, current_user: UserModel = Depends(get_current_user)):
    return await group_service.create_group(current_user, data)


@router.get("/mine", response_model=GroupPage)
async def get_my_groups(
    search: Optional[str] = None,
    page: int = Query(1, ge=1),
    limit: int = Query(10, ge=1, le=100),
    current_user: UserModel = Depends(get_current_user),
):
    return await group_service.get_my_groups(current_user, search, page, limit)


@router.get("/invites", response_model=GroupInvitePage)
async def get_my_group_invites(
    page: int = Query(1, ge=1),
    limit: int = Query(10, ge=1, le=100),
    current_user: UserModel = Depends(get_current_user),
):
    return await group_service.get_my_invites(current_user, page, limit)


@router.patch("/invites/{invite_id}/accept", response_model=GroupInviteResponse)
async def accept_group_invite(invite_id: UUID, current_user: UserModel = Depends(get_current_user)):
    return await group_service.accept_invite(invite_id, current_user)


@router.patch("/invites/{invite_id}/decline", response_model=GroupInviteResponse)
async def decline_group_invite(invite_id: UUID, current_user: UserModel = Depends(get_current_user)):
    return await group_service.decline_invite(invite_id, current_user)


@router.get("/{group_id}", response_model=GroupResponse)
async def get_group(group_id: UUID, current_user: UserModel = Depends(get_current_user)):
    return await group_service.get_group(group_id, current_user)


@router.post("/{group_id}/join", response_model=GroupResponse)
async def join_group(group_id: UUID, current_user: UserModel = Depends(get_current_user)):
    return await group_service.join_group(group_id, current_user)


@router.patch("/{group_id}/requests/{user_id}/approve", response_model=GroupResponse)
async def approve_join_request(
    group_id: UUID,
    user_id: UUID,
    current_user: UserModel = Depends(get_current_user),
):
    return await group_service.approve_join_request(group_id, current_user, user_id)


@router.post("/{group_id}/invites", response_model=GroupInviteResponse, status_code=201)
async def send_group_invite(
    group_id: UUID,
    data: GroupInviteCreate,
    current_user: UserModel = Depends(get_current_user),
    publisher: RealtimePublisher = Depends(get_publisher),
):
    return await group_service.send_invite(group_id, current_user, data.to_user, publisher)


@router.post("/{group_id}/leave", response_model=GroupResponse)
async def leave_group(group_id: UUID, current_user: UserModel = Depends(get_current_user)):
    return await group_service.leave_group(group_id, current_user)


@router.delete("/{group_id}")
async def delete_group(group_id: UUID, current_user: UserModel = Depends(get_current_user)):
    return await group_service.delete_group(group_id, current_user)
