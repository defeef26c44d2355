from fastapi import APIRouter, Depends, Query
from typing import List
from uuid import UUID
from wayfarer_app.core.realtime.connection_manager import RealtimePublisher, get_publisher
from wayfarer_app.users.utils.get_current_user import get_current_user
from wayfarer_app.users.models.user_models import UserModel
from wayfarer_app.users.schemas.user_schemas import UserPublic
from wayfarer_app.social.schemas.social_schemas import (
    ConnectionResponse,
    ConnectionPage,
    ConnectionStatusResponse,
    FollowResponse,
    FollowPage,
    BlockResponse,
    BlockPage,
)
from wayfarer_app.social.utils import relations

router = APIRouter(
    prefix="/social",
    tags=["Social & Connections"]
)


# Connections

@router.post("/connections/{user_id}", response_model=ConnectionResponse, status_code=201)
async def send_connection_request(
    user_id: UUID,
    current_user: UserModel = Depends(get_current_user),
    publisher: RealtimePublisher = Depends(get_publisher),
):
    return await relations.add_connection(current_user.id, user_id, publisher)


@router.get("/connections", response_model=ConnectionPage)
async def get_my_connections(
    page: int = Query(1, ge=1),
    limit: int = Query(10, ge=1, le=100),
    current_user: UserModel = Depends(get_current_user),
):
    return await relations.get_my_connections(current_user.id, page, limit)


@router.get("/connections/requests", response_model=ConnectionPage)
async def get_incoming_requests(
    page: int = Query(1, ge=1),
    limit: int = Query(10, ge=1, le=100),
    current_user: UserModel = Depends(get_current_user),
):
    return await relations.get_incoming_requests(current_user.id, page, limit)


@router.get("/connections/sent", response_model=ConnectionPage)
async def get_sent_requests(
    page: int = Query(1, ge=1),
    limit: int = Query(10, ge=1, le=100),
    current_user: UserModel = Depends(get_current_user),
):
    return await relations.get_sent_requests(current_user.id, page, limit)


@router.get("/connections/status/{user_id}", response_model=ConnectionStatusResponse)
async def check_connection_status(user_id: UUID, current_user: UserModel = Depends(get_current_user)):
    return {"status": await relations.check_connection_status(current_user.id, user_id)}


@router.get("/connections/mutual/{user_id}", response_model=List[UserPublic])
async def get_mutual_connections(user_id: UUID, current_user: UserModel = Depends(get_current_user)):
    return await relations.get_mutual_connections(current_user.id, user_id)


@router.patch("/connections/{connection_id}/accept", response_model=ConnectionResponse)
async def accept_connection(
    connection_id: UUID,
    current_user: UserModel = Depends(get_current_user),
    publisher: RealtimePublisher = Depends(get_publisher),
):
    return await relations.accept_connection(connection_id, current_user, publisher)


@router.patch("/connections/{connection_id}/decline", response_model=ConnectionResponse)
async def decline_connection(connection_id: UUID, current_user: UserModel = Depends(get_current_user)):
    return await relations.decline_connection(connection_id, current_user)


@router.delete("/connections/{connection_id}")
async def remove_connection(connection_id: UUID, current_user: UserModel = Depends(get_current_user)):
    return await relations.remove_connection(connection_id, current_user)


@router.delete("/connections/{connection_id}/cancel")
async def cancel_connection_request(connection_id: UUID, current_user: UserModel = Depends(get_current_user)):
    return await relations.cancel_request(connection_id, current_user)


# Followers

@router.post("/follow/{user_id}", response_model=FollowResponse, status_code=201)
async def follow_user(user_id: UUID, current_user: UserModel = Depends(get_current_user)):
    return await relations.follow_user(current_user.id, user_id)


@router.delete("/follow/{user_id}")
async def unfollow_user(user_id: UUID, current_user: UserModel = Depends(get_current_user)):
    return await relations.unfollow_user(current_user.id, user_id)


@router.get("/followers", response_model=FollowPage)
async def get_my_followers(
    page: int = Query(1, ge=1),
    limit: int = Query(10, ge=1, le=100),
    current_user: UserModel = Depends(get_current_user),
):
    return await relations.get_followers(current_user.id, page, limit)


@router.get("/following", response_model=FollowPage)
async def get_my_following(
    page: int = Query(1, ge=1),
    limit: int = Query(10, ge=1, le=100),
    current_user: UserModel = Depends(get_current_user),
):
    return await relations.get_following(current_user.id, page, limit)


# Blocks

@router.post("/block/{user_id}", response_model=BlockResponse, status_code=201)
async def block_user(user_id: UUID, current_user: UserModel = Depends(get_current_user)):
    return await relations.block_user(current_user.id, user_id)


@router.delete("/block/{user_id}")
async def unblock_user(user_id: UUID, current_user: UserModel = Depends(get_current_user)):
    return await relations.unblock_user(current_user.id, user_id)


@router.get("/blocked", response_model=BlockPage)
async def get_blocked_users(
    page: int = Query(1, ge=1),
    limit: int = Query(10, ge=1, le=100),
    current_user: UserModel = Depends(get_current_user),
):
    return await relations.get_blocked_users(current_user.id, page, limit)
