from fastapi import APIRouter, Depends, Query
from typing import List, Optional
from uuid import UUID
from wayfarer_app.core.realtime.connection_manager import RealtimePublisher, get_publisher
from wayfarer_app.users.utils.get_current_user import get_current_user
from wayfarer_app.users.models.user_models import UserModel
from wayfarer_app.communities.schemas.community_schemas import (
    EventCreate,
    EventResponse,
    EventPage,
    EventInviteCreate,
    EventInviteResponse,
    EventInvitePage,
)
from wayfarer_app.communities.utils import events as event_service

router = APIRouter(
    prefix="/events",
    tags=["Events"]
)


@router.post("/", response_model=EventResponse, status_code=201)
async def create_event(data: EventCreate, current_user: UserModel = Depends(get_current_user)):
    return await event_service.create_event(current_user, data)


@router.get("/mine", response_model=EventPage)
async def get_my_events(
    upcoming: Optional[bool] = None,
    page: int = Query(1, ge=1),
    limit: int = Query(10, ge=1, le=100),
    current_user: UserModel = Depends(get_current_user),
):
    return await event_service.get_my_events(current_user, upcoming, page, limit)


@router.get("/invites", response_model=EventInvitePage)
async def get_my_event_invites(
    page: int = Query(1, ge=1),
    limit: int = Query(10, ge=1, le=100),
    current_user: UserModel = Depends(get_current_user),
):
    return await event_service.get_my_invites(current_user, page, limit)


@router.patch("/invites/{invite_id}/accept", response_model=EventInviteResponse)
async def accept_event_invite(invite_id: UUID, current_user: UserModel = Depends(get_current_user)):
    return await event_service.accept_invite(invite_id, current_user)


@router.patch("/invites/{invite_id}/decline", response_model=EventInviteResponse)
async def decline_event_invite(invite_id: UUID, current_user: UserModel = Depends(get_current_user)):
    return await event_service.decline_invite(invite_id, current_user)


@router.delete("/invites/{invite_id}")
async def cancel_event_invite(invite_id: UUID, current_user: UserModel = Depends(get_current_user)):
    return await event_service.cancel_invite(invite_id, current_user)


@router.get("/{event_id}", response_model=EventResponse)
async def get_event(event_id: UUID, current_user: UserModel = Depends(get_current_user)):
    return await event_service.get_event(event_id, current_user)


@router.post("/{event_id}/join", response_model=EventResponse)
async def join_event(event_id: UUID, current_user: UserModel = Depends(get_current_user)):
    return await event_service.join_event(event_id, current_user)


@router.patch("/{event_id}/requests/{user_id}/approve", response_model=EventResponse)
async def approve_join(
    event_id: UUID,
    user_id: UUID,
    current_user: UserModel = Depends(get_current_user),
):
    return await event_service.approve_join(event_id, current_user, user_id)


@router.patch("/{event_id}/requests/{user_id}/reject", response_model=EventResponse)
async def reject_join(
    event_id: UUID,
    user_id: UUID,
    current_user: UserModel = Depends(get_current_user),
):
    return await event_service.reject_join(event_id, current_user, user_id)


@router.post("/{event_id}/invites", response_model=List[EventInviteResponse], status_code=201)
async def send_event_invites(
    event_id: UUID,
    data: EventInviteCreate,
    current_user: UserModel = Depends(get_current_user),
    publisher: RealtimePublisher = Depends(get_publisher),
):
    return await event_service.send_invites(event_id, current_user, data.to_users, publisher)


@router.post("/{event_id}/leave", response_model=EventResponse)
async def leave_event(event_id: UUID, current_user: UserModel = Depends(get_current_user)):
    return await event_service.leave_event(event_id, current_user)


@router.delete("/{event_id}")
async def delete_event(event_id: UUID, current_user: UserModel = Depends(get_current_user)):
    return await event_service.delete_event(event_id, current_user)
