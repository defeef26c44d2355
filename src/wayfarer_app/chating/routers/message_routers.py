from fastapi import APIRouter, Depends, Query
from uuid import UUID
from wayfarer_app.core.realtime.connection_manager import RealtimePublisher, get_publisher
from wayfarer_app.users.utils.get_current_user import get_current_user
from wayfarer_app.users.models.user_models import UserModel
from wayfarer_app.chating.schemas.chat import MessageSend, MessageResponse, MessagePage
from wayfarer_app.chating.utils import chats as chat_service
from wayfarer_app.chating.utils.delivery import send_message

router = APIRouter(prefix="/messages", tags=["Messages"])


@router.post("/", response_model=MessageResponse, status_code=201)
async def send(
    data: MessageSend,
    current_user: UserModel = Depends(get_current_user),
    publisher: RealtimePublisher = Depends(get_publisher),
):
    return await send_message(current_user, data.receiver_id, data.content, publisher, chat_id=data.chat_id)


@router.get("/chat/{chat_id}", response_model=MessagePage)
async def get_chat_messages(
    chat_id: UUID,
    page: int = Query(1, ge=1),
    limit: int = Query(20, ge=1, le=100),
    current_user: UserModel = Depends(get_current_user),
):
    return await chat_service.get_chat_messages(chat_id, current_user, page, limit)


@router.get("/with/{user_id}", response_model=MessagePage)
async def get_messages_with_user(
    user_id: UUID,
    page: int = Query(1, ge=1),
    limit: int = Query(20, ge=1, le=100),
    current_user: UserModel = Depends(get_current_user),
):
    return await chat_service.get_messages_between(current_user, user_id, page, limit)


@router.patch("/{message_id}/seen", response_model=MessageResponse)
async def mark_seen(message_id: UUID, current_user: UserModel = Depends(get_current_user)):
    return await chat_service.mark_seen(message_id, current_user)


@router.patch("/{message_id}/delete", response_model=MessageResponse)
async def mark_deleted(
    message_id: UUID,
    current_user: UserModel = Depends(get_current_user),
    publisher: RealtimePublisher = Depends(get_publisher),
):
    return await chat_service.mark_deleted(message_id, current_user, publisher)


@router.patch("/{message_id}/unsend", response_model=MessageResponse)
async def mark_unsent(
    message_id: UUID,
    current_user: UserModel = Depends(get_current_user),
    publisher: RealtimePublisher = Depends(get_publisher),
):
    return await chat_service.mark_unsent(message_id, current_user, publisher)
