from fastapi import APIRouter, Depends, Query
from typing import Optional
from uuid import UUID
from wayfarer_app.users.utils.get_current_user import get_current_user
from wayfarer_app.users.models.user_models import UserModel
from wayfarer_app.chating.schemas.chat import ChatResponse, ChatPage, GroupChatCreate, ParticipantsAdd
from wayfarer_app.chating.utils import chats as chat_service
from wayfarer_app.chating.utils.delivery import resolve_single_chat

router = APIRouter(prefix="/chats", tags=["Chats"])


@router.get("/", response_model=ChatPage)
async def get_my_chats(
    search: Optional[str] = None,
    page: int = Query(1, ge=1),
    limit: int = Query(10, ge=1, le=100),
    current_user: UserModel = Depends(get_current_user),
):
    return await chat_service.get_chats(current_user, search, page, limit)


@router.post("/single/{receiver_id}", response_model=ChatResponse)
async def open_single_chat(receiver_id: UUID, current_user: UserModel = Depends(get_current_user)):
    chat = await resolve_single_chat(current_user.id, receiver_id)
    return await chat_service.get_chat(chat.id, current_user)


@router.post("/group", response_model=ChatResponse, status_code=201)
async def create_group_chat(data: GroupChatCreate, current_user: UserModel = Depends(get_current_user)):
    return await chat_service.create_group_chat(
        current_user,
        data.chat_name,
        data.participant_ids,
        data.allow_members_to_add,
        data.allow_members_to_remove,
    )


@router.get("/{chat_id}", response_model=ChatResponse)
async def get_chat(chat_id: UUID, current_user: UserModel = Depends(get_current_user)):
    return await chat_service.get_chat(chat_id, current_user)


@router.post("/{chat_id}/participants", response_model=ChatResponse)
async def add_participants(chat_id: UUID, data: ParticipantsAdd, current_user: UserModel = Depends(get_current_user)):
    return await chat_service.add_participants(chat_id, current_user, data.user_ids)


@router.delete("/{chat_id}/participants/{user_id}", response_model=ChatResponse)
async def remove_participant(chat_id: UUID, user_id: UUID, current_user: UserModel = Depends(get_current_user)):
    return await chat_service.remove_participant(chat_id, current_user, user_id)


@router.delete("/{chat_id}")
async def delete_chat(chat_id: UUID, current_user: UserModel = Depends(get_current_user)):
    return await chat_service.delete_chat(chat_id, current_user)
