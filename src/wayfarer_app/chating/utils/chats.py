import re
import logging
from typing import List, Optional
from uuid import UUID
from fastapi import HTTPException
from wayfarer_app.core.base.base import paginate
from wayfarer_app.core.realtime.connection_manager import RealtimePublisher
from wayfarer_app.chating.models.chat_model import ChatModel, ChatType, MessageModel
from wayfarer_app.users.models.user_models import UserModel
from wayfarer_app.users.utils.user_lookup import load_users

logger = logging.getLogger(__name__)


async def _populate_chats(chats: List[ChatModel]) -> List[dict]:
    users = await load_users(p for c in chats for p in c.participants)
    last_ids = [c.last_message_id for c in chats if c.last_message_id]
    last_messages = {}
    if last_ids:
        docs = await MessageModel.find({"_id": {"$in": last_ids}}).to_list()
        last_messages = {m.id: m for m in docs}
    return [
        {
            **chat.model_dump(),
            "participants": [users[p] for p in chat.participants if p in users],
            "last_message": last_messages.get(chat.last_message_id),
        }
        for chat in chats
    ]


async def get_chats(user: UserModel, search: Optional[str] = None, page: int = 1, limit: int = 10) -> dict:
    query = {"participants": user.id, "is_deleted": {"$ne": True}}

    if search:
        pattern = {"$regex": re.escape(search), "$options": "i"}
        matches = await UserModel.find({"full_name": pattern, "_id": {"$ne": user.id}}).to_list()
        name_filters = [{"participants": m.id} for m in matches]
        name_filters.append({"chat_name": pattern})
        query["$or"] = name_filters

    result = await paginate(ChatModel.find(query), page, limit, sort="-updated_at")
    result["results"] = await _populate_chats(result["results"])
    return result


async def get_chat_for_participant(chat_id: UUID, user_id: UUID) -> ChatModel:
    chat = await ChatModel.get(chat_id)
    if not chat or chat.is_deleted or user_id not in chat.participants:
        raise HTTPException(status_code=404, detail="Chat not found")
    return chat


async def get_chat(chat_id: UUID, user: UserModel) -> dict:
    chat = await get_chat_for_participant(chat_id, user.id)
    return (await _populate_chats([chat]))[0]


async def create_group_chat(
    admin: UserModel,
    chat_name: str,
    participant_ids: List[UUID],
    allow_members_to_add: bool = False,
    allow_members_to_remove: bool = False,
) -> dict:
    members = [pid for pid in dict.fromkeys(participant_ids) if pid != admin.id]
    found = await load_users(members)
    missing = [str(pid) for pid in members if pid not in found or found[pid].is_deleted]
    if missing:
        raise HTTPException(status_code=404, detail=f"Users not found: {', '.join(missing)}")
    if not members:
        raise HTTPException(status_code=400, detail="A group chat needs at least one other participant")

    chat = ChatModel(
        chat_type=ChatType.GROUP,
        chat_name=chat_name,
        participants=[admin.id] + members,
        group_admin=admin.id,
        allow_members_to_add=allow_members_to_add,
        allow_members_to_remove=allow_members_to_remove,
    )
    await chat.insert()
    return (await _populate_chats([chat]))[0]


def _group_only(chat: ChatModel):
    if chat.chat_type != ChatType.GROUP:
        raise HTTPException(status_code=400, detail="Only group chats have editable participants")


async def add_participants(chat_id: UUID, user: UserModel, user_ids: List[UUID]) -> dict:
    chat = await get_chat_for_participant(chat_id, user.id)
    _group_only(chat)
    if chat.group_admin != user.id and not chat.allow_members_to_add:
        raise HTTPException(status_code=403, detail="Only the group admin can add participants")

    found = await load_users(user_ids)
    missing = [str(uid) for uid in user_ids if uid not in found or found[uid].is_deleted]
    if missing:
        raise HTTPException(status_code=404, detail=f"Users not found: {', '.join(missing)}")

    await ChatModel.find_one({"_id": chat.id}).update(
        {"$addToSet": {"participants": {"$each": list(user_ids)}}}
    )
    chat = await ChatModel.get(chat.id)
    return (await _populate_chats([chat]))[0]


async def remove_participant(chat_id: UUID, user: UserModel, user_id: UUID) -> dict:
    chat = await get_chat_for_participant(chat_id, user.id)
    _group_only(chat)
    leaving = user_id == user.id
    if not leaving and chat.group_admin != user.id and not chat.allow_members_to_remove:
        raise HTTPException(status_code=403, detail="Only the group admin can remove participants")
    if user_id == chat.group_admin and not leaving:
        raise HTTPException(status_code=400, detail="The group admin cannot be removed")
    if user_id not in chat.participants:
        raise HTTPException(status_code=404, detail="User is not a participant")

    await ChatModel.find_one({"_id": chat.id}).update({"$pull": {"participants": user_id}})
    chat = await ChatModel.get(chat.id)
    return (await _populate_chats([chat]))[0]


async def delete_chat(chat_id: UUID, user: UserModel) -> dict:
    chat = await get_chat_for_participant(chat_id, user.id)
    if chat.chat_type == ChatType.GROUP and chat.group_admin != user.id:
        raise HTTPException(status_code=403, detail="Only the group admin can delete this chat")
    chat.is_deleted = True
    await chat.save()
    return {"message": "Chat deleted successfully"}


# Messages

async def _message_page(query: dict, user_id: UUID, page: int, limit: int) -> dict:
    query = {**query, "deleted_by": {"$ne": user_id}}
    result = await paginate(MessageModel.find(query), page, limit, sort="-created_at")
    # Newest page first, but each page reads oldest to newest
    result["results"] = list(reversed(result["results"]))
    return result


async def get_messages_between(user: UserModel, other_id: UUID, page: int = 1, limit: int = 20) -> dict:
    query = {
        "$or": [
            {"sender_id": user.id, "receiver_id": other_id},
            {"sender_id": other_id, "receiver_id": user.id},
        ]
    }
    return await _message_page(query, user.id, page, limit)


async def get_chat_messages(chat_id: UUID, user: UserModel, page: int = 1, limit: int = 20) -> dict:
    await get_chat_for_participant(chat_id, user.id)
    return await _message_page({"chat_id": chat_id}, user.id, page, limit)


async def _get_message_for_participant(message_id: UUID, user_id: UUID) -> MessageModel:
    message = await MessageModel.get(message_id)
    if not message:
        raise HTTPException(status_code=404, detail="Message not found")
    await get_chat_for_participant(message.chat_id, user_id)
    return message


async def mark_seen(message_id: UUID, user: UserModel) -> MessageModel:
    message = await _get_message_for_participant(message_id, user.id)
    await MessageModel.find_one({"_id": message.id}).update({"$addToSet": {"seen_by": user.id}})
    return await MessageModel.get(message.id)


async def mark_deleted(message_id: UUID, user: UserModel, publisher: RealtimePublisher) -> MessageModel:
    message = await _get_message_for_participant(message_id, user.id)
    await MessageModel.find_one({"_id": message.id}).update({"$addToSet": {"deleted_by": user.id}})
    message = await MessageModel.get(message.id)
    if message.receiver_id:
        await publisher.publish(
            str(message.receiver_id), f"{message.chat_id}::{message.receiver_id}", message
        )
    return message


async def mark_unsent(message_id: UUID, user: UserModel, publisher: RealtimePublisher) -> MessageModel:
    message = await _get_message_for_participant(message_id, user.id)
    if message.sender_id != user.id:
        raise HTTPException(status_code=403, detail="Only the sender can unsend a message")
    await MessageModel.find_one({"_id": message.id}).update({"$addToSet": {"unsent_by": user.id}})
    message = await MessageModel.get(message.id)
    if message.receiver_id:
        await publisher.publish(
            str(message.receiver_id), f"{message.chat_id}::{message.receiver_id}", message
        )
    return message
