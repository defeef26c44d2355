import logging
from typing import List, Optional
from uuid import UUID
from fastapi import HTTPException
from pymongo.errors import DuplicateKeyError
from wayfarer_app.core.realtime.connection_manager import RealtimePublisher
from wayfarer_app.chating.models.chat_model import ChatModel, ChatType, MessageModel, MessageContent
from wayfarer_app.notifications.models import NotificationModel, NotificationType
from wayfarer_app.social.utils.graph import is_blocked_between
from wayfarer_app.users.models.user_models import UserModel

logger = logging.getLogger(__name__)


async def resolve_single_chat(sender_id: UUID, receiver_id: UUID) -> ChatModel:
    """Return the live single chat between exactly these two users, creating it if needed."""
    receiver = await UserModel.get(receiver_id)
    if not receiver or receiver.is_deleted:
        raise HTTPException(status_code=404, detail="Receiver user not found")

    chat = await ChatModel.find_one(
        {
            "chat_type": ChatType.SINGLE.value,
            "participants": {"$all": [sender_id, receiver_id], "$size": 2},
            "is_deleted": {"$ne": True},
        }
    )
    if chat:
        return chat

    chat = ChatModel(chat_type=ChatType.SINGLE, participants=[sender_id, receiver_id])
    await chat.insert()
    logger.info(f"Single chat {chat.id} created for {sender_id} and {receiver_id}")
    return chat


async def _chat_for_sender(chat_id: UUID, sender_id: UUID) -> ChatModel:
    chat = await ChatModel.get(chat_id)
    if not chat or chat.is_deleted or sender_id not in chat.participants:
        raise HTTPException(status_code=404, detail="Chat not found")
    return chat


async def _advance_chat_pointer(chat: ChatModel, message: MessageModel):
    # Only ever moves forward, so an older message landing late is a no-op
    await ChatModel.find_one(
        {
            "_id": chat.id,
            "$or": [
                {"last_message_at": None},
                {"last_message_at": {"$lte": message.created_at}},
            ],
        }
    ).update(
        {
            "$set": {
                "last_message_id": message.id,
                "last_message_at": message.created_at,
                "updated_at": message.created_at,
            }
        }
    )


async def ensure_message_notification(sender: UserModel, receiver_id: UUID, message: MessageModel) -> bool:
    """
    Keep at most one unread message notification per sender/receiver pair.

    The partial unique index does the de-duplication: a conflicting insert
    means the receiver already has one waiting. Returns True when a new
    notification was stored.
    """
    notification = NotificationModel(
        sender_id=sender.id,
        receiver_id=receiver_id,
        type=NotificationType.MESSAGE,
        title="New message",
        message=f"{sender.full_name or sender.user_name or 'Someone'} sent you a message",
        image=sender.profile_image,
        link_id=message.chat_id,
    )
    try:
        await notification.insert()
    except DuplicateKeyError:
        return False
    return True


async def _deliver_to(
    receiver_id: UUID,
    sender: UserModel,
    chat: ChatModel,
    message: MessageModel,
    publisher: RealtimePublisher,
):
    room = str(receiver_id)
    await publisher.publish(room, "new-message", message)
    await publisher.publish(room, "new-chat", chat)

    receiver = await UserModel.get(receiver_id)
    if receiver and receiver.is_online and receiver.is_in_message_box:
        await MessageModel.find_one({"_id": message.id}).update({"$addToSet": {"seen_by": receiver_id}})
        if receiver_id not in message.seen_by:
            message.seen_by.append(receiver_id)
        await publisher.publish(str(sender.id), f"message-seen::{chat.id}", message)
    else:
        await ensure_message_notification(sender, receiver_id, message)


async def send_message(
    sender: UserModel,
    receiver_id: Optional[UUID],
    content: MessageContent,
    publisher: RealtimePublisher,
    chat_id: Optional[UUID] = None,
    story_media_id: Optional[UUID] = None,
) -> MessageModel:
    if chat_id is not None:
        chat = await _chat_for_sender(chat_id, sender.id)
    elif receiver_id is not None:
        chat = await resolve_single_chat(sender.id, receiver_id)
    else:
        raise HTTPException(status_code=400, detail="Either receiver_id or chat_id is required")

    if chat.chat_type == ChatType.SINGLE:
        if receiver_id is None:
            receiver_id = next((p for p in chat.participants if p != sender.id), None)
        if receiver_id not in chat.participants:
            raise HTTPException(status_code=400, detail="Receiver is not part of this chat")
        if await is_blocked_between(sender.id, receiver_id):
            raise HTTPException(status_code=403, detail="You cannot message this user")
        recipients: List[UUID] = [receiver_id]
    else:
        recipients = [p for p in chat.participants if p != sender.id]

    message = MessageModel(
        chat_id=chat.id,
        sender_id=sender.id,
        receiver_id=receiver_id if chat.chat_type == ChatType.SINGLE else None,
        content=content,
        story_media_id=story_media_id,
    )
    await message.insert()
    await _advance_chat_pointer(chat, message)
    chat.last_message_id = message.id
    chat.last_message_at = message.created_at

    for recipient in recipients:
        await _deliver_to(recipient, sender, chat, message, publisher)

    return message
