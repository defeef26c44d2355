import logging
from typing import Optional
from uuid import UUID
from fastapi import HTTPException, status
from wayfarer_app.core.base.base import paginate
from wayfarer_app.core.realtime.connection_manager import RealtimePublisher, ADMIN_ROOM
from wayfarer_app.notifications.models import NotificationModel, NotificationType, NotificationRole
from wayfarer_app.users.models.user_models import UserModel
from wayfarer_app.users.utils.user_role import UserRole

logger = logging.getLogger(__name__)

ADMIN_NOTIFICATION_EVENT = "admin-notification"
MESSAGE_TYPE = NotificationType.MESSAGE.value


async def add_notification(notification: NotificationModel) -> NotificationModel:
    await notification.insert()
    return notification


async def add_custom_notification(
    event: str,
    notification: NotificationModel,
    receiver_id: Optional[UUID],
    publisher: RealtimePublisher,
) -> NotificationModel:
    """
    Persist first, then push. Admin-scoped notifications sent on the
    admin event go to the shared admin room, everything else is published
    as `<event>::<receiverId>` to the receiver's own room.
    """
    result = await add_notification(notification)
    payload = {
        "code": status.HTTP_200_OK,
        "message": notification.title or "New notification",
        "data": result,
    }

    if event == ADMIN_NOTIFICATION_EVENT and notification.role == NotificationRole.ADMIN:
        await publisher.publish(ADMIN_ROOM, ADMIN_NOTIFICATION_EVENT, payload)
    else:
        await publisher.publish(str(receiver_id), f"{event}::{receiver_id}", payload)
    return result


async def send_notification(
    publisher: RealtimePublisher,
    *,
    sender_id: Optional[UUID],
    receiver_id: UUID,
    type: NotificationType,
    title: str,
    message: str,
    link_id: Optional[UUID] = None,
    image: Optional[str] = None,
) -> NotificationModel:
    """Shorthand for the common user-to-user case, emitted as a `notification` event."""
    notification = NotificationModel(
        sender_id=sender_id,
        receiver_id=receiver_id,
        type=type,
        title=title,
        message=message,
        link_id=link_id,
        image=image,
    )
    return await add_custom_notification("notification", notification, receiver_id, publisher)


async def get_all_notifications(receiver_id: UUID, page: int = 1, limit: int = 10) -> dict:
    query = NotificationModel.find({"receiver_id": receiver_id, "type": {"$ne": MESSAGE_TYPE}})
    result = await paginate(query, page, limit, sort="-created_at")
    result["count"] = (await get_unviewed_count(receiver_id))["count"]
    return result


async def get_all_message_notifications(receiver_id: UUID, page: int = 1, limit: int = 10) -> dict:
    query = NotificationModel.find({"receiver_id": receiver_id, "type": MESSAGE_TYPE})
    result = await paginate(query, page, limit, sort="-created_at")
    result["count"] = (await get_unviewed_message_count(receiver_id))["count"]
    return result


async def get_admin_notifications(page: int = 1, limit: int = 10) -> dict:
    query = NotificationModel.find({"role": NotificationRole.ADMIN.value})
    return await paginate(query, page, limit, sort="-created_at")


async def get_unviewed_count(receiver_id: UUID) -> dict:
    count = await NotificationModel.find(
        {"receiver_id": receiver_id, "viewed": False, "type": {"$ne": MESSAGE_TYPE}}
    ).count()
    return {"count": count}


async def get_unviewed_message_count(receiver_id: UUID) -> dict:
    count = await NotificationModel.find(
        {"receiver_id": receiver_id, "viewed": False, "type": MESSAGE_TYPE}
    ).count()
    return {"count": count}


async def _get_owned(notification_id: UUID, user: UserModel) -> NotificationModel:
    notification = await NotificationModel.get(notification_id)
    if not notification:
        raise HTTPException(status_code=404, detail="Notification not found")

    is_owner = notification.receiver_id == user.id
    is_admin_scoped = notification.role == NotificationRole.ADMIN and user.role == UserRole.ADMIN
    if not (is_owner or is_admin_scoped):
        raise HTTPException(status_code=404, detail="Notification not found")
    return notification


async def get_single_notification(notification_id: UUID, user: UserModel) -> NotificationModel:
    return await _get_owned(notification_id, user)


async def view_all_notifications(receiver_id: UUID, type: Optional[NotificationType] = None) -> dict:
    query = {"receiver_id": receiver_id, "viewed": False}
    if type:
        query["type"] = type.value
    result = await NotificationModel.find(query).update({"$set": {"viewed": True}})
    return {"modified_count": result.modified_count}


async def view_single_notification(notification_id: UUID, user: UserModel) -> NotificationModel:
    notification = await _get_owned(notification_id, user)
    if not notification.viewed:
        notification.viewed = True
        await notification.save()
    return notification


async def delete_notification(notification_id: UUID, user: UserModel) -> NotificationModel:
    notification = await _get_owned(notification_id, user)
    await notification.delete()
    return notification


async def clear_all_notifications(user: UserModel) -> dict:
    if user.role == UserRole.ADMIN:
        query = {"role": NotificationRole.ADMIN.value}
    else:
        query = {"receiver_id": user.id}
    result = await NotificationModel.find(query).delete()
    logger.info(f"Cleared {result.deleted_count} notifications for {user.id}")
    return {"deleted_count": result.deleted_count}
