from fastapi import APIRouter, Depends, Query
from typing import Optional
from uuid import UUID
from wayfarer_app.core.realtime.connection_manager import RealtimePublisher, get_publisher
from wayfarer_app.users.utils.get_current_user import get_current_user, get_admin_user
from wayfarer_app.users.models.user_models import UserModel
from wayfarer_app.notifications.models import NotificationModel, NotificationType, NotificationRole
from wayfarer_app.notifications.schemas import (
    NotificationResponse,
    NotificationPage,
    NotificationCount,
    AdminNotificationCreate,
)
from wayfarer_app.notifications import utils as notification_service

router = APIRouter(prefix="/notifications", tags=["Notifications"])


@router.get("/", response_model=NotificationPage)
async def get_my_notifications(
    page: int = Query(1, ge=1),
    limit: int = Query(10, ge=1, le=100),
    current_user: UserModel = Depends(get_current_user),
):
    return await notification_service.get_all_notifications(current_user.id, page, limit)


@router.get("/messages", response_model=NotificationPage)
async def get_my_message_notifications(
    page: int = Query(1, ge=1),
    limit: int = Query(10, ge=1, le=100),
    current_user: UserModel = Depends(get_current_user),
):
    return await notification_service.get_all_message_notifications(current_user.id, page, limit)


@router.get("/admin", response_model=NotificationPage)
async def get_admin_notifications(
    page: int = Query(1, ge=1),
    limit: int = Query(10, ge=1, le=100),
    admin: UserModel = Depends(get_admin_user),
):
    return await notification_service.get_admin_notifications(page, limit)


@router.post("/admin", response_model=NotificationResponse, status_code=201)
async def broadcast_admin_notification(
    data: AdminNotificationCreate,
    admin: UserModel = Depends(get_admin_user),
    publisher: RealtimePublisher = Depends(get_publisher),
):
    notification = NotificationModel(
        sender_id=admin.id,
        role=NotificationRole.ADMIN,
        **data.model_dump(),
    )
    return await notification_service.add_custom_notification(
        notification_service.ADMIN_NOTIFICATION_EVENT, notification, None, publisher
    )


@router.get("/unread-count", response_model=NotificationCount)
async def get_unread_count(current_user: UserModel = Depends(get_current_user)):
    return await notification_service.get_unviewed_count(current_user.id)


@router.get("/unread-message-count", response_model=NotificationCount)
async def get_unread_message_count(current_user: UserModel = Depends(get_current_user)):
    return await notification_service.get_unviewed_message_count(current_user.id)


@router.patch("/view-all")
async def view_all(
    type: Optional[NotificationType] = None,
    current_user: UserModel = Depends(get_current_user),
):
    return await notification_service.view_all_notifications(current_user.id, type)


@router.delete("/clear")
async def clear_all(current_user: UserModel = Depends(get_current_user)):
    return await notification_service.clear_all_notifications(current_user)


@router.get("/{notification_id}", response_model=NotificationResponse)
async def get_notification(notification_id: UUID, current_user: UserModel = Depends(get_current_user)):
    return await notification_service.get_single_notification(notification_id, current_user)


@router.patch("/{notification_id}/view", response_model=NotificationResponse)
async def view_notification(notification_id: UUID, current_user: UserModel = Depends(get_current_user)):
    return await notification_service.view_single_notification(notification_id, current_user)


@router.delete("/{notification_id}", response_model=NotificationResponse)
async def delete_notification(notification_id: UUID, current_user: UserModel = Depends(get_current_user)):
    return await notification_service.delete_notification(notification_id, current_user)
