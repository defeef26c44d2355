from pydantic import BaseModel
from typing import Optional, List
from datetime import datetime
from uuid import UUID
from wayfarer_app.core.base.base import BaseResponse
from wayfarer_app.notifications.models import NotificationType, NotificationRole


class NotificationResponse(BaseResponse):
    sender_id: Optional[UUID] = None
    receiver_id: Optional[UUID] = None
    title: str
    message: str
    image: Optional[str] = None
    type: NotificationType
    link_id: Optional[UUID] = None
    role: NotificationRole
    viewed: bool
    created_at: datetime

    class Config:
        from_attributes = True


class NotificationPage(BaseModel):
    results: List[NotificationResponse]
    page: int
    limit: int
    total_pages: int
    total_results: int
    count: Optional[int] = None


class NotificationCount(BaseModel):
    count: int


class AdminNotificationCreate(BaseModel):
    title: str
    message: str
    type: NotificationType
    link_id: Optional[UUID] = None
    image: Optional[str] = None
