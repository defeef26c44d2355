from datetime import datetime
from typing import Optional
from enum import Enum
from uuid import UUID
from pydantic import Field
from pymongo import IndexModel, ASCENDING, DESCENDING
from wayfarer_app.core.base.base import BaseCollection, utc_now


class NotificationType(str, Enum):
    POST = "post"
    STORY = "story"
    COMMENT = "comment"
    EVENT = "event"
    GROUP = "group"
    CONNECTION = "connection"
    MESSAGE = "message"


class NotificationRole(str, Enum):
    ADMIN = "admin"
    USER = "user"


class NotificationModel(BaseCollection):
    sender_id: Optional[UUID] = None
    receiver_id: Optional[UUID] = None
    title: str
    message: str
    image: Optional[str] = None
    type: NotificationType
    link_id: Optional[UUID] = None
    role: NotificationRole = NotificationRole.USER
    viewed: bool = False

    created_at: datetime = Field(default_factory=utc_now)

    class Settings:
        name = "notifications"
        indexes = [
            IndexModel([("receiver_id", ASCENDING), ("created_at", DESCENDING)]),
            IndexModel([("role", ASCENDING), ("created_at", DESCENDING)]),
            # At most one outstanding unread message notification per sender/receiver pair
            IndexModel(
                [("receiver_id", ASCENDING), ("sender_id", ASCENDING), ("type", ASCENDING)],
                name="unique_unviewed_message_notification",
                unique=True,
                partialFilterExpression={"viewed": False, "type": NotificationType.MESSAGE.value},
            ),
        ]
