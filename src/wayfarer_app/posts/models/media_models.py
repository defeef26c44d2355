from datetime import datetime
from enum import Enum
from typing import Optional
from uuid import UUID
from pydantic import Field
from pymongo import IndexModel
from wayfarer_app.core.base.base import BaseCollection, utc_now


class MediaType(str, Enum):
    IMAGE = "image"
    VIDEO = "video"
    AUDIO = "audio"
    DOCUMENT = "document"


class MediaSourceType(str, Enum):
    USER = "user"
    GROUP = "group"
    EVENT = "event"


class MediaModel(BaseCollection):
    source_id: Optional[UUID] = None
    source_type: MediaSourceType = MediaSourceType.USER
    media_type: MediaType
    media_url: str
    metadata: dict = Field(default_factory=dict)
    is_deleted: bool = False
    expires_at: Optional[datetime] = None

    created_at: datetime = Field(default_factory=utc_now)

    class Settings:
        name = "media"
        indexes = [
            IndexModel("source_id"),
            IndexModel("expires_at", expireAfterSeconds=0),
        ]
