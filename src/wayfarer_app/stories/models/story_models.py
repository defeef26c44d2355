from beanie import before_event, Replace, Save
from datetime import datetime
from enum import Enum
from typing import List, Optional
from uuid import UUID
from pydantic import BaseModel, Field
from pymongo import IndexModel, ASCENDING, DESCENDING
from wayfarer_app.core.base.base import BaseCollection, utc_now


class StoryPrivacy(str, Enum):
    PUBLIC = "public"
    FOLLOWERS = "followers"
    CUSTOM = "custom"


class StoryStatus(str, Enum):
    ACTIVE = "active"
    EXPIRED = "expired"
    DELETED = "deleted"


class StoryMediaType(str, Enum):
    TEXT = "text"
    IMAGE = "image"
    VIDEO = "video"
    AUDIO = "audio"
    DOCUMENT = "document"
    MIXED = "mixed"


class StoryReactionType(str, Enum):
    LIKE = "like"
    LOVE = "love"
    WOW = "wow"


class StoryReaction(BaseModel):
    user_id: UUID
    reaction_type: StoryReactionType


class StoryMediaModel(BaseCollection):
    media_type: StoryMediaType
    media_url: Optional[str] = None
    text_content: Optional[str] = None
    text_font_family: Optional[str] = None
    background_color: Optional[str] = None
    expires_at: datetime
    viewed_by: List[UUID] = Field(default_factory=list)
    view_count: int = 0
    reactions: List[StoryReaction] = Field(default_factory=list)
    is_deleted: bool = False

    created_at: datetime = Field(default_factory=utc_now)

    class Settings:
        name = "story_media"
        indexes = [
            IndexModel("expires_at", expireAfterSeconds=0),
        ]


class StoryModel(BaseCollection):
    owner_id: UUID
    media_ids: List[UUID] = Field(default_factory=list)
    privacy: StoryPrivacy = StoryPrivacy.PUBLIC
    status: StoryStatus = StoryStatus.ACTIVE
    expires_at: datetime
    is_deleted: bool = False

    created_at: datetime = Field(default_factory=utc_now)
    updated_at: datetime = Field(default_factory=utc_now)

    @before_event([Save, Replace])
    def update_timestamp(self):
        self.updated_at = utc_now()

    class Settings:
        name = "stories"
        indexes = [
            IndexModel([("owner_id", ASCENDING), ("created_at", DESCENDING)]),
            IndexModel("media_ids"),
            IndexModel("expires_at", expireAfterSeconds=0),
        ]
