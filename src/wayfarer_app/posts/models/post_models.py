from beanie import before_event, Replace, Save
from datetime import datetime
from enum import Enum
from typing import Dict, List, Optional
from uuid import UUID, uuid4
from pydantic import BaseModel, Field
from pymongo import IndexModel, ASCENDING, DESCENDING
from wayfarer_app.core.base.base import BaseCollection, utc_now


class PostType(str, Enum):
    USER = "user"
    GROUP = "group"
    EVENT = "event"


class PostPrivacy(str, Enum):
    PUBLIC = "public"
    FRIENDS = "friends"
    PRIVATE = "private"


class ReactionType(str, Enum):
    LOVE = "love"
    LUGGAGE = "luggage"
    BAN = "ban"
    SMILE = "smile"


class Reaction(BaseModel):
    user_id: UUID
    reaction_type: ReactionType
    created_at: datetime = Field(default_factory=utc_now)
    updated_at: datetime = Field(default_factory=utc_now)


class Comment(BaseModel):
    id: UUID = Field(default_factory=uuid4)
    user_id: UUID
    comment: str
    reply_to: Optional[UUID] = None
    parent_comment_id: Optional[UUID] = None
    mentions: List[UUID] = Field(default_factory=list)
    reactions: List[Reaction] = Field(default_factory=list)
    created_at: datetime = Field(default_factory=utc_now)
    updated_at: datetime = Field(default_factory=utc_now)


class PostModel(BaseCollection):
    author_id: UUID
    post_type: PostType = PostType.USER
    source_id: Optional[UUID] = None
    content: str = ""
    media_ids: List[UUID] = Field(default_factory=list)
    privacy: PostPrivacy = PostPrivacy.PUBLIC
    hashtags: List[str] = Field(default_factory=list)
    visited_location_name: Optional[str] = None
    itinerary_id: Optional[UUID] = None
    itinerary_view_count: int = 0

    reactions: List[Reaction] = Field(default_factory=list)
    reaction_counts: Dict[str, int] = Field(default_factory=dict)
    comments: List[Comment] = Field(default_factory=list)

    is_shared: bool = False
    original_post_id: Optional[UUID] = None
    share_count: int = 0
    is_deleted: bool = False

    created_at: datetime = Field(default_factory=utc_now)
    updated_at: datetime = Field(default_factory=utc_now)

    @before_event([Save, Replace])
    def update_timestamp(self):
        self.updated_at = utc_now()

    class Settings:
        name = "posts"
        indexes = [
            IndexModel([("author_id", ASCENDING), ("created_at", DESCENDING)]),
            IndexModel([("post_type", ASCENDING), ("source_id", ASCENDING), ("created_at", DESCENDING)]),
            IndexModel([("privacy", ASCENDING), ("created_at", DESCENDING)]),
            IndexModel("hashtags"),
        ]
