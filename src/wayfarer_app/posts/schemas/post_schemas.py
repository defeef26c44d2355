from pydantic import BaseModel, Field, model_validator
from typing import Dict, List, Optional
from datetime import datetime
from uuid import UUID
from wayfarer_app.core.base.base import BaseResponse
from wayfarer_app.posts.models.media_models import MediaType, MediaSourceType
from wayfarer_app.itineraries.schemas.itinerary_schemas import ItineraryResponse
from wayfarer_app.posts.models.post_models import PostType, PostPrivacy, ReactionType
from wayfarer_app.users.schemas.user_schemas import UserPublic


class MediaInput(BaseModel):
    media_type: MediaType
    media_url: str
    metadata: dict = Field(default_factory=dict)


class PostCreate(BaseModel):
    content: Optional[str] = None
    post_type: PostType = PostType.USER
    source_id: Optional[UUID] = None
    privacy: PostPrivacy = PostPrivacy.PUBLIC
    visited_location_name: Optional[str] = None
    media: List[MediaInput] = Field(default_factory=list, max_length=10)
    itinerary_id: Optional[UUID] = None

    @model_validator(mode="after")
    def check_body(self):
        if not (self.content and self.content.strip()) and not self.media and not self.itinerary_id:
            raise ValueError("A post needs content, media or an itinerary")
        return self


class PostUpdate(BaseModel):
    content: Optional[str] = None
    privacy: Optional[PostPrivacy] = None
    visited_location_name: Optional[str] = None


class PostShare(BaseModel):
    content: Optional[str] = None
    privacy: PostPrivacy = PostPrivacy.PUBLIC


class ReactionRequest(BaseModel):
    reaction_type: ReactionType


class CommentCreate(BaseModel):
    comment: str = Field(min_length=1)
    reply_to: Optional[UUID] = None
    parent_comment_id: Optional[UUID] = None
    mentions: List[UUID] = Field(default_factory=list)


class CommentUpdate(BaseModel):
    comment: str = Field(min_length=1)


class MediaResponse(BaseResponse):
    source_id: Optional[UUID] = None
    source_type: MediaSourceType
    media_type: MediaType
    media_url: str
    metadata: dict = {}

    class Config:
        from_attributes = True


class ReactionResponse(BaseModel):
    user_id: UUID
    reaction_type: ReactionType
    created_at: datetime

    class Config:
        from_attributes = True


class CommentResponse(BaseModel):
    id: UUID
    user_id: UUID
    comment: str
    reply_to: Optional[UUID] = None
    parent_comment_id: Optional[UUID] = None
    mentions: List[UUID] = []
    reactions: List[ReactionResponse] = []
    created_at: datetime
    updated_at: datetime

    class Config:
        from_attributes = True


class PostResponse(BaseResponse):
    author_id: UUID
    author: Optional[UserPublic] = None
    post_type: PostType
    source_id: Optional[UUID] = None
    content: str
    media: List[MediaResponse] = []
    privacy: PostPrivacy
    hashtags: List[str] = []
    visited_location_name: Optional[str] = None
    itinerary_id: Optional[UUID] = None
    itinerary: Optional[ItineraryResponse] = None
    itinerary_view_count: int = 0
    reactions: List[ReactionResponse] = []
    reaction_counts: Dict[str, int] = {}
    comments: List[CommentResponse] = []
    is_shared: bool
    original_post_id: Optional[UUID] = None
    share_count: int
    score: Optional[float] = None
    created_at: datetime
    updated_at: datetime

    class Config:
        from_attributes = True


class PostPage(BaseModel):
    results: List[PostResponse]
    page: int
    limit: int
    total_pages: int
    total_results: int


class ItineraryViewCount(BaseModel):
    post_id: UUID
    itinerary_view_count: int
