from pydantic import BaseModel, Field
from typing import List, Optional
from datetime import datetime
from uuid import UUID
from wayfarer_app.core.base.base import BaseResponse
from wayfarer_app.posts.models.media_models import MediaType
from wayfarer_app.stories.models.story_models import (
    StoryPrivacy,
    StoryStatus,
    StoryMediaType,
    StoryReactionType,
)
from wayfarer_app.users.schemas.user_schemas import UserPublic


class StoryMediaInput(BaseModel):
    media_type: MediaType
    media_url: str


class StoryCreate(BaseModel):
    text_content: Optional[str] = None
    text_font_family: Optional[str] = None
    background_color: Optional[str] = None
    duration_hours: Optional[float] = Field(default=None, gt=0)
    privacy: Optional[StoryPrivacy] = None
    media: List[StoryMediaInput] = Field(default_factory=list, max_length=10)


class StoryReactionRequest(BaseModel):
    reaction_type: StoryReactionType


class StoryReplyRequest(BaseModel):
    message: str = Field(min_length=1, max_length=1000)


class StoryReactionResponse(BaseModel):
    user_id: UUID
    reaction_type: StoryReactionType

    class Config:
        from_attributes = True


class StoryMediaResponse(BaseResponse):
    media_type: StoryMediaType
    media_url: Optional[str] = None
    text_content: Optional[str] = None
    text_font_family: Optional[str] = None
    background_color: Optional[str] = None
    expires_at: datetime
    view_count: int = 0
    reactions: List[StoryReactionResponse] = []
    created_at: datetime

    class Config:
        from_attributes = True


class StoryResponse(BaseResponse):
    owner_id: UUID
    owner: Optional[UserPublic] = None
    media: List[StoryMediaResponse] = []
    privacy: StoryPrivacy
    status: StoryStatus
    expires_at: datetime
    created_at: datetime

    class Config:
        from_attributes = True


class StoryDetail(BaseModel):
    story: StoryResponse
    first_media_id: UUID
    total_media_count: int


class StoryMediaDetail(BaseModel):
    media: StoryMediaResponse
    story: StoryResponse
    total_media_count: int
    current_index: int
    next_media_id: Optional[UUID] = None
    previous_media_id: Optional[UUID] = None


class StoryPage(BaseModel):
    results: List[StoryResponse]
    page: int
    limit: int
    total_pages: int
    total_results: int
