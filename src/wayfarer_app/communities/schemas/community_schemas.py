from pydantic import BaseModel, Field, model_validator
from typing import List, Optional
from datetime import datetime
from uuid import UUID
from wayfarer_app.core.base.base import BaseResponse
from wayfarer_app.communities.models.community_models import CommunityPrivacy, InviteStatus


class GroupCreate(BaseModel):
    name: str = Field(min_length=1, max_length=120)
    description: Optional[str] = None
    group_image: Optional[str] = None
    privacy: CommunityPrivacy = CommunityPrivacy.PUBLIC


class GroupResponse(BaseResponse):
    name: str
    description: str
    group_image: Optional[str] = None
    creator_id: UUID
    co_leaders: List[UUID] = []
    members: List[UUID] = []
    pending_requests: List[UUID] = []
    privacy: CommunityPrivacy
    created_at: datetime
    updated_at: datetime

    class Config:
        from_attributes = True


class GroupPage(BaseModel):
    results: List[GroupResponse]
    page: int
    limit: int
    total_pages: int
    total_results: int


class GroupInviteCreate(BaseModel):
    to_user: UUID


class GroupInviteResponse(BaseResponse):
    from_user: UUID
    to_user: UUID
    group_id: UUID
    status: InviteStatus
    created_at: datetime

    class Config:
        from_attributes = True


class GroupInvitePage(BaseModel):
    results: List[GroupInviteResponse]
    page: int
    limit: int
    total_pages: int
    total_results: int


class EventCreate(BaseModel):
    name: str = Field(min_length=1, max_length=120)
    description: Optional[str] = None
    event_image: Optional[str] = None
    privacy: CommunityPrivacy = CommunityPrivacy.PUBLIC
    start_date: datetime
    end_date: datetime
    location_name: Optional[str] = None

    @model_validator(mode="after")
    def check_dates(self):
        if self.end_date < self.start_date:
            raise ValueError("end_date must not be before start_date")
        return self


class EventResponse(BaseResponse):
    name: str
    description: str
    event_image: Optional[str] = None
    creator_id: UUID
    co_hosts: List[UUID] = []
    interests: List[UUID] = []
    pending_interests: List[UUID] = []
    privacy: CommunityPrivacy
    start_date: datetime
    end_date: datetime
    location_name: Optional[str] = None
    created_at: datetime

    class Config:
        from_attributes = True


class EventPage(BaseModel):
    results: List[EventResponse]
    page: int
    limit: int
    total_pages: int
    total_results: int


class EventInviteCreate(BaseModel):
    to_users: List[UUID] = Field(min_length=1, max_length=50)


class EventInviteResponse(BaseResponse):
    from_user: UUID
    to_user: UUID
    event_id: UUID
    status: InviteStatus
    created_at: datetime

    class Config:
        from_attributes = True


class EventInvitePage(BaseModel):
    results: List[EventInviteResponse]
    page: int
    limit: int
    total_pages: int
    total_results: int
