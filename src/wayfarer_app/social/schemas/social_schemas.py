from pydantic import BaseModel
from typing import Optional, List
from datetime import datetime
from uuid import UUID
from wayfarer_app.core.base.base import BaseResponse
from wayfarer_app.social.models.social_models import ConnectionStatus
from wayfarer_app.users.schemas.user_schemas import UserPublic


class ConnectionResponse(BaseResponse):
    sent_by: UUID
    received_by: UUID
    status: ConnectionStatus
    created_at: datetime
    updated_at: datetime

    class Config:
        from_attributes = True


class ConnectionWithUser(ConnectionResponse):
    user: Optional[UserPublic] = None


class ConnectionPage(BaseModel):
    results: List[ConnectionWithUser]
    page: int
    limit: int
    total_pages: int
    total_results: int


class ConnectionStatusResponse(BaseModel):
    status: Optional[ConnectionStatus] = None


class FollowResponse(BaseResponse):
    follower_id: UUID
    followed_id: UUID
    created_at: datetime
    user: Optional[UserPublic] = None

    class Config:
        from_attributes = True


class FollowPage(BaseModel):
    results: List[FollowResponse]
    page: int
    limit: int
    total_pages: int
    total_results: int


class BlockResponse(BaseResponse):
    blocker_id: UUID
    blocked_id: UUID
    created_at: datetime
    user: Optional[UserPublic] = None

    class Config:
        from_attributes = True


class BlockPage(BaseModel):
    results: List[BlockResponse]
    page: int
    limit: int
    total_pages: int
    total_results: int
