from pydantic import BaseModel, Field, model_validator
from typing import List, Optional
from datetime import datetime
from uuid import UUID
from wayfarer_app.core.base.base import BaseResponse
from wayfarer_app.chating.models.chat_model import ChatType, MessageContent
from wayfarer_app.users.schemas.user_schemas import UserPublic


class MessageSend(BaseModel):
    receiver_id: Optional[UUID] = None
    chat_id: Optional[UUID] = None
    content: MessageContent

    @model_validator(mode="after")
    def check_target(self):
        if self.receiver_id is None and self.chat_id is None:
            raise ValueError("Either receiver_id or chat_id is required")
        return self


class MessageResponse(BaseResponse):
    chat_id: UUID
    sender_id: UUID
    receiver_id: Optional[UUID] = None
    content: MessageContent
    story_media_id: Optional[UUID] = None
    seen_by: List[UUID] = []
    deleted_by: List[UUID] = []
    unsent_by: List[UUID] = []
    created_at: datetime

    class Config:
        from_attributes = True


class MessagePage(BaseModel):
    results: List[MessageResponse]
    page: int
    limit: int
    total_pages: int
    total_results: int


class GroupChatCreate(BaseModel):
    chat_name: str = Field(min_length=1)
    participant_ids: List[UUID] = Field(min_length=1)
    allow_members_to_add: bool = False
    allow_members_to_remove: bool = False


class ParticipantsAdd(BaseModel):
    user_ids: List[UUID] = Field(min_length=1)


class ChatResponse(BaseResponse):
    chat_type: ChatType
    chat_name: Optional[str] = None
    participants: List[UserPublic] = []
    group_admin: Optional[UUID] = None
    allow_members_to_add: bool = False
    allow_members_to_remove: bool = False
    last_message: Optional[MessageResponse] = None
    last_message_at: Optional[datetime] = None
    created_at: datetime
    updated_at: datetime

    class Config:
        from_attributes = True


class ChatPage(BaseModel):
    results: List[ChatResponse]
    page: int
    limit: int
    total_pages: int
    total_results: int
