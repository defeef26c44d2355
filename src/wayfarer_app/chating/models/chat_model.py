from beanie import before_event, Replace, Save
from datetime import datetime
from enum import Enum
from typing import List, Optional
from uuid import UUID
from pydantic import BaseModel, Field, model_validator
from pymongo import IndexModel, ASCENDING, DESCENDING
from wayfarer_app.core.base.base import BaseCollection, utc_now

MAX_FILES_PER_MESSAGE = 10


class ChatType(str, Enum):
    SINGLE = "single"
    GROUP = "group"


class MessageType(str, Enum):
    TEXT = "text"
    IMAGE = "image"
    AUDIO = "audio"
    VIDEO = "video"
    DOCUMENT = "document"
    MIXED = "mixed"
    STORY_MESSAGE = "story_message"


FILE_MESSAGE_TYPES = {MessageType.IMAGE, MessageType.AUDIO, MessageType.VIDEO, MessageType.DOCUMENT}


class MessageContent(BaseModel):
    message_type: MessageType = MessageType.TEXT
    text: Optional[str] = None
    file_urls: List[str] = Field(default_factory=list)

    @model_validator(mode="after")
    def check_shape(self):
        if len(self.file_urls) > MAX_FILES_PER_MESSAGE:
            raise ValueError(f"A message can carry at most {MAX_FILES_PER_MESSAGE} files")

        has_text = bool(self.text and self.text.strip())
        if not self.file_urls:
            if self.message_type not in (MessageType.TEXT, MessageType.STORY_MESSAGE):
                raise ValueError("Messages without files must be text or story_message")
            if not has_text and self.message_type == MessageType.TEXT:
                raise ValueError("Text messages need text")
        elif has_text:
            if self.message_type != MessageType.MIXED:
                raise ValueError("Messages with files and text must be mixed")
        elif self.message_type not in FILE_MESSAGE_TYPES:
            raise ValueError("Messages with only files must be image, audio, video or document")
        return self


class ChatModel(BaseCollection):
    chat_type: ChatType = ChatType.SINGLE
    participants: List[UUID]
    chat_name: Optional[str] = None
    group_admin: Optional[UUID] = None
    allow_members_to_add: bool = False
    allow_members_to_remove: bool = False
    last_message_id: Optional[UUID] = None
    last_message_at: Optional[datetime] = None
    is_deleted: bool = False

    created_at: datetime = Field(default_factory=utc_now)
    updated_at: datetime = Field(default_factory=utc_now)

    @before_event([Save, Replace])
    def update_timestamp(self):
        self.updated_at = utc_now()

    class Settings:
        name = "chats"
        indexes = [
            IndexModel([("participants", ASCENDING), ("updated_at", DESCENDING)]),
        ]


class MessageModel(BaseCollection):
    chat_id: UUID
    sender_id: UUID
    receiver_id: Optional[UUID] = None
    content: MessageContent
    story_media_id: Optional[UUID] = None
    seen_by: List[UUID] = Field(default_factory=list)
    deleted_by: List[UUID] = Field(default_factory=list)
    unsent_by: List[UUID] = Field(default_factory=list)
    is_deleted: bool = False

    created_at: datetime = Field(default_factory=utc_now)
    updated_at: datetime = Field(default_factory=utc_now)

    @before_event([Save, Replace])
    def update_timestamp(self):
        self.updated_at = utc_now()

    class Settings:
        name = "messages"
        indexes = [
            IndexModel([("chat_id", ASCENDING), ("created_at", DESCENDING)]),
            IndexModel([("sender_id", ASCENDING), ("receiver_id", ASCENDING), ("created_at", DESCENDING)]),
        ]
