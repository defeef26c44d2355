from beanie import before_event, Replace, Save
from datetime import datetime
from enum import Enum
from typing import List, Optional
from uuid import UUID
from pydantic import Field
from pymongo import IndexModel, ASCENDING
from wayfarer_app.core.base.base import BaseCollection, utc_now


class CommunityPrivacy(str, Enum):
    PUBLIC = "public"
    PRIVATE = "private"


class InviteStatus(str, Enum):
    PENDING = "pending"
    ACCEPTED = "accepted"
    DECLINED = "declined"


class GroupModel(BaseCollection):
    name: str
    description: str = ""
    group_image: Optional[str] = None
    creator_id: UUID
    co_leaders: List[UUID] = Field(default_factory=list)
    members: List[UUID] = Field(default_factory=list)
    pending_requests: List[UUID] = Field(default_factory=list)
    privacy: CommunityPrivacy = CommunityPrivacy.PUBLIC
    is_deleted: bool = False

    created_at: datetime = Field(default_factory=utc_now)
    updated_at: datetime = Field(default_factory=utc_now)

    @before_event([Save, Replace])
    def update_timestamp(self):
        self.updated_at = utc_now()

    def is_leader(self, user_id: UUID) -> bool:
        return user_id == self.creator_id or user_id in self.co_leaders

    def is_member(self, user_id: UUID) -> bool:
        return self.is_leader(user_id) or user_id in self.members

    class Settings:
        name = "groups"
        indexes = [
            IndexModel("members"),
            IndexModel("creator_id"),
        ]


class GroupInviteModel(BaseCollection):
    from_user: UUID
    to_user: UUID
    group_id: UUID
    status: InviteStatus = InviteStatus.PENDING

    created_at: datetime = Field(default_factory=utc_now)
    updated_at: datetime = Field(default_factory=utc_now)

    @before_event([Save, Replace])
    def update_timestamp(self):
        self.updated_at = utc_now()

    class Settings:
        name = "group_invites"
        indexes = [
            IndexModel([("group_id", ASCENDING), ("to_user", ASCENDING), ("status", ASCENDING)]),
        ]


class EventModel(BaseCollection):
    name: str
    description: str = ""
    event_image: Optional[str] = None
    creator_id: UUID
    co_hosts: List[UUID] = Field(default_factory=list)
    interests: List[UUID] = Field(default_factory=list)
    pending_interests: List[UUID] = Field(default_factory=list)
    privacy: CommunityPrivacy = CommunityPrivacy.PUBLIC
    start_date: datetime
    end_date: datetime
    location_name: Optional[str] = None
    is_deleted: bool = False

    created_at: datetime = Field(default_factory=utc_now)
    updated_at: datetime = Field(default_factory=utc_now)

    @before_event([Save, Replace])
    def update_timestamp(self):
        self.updated_at = utc_now()

    def is_host(self, user_id: UUID) -> bool:
        return user_id == self.creator_id or user_id in self.co_hosts

    def is_member(self, user_id: UUID) -> bool:
        return self.is_host(user_id) or user_id in self.interests

    class Settings:
        name = "events"
        indexes = [
            IndexModel("interests"),
            IndexModel("creator_id"),
            IndexModel("start_date"),
        ]


class EventInviteModel(BaseCollection):
    from_user: UUID
    to_user: UUID
    event_id: UUID
    status: InviteStatus = InviteStatus.PENDING

    created_at: datetime = Field(default_factory=utc_now)
    updated_at: datetime = Field(default_factory=utc_now)

    @before_event([Save, Replace])
    def update_timestamp(self):
        self.updated_at = utc_now()

    class Settings:
        name = "event_invites"
        indexes = [
            IndexModel([("event_id", ASCENDING), ("to_user", ASCENDING)], unique=True),
        ]
