from beanie import before_event, Replace, Save
from datetime import datetime
from enum import Enum
from uuid import UUID
from pydantic import Field
from pymongo import IndexModel, ASCENDING
from wayfarer_app.core.base.base import BaseCollection, utc_now


class ConnectionStatus(str, Enum):
    PENDING = "pending"
    ACCEPTED = "accepted"
    DECLINED = "declined"
    REMOVED = "removed"


class ConnectionModel(BaseCollection):
    sent_by: UUID
    received_by: UUID
    status: ConnectionStatus = ConnectionStatus.PENDING

    created_at: datetime = Field(default_factory=utc_now)
    updated_at: datetime = Field(default_factory=utc_now)

    @before_event([Save, Replace])
    def update_timestamp(self):
        self.updated_at = utc_now()

    class Settings:
        name = "connections"
        indexes = [
            IndexModel([("sent_by", ASCENDING), ("received_by", ASCENDING)], unique=True),
            IndexModel([("received_by", ASCENDING), ("status", ASCENDING)]),
        ]


class FollowerModel(BaseCollection):
    follower_id: UUID
    followed_id: UUID
    created_at: datetime = Field(default_factory=utc_now)

    class Settings:
        name = "followers"
        indexes = [
            IndexModel([("follower_id", ASCENDING), ("followed_id", ASCENDING)], unique=True),
            IndexModel("followed_id"),
        ]


class BlockedUserModel(BaseCollection):
    blocker_id: UUID
    blocked_id: UUID
    created_at: datetime = Field(default_factory=utc_now)

    class Settings:
        name = "blocked_users"
        indexes = [
            IndexModel([("blocker_id", ASCENDING), ("blocked_id", ASCENDING)], unique=True),
            IndexModel("blocked_id"),
        ]
