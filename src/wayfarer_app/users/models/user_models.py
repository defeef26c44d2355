from beanie import before_event, Replace, Save
from pydantic import EmailStr, Field
from typing import Optional
from datetime import datetime
from pymongo import IndexModel
from wayfarer_app.core.base.base import BaseCollection, utc_now
from wayfarer_app.users.utils.user_role import UserRole


class UserModel(BaseCollection):

    full_name: Optional[str] = None
    user_name: Optional[str] = None
    email: EmailStr
    profile_image: Optional[str] = None
    bio: Optional[str] = None
    city: Optional[str] = None
    country: Optional[str] = None
    role: UserRole = Field(default=UserRole.USER)

    is_deleted: bool = False
    is_blocked: bool = False
    is_banned: bool = False
    ban_until: Optional[datetime] = None

    is_online: bool = Field(default=False)
    is_in_message_box: bool = Field(default=False)

    created_at: datetime = Field(default_factory=utc_now)
    updated_at: datetime = Field(default_factory=utc_now)

    # Auto-update "updated_at" on update
    @before_event([Save, Replace])
    def update_timestamp(self):
        self.updated_at = utc_now()

    class Settings:
        name = "users"
        indexes = [
            IndexModel("email", unique=True),
            IndexModel([("is_banned", 1), ("ban_until", 1)]),
        ]
