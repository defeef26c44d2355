from pydantic import BaseModel, EmailStr, Field, model_validator
from typing import Optional
from datetime import datetime
from wayfarer_app.core.base.base import BaseResponse
from wayfarer_app.users.utils.user_role import UserRole


class UserUpdate(BaseModel):
    full_name: Optional[str] = None
    user_name: Optional[str] = None
    profile_image: Optional[str] = None
    bio: Optional[str] = None
    city: Optional[str] = None
    country: Optional[str] = None


class UserPublic(BaseResponse):
    full_name: Optional[str] = None
    user_name: Optional[str] = None
    profile_image: Optional[str] = None
    city: Optional[str] = None
    country: Optional[str] = None
    is_online: bool = False

    class Config:
        from_attributes = True


class UserResponse(UserPublic):
    email: EmailStr
    bio: Optional[str] = None
    role: UserRole = UserRole.USER
    is_banned: bool
    ban_until: Optional[datetime] = None
    is_blocked: bool
    created_at: datetime
    updated_at: datetime

    class Config:
        from_attributes = True


class BanRequest(BaseModel):
    ban_until: Optional[datetime] = None
    days: Optional[int] = Field(default=None, ge=1)

    @model_validator(mode="after")
    def check_duration(self):
        if (self.ban_until is None) == (self.days is None):
            raise ValueError("Provide exactly one of ban_until or days")
        return self


class SweepResult(BaseModel):
    unbanned: int
