from fastapi import APIRouter, Depends, Query
from typing import List, Optional
from uuid import UUID
from wayfarer_app.core.realtime.connection_manager import RealtimePublisher, get_publisher
from wayfarer_app.users.utils.get_current_user import get_current_user
from wayfarer_app.users.models.user_models import UserModel
from wayfarer_app.users.schemas.user_schemas import UserPublic
from wayfarer_app.chating.schemas.chat import MessageResponse
from wayfarer_app.stories.schemas.story_schemas import (
    StoryCreate,
    StoryResponse,
    StoryDetail,
    StoryMediaDetail,
    StoryMediaResponse,
    StoryPage,
    StoryReactionRequest,
    StoryReplyRequest,
)
from wayfarer_app.stories.utils import stories as story_service

router = APIRouter(prefix="/stories", tags=["Stories"])


@router.post("/", response_model=StoryResponse, status_code=201)
async def create_story(data: StoryCreate, current_user: UserModel = Depends(get_current_user)):
    return await story_service.create_story(current_user, data)


@router.get("/feed", response_model=StoryPage)
async def get_story_feed(
    city: Optional[str] = None,
    country: Optional[str] = None,
    page: int = Query(1, ge=1),
    limit: int = Query(10, ge=1, le=100),
    current_user: UserModel = Depends(get_current_user),
):
    return await story_service.get_story_feed(current_user, city, country, page, limit)


@router.get("/media/{media_id}", response_model=StoryMediaDetail)
async def get_story_media(media_id: UUID, current_user: UserModel = Depends(get_current_user)):
    return await story_service.get_story_media(media_id, current_user)


@router.post("/media/{media_id}/view", response_model=StoryMediaDetail)
async def view_story_media(media_id: UUID, current_user: UserModel = Depends(get_current_user)):
    return await story_service.view_story_media(media_id, current_user)


@router.post("/media/{media_id}/react", response_model=StoryMediaResponse)
async def react_to_story_media(
    media_id: UUID,
    data: StoryReactionRequest,
    current_user: UserModel = Depends(get_current_user),
):
    return await story_service.react_to_story_media(media_id, current_user, data.reaction_type)


@router.post("/media/{media_id}/reply", response_model=MessageResponse, status_code=201)
async def reply_to_story_media(
    media_id: UUID,
    data: StoryReplyRequest,
    current_user: UserModel = Depends(get_current_user),
    publisher: RealtimePublisher = Depends(get_publisher),
):
    return await story_service.reply_to_story_media(media_id, current_user, data.message, publisher)


@router.get("/media/{media_id}/viewers", response_model=List[UserPublic])
async def get_story_media_viewers(media_id: UUID, current_user: UserModel = Depends(get_current_user)):
    return await story_service.get_story_media_viewers(media_id, current_user)


@router.delete("/media/{media_id}")
async def delete_story_media(media_id: UUID, current_user: UserModel = Depends(get_current_user)):
    return await story_service.delete_story_media(media_id, current_user)


@router.get("/{story_id}", response_model=StoryDetail)
async def get_story(story_id: UUID, current_user: UserModel = Depends(get_current_user)):
    return await story_service.get_story(story_id, current_user)


@router.delete("/{story_id}")
async def delete_story(story_id: UUID, current_user: UserModel = Depends(get_current_user)):
    return await story_service.delete_story(story_id, current_user)
