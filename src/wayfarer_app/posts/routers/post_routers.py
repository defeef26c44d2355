from fastapi import APIRouter, Depends, Query
from typing import Optional
from uuid import UUID
from wayfarer_app.core.realtime.connection_manager import RealtimePublisher, get_publisher
from wayfarer_app.users.utils.get_current_user import get_current_user, get_optional_current_user
from wayfarer_app.users.models.user_models import UserModel
from wayfarer_app.posts.models.media_models import MediaType
from wayfarer_app.posts.models.post_models import PostType
from wayfarer_app.posts.schemas.post_schemas import (
    PostCreate,
    PostUpdate,
    PostShare,
    PostResponse,
    PostPage,
    ReactionRequest,
    CommentCreate,
    CommentUpdate,
    ItineraryViewCount,
)
from wayfarer_app.posts.utils import posts as post_service
from wayfarer_app.posts.utils.feed import feed_posts, FeedFilters

router = APIRouter(prefix="/posts", tags=["Posts"])


@router.get("/feed", response_model=PostPage)
async def get_feed(
    media_type: Optional[MediaType] = None,
    hashtag: Optional[str] = None,
    post_type: Optional[PostType] = None,
    itinerary: Optional[bool] = None,
    page: int = Query(1, ge=1),
    limit: int = Query(10, ge=1, le=100),
    current_user: Optional[UserModel] = Depends(get_optional_current_user),
):
    filters = FeedFilters(media_type=media_type, hashtag=hashtag, post_type=post_type, itinerary=itinerary)
    viewer_id = current_user.id if current_user else None
    return await feed_posts(viewer_id, filters, page, limit)


@router.post("/", response_model=PostResponse, status_code=201)
async def create_post(data: PostCreate, current_user: UserModel = Depends(get_current_user)):
    return await post_service.create_post(current_user, data)


@router.get("/user/{user_id}", response_model=PostPage)
async def get_user_posts(
    user_id: UUID,
    page: int = Query(1, ge=1),
    limit: int = Query(10, ge=1, le=100),
    current_user: Optional[UserModel] = Depends(get_optional_current_user),
):
    viewer_id = current_user.id if current_user else None
    return await post_service.get_user_posts(user_id, viewer_id, page, limit)


@router.get("/group/{group_id}", response_model=PostPage)
async def get_group_posts(
    group_id: UUID,
    page: int = Query(1, ge=1),
    limit: int = Query(10, ge=1, le=100),
    current_user: UserModel = Depends(get_current_user),
):
    return await post_service.get_community_posts(PostType.GROUP, group_id, current_user.id, page, limit)


@router.get("/event/{event_id}", response_model=PostPage)
async def get_event_posts(
    event_id: UUID,
    page: int = Query(1, ge=1),
    limit: int = Query(10, ge=1, le=100),
    current_user: UserModel = Depends(get_current_user),
):
    return await post_service.get_community_posts(PostType.EVENT, event_id, current_user.id, page, limit)


@router.get("/{post_id}", response_model=PostResponse)
async def get_post(post_id: UUID, current_user: Optional[UserModel] = Depends(get_optional_current_user)):
    return await post_service.get_post(post_id, current_user.id if current_user else None)


@router.patch("/{post_id}", response_model=PostResponse)
async def update_post(post_id: UUID, data: PostUpdate, current_user: UserModel = Depends(get_current_user)):
    return await post_service.update_post(post_id, current_user, data)


@router.delete("/{post_id}")
async def delete_post(post_id: UUID, current_user: UserModel = Depends(get_current_user)):
    return await post_service.delete_post(post_id, current_user)


@router.post("/{post_id}/share", response_model=PostResponse, status_code=201)
async def share_post(
    post_id: UUID,
    data: PostShare,
    current_user: UserModel = Depends(get_current_user),
    publisher: RealtimePublisher = Depends(get_publisher),
):
    return await post_service.share_post(post_id, current_user, data, publisher)


@router.post("/{post_id}/itinerary-views", response_model=ItineraryViewCount)
async def record_itinerary_view(post_id: UUID, current_user: UserModel = Depends(get_current_user)):
    return await post_service.record_itinerary_view(post_id, current_user)


@router.post("/{post_id}/reactions", response_model=PostResponse)
async def react_to_post(post_id: UUID, data: ReactionRequest, current_user: UserModel = Depends(get_current_user)):
    return await post_service.add_or_remove_reaction(post_id, current_user, data.reaction_type)


@router.post("/{post_id}/comments", response_model=PostResponse, status_code=201)
async def create_comment(
    post_id: UUID,
    data: CommentCreate,
    current_user: UserModel = Depends(get_current_user),
    publisher: RealtimePublisher = Depends(get_publisher),
):
    return await post_service.create_comment(post_id, current_user, data, publisher)


@router.patch("/{post_id}/comments/{comment_id}", response_model=PostResponse)
async def update_comment(
    post_id: UUID,
    comment_id: UUID,
    data: CommentUpdate,
    current_user: UserModel = Depends(get_current_user),
):
    return await post_service.update_comment(post_id, comment_id, current_user, data.comment)


@router.delete("/{post_id}/comments/{comment_id}", response_model=PostResponse)
async def delete_comment(post_id: UUID, comment_id: UUID, current_user: UserModel = Depends(get_current_user)):
    return await post_service.delete_comment(post_id, comment_id, current_user)


@router.post("/{post_id}/comments/{comment_id}/reactions", response_model=PostResponse)
async def react_to_comment(
    post_id: UUID,
    comment_id: UUID,
    data: ReactionRequest,
    current_user: UserModel = Depends(get_current_user),
):
    return await post_service.react_to_comment(post_id, comment_id, current_user, data.reaction_type)
