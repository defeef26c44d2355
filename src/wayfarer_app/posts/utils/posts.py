import re
import logging
from typing import List, Optional
from uuid import UUID
from fastapi import HTTPException
from wayfarer_app.core.base.base import paginate, utc_now
from wayfarer_app.core.realtime.connection_manager import RealtimePublisher
from wayfarer_app.communities.models.community_models import GroupModel, EventModel, CommunityPrivacy
from wayfarer_app.itineraries.models.itinerary_models import ItineraryModel
from wayfarer_app.notifications.models import NotificationType
from wayfarer_app.notifications.utils import send_notification
from wayfarer_app.posts.models.media_models import MediaModel, MediaSourceType
from wayfarer_app.posts.models.post_models import (
    PostModel,
    PostType,
    PostPrivacy,
    ReactionType,
    Comment,
)
from wayfarer_app.posts.schemas.post_schemas import PostCreate, PostUpdate, PostShare, CommentCreate
from wayfarer_app.posts.utils.feed import populate_posts
from wayfarer_app.posts.utils.reactions import toggle_reaction, count_reactions
from wayfarer_app.social.utils.graph import accepted_connection_ids, is_connected, is_blocked_between
from wayfarer_app.users.models.user_models import UserModel

logger = logging.getLogger(__name__)

HASHTAG_PATTERN = re.compile(r"#(\w+)")


def extract_hashtags(content: Optional[str]) -> List[str]:
    seen = []
    for tag in HASHTAG_PATTERN.findall(content or ""):
        tag = tag.lower()
        if tag not in seen:
            seen.append(tag)
    return seen


def visibility_filter(viewer_id: Optional[UUID], connected) -> dict:
    """Which posts a viewer may open directly, whoever the author is."""
    if viewer_id is None:
        return {"privacy": PostPrivacy.PUBLIC.value}
    return {
        "$or": [
            {"privacy": PostPrivacy.PUBLIC.value},
            {"privacy": PostPrivacy.FRIENDS.value, "author_id": {"$in": list(set(connected) | {viewer_id})}},
            {"privacy": PostPrivacy.PRIVATE.value, "author_id": viewer_id},
        ]
    }


async def _source_community(post_type: PostType, source_id: Optional[UUID]):
    if post_type == PostType.USER:
        return None
    if source_id is None:
        raise HTTPException(status_code=400, detail=f"{post_type.value} posts require a source_id")

    model = GroupModel if post_type == PostType.GROUP else EventModel
    community = await model.get(source_id)
    if not community or community.is_deleted:
        raise HTTPException(status_code=404, detail=f"{post_type.value.capitalize()} not found")
    return community


async def _claim_itinerary(itinerary_id: UUID, author_id: UUID, post_id: UUID):
    itinerary = await ItineraryModel.get(itinerary_id)
    if not itinerary or itinerary.is_deleted:
        raise HTTPException(status_code=404, detail="Itinerary not found")
    if itinerary.owner_id != author_id:
        raise HTTPException(status_code=403, detail="You can only attach your own itinerary")

    # Conditional on post_id being unset, so two posts can never share one itinerary
    result = await ItineraryModel.find_one({"_id": itinerary.id, "post_id": None}).update(
        {"$set": {"post_id": post_id, "updated_at": utc_now()}}
    )
    if result.modified_count == 0:
        raise HTTPException(status_code=400, detail="Itinerary already linked to a post")


async def _get_live_post(post_id: UUID) -> PostModel:
    post = await PostModel.get(post_id)
    if not post or post.is_deleted:
        raise HTTPException(status_code=404, detail="Post not found")
    return post


async def get_visible_post(post_id: UUID, viewer_id: Optional[UUID]) -> PostModel:
    post = await _get_live_post(post_id)
    if post.author_id == viewer_id:
        return post
    if post.privacy == PostPrivacy.PRIVATE:
        raise HTTPException(status_code=404, detail="Post not found")
    if post.privacy == PostPrivacy.FRIENDS and (viewer_id is None or not await is_connected(viewer_id, post.author_id)):
        raise HTTPException(status_code=404, detail="Post not found")
    if viewer_id is not None and await is_blocked_between(viewer_id, post.author_id):
        raise HTTPException(status_code=404, detail="Post not found")
    return post


async def _populated(post: PostModel) -> dict:
    return (await populate_posts([post]))[0]


async def create_post(author: UserModel, data: PostCreate) -> dict:
    community = await _source_community(data.post_type, data.source_id)
    if community is not None and not community.is_member(author.id):
        raise HTTPException(status_code=403, detail=f"Only members can post in this {data.post_type.value}")

    post = PostModel(
        author_id=author.id,
        post_type=data.post_type,
        source_id=data.source_id if data.post_type != PostType.USER else None,
        content=data.content or "",
        privacy=data.privacy,
        hashtags=extract_hashtags(data.content),
        visited_location_name=data.visited_location_name,
        itinerary_id=data.itinerary_id,
    )
    if data.itinerary_id is not None:
        await _claim_itinerary(data.itinerary_id, author.id, post.id)

    media_docs = [
        MediaModel(
            source_id=post.id,
            source_type=MediaSourceType(data.post_type.value),
            media_type=m.media_type,
            media_url=m.media_url,
            metadata=m.metadata,
        )
        for m in data.media
    ]
    if media_docs:
        await MediaModel.insert_many(media_docs)
        post.media_ids = [m.id for m in media_docs]

    await post.insert()
    logger.info(f"Post {post.id} created by {author.id}")
    return await _populated(post)


async def get_post(post_id: UUID, viewer_id: Optional[UUID]) -> dict:
    post = await get_visible_post(post_id, viewer_id)
    return await _populated(post)


async def update_post(post_id: UUID, user: UserModel, data: PostUpdate) -> dict:
    post = await _get_live_post(post_id)
    if post.author_id != user.id:
        raise HTTPException(status_code=403, detail="Not authorized to update this post")

    update_data = data.model_dump(exclude_unset=True)
    if "content" in update_data:
        post.content = update_data["content"] or ""
        post.hashtags = extract_hashtags(post.content)
    if update_data.get("privacy") is not None:
        post.privacy = update_data["privacy"]
    if "visited_location_name" in update_data:
        post.visited_location_name = update_data["visited_location_name"]
    await post.save()
    return await _populated(post)


async def delete_post(post_id: UUID, user: UserModel) -> dict:
    post = await _get_live_post(post_id)
    if post.author_id != user.id:
        raise HTTPException(status_code=403, detail="Not authorized to delete this post")

    post.is_deleted = True
    await post.save()
    if post.media_ids:
        await MediaModel.find({"_id": {"$in": post.media_ids}}).update({"$set": {"is_deleted": True}})
    if post.itinerary_id:
        await ItineraryModel.find({"post_id": post.id}).update({"$set": {"is_deleted": True}})
    return {"message": "Post deleted successfully"}


async def share_post(post_id: UUID, user: UserModel, data: PostShare, publisher: RealtimePublisher) -> dict:
    original = await get_visible_post(post_id, user.id)

    shared = PostModel(
        author_id=user.id,
        post_type=PostType.USER,
        content=data.content or "",
        privacy=data.privacy,
        hashtags=extract_hashtags(data.content),
        is_shared=True,
        original_post_id=original.id,
    )
    await shared.insert()
    await original.update({"$inc": {"share_count": 1}})

    if original.author_id != user.id:
        await send_notification(
            publisher,
            sender_id=user.id,
            receiver_id=original.author_id,
            type=NotificationType.POST,
            title="Post shared",
            message=f"{user.full_name or user.user_name or 'Someone'} shared your post",
            link_id=shared.id,
            image=user.profile_image,
        )
    return await _populated(shared)


async def record_itinerary_view(post_id: UUID, viewer: UserModel) -> dict:
    post = await get_visible_post(post_id, viewer.id)
    if post.itinerary_id is None:
        raise HTTPException(status_code=400, detail="This post has no itinerary")

    if post.author_id != viewer.id:
        await PostModel.find_one({"_id": post.id}).update({"$inc": {"itinerary_view_count": 1}})
        post = await PostModel.get(post.id)
    return {"post_id": post.id, "itinerary_view_count": post.itinerary_view_count}


async def add_or_remove_reaction(post_id: UUID, user: UserModel, reaction_type: ReactionType) -> dict:
    post = await get_visible_post(post_id, user.id)
    post.reactions, _ = toggle_reaction(post.reactions, user.id, reaction_type)
    post.reaction_counts = count_reactions(post.reactions)
    await post.save()
    return await _populated(post)


def _find_comment(post: PostModel, comment_id: UUID) -> Comment:
    comment = next((c for c in post.comments if c.id == comment_id), None)
    if comment is None:
        raise HTTPException(status_code=404, detail="Comment not found")
    return comment


async def create_comment(post_id: UUID, user: UserModel, data: CommentCreate, publisher: RealtimePublisher) -> dict:
    post = await get_visible_post(post_id, user.id)
    if data.parent_comment_id is not None:
        _find_comment(post, data.parent_comment_id)

    comment = Comment(
        user_id=user.id,
        comment=data.comment,
        reply_to=data.reply_to,
        parent_comment_id=data.parent_comment_id,
        mentions=data.mentions,
    )
    post.comments.append(comment)
    await post.save()

    if post.author_id != user.id:
        await send_notification(
            publisher,
            sender_id=user.id,
            receiver_id=post.author_id,
            type=NotificationType.COMMENT,
            title="New comment",
            message=f"{user.full_name or user.user_name or 'Someone'} commented on your post",
            link_id=post.id,
            image=user.profile_image,
        )
    return await _populated(post)


async def update_comment(post_id: UUID, comment_id: UUID, user: UserModel, text: str) -> dict:
    post = await _get_live_post(post_id)
    comment = _find_comment(post, comment_id)
    if comment.user_id != user.id:
        raise HTTPException(status_code=403, detail="Not authorized to update this comment")

    comment.comment = text
    comment.updated_at = utc_now()
    await post.save()
    return await _populated(post)


async def delete_comment(post_id: UUID, comment_id: UUID, user: UserModel) -> dict:
    post = await _get_live_post(post_id)
    comment = _find_comment(post, comment_id)
    if comment.user_id != user.id:
        raise HTTPException(status_code=403, detail="Not authorized to delete this comment")

    # Replies go with their parent
    post.comments = [
        c for c in post.comments
        if c.id != comment_id and c.parent_comment_id != comment_id
    ]
    await post.save()
    return await _populated(post)


async def react_to_comment(post_id: UUID, comment_id: UUID, user: UserModel, reaction_type: ReactionType) -> dict:
    post = await get_visible_post(post_id, user.id)
    comment = _find_comment(post, comment_id)
    comment.reactions, _ = toggle_reaction(comment.reactions, user.id, reaction_type)
    await post.save()
    return await _populated(post)


async def _listing(query: dict, page: int, limit: int) -> dict:
    result = await paginate(PostModel.find(query), page, limit, sort="-created_at")
    result["results"] = await populate_posts(result["results"])
    return result


async def get_user_posts(author_id: UUID, viewer_id: Optional[UUID], page: int = 1, limit: int = 10) -> dict:
    if viewer_id is not None and viewer_id != author_id and await is_blocked_between(viewer_id, author_id):
        raise HTTPException(status_code=404, detail="User not found")

    connected = await accepted_connection_ids(viewer_id) if viewer_id else set()
    query = {
        "$and": [
            {"author_id": author_id, "post_type": PostType.USER.value, "is_deleted": {"$ne": True}},
            visibility_filter(viewer_id, connected),
        ]
    }
    return await _listing(query, page, limit)


async def get_community_posts(
    post_type: PostType, source_id: UUID, viewer_id: UUID, page: int = 1, limit: int = 10
) -> dict:
    community = await _source_community(post_type, source_id)
    if community.privacy == CommunityPrivacy.PRIVATE and not community.is_member(viewer_id):
        raise HTTPException(status_code=403, detail=f"This {post_type.value} is private")

    connected = await accepted_connection_ids(viewer_id)
    query = {
        "$and": [
            {"post_type": post_type.value, "source_id": source_id, "is_deleted": {"$ne": True}},
            visibility_filter(viewer_id, connected),
        ]
    }
    return await _listing(query, page, limit)
