import logging
from datetime import datetime
from math import ceil
from typing import List, Optional, Set
from uuid import UUID
from pydantic import BaseModel
from wayfarer_app.core.base.base import paginate, utc_now
from wayfarer_app.communities.models.community_models import GroupModel, EventModel
from wayfarer_app.itineraries.models.itinerary_models import ItineraryModel
from wayfarer_app.posts.models.media_models import MediaModel, MediaType
from wayfarer_app.posts.models.post_models import PostModel, PostPrivacy, PostType
from wayfarer_app.social.utils.graph import accepted_connection_ids, followed_ids, blocked_ids
from wayfarer_app.users.utils.user_lookup import load_users

logger = logging.getLogger(__name__)

RECENCY_WINDOW_SECONDS = 7 * 24 * 3600
RECENCY_WEIGHT = 50
ENGAGEMENT_WEIGHT = 30
CONNECTION_AFFINITY = 1.2
FOLLOW_AFFINITY = 1.1
VISUAL_MEDIA_BOOST = 1.15


class FeedFilters(BaseModel):
    media_type: Optional[MediaType] = None
    hashtag: Optional[str] = None
    post_type: Optional[PostType] = None
    itinerary: Optional[bool] = None


def build_feed_filter(
    viewer_id: Optional[UUID],
    connected: Set[UUID],
    followed: Set[UUID],
    blocked: Set[UUID],
    group_ids: Set[UUID],
    event_ids: Set[UUID],
    filters: Optional[FeedFilters] = None,
) -> dict:
    """
    Build the Mongo filter for a viewer's feed.

    A signed-in viewer sees public user posts from their eligibility set
    (connections, followed users and themselves), friends-only posts from
    their connections, their own private posts, and public posts in the
    groups and events they belong to. Authors the viewer blocked never appear. An
    anonymous viewer only sees public user posts.
    """
    filters = filters or FeedFilters()
    clauses = [{"is_deleted": {"$ne": True}}]

    if viewer_id is None:
        clauses.append({"post_type": PostType.USER.value, "privacy": PostPrivacy.PUBLIC.value})
    else:
        eligible = set(connected) | set(followed) | {viewer_id}
        branches = [
            {
                "author_id": {"$in": list(eligible)},
                "post_type": PostType.USER.value,
                "privacy": PostPrivacy.PUBLIC.value,
            },
            {
                "privacy": PostPrivacy.FRIENDS.value,
                "author_id": {"$in": list(set(connected) | {viewer_id})},
            },
            {"privacy": PostPrivacy.PRIVATE.value, "author_id": viewer_id},
        ]
        if group_ids:
            branches.append({
                "post_type": PostType.GROUP.value,
                "source_id": {"$in": list(group_ids)},
                "privacy": PostPrivacy.PUBLIC.value,
            })
        if event_ids:
            branches.append({
                "post_type": PostType.EVENT.value,
                "source_id": {"$in": list(event_ids)},
                "privacy": PostPrivacy.PUBLIC.value,
            })
        clauses.append({"$or": branches})
        if blocked:
            clauses.append({"author_id": {"$nin": list(blocked)}})

    if filters.hashtag:
        clauses.append({"hashtags": filters.hashtag.lstrip("#").lower()})
    if filters.post_type:
        clauses.append({"post_type": filters.post_type.value})
    if filters.itinerary is not None:
        clauses.append({"itinerary_id": {"$ne": None} if filters.itinerary else None})

    return {"$and": clauses}


def score_post(
    post: PostModel,
    media: List[MediaModel],
    connected: Set[UUID],
    followed: Set[UUID],
    now: Optional[datetime] = None,
) -> float:
    now = now or utc_now()
    age = max(0.0, (now - post.created_at).total_seconds())
    recency = RECENCY_WEIGHT * max(0.0, 1 - age / RECENCY_WINDOW_SECONDS)

    engagement = ENGAGEMENT_WEIGHT * (
        len(post.reactions) * 0.5 + len(post.comments) + post.share_count * 2
    )

    score = recency + engagement
    if post.author_id in connected:
        score *= CONNECTION_AFFINITY
    elif post.author_id in followed:
        score *= FOLLOW_AFFINITY
    if any(m.media_type in (MediaType.IMAGE, MediaType.VIDEO) for m in media):
        score *= VISUAL_MEDIA_BOOST
    return round(score, 2)


async def membership_ids(viewer_id: UUID):
    groups = await GroupModel.find(
        {
            "is_deleted": {"$ne": True},
            "$or": [{"members": viewer_id}, {"co_leaders": viewer_id}, {"creator_id": viewer_id}],
        }
    ).to_list()
    events = await EventModel.find(
        {
            "is_deleted": {"$ne": True},
            "$or": [{"interests": viewer_id}, {"co_hosts": viewer_id}, {"creator_id": viewer_id}],
        }
    ).to_list()
    return {g.id for g in groups}, {e.id for e in events}


async def populate_posts(posts: List[PostModel]) -> List[dict]:
    """Attach author, media and itinerary documents to each post, keeping order."""
    authors = await load_users(p.author_id for p in posts)
    media_ids = [mid for p in posts for mid in p.media_ids]
    media = {}
    if media_ids:
        docs = await MediaModel.find({"_id": {"$in": media_ids}, "is_deleted": {"$ne": True}}).to_list()
        media = {m.id: m for m in docs}

    itinerary_ids = [p.itinerary_id for p in posts if p.itinerary_id]
    itineraries = {}
    if itinerary_ids:
        docs = await ItineraryModel.find({"_id": {"$in": itinerary_ids}, "is_deleted": {"$ne": True}}).to_list()
        itineraries = {i.id: i for i in docs}

    items = []
    for post in posts:
        items.append({
            **post.model_dump(),
            "author": authors.get(post.author_id),
            "media": [media[mid] for mid in post.media_ids if mid in media],
            "itinerary": itineraries.get(post.itinerary_id),
        })
    return items


async def feed_posts(
    viewer_id: Optional[UUID],
    filters: Optional[FeedFilters] = None,
    page: int = 1,
    limit: int = 10,
) -> dict:
    filters = filters or FeedFilters()
    connected: Set[UUID] = set()
    followed: Set[UUID] = set()
    blocked: Set[UUID] = set()
    group_ids: Set[UUID] = set()
    event_ids: Set[UUID] = set()

    if viewer_id is not None:
        connected = await accepted_connection_ids(viewer_id)
        followed = await followed_ids(viewer_id)
        blocked = await blocked_ids(viewer_id)
        group_ids, event_ids = await membership_ids(viewer_id)

    query = build_feed_filter(viewer_id, connected, followed, blocked, group_ids, event_ids, filters)
    result = await paginate(PostModel.find(query), page, limit, sort="-created_at")

    items = await populate_posts(result["results"])
    now = utc_now()
    for item, post in zip(items, result["results"]):
        item["score"] = score_post(post, item["media"], connected, followed, now)

    if filters.media_type:
        # Applied to the fetched page only; totals describe the filtered page
        items = [
            item for item in items
            if item["media"] and all(m.media_type == filters.media_type for m in item["media"])
        ]
        result["total_results"] = len(items)
        result["total_pages"] = ceil(len(items) / result["limit"]) if items else 0

    result["results"] = items
    return result
