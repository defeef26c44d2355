import logging
from datetime import datetime, timedelta
from typing import List, Optional
from uuid import UUID
from fastapi import HTTPException
from wayfarer_app.core.base.base import paginate, utc_now
from wayfarer_app.core.realtime.connection_manager import RealtimePublisher
from wayfarer_app.chating.models.chat_model import MessageContent, MessageType, MessageModel
from wayfarer_app.chating.utils.delivery import send_message
from wayfarer_app.social.utils.graph import (
    accepted_connection_ids,
    followed_ids,
    blocked_ids,
    is_connected,
    follows,
)
from wayfarer_app.stories.models.story_models import (
    StoryModel,
    StoryMediaModel,
    StoryMediaType,
    StoryPrivacy,
    StoryStatus,
    StoryReaction,
    StoryReactionType,
)
from wayfarer_app.stories.schemas.story_schemas import StoryCreate
from wayfarer_app.users.models.user_models import UserModel
from wayfarer_app.users.utils.user_lookup import load_users

logger = logging.getLogger(__name__)

DEFAULT_STORY_DURATION = timedelta(hours=24)


async def check_story_access(story: StoryModel, viewer_id: UUID) -> bool:
    if story.owner_id == viewer_id:
        return True
    if story.privacy == StoryPrivacy.PUBLIC:
        return True
    if story.privacy == StoryPrivacy.FOLLOWERS:
        return (
            await is_connected(viewer_id, story.owner_id)
            or await follows(viewer_id, story.owner_id)
            or await follows(story.owner_id, viewer_id)
        )
    if story.privacy == StoryPrivacy.CUSTOM:
        return await is_connected(viewer_id, story.owner_id)
    return False


def _live_media_filter(media_ids: List[UUID], now: datetime) -> dict:
    # TTL purge lags, so expiry is always checked at read time too
    return {"_id": {"$in": media_ids}, "is_deleted": {"$ne": True}, "expires_at": {"$gt": now}}


async def live_media(story: StoryModel, now: Optional[datetime] = None) -> List[StoryMediaModel]:
    if not story.media_ids:
        return []
    now = now or utc_now()
    media = await StoryMediaModel.find(_live_media_filter(story.media_ids, now)).to_list()
    return sorted(media, key=lambda m: m.created_at)


def _active_story_filter(now: datetime) -> dict:
    return {
        "status": StoryStatus.ACTIVE.value,
        "is_deleted": {"$ne": True},
        "expires_at": {"$gt": now},
    }


async def _populate_stories(stories: List[StoryModel], now: datetime) -> List[dict]:
    owners = await load_users(s.owner_id for s in stories)
    items = []
    for story in stories:
        items.append({
            **story.model_dump(),
            "owner": owners.get(story.owner_id),
            "media": await live_media(story, now),
        })
    return items


async def create_story(owner: UserModel, data: StoryCreate) -> dict:
    has_text = bool(data.text_content and data.text_content.strip())
    if not has_text and not data.media:
        raise HTTPException(status_code=400, detail="At least one of text_content or media is required")

    now = utc_now()
    duration = timedelta(hours=data.duration_hours) if data.duration_hours else DEFAULT_STORY_DURATION
    expires_at = now + duration

    common = {
        "text_content": data.text_content if has_text else None,
        "text_font_family": data.text_font_family,
        "background_color": data.background_color,
        "expires_at": expires_at,
    }
    if data.media:
        media_docs = [
            StoryMediaModel(
                media_type=StoryMediaType.MIXED if has_text else StoryMediaType(m.media_type.value),
                media_url=m.media_url,
                **common,
            )
            for m in data.media
        ]
    else:
        media_docs = [StoryMediaModel(media_type=StoryMediaType.TEXT, **common)]
    await StoryMediaModel.insert_many(media_docs)
    media_ids = [m.id for m in media_docs]

    start_of_day = now.replace(hour=0, minute=0, second=0, microsecond=0)
    story = await StoryModel.find_one(
        {
            "owner_id": owner.id,
            "created_at": {"$gte": start_of_day, "$lt": start_of_day + timedelta(days=1)},
            **_active_story_filter(now),
        }
    )

    if story:
        story.media_ids.extend(media_ids)
        story.expires_at = max(story.expires_at, expires_at)
        if data.privacy:
            story.privacy = data.privacy
        await story.save()
    else:
        story = StoryModel(
            owner_id=owner.id,
            media_ids=media_ids,
            privacy=data.privacy or StoryPrivacy.PUBLIC,
            expires_at=expires_at,
        )
        await story.insert()

    logger.info(f"Story {story.id} now holds {len(story.media_ids)} media for {owner.id}")
    return (await _populate_stories([story], now))[0]


async def _ensure_access(story: StoryModel, viewer_id: UUID):
    if not await check_story_access(story, viewer_id):
        raise HTTPException(status_code=403, detail="You do not have access to this story")


async def get_story(story_id: UUID, viewer: UserModel) -> dict:
    now = utc_now()
    story = await StoryModel.find_one({"_id": story_id, **_active_story_filter(now)})
    if not story:
        raise HTTPException(status_code=404, detail="Story not found")

    await _ensure_access(story, viewer.id)
    item = (await _populate_stories([story], now))[0]
    if not item["media"]:
        raise HTTPException(status_code=404, detail="No active media found for this story")

    return {
        "story": item,
        "first_media_id": item["media"][0].id,
        "total_media_count": len(item["media"]),
    }


async def _story_media_context(media_id: UUID, viewer_id: UUID, now: datetime):
    media = await StoryMediaModel.find_one(
        {"_id": media_id, "is_deleted": {"$ne": True}, "expires_at": {"$gt": now}}
    )
    if not media:
        raise HTTPException(status_code=404, detail="Media not found or expired")

    story = await StoryModel.find_one({"media_ids": media_id, **_active_story_filter(now)})
    if not story:
        raise HTTPException(status_code=404, detail="Story not found")

    await _ensure_access(story, viewer_id)
    return media, story


async def get_story_media(media_id: UUID, viewer: UserModel) -> dict:
    now = utc_now()
    media, story = await _story_media_context(media_id, viewer.id, now)
    item = (await _populate_stories([story], now))[0]

    ordered = [m.id for m in item["media"]]
    index = ordered.index(media.id)
    return {
        "media": media,
        "story": item,
        "total_media_count": len(ordered),
        "current_index": index + 1,
        "next_media_id": ordered[index + 1] if index < len(ordered) - 1 else None,
        "previous_media_id": ordered[index - 1] if index > 0 else None,
    }


async def view_story_media(media_id: UUID, viewer: UserModel) -> dict:
    result = await get_story_media(media_id, viewer)
    media = result["media"]
    if viewer.id != result["story"]["owner_id"]:
        # Conditional on the viewer being absent, so a repeat view never double counts
        await StoryMediaModel.find_one({"_id": media.id, "viewed_by": {"$ne": viewer.id}}).update(
            {"$push": {"viewed_by": viewer.id}, "$inc": {"view_count": 1}}
        )
        result["media"] = await StoryMediaModel.get(media.id)
    return result


async def react_to_story_media(media_id: UUID, viewer: UserModel, reaction_type: StoryReactionType) -> StoryMediaModel:
    media, _ = await _story_media_context(media_id, viewer.id, utc_now())
    media.reactions = [r for r in media.reactions if r.user_id != viewer.id]
    media.reactions.append(StoryReaction(user_id=viewer.id, reaction_type=reaction_type))
    await media.save()
    return media


async def reply_to_story_media(
    media_id: UUID, viewer: UserModel, text: str, publisher: RealtimePublisher
) -> MessageModel:
    _, story = await _story_media_context(media_id, viewer.id, utc_now())
    if story.owner_id == viewer.id:
        raise HTTPException(status_code=400, detail="You cannot reply to your own story")

    content = MessageContent(message_type=MessageType.STORY_MESSAGE, text=text)
    return await send_message(viewer, story.owner_id, content, publisher, story_media_id=media_id)


async def delete_story(story_id: UUID, owner: UserModel) -> dict:
    story = await StoryModel.get(story_id)
    if not story or story.is_deleted:
        raise HTTPException(status_code=404, detail="Story not found")
    if story.owner_id != owner.id:
        raise HTTPException(status_code=403, detail="Only the creator can delete the story")

    story.is_deleted = True
    story.status = StoryStatus.DELETED
    await story.save()
    await StoryMediaModel.find({"_id": {"$in": story.media_ids}}).update({"$set": {"is_deleted": True}})
    return {"message": "Story deleted successfully"}


async def delete_story_media(media_id: UUID, owner: UserModel) -> dict:
    now = utc_now()
    media, story = await _story_media_context(media_id, owner.id, now)
    if story.owner_id != owner.id:
        raise HTTPException(status_code=403, detail="Only the creator can delete media")

    media.is_deleted = True
    await media.save()

    remaining = await StoryMediaModel.find(_live_media_filter(story.media_ids, now)).count()
    if remaining == 0:
        story.is_deleted = True
        story.status = StoryStatus.DELETED
        await story.save()
    return {"message": "Story media deleted successfully", "story_deleted": remaining == 0}


async def get_story_feed(
    viewer: UserModel,
    city: Optional[str] = None,
    country: Optional[str] = None,
    page: int = 1,
    limit: int = 10,
) -> dict:
    now = utc_now()
    connected = await accepted_connection_ids(viewer.id)
    social_ids = connected | await followed_ids(viewer.id) | {viewer.id}
    blocked = await blocked_ids(viewer.id)

    branches = [
        {
            "owner_id": {"$in": list(social_ids)},
            "privacy": {"$in": [StoryPrivacy.PUBLIC.value, StoryPrivacy.FOLLOWERS.value]},
        },
        {"owner_id": {"$in": list(connected | {viewer.id})}, "privacy": StoryPrivacy.CUSTOM.value},
    ]

    city = city or viewer.city
    country = country or viewer.country
    if city and country:
        nearby = await UserModel.find(
            {"_id": {"$ne": viewer.id}, "city": city, "country": country, "is_deleted": {"$ne": True}}
        ).to_list()
        if nearby:
            branches.append({"owner_id": {"$in": [u.id for u in nearby]}, "privacy": StoryPrivacy.PUBLIC.value})

    query = {"$and": [_active_story_filter(now), {"$or": branches}]}
    if blocked:
        query["$and"].append({"owner_id": {"$nin": list(blocked)}})

    result = await paginate(StoryModel.find(query), page, limit, sort="-updated_at")
    result["results"] = await _populate_stories(result["results"], now)
    return result


async def get_story_media_viewers(media_id: UUID, owner: UserModel) -> List[UserModel]:
    media, story = await _story_media_context(media_id, owner.id, utc_now())
    if story.owner_id != owner.id:
        raise HTTPException(status_code=403, detail="Only the creator can view the viewers list")
    users = await load_users(media.viewed_by)
    return [users[uid] for uid in media.viewed_by if uid in users]
