from datetime import timedelta

import pytest
from fastapi import HTTPException

from wayfarer_app.core.base.base import utc_now
from wayfarer_app.chating.models.chat_model import MessageModel, MessageType
from wayfarer_app.social.models.social_models import ConnectionModel, ConnectionStatus, FollowerModel
from wayfarer_app.stories.models.story_models import (
    StoryMediaModel,
    StoryMediaType,
    StoryModel,
    StoryPrivacy,
    StoryReactionType,
)
from wayfarer_app.stories.schemas.story_schemas import StoryCreate
from wayfarer_app.stories.utils.stories import (
    check_story_access,
    create_story,
    delete_story_media,
    get_story,
    get_story_feed,
    get_story_media,
    react_to_story_media,
    reply_to_story_media,
    view_story_media,
)


async def add_expired_media(story_id):
    expired = StoryMediaModel(
        media_type=StoryMediaType.TEXT,
        text_content="yesterday",
        expires_at=utc_now() - timedelta(minutes=1),
    )
    await expired.insert()
    story = await StoryModel.get(story_id)
    story.media_ids.append(expired.id)
    await story.save()
    return expired


async def test_expired_media_is_excluded_before_purge(make_user):
    owner = await make_user()
    story = await create_story(owner, StoryCreate(text_content="still here"))
    expired = await add_expired_media(story["id"])

    detail = await get_story(story["id"], owner)

    assert detail["total_media_count"] == 1
    assert expired.id not in [m.id for m in detail["story"]["media"]]
    with pytest.raises(HTTPException) as exc:
        await get_story_media(expired.id, owner)
    assert exc.value.status_code == 404


async def test_same_day_stories_extend_one_story(make_user):
    owner = await make_user()
    first = await create_story(owner, StoryCreate(text_content="morning", duration_hours=2))
    second = await create_story(
        owner,
        StoryCreate(text_content="caption", media=[{"media_type": "image", "media_url": "https://cdn/a.jpg"}]),
    )

    assert first["id"] == second["id"]
    assert len(second["media"]) == 2
    assert second["media"][1].media_type == StoryMediaType.MIXED
    stored = await StoryModel.get(first["id"])
    assert stored.expires_at > utc_now() + timedelta(hours=23)


async def test_story_needs_text_or_media(make_user):
    owner = await make_user()

    with pytest.raises(HTTPException) as exc:
        await create_story(owner, StoryCreate(text_content="   "))
    assert exc.value.status_code == 400


async def test_access_tiers(make_user):
    owner, follower, friend, stranger = [await make_user() for _ in range(4)]
    await FollowerModel(follower_id=follower.id, followed_id=owner.id).insert()
    await ConnectionModel(sent_by=friend.id, received_by=owner.id, status=ConnectionStatus.ACCEPTED).insert()

    public = StoryModel(owner_id=owner.id, privacy=StoryPrivacy.PUBLIC, expires_at=utc_now())
    followers = StoryModel(owner_id=owner.id, privacy=StoryPrivacy.FOLLOWERS, expires_at=utc_now())
    custom = StoryModel(owner_id=owner.id, privacy=StoryPrivacy.CUSTOM, expires_at=utc_now())

    assert await check_story_access(public, stranger.id)
    assert await check_story_access(followers, follower.id)
    assert await check_story_access(followers, friend.id)
    assert not await check_story_access(followers, stranger.id)
    assert await check_story_access(custom, friend.id)
    assert not await check_story_access(custom, follower.id)
    assert await check_story_access(custom, owner.id)


async def test_stranger_gets_403_on_followers_story(make_user):
    owner, stranger = await make_user(), await make_user()
    story = await create_story(owner, StoryCreate(text_content="for followers", privacy=StoryPrivacy.FOLLOWERS))

    with pytest.raises(HTTPException) as exc:
        await get_story(story["id"], stranger)
    assert exc.value.status_code == 403


async def test_reaction_replaces_previous_one(make_user):
    owner, fan = await make_user(), await make_user()
    story = await create_story(owner, StoryCreate(text_content="react"))
    media_id = story["media"][0].id

    await react_to_story_media(media_id, fan, StoryReactionType.LIKE)
    media = await react_to_story_media(media_id, fan, StoryReactionType.WOW)

    assert [(r.user_id, r.reaction_type) for r in media.reactions] == [(fan.id, StoryReactionType.WOW)]


async def test_views_are_counted_once_and_not_for_owner(make_user):
    owner, viewer = await make_user(), await make_user()
    story = await create_story(owner, StoryCreate(text_content="seen"))
    media_id = story["media"][0].id

    await view_story_media(media_id, viewer)
    await view_story_media(media_id, viewer)
    await view_story_media(media_id, owner)

    media = await StoryMediaModel.get(media_id)
    assert media.view_count == 1
    assert media.viewed_by == [viewer.id]


async def test_reply_becomes_story_message(make_user, publisher):
    owner, viewer = await make_user(), await make_user()
    story = await create_story(owner, StoryCreate(text_content="reply to me"))
    media_id = story["media"][0].id

    message = await reply_to_story_media(media_id, viewer, "nice view", publisher)

    stored = await MessageModel.get(message.id)
    assert stored.content.message_type == MessageType.STORY_MESSAGE
    assert stored.story_media_id == media_id
    assert stored.receiver_id == owner.id

    with pytest.raises(HTTPException) as exc:
        await reply_to_story_media(media_id, owner, "talking to myself", publisher)
    assert exc.value.status_code == 400


async def test_deleting_last_media_deletes_story(make_user):
    owner = await make_user()
    story = await create_story(owner, StoryCreate(text_content="only one"))

    result = await delete_story_media(story["media"][0].id, owner)

    assert result["story_deleted"] is True
    assert (await StoryModel.get(story["id"])).is_deleted is True


async def test_feed_includes_social_and_nearby_public_stories(make_user):
    viewer = await make_user(city="Porto", country="Portugal")
    followed = await make_user()
    neighbour = await make_user(city="Porto", country="Portugal")
    stranger = await make_user(city="Oslo", country="Norway")
    await FollowerModel(follower_id=viewer.id, followed_id=followed.id).insert()

    followed_story = await create_story(followed, StoryCreate(text_content="a", privacy=StoryPrivacy.FOLLOWERS))
    nearby_story = await create_story(neighbour, StoryCreate(text_content="b"))
    far_story = await create_story(stranger, StoryCreate(text_content="c"))

    feed = await get_story_feed(viewer)
    ids = {item["id"] for item in feed["results"]}

    assert followed_story["id"] in ids
    assert nearby_story["id"] in ids
    assert far_story["id"] not in ids
