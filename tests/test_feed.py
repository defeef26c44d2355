from datetime import timedelta
from uuid import uuid4

from wayfarer_app.core.base.base import utc_now
from wayfarer_app.communities.models.community_models import GroupModel
from wayfarer_app.posts.models.media_models import MediaModel, MediaType, MediaSourceType
from wayfarer_app.posts.models.post_models import PostModel, PostPrivacy, PostType
from wayfarer_app.posts.schemas.post_schemas import PostCreate
from wayfarer_app.posts.utils.feed import FeedFilters, build_feed_filter, feed_posts, score_post
from wayfarer_app.posts.utils.posts import create_post
from wayfarer_app.social.models.social_models import (
    BlockedUserModel,
    ConnectionModel,
    ConnectionStatus,
    FollowerModel,
)


async def connect(a, b):
    await ConnectionModel(sent_by=a.id, received_by=b.id, status=ConnectionStatus.ACCEPTED).insert()


def result_ids(page):
    return {item["id"] for item in page["results"]}


async def test_friends_post_reaches_connections_only(make_user):
    viewer, author, stranger = await make_user(), await make_user(), await make_user()
    await connect(viewer, author)

    post = await create_post(author, PostCreate(content="Lisbon at dawn", privacy=PostPrivacy.FRIENDS))

    assert post["id"] in result_ids(await feed_posts(viewer.id))
    assert post["id"] in result_ids(await feed_posts(author.id))
    assert post["id"] not in result_ids(await feed_posts(stranger.id))


async def test_pending_connection_does_not_unlock_friends_posts(make_user):
    viewer, author = await make_user(), await make_user()
    await ConnectionModel(sent_by=viewer.id, received_by=author.id).insert()

    post = await create_post(author, PostCreate(content="hidden", privacy=PostPrivacy.FRIENDS))

    assert post["id"] not in result_ids(await feed_posts(viewer.id))


async def test_private_post_only_for_author(make_user):
    viewer, author = await make_user(), await make_user()
    await connect(viewer, author)

    post = await create_post(author, PostCreate(content="notes to self", privacy=PostPrivacy.PRIVATE))

    assert post["id"] in result_ids(await feed_posts(author.id))
    assert post["id"] not in result_ids(await feed_posts(viewer.id))


async def test_public_posts_need_eligibility(make_user):
    viewer, followed, stranger = await make_user(), await make_user(), await make_user()
    await FollowerModel(follower_id=viewer.id, followed_id=followed.id).insert()

    followed_post = await create_post(followed, PostCreate(content="hello"))
    stranger_post = await create_post(stranger, PostCreate(content="hi"))

    ids = result_ids(await feed_posts(viewer.id))
    assert followed_post["id"] in ids
    assert stranger_post["id"] not in ids


async def test_anonymous_viewer_sees_public_user_posts(make_user):
    author = await make_user()
    public = await create_post(author, PostCreate(content="open"))
    friends = await create_post(author, PostCreate(content="closed", privacy=PostPrivacy.FRIENDS))

    ids = result_ids(await feed_posts(None))
    assert public["id"] in ids
    assert friends["id"] not in ids


async def test_blocked_authors_are_hidden(make_user):
    viewer, author = await make_user(), await make_user()
    await FollowerModel(follower_id=viewer.id, followed_id=author.id).insert()
    post = await create_post(author, PostCreate(content="visible until blocked"))
    assert post["id"] in result_ids(await feed_posts(viewer.id))

    await BlockedUserModel(blocker_id=viewer.id, blocked_id=author.id).insert()

    assert post["id"] not in result_ids(await feed_posts(viewer.id))


async def test_group_posts_reach_members(make_user):
    member, author, outsider = await make_user(), await make_user(), await make_user()
    group = GroupModel(name="Hikers", creator_id=author.id, members=[author.id, member.id])
    await group.insert()

    public = await create_post(
        author, PostCreate(content="trail day", post_type=PostType.GROUP, source_id=group.id)
    )
    friends = await create_post(
        author,
        PostCreate(content="members I know", post_type=PostType.GROUP, source_id=group.id, privacy=PostPrivacy.FRIENDS),
    )

    member_ids = result_ids(await feed_posts(member.id))
    assert public["id"] in member_ids
    assert friends["id"] not in member_ids
    assert public["id"] not in result_ids(await feed_posts(outsider.id))


async def test_deleted_posts_are_excluded(make_user):
    author = await make_user()
    post = await create_post(author, PostCreate(content="gone"))
    await PostModel.find_one({"_id": post["id"]}).update({"$set": {"is_deleted": True}})

    assert post["id"] not in result_ids(await feed_posts(author.id))


async def test_media_type_filter_keeps_matching_posts(make_user):
    author = await make_user()
    photo = await create_post(
        author, PostCreate(content="photo", media=[{"media_type": "image", "media_url": "https://cdn/x.jpg"}])
    )
    text = await create_post(author, PostCreate(content="words only"))

    page = await feed_posts(author.id, FeedFilters(media_type=MediaType.IMAGE))

    assert result_ids(page) == {photo["id"]}
    assert text["id"] not in result_ids(page)
    assert page["total_results"] == 1


def test_filter_adds_hashtag_and_post_type_clauses():
    query = build_feed_filter(None, set(), set(), set(), set(), set(), FeedFilters(hashtag="#Travel", post_type=PostType.USER))

    assert {"hashtags": "travel"} in query["$and"]
    assert {"post_type": "user"} in query["$and"]


def test_score_prefers_connections_and_visual_media():
    now = utc_now()
    author = uuid4()
    post = PostModel(author_id=author, created_at=now - timedelta(hours=1))
    image = MediaModel(source_id=post.id, source_type=MediaSourceType.USER, media_type=MediaType.IMAGE, media_url="u")

    base = score_post(post, [], set(), set(), now)
    as_connection = score_post(post, [], {author}, set(), now)
    as_followed = score_post(post, [], set(), {author}, now)
    with_image = score_post(post, [image], set(), set(), now)

    assert as_connection > as_followed > base
    assert with_image > base


def test_score_recency_decays_to_zero_after_a_week():
    now = utc_now()
    old = PostModel(author_id=uuid4(), created_at=now - timedelta(days=8))

    assert score_post(old, [], set(), set(), now) == 0
