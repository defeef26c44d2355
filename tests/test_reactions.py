from uuid import uuid4

from wayfarer_app.posts.models.post_models import PostModel, Reaction, ReactionType
from wayfarer_app.posts.schemas.post_schemas import PostCreate
from wayfarer_app.posts.utils.posts import add_or_remove_reaction, create_post
from wayfarer_app.posts.utils.reactions import count_reactions, toggle_reaction


def test_first_click_adds_reaction():
    user = uuid4()
    reactions, current = toggle_reaction([], user, ReactionType.LOVE)

    assert current == ReactionType.LOVE
    assert [(r.user_id, r.reaction_type) for r in reactions] == [(user, ReactionType.LOVE)]


def test_same_type_twice_removes_it():
    user = uuid4()
    reactions, _ = toggle_reaction([], user, ReactionType.SMILE)
    reactions, current = toggle_reaction(reactions, user, ReactionType.SMILE)

    assert current is None
    assert reactions == []


def test_different_type_replaces_existing():
    user, other = uuid4(), uuid4()
    start = [Reaction(user_id=other, reaction_type=ReactionType.BAN)]
    reactions, _ = toggle_reaction(start, user, ReactionType.LOVE)
    reactions, current = toggle_reaction(reactions, user, ReactionType.LUGGAGE)

    assert current == ReactionType.LUGGAGE
    mine = [r for r in reactions if r.user_id == user]
    assert len(mine) == 1
    assert mine[0].reaction_type == ReactionType.LUGGAGE
    assert len(reactions) == 2


def test_count_reactions_covers_every_type():
    reactions = [
        Reaction(user_id=uuid4(), reaction_type=ReactionType.LOVE),
        Reaction(user_id=uuid4(), reaction_type=ReactionType.LOVE),
        Reaction(user_id=uuid4(), reaction_type=ReactionType.SMILE),
    ]

    assert count_reactions(reactions) == {"love": 2, "luggage": 0, "ban": 0, "smile": 1}


async def test_post_reaction_toggle_is_persisted(make_user):
    author, fan = await make_user(), await make_user()
    post = await create_post(author, PostCreate(content="sunset"))

    await add_or_remove_reaction(post["id"], fan, ReactionType.LOVE)
    updated = await add_or_remove_reaction(post["id"], fan, ReactionType.SMILE)
    assert updated["reaction_counts"]["smile"] == 1
    assert updated["reaction_counts"]["love"] == 0

    await add_or_remove_reaction(post["id"], fan, ReactionType.SMILE)
    stored = await PostModel.get(post["id"])
    assert stored.reactions == []
    assert stored.reaction_counts["smile"] == 0
