import pytest
from fastapi import HTTPException

from wayfarer_app.social.models.social_models import ConnectionModel, ConnectionStatus, FollowerModel
from wayfarer_app.social.utils.graph import is_connected, is_blocked_between
from wayfarer_app.social.utils.relations import (
    accept_connection,
    add_connection,
    block_user,
    cancel_request,
    follow_user,
    get_my_connections,
    unblock_user,
)


async def test_connection_request_and_accept(make_user, publisher):
    alice, bob = await make_user(), await make_user()

    request = await add_connection(alice.id, bob.id, publisher)
    assert request.status == ConnectionStatus.PENDING
    assert publisher.events[-1][0] == str(bob.id)

    accepted = await accept_connection(request.id, bob, publisher)

    assert accepted.status == ConnectionStatus.ACCEPTED
    assert await is_connected(alice.id, bob.id)
    assert publisher.events[-1][0] == str(alice.id)
    page = await get_my_connections(alice.id)
    assert page["total_results"] == 1
    assert page["results"][0]["user"].id == bob.id


async def test_duplicate_request_in_either_direction_is_rejected(make_user, publisher):
    alice, bob = await make_user(), await make_user()
    await add_connection(alice.id, bob.id, publisher)

    with pytest.raises(HTTPException) as exc:
        await add_connection(bob.id, alice.id, publisher)
    assert exc.value.status_code == 400


async def test_only_receiver_accepts_and_only_sender_cancels(make_user, publisher):
    alice, bob = await make_user(), await make_user()
    request = await add_connection(alice.id, bob.id, publisher)

    with pytest.raises(HTTPException) as exc:
        await accept_connection(request.id, alice, publisher)
    assert exc.value.status_code == 403

    with pytest.raises(HTTPException) as exc:
        await cancel_request(request.id, bob)
    assert exc.value.status_code == 403

    await cancel_request(request.id, alice)
    assert await ConnectionModel.get(request.id) is None


async def test_cannot_connect_with_self(make_user, publisher):
    alice = await make_user()

    with pytest.raises(HTTPException) as exc:
        await add_connection(alice.id, alice.id, publisher)
    assert exc.value.status_code == 400


async def test_block_severs_connections_and_follows_both_ways(make_user, publisher):
    alice, bob = await make_user(), await make_user()
    request = await add_connection(alice.id, bob.id, publisher)
    await accept_connection(request.id, bob, publisher)
    await follow_user(alice.id, bob.id)
    await follow_user(bob.id, alice.id)

    await block_user(bob.id, alice.id)

    assert await ConnectionModel.find({"_id": request.id}).count() == 0
    assert await FollowerModel.find({"follower_id": alice.id}).count() == 0
    assert await FollowerModel.find({"follower_id": bob.id}).count() == 0
    assert await is_blocked_between(alice.id, bob.id)


async def test_blocked_user_cannot_connect_until_unblocked(make_user, publisher):
    alice, bob = await make_user(), await make_user()
    await block_user(bob.id, alice.id)

    with pytest.raises(HTTPException) as exc:
        await add_connection(alice.id, bob.id, publisher)
    assert exc.value.status_code == 403

    await unblock_user(bob.id, alice.id)
    request = await add_connection(alice.id, bob.id, publisher)
    assert request.status == ConnectionStatus.PENDING


async def test_follow_twice_is_rejected(make_user):
    alice, bob = await make_user(), await make_user()
    await follow_user(alice.id, bob.id)

    with pytest.raises(HTTPException) as exc:
        await follow_user(alice.id, bob.id)
    assert exc.value.status_code == 400
