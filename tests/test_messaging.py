from datetime import timedelta
from uuid import uuid4

import pytest
from fastapi import HTTPException

from wayfarer_app.core.base.base import utc_now
from wayfarer_app.chating.models.chat_model import ChatModel, MessageContent, MessageModel, MessageType
from wayfarer_app.chating.utils.chats import get_chat_messages, mark_deleted, mark_unsent
from wayfarer_app.chating.utils.delivery import resolve_single_chat, send_message
from wayfarer_app.notifications.models import NotificationModel, NotificationType
from wayfarer_app.social.models.social_models import BlockedUserModel


def text(body):
    return MessageContent(message_type=MessageType.TEXT, text=body)


async def test_first_message_creates_one_chat_and_later_ones_reuse_it(make_user, publisher):
    alice, bob = await make_user(), await make_user()

    first = await send_message(alice, bob.id, text("hi"), publisher)
    second = await send_message(alice, bob.id, text("are you there?"), publisher)
    reply = await send_message(bob, alice.id, text("yes"), publisher)

    chats = await ChatModel.find({"participants": alice.id}).to_list()
    assert len(chats) == 1
    assert first.chat_id == second.chat_id == reply.chat_id == chats[0].id
    assert chats[0].last_message_id == reply.id


async def test_offline_receiver_gets_a_single_message_notification(make_user, publisher):
    alice, bob = await make_user(), await make_user()

    await send_message(alice, bob.id, text("one"), publisher)
    await send_message(alice, bob.id, text("two"), publisher)

    notifications = await NotificationModel.find(
        {"receiver_id": bob.id, "type": NotificationType.MESSAGE.value}
    ).to_list()
    assert len(notifications) == 1
    assert notifications[0].sender_id == alice.id
    assert len(publisher.events_named("new-message")) == 2


async def test_receiver_in_message_box_sees_message_immediately(make_user, publisher):
    alice = await make_user()
    bob = await make_user(is_online=True, is_in_message_box=True)

    message = await send_message(alice, bob.id, text("ping"), publisher)

    stored = await MessageModel.get(message.id)
    assert bob.id in stored.seen_by
    assert (str(alice.id), f"message-seen::{message.chat_id}") in [(room, event) for room, event, _ in publisher.events]
    assert await NotificationModel.find({"receiver_id": bob.id}).count() == 0


async def test_blocked_pair_cannot_message(make_user, publisher):
    alice, bob = await make_user(), await make_user()
    await BlockedUserModel(blocker_id=bob.id, blocked_id=alice.id).insert()

    with pytest.raises(HTTPException) as exc:
        await send_message(alice, bob.id, text("hello?"), publisher)
    assert exc.value.status_code == 403


async def test_unknown_receiver_is_404(make_user, publisher):
    alice = await make_user()

    with pytest.raises(HTTPException) as exc:
        await send_message(alice, uuid4(), text("anyone?"), publisher)
    assert exc.value.status_code == 404


async def test_messages_page_reads_oldest_to_newest(make_user):
    alice, bob = await make_user(), await make_user()
    chat = await resolve_single_chat(alice.id, bob.id)
    start = utc_now() - timedelta(minutes=5)
    for i in range(3):
        await MessageModel(
            chat_id=chat.id,
            sender_id=alice.id,
            receiver_id=bob.id,
            content=text(str(i)),
            created_at=start + timedelta(seconds=i),
        ).insert()

    page = await get_chat_messages(chat.id, alice, page=1, limit=2)

    assert [m.content.text for m in page["results"]] == ["1", "2"]
    assert page["total_results"] == 3


async def test_deleted_for_me_hides_message_only_for_that_user(make_user, publisher):
    alice, bob = await make_user(), await make_user()
    message = await send_message(alice, bob.id, text("oops"), publisher)

    await mark_deleted(message.id, alice, publisher)

    assert (await get_chat_messages(message.chat_id, alice))["total_results"] == 0
    assert (await get_chat_messages(message.chat_id, bob))["total_results"] == 1
    assert publisher.events_named(f"{message.chat_id}::{bob.id}")


async def test_only_sender_can_unsend(make_user, publisher):
    alice, bob = await make_user(), await make_user()
    message = await send_message(alice, bob.id, text("take back"), publisher)

    with pytest.raises(HTTPException) as exc:
        await mark_unsent(message.id, bob, publisher)
    assert exc.value.status_code == 403

    unsent = await mark_unsent(message.id, alice, publisher)
    assert alice.id in unsent.unsent_by


def test_content_rules_are_enforced():
    with pytest.raises(ValueError):
        MessageContent(message_type=MessageType.IMAGE, text="caption", file_urls=["a.jpg"])
    with pytest.raises(ValueError):
        MessageContent(message_type=MessageType.TEXT, file_urls=["a.jpg"])
    with pytest.raises(ValueError):
        MessageContent(message_type=MessageType.IMAGE, file_urls=[f"{i}.jpg" for i in range(11)])

    assert MessageContent(message_type=MessageType.MIXED, text="look", file_urls=["a.jpg"]).text == "look"
