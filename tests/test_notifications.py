from uuid import uuid4

import pytest
from fastapi import HTTPException

from wayfarer_app.core.realtime.connection_manager import ADMIN_ROOM
from wayfarer_app.notifications.models import NotificationModel, NotificationRole, NotificationType
from wayfarer_app.notifications.utils import (
    ADMIN_NOTIFICATION_EVENT,
    add_custom_notification,
    clear_all_notifications,
    get_all_notifications,
    get_all_message_notifications,
    get_single_notification,
    send_notification,
    view_all_notifications,
    view_single_notification,
)
from wayfarer_app.users.utils.user_role import UserRole


async def notify(receiver, type=NotificationType.POST, **fields):
    return await NotificationModel(
        sender_id=fields.pop("sender_id", uuid4()),
        receiver_id=receiver.id,
        type=type,
        title="t",
        message="m",
        **fields,
    ).insert()


async def test_send_notification_persists_then_publishes(make_user, publisher):
    alice, bob = await make_user(), await make_user()

    stored = await send_notification(
        publisher,
        sender_id=alice.id,
        receiver_id=bob.id,
        type=NotificationType.CONNECTION,
        title="New connection request",
        message="Alice wants to connect",
    )

    assert await NotificationModel.get(stored.id) is not None
    room, event, payload = publisher.events[-1]
    assert room == str(bob.id)
    assert event == f"notification::{bob.id}"
    assert payload["code"] == 200
    assert payload["data"].id == stored.id


async def test_admin_notifications_go_to_admin_room(publisher):
    notification = NotificationModel(
        title="Report filed", message="A post was reported", type=NotificationType.POST, role=NotificationRole.ADMIN
    )

    await add_custom_notification(ADMIN_NOTIFICATION_EVENT, notification, None, publisher)

    assert publisher.events[-1][:2] == (ADMIN_ROOM, ADMIN_NOTIFICATION_EVENT)


async def test_listing_splits_message_notifications(make_user):
    bob = await make_user()
    await notify(bob)
    await notify(bob, type=NotificationType.COMMENT)
    await notify(bob, type=NotificationType.MESSAGE)

    general = await get_all_notifications(bob.id)
    messages = await get_all_message_notifications(bob.id)

    assert general["total_results"] == 2
    assert general["count"] == 2
    assert messages["total_results"] == 1
    assert messages["count"] == 1


async def test_view_all_marks_only_the_receivers_notifications(make_user):
    bob, carol = await make_user(), await make_user()
    await notify(bob)
    await notify(bob)
    await notify(carol)

    result = await view_all_notifications(bob.id)

    assert result["modified_count"] == 2
    assert (await get_all_notifications(bob.id))["count"] == 0
    assert (await get_all_notifications(carol.id))["count"] == 1


async def test_other_users_cannot_open_a_notification(make_user):
    bob, mallory = await make_user(), await make_user()
    notification = await notify(bob)

    with pytest.raises(HTTPException) as exc:
        await get_single_notification(notification.id, mallory)
    assert exc.value.status_code == 404

    viewed = await view_single_notification(notification.id, bob)
    assert viewed.viewed is True


async def test_admin_clear_removes_admin_scoped_notifications_only(make_user):
    admin = await make_user(role=UserRole.ADMIN)
    bob = await make_user()
    await NotificationModel(title="a", message="b", type=NotificationType.POST, role=NotificationRole.ADMIN).insert()
    await notify(bob)

    result = await clear_all_notifications(admin)

    assert result["deleted_count"] == 1
    assert await NotificationModel.find({"role": NotificationRole.ADMIN.value}).count() == 0
    assert await NotificationModel.find({"receiver_id": bob.id}).count() == 1


async def test_user_clear_removes_own_notifications(make_user):
    bob, carol = await make_user(), await make_user()
    await notify(bob)
    await notify(carol)

    await clear_all_notifications(bob)

    assert await NotificationModel.find({"receiver_id": bob.id}).count() == 0
    assert await NotificationModel.find({"receiver_id": carol.id}).count() == 1


async def test_unread_count_endpoint(make_user, client_as):
    bob = await make_user()
    await notify(bob)

    async with client_as(bob) as client:
        response = await client.get("/api/v1/notifications/unread-count")

    assert response.status_code == 200
    assert response.json() == {"count": 1}
