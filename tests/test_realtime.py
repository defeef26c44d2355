from uuid import uuid4

from wayfarer_app.core.realtime.connection_manager import ADMIN_ROOM, ConnectionManager


class FakeSocket:
    def __init__(self, fail=False):
        self.accepted = False
        self.sent = []
        self.fail = fail

    async def accept(self):
        self.accepted = True

    async def send_json(self, data):
        if self.fail:
            raise RuntimeError("socket closed")
        self.sent.append(data)


async def test_local_delivery_reaches_every_socket_in_the_room():
    manager = ConnectionManager(redis_url=None)
    phone, laptop, other = FakeSocket(), FakeSocket(), FakeSocket()
    await manager.connect("alice", phone)
    await manager.connect("alice", laptop)
    await manager.connect("bob", other)

    message_id = uuid4()
    await manager.publish("alice", "new-message", {"id": message_id})

    expected = {"event": "new-message", "data": {"id": str(message_id)}}
    assert phone.sent == [expected]
    assert laptop.sent == [expected]
    assert other.sent == []


async def test_admins_join_the_admin_room():
    manager = ConnectionManager(redis_url=None)
    admin, user = FakeSocket(), FakeSocket()
    await manager.connect("root", admin, is_admin=True)
    await manager.connect("alice", user)

    await manager.publish(ADMIN_ROOM, "admin-notification", {"title": "report"})

    assert len(admin.sent) == 1
    assert user.sent == []


async def test_broken_socket_does_not_stop_delivery():
    manager = ConnectionManager(redis_url=None)
    broken, healthy = FakeSocket(fail=True), FakeSocket()
    await manager.connect("alice", broken)
    await manager.connect("alice", healthy)

    await manager.publish("alice", "ping", {})

    assert len(healthy.sent) == 1


async def test_disconnect_leaves_rooms_once_no_sockets_remain():
    manager = ConnectionManager(redis_url=None)
    phone, laptop = FakeSocket(), FakeSocket()
    await manager.connect("alice", phone, is_admin=True)
    await manager.connect("alice", laptop)

    manager.disconnect("alice", phone)
    assert manager.is_connected("alice")

    manager.disconnect("alice", laptop)
    assert not manager.is_connected("alice")
    assert ADMIN_ROOM not in manager.rooms
