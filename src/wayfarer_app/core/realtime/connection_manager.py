import json
import asyncio
import logging
from typing import Any, Dict, Optional, Protocol, Set

from fastapi import WebSocket
from fastapi.encoders import jsonable_encoder
import redis.asyncio as redis

from wayfarer_app.core.config import REDIS_URL

logger = logging.getLogger(__name__)

REDIS_CHANNEL = "realtime_events"
ADMIN_ROOM = "admin"


class RealtimePublisher(Protocol):
    """Port every service uses to push events to a room (a user id or "admin")."""

    async def publish(self, room: str, event: str, payload: Any) -> None:
        ...


# WebSocket Connection Manager with Redis Pub/Sub
class ConnectionManager:
    def __init__(self, redis_url: Optional[str] = REDIS_URL):
        self.active_connections: Dict[str, Set[WebSocket]] = {}
        self.rooms: Dict[str, Set[str]] = {}
        self.redis_url = redis_url
        self.redis: Optional[redis.Redis] = None
        self.pubsub_task: Optional[asyncio.Task] = None
        self._redis_checked = False

    async def ensure_redis(self):
        if self.redis or self._redis_checked or not self.redis_url:
            return
        self._redis_checked = True
        try:
            self.redis = redis.from_url(self.redis_url, decode_responses=True)
            # Test connection
            await self.redis.ping()
            self.pubsub_task = asyncio.create_task(self._listen_to_redis())
            logger.info("Connected to Redis for realtime Pub/Sub")
        except Exception as e:
            logger.warning(f"Failed to connect to Redis: {e}. Falling back to local-only delivery.")
            self.redis = None

    async def _listen_to_redis(self):
        ps = self.redis.pubsub()
        await ps.subscribe(REDIS_CHANNEL)
        try:
            async for message in ps.listen():
                if message["type"] == "message":
                    data = json.loads(message["data"])
                    await self._deliver_local(data)
        except asyncio.CancelledError:
            raise
        except Exception as e:
            logger.error(f"Redis PubSub Error: {e}")
        finally:
            await ps.unsubscribe(REDIS_CHANNEL)

    async def connect(self, user_id: str, websocket: WebSocket, is_admin: bool = False):
        await websocket.accept()
        self.active_connections.setdefault(user_id, set()).add(websocket)
        self.join(user_id, user_id)
        if is_admin:
            self.join(ADMIN_ROOM, user_id)
        await self.ensure_redis()

    def disconnect(self, user_id: str, websocket: Optional[WebSocket] = None):
        sockets = self.active_connections.get(user_id)
        if sockets is None:
            return
        if websocket is not None:
            sockets.discard(websocket)
        else:
            sockets.clear()
        if not sockets:
            del self.active_connections[user_id]
            for members in self.rooms.values():
                members.discard(user_id)
            self.rooms = {room: members for room, members in self.rooms.items() if members}

    def join(self, room: str, user_id: str):
        self.rooms.setdefault(room, set()).add(user_id)

    def is_connected(self, user_id: str) -> bool:
        return bool(self.active_connections.get(user_id))

    async def publish(self, room: str, event: str, payload: Any) -> None:
        """
        Fire-and-forget: a failed publish is logged, never raised. The
        persisted record is the durable fallback for anything dropped here.
        """
        message = {"room": str(room), "event": event, "data": jsonable_encoder(payload)}
        try:
            await self.ensure_redis()
            if self.redis:
                await self.redis.publish(REDIS_CHANNEL, json.dumps(message))
            else:
                await self._deliver_local(message)
        except Exception as e:
            logger.error(f"Realtime publish failed for {event} -> {room}: {e}")

    async def _deliver_local(self, message: dict):
        members = self.rooms.get(message.get("room"), set())
        for user_id in list(members):
            for websocket in list(self.active_connections.get(user_id, ())):
                try:
                    await websocket.send_json({"event": message["event"], "data": message["data"]})
                except Exception as e:
                    logger.error(f"Local Send Error: {e}")

    async def close(self):
        if self.pubsub_task:
            self.pubsub_task.cancel()
            try:
                await self.pubsub_task
            except asyncio.CancelledError:
                pass
            except Exception as e:
                logger.warning(f"Redis listener stopped with error: {e}")
            self.pubsub_task = None
        if self.redis:
            await self.redis.close()
            self.redis = None


manager = ConnectionManager()


def get_publisher() -> RealtimePublisher:
    """FastAPI dependency; tests override it with a recording fake."""
    return manager
