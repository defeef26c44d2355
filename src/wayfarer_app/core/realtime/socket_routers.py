import json
import asyncio
import logging
from uuid import UUID
from fastapi import APIRouter, Depends, WebSocket, WebSocketDisconnect
from wayfarer_app.core.realtime.connection_manager import manager
from wayfarer_app.chating.models.chat_model import ChatModel
from wayfarer_app.users.models.user_models import UserModel
from wayfarer_app.users.utils.get_current_user import get_ws_current_user
from wayfarer_app.users.utils.user_role import UserRole

logger = logging.getLogger(__name__)

router = APIRouter(tags=["Realtime"])

HEARTBEAT_SECONDS = 30


async def _set_presence(user_id: UUID, **flags):
    await UserModel.find_one({"_id": user_id}).update({"$set": flags})


async def _relay_typing(user: UserModel, chat_id: str, typing: bool):
    try:
        chat = await ChatModel.get(UUID(chat_id))
    except (ValueError, TypeError):
        return
    if not chat or chat.is_deleted or user.id not in chat.participants:
        return
    payload = {"chat_id": str(chat.id), "user_id": str(user.id), "typing": typing}
    for participant in chat.participants:
        if participant != user.id:
            await manager.publish(str(participant), f"typing::{chat.id}", payload)


@router.websocket("/ws")
async def websocket_endpoint(websocket: WebSocket, current_user: UserModel = Depends(get_ws_current_user)):
    user_id = str(current_user.id)
    await manager.connect(user_id, websocket, is_admin=current_user.role == UserRole.ADMIN)
    await _set_presence(current_user.id, is_online=True)

    # Heartbeat task
    async def heartbeat():
        try:
            while True:
                await asyncio.sleep(HEARTBEAT_SECONDS)
                await websocket.send_json({"event": "ping"})
        except Exception as e:
            logger.debug(f"Heartbeat stopped for {user_id}: {e}")

    heartbeat_task = asyncio.create_task(heartbeat())

    try:
        while True:
            data = await websocket.receive_text()
            try:
                frame = json.loads(data)
            except json.JSONDecodeError:
                continue
            if not isinstance(frame, dict):
                continue

            event = frame.get("event") or frame.get("type")

            if event == "pong":
                continue
            elif event == "user/connectInMessageBox":
                await _set_presence(current_user.id, is_in_message_box=True)
            elif event == "user/disconnectInMessageBox":
                await _set_presence(current_user.id, is_in_message_box=False)
            elif event in ("typing", "stop-typing"):
                await _relay_typing(current_user, frame.get("chat_id"), event == "typing")

    except WebSocketDisconnect:
        pass
    except Exception as e:
        logger.error(f"WebSocket Loop Error for user {user_id}: {e}")
    finally:
        heartbeat_task.cancel()
        manager.disconnect(user_id, websocket)
        if not manager.is_connected(user_id):
            await _set_presence(current_user.id, is_online=False, is_in_message_box=False)
