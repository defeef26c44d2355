import logging
from contextlib import asynccontextmanager
from fastapi import FastAPI
from motor.motor_asyncio import AsyncIOMotorClient
from beanie import init_beanie
from wayfarer_app.core.config import MONGODB_URL, DATABASE_NAME, ENABLE_SCHEDULER
from wayfarer_app.core.realtime.connection_manager import manager
from wayfarer_app.users.models.user_models import UserModel
from wayfarer_app.users.utils.scheduler import init_scheduler, shutdown_scheduler
from wayfarer_app.social.models.social_models import ConnectionModel, FollowerModel, BlockedUserModel
from wayfarer_app.posts.models.media_models import MediaModel
from wayfarer_app.posts.models.post_models import PostModel
from wayfarer_app.itineraries.models.itinerary_models import ItineraryModel
from wayfarer_app.chating.models.chat_model import ChatModel, MessageModel
from wayfarer_app.notifications.models import NotificationModel
from wayfarer_app.stories.models.story_models import StoryModel, StoryMediaModel
from wayfarer_app.communities.models.community_models import (
    GroupModel,
    GroupInviteModel,
    EventModel,
    EventInviteModel,
)

logger = logging.getLogger(__name__)


MODELS = [
    UserModel,
    ConnectionModel,
    FollowerModel,
    BlockedUserModel,
    MediaModel,
    PostModel,
    ItineraryModel,
    ChatModel,
    MessageModel,
    NotificationModel,
    StoryModel,
    StoryMediaModel,
    GroupModel,
    GroupInviteModel,
    EventModel,
    EventInviteModel,
]


@asynccontextmanager
async def lifespan(app: FastAPI):
    client = AsyncIOMotorClient(MONGODB_URL, uuidRepresentation="standard")
    await init_beanie(
        database=client[DATABASE_NAME],
        document_models=MODELS,
    )
    logger.info(f"Connected to MongoDB: {DATABASE_NAME}")

    if ENABLE_SCHEDULER:
        init_scheduler()

    yield

    shutdown_scheduler()
    await manager.close()
    client.close()
    logger.info("MongoDB connection closed.")
