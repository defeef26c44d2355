import logging
from fastapi import FastAPI
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from pydantic import ValidationError
from pymongo.errors import DuplicateKeyError
from starlette.exceptions import HTTPException as StarletteHTTPException
from wayfarer_app.core.config import CORS_ORIGINS, DEBUG
from wayfarer_app.db import lifespan
from wayfarer_app.core.exceptions_handler.http_exception_handler import http_exception_handler
from wayfarer_app.core.exceptions_handler.global_exception_handler import global_exception_handler
from wayfarer_app.core.exceptions_handler.validation_exception_handler import (
    validation_exception_handler,
    duplicate_key_exception_handler,
)
from wayfarer_app.core.realtime.socket_routers import router as socket_router
from wayfarer_app.users.routers.user_routers import user_router
from wayfarer_app.users.routers.admin_routers import router as admin_router
from wayfarer_app.social.routers.social_routers import router as social_router
from wayfarer_app.posts.routers.post_routers import router as post_router
from wayfarer_app.itineraries.routers.itinerary_routers import router as itinerary_router
from wayfarer_app.chating.routers.chat_routers import router as chat_router
from wayfarer_app.chating.routers.message_routers import router as message_router
from wayfarer_app.notifications.routers import router as notification_router
from wayfarer_app.stories.routers.story_routers import router as story_router
from wayfarer_app.communities.routers.group_routers import router as group_router
from wayfarer_app.communities.routers.event_routers import router as event_router

logging.basicConfig(
    level=logging.DEBUG if DEBUG else logging.INFO,
    format="%(asctime)s %(levelname)s %(name)s: %(message)s",
)


app = FastAPI(
    title="Wayfarer API",
    description="FastAPI with Beanie and Motor",
    version="1.0.0",
    debug=DEBUG,
    lifespan=lifespan
)


app.add_middleware(
    CORSMiddleware,
    allow_origins=CORS_ORIGINS,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)


@app.get("/")
def read_root():
    return {"Hello": "Wayfarer"}


app.add_exception_handler(StarletteHTTPException, http_exception_handler)
app.add_exception_handler(RequestValidationError, validation_exception_handler)
app.add_exception_handler(ValidationError, validation_exception_handler)
app.add_exception_handler(DuplicateKeyError, duplicate_key_exception_handler)
app.add_exception_handler(Exception, global_exception_handler)


app.include_router(user_router, prefix="/api/v1")
app.include_router(admin_router, prefix="/api/v1")
app.include_router(social_router, prefix="/api/v1")
app.include_router(post_router, prefix="/api/v1")
app.include_router(itinerary_router, prefix="/api/v1")
app.include_router(chat_router, prefix="/api/v1")
app.include_router(message_router, prefix="/api/v1")
app.include_router(notification_router, prefix="/api/v1")
app.include_router(story_router, prefix="/api/v1")
app.include_router(group_router, prefix="/api/v1")
app.include_router(event_router, prefix="/api/v1")
app.include_router(socket_router, prefix="/api/v1")
