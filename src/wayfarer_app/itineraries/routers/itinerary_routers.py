from fastapi import APIRouter, Depends, Query
from uuid import UUID
from wayfarer_app.users.utils.get_current_user import get_current_user
from wayfarer_app.users.models.user_models import UserModel
from wayfarer_app.itineraries.schemas.itinerary_schemas import (
    ItineraryCreate,
    ItineraryUpdate,
    ItineraryResponse,
    ItineraryPage,
)
from wayfarer_app.itineraries.utils import itineraries as itinerary_service

router = APIRouter(
    prefix="/itineraries",
    tags=["Itineraries"]
)


@router.post("/", response_model=ItineraryResponse, status_code=201)
async def create_itinerary(data: ItineraryCreate, current_user: UserModel = Depends(get_current_user)):
    return await itinerary_service.create_itinerary(current_user, data)


@router.get("/mine", response_model=ItineraryPage)
async def get_my_itineraries(
    page: int = Query(1, ge=1),
    limit: int = Query(10, ge=1, le=100),
    current_user: UserModel = Depends(get_current_user),
):
    return await itinerary_service.get_my_itineraries(current_user, page, limit)


@router.get("/{itinerary_id}", response_model=ItineraryResponse)
async def get_itinerary(itinerary_id: UUID, current_user: UserModel = Depends(get_current_user)):
    return await itinerary_service.get_itinerary(itinerary_id, current_user)


@router.patch("/{itinerary_id}", response_model=ItineraryResponse)
async def update_itinerary(
    itinerary_id: UUID,
    data: ItineraryUpdate,
    current_user: UserModel = Depends(get_current_user),
):
    return await itinerary_service.update_itinerary(itinerary_id, current_user, data)
