from pydantic import BaseModel, Field
from typing import List, Optional
from datetime import datetime
from uuid import UUID
from wayfarer_app.core.base.base import BaseResponse
from wayfarer_app.itineraries.models.itinerary_models import ItineraryDay


class ItineraryCreate(BaseModel):
    trip_name: str = Field(min_length=1, max_length=200)
    travel_mode: str = Field(min_length=1)
    departure: str = Field(min_length=1)
    arrival: str = Field(min_length=1)
    days: List[ItineraryDay] = Field(default_factory=list)


class ItineraryUpdate(BaseModel):
    trip_name: Optional[str] = Field(default=None, min_length=1, max_length=200)
    travel_mode: Optional[str] = None
    departure: Optional[str] = None
    arrival: Optional[str] = None
    days: Optional[List[ItineraryDay]] = None


class ItineraryResponse(BaseResponse):
    owner_id: UUID
    post_id: Optional[UUID] = None
    trip_name: str
    travel_mode: str
    departure: str
    arrival: str
    days: List[ItineraryDay] = []
    overall_rating: float
    created_at: datetime
    updated_at: datetime

    class Config:
        from_attributes = True


class ItineraryPage(BaseModel):
    results: List[ItineraryResponse]
    page: int
    limit: int
    total_pages: int
    total_results: int
