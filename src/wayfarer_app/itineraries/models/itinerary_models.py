from beanie import before_event, Insert, Replace, Save
from datetime import datetime
from typing import List, Optional
from uuid import UUID
from pydantic import BaseModel, Field
from pymongo import IndexModel, ASCENDING, DESCENDING
from wayfarer_app.core.base.base import BaseCollection, utc_now


class Location(BaseModel):
    latitude: float = Field(ge=-90, le=90)
    longitude: float = Field(ge=-180, le=180)


class Activity(BaseModel):
    time: str
    description: str
    link: Optional[str] = None
    rating: float = Field(default=0, ge=0, le=5)
    duration: Optional[str] = None
    cost: Optional[float] = None


class ItineraryDay(BaseModel):
    day_number: int = Field(ge=1)
    location: Location
    location_name: str
    activities: List[Activity] = Field(default_factory=list)
    comment: Optional[str] = None
    weather: Optional[str] = None


def compute_overall_rating(days: List[ItineraryDay]) -> float:
    """Average of the activity ratings that were actually given, to two decimals."""
    ratings = [a.rating for day in days for a in day.activities if a.rating > 0]
    if not ratings:
        return 0
    return round(sum(ratings) / len(ratings), 2)


class ItineraryModel(BaseCollection):
    owner_id: UUID
    # Set once, when a post claims the itinerary
    post_id: Optional[UUID] = None
    trip_name: str
    travel_mode: str
    departure: str
    arrival: str
    days: List[ItineraryDay] = Field(default_factory=list)
    overall_rating: float = 0
    is_deleted: bool = False

    created_at: datetime = Field(default_factory=utc_now)
    updated_at: datetime = Field(default_factory=utc_now)

    @before_event([Insert, Save, Replace])
    def refresh_rating(self):
        self.overall_rating = compute_overall_rating(self.days)
        self.updated_at = utc_now()

    class Settings:
        name = "itineraries"
        indexes = [
            IndexModel([("owner_id", ASCENDING), ("created_at", DESCENDING)]),
            IndexModel("post_id"),
        ]
