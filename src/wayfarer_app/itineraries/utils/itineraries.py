import logging
from uuid import UUID
from fastapi import HTTPException
from wayfarer_app.core.base.base import paginate
from wayfarer_app.itineraries.models.itinerary_models import ItineraryModel
from wayfarer_app.itineraries.schemas.itinerary_schemas import ItineraryCreate, ItineraryUpdate
from wayfarer_app.posts.utils.posts import get_visible_post
from wayfarer_app.users.models.user_models import UserModel

logger = logging.getLogger(__name__)


async def get_live_itinerary(itinerary_id: UUID) -> ItineraryModel:
    itinerary = await ItineraryModel.get(itinerary_id)
    if not itinerary or itinerary.is_deleted:
        raise HTTPException(status_code=404, detail="Itinerary not found")
    return itinerary


async def create_itinerary(owner: UserModel, data: ItineraryCreate) -> ItineraryModel:
    itinerary = ItineraryModel(owner_id=owner.id, **data.model_dump())
    await itinerary.insert()
    logger.info(f"Itinerary {itinerary.id} created by {owner.id}")
    return itinerary


async def get_itinerary(itinerary_id: UUID, viewer: UserModel) -> ItineraryModel:
    """
    Owners always see their itineraries. Anyone else only reaches one
    through the post it is attached to, under that post's privacy.
    """
    itinerary = await get_live_itinerary(itinerary_id)
    if itinerary.owner_id == viewer.id:
        return itinerary
    if itinerary.post_id is None:
        raise HTTPException(status_code=404, detail="Itinerary not found")

    await get_visible_post(itinerary.post_id, viewer.id)
    return itinerary


async def get_my_itineraries(owner: UserModel, page: int = 1, limit: int = 10) -> dict:
    query = ItineraryModel.find({"owner_id": owner.id, "is_deleted": {"$ne": True}})
    return await paginate(query, page, limit)


async def update_itinerary(itinerary_id: UUID, owner: UserModel, data: ItineraryUpdate) -> ItineraryModel:
    itinerary = await get_live_itinerary(itinerary_id)
    if itinerary.owner_id != owner.id:
        raise HTTPException(status_code=403, detail="Only the owner can update this itinerary")

    for field in data.model_fields_set:
        value = getattr(data, field)
        if value is not None:
            setattr(itinerary, field, value)
    # Saving recomputes overall_rating from the new days
    await itinerary.save()
    return itinerary
