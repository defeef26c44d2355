from datetime import datetime, timezone
from math import ceil
from uuid import UUID, uuid4

from beanie import Document
from pydantic import BaseModel, Field


def utc_now() -> datetime:
    """Naive UTC timestamp, the same shape Mongo hands back on reads."""
    return datetime.now(timezone.utc).replace(tzinfo=None)


class BaseCollection(Document):
    id: UUID = Field(default_factory=uuid4, alias="_id")


class BaseResponse(BaseModel):
    id: UUID


async def paginate(query, page: int = 1, limit: int = 10, sort: str = "-created_at") -> dict:
    """
    Run a Beanie FindMany with page/limit semantics.

    Returns the dict shape every listing endpoint answers with:
    results, page, limit, total_pages, total_results.
    """
    page = max(1, page)
    limit = max(1, limit)
    total_results = await query.count()
    results = await query.sort(sort).skip((page - 1) * limit).limit(limit).to_list()
    return {
        "results": results,
        "page": page,
        "limit": limit,
        "total_pages": ceil(total_results / limit) if total_results else 0,
        "total_results": total_results,
    }
