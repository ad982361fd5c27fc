"""Developer search endpoints."""

from typing import Optional

from fastapi import APIRouter, Depends
from motor.motor_asyncio import AsyncIOMotorDatabase

from hamkar.db.base import to_str_id
from hamkar.db.session import get_db
from hamkar.schemas.search import DeveloperSearchRequest
from hamkar.services import search_service
from hamkar.utils.helpers import PageParams, envelope, page_params, paginate

router = APIRouter()


@router.post("/developers")
async def search_developers(body: DeveloperSearchRequest, db: AsyncIOMotorDatabase = Depends(get_db)):
    """Filter developers and rank them by how many of the requested skills they have."""
    results, total = await search_service.search_developers(db, body)
    return envelope(
        data=[to_str_id(doc) for doc in results],
        pagination=paginate(body.page, body.limit, total),
        filters=body.model_dump(exclude={"page", "limit"}, exclude_none=True),
    )


@router.get("/developers/quick")
async def quick_search(
    q: Optional[str] = None,
    page: PageParams = Depends(page_params),
    db: AsyncIOMotorDatabase = Depends(get_db),
):
    results, total = await search_service.quick_search(db, q, page)
    return envelope(
        data=[to_str_id(doc) for doc in results],
        pagination=page.pagination(total),
        query=q or "",
    )


@router.get("/skills")
async def list_skills(db: AsyncIOMotorDatabase = Depends(get_db)):
    return envelope(data=await search_service.distinct_skills(db))


@router.get("/cities")
async def list_cities(db: AsyncIOMotorDatabase = Depends(get_db)):
    return envelope(data=await search_service.distinct_cities(db))


@router.get("/statistics")
async def developer_statistics(db: AsyncIOMotorDatabase = Depends(get_db)):
    return envelope(data=await search_service.statistics(db))
