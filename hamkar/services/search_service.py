"""Developer search, quick search and directory statistics."""

import asyncio
from typing import Any, Dict, Iterable, List, Optional

from motor.motor_asyncio import AsyncIOMotorDatabase

from hamkar.db.base import DEVELOPERS
from hamkar.models import developer as developer_model
from hamkar.schemas.search import DeveloperSearchRequest, RangeFilter
from hamkar.services.project_service import count_projects
from hamkar.utils.helpers import PageParams, contains_pattern

NO_PASSWORD = {"password_hash": False}


def _range_query(bounds: Optional[RangeFilter]) -> Optional[Dict[str, float]]:
    if bounds is None or bounds.is_empty:
        return None
    query: Dict[str, float] = {}
    if bounds.min is not None:
        query["$gte"] = bounds.min
    if bounds.max is not None:
        query["$lte"] = bounds.max
    return query


def build_search_query(criteria: DeveloperSearchRequest) -> Dict[str, Any]:
    """Conjunctive Mongo filter for the structured developer search."""
    query: Dict[str, Any] = {"is_available": criteria.is_available}
    if criteria.skills:
        query["skills"] = {"$in": criteria.skills}
    if criteria.city:
        query["city"] = contains_pattern(criteria.city)

    experience = _range_query(criteria.experience_years)
    if experience:
        query["experience_years"] = experience
    salary = _range_query(criteria.salary_expectation)
    if salary:
        query["salary_expectation"] = salary
    return query


def build_quick_query(q: Optional[str]) -> Dict[str, Any]:
    """Free-text match on name, skills or city; availability always required."""
    if not q or not q.strip():
        return {"is_available": True}
    pattern = contains_pattern(q.strip())
    return {
        "$and": [
            {"is_available": True},
            {
                "$or": [
                    {"first_name": pattern},
                    {"last_name": pattern},
                    {"skills": pattern},
                    {"city": pattern},
                ]
            },
        ]
    }


def skill_overlap(doc: Dict[str, Any], skills: Iterable[str]) -> int:
    return len(set(doc.get("skills") or []) & set(skills))


def _sort_value(doc: Dict[str, Any], sort_by: str):
    if sort_by == "name":
        value = developer_model.full_name(doc).lower()
    else:
        value = doc.get(sort_by)
    # Missing values sort before present ones
    return (value is not None, value if value is not None else "")


def rank_developers(
    docs: List[Dict[str, Any]],
    skills: Optional[List[str]],
    sort_by: str = "created_at",
    sort_order: str = "desc",
) -> List[Dict[str, Any]]:
    """Order by descending skill overlap, then by ``sort_by``."""
    ranked = sorted(docs, key=lambda doc: _sort_value(doc, sort_by), reverse=sort_order == "desc")
    # sorted() is stable, so the tiebreak order survives within equal overlap counts
    wanted = skills or []
    return sorted(ranked, key=lambda doc: skill_overlap(doc, wanted), reverse=True)


async def search_developers(db: AsyncIOMotorDatabase, criteria: DeveloperSearchRequest):
    query = build_search_query(criteria)
    docs = await db[DEVELOPERS].find(query, projection=NO_PASSWORD).to_list(length=None)
    ranked = rank_developers(docs, criteria.skills, criteria.sort_by, criteria.sort_order)

    start = (criteria.page - 1) * criteria.limit
    page_docs = ranked[start:start + criteria.limit]

    counts = await asyncio.gather(*(count_projects(db, doc["_id"]) for doc in page_docs))
    results = []
    for doc, project_counts in zip(page_docs, counts):
        profile = developer_model.public_profile(doc)
        profile["skill_match_count"] = skill_overlap(doc, criteria.skills or [])
        profile.update(project_counts)
        results.append(profile)
    return results, len(docs)


async def quick_search(db: AsyncIOMotorDatabase, q: Optional[str], page: PageParams):
    query = build_quick_query(q)
    collection = db[DEVELOPERS]
    cursor = (
        collection.find(query, projection=NO_PASSWORD)
        .sort("created_at", -1)
        .skip(page.skip)
        .limit(page.limit)
    )
    docs, total = await asyncio.gather(
        cursor.to_list(length=page.limit),
        collection.count_documents(query),
    )
    return [developer_model.public_profile(doc) for doc in docs], total


def _sorted_distinct(values: Iterable[Any]) -> List[str]:
    cleaned = {value.strip() for value in values if isinstance(value, str) and value.strip()}
    return sorted(cleaned, key=lambda value: (value.lower(), value))


async def distinct_skills(db: AsyncIOMotorDatabase) -> List[str]:
    return _sorted_distinct(await db[DEVELOPERS].distinct("skills"))


async def distinct_cities(db: AsyncIOMotorDatabase) -> List[str]:
    return _sorted_distinct(await db[DEVELOPERS].distinct("city"))


async def statistics(db: AsyncIOMotorDatabase) -> Dict[str, Any]:
    collection = db[DEVELOPERS]
    total, available, skills, cities, experience = await asyncio.gather(
        collection.count_documents({}),
        collection.count_documents({"is_available": True}),
        distinct_skills(db),
        distinct_cities(db),
        collection.aggregate(
            [
                {
                    "$group": {
                        "_id": None,
                        "avg_experience": {"$avg": "$experience_years"},
                        "min_experience": {"$min": "$experience_years"},
                        "max_experience": {"$max": "$experience_years"},
                    }
                }
            ]
        ).to_list(length=1),
    )
    stats = experience[0] if experience else {}
    average = stats.get("avg_experience")
    return {
        "total_developers": total,
        "available_developers": available,
        "total_skills": len(skills),
        "total_cities": len(cities),
        "average_experience": round(average, 1) if average is not None else 0,
        "experience_range": {
            "min": stats.get("min_experience") or 0,
            "max": stats.get("max_experience") or 0,
        },
    }
