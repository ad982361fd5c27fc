"""Read-only dashboard counters, activity feeds and histograms."""

import asyncio
from datetime import datetime, timedelta
from typing import Any, Dict, List, Optional

from motor.motor_asyncio import AsyncIOMotorDatabase

from hamkar.core.security import CurrentAccount
from hamkar.db.base import DEVELOPERS, EMPLOYERS, JOB_REQUESTS, PROJECTS, utcnow
from hamkar.models import developer as developer_model
from hamkar.models import employer as employer_model
from hamkar.models import job_request as job_request_model
from hamkar.models.account import AccountKind
from hamkar.models.job_request import JobRequestStatus
from hamkar.services.job_request_service import attach_parties

RECENT_LIMIT = 5
HISTOGRAM_MONTHS = 6

ANALYTICS_PERIODS = {
    "week": timedelta(days=7),
    "month": timedelta(days=30),
    "year": timedelta(days=365),
}

PENDING = JobRequestStatus.PENDING.value
ACCEPTED = JobRequestStatus.ACCEPTED.value
REJECTED = JobRequestStatus.REJECTED.value
WITHDRAWN = JobRequestStatus.WITHDRAWN.value

# Accepted requests with an interview date are upcoming interviews
SCHEDULED_INTERVIEW = {"status": ACCEPTED, "interview_date": {"$exists": True, "$ne": None}}


def merge_activity(
    job_requests: List[Dict[str, Any]],
    projects: List[Dict[str, Any]],
    limit: int = RECENT_LIMIT,
) -> List[Dict[str, Any]]:
    """Newest-first feed of received job requests and project updates."""
    activity = []
    for request in job_requests:
        company = (request.get("employer") or {}).get("company_name") or "Unknown company"
        activity.append(
            {
                "type": "job_request",
                "message": f"Job request from {company} - {request.get('job_title')}",
                "date": request.get("created_at"),
                "status": request.get("status"),
                "job_request_id": request["_id"],
            }
        )
    for project in projects:
        activity.append(
            {
                "type": "project",
                "message": f'Project "{project.get("title")}" updated',
                "date": project.get("updated_at"),
                "project_id": project["_id"],
            }
        )
    activity.sort(key=lambda item: item["date"] or datetime.min, reverse=True)
    return activity[:limit]


async def developer_dashboard(db: AsyncIOMotorDatabase, account: CurrentAccount) -> Dict[str, Any]:
    developer_id = account.id
    requests = db[JOB_REQUESTS]
    (
        total_projects,
        public_projects,
        total_requests,
        pending,
        accepted,
        rejected,
        pending_interviews,
        recent_requests,
        recent_projects,
    ) = await asyncio.gather(
        db[PROJECTS].count_documents({"developer_id": developer_id}),
        db[PROJECTS].count_documents({"developer_id": developer_id, "is_public": True}),
        requests.count_documents({"developer_id": developer_id}),
        requests.count_documents({"developer_id": developer_id, "status": PENDING}),
        requests.count_documents({"developer_id": developer_id, "status": ACCEPTED}),
        requests.count_documents({"developer_id": developer_id, "status": REJECTED}),
        requests.count_documents({"developer_id": developer_id, **SCHEDULED_INTERVIEW}),
        requests.find({"developer_id": developer_id}).sort("created_at", -1).limit(RECENT_LIMIT).to_list(length=RECENT_LIMIT),
        db[PROJECTS].find({"developer_id": developer_id}).sort("updated_at", -1).limit(RECENT_LIMIT).to_list(length=RECENT_LIMIT),
    )
    recent_requests = await attach_parties(db, recent_requests)

    return {
        "total_projects": total_projects,
        "public_projects": public_projects,
        "total_job_requests": total_requests,
        "pending_requests": pending,
        "accepted_requests": accepted,
        "rejected_requests": rejected,
        "pending_interviews": pending_interviews,
        "profile_completion": developer_model.profile_completion(account.document),
        "recent_activity": merge_activity(recent_requests, recent_projects),
    }


async def employer_dashboard(db: AsyncIOMotorDatabase, account: CurrentAccount) -> Dict[str, Any]:
    employer_id = account.id
    requests = db[JOB_REQUESTS]
    (
        total_sent,
        pending,
        accepted,
        rejected,
        withdrawn,
        pending_interviews,
        recent,
    ) = await asyncio.gather(
        requests.count_documents({"employer_id": employer_id}),
        requests.count_documents({"employer_id": employer_id, "status": PENDING}),
        requests.count_documents({"employer_id": employer_id, "status": ACCEPTED}),
        requests.count_documents({"employer_id": employer_id, "status": REJECTED}),
        requests.count_documents({"employer_id": employer_id, "status": WITHDRAWN}),
        requests.count_documents({"employer_id": employer_id, **SCHEDULED_INTERVIEW}),
        requests.find({"employer_id": employer_id}).sort("created_at", -1).limit(RECENT_LIMIT).to_list(length=RECENT_LIMIT),
    )
    recent = await attach_parties(db, recent)

    activity = []
    for request in recent:
        developer = request.get("developer") or {}
        activity.append(
            {
                "type": "job_request",
                "message": f"Job request to {developer.get('full_name') or 'Unknown developer'} - {request.get('job_title')}",
                "date": request.get("created_at"),
                "status": request.get("status"),
                "job_request": job_request_model.summary(request),
                "developer": developer or None,
            }
        )

    return {
        "total_sent_requests": total_sent,
        "pending_requests": pending,
        "accepted_requests": accepted,
        "rejected_requests": rejected,
        "withdrawn_requests": withdrawn,
        "accepted_candidates": accepted,
        "pending_interviews": pending_interviews,
        "profile_completion": employer_model.profile_completion(account.document),
        "recent_activity": activity,
    }


def months_ago(now: datetime, months: int) -> datetime:
    """Same day-of-month ``months`` earlier, clamped to the 28th."""
    month_index = now.year * 12 + (now.month - 1) - months
    year, month = divmod(month_index, 12)
    return now.replace(year=year, month=month + 1, day=min(now.day, 28))


async def admin_dashboard(db: AsyncIOMotorDatabase) -> Dict[str, Any]:
    requests = db[JOB_REQUESTS]
    since = months_ago(utcnow(), HISTOGRAM_MONTHS)
    (
        total_developers,
        total_employers,
        total_projects,
        total_requests,
        pending,
        accepted,
        recent_developers,
        recent_employers,
        recent_requests,
        monthly,
    ) = await asyncio.gather(
        db[DEVELOPERS].count_documents({}),
        db[EMPLOYERS].count_documents({}),
        db[PROJECTS].count_documents({}),
        requests.count_documents({}),
        requests.count_documents({"status": PENDING}),
        requests.count_documents({"status": ACCEPTED}),
        db[DEVELOPERS]
        .find({}, projection={"first_name": True, "last_name": True, "email": True, "city": True, "created_at": True})
        .sort("created_at", -1)
        .limit(RECENT_LIMIT)
        .to_list(length=RECENT_LIMIT),
        db[EMPLOYERS]
        .find({}, projection={"company_name": True, "email": True, "city": True, "created_at": True})
        .sort("created_at", -1)
        .limit(RECENT_LIMIT)
        .to_list(length=RECENT_LIMIT),
        requests.find({}).sort("created_at", -1).limit(RECENT_LIMIT).to_list(length=RECENT_LIMIT),
        requests.aggregate(
            [
                {"$match": {"created_at": {"$gte": since}}},
                {
                    "$group": {
                        "_id": {"year": {"$year": "$created_at"}, "month": {"$month": "$created_at"}},
                        "count": {"$sum": 1},
                    }
                },
                {"$sort": {"_id.year": 1, "_id.month": 1}},
            ]
        ).to_list(length=None),
    )
    recent_requests = await attach_parties(db, recent_requests)

    return {
        "overview": {
            "total_developers": total_developers,
            "total_employers": total_employers,
            "total_projects": total_projects,
            "total_job_requests": total_requests,
            "pending_job_requests": pending,
            "accepted_job_requests": accepted,
        },
        "recent_activity": {
            "developers": recent_developers,
            "employers": recent_employers,
            "job_requests": recent_requests,
        },
        "monthly_stats": [
            {"year": row["_id"]["year"], "month": row["_id"]["month"], "count": row["count"]}
            for row in monthly
        ],
    }


def analytics_window(period: str, now: Optional[datetime] = None):
    now = now or utcnow()
    return now - ANALYTICS_PERIODS.get(period, ANALYTICS_PERIODS["month"]), now


async def _daily_counts(db: AsyncIOMotorDatabase, collection: str, match: Dict[str, Any]) -> List[Dict[str, Any]]:
    rows = await db[collection].aggregate(
        [
            {"$match": match},
            {
                "$group": {
                    "_id": {"$dateToString": {"format": "%Y-%m-%d", "date": "$created_at"}},
                    "count": {"$sum": 1},
                }
            },
            {"$sort": {"_id": 1}},
        ]
    ).to_list(length=None)
    return [{"date": row["_id"], "count": row["count"]} for row in rows]


async def analytics(db: AsyncIOMotorDatabase, account: CurrentAccount, period: str) -> Dict[str, Any]:
    """Per-day creation counts of the caller's projects and job requests."""
    start, end = analytics_window(period)
    created = {"created_at": {"$gte": start}}

    if account.kind is AccountKind.DEVELOPER:
        projects, requests = await asyncio.gather(
            _daily_counts(db, PROJECTS, {"developer_id": account.id, **created}),
            _daily_counts(db, JOB_REQUESTS, {"developer_id": account.id, **created}),
        )
        data = {"projects": projects, "job_requests": requests}
    else:
        data = {"job_requests": await _daily_counts(db, JOB_REQUESTS, {"employer_id": account.id, **created})}

    return {"period": period, "start_date": start, "end_date": end, "analytics": data}
