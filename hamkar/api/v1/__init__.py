"""API routes."""

from fastapi import APIRouter

from hamkar.api.v1 import auth, dashboard, developers, employers, job_requests, projects, search, upload

api_router = APIRouter()

# Include all route modules
api_router.include_router(auth.router, prefix="/auth", tags=["Authentication"])
api_router.include_router(developers.router, prefix="/developers", tags=["Developers"])
api_router.include_router(employers.router, prefix="/employers", tags=["Employers"])
api_router.include_router(projects.router, prefix="/projects", tags=["Projects"])
api_router.include_router(job_requests.router, prefix="/job-requests", tags=["Job Requests"])
api_router.include_router(search.router, prefix="/search", tags=["Search"])
api_router.include_router(dashboard.router, prefix="/dashboard", tags=["Dashboard"])
api_router.include_router(upload.router, prefix="/upload", tags=["Upload"])
