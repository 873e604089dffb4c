from fastapi import APIRouter
from careerhub.api import auth, jobs, counselors, bookings, community, search, stats

api_router = APIRouter()
api_router.include_router(auth.router, prefix="/auth", tags=["auth"])
api_router.include_router(jobs.router, prefix="/jobs", tags=["jobs"])
api_router.include_router(counselors.router, prefix="/counselors", tags=["counselors"])
api_router.include_router(bookings.router, prefix="/counselors", tags=["bookings"])
api_router.include_router(community.router, prefix="/communities", tags=["communities"])
api_router.include_router(search.router, prefix="/search", tags=["search"])
api_router.include_router(stats.router, prefix="/stats", tags=["stats"])
