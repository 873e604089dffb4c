"""
Dashboard search across jobs, counselors and communities.

Every lookup is a client-side scan over the store (see
``JobService.search_jobs``); this endpoint only fans out and collects.
"""

import logging

from fastapi import APIRouter, Depends, Query
from pydantic import BaseModel

from careerhub.api.deps import get_community_service, get_counselor_service, get_job_service
from careerhub.guard import require_role
from careerhub.schemas import (
    CommunityRecord,
    CounselorRecord,
    JobRecord,
    Principal,
    RequiredRole,
)
from careerhub.services.community import CommunityService
from careerhub.services.counselors import CounselorService
from careerhub.services.jobs import JobService

logger = logging.getLogger(__name__)
router = APIRouter()


class SearchResponse(BaseModel):
    query: str
    jobs: list[JobRecord]
    counselors: list[CounselorRecord]
    communities: list[CommunityRecord]


@router.get("", response_model=SearchResponse)
async def search(
    q: str = Query(..., min_length=1),
    jobs: JobService = Depends(get_job_service),
    counselors: CounselorService = Depends(get_counselor_service),
    communities: CommunityService = Depends(get_community_service),
    _: Principal = Depends(require_role(RequiredRole.ANY)),
):
    job_results = await jobs.search_jobs(q)
    counselor_results = await counselors.search_counselors(q)
    community_results = await communities.search_communities(q)
    logger.info(
        f"Search '{q}': {len(job_results)} jobs, {len(counselor_results)} counselors, "
        f"{len(community_results)} communities"
    )
    return SearchResponse(
        query=q,
        jobs=job_results,
        counselors=counselor_results,
        communities=community_results,
    )
