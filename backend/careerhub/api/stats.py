from fastapi import APIRouter, Depends
from careerhub.api.deps import get_community_service, get_counselor_service, get_job_service
from careerhub.guard import require_role
from careerhub.schemas import Principal, RequiredRole
from careerhub.services.community import CommunityService
from careerhub.services.counselors import CounselorService
from careerhub.services.jobs import JobService

router = APIRouter()


@router.get("")
async def get_stats(
    jobs: JobService = Depends(get_job_service),
    counselors: CounselorService = Depends(get_counselor_service),
    communities: CommunityService = Depends(get_community_service),
    _: Principal = Depends(require_role(RequiredRole.ANY)),
):
    job_stats = await jobs.job_stats()
    counselor_count, total_sessions = await counselors.total_sessions()

    return {
        **job_stats.model_dump(),
        "total_counselors": counselor_count,
        "total_sessions": total_sessions,
        "total_communities": await communities.count_communities(),
    }
