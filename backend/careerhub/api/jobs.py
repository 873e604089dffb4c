from fastapi import APIRouter, Depends, HTTPException, Query, UploadFile, File, status
from fastapi.exceptions import RequestValidationError
from pydantic import ValidationError
from typing import Optional
from careerhub.api.deps import get_job_service
from careerhub.config import get_settings
from careerhub.exceptions import InvalidCursorError, JobNotFoundError, JobValidationError
from careerhub.guard import require_role
from careerhub.schemas import (
    EmploymentType,
    ExperienceLevel,
    JobCategory,
    JobFilters,
    JobFormData,
    JobPage,
    JobPatch,
    JobRecord,
    LogoUpload,
    Principal,
    RequiredRole,
)
from careerhub.services.jobs import JobService

router = APIRouter()


@router.get("", response_model=JobPage)
async def list_jobs(
    category: Optional[JobCategory] = Query(None),
    employment_type: Optional[EmploymentType] = Query(None),
    is_remote: Optional[bool] = Query(None),
    experience_level: Optional[ExperienceLevel] = Query(None),
    is_popular: Optional[bool] = Query(None),
    tag: Optional[str] = Query(None),
    is_active: bool = Query(False),
    is_expired: bool = Query(False),
    page_size: Optional[int] = Query(None, ge=1, le=100),
    cursor: Optional[str] = Query(None),
    jobs: JobService = Depends(get_job_service),
    _: Principal = Depends(require_role(RequiredRole.ANY)),
):
    try:
        filters = JobFilters(
            category=category,
            employment_type=employment_type,
            is_remote=is_remote,
            experience_level=experience_level,
            is_popular=is_popular,
            tag=tag,
            is_active=is_active,
            is_expired=is_expired,
        )
    except ValidationError as e:
        raise RequestValidationError(e.errors())

    try:
        return await jobs.list_jobs(
            filters, page_size or get_settings().default_page_size, cursor
        )
    except InvalidCursorError as e:
        raise HTTPException(status_code=400, detail=str(e))


@router.get("/search", response_model=list[JobRecord])
async def search_jobs(
    q: str = Query(..., min_length=1),
    jobs: JobService = Depends(get_job_service),
    _: Principal = Depends(require_role(RequiredRole.ANY)),
):
    return await jobs.search_jobs(q)


@router.get("/{job_id}", response_model=JobRecord)
async def get_job(
    job_id: str,
    jobs: JobService = Depends(get_job_service),
    _: Principal = Depends(require_role(RequiredRole.ANY)),
):
    try:
        return await jobs.get_job(job_id)
    except JobNotFoundError:
        raise HTTPException(status_code=404, detail="Job not found")


@router.post("", response_model=JobRecord, status_code=status.HTTP_201_CREATED)
async def create_job(
    form: JobFormData,
    jobs: JobService = Depends(get_job_service),
    _: Principal = Depends(require_role(RequiredRole.ADMIN)),
):
    return await jobs.create_job(form)


@router.patch("/{job_id}", response_model=JobRecord)
async def update_job(
    job_id: str,
    patch: JobPatch,
    jobs: JobService = Depends(get_job_service),
    _: Principal = Depends(require_role(RequiredRole.ADMIN)),
):
    try:
        return await jobs.update_job(job_id, patch)
    except JobNotFoundError:
        raise HTTPException(status_code=404, detail="Job not found")
    except JobValidationError as e:
        raise HTTPException(status_code=400, detail=str(e))


@router.post("/{job_id}/logo", response_model=JobRecord)
async def upload_logo(
    job_id: str,
    file: UploadFile = File(...),
    jobs: JobService = Depends(get_job_service),
    _: Principal = Depends(require_role(RequiredRole.ADMIN)),
):
    logo = LogoUpload(
        filename=file.filename or "logo",
        content=await file.read(),
        content_type=file.content_type or "application/octet-stream",
    )
    try:
        return await jobs.update_job(job_id, JobPatch(employer_logo=logo))
    except JobNotFoundError:
        raise HTTPException(status_code=404, detail="Job not found")


@router.delete("/{job_id}", status_code=status.HTTP_204_NO_CONTENT)
async def delete_job(
    job_id: str,
    jobs: JobService = Depends(get_job_service),
    _: Principal = Depends(require_role(RequiredRole.ADMIN)),
):
    await jobs.delete_job(job_id)


@router.post("/{job_id}/apply")
async def track_application(
    job_id: str,
    jobs: JobService = Depends(get_job_service),
    _: Principal = Depends(require_role(RequiredRole.ANY)),
):
    try:
        await jobs.track_application(job_id)
    except JobNotFoundError:
        raise HTTPException(status_code=404, detail="Job not found")
    return {"success": True}
