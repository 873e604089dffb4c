from fastapi import APIRouter, Depends, HTTPException, Query, status
from typing import Optional
from careerhub.api.deps import get_counselor_service
from careerhub.config import get_settings
from careerhub.exceptions import CounselorNotFoundError, InvalidCursorError
from careerhub.guard import require_role
from careerhub.schemas import (
    CounselorCreate,
    CounselorFilters,
    CounselorPage,
    CounselorRecord,
    CounselorStatus,
    CounselorUpdate,
    Principal,
    RequiredRole,
    StatusUpdate,
    VerificationUpdate,
)
from careerhub.services.counselors import CounselorService

router = APIRouter()


@router.get("", response_model=CounselorPage)
async def list_counselors(
    status_filter: Optional[CounselorStatus] = Query(None, alias="status"),
    specialization: Optional[str] = Query(None),
    is_verified: Optional[bool] = Query(None),
    page_size: Optional[int] = Query(None, ge=1, le=100),
    cursor: Optional[str] = Query(None),
    counselors: CounselorService = Depends(get_counselor_service),
    _: Principal = Depends(require_role(RequiredRole.ANY)),
):
    filters = CounselorFilters(
        status=status_filter, specialization=specialization, is_verified=is_verified
    )
    try:
        return await counselors.list_counselors(
            filters, page_size or get_settings().default_page_size, cursor
        )
    except InvalidCursorError as e:
        raise HTTPException(status_code=400, detail=str(e))


@router.get("/me", response_model=CounselorRecord)
async def get_own_profile(
    counselors: CounselorService = Depends(get_counselor_service),
    principal: Principal = Depends(require_role(RequiredRole.COUNSELOR)),
):
    try:
        return await counselors.get_counselor(principal.id)
    except CounselorNotFoundError:
        raise HTTPException(status_code=404, detail="Counselor not found")


@router.get("/{counselor_id}", response_model=CounselorRecord)
async def get_counselor(
    counselor_id: str,
    counselors: CounselorService = Depends(get_counselor_service),
    _: Principal = Depends(require_role(RequiredRole.ANY)),
):
    try:
        return await counselors.get_counselor(counselor_id)
    except CounselorNotFoundError:
        raise HTTPException(status_code=404, detail="Counselor not found")


@router.post("", response_model=CounselorRecord, status_code=status.HTTP_201_CREATED)
async def create_counselor(
    data: CounselorCreate,
    counselors: CounselorService = Depends(get_counselor_service),
    _: Principal = Depends(require_role(RequiredRole.ADMIN)),
):
    return await counselors.create_counselor(data)


@router.patch("/{counselor_id}", response_model=CounselorRecord)
async def update_counselor(
    counselor_id: str,
    data: CounselorUpdate,
    counselors: CounselorService = Depends(get_counselor_service),
    _: Principal = Depends(require_role(RequiredRole.ADMIN)),
):
    try:
        return await counselors.update_counselor(counselor_id, data)
    except CounselorNotFoundError:
        raise HTTPException(status_code=404, detail="Counselor not found")


@router.put("/{counselor_id}/status", response_model=CounselorRecord)
async def update_status(
    counselor_id: str,
    update: StatusUpdate,
    counselors: CounselorService = Depends(get_counselor_service),
    _: Principal = Depends(require_role(RequiredRole.ADMIN)),
):
    try:
        return await counselors.update_status(counselor_id, update.status)
    except CounselorNotFoundError:
        raise HTTPException(status_code=404, detail="Counselor not found")


@router.put("/{counselor_id}/verification", response_model=CounselorRecord)
async def update_verification(
    counselor_id: str,
    update: VerificationUpdate,
    counselors: CounselorService = Depends(get_counselor_service),
    _: Principal = Depends(require_role(RequiredRole.ADMIN)),
):
    try:
        return await counselors.set_verified(counselor_id, update.is_verified)
    except CounselorNotFoundError:
        raise HTTPException(status_code=404, detail="Counselor not found")


@router.delete("/{counselor_id}", status_code=status.HTTP_204_NO_CONTENT)
async def delete_counselor(
    counselor_id: str,
    counselors: CounselorService = Depends(get_counselor_service),
    _: Principal = Depends(require_role(RequiredRole.ADMIN)),
):
    try:
        await counselors.delete_counselor(counselor_id)
    except CounselorNotFoundError:
        raise HTTPException(status_code=404, detail="Counselor not found")
