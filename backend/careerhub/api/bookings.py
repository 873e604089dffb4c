"""
Counselor scheduling and booking routes, mounted under /counselors.

Viewing schedules and booking are open to any signed-in principal.
Changing a counselor's availability or reading their day's bookings is
limited to that counselor and admins.
"""

from datetime import date
from typing import Optional

from fastapi import APIRouter, Depends, HTTPException, Query, status
from careerhub.api.deps import get_booking_service
from careerhub.exceptions import (
    AvailabilityPatternError,
    CounselorNotFoundError,
    NotFoundError,
    SlotUnavailableError,
)
from careerhub.guard import require_role
from careerhub.schemas import (
    AvailabilityDay,
    BookingRecord,
    BookingRequest,
    Principal,
    RatingRequest,
    RatingResult,
    RequiredRole,
    Role,
    SlotDayRecord,
    SlotsCreate,
    UpcomingBooking,
)
from careerhub.services.bookings import DEFAULT_WEEKS_AHEAD, BookingService

router = APIRouter()


def ensure_manages(principal: Principal, counselor_id: str) -> None:
    if principal.role != Role.ADMIN and principal.id != counselor_id:
        raise HTTPException(
            status_code=status.HTTP_403_FORBIDDEN,
            detail="Only this counselor or an admin may do that",
        )


@router.get("/bookings/upcoming", response_model=list[UpcomingBooking])
async def get_upcoming_bookings(
    bookings: BookingService = Depends(get_booking_service),
    principal: Principal = Depends(require_role(RequiredRole.ANY)),
):
    return await bookings.get_user_upcoming_bookings(principal.id)


@router.get("/{counselor_id}/schedule", response_model=list[AvailabilityDay])
async def get_schedule(
    counselor_id: str,
    bookings: BookingService = Depends(get_booking_service),
    _: Principal = Depends(require_role(RequiredRole.ANY)),
):
    try:
        return await bookings.get_schedule(counselor_id)
    except CounselorNotFoundError:
        raise HTTPException(status_code=404, detail="Counselor not found")


@router.put("/{counselor_id}/availability", response_model=list[AvailabilityDay])
async def update_availability(
    counselor_id: str,
    day: AvailabilityDay,
    bookings: BookingService = Depends(get_booking_service),
    principal: Principal = Depends(require_role(RequiredRole.ANY)),
):
    ensure_manages(principal, counselor_id)
    try:
        return await bookings.update_availability(counselor_id, day.day, day.slots)
    except CounselorNotFoundError:
        raise HTTPException(status_code=404, detail="Counselor not found")


@router.post("/{counselor_id}/slots/generate", response_model=list[date])
async def generate_slots(
    counselor_id: str,
    weeks_ahead: int = Query(DEFAULT_WEEKS_AHEAD, ge=1, le=12),
    bookings: BookingService = Depends(get_booking_service),
    principal: Principal = Depends(require_role(RequiredRole.ANY)),
):
    ensure_manages(principal, counselor_id)
    try:
        return await bookings.generate_future_slots(counselor_id, weeks_ahead)
    except CounselorNotFoundError:
        raise HTTPException(status_code=404, detail="Counselor not found")
    except AvailabilityPatternError as e:
        raise HTTPException(status_code=400, detail=str(e))


@router.post("/{counselor_id}/slots", response_model=SlotDayRecord)
async def add_slots(
    counselor_id: str,
    data: SlotsCreate,
    bookings: BookingService = Depends(get_booking_service),
    principal: Principal = Depends(require_role(RequiredRole.ANY)),
):
    ensure_manages(principal, counselor_id)
    try:
        return await bookings.add_available_slots(counselor_id, data.date, data.times)
    except CounselorNotFoundError:
        raise HTTPException(status_code=404, detail="Counselor not found")


@router.get("/{counselor_id}/slots", response_model=list[SlotDayRecord])
async def get_available_dates(
    counselor_id: str,
    bookings: BookingService = Depends(get_booking_service),
    _: Principal = Depends(require_role(RequiredRole.ANY)),
):
    return await bookings.get_available_dates(counselor_id)


@router.get("/{counselor_id}/slots/{day}", response_model=SlotDayRecord)
async def get_available_slots(
    counselor_id: str,
    day: date,
    bookings: BookingService = Depends(get_booking_service),
    _: Principal = Depends(require_role(RequiredRole.ANY)),
):
    try:
        return await bookings.get_available_slots(counselor_id, day)
    except NotFoundError as e:
        raise HTTPException(status_code=404, detail=str(e))


@router.get("/{counselor_id}/bookings", response_model=list[BookingRecord])
async def get_bookings_for_date(
    counselor_id: str,
    day: date = Query(..., alias="date"),
    bookings: BookingService = Depends(get_booking_service),
    principal: Principal = Depends(require_role(RequiredRole.ANY)),
):
    ensure_manages(principal, counselor_id)
    try:
        return await bookings.get_bookings_for_date(counselor_id, day)
    except CounselorNotFoundError:
        raise HTTPException(status_code=404, detail="Counselor not found")


@router.post(
    "/{counselor_id}/bookings",
    response_model=BookingRecord,
    status_code=status.HTTP_201_CREATED,
)
async def book_slot(
    counselor_id: str,
    request: BookingRequest,
    bookings: BookingService = Depends(get_booking_service),
    principal: Principal = Depends(require_role(RequiredRole.ANY)),
):
    try:
        return await bookings.book_slot(
            counselor_id, request.date, request.time, principal.id, principal.name
        )
    except NotFoundError as e:
        raise HTTPException(status_code=404, detail=str(e))
    except SlotUnavailableError as e:
        raise HTTPException(status_code=409, detail=str(e))


@router.delete("/{counselor_id}/bookings/{day}/{time}", status_code=status.HTTP_204_NO_CONTENT)
async def cancel_booking(
    counselor_id: str,
    day: date,
    time: str,
    user_id: Optional[str] = Query(None),
    bookings: BookingService = Depends(get_booking_service),
    principal: Principal = Depends(require_role(RequiredRole.ANY)),
):
    """Cancel your own booking, or (counselor/admin) anyone's via ``user_id``."""
    if user_id and user_id != principal.id:
        ensure_manages(principal, counselor_id)
    try:
        await bookings.cancel_booking(counselor_id, day, time, user_id or principal.id)
    except NotFoundError as e:
        raise HTTPException(status_code=404, detail=str(e))


@router.post("/{counselor_id}/ratings", response_model=RatingResult)
async def rate_counselor(
    counselor_id: str,
    request: RatingRequest,
    bookings: BookingService = Depends(get_booking_service),
    _: Principal = Depends(require_role(RequiredRole.ANY)),
):
    try:
        rating = await bookings.rate_counselor(counselor_id, request.rating, request.feedback)
    except CounselorNotFoundError:
        raise HTTPException(status_code=404, detail="Counselor not found")
    return RatingResult(counselor_id=counselor_id, rating=rating)
