from pydantic import BaseModel, ConfigDict, Field
from datetime import date, datetime
from typing import Annotated, Optional

# 24-hour "HH:MM"
TIME_PATTERN = r"^([01]\d|2[0-3]):[0-5]\d$"
TimeOfDay = Annotated[str, Field(pattern=TIME_PATTERN)]

SESSION_MINUTES = 30


class TimeSlot(BaseModel):
    time: str
    is_booked: bool = False
    meet_link: Optional[str] = None


class SlotDayRecord(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    counselor_id: str
    date: date
    day_of_week: str
    is_available: bool
    slots: list[TimeSlot]
    available_slots: int
    total_slots: int


class SlotsCreate(BaseModel):
    date: date
    times: list[TimeOfDay] = Field(..., min_length=1)


class BookingRequest(BaseModel):
    date: date
    time: TimeOfDay


class BookingRecord(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: str
    counselor_id: str
    date: date
    time: str
    user_id: str
    user_name: str
    status: str
    meet_link: Optional[str] = None
    duration: int = SESSION_MINUTES
    created_at: datetime


class UpcomingBooking(BookingRecord):
    counselor_name: str
    counselor_specialization: str
    counselor_photo_url: Optional[str] = None


class RatingRequest(BaseModel):
    rating: float = Field(..., ge=0, le=5)
    feedback: Optional[str] = None


class RatingResult(BaseModel):
    counselor_id: str
    rating: float
