"""
Booking Models - counselor time slots, bookings and ratings

Slot days:
    One row per counselor per calendar date, holding that day's slots as
    [{"time": "09:00", "is_booked": false, "meet_link": null}, ...] and the
    available/total counts kept in step with them.

Bookings:
    One row per booked slot. The (counselor, date, time) unique constraint
    is what stops two students taking the same slot.

Ratings:
    Written only when a rating comes with feedback; the counselor's running
    average lives on the counselor row.
"""

from sqlalchemy import (
    Column,
    String,
    Integer,
    Float,
    Text,
    Date,
    DateTime,
    Boolean,
    JSON,
    UniqueConstraint,
)
from careerhub.database import Base
from careerhub.models.job import generate_id


class CounselorSlotDay(Base):
    __tablename__ = "counselor_slot_days"
    __table_args__ = (UniqueConstraint("counselor_id", "date"),)

    id = Column(String, primary_key=True, default=generate_id)
    counselor_id = Column(String, nullable=False, index=True)
    date = Column(Date, nullable=False)
    day_of_week = Column(String(10), nullable=False)
    is_available = Column(Boolean, nullable=False, default=True)
    slots = Column(JSON, nullable=False, default=list)
    available_slots = Column(Integer, nullable=False, default=0)
    total_slots = Column(Integer, nullable=False, default=0)


class CounselorBooking(Base):
    __tablename__ = "counselor_bookings"
    __table_args__ = (UniqueConstraint("counselor_id", "date", "time"),)

    id = Column(String, primary_key=True, default=generate_id)
    counselor_id = Column(String, nullable=False, index=True)
    date = Column(Date, nullable=False, index=True)
    time = Column(String(5), nullable=False)
    user_id = Column(String, nullable=False, index=True)
    user_name = Column(String(200), nullable=False)
    status = Column(String(20), nullable=False, default="confirmed")
    meet_link = Column(String(2000), nullable=True)
    created_at = Column(DateTime, nullable=False)


class CounselorRating(Base):
    __tablename__ = "counselor_ratings"

    id = Column(String, primary_key=True, default=generate_id)
    counselor_id = Column(String, nullable=False, index=True)
    rating = Column(Float, nullable=False)
    feedback = Column(Text, nullable=False)
    created_at = Column(DateTime, nullable=False)
