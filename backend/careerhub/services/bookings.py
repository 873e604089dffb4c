"""
Counselor Booking Service

Turns a counselor's weekly availability pattern (``Counselor.availability``,
e.g. [{"day": "Monday", "slots": ["09:00", "10:00"]}]) into dated slot
lists, and books, cancels and rates sessions against them.

Operations:
    get_schedule              - The weekly pattern as stored
    update_availability       - Replace one weekday's pattern, then regenerate
    add_available_slots       - Write the slot list for one date
    generate_future_slots     - Fill in dates from today up to N weeks ahead
    get_available_dates       - Every dated slot list, by date
    get_available_slots       - One date's slot list
    book_slot                 - Take a free slot, creating a meeting link
    cancel_booking            - Free a booked slot and drop the booking
    get_bookings_for_date     - A counselor's bookings on one date, by time
    get_user_upcoming_bookings - A student's bookings from today on
    rate_counselor            - Fold a rating into the running average
"""

import logging
import uuid
from datetime import date, timedelta
from typing import Optional

from sqlalchemy import select, delete
from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession

from careerhub.exceptions import (
    AvailabilityPatternError,
    BookingNotFoundError,
    CounselorNotFoundError,
    SlotsNotFoundError,
    SlotUnavailableError,
    TimeSlotNotFoundError,
)
from careerhub.middleware.metrics import record_booking
from careerhub.models import Counselor, CounselorBooking, CounselorRating, CounselorSlotDay
from careerhub.schemas import (
    AvailabilityDay,
    BookingRecord,
    SlotDayRecord,
    TimeSlot,
    UpcomingBooking,
)
from careerhub.timeutils import Clock, utcnow

logger = logging.getLogger(__name__)

DEFAULT_WEEKS_AHEAD = 4
MEET_BASE_URL = "https://meet.google.com"


def new_meet_link() -> str:
    return f"{MEET_BASE_URL}/{uuid.uuid4().hex[:12]}"


def weekday_name(day: date) -> str:
    return day.strftime("%A").lower()


def build_slots(times: list[str]) -> list[dict]:
    return [TimeSlot(time=time).model_dump() for time in sorted(set(times))]


class BookingService:
    def __init__(self, db: AsyncSession, clock: Clock = utcnow):
        self.db = db
        self.clock = clock

    async def _get_counselor(self, counselor_id: str) -> Counselor:
        result = await self.db.execute(select(Counselor).where(Counselor.id == counselor_id))
        counselor = result.scalar_one_or_none()
        if counselor is None:
            raise CounselorNotFoundError(counselor_id)
        return counselor

    async def _get_slot_day(self, counselor_id: str, day: date) -> Optional[CounselorSlotDay]:
        result = await self.db.execute(
            select(CounselorSlotDay).where(
                CounselorSlotDay.counselor_id == counselor_id,
                CounselorSlotDay.date == day,
            )
        )
        return result.scalar_one_or_none()

    async def get_schedule(self, counselor_id: str) -> list[AvailabilityDay]:
        counselor = await self._get_counselor(counselor_id)
        return [AvailabilityDay.model_validate(day) for day in counselor.availability or []]

    async def update_availability(
        self, counselor_id: str, day: str, times: list[str]
    ) -> list[AvailabilityDay]:
        """
        Replace (or add) the pattern for weekday ``day`` and regenerate
        dated slots for the default horizon.

        Returns:
            The full weekly pattern after the change
        """
        try:
            counselor = await self._get_counselor(counselor_id)
            pattern = [
                entry for entry in counselor.availability or []
                if entry["day"].lower() != day.lower()
            ]
            pattern.append(AvailabilityDay(day=day, slots=times).model_dump())

            counselor.availability = pattern
            counselor.updated_at = self.clock()
            await self.db.commit()
        except Exception as e:
            logger.error(f"Error updating availability for counselor {counselor_id}: {e}")
            raise

        await self.generate_future_slots(counselor_id, DEFAULT_WEEKS_AHEAD)
        return [AvailabilityDay.model_validate(entry) for entry in pattern]

    async def add_available_slots(
        self, counselor_id: str, day: date, times: list[str]
    ) -> SlotDayRecord:
        """
        Write the slot list for one date.

        Times already on that date keep their booking state; times not in
        ``times`` are dropped unless booked.
        """
        try:
            await self._get_counselor(counselor_id)
            slot_day = await self._get_slot_day(counselor_id, day)

            slots = build_slots(times)
            if slot_day is not None:
                existing = {slot["time"]: slot for slot in slot_day.slots or []}
                wanted = {slot["time"] for slot in slots}
                slots = [existing.get(slot["time"], slot) for slot in slots]
                slots += [
                    slot for time, slot in existing.items()
                    if time not in wanted and slot["is_booked"]
                ]
                slots.sort(key=lambda slot: slot["time"])
            else:
                slot_day = CounselorSlotDay(counselor_id=counselor_id, date=day)
                self.db.add(slot_day)

            slot_day.day_of_week = weekday_name(day)
            slot_day.is_available = True
            slot_day.slots = slots
            slot_day.total_slots = len(slots)
            slot_day.available_slots = sum(1 for slot in slots if not slot["is_booked"])

            await self.db.commit()
            await self.db.refresh(slot_day)
        except Exception as e:
            logger.error(f"Error adding slots for counselor {counselor_id} on {day}: {e}")
            await self.db.rollback()
            raise

        return SlotDayRecord.model_validate(slot_day)

    async def generate_future_slots(
        self, counselor_id: str, weeks_ahead: int = DEFAULT_WEEKS_AHEAD
    ) -> list[date]:
        """
        Create slot lists from today through today + ``weeks_ahead`` weeks
        for every date whose weekday is in the counselor's pattern.

        Dates that already have a slot list are left alone.

        Returns:
            The dates that were created

        Raises:
            CounselorNotFoundError: No counselor with this id
            AvailabilityPatternError: The counselor has no weekly pattern
        """
        try:
            counselor = await self._get_counselor(counselor_id)
            pattern = {
                entry["day"].lower(): entry["slots"]
                for entry in counselor.availability or []
                if entry.get("slots")
            }
            if not pattern:
                raise AvailabilityPatternError(counselor_id)

            today = self.clock().date()
            end = today + timedelta(weeks=weeks_ahead)
            result = await self.db.execute(
                select(CounselorSlotDay.date).where(
                    CounselorSlotDay.counselor_id == counselor_id,
                    CounselorSlotDay.date >= today,
                    CounselorSlotDay.date <= end,
                )
            )
            existing = set(result.scalars().all())

            created = []
            day = today
            while day <= end:
                times = pattern.get(weekday_name(day))
                if times and day not in existing:
                    slots = build_slots(times)
                    self.db.add(CounselorSlotDay(
                        counselor_id=counselor_id,
                        date=day,
                        day_of_week=weekday_name(day),
                        is_available=True,
                        slots=slots,
                        available_slots=len(slots),
                        total_slots=len(slots),
                    ))
                    created.append(day)
                day += timedelta(days=1)

            await self.db.commit()
        except Exception as e:
            logger.error(f"Error generating slots for counselor {counselor_id}: {e}")
            await self.db.rollback()
            raise

        logger.info(f"Generated {len(created)} slot days for counselor {counselor_id}")
        return created

    async def get_available_dates(self, counselor_id: str) -> list[SlotDayRecord]:
        try:
            result = await self.db.execute(
                select(CounselorSlotDay)
                .where(CounselorSlotDay.counselor_id == counselor_id)
                .order_by(CounselorSlotDay.date)
            )
            return [SlotDayRecord.model_validate(day) for day in result.scalars().all()]
        except Exception as e:
            logger.error(f"Error getting available dates for counselor {counselor_id}: {e}")
            raise

    async def get_available_slots(self, counselor_id: str, day: date) -> SlotDayRecord:
        """
        Raises:
            SlotsNotFoundError: Nothing scheduled on that date
        """
        slot_day = await self._get_slot_day(counselor_id, day)
        if slot_day is None:
            raise SlotsNotFoundError(counselor_id, day)
        return SlotDayRecord.model_validate(slot_day)

    async def book_slot(
        self, counselor_id: str, day: date, time: str, user_id: str, user_name: str
    ) -> BookingRecord:
        """
        Book the slot at ``time`` on ``day`` for a student.

        Marks the slot booked with a new meeting link, records the booking
        and counts a session for the counselor, all in one commit.

        Raises:
            CounselorNotFoundError: No counselor with this id
            SlotsNotFoundError: Nothing scheduled on that date
            SlotUnavailableError: No such slot, or it is already taken
        """
        try:
            counselor = await self._get_counselor(counselor_id)
            slot_day = await self._get_slot_day(counselor_id, day)
            if slot_day is None:
                raise SlotsNotFoundError(counselor_id, day)

            slots = [dict(slot) for slot in slot_day.slots or []]
            slot = next((s for s in slots if s["time"] == time), None)
            if slot is None or slot["is_booked"]:
                raise SlotUnavailableError()

            meet_link = new_meet_link()
            slot["is_booked"] = True
            slot["meet_link"] = meet_link
            slot_day.slots = slots
            slot_day.available_slots = max(slot_day.available_slots - 1, 0)

            booking = CounselorBooking(
                counselor_id=counselor_id,
                date=day,
                time=time,
                user_id=user_id,
                user_name=user_name,
                status="confirmed",
                meet_link=meet_link,
                created_at=self.clock(),
            )
            self.db.add(booking)
            counselor.session_count = (counselor.session_count or 0) + 1

            await self.db.commit()
            await self.db.refresh(booking)
        except IntegrityError as e:
            # Another booking for the same slot committed first
            logger.warning(f"Slot {day} {time} for counselor {counselor_id} already taken: {e}")
            await self.db.rollback()
            record_booking("unavailable")
            raise SlotUnavailableError() from e
        except SlotUnavailableError:
            record_booking("unavailable")
            raise
        except Exception as e:
            logger.error(f"Error booking slot for counselor {counselor_id}: {e}")
            await self.db.rollback()
            raise

        record_booking("booked")
        logger.info(f"Booked {day} {time} with counselor {counselor_id} for {user_id}")
        return BookingRecord.model_validate(booking)

    async def cancel_booking(self, counselor_id: str, day: date, time: str, user_id: str) -> None:
        """
        Cancel ``user_id``'s booking and free the slot.

        Raises:
            SlotsNotFoundError: Nothing scheduled on that date
            TimeSlotNotFoundError: No slot at that time
            BookingNotFoundError: The slot is not booked by this user
        """
        try:
            slot_day = await self._get_slot_day(counselor_id, day)
            if slot_day is None:
                raise SlotsNotFoundError(counselor_id, day)

            slots = [dict(slot) for slot in slot_day.slots or []]
            slot = next((s for s in slots if s["time"] == time), None)
            if slot is None:
                raise TimeSlotNotFoundError(day, time)

            result = await self.db.execute(
                delete(CounselorBooking).where(
                    CounselorBooking.counselor_id == counselor_id,
                    CounselorBooking.date == day,
                    CounselorBooking.time == time,
                    CounselorBooking.user_id == user_id,
                )
            )
            if result.rowcount == 0:
                raise BookingNotFoundError(day, time, user_id)

            if slot["is_booked"]:
                slot_day.available_slots = min(slot_day.available_slots + 1, slot_day.total_slots)
            slot["is_booked"] = False
            slot["meet_link"] = None
            slot_day.slots = slots

            await self.db.commit()
        except Exception as e:
            logger.error(f"Error cancelling booking for counselor {counselor_id}: {e}")
            await self.db.rollback()
            raise

        record_booking("cancelled")
        logger.info(f"Cancelled {day} {time} with counselor {counselor_id} for {user_id}")

    async def get_bookings_for_date(self, counselor_id: str, day: date) -> list[BookingRecord]:
        try:
            await self._get_counselor(counselor_id)
            result = await self.db.execute(
                select(CounselorBooking)
                .where(CounselorBooking.counselor_id == counselor_id, CounselorBooking.date == day)
                .order_by(CounselorBooking.time)
            )
            return [BookingRecord.model_validate(b) for b in result.scalars().all()]
        except Exception as e:
            logger.error(f"Error getting bookings for counselor {counselor_id} on {day}: {e}")
            raise

    async def get_user_upcoming_bookings(self, user_id: str) -> list[UpcomingBooking]:
        """Bookings dated today or later across all counselors, soonest first."""
        today = self.clock().date()
        try:
            result = await self.db.execute(
                select(CounselorBooking, Counselor)
                .join(Counselor, Counselor.id == CounselorBooking.counselor_id)
                .where(CounselorBooking.user_id == user_id, CounselorBooking.date >= today)
                .order_by(CounselorBooking.date, CounselorBooking.time)
            )
            rows = result.all()
        except Exception as e:
            logger.error(f"Error getting upcoming bookings for user {user_id}: {e}")
            raise

        return [
            UpcomingBooking(
                **BookingRecord.model_validate(booking).model_dump(),
                counselor_name=counselor.name,
                counselor_specialization=counselor.specialization,
                counselor_photo_url=counselor.photo_url,
            )
            for booking, counselor in rows
        ]

    async def rate_counselor(
        self, counselor_id: str, rating: float, feedback: Optional[str] = None
    ) -> float:
        """
        Fold ``rating`` into the counselor's average, weighted by session count.

        With no sessions yet the rating replaces the average. The result is
        rounded to one decimal. Feedback, when given, is kept as a rating row.

        Returns:
            The new average
        """
        try:
            counselor = await self._get_counselor(counselor_id)
            sessions = counselor.session_count or 0
            if sessions == 0:
                average = rating
            else:
                average = (counselor.rating * sessions + rating) / (sessions + 1)
            average = round(average, 1)

            counselor.rating = average
            if feedback:
                self.db.add(CounselorRating(
                    counselor_id=counselor_id,
                    rating=rating,
                    feedback=feedback,
                    created_at=self.clock(),
                ))
            await self.db.commit()
        except Exception as e:
            logger.error(f"Error rating counselor {counselor_id}: {e}")
            await self.db.rollback()
            raise

        return average
