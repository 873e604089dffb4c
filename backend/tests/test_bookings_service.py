"""
Tests for counselor scheduling, booking and rating

The frozen clock starts on Thursday 2026-01-15; the default test counselor
is available on Mondays at 09:00 and 10:00.
"""

from datetime import date

import pytest
import pytest_asyncio
from sqlalchemy import func, select

from careerhub.exceptions import (
    AvailabilityPatternError,
    BookingNotFoundError,
    CounselorNotFoundError,
    SlotsNotFoundError,
    SlotUnavailableError,
    TimeSlotNotFoundError,
)
from careerhub.models import CounselorBooking, CounselorRating, CounselorSlotDay
from careerhub.schemas import CounselorUpdate
from factories import make_counselor

MONDAY = date(2026, 1, 19)


@pytest_asyncio.fixture
async def counselor(counselor_service):
    return await counselor_service.create_counselor(make_counselor())


async def count_rows(db, model) -> int:
    result = await db.execute(select(func.count()).select_from(model))
    return result.scalar_one()


class TestSlotGeneration:
    @pytest.mark.asyncio
    async def test_generates_pattern_days_inclusive_of_horizon(self, booking_service, counselor):
        created = await booking_service.generate_future_slots(counselor.id, weeks_ahead=4)

        assert created == [
            date(2026, 1, 19), date(2026, 1, 26), date(2026, 2, 2), date(2026, 2, 9)
        ]
        day = await booking_service.get_available_slots(counselor.id, MONDAY)
        assert day.day_of_week == "monday"
        assert [s.time for s in day.slots] == ["09:00", "10:00"]
        assert day.available_slots == day.total_slots == 2

    @pytest.mark.asyncio
    async def test_existing_dates_are_left_alone(self, booking_service, counselor):
        await booking_service.generate_future_slots(counselor.id, weeks_ahead=1)
        await booking_service.book_slot(counselor.id, MONDAY, "09:00", "s-1", "Sam")

        again = await booking_service.generate_future_slots(counselor.id, weeks_ahead=1)

        assert again == []
        day = await booking_service.get_available_slots(counselor.id, MONDAY)
        assert day.available_slots == 1

    @pytest.mark.asyncio
    async def test_no_pattern(self, booking_service, counselor_service, counselor):
        await counselor_service.update_counselor(counselor.id, CounselorUpdate(availability=[]))

        with pytest.raises(AvailabilityPatternError):
            await booking_service.generate_future_slots(counselor.id)

    @pytest.mark.asyncio
    async def test_missing_counselor(self, booking_service):
        with pytest.raises(CounselorNotFoundError):
            await booking_service.generate_future_slots("missing")

    @pytest.mark.asyncio
    async def test_update_availability_replaces_day_and_regenerates(
        self, booking_service, counselor
    ):
        pattern = await booking_service.update_availability(counselor.id, "thursday", ["14:00"])
        pattern = await booking_service.update_availability(
            counselor.id, "Thursday", ["15:00", "14:00"]
        )

        assert [(d.day, d.slots) for d in pattern] == [
            ("Monday", ["09:00", "10:00"]),
            ("Thursday", ["15:00", "14:00"]),
        ]
        assert await booking_service.get_schedule(counselor.id) == pattern

        today = await booking_service.get_available_slots(counselor.id, date(2026, 1, 15))
        assert [s.time for s in today.slots] == ["14:00"]

    @pytest.mark.asyncio
    async def test_add_slots_keeps_booked_times(self, booking_service, counselor):
        await booking_service.add_available_slots(counselor.id, MONDAY, ["10:00", "09:00"])
        await booking_service.book_slot(counselor.id, MONDAY, "09:00", "s-1", "Sam")

        day = await booking_service.add_available_slots(counselor.id, MONDAY, ["11:00"])

        assert [(s.time, s.is_booked) for s in day.slots] == [("09:00", True), ("11:00", False)]
        assert day.total_slots == 2
        assert day.available_slots == 1

    @pytest.mark.asyncio
    async def test_available_dates_sorted(self, booking_service, counselor):
        await booking_service.add_available_slots(counselor.id, date(2026, 2, 1), ["09:00"])
        await booking_service.add_available_slots(counselor.id, MONDAY, ["09:00"])

        dates = await booking_service.get_available_dates(counselor.id)

        assert [d.date for d in dates] == [MONDAY, date(2026, 2, 1)]

    @pytest.mark.asyncio
    async def test_no_slots_on_date(self, booking_service, counselor):
        with pytest.raises(SlotsNotFoundError):
            await booking_service.get_available_slots(counselor.id, MONDAY)


class TestBooking:
    @pytest.mark.asyncio
    async def test_book_marks_slot_and_counts_session(
        self, booking_service, counselor_service, counselor
    ):
        await booking_service.generate_future_slots(counselor.id, weeks_ahead=1)

        booking = await booking_service.book_slot(counselor.id, MONDAY, "10:00", "s-1", "Sam")

        assert booking.status == "confirmed"
        assert booking.duration == 30
        assert booking.meet_link.startswith("https://meet.google.com/")
        day = await booking_service.get_available_slots(counselor.id, MONDAY)
        slot = next(s for s in day.slots if s.time == "10:00")
        assert slot.is_booked is True
        assert slot.meet_link == booking.meet_link
        assert day.available_slots == 1
        assert (await counselor_service.get_counselor(counselor.id)).session_count == 1

    @pytest.mark.asyncio
    async def test_slot_cannot_be_booked_twice(self, booking_service, counselor):
        await booking_service.generate_future_slots(counselor.id, weeks_ahead=1)
        await booking_service.book_slot(counselor.id, MONDAY, "10:00", "s-1", "Sam")

        with pytest.raises(SlotUnavailableError):
            await booking_service.book_slot(counselor.id, MONDAY, "10:00", "s-2", "Alex")

    @pytest.mark.asyncio
    async def test_unknown_time_or_date(self, booking_service, counselor):
        await booking_service.generate_future_slots(counselor.id, weeks_ahead=1)

        with pytest.raises(SlotUnavailableError):
            await booking_service.book_slot(counselor.id, MONDAY, "17:00", "s-1", "Sam")
        with pytest.raises(SlotsNotFoundError):
            await booking_service.book_slot(counselor.id, date(2026, 1, 20), "09:00", "s-1", "Sam")

    @pytest.mark.asyncio
    async def test_cancel_frees_slot(self, booking_service, counselor, db):
        await booking_service.generate_future_slots(counselor.id, weeks_ahead=1)
        await booking_service.book_slot(counselor.id, MONDAY, "10:00", "s-1", "Sam")

        await booking_service.cancel_booking(counselor.id, MONDAY, "10:00", "s-1")

        day = await booking_service.get_available_slots(counselor.id, MONDAY)
        assert all(not s.is_booked and s.meet_link is None for s in day.slots)
        assert day.available_slots == 2
        assert await count_rows(db, CounselorBooking) == 0

        rebooked = await booking_service.book_slot(counselor.id, MONDAY, "10:00", "s-2", "Alex")
        assert rebooked.user_id == "s-2"

    @pytest.mark.asyncio
    async def test_cancel_by_other_user_is_refused(self, booking_service, counselor):
        await booking_service.generate_future_slots(counselor.id, weeks_ahead=1)
        await booking_service.book_slot(counselor.id, MONDAY, "10:00", "s-1", "Sam")

        with pytest.raises(BookingNotFoundError):
            await booking_service.cancel_booking(counselor.id, MONDAY, "10:00", "s-2")

        day = await booking_service.get_available_slots(counselor.id, MONDAY)
        assert day.available_slots == 1

    @pytest.mark.asyncio
    async def test_cancel_unknown_time(self, booking_service, counselor):
        await booking_service.generate_future_slots(counselor.id, weeks_ahead=1)

        with pytest.raises(TimeSlotNotFoundError):
            await booking_service.cancel_booking(counselor.id, MONDAY, "17:00", "s-1")

    @pytest.mark.asyncio
    async def test_bookings_for_date_sorted_by_time(self, booking_service, counselor):
        await booking_service.generate_future_slots(counselor.id, weeks_ahead=1)
        await booking_service.book_slot(counselor.id, MONDAY, "10:00", "s-1", "Sam")
        await booking_service.book_slot(counselor.id, MONDAY, "09:00", "s-2", "Alex")

        bookings = await booking_service.get_bookings_for_date(counselor.id, MONDAY)

        assert [(b.time, b.user_name) for b in bookings] == [("09:00", "Alex"), ("10:00", "Sam")]

    @pytest.mark.asyncio
    async def test_upcoming_bookings_drop_past_dates(self, booking_service, counselor, clock):
        await booking_service.generate_future_slots(counselor.id, weeks_ahead=2)
        await booking_service.book_slot(counselor.id, date(2026, 1, 26), "09:00", "s-1", "Sam")
        await booking_service.book_slot(counselor.id, MONDAY, "10:00", "s-1", "Sam")
        await booking_service.book_slot(counselor.id, MONDAY, "09:00", "s-2", "Alex")

        upcoming = await booking_service.get_user_upcoming_bookings("s-1")
        assert [(b.date, b.time) for b in upcoming] == [
            (MONDAY, "10:00"), (date(2026, 1, 26), "09:00")
        ]
        assert upcoming[0].counselor_name == "Dana Mentor"

        clock.advance(days=5)
        later = await booking_service.get_user_upcoming_bookings("s-1")
        assert [b.date for b in later] == [date(2026, 1, 26)]


class TestRating:
    @pytest.mark.asyncio
    async def test_first_rating_replaces_average(self, booking_service, counselor, db):
        assert await booking_service.rate_counselor(counselor.id, 5) == 5.0
        assert await count_rows(db, CounselorRating) == 0

    @pytest.mark.asyncio
    async def test_rating_weighted_by_sessions(
        self, booking_service, counselor_service, counselor, db
    ):
        await booking_service.rate_counselor(counselor.id, 5)
        await booking_service.generate_future_slots(counselor.id, weeks_ahead=1)
        await booking_service.book_slot(counselor.id, MONDAY, "09:00", "s-1", "Sam")

        average = await booking_service.rate_counselor(counselor.id, 4, "Very helpful")

        assert average == 4.5
        assert (await counselor_service.get_counselor(counselor.id)).rating == 4.5
        assert await count_rows(db, CounselorRating) == 1

    @pytest.mark.asyncio
    async def test_rating_rounded_to_one_decimal(self, booking_service, counselor):
        await booking_service.rate_counselor(counselor.id, 5)
        await booking_service.generate_future_slots(counselor.id, weeks_ahead=2)
        await booking_service.book_slot(counselor.id, MONDAY, "09:00", "s-1", "Sam")
        await booking_service.book_slot(counselor.id, MONDAY, "10:00", "s-2", "Alex")

        assert await booking_service.rate_counselor(counselor.id, 4) == 4.7

    @pytest.mark.asyncio
    async def test_rate_missing_counselor(self, booking_service):
        with pytest.raises(CounselorNotFoundError):
            await booking_service.rate_counselor("missing", 3)


@pytest.mark.asyncio
async def test_deleting_counselor_removes_schedule(
    booking_service, counselor_service, counselor, db
):
    await booking_service.generate_future_slots(counselor.id, weeks_ahead=1)
    await booking_service.book_slot(counselor.id, MONDAY, "09:00", "s-1", "Sam")
    await booking_service.rate_counselor(counselor.id, 4, "Great")

    await counselor_service.delete_counselor(counselor.id)

    for model in (CounselorSlotDay, CounselorBooking, CounselorRating):
        assert await count_rows(db, model) == 0
