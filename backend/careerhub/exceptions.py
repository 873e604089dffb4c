class NotFoundError(LookupError):
    """A requested record does not exist in the store."""


class JobNotFoundError(NotFoundError):
    def __init__(self, job_id: str):
        super().__init__(f"Job with ID {job_id} not found")
        self.job_id = job_id


class CounselorNotFoundError(NotFoundError):
    def __init__(self, counselor_id: str):
        super().__init__(f"Counselor with ID {counselor_id} not found")
        self.counselor_id = counselor_id


class InvalidCredentialsError(Exception):
    """Login failed. The message never says which credential was wrong."""

    def __init__(self):
        super().__init__("Invalid email or password")


class InvalidCursorError(ValueError):
    """A pagination cursor could not be decoded."""


class JobValidationError(ValueError):
    """A job write would leave the record in an invalid state."""


class CommunityNotFoundError(NotFoundError):
    def __init__(self, community_id: str):
        super().__init__(f"Community with ID {community_id} not found")
        self.community_id = community_id


class MessageNotFoundError(NotFoundError):
    def __init__(self, message_id: str):
        super().__init__(f"Message with ID {message_id} not found")
        self.message_id = message_id


class SlotsNotFoundError(NotFoundError):
    """The counselor has no slot list for the requested date."""

    def __init__(self, counselor_id: str, day):
        super().__init__("No available slots found for the selected date")
        self.counselor_id = counselor_id
        self.day = day


class TimeSlotNotFoundError(NotFoundError):
    def __init__(self, day, time: str):
        super().__init__("Time slot not found")
        self.day = day
        self.time = time


class BookingNotFoundError(NotFoundError):
    def __init__(self, day, time: str, user_id: str):
        super().__init__(f"No booking at {day} {time} for user {user_id}")
        self.user_id = user_id


class SlotUnavailableError(ValueError):
    """The slot does not exist on that date or is already booked."""

    def __init__(self):
        super().__init__("This time slot is not available")


class AvailabilityPatternError(ValueError):
    """Slots cannot be generated for a counselor with no weekly pattern."""

    def __init__(self, counselor_id: str):
        super().__init__("No availability pattern found")
        self.counselor_id = counselor_id


class NotPermittedError(PermissionError):
    """The principal is signed in but may not act on this record."""
