from careerhub.models.job import Job
from careerhub.models.counselor import Counselor
from careerhub.models.community import Community, CommunityMessage
from careerhub.models.booking import CounselorSlotDay, CounselorBooking, CounselorRating

__all__ = [
    "Job",
    "Counselor",
    "Community",
    "CommunityMessage",
    "CounselorSlotDay",
    "CounselorBooking",
    "CounselorRating",
]
