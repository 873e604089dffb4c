from careerhub.schemas.job import (
    EmploymentType,
    JobCategory,
    ExperienceLevel,
    JobStatus,
    JobHighlights,
    GeoPoint,
    LogoUpload,
    JobRecord,
    JobFormData,
    JobPatch,
    JobFilters,
    JobPage,
    JobStats,
    get_job_status,
)
from careerhub.schemas.counselor import (
    CounselorStatus,
    AvailabilityDay,
    CounselorCreate,
    CounselorUpdate,
    CounselorRecord,
    CounselorFilters,
    CounselorPage,
    StatusUpdate,
    VerificationUpdate,
)
from careerhub.schemas.community import (
    CommunityCategory,
    CommunityStatus,
    CommunityAuthor,
    CommunityCreate,
    CommunityUpdate,
    CommunityRecord,
    CommunityFilters,
    CommunityPage,
    LikeUpdate,
    MessageContent,
    CommunityMessageRecord,
)
from careerhub.schemas.booking import (
    TimeSlot,
    SlotDayRecord,
    SlotsCreate,
    BookingRequest,
    BookingRecord,
    UpcomingBooking,
    RatingRequest,
    RatingResult,
)
from careerhub.schemas.auth import Role, RequiredRole, Principal, LoginRequest, LoginResponse

__all__ = [
    "EmploymentType",
    "JobCategory",
    "ExperienceLevel",
    "JobStatus",
    "JobHighlights",
    "GeoPoint",
    "LogoUpload",
    "JobRecord",
    "JobFormData",
    "JobPatch",
    "JobFilters",
    "JobPage",
    "JobStats",
    "get_job_status",
    "CounselorStatus",
    "AvailabilityDay",
    "CounselorCreate",
    "CounselorUpdate",
    "CounselorRecord",
    "CounselorFilters",
    "CounselorPage",
    "StatusUpdate",
    "VerificationUpdate",
    "CommunityCategory",
    "CommunityStatus",
    "CommunityAuthor",
    "CommunityCreate",
    "CommunityUpdate",
    "CommunityRecord",
    "CommunityFilters",
    "CommunityPage",
    "LikeUpdate",
    "MessageContent",
    "CommunityMessageRecord",
    "TimeSlot",
    "SlotDayRecord",
    "SlotsCreate",
    "BookingRequest",
    "BookingRecord",
    "UpcomingBooking",
    "RatingRequest",
    "RatingResult",
    "Role",
    "RequiredRole",
    "Principal",
    "LoginRequest",
    "LoginResponse",
]
