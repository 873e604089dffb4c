from pydantic import BaseModel, ConfigDict, Field, HttpUrl, model_validator
from datetime import date, datetime
from enum import Enum
from typing import Optional, Union
from careerhub.timeutils import utcnow


class EmploymentType(str, Enum):
    FULL_TIME = "Full-time"
    PART_TIME = "Part-time"
    CONTRACT = "Contract"
    INTERNSHIP = "Internship"
    TEMPORARY = "Temporary"


class JobCategory(str, Enum):
    TECH = "tech"
    HEALTHCARE = "healthcare"
    FINANCE = "finance"
    EDUCATION = "education"
    MARKETING = "marketing"
    SALES = "sales"
    DESIGN = "design"
    ENGINEERING = "engineering"
    CUSTOMER_SERVICE = "customer-service"
    OTHER = "other"


class ExperienceLevel(str, Enum):
    ENTRY = "Entry-Level"
    MID = "Mid-Level"
    SENIOR = "Senior"
    EXECUTIVE = "Executive"


class JobStatus(str, Enum):
    ACTIVE = "active"
    EXPIRED = "expired"


class JobHighlights(BaseModel):
    """Nested highlights document, stored with capitalised keys."""

    model_config = ConfigDict(populate_by_name=True)

    qualifications: list[str] = Field(default_factory=list, alias="Qualifications")
    responsibilities: list[str] = Field(default_factory=list, alias="Responsibilities")
    benefits: Optional[list[str]] = Field(None, alias="Benefits")


class GeoPoint(BaseModel):
    latitude: float = Field(..., ge=-90, le=90)
    longitude: float = Field(..., ge=-180, le=180)


class LogoUpload(BaseModel):
    """Raw logo bytes to be published to object storage."""

    filename: str = Field(..., min_length=1)
    content: bytes
    content_type: str = "application/octet-stream"


class JobRecord(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: str
    title: str
    employer_name: str
    city: str
    country: str
    description: str
    employment_type: EmploymentType
    category: JobCategory
    experience_level: ExperienceLevel
    is_remote: bool
    salary_min: float
    salary_max: float
    salary_currency: str
    highlights: JobHighlights
    apply_link: str
    google_link: str = ""
    employer_logo: str = ""
    expiry_date: datetime
    posted_at: datetime
    publisher: str
    applications: int = 0
    job_views: int = 0
    popularity: int = 0
    is_popular: bool = False
    tags: list[str] = Field(default_factory=list)
    location_coordinates: Optional[GeoPoint] = None


class JobFormData(BaseModel):
    """Form-shaped input for creating a job."""

    model_config = ConfigDict(use_enum_values=True)

    title: str = Field(..., min_length=3)
    employer_name: str = Field(..., min_length=2)
    city: str = ""
    country: str = ""
    is_remote: bool = False
    employment_type: EmploymentType
    category: JobCategory
    experience_level: ExperienceLevel
    salary_min: float = Field(..., ge=0)
    salary_max: float = Field(..., ge=0)
    salary_currency: str = Field("USD", min_length=3, max_length=3)
    description: str = Field(..., min_length=50)
    qualifications: list[str] = Field(..., min_length=1)
    responsibilities: list[str] = Field(..., min_length=1)
    benefits: list[str] = Field(default_factory=list)
    expiry_date: Union[datetime, date]
    apply_link: HttpUrl
    google_link: Optional[HttpUrl] = None
    employer_logo: Union[LogoUpload, str, None] = None
    tags: list[str] = Field(default_factory=list)
    publisher: str = ""

    @model_validator(mode="after")
    def check_salary_range(self) -> "JobFormData":
        if self.salary_min > self.salary_max:
            raise ValueError("salary_min must not exceed salary_max")
        return self


# Patch fields that may be explicitly cleared with null
NULLABLE_PATCH_FIELDS = {"google_link", "employer_logo"}


class JobPatch(BaseModel):
    """
    Partial update for a job.

    Only fields the caller actually provided are written, so a salary of 0
    or an empty city is a real value here, not "leave unchanged".
    """

    model_config = ConfigDict(use_enum_values=True)

    title: Optional[str] = Field(None, min_length=3)
    employer_name: Optional[str] = Field(None, min_length=2)
    city: Optional[str] = None
    country: Optional[str] = None
    is_remote: Optional[bool] = None
    employment_type: Optional[EmploymentType] = None
    category: Optional[JobCategory] = None
    experience_level: Optional[ExperienceLevel] = None
    salary_min: Optional[float] = Field(None, ge=0)
    salary_max: Optional[float] = Field(None, ge=0)
    salary_currency: Optional[str] = Field(None, min_length=3, max_length=3)
    description: Optional[str] = Field(None, min_length=50)
    qualifications: Optional[list[str]] = None
    responsibilities: Optional[list[str]] = None
    benefits: Optional[list[str]] = None
    expiry_date: Union[datetime, date, None] = None
    apply_link: Optional[HttpUrl] = None
    google_link: Optional[HttpUrl] = None
    employer_logo: Union[LogoUpload, str, None] = None
    tags: Optional[list[str]] = None
    publisher: Optional[str] = None
    is_popular: Optional[bool] = None

    @model_validator(mode="after")
    def reject_null_required(self) -> "JobPatch":
        for name in self.model_fields_set:
            if getattr(self, name) is None and name not in NULLABLE_PATCH_FIELDS:
                raise ValueError(f"{name} cannot be null")
        return self


class JobFilters(BaseModel):
    model_config = ConfigDict(use_enum_values=True)

    category: Optional[JobCategory] = None
    employment_type: Optional[EmploymentType] = None
    is_remote: Optional[bool] = None
    experience_level: Optional[ExperienceLevel] = None
    is_popular: Optional[bool] = None
    tag: Optional[str] = None
    is_active: bool = False
    is_expired: bool = False

    @model_validator(mode="after")
    def check_status_exclusive(self) -> "JobFilters":
        if self.is_active and self.is_expired:
            raise ValueError("is_active and is_expired are mutually exclusive")
        return self


class JobPage(BaseModel):
    jobs: list[JobRecord]
    cursor: Optional[str] = None
    has_more: bool = False


class JobStats(BaseModel):
    total_jobs: int
    active_jobs: int
    expired_jobs: int
    popular_jobs: int
    total_applications: int
    total_views: int


def get_job_status(job, now: Optional[datetime] = None) -> JobStatus:
    """Expired iff the expiry date is at or before ``now``."""
    now = now or utcnow()
    if job.expiry_date <= now:
        return JobStatus.EXPIRED
    return JobStatus.ACTIVE
