from pydantic import BaseModel, ConfigDict, Field, model_validator
from datetime import datetime
from enum import Enum
from typing import Optional, Union
from careerhub.schemas.job import LogoUpload


class CounselorStatus(str, Enum):
    ACTIVE = "active"
    INACTIVE = "inactive"
    PENDING = "pending"
    REJECTED = "rejected"


class AvailabilityDay(BaseModel):
    day: str = Field(..., min_length=1)
    slots: list[str] = Field(..., min_length=1)


class CounselorCreate(BaseModel):
    model_config = ConfigDict(use_enum_values=True)

    name: str = Field(..., min_length=2)
    email: str = Field(..., pattern=r"^[^@\s]+@[^@\s]+\.[^@\s]+$")
    password: str = Field(..., min_length=6)
    phone: Optional[str] = None
    specialization: str = Field(..., min_length=1)
    about: str = Field(..., min_length=20)
    experience: int = Field(..., ge=0)
    expertise: list[str] = Field(..., min_length=1)
    languages: list[str] = Field(..., min_length=1)
    status: CounselorStatus = CounselorStatus.PENDING
    photo: Union[LogoUpload, str, None] = None
    availability: list[AvailabilityDay] = Field(..., min_length=1)


class CounselorUpdate(BaseModel):
    """Partial update. An absent or empty password keeps the stored one."""

    model_config = ConfigDict(use_enum_values=True)

    name: Optional[str] = Field(None, min_length=2)
    email: Optional[str] = Field(None, pattern=r"^[^@\s]+@[^@\s]+\.[^@\s]+$")
    password: Optional[str] = None
    phone: Optional[str] = None
    specialization: Optional[str] = Field(None, min_length=1)
    about: Optional[str] = Field(None, min_length=20)
    experience: Optional[int] = Field(None, ge=0)
    expertise: Optional[list[str]] = None
    languages: Optional[list[str]] = None
    status: Optional[CounselorStatus] = None
    photo: Union[LogoUpload, str, None] = None
    availability: Optional[list[AvailabilityDay]] = None

    @model_validator(mode="after")
    def reject_null_required(self) -> "CounselorUpdate":
        for name in self.model_fields_set:
            if getattr(self, name) is None and name not in ("phone", "password", "photo"):
                raise ValueError(f"{name} cannot be null")
        return self


class CounselorRecord(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: str
    name: str
    email: str
    phone: Optional[str] = None
    specialization: str
    about: str
    experience: int
    expertise: list[str]
    languages: list[str]
    photo_url: Optional[str] = None
    status: CounselorStatus
    rating: float
    session_count: int
    is_verified: bool
    availability: list[AvailabilityDay]
    created_at: datetime
    updated_at: datetime


class CounselorFilters(BaseModel):
    model_config = ConfigDict(use_enum_values=True)

    status: Optional[CounselorStatus] = None
    specialization: Optional[str] = None
    is_verified: Optional[bool] = None


class CounselorPage(BaseModel):
    counselors: list[CounselorRecord]
    cursor: Optional[str] = None
    has_more: bool = False


class StatusUpdate(BaseModel):
    status: CounselorStatus


class VerificationUpdate(BaseModel):
    is_verified: bool
