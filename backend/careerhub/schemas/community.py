from pydantic import BaseModel, ConfigDict, Field, model_validator
from datetime import datetime
from enum import Enum
from typing import Optional, Union
from careerhub.schemas.job import LogoUpload

DEFAULT_AVATAR = "https://i.pravatar.cc/150?img=1"


class CommunityCategory(str, Enum):
    CAREER_ADVICE = "Career Advice"
    NETWORKING = "Networking"
    WELL_BEING = "Well-being"
    TECHNOLOGY = "Technology"
    RESUME = "Resume"
    SOFT_SKILLS = "Soft Skills"


class CommunityStatus(str, Enum):
    DRAFT = "draft"
    PUBLISHED = "published"


class CommunityAuthor(BaseModel):
    """Author snapshot taken when the community is created."""

    id: str
    name: str
    avatar: str = DEFAULT_AVATAR
    role: str


class CommunityCreate(BaseModel):
    model_config = ConfigDict(use_enum_values=True)

    title: str = Field(..., min_length=1, max_length=200)
    description: str = Field(..., min_length=1)
    category: CommunityCategory
    tags: list[str] = Field(default_factory=list)
    status: CommunityStatus = CommunityStatus.DRAFT
    featured: bool = False
    pinned: bool = False
    image: Union[LogoUpload, str, None] = None


class CommunityUpdate(BaseModel):
    model_config = ConfigDict(use_enum_values=True)

    title: Optional[str] = Field(None, min_length=1, max_length=200)
    description: Optional[str] = Field(None, min_length=1)
    category: Optional[CommunityCategory] = None
    tags: Optional[list[str]] = None
    status: Optional[CommunityStatus] = None
    featured: Optional[bool] = None
    pinned: Optional[bool] = None
    image: Union[LogoUpload, str, None] = None

    @model_validator(mode="after")
    def reject_null_required(self) -> "CommunityUpdate":
        for name in self.model_fields_set:
            if getattr(self, name) is None and name != "image":
                raise ValueError(f"{name} cannot be null")
        return self


class CommunityRecord(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: str
    title: str
    description: str
    image: Optional[str] = None
    category: CommunityCategory
    tags: list[str]
    status: CommunityStatus
    featured: bool
    pinned: bool
    likes: int
    comments: int
    views: int
    members: list[str]
    banned_members: list[str]
    author: CommunityAuthor
    created_by: str
    created_at: datetime
    updated_at: Optional[datetime] = None
    is_deleted: bool
    deleted_at: Optional[datetime] = None
    deleted_by: Optional[str] = None
    restored_at: Optional[datetime] = None


class CommunityFilters(BaseModel):
    """Equality filters. Soft-deleted communities are hidden unless ``show_deleted``."""

    model_config = ConfigDict(use_enum_values=True)

    status: Optional[CommunityStatus] = None
    category: Optional[CommunityCategory] = None
    featured: Optional[bool] = None
    tag: Optional[str] = None
    show_deleted: bool = False


class CommunityPage(BaseModel):
    communities: list[CommunityRecord]
    cursor: Optional[str] = None
    has_more: bool = False


class LikeUpdate(BaseModel):
    liked: bool


class MessageContent(BaseModel):
    model_config = ConfigDict(str_strip_whitespace=True)

    content: str = Field(..., min_length=1, max_length=5000)


class CommunityMessageRecord(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: str
    community_id: str
    user_id: str
    user_name: str
    user_photo: Optional[str] = None
    content: str
    created_at: datetime
    updated_at: Optional[datetime] = None
