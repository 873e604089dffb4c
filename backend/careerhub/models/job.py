"""
Job Model - SQLAlchemy ORM model for job postings

One row per posting in the ``jobs`` collection. Nested and list-valued
fields (highlights, tags, coordinates) are stored as JSON documents.

Derived Status:
    active  → expiry_date in the future
    expired → expiry_date now or in the past
"""

from sqlalchemy import Column, String, Integer, Float, Text, DateTime, Boolean, JSON
from careerhub.database import Base
import uuid


def generate_id() -> str:
    return str(uuid.uuid4())


class Job(Base):
    """
    Job posting document.

    Attributes:
        id: Store-assigned UUID, never changes
        title / employer_name / city / country / description: Posting text
        employment_type / category / experience_level: Closed enum values
        is_remote: Remote-friendly flag
        salary_min/max/currency: Salary range (min <= max checked on write)
        highlights: {"Qualifications": [...], "Responsibilities": [...], "Benefits": [...]}
        apply_link / google_link: Application and external listing URLs
        employer_logo: Logo URL (uploaded logos live in object storage)
        expiry_date / posted_at: Naive UTC timestamps
        publisher: Who published the posting
        applications / job_views / popularity: Engagement counters
        is_popular: Editorial "popular" flag
        tags: Free-form tag list
        location_coordinates: {"latitude": .., "longitude": ..} or NULL
    """

    __tablename__ = "jobs"

    id = Column(String, primary_key=True, default=generate_id)
    title = Column(String(500), nullable=False)
    employer_name = Column(String(500), nullable=False)
    city = Column(String(200), nullable=False, default="")
    country = Column(String(200), nullable=False, default="")
    description = Column(Text, nullable=False)
    employment_type = Column(String(20), nullable=False, index=True)
    category = Column(String(50), nullable=False, index=True)
    experience_level = Column(String(20), nullable=False, index=True)
    is_remote = Column(Boolean, nullable=False, default=False)
    salary_min = Column(Float, nullable=False, default=0)
    salary_max = Column(Float, nullable=False, default=0)
    salary_currency = Column(String(3), nullable=False, default="USD")
    highlights = Column(JSON, nullable=False, default=dict)
    apply_link = Column(String(2000), nullable=False)
    google_link = Column(String(2000), nullable=False, default="")
    employer_logo = Column(String(2000), nullable=False, default="")
    expiry_date = Column(DateTime, nullable=False, index=True)
    posted_at = Column(DateTime, nullable=False, index=True)
    publisher = Column(String(200), nullable=False, default="")
    applications = Column(Integer, nullable=False, default=0)
    job_views = Column(Integer, nullable=False, default=0)
    popularity = Column(Integer, nullable=False, default=0)
    is_popular = Column("isPopular", Boolean, nullable=False, default=False, index=True)
    tags = Column(JSON, nullable=False, default=list)
    location_coordinates = Column(JSON, nullable=True)
