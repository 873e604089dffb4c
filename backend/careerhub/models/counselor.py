"""
Counselor Model - career counselors who can sign in to the dashboard

The ``password`` column holds the plaintext credential the login flow
compares against. It must never leave the data access layer.
"""

from sqlalchemy import Column, String, Integer, Float, Text, DateTime, Boolean, JSON
from careerhub.database import Base
from careerhub.models.job import generate_id


class Counselor(Base):
    __tablename__ = "counselors"

    id = Column(String, primary_key=True, default=generate_id)
    name = Column(String(200), nullable=False)
    email = Column(String(320), nullable=False, index=True)
    password = Column(String(200), nullable=False)
    phone = Column(String(50), nullable=True)
    specialization = Column(String(100), nullable=False, index=True)
    about = Column(Text, nullable=False, default="")
    experience = Column(Integer, nullable=False, default=0)
    expertise = Column(JSON, nullable=False, default=list)
    languages = Column(JSON, nullable=False, default=list)
    photo_url = Column("photoURL", String(2000), nullable=True)
    status = Column(String(20), nullable=False, default="pending", index=True)
    rating = Column(Float, nullable=False, default=0.0)
    session_count = Column(Integer, nullable=False, default=0)
    is_verified = Column(Boolean, nullable=False, default=False)
    availability = Column(JSON, nullable=False, default=list)
    created_at = Column(DateTime, nullable=False, index=True)
    updated_at = Column(DateTime, nullable=False)
