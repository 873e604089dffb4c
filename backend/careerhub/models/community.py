"""
Community Models - discussion communities and their chat messages

A community is soft-deleted first (``is_deleted`` plus who/when) and can be
restored; only a permanent delete removes the row. Membership and bans are
JSON lists of user ids, and the author is a snapshot taken at creation.
"""

from sqlalchemy import Column, String, Integer, Text, DateTime, Boolean, JSON
from careerhub.database import Base
from careerhub.models.job import generate_id


class Community(Base):
    __tablename__ = "communities"

    id = Column(String, primary_key=True, default=generate_id)
    title = Column(String(200), nullable=False)
    description = Column(Text, nullable=False)
    image = Column(String(2000), nullable=True)
    category = Column(String(50), nullable=False, index=True)
    tags = Column(JSON, nullable=False, default=list)
    status = Column(String(20), nullable=False, default="draft", index=True)
    featured = Column(Boolean, nullable=False, default=False, index=True)
    pinned = Column(Boolean, nullable=False, default=False)
    likes = Column(Integer, nullable=False, default=0)
    comments = Column(Integer, nullable=False, default=0)
    views = Column(Integer, nullable=False, default=0)
    members = Column(JSON, nullable=False, default=list)
    banned_members = Column("bannedMembers", JSON, nullable=False, default=list)
    author = Column(JSON, nullable=False)
    created_by = Column(String, nullable=False)
    created_at = Column(DateTime, nullable=False, index=True)
    updated_at = Column(DateTime, nullable=True)
    is_deleted = Column("isDeleted", Boolean, nullable=False, default=False, index=True)
    deleted_at = Column(DateTime, nullable=True)
    deleted_by = Column(String, nullable=True)
    restored_at = Column(DateTime, nullable=True)


class CommunityMessage(Base):
    __tablename__ = "community_messages"

    id = Column(String, primary_key=True, default=generate_id)
    community_id = Column(String, nullable=False, index=True)
    user_id = Column(String, nullable=False)
    user_name = Column(String(200), nullable=False)
    user_photo = Column(String(2000), nullable=True)
    content = Column(Text, nullable=False)
    created_at = Column(DateTime, nullable=False, index=True)
    updated_at = Column(DateTime, nullable=True)
