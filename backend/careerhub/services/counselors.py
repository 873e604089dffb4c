"""
Counselor Data Access Service

CRUD over the ``counselors`` collection plus the email lookup the login
flow uses. Records handed out (``CounselorRecord``) never include the
stored password.
"""

import logging
import uuid
from pathlib import PurePosixPath
from typing import Optional

from sqlalchemy import select, delete, func
from sqlalchemy.ext.asyncio import AsyncSession

from careerhub.exceptions import CounselorNotFoundError
from careerhub.models import Counselor, CounselorBooking, CounselorRating, CounselorSlotDay
from careerhub.schemas import (
    CounselorCreate,
    CounselorFilters,
    CounselorPage,
    CounselorRecord,
    CounselorStatus,
    CounselorUpdate,
    LogoUpload,
)
from careerhub.services.pagination import check_page_size, encode_cursor, start_after
from careerhub.services.storage import ObjectStorage
from careerhub.timeutils import Clock, utcnow

logger = logging.getLogger(__name__)


def counselor_photo_path(filename: str) -> str:
    extension = PurePosixPath(filename).suffix.lstrip(".") or "bin"
    return f"counselors/{uuid.uuid4()}.{extension}"


async def find_counselor_by_email(db: AsyncSession, email: str) -> Optional[Counselor]:
    """Return the stored counselor row (password included) for ``email``."""
    result = await db.execute(select(Counselor).where(Counselor.email == email).limit(1))
    return result.scalar_one_or_none()


class CounselorService:
    def __init__(self, db: AsyncSession, storage: ObjectStorage, clock: Clock = utcnow):
        self.db = db
        self.storage = storage
        self.clock = clock

    async def _get_row(self, counselor_id: str) -> Counselor:
        result = await self.db.execute(select(Counselor).where(Counselor.id == counselor_id))
        counselor = result.scalar_one_or_none()
        if counselor is None:
            raise CounselorNotFoundError(counselor_id)
        return counselor

    async def _upload_photo(self, photo: LogoUpload) -> str:
        return await self.storage.upload(
            counselor_photo_path(photo.filename), photo.content, photo.content_type
        )

    async def _discard_upload(self, url: str) -> None:
        try:
            await self.storage.delete(url)
        except OSError as e:
            logger.warning(f"Error removing orphaned upload {url}: {e}")

    async def list_counselors(
        self,
        filters: Optional[CounselorFilters] = None,
        page_size: int = 10,
        cursor: Optional[str] = None,
    ) -> CounselorPage:
        """List counselors newest first, with the same cursor scheme as jobs."""
        check_page_size(page_size)
        try:
            query = select(Counselor)

            if filters:
                if filters.status:
                    query = query.where(Counselor.status == filters.status)
                if filters.specialization:
                    query = query.where(Counselor.specialization == filters.specialization)
                if filters.is_verified is not None:
                    query = query.where(Counselor.is_verified == filters.is_verified)

            if cursor:
                query = query.where(start_after(Counselor.created_at, Counselor.id, cursor))

            query = query.order_by(Counselor.created_at.desc(), Counselor.id.desc()).limit(page_size)

            result = await self.db.execute(query)
            counselors = [CounselorRecord.model_validate(c) for c in result.scalars().all()]
        except Exception as e:
            logger.error(f"Error getting counselors: {e}")
            raise

        next_cursor = (
            encode_cursor(counselors[-1].created_at, counselors[-1].id) if counselors else None
        )
        return CounselorPage(
            counselors=counselors, cursor=next_cursor, has_more=len(counselors) == page_size
        )

    async def get_counselor(self, counselor_id: str) -> CounselorRecord:
        try:
            return CounselorRecord.model_validate(await self._get_row(counselor_id))
        except Exception as e:
            logger.error(f"Error getting counselor {counselor_id}: {e}")
            raise

    async def create_counselor(self, data: CounselorCreate) -> CounselorRecord:
        uploaded = None
        try:
            photo_url = data.photo
            if isinstance(data.photo, LogoUpload):
                photo_url = uploaded = await self._upload_photo(data.photo)

            now = self.clock()
            counselor = Counselor(
                name=data.name,
                email=data.email,
                password=data.password,
                phone=data.phone,
                specialization=data.specialization,
                about=data.about,
                experience=data.experience,
                expertise=data.expertise,
                languages=data.languages,
                photo_url=photo_url,
                status=data.status,
                rating=0.0,
                session_count=0,
                is_verified=False,
                availability=[day.model_dump() for day in data.availability],
                created_at=now,
                updated_at=now,
            )
            self.db.add(counselor)
            await self.db.commit()
            await self.db.refresh(counselor)
        except Exception as e:
            logger.error(f"Error creating counselor: {e}")
            await self.db.rollback()
            if uploaded:
                await self._discard_upload(uploaded)
            raise

        logger.info(f"Created counselor {counselor.id}: {counselor.email}")
        return CounselorRecord.model_validate(counselor)

    async def update_counselor(self, counselor_id: str, data: CounselorUpdate) -> CounselorRecord:
        uploaded = None
        try:
            counselor = await self._get_row(counselor_id)
            update_data = data.model_dump(exclude_unset=True)

            # An empty password in the edit form means "keep the current one"
            if not update_data.get("password"):
                update_data.pop("password", None)

            if "photo" in update_data:
                photo = update_data.pop("photo")
                if isinstance(data.photo, LogoUpload):
                    photo = uploaded = await self._upload_photo(data.photo)
                update_data["photo_url"] = photo

            for field, value in update_data.items():
                setattr(counselor, field, value)
            counselor.updated_at = self.clock()

            await self.db.commit()
            await self.db.refresh(counselor)
        except Exception as e:
            logger.error(f"Error updating counselor {counselor_id}: {e}")
            await self.db.rollback()
            if uploaded:
                await self._discard_upload(uploaded)
            raise

        return CounselorRecord.model_validate(counselor)

    async def delete_counselor(self, counselor_id: str) -> None:
        """
        Delete a counselor with their slots, bookings, ratings and stored photo.

        Raises:
            CounselorNotFoundError: No counselor with this id
        """
        try:
            counselor = await self._get_row(counselor_id)
            photo_url = counselor.photo_url

            for model in (CounselorSlotDay, CounselorBooking, CounselorRating):
                await self.db.execute(delete(model).where(model.counselor_id == counselor_id))
            await self.db.delete(counselor)
            await self.db.commit()
        except Exception as e:
            logger.error(f"Error deleting counselor {counselor_id}: {e}")
            raise

        if photo_url and self.storage.owns(photo_url):
            try:
                await self.storage.delete(photo_url)
            except OSError as e:
                logger.warning(f"Error deleting photo for counselor {counselor_id}: {e}")

    async def update_status(self, counselor_id: str, status: CounselorStatus) -> CounselorRecord:
        return await self.update_counselor(counselor_id, CounselorUpdate(status=status))

    async def set_verified(self, counselor_id: str, is_verified: bool) -> CounselorRecord:
        try:
            counselor = await self._get_row(counselor_id)
            counselor.is_verified = is_verified
            counselor.updated_at = self.clock()
            await self.db.commit()
            await self.db.refresh(counselor)
        except Exception as e:
            logger.error(f"Error toggling counselor verification for {counselor_id}: {e}")
            raise

        return CounselorRecord.model_validate(counselor)

    async def search_counselors(self, text: str, limit: int = 10) -> list[CounselorRecord]:
        """
        Search active counselors by name, specialization or expertise.

        Only the first ``limit`` active counselors (by name) are considered.
        """
        needle = text.lower()
        try:
            result = await self.db.execute(
                select(Counselor)
                .where(Counselor.status == CounselorStatus.ACTIVE.value)
                .order_by(Counselor.name)
                .limit(limit)
            )
            counselors = [CounselorRecord.model_validate(c) for c in result.scalars().all()]
        except Exception as e:
            logger.error(f"Error searching counselors: {e}")
            raise

        if needle:
            counselors = [
                c for c in counselors
                if needle in c.name.lower()
                or needle in c.specialization.lower()
                or any(needle in exp.lower() for exp in c.expertise)
            ]
        return counselors[:limit]

    async def total_sessions(self) -> tuple[int, int]:
        """Return (counselor count, sum of session counts)."""
        result = await self.db.execute(
            select(func.count(Counselor.id), func.sum(Counselor.session_count))
        )
        count, sessions = result.one()
        return count or 0, sessions or 0
