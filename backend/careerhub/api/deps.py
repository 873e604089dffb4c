from fastapi import Depends
from sqlalchemy.ext.asyncio import AsyncSession
from careerhub.database import get_db
from careerhub.services.bookings import BookingService
from careerhub.services.community import CommunityMessageService, CommunityService
from careerhub.services.counselors import CounselorService
from careerhub.services.jobs import JobService
from careerhub.services.storage import ObjectStorage, get_storage


async def get_job_service(
    db: AsyncSession = Depends(get_db),
    storage: ObjectStorage = Depends(get_storage),
) -> JobService:
    return JobService(db, storage)


async def get_counselor_service(
    db: AsyncSession = Depends(get_db),
    storage: ObjectStorage = Depends(get_storage),
) -> CounselorService:
    return CounselorService(db, storage)


async def get_community_service(
    db: AsyncSession = Depends(get_db),
    storage: ObjectStorage = Depends(get_storage),
) -> CommunityService:
    return CommunityService(db, storage)


async def get_message_service(db: AsyncSession = Depends(get_db)) -> CommunityMessageService:
    return CommunityMessageService(db)


async def get_booking_service(db: AsyncSession = Depends(get_db)) -> BookingService:
    return BookingService(db)
