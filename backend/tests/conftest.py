import os

import pytest
import pytest_asyncio
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker, create_async_engine
from sqlalchemy.pool import StaticPool

# Keep the app's default engine and storage away from the working tree
os.environ.setdefault("DATABASE_URL", "sqlite:///:memory:")
os.environ.setdefault("STORAGE_DIR", "/tmp/careerhub-test-storage")

from careerhub import models  # noqa: E402,F401  (registers tables)
from careerhub.database import Base  # noqa: E402
from careerhub.services.bookings import BookingService  # noqa: E402
from careerhub.services.community import CommunityMessageService, CommunityService  # noqa: E402
from careerhub.services.counselors import CounselorService  # noqa: E402
from careerhub.services.jobs import JobService  # noqa: E402
from careerhub.services.storage import LocalObjectStorage  # noqa: E402
from factories import FakeClock  # noqa: E402


@pytest.fixture
def clock():
    return FakeClock()


@pytest.fixture
def storage(tmp_path):
    return LocalObjectStorage(str(tmp_path / "storage"), "http://testserver/files")


@pytest_asyncio.fixture
async def engine():
    engine = create_async_engine(
        "sqlite+aiosqlite:///:memory:",
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)
    yield engine
    await engine.dispose()


@pytest.fixture
def session_factory(engine):
    return async_sessionmaker(engine, class_=AsyncSession, expire_on_commit=False)


@pytest_asyncio.fixture
async def db(session_factory):
    async with session_factory() as session:
        yield session


@pytest.fixture
def job_service(db, storage, clock):
    return JobService(db, storage, clock)


@pytest.fixture
def counselor_service(db, storage, clock):
    return CounselorService(db, storage, clock)


@pytest.fixture
def community_service(db, storage, clock):
    return CommunityService(db, storage, clock)


@pytest.fixture
def message_service(db, clock):
    return CommunityMessageService(db, clock)


@pytest.fixture
def booking_service(db, clock):
    return BookingService(db, clock)
