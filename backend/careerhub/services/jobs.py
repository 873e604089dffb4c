"""
Job Data Access Service

All reads and writes against the ``jobs`` collection go through
``JobService``. Every operation logs store errors and re-raises them;
nothing here retries.

Operations:
    list_jobs         - Filtered, cursor-paginated listing (posted_at desc)
    get_job           - Single read with best-effort view counter increment
    create_job        - Insert from form data, uploading a logo if given
    update_job        - Partial update with highlights merge
    delete_job        - Hard delete, idempotent
    track_application - applications += 1, popularity += 10
    search_jobs       - Whole-collection substring search (small scale only)
    job_stats         - Dashboard counters
"""

import logging
from typing import Optional

from sqlalchemy import select, update, delete, func, case
from sqlalchemy.ext.asyncio import AsyncSession

from careerhub.exceptions import JobNotFoundError, JobValidationError
from careerhub.middleware.metrics import (
    record_job_application,
    record_job_view,
    record_job_view_failure,
)
from careerhub.models import Job
from careerhub.models.job import generate_id
from careerhub.schemas import (
    GeoPoint,
    JobFilters,
    JobFormData,
    JobHighlights,
    JobPage,
    JobPatch,
    JobRecord,
    JobStats,
    LogoUpload,
)
from careerhub.services.pagination import check_page_size, encode_cursor, start_after
from careerhub.services.storage import ObjectStorage, job_logo_path
from careerhub.timeutils import Clock, to_store_timestamp, utcnow

logger = logging.getLogger(__name__)

DEFAULT_PAGE_SIZE = 10
APPLICATION_POPULARITY_BOOST = 10

# Form field -> JobHighlights field
HIGHLIGHT_FIELDS = ("qualifications", "responsibilities", "benefits")


def has_tag(tag: str):
    """Predicate: the job's JSON ``tags`` array contains ``tag``."""
    tags = func.json_each(Job.tags).table_valued("value")
    return select(tags.c.value).where(tags.c.value == tag).exists()


def matches_text(job: JobRecord, needle: str) -> bool:
    fields = [job.title, job.description, job.employer_name, job.city, job.country]
    if any(needle in (value or "").lower() for value in fields):
        return True
    return any(needle in tag.lower() for tag in job.tags)


class JobService:
    """
    Data access for job postings.

    Attributes:
        db: Async SQLAlchemy session
        storage: Object storage used for uploaded logos
        clock: Returns "now" as a naive UTC datetime; active/expired
            filtering and posted_at stamping both read it
    """

    def __init__(self, db: AsyncSession, storage: ObjectStorage, clock: Clock = utcnow):
        self.db = db
        self.storage = storage
        self.clock = clock

    async def _get_row(self, job_id: str) -> Job:
        result = await self.db.execute(select(Job).where(Job.id == job_id))
        job = result.scalar_one_or_none()
        if job is None:
            raise JobNotFoundError(job_id)
        return job

    async def _upload_logo(self, job_id: str, logo: LogoUpload) -> str:
        path = job_logo_path(job_id, logo.filename)
        return await self.storage.upload(path, logo.content, logo.content_type)

    async def _discard_upload(self, url: str) -> None:
        try:
            await self.storage.delete(url)
        except OSError as e:
            logger.warning(f"Error removing orphaned upload {url}: {e}")

    async def list_jobs(
        self,
        filters: Optional[JobFilters] = None,
        page_size: int = DEFAULT_PAGE_SIZE,
        cursor: Optional[str] = None,
    ) -> JobPage:
        """
        List jobs newest first.

        Args:
            filters: Optional equality / tag / active-expired filters
            page_size: Maximum records in the page
            cursor: Cursor returned by a previous call

        Returns:
            JobPage with the records and the cursor of the last one
            (None when the page is empty). A short page means no more data.

        Raises:
            ValueError: page_size is below 1
            InvalidCursorError: cursor is malformed
        """
        check_page_size(page_size)
        try:
            query = select(Job)

            if filters:
                if filters.category:
                    query = query.where(Job.category == filters.category)
                if filters.employment_type:
                    query = query.where(Job.employment_type == filters.employment_type)
                if filters.is_remote is not None:
                    query = query.where(Job.is_remote == filters.is_remote)
                if filters.experience_level:
                    query = query.where(Job.experience_level == filters.experience_level)
                if filters.is_popular is not None:
                    query = query.where(Job.is_popular == filters.is_popular)
                if filters.tag:
                    query = query.where(has_tag(filters.tag))
                if filters.is_active:
                    query = query.where(Job.expiry_date > self.clock())
                if filters.is_expired:
                    query = query.where(Job.expiry_date <= self.clock())

            if cursor:
                query = query.where(start_after(Job.posted_at, Job.id, cursor))

            query = query.order_by(Job.posted_at.desc(), Job.id.desc()).limit(page_size)

            result = await self.db.execute(query)
            jobs = [JobRecord.model_validate(job) for job in result.scalars().all()]
        except Exception as e:
            logger.error(f"Error getting jobs: {e}")
            raise

        next_cursor = encode_cursor(jobs[-1].posted_at, jobs[-1].id) if jobs else None
        return JobPage(jobs=jobs, cursor=next_cursor, has_more=len(jobs) == page_size)

    async def get_job(self, job_id: str) -> JobRecord:
        """
        Fetch one job and bump its view counter.

        The increment is best-effort: if it fails the error is logged and
        the read still succeeds. The returned record is the one read
        before the increment.

        Raises:
            JobNotFoundError: No job with this id
        """
        try:
            record = JobRecord.model_validate(await self._get_row(job_id))
        except Exception as e:
            logger.error(f"Error getting job {job_id}: {e}")
            raise

        try:
            await self.db.execute(
                update(Job).where(Job.id == job_id).values(job_views=Job.job_views + 1)
            )
            await self.db.commit()
            record_job_view()
        except Exception as e:
            logger.warning(f"Failed to update view count for job {job_id}: {e}")
            record_job_view_failure()
            await self.db.rollback()

        return record

    async def create_job(self, form: JobFormData) -> JobRecord:
        """
        Create a job from form data.

        The id is generated up front so an uploaded logo can be stored
        under ``job-logos/{id}/{filename}`` before the record is written.
        """
        uploaded = None
        try:
            job_id = generate_id()

            logo_url = form.employer_logo
            if isinstance(form.employer_logo, LogoUpload):
                logo_url = uploaded = await self._upload_logo(job_id, form.employer_logo)

            highlights = JobHighlights(
                qualifications=form.qualifications,
                responsibilities=form.responsibilities,
                benefits=form.benefits,
            )

            job = Job(
                id=job_id,
                title=form.title,
                employer_name=form.employer_name,
                city=form.city,
                country=form.country,
                description=form.description,
                employment_type=form.employment_type,
                category=form.category,
                experience_level=form.experience_level,
                is_remote=form.is_remote,
                salary_min=form.salary_min,
                salary_max=form.salary_max,
                salary_currency=form.salary_currency,
                highlights=highlights.model_dump(by_alias=True),
                apply_link=str(form.apply_link),
                google_link=str(form.google_link) if form.google_link else "",
                employer_logo=logo_url or "",
                expiry_date=to_store_timestamp(form.expiry_date),
                posted_at=self.clock(),
                publisher=form.publisher,
                applications=0,
                job_views=0,
                popularity=0,
                is_popular=False,
                tags=form.tags,
            )

            # Real geocoding is not wired up; a placeholder marks "has location"
            if form.city and form.country:
                job.location_coordinates = GeoPoint(latitude=0, longitude=0).model_dump()

            self.db.add(job)
            await self.db.commit()
            await self.db.refresh(job)
        except Exception as e:
            logger.error(f"Error creating job: {e}")
            await self.db.rollback()
            if uploaded:
                await self._discard_upload(uploaded)
            raise

        logger.info(f"Created job {job_id}: {form.title}")
        return JobRecord.model_validate(job)

    async def update_job(self, job_id: str, patch: JobPatch) -> JobRecord:
        """
        Apply a partial update and return the record as stored afterwards.

        Only fields set on ``patch`` are written. Highlight lists are merged
        into the existing highlights so omitted lists are kept.

        Raises:
            JobNotFoundError: No job with this id
            JobValidationError: The resulting salary range is inverted
        """
        uploaded = None
        try:
            job = await self._get_row(job_id)
            data = patch.model_dump(exclude_unset=True)

            # Checked before any upload so a rejected patch stores nothing
            salary_min = data.get("salary_min", job.salary_min)
            salary_max = data.get("salary_max", job.salary_max)
            if salary_min > salary_max:
                raise JobValidationError(
                    f"salary_min ({salary_min}) must not exceed salary_max ({salary_max})"
                )

            if "employer_logo" in data:
                if isinstance(patch.employer_logo, LogoUpload):
                    data["employer_logo"] = uploaded = await self._upload_logo(
                        job_id, patch.employer_logo
                    )
                else:
                    data["employer_logo"] = patch.employer_logo or ""

            if "apply_link" in data:
                data["apply_link"] = str(patch.apply_link)
            if "google_link" in data:
                data["google_link"] = str(patch.google_link) if patch.google_link else ""
            if "expiry_date" in data:
                data["expiry_date"] = to_store_timestamp(patch.expiry_date)

            highlight_updates = {
                field: data.pop(field) for field in HIGHLIGHT_FIELDS if field in data
            }
            if highlight_updates:
                current = JobHighlights.model_validate(job.highlights or {})
                merged = current.model_copy(update=highlight_updates)
                data["highlights"] = merged.model_dump(by_alias=True)

            for field, value in data.items():
                setattr(job, field, value)

            await self.db.commit()
            await self.db.refresh(job)
        except Exception as e:
            logger.error(f"Error updating job {job_id}: {e}")
            await self.db.rollback()
            if uploaded:
                await self._discard_upload(uploaded)
            raise

        return JobRecord.model_validate(job)

    async def delete_job(self, job_id: str) -> None:
        """Delete a job. Deleting a missing id is a no-op."""
        try:
            result = await self.db.execute(delete(Job).where(Job.id == job_id))
            await self.db.commit()
        except Exception as e:
            logger.error(f"Error deleting job {job_id}: {e}")
            raise

        if result.rowcount == 0:
            logger.debug(f"Delete of missing job {job_id} ignored")
        else:
            logger.info(f"Deleted job {job_id}")

    async def track_application(self, job_id: str) -> None:
        """
        Record an application click.

        Raises:
            JobNotFoundError: No job with this id
        """
        try:
            result = await self.db.execute(
                update(Job)
                .where(Job.id == job_id)
                .values(
                    applications=Job.applications + 1,
                    popularity=Job.popularity + APPLICATION_POPULARITY_BOOST,
                )
            )
            if result.rowcount == 0:
                await self.db.rollback()
                raise JobNotFoundError(job_id)
            await self.db.commit()
        except Exception as e:
            logger.error(f"Error tracking job application for {job_id}: {e}")
            raise

        record_job_application()

    async def search_jobs(self, text: str) -> list[JobRecord]:
        """
        Case-insensitive substring search over the whole collection.

        Matches title, description, employer, city, country and tags.
        Title matches sort before the rest; order is otherwise kept.
        Loads every job, so it only suits small collections.
        """
        needle = text.lower()
        try:
            result = await self.db.execute(select(Job).order_by(Job.posted_at.desc()))
            jobs = [JobRecord.model_validate(job) for job in result.scalars().all()]
        except Exception as e:
            logger.error(f"Error searching jobs: {e}")
            raise

        matches = [job for job in jobs if matches_text(job, needle)]
        return sorted(matches, key=lambda job: needle not in job.title.lower())

    async def job_stats(self) -> JobStats:
        now = self.clock()
        try:
            result = await self.db.execute(
                select(
                    func.count(Job.id),
                    func.sum(case((Job.expiry_date > now, 1), else_=0)),
                    func.sum(case((Job.is_popular.is_(True), 1), else_=0)),
                    func.sum(Job.applications),
                    func.sum(Job.job_views),
                )
            )
            total, active, popular, applications, views = result.one()
        except Exception as e:
            logger.error(f"Error getting job stats: {e}")
            raise

        total = total or 0
        active = active or 0
        return JobStats(
            total_jobs=total,
            active_jobs=active,
            expired_jobs=total - active,
            popular_jobs=popular or 0,
            total_applications=applications or 0,
            total_views=views or 0,
        )
