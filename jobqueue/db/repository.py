"""
Job repository for database operations.
Implements the query patterns the enqueued-job assertions rely on.
"""

import logging
from collections.abc import Iterable
from typing import Any, Sequence

from sqlalchemy import ColumnElement, and_, func, select, update
from sqlalchemy.ext.asyncio import AsyncSession

from jobqueue.constants import ENQUEUED_STATES, JobState
from jobqueue.db.models import Job
from jobqueue.types.job import build_job

logger = logging.getLogger(__name__)

# (column name, expected value) equality constraints
Filters = Iterable[tuple[str, Any]]


class JobRepository:
    """
    Repository for job database operations.

    Reads are restricted to an equality conjunction over job columns, either
    across all jobs or only the enqueued ones (available or scheduled).
    """

    def __init__(self, session: AsyncSession):
        """
        Initialize the repository with a database session.

        Args:
            session: The async database session.
        """
        self._session = session

    async def insert_job(self, args: dict[str, Any] | None = None, **opts: Any) -> Job:
        """
        Enqueue a new job.

        Runs the attributes through the job construction pipeline, so the
        stored row carries exactly the defaults the matcher expects.

        Args:
            args: Job arguments.
            **opts: Other job attributes; ``worker`` is required.

        Returns:
            The flushed Job.

        Raises:
            ValueError: If no worker is given or an attribute is invalid.
        """
        params = build_job(args, **opts)
        if params.worker is None:
            raise ValueError("a job requires a worker")

        values = params.columns()
        if values["scheduled_at"] is None:
            del values["scheduled_at"]

        job = Job(**values)
        self._session.add(job)
        await self._session.flush()

        logger.info(
            "Inserted job",
            extra={"job_id": job.id, "worker": job.worker, "queue": job.queue},
        )
        return job

    async def get_job(self, job_id: int) -> Job | None:
        """
        Get a job by ID.

        Args:
            job_id: The job ID.

        Returns:
            The Job or None if not found.
        """
        stmt = select(Job).where(Job.id == job_id)
        result = await self._session.execute(stmt)
        return result.scalar_one_or_none()

    async def update_state(self, job_id: int, state: JobState) -> bool:
        """
        Move a job to another state.

        Args:
            job_id: The job ID.
            state: The new state.

        Returns:
            True if a job was updated, False otherwise.
        """
        stmt = update(Job).where(Job.id == job_id).values(state=state)
        result = await self._session.execute(stmt)
        return result.rowcount > 0

    async def find_enqueued(
        self,
        filters: Filters,
        limit: int | None = None,
    ) -> Sequence[Job]:
        """
        Find enqueued jobs matching every filter.

        Args:
            filters: (column, value) equality constraints.
            limit: Optional maximum number of jobs to return.

        Returns:
            The matching jobs.
        """
        stmt = select(Job).where(self._enqueued_where(filters))
        if limit is not None:
            stmt = stmt.limit(limit)

        result = await self._session.execute(stmt)
        return result.scalars().all()

    async def first_enqueued(self, filters: Filters) -> Job | None:
        """Get any one enqueued job matching every filter."""
        jobs = await self.find_enqueued(filters, limit=1)
        return jobs[0] if jobs else None

    async def count_enqueued(self, filters: Filters) -> int:
        """
        Count enqueued jobs matching every filter.

        Args:
            filters: (column, value) equality constraints.

        Returns:
            Number of matching jobs.
        """
        stmt = select(func.count()).select_from(Job).where(self._enqueued_where(filters))
        result = await self._session.execute(stmt)
        return result.scalar() or 0

    @staticmethod
    def _enqueued_where(filters: Filters) -> ColumnElement[bool]:
        clauses = [Job.state.in_(ENQUEUED_STATES)]
        for field, value in filters:
            column = Job.__table__.columns.get(field)
            if column is None:
                raise ValueError(f"jobs have no {field!r} column")
            clauses.append(column == value)
        return and_(*clauses)
