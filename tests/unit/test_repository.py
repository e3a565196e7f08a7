"""
Unit tests for the job repository.
"""

import pytest
from sqlalchemy.ext.asyncio import AsyncSession

from jobqueue.constants import JobState
from jobqueue.db.repository import JobRepository


class TestJobRepository:
    """Tests for JobRepository."""

    async def test_insert_job_applies_defaults(
        self,
        repo: JobRepository,
        db_session: AsyncSession,
    ):
        """Test an inserted job carries the pipeline defaults."""
        job = await repo.insert_job({"id": 1}, worker="app.Mailer")
        await db_session.commit()

        assert job.id is not None
        assert job.args == {"id": 1}
        assert job.worker == "app.Mailer"
        assert job.queue == "default"
        assert job.state == JobState.AVAILABLE
        assert job.attempt == 0
        assert job.max_attempts == 20
        assert job.errors == []

    async def test_insert_job_requires_worker(self, repo: JobRepository):
        """Test the enqueue path refuses jobs without a worker."""
        with pytest.raises(ValueError, match="worker"):
            await repo.insert_job({"id": 1})

    async def test_get_job(self, repo: JobRepository, db_session: AsyncSession):
        """Test getting a job by ID."""
        job = await repo.insert_job(worker="app.Mailer")
        await db_session.commit()

        retrieved = await repo.get_job(job.id)

        assert retrieved is not None
        assert retrieved.id == job.id

    async def test_get_job_not_found(self, repo: JobRepository):
        """Test getting a non-existent job."""
        assert await repo.get_job(9_999) is None

    async def test_update_state(self, repo: JobRepository, db_session: AsyncSession):
        """Test moving a job to another state."""
        job = await repo.insert_job(worker="app.Mailer")

        updated = await repo.update_state(job.id, JobState.COMPLETED)
        await db_session.commit()
        await db_session.refresh(job)

        assert updated is True
        assert job.state == JobState.COMPLETED
        assert job.is_enqueued is False

    async def test_find_enqueued_filters_by_columns(
        self,
        repo: JobRepository,
        db_session: AsyncSession,
    ):
        """Test equality filters are combined."""
        mailer = await repo.insert_job({"id": 1}, worker="app.Mailer", queue="mailers")
        await repo.insert_job({"id": 2}, worker="app.Mailer")
        await repo.insert_job({"id": 1}, worker="app.Reporter", queue="mailers")
        await db_session.commit()

        jobs = await repo.find_enqueued([("worker", "app.Mailer"), ("queue", "mailers")])

        assert [job.id for job in jobs] == [mailer.id]

    async def test_find_enqueued_matches_whole_args(
        self,
        repo: JobRepository,
        db_session: AsyncSession,
    ):
        """Test args match on the whole mapping, regardless of key order."""
        await repo.insert_job({"id": 1, "message": "Hello!"}, worker="app.Mailer")
        await db_session.commit()

        assert await repo.count_enqueued([("args", {"message": "Hello!", "id": 1})]) == 1
        assert await repo.count_enqueued([("args", {"id": 1})]) == 0

    async def test_find_enqueued_limit(self, repo: JobRepository, db_session: AsyncSession):
        """Test the limit modifier."""
        for i in range(3):
            await repo.insert_job({"id": i}, worker="app.Mailer")
        await db_session.commit()

        jobs = await repo.find_enqueued([("worker", "app.Mailer")], limit=2)

        assert len(jobs) == 2

    async def test_only_enqueued_states_are_visible(
        self,
        repo: JobRepository,
        db_session: AsyncSession,
    ):
        """Test jobs outside available/scheduled are never returned."""
        for state in JobState:
            await repo.insert_job(worker="app.Mailer", state=state)
        await db_session.commit()

        jobs = await repo.find_enqueued([("worker", "app.Mailer")])

        assert {job.state for job in jobs} == {JobState.AVAILABLE, JobState.SCHEDULED}
        assert await repo.count_enqueued([("worker", "app.Mailer")]) == 2

    async def test_first_enqueued_none(self, repo: JobRepository):
        """Test no match returns None."""
        assert await repo.first_enqueued([("worker", "app.Mailer")]) is None

    async def test_unknown_column_is_rejected(self, repo: JobRepository):
        """Test filters must name job columns."""
        with pytest.raises(ValueError):
            await repo.count_enqueued([("priority", "high")])
