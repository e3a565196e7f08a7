"""
Integration tests: application code enqueues jobs, tests assert on them.
"""

from collections.abc import AsyncGenerator
from pathlib import Path
from typing import Any

import pytest
import pytest_asyncio

from jobqueue.config import get_config
from jobqueue.db import Base, close_db, get_engine, get_session_context, init_db
from jobqueue.db.repository import JobRepository
from jobqueue.runtime import bootstrap
from jobqueue.testing import EnqueuedAssertionError, JobAssertions
from jobqueue.types import Symbol


class Worker:
    """Worker class the business code enqueues."""


async def work(args: dict[str, Any]) -> None:
    """Business code that enqueues a job on the special queue."""
    async with get_session_context() as session:
        await JobRepository(session).insert_job(args, worker=Worker, queue=Symbol("special"))


@pytest_asyncio.fixture
async def database(tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> AsyncGenerator[None]:
    """Point the application at a fresh file database."""
    monkeypatch.setenv("JOBQUEUE_DATABASE_URL", f"sqlite+aiosqlite:///{tmp_path / 'jobs.db'}")
    monkeypatch.setenv("JOBQUEUE_LOG_FORMAT", "console")

    async with get_engine().begin() as conn:
        await conn.run_sync(Base.metadata.create_all)
    await init_db()

    yield

    await close_db()


class TestBusinessFlow:
    """Tests for the enqueue-then-assert flow."""

    async def test_jobs_are_enqueued_with_provided_arguments(self, database: None):
        """Test asserting on a job inserted by application code."""
        bootstrap(repo=get_engine(), queues=[(Symbol("special"), 5)])

        await work({"id": 1, "message": "Hello!"})

        async with get_session_context() as session:
            jobs = JobAssertions(session)

            args = await jobs.assert_enqueued(worker=Worker, args={"id": 1, "message": "Hello!"})
            assert args == {"id": 1, "message": "Hello!"}

            await jobs.refute_enqueued(queue="default")
            assert await jobs.count_enqueued(queue="special") == 1

        assert get_config().queue_limit("special") == 5

    async def test_nothing_enqueued(self, database: None):
        """Test assertions against an empty queue."""
        async with get_session_context() as session:
            jobs = JobAssertions(session)

            with pytest.raises(EnqueuedAssertionError):
                await jobs.assert_enqueued(worker=Worker)

            assert await jobs.count_enqueued(worker=Worker) == 0
