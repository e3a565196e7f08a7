"""
Pytest configuration and shared fixtures.
"""

import logging
from collections.abc import AsyncGenerator, Generator

import pytest
import pytest_asyncio
import structlog
from sqlalchemy.ext.asyncio import AsyncEngine, AsyncSession

from jobqueue.config import _registry
from jobqueue.db import Base, create_session_factory, get_test_engine
from jobqueue.db.repository import JobRepository
from jobqueue.observability import LOG_HANDLER_NAME
from jobqueue.settings import get_settings
from jobqueue.testing import JobAssertions


@pytest_asyncio.fixture
async def async_engine() -> AsyncGenerator[AsyncEngine]:
    """Create an isolated in-memory database with the jobs table."""
    engine = get_test_engine()

    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)

    yield engine

    await engine.dispose()


@pytest_asyncio.fixture
async def db_session(async_engine: AsyncEngine) -> AsyncGenerator[AsyncSession]:
    """Create a database session for tests."""
    session_factory = create_session_factory(async_engine)

    async with session_factory() as session:
        yield session

        # Rollback any uncommitted changes
        await session.rollback()


@pytest.fixture
def repo(db_session: AsyncSession) -> JobRepository:
    """Create a repository instance."""
    return JobRepository(db_session)


@pytest.fixture
def jobs(db_session: AsyncSession) -> JobAssertions:
    """Create enqueued-job assertions bound to the test session."""
    return JobAssertions(db_session)


@pytest.fixture(autouse=True)
def clean_state() -> Generator[None]:
    """Reset cached settings, registered configs and logging between tests."""
    get_settings.cache_clear()
    _registry.clear()
    structlog.contextvars.clear_contextvars()
    root_logger = logging.getLogger()
    root_level = root_logger.level

    yield

    get_settings.cache_clear()
    _registry.clear()
    structlog.contextvars.clear_contextvars()
    for handler in list(root_logger.handlers):
        if handler.get_name() == LOG_HANDLER_NAME:
            root_logger.removeHandler(handler)
    root_logger.setLevel(root_level)
