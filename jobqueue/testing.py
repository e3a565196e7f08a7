"""
Assertions about enqueued jobs, for use in tests.

Assertions may be made on any job attribute, though ``worker``, ``queue`` and
``args`` are the usual ones. Only attributes passed explicitly are checked: an
assertion on ``worker="app.workers.Mailer"`` matches any job for that worker,
whatever its queue or args.

Bind the helpers to a session once and reuse them::

    jobs = JobAssertions(session)

    await jobs.assert_enqueued(worker=Mailer, args={"id": 1})
    await jobs.refute_enqueued(queue="special", args={"id": 2})

Only jobs in the ``available`` or ``scheduled`` states count as enqueued.

``args`` is compared as a whole mapping, never as a subset. How equal two
mappings must be depends on the backend. PostgreSQL compares JSONB values,
so ``{"id": 2.0}`` matches a stored ``{"id": 2}``. SQLite compares the
serialized text, keys sorted, so there the numbers must match in type too.
"""

from collections.abc import Mapping
from typing import Any

from sqlalchemy.ext.asyncio import AsyncSession

from jobqueue.db.models import Job
from jobqueue.db.repository import JobRepository
from jobqueue.types.job import VIRTUAL_FIELDS, JobParams


class EnqueuedAssertionError(AssertionError):
    """An enqueued-job assertion did not hold."""

    def __init__(self, message: str, criteria: Mapping[str, Any]):
        super().__init__(message)
        self.criteria = criteria


def normalize(criteria: Mapping[str, Any]) -> list[tuple[str, Any]]:
    """
    Turn partial criteria into (column, value) equality constraints.

    The criteria go through the same construction pipeline as a new job, so
    values are cast the way they are on insert, then the result is projected
    back down to the keys the caller gave.

    Args:
        criteria: Job attribute to expected value. Must not be empty.

    Returns:
        Constraints in the caller's key order.

    Raises:
        ValueError: If criteria are empty or name a non-column attribute.
        pydantic.ValidationError: If the pipeline rejects the criteria.
    """
    if not criteria:
        raise ValueError("at least one job attribute is required to match on")

    virtual = VIRTUAL_FIELDS.intersection(criteria)
    if virtual:
        raise ValueError(f"cannot match on non-column attributes: {sorted(virtual)}")

    # args is only seeded when absent, so an explicit None or non-mapping fails
    columns = JobParams(**criteria).columns()

    return [(key, columns[key]) for key in criteria]


async def exists_one(session: AsyncSession, **criteria: Any) -> Job | None:
    """Get any one enqueued job matching ``criteria``, or None."""
    return await JobRepository(session).first_enqueued(normalize(criteria))


async def assert_enqueued(session: AsyncSession, **criteria: Any) -> dict[str, Any]:
    """
    Assert that a job matching ``criteria`` is enqueued.

    Returns:
        The matched job's args.

    Raises:
        EnqueuedAssertionError: If no enqueued job matches.
    """
    job = await exists_one(session, **criteria)
    if job is None:
        raise EnqueuedAssertionError(
            f"Expected a job matching {criteria!r} to be enqueued", criteria
        )
    return job.args


async def refute_enqueued(session: AsyncSession, **criteria: Any) -> None:
    """
    Assert that no job matching ``criteria`` is enqueued.

    Raises:
        EnqueuedAssertionError: If an enqueued job matches.
    """
    if await exists_one(session, **criteria) is not None:
        raise EnqueuedAssertionError(
            f"Expected no jobs matching {criteria!r} to be enqueued", criteria
        )


async def count_enqueued(session: AsyncSession, **criteria: Any) -> int:
    """Count the enqueued jobs matching ``criteria``."""
    return await JobRepository(session).count_enqueued(normalize(criteria))


class JobAssertions:
    """The enqueued-job helpers bound to one session."""

    def __init__(self, session: AsyncSession):
        self._session = session

    async def exists_one(self, **criteria: Any) -> Job | None:
        return await exists_one(self._session, **criteria)

    async def assert_enqueued(self, **criteria: Any) -> dict[str, Any]:
        return await assert_enqueued(self._session, **criteria)

    async def refute_enqueued(self, **criteria: Any) -> None:
        await refute_enqueued(self._session, **criteria)

    async def count_enqueued(self, **criteria: Any) -> int:
        return await count_enqueued(self._session, **criteria)
