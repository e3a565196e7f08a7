"""
SQLAlchemy database models.
Defines the Job table read by the enqueued-job assertions.
"""

from datetime import datetime
from typing import Any

from sqlalchemy import (
    JSON,
    BigInteger,
    Column,
    DateTime,
    Enum,
    Index,
    Integer,
    String,
    func,
)
from sqlalchemy.dialects.postgresql import JSONB
from sqlalchemy.orm import DeclarativeBase, Mapped, mapped_column

from jobqueue.constants import DEFAULT_MAX_ATTEMPTS, DEFAULT_QUEUE, ENQUEUED_STATES, JobState

# JSONB on PostgreSQL gives value equality on args; plain JSON elsewhere
JSONType = JSON().with_variant(JSONB(), "postgresql")


class Base(DeclarativeBase):
    """Base class for all SQLAlchemy models."""

    pass


class Job(Base):
    """
    A persisted job record.

    The queue engine owns the lifecycle of these rows; this package only
    inserts them through the enqueue path and reads them back.
    """

    __tablename__ = "jobs"

    id: Mapped[int] = mapped_column(
        BigInteger().with_variant(Integer(), "sqlite"),
        primary_key=True,
        autoincrement=True,
    )

    state: Mapped[JobState] = mapped_column(
        Enum(JobState, name="job_state", create_constraint=True, values_callable=lambda x: [e.value for e in x]),
        nullable=False,
        default=JobState.AVAILABLE,
        index=True,
    )
    queue: Mapped[str] = mapped_column(
        String(255),
        nullable=False,
        default=DEFAULT_QUEUE,
    )
    worker: Mapped[str] = mapped_column(
        String(255),
        nullable=False,
    )

    args: Mapped[dict[str, Any]] = mapped_column(
        JSONType,
        nullable=False,
        default=dict,
    )
    errors: Mapped[list[Any]] = mapped_column(
        JSONType,
        nullable=False,
        default=list,
    )

    # Retry tracking
    attempt: Mapped[int] = mapped_column(
        Integer,
        nullable=False,
        default=0,
    )
    max_attempts: Mapped[int] = mapped_column(
        Integer,
        nullable=False,
        default=DEFAULT_MAX_ATTEMPTS,
    )

    # Timestamps
    inserted_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        nullable=False,
        server_default=func.now(),
    )
    scheduled_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        nullable=False,
        server_default=func.now(),
    )
    attempted_at: Mapped[datetime | None] = mapped_column(
        DateTime(timezone=True),
        nullable=True,
    )
    completed_at: Mapped[datetime | None] = mapped_column(
        DateTime(timezone=True),
        nullable=True,
    )

    __table_args__ = (
        # Index for the enqueued-job lookups
        Index(
            "ix_jobs_enqueued",
            "queue",
            "state",
            "scheduled_at",
            postgresql_where=(Column("state").in_([s.value for s in ENQUEUED_STATES])),
        ),
    )

    @property
    def is_enqueued(self) -> bool:
        """Check if the job is waiting to be executed."""
        return self.state in ENQUEUED_STATES

    def __repr__(self) -> str:
        return (
            f"Job(id={self.id}, worker={self.worker}, queue={self.queue}, "
            f"state={self.state}, attempt={self.attempt}/{self.max_attempts})"
        )
