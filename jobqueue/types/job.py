"""
Job construction pipeline.

``build_job`` applies the defaulting and casting rules for a new job without
touching the store. The enqueue path persists its result; the enqueued-job
matcher uses it to canonicalize filter criteria, so both agree on defaults.
"""

from datetime import datetime, timedelta, timezone
from enum import Enum
from typing import Any

from pydantic import BaseModel, ConfigDict, Field, field_validator, model_validator

from jobqueue.constants import DEFAULT_MAX_ATTEMPTS, DEFAULT_QUEUE, JobState

# Accepted by the pipeline but not stored as job columns
VIRTUAL_FIELDS = frozenset({"schedule_in"})


def worker_name(worker: Any) -> Any:
    """
    Cast a worker reference to its stored name.

    Classes become ``"module.QualName"``; anything else is returned as is.
    """
    if isinstance(worker, type):
        return f"{worker.__module__}.{worker.__qualname__}"
    return worker


class JobParams(BaseModel):
    """
    Validated attributes of a job that has not been persisted yet.

    Unknown attributes are rejected. ``worker`` is optional here so partial
    criteria can go through the same pipeline; the enqueue path requires it.
    """

    model_config = ConfigDict(extra="forbid", frozen=True)

    args: dict[str, Any] = Field(default_factory=dict)
    worker: str | None = None
    queue: str = DEFAULT_QUEUE
    state: JobState = JobState.AVAILABLE
    max_attempts: int = Field(default=DEFAULT_MAX_ATTEMPTS, gt=0)
    attempt: int = Field(default=0, ge=0)
    scheduled_at: datetime | None = None
    schedule_in: int | None = Field(default=None, ge=0, exclude=True)

    @field_validator("worker", mode="before")
    @classmethod
    def _cast_worker(cls, value: Any) -> Any:
        return worker_name(value)

    @field_validator("queue", mode="before")
    @classmethod
    def _cast_queue(cls, value: Any) -> Any:
        if isinstance(value, Enum):
            return str(value.value)
        if isinstance(value, str):
            return str.__str__(value)
        return value

    @model_validator(mode="before")
    @classmethod
    def _resolve_scheduling(cls, data: Any) -> Any:
        if not isinstance(data, dict):
            return data

        data = dict(data)
        schedule_in = data.get("schedule_in")
        if isinstance(schedule_in, int) and not isinstance(schedule_in, bool):
            data.setdefault(
                "scheduled_at",
                datetime.now(timezone.utc) + timedelta(seconds=schedule_in),
            )

        scheduled_at = data.get("scheduled_at")
        if (
            "state" not in data
            and isinstance(scheduled_at, datetime)
            and _as_aware(scheduled_at) > datetime.now(timezone.utc)
        ):
            data["state"] = JobState.SCHEDULED

        return data

    def columns(self) -> dict[str, Any]:
        """Get the attributes that map onto job columns."""
        return self.model_dump(exclude=set(VIRTUAL_FIELDS))


def _as_aware(moment: datetime) -> datetime:
    if moment.tzinfo is None:
        return moment.replace(tzinfo=timezone.utc)
    return moment


def build_job(args: dict[str, Any] | None = None, **opts: Any) -> JobParams:
    """
    Build job attributes with defaults applied.

    Args:
        args: Job arguments. Defaults to an empty mapping.
        **opts: Any other job attribute (worker, queue, state, ...).

    Returns:
        The validated JobParams.

    Raises:
        pydantic.ValidationError: For unknown attributes or invalid values.
    """
    return JobParams(args={} if args is None else args, **opts)
