"""
Type definitions for the job queue.
Contains value types for runtime config and job construction.
"""

from jobqueue.types.config import (
    DISABLED,
    Disabled,
    MaxAge,
    MaxLen,
    Prune,
    QueueSpec,
)
from jobqueue.types.job import JobParams, build_job, worker_name
from jobqueue.types.symbol import Symbol

__all__ = [
    # Config types
    "DISABLED",
    "Disabled",
    "MaxLen",
    "MaxAge",
    "Prune",
    "QueueSpec",
    "Symbol",
    # Job types
    "JobParams",
    "build_job",
    "worker_name",
]
