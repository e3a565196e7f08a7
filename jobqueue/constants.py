"""
Application constants.
Centralized location for all constant values used across the application.
"""

from enum import StrEnum


class JobState(StrEnum):
    """
    Job lifecycle states, as persisted by the queue engine.

    Only AVAILABLE and SCHEDULED jobs count as enqueued:
    - AVAILABLE: ready to be picked up by a queue
    - SCHEDULED: waiting for its scheduled_at time
    - EXECUTING: currently running
    - RETRYABLE: failed, waiting to be retried
    - COMPLETED / DISCARDED / CANCELLED: terminal
    """

    AVAILABLE = "available"
    SCHEDULED = "scheduled"
    EXECUTING = "executing"
    RETRYABLE = "retryable"
    COMPLETED = "completed"
    DISCARDED = "discarded"
    CANCELLED = "cancelled"


# States visible to the enqueued-job assertions
ENQUEUED_STATES: tuple[JobState, ...] = (JobState.AVAILABLE, JobState.SCHEDULED)

# Job defaults
DEFAULT_QUEUE = "default"
DEFAULT_MAX_ATTEMPTS = 20

# Runtime config defaults (intervals and periods are milliseconds)
DEFAULT_POLL_INTERVAL = 1_000
DEFAULT_PRUNE_INTERVAL = 60_000
DEFAULT_PRUNE_LIMIT = 5_000
DEFAULT_QUEUE_LIMIT = 10
DEFAULT_SHUTDOWN_GRACE_PERIOD = 15_000
DEFAULT_VERBOSE = True

# Registry key for the process-wide config
DEFAULT_CONFIG_NAME = "jobqueue"

# Node naming
DYNO_ENV_VAR = "DYNO"
FALLBACK_HOSTNAME = "localhost"

# Settings
ENV_PREFIX = "JOBQUEUE_"
