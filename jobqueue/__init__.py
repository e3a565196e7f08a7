"""
Job Queue Test Support

Validated runtime configuration and enqueued-job assertions for a
database-backed job queue.
"""

__version__ = "1.0.0"
