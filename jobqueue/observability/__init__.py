"""
Observability module.
Contains structured logging setup.
"""

from jobqueue.observability.logging import LOG_HANDLER_NAME, bind_context, setup_logging

__all__ = [
    "LOG_HANDLER_NAME",
    "setup_logging",
    "bind_context",
]
