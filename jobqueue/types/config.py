"""
Runtime configuration value types.

``prune`` is a tagged variant: exactly one of ``Disabled``, ``MaxLen`` or
``MaxAge``. Queue entries are ``QueueSpec`` pairs keyed by a ``Symbol``.
"""

from dataclasses import dataclass

from jobqueue.types.symbol import Symbol


@dataclass(frozen=True)
class Disabled:
    """Pruning is turned off."""

    def __repr__(self) -> str:
        return "DISABLED"


@dataclass(frozen=True)
class MaxLen:
    """Keep at most ``limit`` finished jobs."""

    limit: int


@dataclass(frozen=True)
class MaxAge:
    """Keep finished jobs for at most ``seconds``."""

    seconds: int


Prune = Disabled | MaxLen | MaxAge

DISABLED = Disabled()


@dataclass(frozen=True)
class QueueSpec:
    """A queue name and the number of jobs it may run concurrently."""

    name: Symbol
    limit: int
