"""
Runtime configuration.

Turns a loose set of options into a validated, immutable ``Config`` and keeps
the process-wide instances in a small registry.
"""

import logging
import os
import socket
import threading
from collections.abc import Callable, Mapping
from dataclasses import dataclass
from typing import Any, NamedTuple

from jobqueue.constants import (
    DEFAULT_CONFIG_NAME,
    DEFAULT_POLL_INTERVAL,
    DEFAULT_PRUNE_INTERVAL,
    DEFAULT_PRUNE_LIMIT,
    DEFAULT_QUEUE,
    DEFAULT_QUEUE_LIMIT,
    DEFAULT_SHUTDOWN_GRACE_PERIOD,
    DEFAULT_VERBOSE,
    DYNO_ENV_VAR,
    FALLBACK_HOSTNAME,
)
from jobqueue.types.config import (
    DISABLED,
    Disabled,
    MaxAge,
    MaxLen,
    Prune,
    QueueSpec,
)
from jobqueue.types.symbol import Symbol

logger = logging.getLogger(__name__)


class ConfigValidationError(ValueError):
    """Raised when a runtime option is missing, unknown or invalid."""

    def __init__(self, option: str, value: Any, expected: str):
        self.option = option
        self.value = value
        self.expected = expected
        super().__init__(f"expected :{option} to be {expected}, got: {value!r}")


@dataclass(frozen=True)
class Config:
    """
    Validated, immutable runtime settings.

    Build instances through ``Config.new`` or ``validate_config``; the
    dataclass constructor itself performs no validation.
    """

    repo: Any
    node: str
    poll_interval: int
    prune: Prune
    prune_interval: int
    prune_limit: int
    queues: tuple[QueueSpec, ...]
    shutdown_grace_period: int
    verbose: bool

    @classmethod
    def new(cls, **options: Any) -> "Config":
        """Validate keyword options and build a Config from them."""
        return validate_config(options)

    def queue_limit(self, name: str) -> int | None:
        """Get the concurrency limit for a queue, or None if it isn't configured."""
        for queue in self.queues:
            if queue.name == name:
                return queue.limit
        return None


# ============================================================================
# Node naming
# ============================================================================


def node_name(env: Mapping[str, str] | None = None) -> str:
    """
    Resolve the logical name of the current node.

    A non-empty ``DYNO`` variable wins; otherwise the local hostname is used.

    Args:
        env: Environment mapping. Defaults to ``os.environ``.

    Returns:
        The node name, never empty.
    """
    if env is None:
        env = os.environ

    dyno = env.get(DYNO_ENV_VAR)
    if dyno:
        return dyno

    try:
        hostname = socket.gethostname()
    except OSError:
        logger.warning("Unable to resolve hostname, using fallback node name")
        return FALLBACK_HOSTNAME

    return hostname or FALLBACK_HOSTNAME


# ============================================================================
# Validation
# ============================================================================

_INVALID = object()

_PRUNE_TAGS: dict[str, type[MaxLen] | type[MaxAge]] = {
    "maxlen": MaxLen,
    "maxage": MaxAge,
}


def _is_positive_integer(value: Any) -> bool:
    return isinstance(value, int) and not isinstance(value, bool) and value > 0


def _text(value: Any) -> Any:
    if isinstance(value, str) and not isinstance(value, Symbol) and value:
        return value
    return _INVALID


def _positive_integer(value: Any) -> Any:
    return value if _is_positive_integer(value) else _INVALID


def _boolean(value: Any) -> Any:
    return value if isinstance(value, bool) else _INVALID


def _prune(value: Any) -> Any:
    if isinstance(value, tuple) and len(value) == 2 and isinstance(value[0], str):
        variant = _PRUNE_TAGS.get(value[0])
        if variant is None:
            return _INVALID
        value = variant(value[1])

    match value:
        case Disabled():
            return value
        case MaxLen(limit=amount) | MaxAge(seconds=amount) if _is_positive_integer(amount):
            return value
        case _:
            return _INVALID


def _queues(value: Any) -> Any:
    if not isinstance(value, (list, tuple)):
        return _INVALID

    specs = []
    for pair in value:
        if isinstance(pair, QueueSpec):
            name, limit = pair.name, pair.limit
        elif isinstance(pair, tuple) and len(pair) == 2:
            name, limit = pair
        else:
            return _INVALID

        if not isinstance(name, Symbol) or not _is_positive_integer(limit):
            return _INVALID
        specs.append(QueueSpec(name=name, limit=limit))

    return tuple(specs)


class _Option(NamedTuple):
    validate: Callable[[Any], Any]
    expected: str
    default: Callable[[], Any]


# Walked in order; anything not listed here (other than repo) is rejected.
_OPTIONS: dict[str, _Option] = {
    "node": _Option(_text, "a non-empty string", node_name),
    "poll_interval": _Option(
        _positive_integer, "a positive integer", lambda: DEFAULT_POLL_INTERVAL
    ),
    "prune": _Option(
        _prune,
        "DISABLED or a maxlen/maxage variant with a positive integer",
        lambda: DISABLED,
    ),
    "prune_interval": _Option(
        _positive_integer, "a positive integer", lambda: DEFAULT_PRUNE_INTERVAL
    ),
    "prune_limit": _Option(
        _positive_integer, "a positive integer", lambda: DEFAULT_PRUNE_LIMIT
    ),
    "queues": _Option(
        _queues,
        "a list of {Symbol, positive integer} pairs",
        lambda: (QueueSpec(name=Symbol(DEFAULT_QUEUE), limit=DEFAULT_QUEUE_LIMIT),),
    ),
    "shutdown_grace_period": _Option(
        _positive_integer, "a positive integer", lambda: DEFAULT_SHUTDOWN_GRACE_PERIOD
    ),
    "verbose": _Option(_boolean, "a boolean", lambda: DEFAULT_VERBOSE),
}


def validate_config(options: Mapping[str, Any]) -> Config:
    """
    Validate raw options and build a Config.

    Args:
        options: Option name to raw value. ``repo`` is required and passed
            through untouched; every other option is optional.

    Returns:
        The validated Config, with defaults filled in for omitted options.

    Raises:
        ConfigValidationError: On the first missing, unknown or invalid option.
    """
    if "repo" not in options:
        raise ConfigValidationError("repo", None, "a store handle")

    for name, value in options.items():
        if name != "repo" and name not in _OPTIONS:
            raise ConfigValidationError(name, value, "a known option")

    values: dict[str, Any] = {"repo": options["repo"]}
    for name, option in _OPTIONS.items():
        if name not in options:
            values[name] = option.default()
            continue

        canonical = option.validate(options[name])
        if canonical is _INVALID:
            raise ConfigValidationError(name, options[name], option.expected)
        values[name] = canonical

    conf = Config(**values)
    logger.debug(
        "Validated runtime config",
        extra={"node": conf.node, "queues": [str(q.name) for q in conf.queues]},
    )
    return conf


# ============================================================================
# Registry
# ============================================================================

_registry: dict[str, Config] = {}
_registry_lock = threading.Lock()


def put_config(conf: Config, name: str = DEFAULT_CONFIG_NAME) -> Config:
    """
    Store a config for retrieval by name.

    Args:
        conf: The validated config.
        name: Registry key.

    Returns:
        The stored config.
    """
    if not isinstance(conf, Config):
        raise TypeError(f"expected a Config, got: {conf!r}")

    with _registry_lock:
        _registry[name] = conf
    logger.info("Runtime config registered", extra={"config_name": name, "node": conf.node})
    return conf


def get_config(name: str = DEFAULT_CONFIG_NAME) -> Config:
    """
    Get a registered config.

    Raises:
        LookupError: If no config is registered under ``name``.
    """
    with _registry_lock:
        try:
            return _registry[name]
        except KeyError:
            raise LookupError(f"no config registered as {name!r}") from None


def delete_config(name: str = DEFAULT_CONFIG_NAME) -> None:
    """Remove a registered config, if present."""
    with _registry_lock:
        _registry.pop(name, None)
