"""
Runtime bootstrap.

Validates and registers the process-wide runtime config, and binds the node
to the logging context. Call once at process start.
"""

import logging
from typing import Any

from jobqueue.config import Config, put_config, validate_config
from jobqueue.constants import DEFAULT_CONFIG_NAME
from jobqueue.observability.logging import bind_context, setup_logging
from jobqueue.settings import Settings, get_settings

logger = logging.getLogger(__name__)


def bootstrap(
    *,
    name: str = DEFAULT_CONFIG_NAME,
    settings: Settings | None = None,
    configure_logging: bool = False,
    **options: Any,
) -> Config:
    """
    Build and register the runtime config.

    Options set through ``JOBQUEUE_*`` environment variables are used unless
    overridden by keyword options.

    Args:
        name: Registry key for the config.
        settings: Settings to use instead of the cached ones.
        configure_logging: Also install the structured log handler. Leave it
            off when the host application or test runner owns logging.
        **options: Runtime options; ``repo`` is required.

    Returns:
        The registered Config.

    Raises:
        ConfigValidationError: If any option is invalid.
    """
    settings = settings or get_settings()
    if configure_logging:
        setup_logging(settings)

    conf = validate_config({**settings.runtime_options(), **options})
    put_config(conf, name)
    bind_context(node=conf.node, config_name=name)

    if conf.verbose:
        logger.info(
            "Runtime started",
            extra={
                "poll_interval": conf.poll_interval,
                "queues": {str(q.name): q.limit for q in conf.queues},
            },
        )
    return conf
