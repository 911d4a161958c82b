from logging.config import dictConfig
from typing import Any

import structlog

from common.logging.std_logging_config import StdLoggingConfig, common_logger_config
from common.utils.utils import deep_merge


def setup_logging(logging_config: dict[str, Any] | None = None, level: str | None = None) -> None:
    config = deep_merge(common_logger_config, logging_config or {})
    if level:
        config = deep_merge(config, {"root": {"level": level.upper()}})
    dictConfig(config)

    structlog.configure(
        processors=StdLoggingConfig.structlog_processors,
        # `wrapper_class` is the bound logger that you get back from
        # get_logger(). This one imitates the API of `logging.Logger`.
        wrapper_class=structlog.stdlib.BoundLogger,
        # `logger_factory` is used to create wrapped loggers that are used for
        # OUTPUT. The final value from the formatter's renderer is passed to
        # the stdlib method of the same name as the one called on the bound logger.
        logger_factory=StdLoggingConfig.logger_factory,
        cache_logger_on_first_use=True,
    )
