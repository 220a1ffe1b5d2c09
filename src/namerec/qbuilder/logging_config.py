"""Logging configuration with structlog and standard logging integration."""

import logging
import sys

import structlog


def configure_logging(log_level: str) -> None:
    """
    Configure structlog with standard logging integration.

    Library modules log through `logging.getLogger(__name__)`; this routes them
    through the structlog console renderer. Output goes to stderr so stdout of
    the console script stays machine readable.

    Args:
        log_level: Logging level (DEBUG, INFO, WARNING, ERROR, CRITICAL)
    """
    numeric_level = getattr(logging, log_level.upper(), logging.INFO)

    structlog.configure(
        processors=[
            structlog.contextvars.merge_contextvars,
            structlog.processors.add_log_level,
            structlog.processors.TimeStamper(fmt='iso', utc=False),
            structlog.stdlib.ProcessorFormatter.wrap_for_formatter,
        ],
        wrapper_class=structlog.stdlib.BoundLogger,
        logger_factory=structlog.stdlib.LoggerFactory(),
        cache_logger_on_first_use=True,
    )

    # ts level: message
    formatter = structlog.stdlib.ProcessorFormatter(
        processor=structlog.dev.ConsoleRenderer(colors=False),
        foreign_pre_chain=[
            structlog.stdlib.add_log_level,
            structlog.processors.TimeStamper(fmt='iso', utc=False),
        ],
    )

    handler = logging.StreamHandler(sys.stderr)
    handler.setFormatter(formatter)

    root_logger = logging.getLogger()
    root_logger.handlers = [handler]
    root_logger.setLevel(numeric_level)

    # Driver loggers are noisy below WARNING
    for logger_name in ['sqlalchemy.engine', 'aiosqlite']:
        logging.getLogger(logger_name).setLevel(max(numeric_level, logging.WARNING))
