"""Logging setup shared by the API server and the CLI runner."""

import logging
import sys

import structlog


def configure_logging(debug: bool = False) -> None:
    """Configure stdlib logging and route structlog through a console renderer.

    Args:
        debug: INFO level when True, WARNING otherwise
    """
    level = logging.INFO if debug else logging.WARNING

    logging.basicConfig(
        level=level,
        format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
        stream=sys.stdout,
    )

    structlog.configure(
        processors=[
            structlog.contextvars.merge_contextvars,
            structlog.processors.add_log_level,
            structlog.processors.TimeStamper(fmt="%H:%M:%S"),
            structlog.dev.ConsoleRenderer(),
        ],
        wrapper_class=structlog.make_filtering_bound_logger(level),
        context_class=dict,
        logger_factory=structlog.PrintLoggerFactory(),
        cache_logger_on_first_use=False,
    )
