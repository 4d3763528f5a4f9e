"""structlog setup for the dropstats service.

Every module logs through ``structlog.get_logger(__name__)``; events are
short messages with keyword context. Output is one JSON object per line,
or colored key/value pairs when ``json_logs`` is off (local debugging).
"""

import logging

import structlog
from structlog import contextvars as structlog_contextvars

# Libraries that log every statement / request at INFO
NOISY_LOGGERS = ("sqlalchemy.engine", "httpx", "httpcore")


def setup_logging(log_level: str = "INFO", json_logs: bool = True) -> None:
    """
    Route structlog through stdlib logging at ``log_level``.

    :param log_level: Level name (DEBUG, INFO, WARNING, ERROR, CRITICAL)
    :param json_logs: Render JSON lines instead of console output
    """
    level = getattr(logging, log_level.upper(), logging.INFO)
    logging.basicConfig(format="%(message)s", level=level)
    for name in NOISY_LOGGERS:
        logging.getLogger(name).setLevel(max(level, logging.WARNING))

    renderer = (
        structlog.processors.JSONRenderer()
        if json_logs
        else structlog.dev.ConsoleRenderer()
    )
    structlog.configure(
        processors=[
            structlog.stdlib.filter_by_level,
            structlog_contextvars.merge_contextvars,
            structlog.stdlib.add_logger_name,
            structlog.stdlib.add_log_level,
            structlog.processors.TimeStamper(fmt="iso"),
            structlog.processors.StackInfoRenderer(),
            structlog.processors.format_exc_info,
            renderer,
        ],
        wrapper_class=structlog.stdlib.BoundLogger,
        context_class=dict,
        logger_factory=structlog.stdlib.LoggerFactory(),
        cache_logger_on_first_use=True,
    )
