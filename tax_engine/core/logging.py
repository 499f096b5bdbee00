import logging
import sys
import structlog

def setup_logging(log_level: str = "INFO", json_logs: bool = True):
    """
    Configures structured logging for the tax engine using structlog.

    JSON output is meant for services; the console renderer is easier to
    read while developing or running the tests.
    """
    log_level = log_level.upper()

    logging.basicConfig(
        level=log_level,
        format="%(message)s",
        stream=sys.stdout,
    )

    renderer = structlog.processors.JSONRenderer() if json_logs else structlog.dev.ConsoleRenderer()

    structlog.configure(
        processors=[
            structlog.stdlib.filter_by_level,
            structlog.stdlib.add_logger_name,
            structlog.stdlib.add_log_level,
            structlog.stdlib.PositionalArgumentsFormatter(),
            structlog.processors.TimeStamper(fmt="iso"),
            structlog.processors.StackInfoRenderer(),
            structlog.processors.format_exc_info,
            structlog.processors.UnicodeDecoder(),
            renderer,
        ],
        context_class=dict,
        logger_factory=structlog.stdlib.LoggerFactory(),
        wrapper_class=structlog.stdlib.BoundLogger,
        cache_logger_on_first_use=True,
    )

def setup_logging_from_config(cfg) -> None:
    """Applies the LOG_LEVEL / JSON_LOGS settings of a config class."""
    setup_logging(cfg.LOG_LEVEL, cfg.JSON_LOGS)
