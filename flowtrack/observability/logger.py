"""
Structured Logging

Every mutation of the ledger and every storage failure is logged as a
structured event. Library modules only call get_logger(); the entrypoint
(the Streamlit app or create_app_components) calls configure_logging()
once at startup.
"""

import logging
import sys
from typing import Optional

import structlog


_CONFIGURED = False


def configure_logging(
    level: str = "INFO",
    json_logs: bool = True,
    force: bool = False,
) -> None:
    """
    Configure structlog on top of the standard library logger.

    Args:
        level: Minimum level name (e.g. "INFO", "DEBUG")
        json_logs: Render JSON lines; False uses the console renderer
        force: Reconfigure even if logging was already set up
    """
    global _CONFIGURED
    if _CONFIGURED and not force:
        return

    logging.basicConfig(
        format="%(message)s",
        stream=sys.stderr,
        level=getattr(logging, level.upper(), logging.INFO),
        force=force,
    )

    renderer = (
        structlog.processors.JSONRenderer()
        if json_logs
        else structlog.dev.ConsoleRenderer()
    )

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
        wrapper_class=structlog.stdlib.BoundLogger,
        context_class=dict,
        logger_factory=structlog.stdlib.LoggerFactory(),
        cache_logger_on_first_use=True,
    )

    _CONFIGURED = True


def get_logger(name: Optional[str] = None) -> structlog.stdlib.BoundLogger:
    """Return a structlog logger bound to the given module name."""
    return structlog.get_logger(name)
