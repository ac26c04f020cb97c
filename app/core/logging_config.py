# app/core/logging_config.py
"""Application-wide logging configuration."""

import logging

from rich.logging import RichHandler

from app.core.config import settings


def setup_logging() -> None:
    """Configures the root logger with a rich console handler."""
    log_level = getattr(logging, settings.LOG_LEVEL.upper(), logging.INFO)

    root_logger = logging.getLogger()
    root_logger.setLevel(log_level)

    rich_handler = RichHandler(
        show_time=True,
        show_level=True,
        show_path=False,
        markup=False,
        tracebacks_word_wrap=True,
    )
    root_logger.handlers = [rich_handler]

    # Suppress verbose logging from libraries
    logging.getLogger("sqlalchemy.engine").setLevel(logging.WARNING)
    logging.getLogger("passlib").setLevel(logging.ERROR)
