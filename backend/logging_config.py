"""Logging setup for the Handoff service."""

import logging
import sys

from config import LOG_LEVEL


def setup_logging() -> None:
    """Configure the root logger. Called once at startup in main.py."""
    logging.basicConfig(
        level=getattr(logging, LOG_LEVEL, logging.INFO),
        format="%(asctime)s - %(name)s - [%(levelname)s] - %(message)s",
        stream=sys.stdout,
    )
    # Silence noisy libraries
    logging.getLogger("sqlalchemy.engine").setLevel(logging.WARNING)
    logging.getLogger("alembic").setLevel(logging.WARNING)
    logging.getLogger("multipart").setLevel(logging.WARNING)
