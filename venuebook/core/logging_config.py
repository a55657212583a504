from __future__ import annotations

import os
import sys

from loguru import logger

from venuebook.core.config import get_settings

_configured = False


def setup_logging() -> None:
    global _configured
    if _configured:
        return

    settings = get_settings()

    # Remove default handler
    logger.remove()

    logger.add(sys.stderr, level=settings.log_level, format="{time} | {level} | {message}")

    if settings.log_to_file:
        if not os.path.exists(settings.log_dir):
            os.makedirs(settings.log_dir)

        # General application log
        logger.add(
            f"{settings.log_dir}/app.log",
            rotation="1 week",
            retention="4 weeks",
            level=settings.log_level,
            enqueue=True,
            format="{time} | {level} | {message}",
        )

        # Booking lifecycle: submissions, conflicts, status changes
        logger.add(
            f"{settings.log_dir}/bookings.log",
            rotation="1 week",
            retention="4 weeks",
            level="INFO",
            enqueue=True,
            filter=lambda record: record["extra"].get("log_type") == "booking",
            format="{time} | {level} | {message}",
        )

        # Admin activity: confirmations, price adjustments, date blocks
        logger.add(
            f"{settings.log_dir}/admin.log",
            rotation="1 week",
            retention="4 weeks",
            level="INFO",
            enqueue=True,
            filter=lambda record: record["extra"].get("log_type") == "admin",
            format="{time} | {level} | {message}",
        )

        logger.add(
            f"{settings.log_dir}/errors.log",
            rotation="1 week",
            retention="8 weeks",
            level="ERROR",
            enqueue=True,
        )

    _configured = True


def get_logger(log_type: str | None = None):
    if log_type:
        return logger.bind(log_type=log_type)
    return logger
