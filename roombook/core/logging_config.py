from loguru import logger
import os
import sys

from roombook.core.config import get_settings

LOG_DIR = get_settings().LOG_DIR

# Create folder if missing
if not os.path.exists(LOG_DIR):
    os.makedirs(LOG_DIR)

# Remove default handler
logger.remove()


def console_filter(record):
    return record["extra"].get("log_type") == "email" or record["level"].no >= logger.level("WARNING").no


# Console: email activity (simulated codes included) and WARNING+
logger.add(
    sys.stderr,
    level="INFO",
    filter=console_filter,
    format="<green>{time:HH:mm:ss}</green> | <level>{level: <8}</level> | {message}"
)

# General application log
logger.add(
    f"{LOG_DIR}/app.log",
    rotation="1 week",
    retention="4 weeks",
    level="INFO",
    enqueue=True,
    format="{time} | {level} | {message}"
)

# Booking submission / verification logs
logger.add(
    f"{LOG_DIR}/bookings.log",
    rotation="1 week",
    retention="4 weeks",
    level="INFO",
    enqueue=True,
    filter=lambda record: record["extra"].get("log_type") == "booking",
    format="{time} | {level} | {message}"
)

# Outgoing email logs (includes simulated sends)
logger.add(
    f"{LOG_DIR}/email.log",
    rotation="1 week",
    retention="4 weeks",
    level="INFO",
    enqueue=True,
    filter=lambda record: record["extra"].get("log_type") == "email",
    format="{time} | {level} | {message}"
)

# Admin activity logs
logger.add(
    f"{LOG_DIR}/admin.log",
    rotation="1 week",
    retention="4 weeks",
    level="INFO",
    enqueue=True,
    filter=lambda record: record["extra"].get("log_type") == "admin",
    format="{time} | {level} | {message}"
)

# Error logs
logger.add(
    f"{LOG_DIR}/errors.log",
    rotation="1 week",
    retention="8 weeks",
    level="ERROR",
    enqueue=True,
)


def get_logger():
    return logger
