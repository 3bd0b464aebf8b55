from loguru import logger
import os
import sys

LOG_DIR = os.getenv("LOG_DIR", "logs")

# Create folder if missing
if not os.path.exists(LOG_DIR):
    os.makedirs(LOG_DIR)

# Remove default handler
logger.remove()

# Console
logger.add(
    sys.stderr,
    level=os.getenv("LOG_LEVEL", "INFO"),
    format="{time:YYYY-MM-DD HH:mm:ss} | {level} | {message}"
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

# Booking logs
logger.add(
    f"{LOG_DIR}/bookings.log",
    rotation="1 week",
    retention="4 weeks",
    level="INFO",
    enqueue=True,
    filter=lambda record: record["extra"].get("log_type") == "booking",
    format="{time} | {level} | {message}"
)

# Payment logs
logger.add(
    f"{LOG_DIR}/payments.log",
    rotation="1 week",
    retention="4 weeks",
    level="INFO",
    enqueue=True,
    filter=lambda record: record["extra"].get("log_type") == "payment",
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
