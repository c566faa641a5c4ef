"""
Structured logging configuration for the trade gate.

Provides:
- JSON formatted logs for production
- Colored text logs for development
- Correlation fields (workflow, execution, order type) on every record

Level, format, environment and service name come from Settings
(LOG_LEVEL, LOG_FORMAT, APP_ENV, SERVICE_NAME).
"""

import logging
import sys
from datetime import datetime, timezone
from typing import Optional

from pythonjsonlogger import jsonlogger

from tradegate.config import Settings, get_settings


CORRELATION_FIELDS = ("workflow_id", "execution_id", "execution_context", "order_type")

TEXT_FORMAT = '%(asctime)s - %(levelname)s - %(name)s - %(message)s'
DATE_FORMAT = '%Y-%m-%d %H:%M:%S'


class CustomJsonFormatter(jsonlogger.JsonFormatter):
    """JSON formatter stamping service, environment and correlation fields."""

    def __init__(self, *args, service: str = "tradegate", environment: str = "development", **kwargs):
        super().__init__(*args, **kwargs)
        self.service = service
        self.environment = environment

    def add_fields(self, log_record: dict, record: logging.LogRecord, message_dict: dict) -> None:
        super().add_fields(log_record, record, message_dict)

        log_record['timestamp'] = datetime.now(timezone.utc).isoformat()
        log_record['environment'] = self.environment
        log_record['service'] = self.service
        log_record['level'] = record.levelname

        # Source location
        log_record['logger'] = record.name
        log_record['module'] = record.module
        log_record['function'] = record.funcName
        log_record['line'] = record.lineno

        for field in CORRELATION_FIELDS:
            if hasattr(record, field):
                log_record[field] = getattr(record, field)


class ColoredFormatter(logging.Formatter):
    """Colored formatter for development console output."""

    COLORS = {
        'DEBUG': '\033[36m',     # Cyan
        'INFO': '\033[32m',      # Green
        'WARNING': '\033[33m',   # Yellow
        'ERROR': '\033[31m',     # Red
        'CRITICAL': '\033[35m',  # Magenta
    }
    RESET = '\033[0m'

    def format(self, record: logging.LogRecord) -> str:
        color = self.COLORS.get(record.levelname, self.RESET)
        # Color a copy; other handlers still see the plain level name
        record = logging.makeLogRecord(record.__dict__)
        record.levelname = f"{color}{record.levelname}{self.RESET}"
        return super().format(record)


def build_formatter(settings: Settings, log_format: str) -> logging.Formatter:
    """JSON for log_format=json, colored text in development, plain text otherwise."""
    if log_format == "json":
        return CustomJsonFormatter(
            '%(timestamp)s %(level)s %(name)s %(message)s',
            service=settings.service_name,
            environment=settings.app_env,
        )
    if settings.is_development:
        return ColoredFormatter(TEXT_FORMAT, datefmt=DATE_FORMAT)
    return logging.Formatter(TEXT_FORMAT, datefmt=DATE_FORMAT)


def setup_logging(
    log_level: Optional[str] = None,
    log_format: Optional[str] = None,
    settings: Optional[Settings] = None,
) -> None:
    """Configure logging for processes embedding the gate.

    Args:
        log_level: Overrides settings.log_level (DEBUG, INFO, WARNING, ...)
        log_format: Overrides settings.log_format ('json' or 'text')
        settings: Settings to read; loaded from the environment if omitted
    """
    settings = settings or get_settings()
    log_level = log_level or settings.log_level
    log_format = (log_format or settings.log_format).lower()
    level = getattr(logging, log_level.upper(), logging.INFO)

    logger = logging.getLogger()
    logger.setLevel(level)
    logger.handlers = []

    console_handler = logging.StreamHandler(sys.stdout)
    console_handler.setLevel(level)
    console_handler.setFormatter(build_formatter(settings, log_format))
    logger.addHandler(console_handler)

    # Silence noisy libraries
    for name in ("httpx", "httpcore", "asyncio"):
        logging.getLogger(name).setLevel(logging.WARNING)

    logger.info("Logging configured", extra={
        "log_level": log_level,
        "log_format": log_format,
        "environment": settings.app_env,
        "service": settings.service_name,
    })


def get_logger(name: str) -> logging.Logger:
    """Get a logger instance with the given name."""
    return logging.getLogger(name)
