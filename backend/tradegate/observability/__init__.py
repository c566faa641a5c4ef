"""Observability module for the trade gate - logging and metrics."""

from tradegate.observability.logging_config import setup_logging, get_logger
from tradegate.observability.metrics import (
    trade_decisions_total,
    order_tracking_total,
    ledger_request_duration_seconds,
    record_decision,
    record_tracking,
)

__all__ = [
    "setup_logging",
    "get_logger",
    "trade_decisions_total",
    "order_tracking_total",
    "ledger_request_duration_seconds",
    "record_decision",
    "record_tracking",
]
