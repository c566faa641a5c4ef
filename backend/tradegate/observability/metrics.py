"""
Prometheus metrics for the trade gate.

Provides:
- Trade decision counts by context and outcome
- Ledger tracking outcomes by order type
- Ledger request latency
"""

from prometheus_client import Counter, Histogram


trade_decisions_total = Counter(
    'tradegate_trade_decisions_total',
    'Trading decisions made for trade-producing operations',
    ['context', 'outcome']
)

order_tracking_total = Counter(
    'tradegate_order_tracking_total',
    'Ledger tracking attempts',
    ['order_type', 'status']
)

ledger_request_duration_seconds = Histogram(
    'tradegate_ledger_request_duration_seconds',
    'Ledger POST duration in seconds',
    ['order_type'],
    buckets=(0.01, 0.025, 0.05, 0.1, 0.25, 0.5, 1.0, 2.5, 5.0, 10.0)
)


def record_decision(context: str, outcome: str) -> None:
    """Record a trading decision (outcome: mock, paper, live)."""
    trade_decisions_total.labels(context=context, outcome=outcome).inc()


def record_tracking(order_type: str, status: str) -> None:
    """Record a tracking outcome (status: sent, skipped_mock, failed)."""
    order_tracking_total.labels(order_type=order_type, status=status).inc()
