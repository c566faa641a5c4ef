"""
Execution package - the safety gate in front of every trade.

This package provides:
- resolve_execution_context: how the current invocation was triggered
- TradingDecisionEngine: mock / forced paper / as configured
- Credential guard: paper overrides that never mutate the caller's bundle
- Mock responses: per-broker simulated fills
- order_node.OrderNodeExecutor: per-item orchestration (import directly)

CRITICAL: Trade-producing node operations MUST go through the decision
engine before any broker call.
"""

from .context_resolver import (
    resolve_execution_context,
    get_trading_execution_context,
    determine_test_mode,
    determine_test_mode_with_credentials,
)
from .credential_guard import (
    force_paper_trading_credentials,
    is_paper_trading,
    credential_environment,
)
from .decision_engine import TradingDecisionEngine, DECISION_TABLE
from .mock_responses import (
    MockResponseGenerator,
    AlpacaStockMockResponse,
    CryptoMockResponse,
    KalshiPredictionMarketMockResponse,
    SportsBettingMockResponse,
    get_mock_response_generator,
    mock_alpaca_place_order_response,
    mock_kalshi_place_order_response,
)


__all__ = [
    # Context
    "resolve_execution_context",
    "get_trading_execution_context",
    "determine_test_mode",
    "determine_test_mode_with_credentials",
    # Credentials
    "force_paper_trading_credentials",
    "is_paper_trading",
    "credential_environment",
    # Decisions
    "TradingDecisionEngine",
    "DECISION_TABLE",
    # Mock responses
    "MockResponseGenerator",
    "AlpacaStockMockResponse",
    "CryptoMockResponse",
    "KalshiPredictionMarketMockResponse",
    "SportsBettingMockResponse",
    "get_mock_response_generator",
    "mock_alpaca_place_order_response",
    "mock_kalshi_place_order_response",
]
