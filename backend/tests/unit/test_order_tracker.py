"""
Tests for the order tracker.

Tests cover:
- Mock-mode detection (caller flag, execute-step override, workflow mode)
- Ledger record assembly (environment, test mode, user fallback)
- Tracking never fails the trade (errors become {})
- Agreement with the decision engine on when to skip the ledger
"""

import asyncio

import httpx
import pytest
from unittest.mock import AsyncMock, MagicMock

from tradegate.execution.decision_engine import TradingDecisionEngine
from tradegate.models.trading import (
    CredentialEnvironment,
    ExecutionContext,
    ExecutionMode,
    OrderType,
    TradingMode,
)
from tradegate.services.order_tracker import OrderTracker
from tradegate.services.trading_api_client import TradingAPIClient


ORDER_DATA = {"symbol": "AAPL", "brokerOrderId": "broker-1", "status": "filled"}


@pytest.fixture
def tracker(api_client, mock_logger):
    return OrderTracker(api_client=api_client, logger=mock_logger)


# ============= Mock Mode Detection Tests =============

class TestIsMockMode:
    """Tests for OrderTracker.is_mock_mode."""

    def test_explicit_true(self, host_factory):
        host = host_factory(trading_mode="paper", active=True)
        assert OrderTracker.is_mock_mode(host, ExecutionContext.ACTIVE, True) is True

    def test_execute_step_overrides_explicit_false(self, host_factory):
        host = host_factory(trading_mode="paper")
        assert OrderTracker.is_mock_mode(host, ExecutionContext.EXECUTE_STEP, False) is True

    def test_explicit_false_outside_execute_step(self, host_factory):
        host = host_factory(trading_mode="mock")
        assert OrderTracker.is_mock_mode(host, ExecutionContext.ACTIVE, False) is False

    @pytest.mark.parametrize("mode,expected", [
        ("paper", False),
        ("PAPER", False),
        ("mock", True),
        (None, True),
        ("unknown", True),
    ])
    def test_derived_from_workflow_mode(self, host_factory, mode, expected):
        host = host_factory(trading_mode=mode)
        assert OrderTracker.is_mock_mode(host, ExecutionContext.MANUAL_INACTIVE, None) is expected

    def test_no_host(self):
        assert OrderTracker.is_mock_mode(None, ExecutionContext.MANUAL_INACTIVE, None) is True

    @pytest.mark.parametrize("context", list(ExecutionContext))
    @pytest.mark.parametrize("mode", list(TradingMode))
    def test_agrees_with_decision_engine(self, host_factory, context, mode):
        """Tracker skips the ledger exactly when the engine mocks."""
        decision = TradingDecisionEngine().decide(True, True, context, mode)
        host = host_factory(trading_mode=mode.value)

        assert OrderTracker.is_mock_mode(host, context, decision.should_mock) is decision.should_mock
        assert OrderTracker.is_mock_mode(host, context, None) is decision.should_mock


# ============= Record Building Tests =============

class TestBuildRecord:
    """Tests for OrderTracker.build_record."""

    def test_paper_credentials(self, tracker, host_factory, paper_credentials):
        record = tracker.build_record(
            host_factory(active=True, execution_mode="trigger"),
            ORDER_DATA,
            paper_credentials,
            ExecutionContext.ACTIVE,
        )

        assert record.environment == CredentialEnvironment.PAPER
        assert record.execution_mode == ExecutionMode.TEST
        assert record.execution_context == ExecutionContext.ACTIVE
        assert record.workflow_id == "workflow-123"
        assert record.model_extra["brokerOrderId"] == "broker-1"

    def test_live_credentials_in_production(self, tracker, host_factory, live_credentials):
        record = tracker.build_record(
            host_factory(active=True, execution_mode="trigger"),
            ORDER_DATA,
            live_credentials,
            ExecutionContext.ACTIVE,
        )

        assert record.environment == CredentialEnvironment.LIVE
        assert record.execution_mode == ExecutionMode.PRODUCTION

    def test_missing_credentials_recorded_as_live(self, tracker, host_factory):
        record = tracker.build_record(
            host_factory(), ORDER_DATA, None, ExecutionContext.MANUAL_INACTIVE
        )
        assert record.environment == CredentialEnvironment.LIVE
        assert record.execution_mode == ExecutionMode.TEST

    def test_user_falls_back_to_owner(self, tracker, host_factory, paper_credentials):
        record = tracker.build_record(
            host_factory(user_id=None, owner_id="owner-7"),
            ORDER_DATA,
            paper_credentials,
            ExecutionContext.MANUAL_INACTIVE,
        )
        assert record.user_id == "owner-7"

    def test_correlation_fields_override_order_fields(self, tracker, host_factory, paper_credentials):
        record = tracker.build_record(
            host_factory(),
            {**ORDER_DATA, "workflowId": "spoofed", "environment": "live"},
            paper_credentials,
            ExecutionContext.MANUAL_INACTIVE,
        )
        assert record.workflow_id == "workflow-123"
        assert record.environment == CredentialEnvironment.PAPER


# ============= Track Order Tests =============

class TestTrackOrder:
    """Tests for OrderTracker.track_order."""

    @pytest.mark.asyncio
    async def test_paper_order_is_sent(self, tracker, ledger, host_factory, paper_credentials):
        result = await tracker.track_order(
            host_factory(trading_mode="paper"),
            ORDER_DATA,
            OrderType.STOCK,
            credentials=paper_credentials,
            execution_context=ExecutionContext.MANUAL_INACTIVE,
            should_mock=False,
        )

        assert result == {"id": "ledger-1", "success": True}
        assert len(ledger.requests) == 1
        body = ledger.last_body
        assert body["environment"] == "paper"
        assert body["executionMode"] == "test"
        assert body["executionContext"] == "manual-inactive"
        assert body["symbol"] == "AAPL"

    @pytest.mark.asyncio
    async def test_mock_trade_is_not_sent(self, tracker, ledger, host_factory, mock_logger):
        result = await tracker.track_order(
            host_factory(trading_mode="mock"),
            ORDER_DATA,
            OrderType.STOCK,
            execution_context=ExecutionContext.MANUAL_INACTIVE,
            should_mock=True,
        )

        assert result == {}
        assert ledger.requests == []
        mock_logger.info.assert_called_once()
        assert mock_logger.info.call_args[0][0] == "Skipping database write for mock mode trade"

    @pytest.mark.asyncio
    async def test_mock_workflow_without_flag_is_not_sent(self, tracker, ledger, host_factory, paper_credentials, mock_logger):
        """No caller flag: the workflow's own mock mode keeps the order out of the ledger."""
        result = await tracker.track_order(
            host_factory(trading_mode="mock"),
            ORDER_DATA,
            OrderType.STOCK,
            credentials=paper_credentials,
        )

        assert result == {}
        assert ledger.requests == []
        mock_logger.info.assert_called_once()
        assert mock_logger.info.call_args[0][0] == "Skipping database write for mock mode trade"
        mock_logger.warning.assert_not_called()

    @pytest.mark.asyncio
    async def test_execute_step_is_never_sent(self, tracker, ledger, host_factory, paper_credentials):
        """Even a caller claiming should_mock=False cannot record an execute-step run."""
        result = await tracker.track_order(
            host_factory(trading_mode="paper", destination_node="Place Order"),
            ORDER_DATA,
            OrderType.STOCK,
            credentials=paper_credentials,
            should_mock=False,
        )

        assert result == {}
        assert ledger.requests == []

    @pytest.mark.asyncio
    async def test_context_resolved_when_not_given(self, tracker, ledger, host_factory, live_credentials):
        await tracker.track_order(
            host_factory(trading_mode="paper", active=True, execution_mode="trigger"),
            ORDER_DATA,
            OrderType.STOCK,
            credentials=live_credentials,
        )

        body = ledger.last_body
        assert body["executionContext"] == "active"
        assert body["environment"] == "live"
        assert body["executionMode"] == "production"

    @pytest.mark.asyncio
    async def test_ledger_failure_is_swallowed(self, host_factory, paper_credentials, mock_logger):
        api_client = MagicMock(spec=TradingAPIClient)
        api_client.send_order_to_api = AsyncMock(side_effect=RuntimeError("ledger down"))
        tracker = OrderTracker(api_client=api_client, logger=mock_logger)

        result = await tracker.track_order(
            host_factory(trading_mode="paper"),
            ORDER_DATA,
            OrderType.CRYPTO,
            credentials=paper_credentials,
            should_mock=False,
        )

        assert result == {}
        mock_logger.warning.assert_called_once()
        assert mock_logger.warning.call_args[0][0] == "Failed to track order in API: ledger down"

    @pytest.mark.asyncio
    async def test_missing_auth_is_swallowed(self, keyless_settings, ledger, host_factory, mock_logger):
        api_client = TradingAPIClient(settings=keyless_settings, transport=ledger.transport)
        tracker = OrderTracker(api_client=api_client, logger=mock_logger)

        result = await tracker.track_order(
            host_factory(trading_mode="paper", user_id=None),
            ORDER_DATA,
            OrderType.STOCK,
            should_mock=False,
        )

        assert result == {}
        assert ledger.requests == []
        assert "Cannot track order" in mock_logger.warning.call_args[0][0]

    @pytest.mark.asyncio
    async def test_http_error_is_swallowed(self, api_key_settings, host_factory, mock_logger):
        api_client = TradingAPIClient(
            settings=api_key_settings,
            transport=httpx.MockTransport(lambda request: httpx.Response(503)),
        )
        tracker = OrderTracker(api_client=api_client, logger=mock_logger)

        result = await tracker.track_order(
            host_factory(trading_mode="paper"),
            ORDER_DATA,
            OrderType.PREDICTION_MARKET,
            should_mock=False,
        )

        assert result == {}
        mock_logger.warning.assert_called_once()

    @pytest.mark.asyncio
    async def test_order_type_selects_endpoint(self, tracker, ledger, host_factory):
        await tracker.track_order(
            host_factory(trading_mode="paper"),
            ORDER_DATA,
            "sports-betting",
            should_mock=False,
        )
        assert ledger.requests[0].url.path == "/api/trading-orders/sports-betting"

    @pytest.mark.asyncio
    async def test_cancellation_propagates(self, host_factory, mock_logger):
        """An outer deadline cancelling the ledger call is not absorbed."""
        api_client = MagicMock(spec=TradingAPIClient)
        api_client.send_order_to_api = AsyncMock(side_effect=asyncio.CancelledError())
        tracker = OrderTracker(api_client=api_client, logger=mock_logger)

        with pytest.raises(asyncio.CancelledError):
            await tracker.track_order(
                host_factory(trading_mode="paper"),
                ORDER_DATA,
                OrderType.STOCK,
                should_mock=False,
            )

        mock_logger.warning.assert_not_called()
