"""
Order Tracker.

Persists an audit trail for every trade attempt after it completes.
Tracking is advisory: it never fails the trade operation.

Safety:
- Re-derives the execution classification on its own instead of trusting
  the caller's mock flag blindly
- An execute-step invocation is never written to the ledger, whatever
  the caller says
- Ledger failures are logged as warnings and turned into an empty result
"""

import logging
from typing import Any, Mapping, Optional

from tradegate.execution.context_resolver import (
    determine_test_mode_with_credentials,
    get_trading_execution_context,
    resolve_execution_context,
)
from tradegate.execution.credential_guard import CredentialsLike, credential_environment
from tradegate.models.host import HostContext
from tradegate.models.trading import (
    ExecutionContext,
    ExecutionMode,
    OrderTrackingRecord,
    OrderType,
    TradingMode,
)
from tradegate.observability.metrics import record_tracking
from tradegate.services.trading_api_client import TradingAPIClient


class OrderTracker:
    """
    Ships order outcomes to the ledger service.

    Usage:
        tracker = OrderTracker()
        await tracker.track_order(
            host,
            order_data={"brokerOrderId": "abc", "symbol": "AAPL"},
            order_type=OrderType.STOCK,
            credentials=credentials,
            execution_context=decision.context,
            should_mock=decision.should_mock,
        )
    """

    def __init__(
        self,
        api_client: Optional[TradingAPIClient] = None,
        logger: Optional[logging.Logger] = None,
    ):
        self.logger = logger or logging.getLogger(__name__)
        self.api_client = api_client or TradingAPIClient(logger=self.logger)

    @staticmethod
    def is_mock_mode(
        host: Optional[HostContext],
        execution_context: Optional[ExecutionContext],
        should_mock: Optional[bool],
    ) -> bool:
        """
        Decide whether the ledger write must be skipped.

        An explicit True always mocks. An explicit False cannot switch off
        the execute-step override. Without a flag, execute-step or a
        workflow in mock mode (or with no usable mode) mocks.
        """
        if should_mock is True:
            return True

        if execution_context == ExecutionContext.EXECUTE_STEP:
            return True

        if should_mock is False:
            return False

        raw_mode = host.raw_trading_mode if host is not None else None
        return (raw_mode or "").strip().lower() != TradingMode.PAPER.value

    def build_record(
        self,
        host: Optional[HostContext],
        order_data: Mapping[str, Any],
        credentials: Optional[CredentialsLike],
        execution_context: Optional[ExecutionContext],
    ) -> OrderTrackingRecord:
        """Assemble the ledger record from order fields and re-derived context."""
        trading_context = get_trading_execution_context(host)
        is_test_mode = determine_test_mode_with_credentials(
            credentials,
            trading_context.execution_mode,
            host.workflow_active if host is not None else False,
        )

        fields = dict(order_data)
        fields.update({
            "environment": credential_environment(credentials),
            "executionMode": ExecutionMode.TEST if is_test_mode else ExecutionMode.PRODUCTION,
            "executionContext": execution_context,
            "workflowId": trading_context.workflow_id,
            "executionId": trading_context.execution_id,
            "userId": trading_context.user_id,
        })
        return OrderTrackingRecord(**fields)

    async def track_order(
        self,
        host: Optional[HostContext],
        order_data: Mapping[str, Any],
        order_type: OrderType,
        credentials: Optional[CredentialsLike] = None,
        execution_context: Optional[ExecutionContext] = None,
        should_mock: Optional[bool] = None,
        api_base_url: Optional[str] = None,
    ) -> dict[str, Any]:
        """
        Record an order in the ledger.

        Args:
            host: Host signals for the current invocation
            order_data: Broker-agnostic order fields
            order_type: Ledger order category
            credentials: Credentials actually used for the trade
            execution_context: Context already resolved by the caller
            should_mock: Caller's mock flag, if it has one
            api_base_url: Override for the ledger base URL

        Returns:
            Ledger response, or {} when skipped or failed
        """
        order_type = OrderType(order_type)
        if execution_context is None:
            execution_context = resolve_execution_context(host)

        log_extra = {
            "workflow_id": host.workflow_id if host is not None else None,
            "execution_context": execution_context.value,
            "order_type": order_type.value,
        }

        if self.is_mock_mode(host, execution_context, should_mock):
            self.logger.info("Skipping database write for mock mode trade", extra=log_extra)
            record_tracking(order_type.value, "skipped_mock")
            return {}

        try:
            record = self.build_record(host, order_data, credentials, execution_context)
            response = await self.api_client.send_order_to_api(
                record,
                order_type,
                base_url=api_base_url,
            )
        except Exception as e:
            self.logger.warning(f"Failed to track order in API: {e}", extra=log_extra)
            record_tracking(order_type.value, "failed")
            return {}

        record_tracking(order_type.value, "sent")
        return response
