"""
Order node executor.

Runs the safety gate for each work item handed to a trading node:

1. Resolve the execution context
2. Decide (mock / forced paper / as configured)
3. Force paper credentials when required
4. Mock the broker response or call the broker
5. Track the outcome in the ledger

Items are processed strictly in order, one at a time. Nothing computed
for one item (context, decision, credentials) is reused for the next.
"""

import inspect
import logging
from typing import Any, Awaitable, Callable, Mapping, Optional, Sequence, Union

from tradegate.errors import TradingConfigurationError
from tradegate.execution.context_resolver import resolve_execution_context
from tradegate.execution.credential_guard import (
    CredentialsLike,
    credential_environment,
    force_paper_trading_credentials,
    is_paper_trading,
)
from tradegate.execution.decision_engine import TradingDecisionEngine
from tradegate.execution.mock_responses import (
    MockResponseGenerator,
    get_mock_response_generator,
)
from tradegate.models.host import HostContext, NodeDescriptor
from tradegate.models.trading import (
    ExecutionContext,
    ExecutionDecision,
    TradeOperation,
)
from tradegate.observability.metrics import record_decision
from tradegate.services.order_tracker import OrderTracker


BrokerCall = Callable[[CredentialsLike, Mapping[str, Any]], Awaitable[dict[str, Any]]]
CredentialsLoader = Callable[[int], Union[CredentialsLike, Awaitable[CredentialsLike]]]
TrackingDataBuilder = Callable[[Mapping[str, Any], Mapping[str, Any]], dict[str, Any]]


def default_tracking_data(item: Mapping[str, Any], response: Mapping[str, Any]) -> dict[str, Any]:
    """Ledger order fields built from the input item and the broker response."""
    data = dict(item)
    data["brokerOrderId"] = response.get("order_id") or response.get("id")
    data["status"] = response.get("status") or "pending"
    if response.get("filled_at"):
        data["filledAt"] = response["filled_at"]
    data["metadata"] = {"brokerResponse": dict(response)}
    return data


class OrderNodeExecutor:
    """
    Per-item orchestration for trading nodes.

    ORDER nodes must be able to fabricate a mock response, so they need
    either a mock generator or an order type to look one up.

    Usage:
        executor = OrderNodeExecutor(
            NodeDescriptor(name="Alpaca", category=NodeCategory.ORDER,
                           order_type=OrderType.STOCK),
        )
        results = await executor.execute_items(
            host, items, TradeOperation.PLACE_ORDER,
            load_credentials=lambda i: credentials,
            execute_trade=alpaca.place_order,
        )
    """

    def __init__(
        self,
        node: NodeDescriptor,
        mock_generator: Optional[MockResponseGenerator] = None,
        tracker: Optional[OrderTracker] = None,
        decision_engine: Optional[TradingDecisionEngine] = None,
        logger: Optional[logging.Logger] = None,
    ):
        if node.has_trade_capability and mock_generator is None:
            if node.order_type is None:
                raise TradingConfigurationError(
                    f"ORDER node '{node.name}' needs a mock generator or an order type"
                )
            mock_generator = get_mock_response_generator(node.order_type)

        self.node = node
        self.mock_generator = mock_generator
        self.logger = logger or logging.getLogger(__name__)
        self.tracker = tracker or OrderTracker(logger=self.logger)
        self.decision_engine = decision_engine or TradingDecisionEngine()

    def _resolve_context(self, host: HostContext) -> Optional[ExecutionContext]:
        if not self.node.has_trade_capability:
            return None
        try:
            return resolve_execution_context(host)
        except Exception as e:
            self.logger.warning(f"Execution context detection failed, treating as execute-step: {e}")
            return ExecutionContext.EXECUTE_STEP

    def decide(self, host: HostContext, operation: TradeOperation) -> ExecutionDecision:
        """Decision for one work item."""
        context = self._resolve_context(host)
        return self.decision_engine.decide_for_host(host, self.node, operation, context=context)

    async def execute_item(
        self,
        host: HostContext,
        index: int,
        item: Mapping[str, Any],
        operation: TradeOperation,
        load_credentials: CredentialsLoader,
        execute_trade: BrokerCall,
        tracking_data: TrackingDataBuilder = default_tracking_data,
        api_base_url: Optional[str] = None,
    ) -> dict[str, Any]:
        """Run one work item through the gate. Broker errors propagate."""
        operation = TradeOperation(operation)
        decision = self.decide(host, operation)
        is_gated = self.node.has_trade_capability and operation.is_trade_producing

        if self.node.has_trade_capability:
            self.logger.warning(
                f"[ORDER Node] {decision.summary()}, Operation: {operation.value}",
                extra={"workflow_id": host.workflow_id, "execution_context": decision.context.value},
            )

        credentials = load_credentials(index)
        if inspect.isawaitable(credentials):
            credentials = await credentials

        if decision.force_paper_trading and not is_paper_trading(credentials):
            credentials = force_paper_trading_credentials(credentials)
            self.logger.info(
                f"ORDER node: Forcing paper trading credentials (context: {decision.context.value})"
            )

        if decision.should_mock:
            self.logger.warning(
                "ORDER node: Mocking trade execution response. NO REAL TRADE WILL BE EXECUTED."
            )
            response = self.mock_generator.generate(item, operation)
        else:
            response = await execute_trade(credentials, item)

        if is_gated:
            environment = decision.trading_environment(credential_environment(credentials))
            record_decision(decision.context.value, environment.value)

            if self.node.order_type is not None:
                await self.tracker.track_order(
                    host,
                    tracking_data(item, response),
                    self.node.order_type,
                    credentials=credentials,
                    execution_context=decision.context,
                    should_mock=decision.should_mock,
                    api_base_url=api_base_url,
                )

        return response

    async def execute_items(
        self,
        host: HostContext,
        items: Sequence[Mapping[str, Any]],
        operation: TradeOperation,
        load_credentials: CredentialsLoader,
        execute_trade: BrokerCall,
        tracking_data: TrackingDataBuilder = default_tracking_data,
        continue_on_fail: bool = False,
        api_base_url: Optional[str] = None,
    ) -> list[dict[str, Any]]:
        """
        Run every input item through the gate, in order.

        Args:
            host: Host signals for this invocation
            items: Input items (one order each)
            operation: Node operation
            load_credentials: Returns the credentials for item i
            execute_trade: Real broker call, given credentials and item
            tracking_data: Builds ledger order fields from item and response
            continue_on_fail: Emit {"error": ...} for a failed item and go on
            api_base_url: Override for the ledger base URL

        Returns:
            One output per input item
        """
        results: list[dict[str, Any]] = []

        for index, item in enumerate(items):
            try:
                results.append(await self.execute_item(
                    host,
                    index,
                    item,
                    operation,
                    load_credentials,
                    execute_trade,
                    tracking_data=tracking_data,
                    api_base_url=api_base_url,
                ))
            except Exception as e:
                if not continue_on_fail:
                    raise
                self.logger.error(
                    f"ORDER node: item {index} failed: {e}",
                    extra={"workflow_id": host.workflow_id},
                )
                results.append({"error": str(e)})

        return results
