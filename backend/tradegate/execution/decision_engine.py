"""
Trading decision engine.

Turns the execution context, the workflow trading mode and the kind of
operation into a single ExecutionDecision. The engine is pure: no I/O,
no state, and the only error it raises is a configuration error when a
trade-capable workflow has no usable trading mode.
"""

from typing import Optional

from tradegate.execution.context_resolver import resolve_execution_context
from tradegate.models.host import HostContext, NodeDescriptor
from tradegate.models.trading import (
    ExecutionContext,
    ExecutionDecision,
    TradeOperation,
    TradingMode,
    parse_trading_mode,
)


# (should_mock, force_paper_trading, execute_real_trade)
_MOCK = (True, True, False)
_FORCED_PAPER = (False, True, True)
_AS_CONFIGURED = (False, False, True)

# Active workflows in paper mode trade with the credentials exactly as
# configured; the owner opted in by activating the workflow.
DECISION_TABLE: dict[tuple[ExecutionContext, TradingMode], tuple[bool, bool, bool]] = {
    (ExecutionContext.EXECUTE_STEP, TradingMode.MOCK): _MOCK,
    (ExecutionContext.EXECUTE_STEP, TradingMode.PAPER): _MOCK,
    (ExecutionContext.MANUAL_INACTIVE, TradingMode.MOCK): _MOCK,
    (ExecutionContext.MANUAL_INACTIVE, TradingMode.PAPER): _FORCED_PAPER,
    (ExecutionContext.ACTIVE, TradingMode.MOCK): _MOCK,
    (ExecutionContext.ACTIVE, TradingMode.PAPER): _AS_CONFIGURED,
}


class TradingDecisionEngine:
    """
    Decides whether a work item is mocked, forced to paper, or executed.

    Usage:
        engine = TradingDecisionEngine()
        decision = engine.decide(
            has_trade_capability=True,
            operation_is_trade_producing=True,
            context=ExecutionContext.MANUAL_INACTIVE,
            trading_mode=TradingMode.PAPER,
        )
    """

    def decide(
        self,
        has_trade_capability: bool,
        operation_is_trade_producing: bool,
        context: Optional[ExecutionContext],
        trading_mode: "TradingMode | str | None",
        workflow_id: Optional[str] = None,
    ) -> ExecutionDecision:
        """
        Build the execution decision for one work item.

        Args:
            has_trade_capability: Node category can produce orders
            operation_is_trade_producing: Operation is place/cancel/modify
            context: Resolved execution context
            trading_mode: Workflow trading mode (enum or raw setting)
            workflow_id: Only used to annotate configuration errors

        Returns:
            ExecutionDecision

        Raises:
            TradingConfigurationError: Trading mode missing or invalid on a
                trade-producing call
        """
        if not has_trade_capability or not operation_is_trade_producing:
            # Reads (accounts, positions) are never gated
            return ExecutionDecision(
                context=context or ExecutionContext.MANUAL_INACTIVE,
                should_mock=False,
                force_paper_trading=False,
                execute_real_trade=True,
            )

        mode = parse_trading_mode(trading_mode, workflow_id=workflow_id)
        resolved = context or ExecutionContext.MANUAL_INACTIVE
        should_mock, force_paper, execute_real = DECISION_TABLE[(resolved, mode)]

        return ExecutionDecision(
            context=resolved,
            should_mock=should_mock,
            force_paper_trading=force_paper,
            execute_real_trade=execute_real,
        )

    def decide_for_host(
        self,
        host: HostContext,
        node: NodeDescriptor,
        operation: TradeOperation,
        context: Optional[ExecutionContext] = None,
    ) -> ExecutionDecision:
        """Resolve the context from the host (unless given) and decide."""
        if context is None and node.has_trade_capability:
            context = resolve_execution_context(host)

        return self.decide(
            has_trade_capability=node.has_trade_capability,
            operation_is_trade_producing=operation.is_trade_producing,
            context=context,
            trading_mode=host.raw_trading_mode,
            workflow_id=host.workflow_id,
        )
