"""
Execution context resolution.

Classifies how the current node invocation was triggered and re-derives
the correlation data recorded with each order. Both functions are total:
missing host signals fall back to the most conservative answer instead
of raising.
"""

import logging
from typing import Optional

from tradegate.execution.credential_guard import CredentialsLike, is_paper_trading
from tradegate.models.host import HostContext
from tradegate.models.trading import (
    ExecutionContext,
    ExecutionMode,
    TradingExecutionContext,
)


logger = logging.getLogger(__name__)


def resolve_execution_context(host: Optional[HostContext]) -> ExecutionContext:
    """
    Determine the execution context for a trade-capable node.

    Rules, first match wins:
    1. Destination node is this node and the run is manual -> EXECUTE_STEP,
       even when the workflow is active
    2. Manual run of an inactive workflow -> MANUAL_INACTIVE
    3. Active workflow -> ACTIVE
    4. Anything else -> MANUAL_INACTIVE

    Args:
        host: Signals supplied by the host; may be partially populated

    Returns:
        Resolved ExecutionContext
    """
    if host is None:
        return ExecutionContext.MANUAL_INACTIVE

    is_manual = host.is_manual_run
    is_active = host.workflow_active
    is_execute_step = (
        host.node_name is not None
        and host.destination_node is not None
        and host.destination_node == host.node_name
    )

    logger.debug(
        "Resolving execution context",
        extra={
            "node_name": host.node_name,
            "destination_node": host.destination_node,
            "is_execute_step": is_execute_step,
            "run_mode": host.run_mode,
            "workflow_active": is_active,
            "workflow_id": host.workflow_id,
        },
    )

    if is_execute_step and is_manual:
        return ExecutionContext.EXECUTE_STEP

    if is_manual and not is_active:
        return ExecutionContext.MANUAL_INACTIVE

    if is_active:
        return ExecutionContext.ACTIVE

    # Never allow an unforced live trade when the signals are unclear
    return ExecutionContext.MANUAL_INACTIVE


def determine_test_mode(execution_mode: ExecutionMode, workflow_active: bool) -> bool:
    """Test mode when the host says so or the workflow is inactive."""
    if execution_mode == ExecutionMode.TEST:
        return True
    return not workflow_active


def determine_test_mode_with_credentials(
    credentials: Optional[CredentialsLike],
    execution_mode: ExecutionMode,
    workflow_active: bool,
) -> bool:
    """Like determine_test_mode, but paper credentials always count as test."""
    if is_paper_trading(credentials):
        return True
    return determine_test_mode(execution_mode, workflow_active)


def get_trading_execution_context(host: Optional[HostContext]) -> TradingExecutionContext:
    """
    Re-derive workflow/execution correlation data for order tracking.

    The user id falls back to the workflow owner: active workflows often
    run without a user in the execution context.
    """
    if host is None:
        return TradingExecutionContext(
            execution_mode=ExecutionMode.PRODUCTION,
            is_test_mode=True,
        )

    execution_mode = (
        ExecutionMode.TEST if host.execution_mode == ExecutionMode.TEST.value
        else ExecutionMode.PRODUCTION
    )

    user_id = host.user_id
    if not user_id and host.workflow is not None:
        user_id = host.workflow.owner_id

    return TradingExecutionContext(
        workflow_id=host.workflow_id,
        execution_id=host.execution_id,
        user_id=user_id or None,
        execution_mode=execution_mode,
        is_test_mode=determine_test_mode(execution_mode, host.workflow_active),
    )
