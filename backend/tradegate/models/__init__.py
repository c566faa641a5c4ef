from tradegate.models.trading import (
    ExecutionContext,
    TradingMode,
    CredentialEnvironment,
    TradingEnvironment,
    OrderType,
    TradeOperation,
    ExecutionMode,
    ExecutionDecision,
    Credentials,
    TradingExecutionContext,
    OrderTrackingRecord,
    parse_trading_mode,
)
from tradegate.models.host import (
    HostContext,
    WorkflowInfo,
    WorkflowSettings,
    NodeCategory,
    NodeDescriptor,
    RunMode,
)
