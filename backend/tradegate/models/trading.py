"""
Trading gate models.

These models describe a single work item's trip through the gate:
- ExecutionContext: how the current invocation was triggered
- TradingMode: per-workflow mock/paper setting
- ExecutionDecision: what the gate allows for this item
- Credentials: broker credential bundle with its paper/live flag
- OrderTrackingRecord: payload shipped to the ledger service

All of them are built fresh per work item and never cached.
"""

import enum
from typing import Any, Optional

from pydantic import BaseModel, ConfigDict, Field, model_validator

from tradegate.errors import TradingConfigurationError


class ExecutionContext(str, enum.Enum):
    """
    How the current node invocation was triggered.

    EXECUTE_STEP: The user single-stepped this node in the editor.
    MANUAL_INACTIVE: Manual full run of an inactive workflow.
    ACTIVE: Unattended production run of an active workflow.
    """
    EXECUTE_STEP = "execute-step"
    MANUAL_INACTIVE = "manual-inactive"
    ACTIVE = "active"


class TradingMode(str, enum.Enum):
    """Per-workflow setting chosen by the workflow owner."""
    MOCK = "mock"
    PAPER = "paper"


class CredentialEnvironment(str, enum.Enum):
    """Account environment a credential bundle points at."""
    PAPER = "paper"
    LIVE = "live"


class TradingEnvironment(str, enum.Enum):
    """Environment a work item actually ends up trading in."""
    MOCK = "mock"
    PAPER = "paper"
    LIVE = "live"


class OrderType(str, enum.Enum):
    """Ledger order categories, one endpoint each."""
    STOCK = "stock"
    CRYPTO = "crypto"
    PREDICTION_MARKET = "prediction-market"
    SPORTS_BETTING = "sports-betting"


class TradeOperation(str, enum.Enum):
    """Operations exposed by trading nodes."""
    PLACE_ORDER = "placeOrder"
    CANCEL_ORDER = "cancelOrder"
    MODIFY_ORDER = "modifyOrder"
    GET_ACCOUNT = "getAccount"
    GET_POSITIONS = "getPositions"
    GET_ORDER = "getOrder"

    @property
    def is_trade_producing(self) -> bool:
        return self in (
            TradeOperation.PLACE_ORDER,
            TradeOperation.CANCEL_ORDER,
            TradeOperation.MODIFY_ORDER,
        )


class ExecutionMode(str, enum.Enum):
    """Test vs production classification recorded in the ledger."""
    TEST = "test"
    PRODUCTION = "production"


def parse_trading_mode(
    value: "TradingMode | str | None",
    workflow_id: Optional[str] = None,
) -> TradingMode:
    """
    Parse a raw workflow trading mode.

    Raises:
        TradingConfigurationError: If the mode is missing or unknown
    """
    if isinstance(value, TradingMode):
        return value
    if not value:
        raise TradingConfigurationError(
            "Trading mode is not defined in workflow settings",
            workflow_id=workflow_id,
        )
    try:
        return TradingMode(str(value).strip().lower())
    except ValueError:
        raise TradingConfigurationError(
            f"Unknown trading mode '{value}' in workflow settings. "
            f"Expected one of: {', '.join(m.value for m in TradingMode)}",
            workflow_id=workflow_id,
        )


class ExecutionDecision(BaseModel):
    """
    Outcome of the trading decision engine for one work item.

    Exactly one of should_mock / execute_real_trade is set.
    """
    model_config = ConfigDict(frozen=True)

    context: ExecutionContext
    should_mock: bool
    force_paper_trading: bool
    execute_real_trade: bool

    @model_validator(mode="after")
    def check_exclusive_outcome(self) -> "ExecutionDecision":
        if self.should_mock == self.execute_real_trade:
            raise ValueError(
                "Exactly one of should_mock and execute_real_trade must be true "
                f"(got should_mock={self.should_mock}, "
                f"execute_real_trade={self.execute_real_trade})"
            )
        return self

    def trading_environment(
        self,
        credential_environment: Optional[CredentialEnvironment] = None,
    ) -> TradingEnvironment:
        """Effective environment given the environment of the credentials used."""
        if self.should_mock:
            return TradingEnvironment.MOCK
        if self.force_paper_trading:
            return TradingEnvironment.PAPER
        if credential_environment == CredentialEnvironment.LIVE:
            return TradingEnvironment.LIVE
        return TradingEnvironment.PAPER

    def summary(self) -> str:
        return (
            f"Context: {self.context.value}, Mock: {self.should_mock}, "
            f"Force Paper: {self.force_paper_trading}, "
            f"Execute Real Trade: {self.execute_real_trade}"
        )


class Credentials(BaseModel):
    """
    Broker credential bundle.

    Only the environment flag is meaningful here; the secret material
    is carried as extra fields and never inspected.
    """
    model_config = ConfigDict(frozen=True, extra="allow")

    environment: CredentialEnvironment = CredentialEnvironment.PAPER

    def __repr__(self) -> str:
        secret_keys = sorted((self.model_extra or {}).keys())
        return f"Credentials(environment={self.environment.value!r}, fields={secret_keys!r})"

    __str__ = __repr__


class TradingExecutionContext(BaseModel):
    """Correlation data re-derived for the ledger record."""
    model_config = ConfigDict(frozen=True)

    workflow_id: Optional[str] = None
    execution_id: Optional[str] = None
    user_id: Optional[str] = None
    execution_mode: ExecutionMode = ExecutionMode.PRODUCTION
    is_test_mode: bool = False


class OrderTrackingRecord(BaseModel):
    """
    Audit payload for the ledger service.

    Order fields are passed through as extra keys; the correlation
    fields serialise with camelCase names.
    """
    model_config = ConfigDict(extra="allow", populate_by_name=True)

    environment: CredentialEnvironment
    execution_mode: ExecutionMode = Field(alias="executionMode")
    execution_context: Optional[ExecutionContext] = Field(default=None, alias="executionContext")
    workflow_id: Optional[str] = Field(default=None, alias="workflowId")
    execution_id: Optional[str] = Field(default=None, alias="executionId")
    user_id: Optional[str] = Field(default=None, alias="userId")

    def to_payload(self) -> dict[str, Any]:
        """JSON-ready body, without the userId (auth decides where it goes)."""
        payload = self.model_dump(mode="json", by_alias=True, exclude={"user_id"})
        if payload.get("executionContext") is None:
            payload.pop("executionContext", None)
        return payload
