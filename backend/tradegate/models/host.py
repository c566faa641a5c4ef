"""
Host environment context.

The workflow engine hands these signals to the gate explicitly for
every invocation. Every field is optional: a partially populated host
must never make context resolution fail.
"""

import enum
from typing import Optional

from pydantic import BaseModel, ConfigDict
from pydantic.alias_generators import to_camel

from tradegate.models.trading import OrderType


class NodeCategory(str, enum.Enum):
    """
    Node capability category.

    ORDER: Node can place, cancel or modify orders.
    DATA: Read-only node (accounts, positions, quotes).
    """
    ORDER = "order"
    DATA = "data"


class RunMode(str, enum.Enum):
    """Run modes the host reports. Only MANUAL matters to the gate."""
    MANUAL = "manual"
    TRIGGER = "trigger"
    WEBHOOK = "webhook"
    RETRY = "retry"
    INTERNAL = "internal"


class _HostModel(BaseModel):
    model_config = ConfigDict(
        frozen=True,
        populate_by_name=True,
        alias_generator=to_camel,
        extra="ignore",
    )


class WorkflowSettings(_HostModel):
    # Kept raw; the decision engine validates it and fails closed
    trading_mode: Optional[str] = None


class WorkflowInfo(_HostModel):
    id: Optional[str] = None
    name: Optional[str] = None
    active: bool = False
    settings: Optional[WorkflowSettings] = None
    owner_id: Optional[str] = None


class HostContext(_HostModel):
    """
    Per-invocation signals supplied by the host workflow engine.

    Attributes:
        workflow: Workflow identity, active flag and settings
        node_name: Name of the node being executed
        run_mode: Run mode declared by the host (manual vs other)
        destination_node: Node the user explicitly asked to execute, if any
        execution_id: Host execution identifier
        execution_mode: Host execution mode ("test" for editor runs)
        user_id: User that triggered the run, if known
    """
    workflow: Optional[WorkflowInfo] = None
    node_name: Optional[str] = None
    run_mode: Optional[str] = None
    destination_node: Optional[str] = None
    execution_id: Optional[str] = None
    execution_mode: Optional[str] = None
    user_id: Optional[str] = None

    @property
    def is_manual_run(self) -> bool:
        return self.run_mode == RunMode.MANUAL.value

    @property
    def workflow_id(self) -> Optional[str]:
        return self.workflow.id if self.workflow else None

    @property
    def workflow_active(self) -> bool:
        return bool(self.workflow and self.workflow.active)

    @property
    def raw_trading_mode(self) -> Optional[str]:
        if self.workflow is None or self.workflow.settings is None:
            return None
        return self.workflow.settings.trading_mode


class NodeDescriptor(BaseModel):
    """
    Typed description of the calling node.

    Replaces free-text metadata tags: the category is fixed when the
    node executor is constructed.
    """
    model_config = ConfigDict(frozen=True)

    name: str
    category: NodeCategory
    order_type: Optional[OrderType] = None

    @property
    def has_trade_capability(self) -> bool:
        return self.category == NodeCategory.ORDER
