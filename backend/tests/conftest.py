"""
Global pytest configuration and fixtures for the trade gate.

Test Pyramid:
- Unit tests: one component at a time, no network (ledger calls go
  through httpx.MockTransport)
- Integration tests: full per-item flow through OrderNodeExecutor
"""
import json
import logging
from typing import Optional

import httpx
import pytest
from unittest.mock import MagicMock

from tradegate.config import Settings
from tradegate.models.host import HostContext, RunMode, WorkflowInfo, WorkflowSettings
from tradegate.models.trading import CredentialEnvironment, Credentials
from tradegate.services.trading_api_client import TradingAPIClient


def pytest_configure(config):
    """Configure custom pytest markers."""
    config.addinivalue_line(
        "markers", "unit: mark test as unit test (fast, no dependencies)"
    )
    config.addinivalue_line(
        "markers", "integration: mark test as integration test (full item flow)"
    )


class LedgerRecorder:
    """Fake ledger service that records every request it receives."""

    def __init__(self, status_code: int = 201, payload: Optional[dict] = None):
        self.status_code = status_code
        self.payload = payload if payload is not None else {"id": "ledger-1", "success": True}
        self.requests: list[httpx.Request] = []

    def handler(self, request: httpx.Request) -> httpx.Response:
        self.requests.append(request)
        return httpx.Response(self.status_code, json=self.payload)

    @property
    def transport(self) -> httpx.MockTransport:
        return httpx.MockTransport(self.handler)

    @property
    def last_body(self) -> dict:
        return json.loads(self.requests[-1].content)


def make_host(
    trading_mode: Optional[str] = "paper",
    active: bool = False,
    run_mode: Optional[str] = RunMode.MANUAL.value,
    node_name: Optional[str] = "Place Order",
    destination_node: Optional[str] = None,
    user_id: Optional[str] = "user-123",
    execution_mode: Optional[str] = "test",
    owner_id: Optional[str] = None,
    with_settings: bool = True,
) -> HostContext:
    """Host context; the defaults describe a manual run of an inactive workflow."""
    return HostContext(
        workflow=WorkflowInfo(
            id="workflow-123",
            name="Momentum",
            active=active,
            settings=WorkflowSettings(trading_mode=trading_mode) if with_settings else None,
            owner_id=owner_id,
        ),
        node_name=node_name,
        run_mode=run_mode,
        destination_node=destination_node,
        execution_id="execution-123",
        execution_mode=execution_mode,
        user_id=user_id,
    )


@pytest.fixture
def host_factory():
    return make_host


@pytest.fixture
def live_credentials() -> Credentials:
    return Credentials(
        environment=CredentialEnvironment.LIVE,
        api_key_id="AKLIVE",
        secret_key="live-secret",
    )


@pytest.fixture
def paper_credentials() -> Credentials:
    return Credentials(
        environment=CredentialEnvironment.PAPER,
        api_key_id="AKPAPER",
        secret_key="paper-secret",
    )


@pytest.fixture
def mock_logger():
    """Injected logger so log calls can be asserted."""
    return MagicMock(spec=logging.Logger)


@pytest.fixture
def ledger():
    return LedgerRecorder()


@pytest.fixture
def api_key_settings() -> Settings:
    return Settings(
        playbook_api_key="test-api-key",
        playbook_api_base_url="http://ledger.test",
    )


@pytest.fixture
def keyless_settings() -> Settings:
    return Settings(
        playbook_api_key="",
        playbook_api_base_url="http://ledger.test",
    )


@pytest.fixture
def api_client(api_key_settings, ledger, mock_logger) -> TradingAPIClient:
    return TradingAPIClient(
        settings=api_key_settings,
        transport=ledger.transport,
        logger=mock_logger,
    )
