"""
Ledger service client.

Sends order tracking records to the trading ledger API. The client
surfaces every failure to its caller; deciding that tracking failures
are harmless is the order tracker's job.
"""

import logging
from typing import Any, Optional

import httpx

from tradegate.config import Settings, get_settings
from tradegate.errors import LedgerAuthenticationError
from tradegate.models.trading import OrderTrackingRecord, OrderType
from tradegate.observability.metrics import ledger_request_duration_seconds


ORDER_ENDPOINTS: dict[OrderType, str] = {
    OrderType.STOCK: "/api/trading-orders/stock",
    OrderType.CRYPTO: "/api/trading-orders/crypto",
    OrderType.PREDICTION_MARKET: "/api/trading-orders/prediction-market",
    OrderType.SPORTS_BETTING: "/api/trading-orders/sports-betting",
}


class TradingAPIClient:
    """
    Async client for the trading ledger API.

    Authentication:
    - API key configured: X-API-Key header, plus X-User-Id when known.
      Without a user id the ledger resolves the owner from workflowId.
    - No API key: the user id is mandatory and travels in the body.

    Usage:
        client = TradingAPIClient()
        response = await client.send_order_to_api(record, OrderType.STOCK)
    """

    def __init__(
        self,
        settings: Optional[Settings] = None,
        transport: Optional[httpx.AsyncBaseTransport] = None,
        logger: Optional[logging.Logger] = None,
    ):
        """
        Initialize ledger client.

        Args:
            settings: Settings to use; loaded from the environment if omitted
            transport: httpx transport override (tests use MockTransport)
            logger: Logger to report through
        """
        self.settings = settings or get_settings()
        self._transport = transport
        self.logger = logger or logging.getLogger(__name__)

    def resolve_base_url(self, base_url: Optional[str] = None) -> str:
        """Explicit override, then configured URL, then the local default."""
        if base_url:
            return base_url.rstrip("/")
        return self.settings.ledger_base_url

    def build_request(
        self,
        record: OrderTrackingRecord,
        order_type: OrderType,
        base_url: Optional[str] = None,
    ) -> tuple[str, dict[str, str], dict[str, Any]]:
        """
        Assemble URL, headers and body for a tracking call.

        Raises:
            LedgerAuthenticationError: Neither API key nor user id available
        """
        url = f"{self.resolve_base_url(base_url)}{ORDER_ENDPOINTS[OrderType(order_type)]}"
        headers = {"Content-Type": "application/json"}
        body = record.to_payload()
        user_id = record.user_id

        api_key = self.settings.playbook_api_key
        if api_key:
            headers["X-API-Key"] = api_key
            if user_id:
                headers["X-User-Id"] = user_id
            else:
                self.logger.warning(
                    "User ID not available in execution context. API will attempt to "
                    "resolve from workflowId. Order tracking may fail if workflow owner "
                    "cannot be determined.",
                    extra={"workflow_id": record.workflow_id},
                )
        else:
            if not user_id:
                raise LedgerAuthenticationError(
                    "User ID not available in execution context and no API key "
                    "configured. Cannot track order."
                )
            body["userId"] = user_id

        return url, headers, body

    async def send_order_to_api(
        self,
        record: OrderTrackingRecord,
        order_type: OrderType,
        base_url: Optional[str] = None,
        timeout: Optional[float] = None,
    ) -> dict[str, Any]:
        """
        POST an order tracking record to the ledger.

        Single attempt, no retry.

        Args:
            record: Tracking record to send
            order_type: Selects the ledger endpoint
            base_url: Override for the ledger base URL
            timeout: Request timeout in seconds (defaults to settings)

        Returns:
            Ledger JSON response

        Raises:
            LedgerAuthenticationError: No auth material, raised before any request
            httpx.HTTPStatusError: Ledger answered with an error status
            httpx.HTTPError: Transport failure
        """
        url, headers, body = self.build_request(record, order_type, base_url)
        timeout = timeout or self.settings.playbook_api_timeout_seconds

        self.logger.debug(
            f"Sending order to ledger: {url}",
            extra={"workflow_id": record.workflow_id, "order_type": OrderType(order_type).value},
        )

        with ledger_request_duration_seconds.labels(order_type=OrderType(order_type).value).time():
            async with httpx.AsyncClient(timeout=timeout, transport=self._transport) as client:
                response = await client.post(url, json=body, headers=headers)
                response.raise_for_status()

        if not response.content:
            return {}
        data = response.json()
        return data if isinstance(data, dict) else {"data": data}
