"""
Mock brokerage responses.

When a trade must be simulated, these generators fabricate a response
shaped like the real broker's "order accepted" payload: synthetic ids,
timestamps, and a simulated fill (immediate for market orders, pending
otherwise). Every response carries source="mock" so downstream
consumers can tell simulated fills from real ones.

Generators never touch the network and tolerate partially populated
order data: missing or malformed numbers fall back to defaults.

Cancel and modify calls get their own shapes: the order id from the
item is echoed back with a canceled or amended status, never a fill.
"""

import math
import random
import string
from abc import ABC, abstractmethod
from datetime import datetime, timezone
from typing import Any, Callable, Mapping, Optional

from tradegate.models.trading import OrderType, TradeOperation


MOCK_SOURCE = "mock"

Clock = Callable[[], datetime]


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


class MockResponseGenerator(ABC):
    """
    Base class for per-broker mock responses.

    Args:
        clock: Returns the current time (UTC); injectable for tests
        rng: Random source for ids and prices; injectable for tests
    """

    order_type: OrderType

    CANCELED_STATUS = "canceled"
    MODIFIED_STATUS = "replaced"
    # Keys the echoed order id is written under
    ID_FIELDS: tuple[str, ...] = ("id",)

    def __init__(self, clock: Optional[Clock] = None, rng: Optional[random.Random] = None):
        self._clock = clock or _utcnow
        self._rng = rng or random.Random()

    def generate(
        self,
        order_data: Mapping[str, Any],
        operation: TradeOperation = TradeOperation.PLACE_ORDER,
    ) -> dict[str, Any]:
        """Build an as-if-executed response for the given operation."""
        operation = TradeOperation(operation)
        if operation == TradeOperation.CANCEL_ORDER:
            return self.cancel(order_data)
        if operation == TradeOperation.MODIFY_ORDER:
            return self.modify(order_data)
        return self.place(order_data)

    @abstractmethod
    def place(self, order_data: Mapping[str, Any]) -> dict[str, Any]:
        """Simulated "order accepted" payload."""
        pass

    def cancel(self, order_data: Mapping[str, Any]) -> dict[str, Any]:
        now = self._now().isoformat()
        response = self._echo_id(order_data)
        response.update({
            "status": self.CANCELED_STATUS,
            "canceled_at": now,
            "updated_at": now,
            "source": MOCK_SOURCE,
        })
        return response

    def modify(self, order_data: Mapping[str, Any]) -> dict[str, Any]:
        """Amended order: the requested fields applied to the existing id."""
        response = {k: v for k, v in order_data.items() if v is not None}
        response.update(self._echo_id(order_data))
        response.update({
            "status": self.MODIFIED_STATUS,
            "updated_at": self._now().isoformat(),
            "source": MOCK_SOURCE,
        })
        return response

    def _echo_id(self, order_data: Mapping[str, Any]) -> dict[str, Any]:
        order_id = None
        for key in ("order_id", "orderId", "bet_id", "id"):
            if order_data.get(key):
                order_id = str(order_data[key])
                break
        order_id = order_id or self._mock_id()
        return {field: order_id for field in self.ID_FIELDS}

    def _now(self) -> datetime:
        return self._clock()

    def _mock_id(self, prefix: str = "mock") -> str:
        millis = int(self._now().timestamp() * 1000)
        suffix = "".join(self._rng.choices(string.ascii_lowercase + string.digits, k=6))
        return f"{prefix}-{millis}-{suffix}"

    @staticmethod
    def _number(order_data: Mapping[str, Any], key: str, default: Optional[float] = None) -> Optional[float]:
        value = order_data.get(key)
        if value is None or value == "":
            return default
        try:
            number = float(value)
        except (TypeError, ValueError):
            return default
        return number if math.isfinite(number) else default

    @staticmethod
    def _text(order_data: Mapping[str, Any], key: str, default: str) -> str:
        value = order_data.get(key)
        return str(value) if value else default


class AlpacaStockMockResponse(MockResponseGenerator):
    """Alpaca Markets equity order."""

    order_type = OrderType.STOCK

    PRICE_FLOOR = 150.0
    PRICE_RANGE = 10.0

    def place(self, order_data: Mapping[str, Any]) -> dict[str, Any]:
        symbol = self._text(order_data, "symbol", "AAPL")
        side = self._text(order_data, "side", "buy")
        order_kind = self._text(order_data, "type", "market")
        time_in_force = self._text(order_data, "time_in_force", "day")
        qty = self._number(order_data, "qty")
        notional = self._number(order_data, "notional")

        order_id = self._mock_id()
        now = self._now().isoformat()
        is_market = order_kind == "market"

        # Market orders fill immediately at a price between 150 and 160
        filled_qty = qty or float((notional or 100) // self.PRICE_FLOOR)
        filled_price = self.PRICE_FLOOR + self._rng.random() * self.PRICE_RANGE

        return {
            "id": order_id,
            "client_order_id": order_data.get("client_order_id") or order_id,
            "created_at": now,
            "updated_at": now,
            "submitted_at": now,
            "filled_at": now if is_market else None,
            "expired_at": None,
            "canceled_at": None,
            "failed_at": None,
            "replaced_at": None,
            "replaced_by": None,
            "replaces": None,
            "asset_id": f"mock-asset-{symbol}",
            "symbol": symbol,
            "asset_class": "us_equity",
            "notional": notional,
            "qty": qty,
            "filled_qty": filled_qty if is_market else 0,
            "filled_avg_price": f"{filled_price:.2f}" if is_market else None,
            "order_class": "simple",
            "order_type": order_kind,
            "type": order_kind,
            "side": side,
            "time_in_force": time_in_force,
            "limit_price": order_data.get("limit_price"),
            "stop_price": order_data.get("stop_price"),
            "status": "filled" if is_market else "new",
            "extended_hours": bool(order_data.get("extended_hours", False)),
            "legs": None,
            "trail_percent": None,
            "trail_price": None,
            "hwm": None,
            "subtag": None,
            "source": MOCK_SOURCE,
        }


class CryptoMockResponse(MockResponseGenerator):
    """Spot crypto order in the Alpaca crypto shape."""

    order_type = OrderType.CRYPTO

    PRICE_FLOOR = 60000.0
    PRICE_RANGE = 1000.0

    def place(self, order_data: Mapping[str, Any]) -> dict[str, Any]:
        symbol = self._text(order_data, "symbol", "BTC/USD")
        side = self._text(order_data, "side", "buy")
        order_kind = self._text(order_data, "type", "market")
        qty = self._number(order_data, "qty")
        notional = self._number(order_data, "notional")

        order_id = self._mock_id()
        now = self._now().isoformat()
        is_market = order_kind == "market"

        filled_price = self.PRICE_FLOOR + self._rng.random() * self.PRICE_RANGE
        if qty is None:
            qty = round((notional or 100.0) / filled_price, 8)

        return {
            "id": order_id,
            "client_order_id": order_data.get("client_order_id") or order_id,
            "created_at": now,
            "submitted_at": now,
            "filled_at": now if is_market else None,
            "symbol": symbol,
            "asset_class": "crypto",
            "notional": notional,
            "qty": qty,
            "filled_qty": qty if is_market else 0,
            "filled_avg_price": f"{filled_price:.2f}" if is_market else None,
            "type": order_kind,
            "side": side,
            "time_in_force": self._text(order_data, "time_in_force", "gtc"),
            "limit_price": order_data.get("limit_price"),
            "status": "filled" if is_market else "new",
            "source": MOCK_SOURCE,
        }


class KalshiPredictionMarketMockResponse(MockResponseGenerator):
    """Kalshi prediction-market order. Prices are in cents (1-99)."""

    order_type = OrderType.PREDICTION_MARKET

    MODIFIED_STATUS = "resting"
    ID_FIELDS = ("order_id", "id")

    def place(self, order_data: Mapping[str, Any]) -> dict[str, Any]:
        ticker = self._text(order_data, "market_id", self._text(order_data, "ticker", "MOCK-MARKET"))
        side = self._text(order_data, "side", "yes")
        order_kind = self._text(order_data, "type", "limit")
        count = int(self._number(order_data, "count", 1))
        price = int(min(max(self._number(order_data, "price", 50), 1), 99))

        order_id = self._mock_id()
        now = self._now().isoformat()
        is_market = order_kind == "market"

        yes_price = price if side == "yes" else 100 - price

        return {
            "order_id": order_id,
            "id": order_id,
            "client_order_id": order_data.get("client_order_id") or order_id,
            "ticker": ticker,
            "market_id": ticker,
            "side": side,
            "action": self._text(order_data, "action", "buy"),
            "type": order_kind,
            "count": count,
            "yes_price": yes_price,
            "no_price": 100 - yes_price,
            "fill_count": count if is_market else 0,
            "remaining_count": 0 if is_market else count,
            "status": "executed" if is_market else "resting",
            "created_time": now,
            "filled_at": now if is_market else None,
            "expiration_time": None,
            "source": MOCK_SOURCE,
        }


class SportsBettingMockResponse(MockResponseGenerator):
    """Sportsbook bet slip. Odds are decimal."""

    order_type = OrderType.SPORTS_BETTING

    CANCELED_STATUS = "void"
    MODIFIED_STATUS = "pending"
    ID_FIELDS = ("id", "bet_id")

    def place(self, order_data: Mapping[str, Any]) -> dict[str, Any]:
        stake = self._number(order_data, "stake", 10.0)
        odds = self._number(order_data, "odds", 2.0)
        bet_type = self._text(order_data, "type", "market")

        bet_id = self._mock_id()
        now = self._now().isoformat()
        is_market = bet_type == "market"

        return {
            "id": bet_id,
            "bet_id": bet_id,
            "event_id": self._text(order_data, "event_id", "mock-event"),
            "market": self._text(order_data, "market", "moneyline"),
            "selection": self._text(order_data, "selection", "home"),
            "type": bet_type,
            "stake": stake,
            "odds": odds,
            "potential_payout": round(stake * odds, 2),
            "status": "accepted" if is_market else "pending",
            "placed_at": now,
            "accepted_at": now if is_market else None,
            "source": MOCK_SOURCE,
        }


MOCK_GENERATORS: dict[OrderType, type[MockResponseGenerator]] = {
    OrderType.STOCK: AlpacaStockMockResponse,
    OrderType.CRYPTO: CryptoMockResponse,
    OrderType.PREDICTION_MARKET: KalshiPredictionMarketMockResponse,
    OrderType.SPORTS_BETTING: SportsBettingMockResponse,
}


def get_mock_response_generator(
    order_type: OrderType,
    clock: Optional[Clock] = None,
    rng: Optional[random.Random] = None,
) -> MockResponseGenerator:
    """Mock generator for an order type."""
    return MOCK_GENERATORS[order_type](clock=clock, rng=rng)


def mock_alpaca_place_order_response(order_data: Mapping[str, Any]) -> dict[str, Any]:
    """Mock response for an Alpaca Markets place-order call."""
    return AlpacaStockMockResponse().generate(order_data)


def mock_kalshi_place_order_response(order_data: Mapping[str, Any]) -> dict[str, Any]:
    """Mock response for a Kalshi place-order call."""
    return KalshiPredictionMarketMockResponse().generate(order_data)
