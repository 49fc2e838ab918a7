"""
Thin async wrapper around a Polymarket CLOB trading client.

The trading client is injected (ClobTradingClient in production, a mock in
tests) and must provide:
    get_order_book(market_id)
    get_market(market_id)
    create_order(OrderRequest)
    cancel_order(order_id)
    get_orders({"market": ..., "status": ...})

Those calls are synchronous, so each one runs on a single worker thread
and the wrapper's coroutines never block the event loop.
"""

import asyncio
import logging
from concurrent.futures import ThreadPoolExecutor
from decimal import Decimal, InvalidOperation
from typing import Any, List, Optional

from ..config import DEFAULT_CHAIN_ID, DEFAULT_HOST, Settings
from .clob_adapter import ClobTradingClient
from .models import MarketDetails, OrderRequest, PriceQuote

logger = logging.getLogger(__name__)

OPEN_STATUS = "OPEN"


def _field(record: Any, name: str) -> Any:
    """Read a field from a dict or an attribute-style record"""
    if record is None:
        return None
    if isinstance(record, dict):
        return record.get(name)
    return getattr(record, name, None)


def _first_price(levels) -> Optional[float]:
    if not levels:
        return None
    price = _field(levels[0], "price")
    # "0" is a real price; only a missing value means no quote
    if price is None or price == "":
        return None
    return float(price)


def to_decimal_string(value) -> str:
    """
    Render a number as a plain decimal string for the outbound order.

    0.5 -> "0.5", 10 -> "10", 10.0 -> "10"; large integers are written out
    in full rather than in exponent form.
    """
    try:
        number = Decimal(str(value).strip())
    except InvalidOperation:
        raise ValueError(f"Not a number: {value!r}")
    if not number.is_finite():
        raise ValueError(f"Not a finite number: {value!r}")
    if number == number.to_integral_value():
        return format(number.to_integral_value(), "f")
    return format(number.normalize(), "f")


class PolymarketClient:
    """
    Helper methods for one configured Polymarket market.
    """

    def __init__(
        self,
        private_key: str,
        market_id: str,
        client=None,
        host: Optional[str] = None,
        chain_id: Optional[int] = None,
        funder: Optional[str] = None,
    ):
        """
        Args:
            private_key: Polymarket trading private key
            market_id: CLOB market identifier
            client: Trading client to delegate to (built from the other
                arguments when not given)
            host: CLOB host, defaults to the production host
            chain_id: Chain id, defaults to Polygon mainnet
            funder: Optional proxy wallet address
        """
        if not private_key:
            raise ValueError("A trading private key is required to initialize the client.")
        if not market_id:
            raise ValueError("A market id is required to initialize the client.")

        self.market_id = market_id
        self.host = host or DEFAULT_HOST
        self.chain_id = chain_id if chain_id is not None else DEFAULT_CHAIN_ID

        if client is None:
            client = ClobTradingClient(
                host=self.host,
                private_key=private_key,
                chain_id=self.chain_id,
                funder=funder,
            )
        self.client = client
        self._executor = ThreadPoolExecutor(max_workers=1)

    @classmethod
    def from_settings(cls, settings: Settings, client=None) -> "PolymarketClient":
        return cls(
            settings.private_key,
            settings.market_id,
            client=client,
            host=settings.host,
            chain_id=settings.chain_id,
            funder=settings.funder,
        )

    async def _call(self, func, *args):
        loop = asyncio.get_event_loop()
        return await loop.run_in_executor(self._executor, func, *args)

    async def get_current_price(self) -> PriceQuote:
        """Best bid/ask and mid price for the configured market."""
        book = await self._call(self.client.get_order_book, self.market_id)

        best_bid = _first_price(_field(book, "bids"))
        best_ask = _first_price(_field(book, "asks"))

        mid = None
        if best_bid is not None and best_ask is not None:
            mid = (best_bid + best_ask) / 2

        return PriceQuote(best_bid=best_bid, best_ask=best_ask, mid=mid)

    async def get_market_details(self) -> MarketDetails:
        """Question text, resolution time, outcomes and status of the market."""
        market = await self._call(self.client.get_market, self.market_id)

        outcomes = _field(market, "outcomes")
        if outcomes is None:
            outcomes = _field(market, "tokens")

        return MarketDetails(
            question=_field(market, "question"),
            description=_field(market, "description"),
            resolution_time=_field(market, "end_date") or _field(market, "end_date_iso"),
            outcome_tokens=outcomes,
            volume=_field(market, "volume"),
            market_status=_field(market, "status") or self._derive_status(market),
            extra_info=_field(market, "extra_info"),
        )

    @staticmethod
    def _derive_status(market) -> Optional[str]:
        if _field(market, "closed"):
            return "closed"
        if _field(market, "active"):
            return "active"
        return None

    async def place_order(
        self,
        side: str,
        price,
        size,
        expiration: Optional[int] = None,
    ) -> Any:
        """
        Place a limit order.

        Price and size are sent as decimal strings so the outbound
        request never carries float artifacts. The trading client's
        response is returned unchanged.
        """
        request = OrderRequest(
            market_id=self.market_id,
            side=side,
            price=to_decimal_string(price),
            size=to_decimal_string(size),
            expiration=expiration,
        )
        logger.info(f"Placing {request.side} {request.size} @ {request.price} on {self.market_id}")
        return await self._call(self.client.create_order, request)

    async def cancel_order(self, order_id: str) -> Any:
        """Cancel an order by its id."""
        if not order_id:
            raise ValueError("An order ID is required to cancel an order.")

        logger.info(f"Cancelling order {order_id}")
        return await self._call(self.client.cancel_order, order_id)

    async def get_open_orders(self) -> List[Any]:
        """Open orders for the configured market."""
        return await self._call(
            self.client.get_orders,
            {"market": self.market_id, "status": OPEN_STATUS},
        )

    def close(self):
        """Release the worker thread."""
        self._executor.shutdown(wait=False)
