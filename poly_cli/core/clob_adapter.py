"""
Production trading client built on the py-clob-client SDK.

Exposes the five operations PolymarketClient needs and reshapes SDK
objects into plain dicts. Signing and the exchange protocol stay inside
the SDK.

The market id handed to every operation is the CLOB token id of the
outcome being traded.
"""

import logging
from typing import Any, Dict, List, Optional

from py_clob_client.client import ClobClient
from py_clob_client.clob_types import OpenOrderParams, OrderArgs, OrderType

from .models import OrderRequest

logger = logging.getLogger(__name__)

POLY_GNOSIS_SAFE = 2


def _level_to_dict(level) -> Dict[str, Any]:
    if isinstance(level, dict):
        return {"price": level.get("price"), "size": level.get("size")}
    return {"price": getattr(level, "price", None), "size": getattr(level, "size", None)}


def _sort_levels(levels, best_first_descending: bool) -> List[Dict[str, Any]]:
    parsed = [_level_to_dict(level) for level in levels or []]
    parsed = [level for level in parsed if level["price"] not in (None, "")]
    parsed.sort(key=lambda x: float(x["price"]), reverse=best_first_descending)
    return parsed


class ClobTradingClient:
    """
    py-clob-client backed trading client.

    API credentials are derived on the first authenticated call, so the
    public price and market commands never touch the auth endpoints.
    """

    def __init__(
        self,
        host: str,
        private_key: str,
        chain_id: int,
        funder: Optional[str] = None,
    ):
        client_kwargs = {
            "host": host,
            "key": private_key,
            "chain_id": chain_id,
        }
        if funder:
            client_kwargs["signature_type"] = POLY_GNOSIS_SAFE
            client_kwargs["funder"] = funder
            logger.debug(f"Using proxy wallet (funder): {funder}")

        self._client = ClobClient(**client_kwargs)
        self._auth_initialized = False

    def _ensure_auth(self):
        """Derive and install level-2 API credentials once"""
        if self._auth_initialized:
            return
        creds = self._client.create_or_derive_api_creds()
        self._client.set_api_creds(creds)
        self._auth_initialized = True
        logger.info("CLOB client authenticated successfully")

    def get_order_book(self, token_id: str) -> dict:
        """Order book with each side sorted best price first."""
        book = self._client.get_order_book(token_id)
        if isinstance(book, dict):
            bids, asks = book.get("bids"), book.get("asks")
            market, asset_id = book.get("market"), book.get("asset_id")
        else:
            bids, asks = book.bids, book.asks
            market, asset_id = book.market, book.asset_id

        return {
            "market": market,
            "asset_id": asset_id,
            "bids": _sort_levels(bids, best_first_descending=True),
            "asks": _sort_levels(asks, best_first_descending=False),
        }

    def get_market(self, token_id: str) -> dict:
        """
        Market record for the market the token belongs to.

        The markets endpoint is keyed by condition id, which the token's
        order book carries in its `market` field.
        """
        book = self._client.get_order_book(token_id)
        condition_id = book.get("market") if isinstance(book, dict) else book.market
        if not condition_id:
            raise ValueError(f"No market found for token {token_id}")
        return self._client.get_market(condition_id)

    def create_order(self, request: OrderRequest) -> Any:
        """Sign and post a limit order. GTD when an expiration is set, else GTC."""
        self._ensure_auth()

        order_args = OrderArgs(
            token_id=request.market_id,
            price=float(request.price),
            size=float(request.size),
            side=request.side,
            expiration=int(request.expiration or 0),
        )
        order_type = OrderType.GTD if request.expiration else OrderType.GTC

        signed_order = self._client.create_order(order_args)
        logger.debug(f"Order signed, submitting to CLOB as {order_type}")
        return self._client.post_order(signed_order, order_type)

    def cancel_order(self, order_id: str) -> Any:
        self._ensure_auth()
        return self._client.cancel(order_id)

    def get_orders(self, filters: Dict[str, Any]) -> List[Any]:
        """
        Open orders on the filter's token.

        The configured market id is a token id, so it filters on
        `asset_id`. The CLOB orders endpoint only returns live orders, so a
        status of "OPEN" needs no extra parameter.
        """
        self._ensure_auth()
        params = OpenOrderParams(asset_id=filters.get("market"))
        return self._client.get_orders(params)
