"""
Shared test fixtures for the poly-cli test suite.
All tests run offline with mocked trading clients.
"""

import sys

import pytest
from unittest.mock import MagicMock

from loguru import logger

from poly_cli.core.polymarket_client import PolymarketClient

MARKET_ID = "0xmarket" + "0" * 56
PRIVATE_KEY = "0x" + "ab" * 32


@pytest.fixture(autouse=True)
def isolated_env(monkeypatch):
    """Keep the developer's shell and .env file out of the tests."""
    for name in (
        "POLYMARKET_PRIVATE_KEY",
        "POLYMARKET_MARKET_ID",
        "POLYMARKET_API_HOST",
        "POLYMARKET_CHAIN_ID",
        "POLYMARKET_FUNDER_ADDRESS",
        "LOG_LEVEL",
    ):
        monkeypatch.delenv(name, raising=False)
    monkeypatch.setattr("poly_cli.config.load_dotenv", lambda *args, **kwargs: False)

    yield

    logger.remove()
    logger.add(sys.__stderr__)


@pytest.fixture
def trading_env(monkeypatch):
    monkeypatch.setenv("POLYMARKET_PRIVATE_KEY", PRIVATE_KEY)
    monkeypatch.setenv("POLYMARKET_MARKET_ID", MARKET_ID)


@pytest.fixture
def trading_client():
    """Mock trading client with a two-sided book by default."""
    client = MagicMock()
    client.get_order_book.return_value = {
        "bids": [{"price": "0.40", "size": "100"}],
        "asks": [{"price": "0.60", "size": "50"}],
    }
    client.get_market.return_value = {
        "question": "Will ETH close higher?",
        "description": "Resolves YES if ...",
        "end_date": "2026-10-20T00:00:00Z",
        "outcomes": ["Up", "Down"],
        "volume": "12345.6",
        "status": "active",
        "extra_info": {"strike": 2500},
    }
    client.create_order.return_value = {"orderID": "0xorder1", "success": True}
    client.cancel_order.return_value = {"canceled": ["0xorder1"], "not_canceled": {}}
    client.get_orders.return_value = [{"id": "0xorder1", "side": "BUY", "price": "0.45"}]
    return client


@pytest.fixture
def make_client(trading_client):
    """Factory for PolymarketClient instances wired to the mock trading client."""
    created = []

    def _factory(**overrides):
        kwargs = {
            "private_key": PRIVATE_KEY,
            "market_id": MARKET_ID,
            "client": trading_client,
        }
        kwargs.update(overrides)
        client = PolymarketClient(**kwargs)
        created.append(client)
        return client

    yield _factory

    for client in created:
        client.close()
