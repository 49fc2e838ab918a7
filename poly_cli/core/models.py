"""
Plain data records returned by PolymarketClient.
"""

from dataclasses import dataclass
from enum import Enum
from typing import Any, Optional


class OrderSide(Enum):
    BUY = "BUY"
    SELL = "SELL"


@dataclass
class PriceQuote:
    """Top of book for the configured market"""
    best_bid: Optional[float]
    best_ask: Optional[float]
    mid: Optional[float]

    def to_dict(self) -> dict:
        return {
            "bestBid": self.best_bid,
            "bestAsk": self.best_ask,
            "mid": self.mid,
        }


@dataclass
class MarketDetails:
    """Subset of the CLOB market record shown by the `market` command"""
    question: Optional[str]
    description: Optional[str]
    resolution_time: Optional[str]
    outcome_tokens: Any
    volume: Any
    market_status: Any
    extra_info: Any

    def to_dict(self) -> dict:
        return {
            "question": self.question,
            "description": self.description,
            "resolutionTime": self.resolution_time,
            "outcomeTokens": self.outcome_tokens,
            "volume": self.volume,
            "marketStatus": self.market_status,
            "extraInfo": self.extra_info,
        }


@dataclass
class OrderRequest:
    """Limit order sent to the trading client"""
    market_id: str
    side: str  # BUY or SELL
    price: str  # decimal string, e.g. "0.5"
    size: str  # decimal string, e.g. "10"
    expiration: Optional[int] = None  # unix seconds
