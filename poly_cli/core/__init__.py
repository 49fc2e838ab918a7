from .clob_adapter import ClobTradingClient
from .models import MarketDetails, OrderRequest, OrderSide, PriceQuote
from .polymarket_client import PolymarketClient

__all__ = [
    'ClobTradingClient', 'PolymarketClient',
    'MarketDetails', 'OrderRequest', 'OrderSide', 'PriceQuote',
]
