"""
poly-cli - command-line trading for a single Polymarket CLOB market.
"""

__version__ = "0.1.0"
