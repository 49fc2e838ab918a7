#!/usr/bin/env python3
"""
poly-cli - Polymarket CLOB trading from the command line.

Usage:
    python main.py price
    python main.py place-order BUY 0.45 10
    python main.py --help
"""

from poly_cli.cli import run

if __name__ == "__main__":
    run()
