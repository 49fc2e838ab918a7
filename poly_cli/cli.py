#!/usr/bin/env python3
"""
poly-cli - trade a single Polymarket CLOB market from the command line.

Usage:
    poly-cli price                                    # best bid/ask and mid
    poly-cli market                                   # market metadata
    poly-cli open-orders                              # open orders
    poly-cli place-order BUY 0.45 10                  # limit order
    poly-cli cancel-order <orderId>                   # cancel an order
    poly-cli --config config.yaml price               # with a YAML config
"""

import argparse
import asyncio
import json
import logging
import math
import sys
from dataclasses import dataclass
from typing import Any, Awaitable, Callable, Dict, List, Optional

from loguru import logger

from .config import ConfigError, Settings, load_settings
from .core.models import OrderSide
from .core.polymarket_client import PolymarketClient

USAGE = """Usage: poly-cli [--config PATH] [--log-level LEVEL] <command> [args]

Commands:
  price                          Show best bid/ask and mid price for the market
  market                         Show market metadata
  open-orders                    List open orders for the market
  place-order <side> <price> <size> [expiration]
                                 Place a limit order (side = BUY | SELL)
  cancel-order <orderId>         Cancel a specific order
  help                           Show this message
"""

PLACE_ORDER_USAGE = "Usage: place-order <side> <price> <size> [expiration]"
CANCEL_ORDER_USAGE = "Usage: cancel-order <orderId>"

LOG_FORMAT = (
    "<green>{time:YYYY-MM-DD HH:mm:ss}</green> | <level>{level: <8}</level> | "
    "<cyan>{name}</cyan>:<cyan>{function}</cyan>:<cyan>{line}</cyan> - <level>{message}</level>"
)


class UsageError(Exception):
    """Command arguments are missing or malformed"""


@dataclass
class Command:
    handler: Callable[[PolymarketClient, Dict[str, Any]], Awaitable[Any]]
    parse: Callable[[List[str]], Dict[str, Any]]


# =========================================================================
# Argument parsing
# =========================================================================

def _no_args(args: List[str]) -> Dict[str, Any]:
    return {}


def _parse_number(text: str, name: str) -> float:
    try:
        value = float(text)
    except ValueError:
        raise UsageError(f"Invalid {name}: {text!r}\n{PLACE_ORDER_USAGE}")
    if not math.isfinite(value):
        raise UsageError(f"Invalid {name}: {text!r}\n{PLACE_ORDER_USAGE}")
    return value


def _parse_place_order(args: List[str]) -> Dict[str, Any]:
    if len(args) < 3 or not all(args[:3]):
        raise UsageError(PLACE_ORDER_USAGE)

    side = args[0].upper()
    if side not in {s.value for s in OrderSide}:
        raise UsageError(f"Invalid side: {args[0]!r} (expected BUY or SELL)\n{PLACE_ORDER_USAGE}")

    expiration = None
    if len(args) > 3 and args[3]:
        try:
            expiration = int(args[3])
        except ValueError:
            raise UsageError(f"Invalid expiration: {args[3]!r}\n{PLACE_ORDER_USAGE}")

    return {
        "side": side,
        "price": _parse_number(args[1], "price"),
        "size": _parse_number(args[2], "size"),
        "expiration": expiration,
    }


def _parse_cancel_order(args: List[str]) -> Dict[str, Any]:
    if not args or not args[0]:
        raise UsageError(CANCEL_ORDER_USAGE)
    return {"order_id": args[0]}


# =========================================================================
# Command handlers
# =========================================================================

async def cmd_price(client: PolymarketClient, params: Dict[str, Any]) -> Any:
    quote = await client.get_current_price()
    return quote.to_dict()


async def cmd_market(client: PolymarketClient, params: Dict[str, Any]) -> Any:
    details = await client.get_market_details()
    return details.to_dict()


async def cmd_open_orders(client: PolymarketClient, params: Dict[str, Any]) -> Any:
    return await client.get_open_orders()


async def cmd_place_order(client: PolymarketClient, params: Dict[str, Any]) -> Any:
    order = await client.place_order(**params)
    logger.info("Created order")
    return order


async def cmd_cancel_order(client: PolymarketClient, params: Dict[str, Any]) -> Any:
    result = await client.cancel_order(params["order_id"])
    logger.info(f"Cancelled order {params['order_id']}")
    return result


COMMANDS: Dict[str, Command] = {
    "price": Command(cmd_price, _no_args),
    "market": Command(cmd_market, _no_args),
    "open-orders": Command(cmd_open_orders, _no_args),
    "place-order": Command(cmd_place_order, _parse_place_order),
    "cancel-order": Command(cmd_cancel_order, _parse_cancel_order),
}

HELP_COMMANDS = ("", "help")


# =========================================================================
# Entry point
# =========================================================================

def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="poly-cli",
        description="Polymarket CLOB trading CLI",
        add_help=False,
    )
    parser.add_argument(
        '--config', '-c',
        default=None,
        help='Path to YAML configuration file'
    )
    parser.add_argument(
        '--log-level',
        default=None,
        help='Log level (DEBUG, INFO, WARNING, ...)'
    )
    parser.add_argument('--help', '-h', action='store_true', dest='show_help')
    parser.add_argument('command', nargs='?', default='')
    parser.add_argument('args', nargs=argparse.REMAINDER)
    return parser


def setup_logging(level: str = "INFO", log_file: Optional[str] = None):
    """Configure loguru for the CLI and stdlib logging for library modules"""
    level = level.upper()

    logger.remove()
    logger.add(sys.stderr, level=level, format=LOG_FORMAT)
    if log_file:
        logger.add(
            log_file,
            level=level,
            rotation="10 MB",
            retention="7 days"
        )

    logging.basicConfig(
        level=level,
        format='%(asctime)s | %(levelname)s | %(message)s',
        datefmt='%H:%M:%S',
        stream=sys.stderr,
        force=True,
    )
    logging.getLogger("httpx").setLevel(logging.WARNING)


def print_help(stream=None):
    print(USAGE, file=stream or sys.stdout)


def main(
    argv: Optional[List[str]] = None,
    client_factory: Callable[[Settings], PolymarketClient] = PolymarketClient.from_settings,
) -> int:
    """
    Run one CLI command.

    Returns:
        Process exit status
    """
    ns = build_parser().parse_args(argv)
    command_name = (ns.command or "").lower()

    if ns.show_help or command_name in HELP_COMMANDS:
        print_help()
        return 0

    command = COMMANDS.get(command_name)
    if command is None:
        print(f"Unknown command: {ns.command}\n", file=sys.stderr)
        print_help(sys.stderr)
        return 1

    try:
        settings = load_settings(ns.config)
    except ConfigError as e:
        print(str(e), file=sys.stderr)
        return 1

    try:
        setup_logging(ns.log_level or settings.log_level, settings.log_file)
    except ValueError as e:
        print(f"Invalid log level: {e}", file=sys.stderr)
        return 1

    try:
        params = command.parse(ns.args)
    except UsageError as e:
        print(str(e), file=sys.stderr)
        return 1

    logger.debug(f"Running {command_name} with {settings!r}")

    client = None
    try:
        client = client_factory(settings)
        result = asyncio.run(command.handler(client, params))
    except KeyboardInterrupt:
        logger.info("Interrupted by user")
        return 130
    except Exception as e:
        logger.error(f"Unexpected error: {e}")
        return 1
    finally:
        if client is not None:
            client.close()

    print(json.dumps(result, indent=2, default=str))
    return 0


def run():
    sys.exit(main())


if __name__ == "__main__":
    run()
