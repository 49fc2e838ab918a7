"""
Configuration loading for poly-cli.

Settings come from three places, later ones winning:
    1. Built-in defaults (production CLOB host, Polygon mainnet)
    2. Optional YAML config file
    3. Environment variables (a local .env file is loaded first)
"""

import logging
import os
from dataclasses import dataclass
from pathlib import Path
from typing import Mapping, Optional

import yaml
from dotenv import load_dotenv

logger = logging.getLogger(__name__)

DEFAULT_HOST = "https://clob.polymarket.com"
DEFAULT_CHAIN_ID = 137  # Polygon mainnet

ENV_PRIVATE_KEY = "POLYMARKET_PRIVATE_KEY"
ENV_MARKET_ID = "POLYMARKET_MARKET_ID"
ENV_API_HOST = "POLYMARKET_API_HOST"
ENV_CHAIN_ID = "POLYMARKET_CHAIN_ID"
ENV_FUNDER = "POLYMARKET_FUNDER_ADDRESS"
ENV_LOG_LEVEL = "LOG_LEVEL"


class ConfigError(ValueError):
    """Raised when required configuration is missing or malformed"""


@dataclass(frozen=True)
class Settings:
    """Process-lifetime configuration"""
    private_key: str
    market_id: str
    host: str = DEFAULT_HOST
    chain_id: int = DEFAULT_CHAIN_ID
    funder: Optional[str] = None
    log_level: str = "INFO"
    log_file: Optional[str] = None

    def __repr__(self) -> str:
        # Never echo the private key
        return (
            f"Settings(market_id={self.market_id!r}, host={self.host!r}, "
            f"chain_id={self.chain_id}, funder={self.funder!r})"
        )


def _default_config() -> dict:
    """Return default configuration"""
    return {
        'polymarket': {
            'host': DEFAULT_HOST,
            'chain_id': DEFAULT_CHAIN_ID,
        },
        'logging': {
            'level': 'INFO',
        },
    }


def _load_yaml(config_path: Optional[str]) -> dict:
    config = _default_config()
    if not config_path:
        return config

    config_file = Path(config_path)
    if not config_file.exists():
        logger.warning(f"Config file not found: {config_path}, using defaults")
        return config

    try:
        with open(config_file) as f:
            loaded = yaml.safe_load(f) or {}
    except (OSError, yaml.YAMLError) as e:
        raise ConfigError(f"Could not read config file {config_path}: {e}") from e

    if not isinstance(loaded, dict):
        raise ConfigError(f"Config file {config_path} must contain a mapping")

    for section in ('polymarket', 'logging'):
        values = loaded.get(section) or {}
        if not isinstance(values, dict):
            raise ConfigError(f"Config section '{section}' must be a mapping")
        config[section].update(values)

    return config


def _apply_env_overrides(config: dict, environ: Mapping[str, str]) -> dict:
    """Apply environment variable overrides to config"""
    poly = config['polymarket']

    if environ.get(ENV_MARKET_ID):
        poly['market_id'] = environ[ENV_MARKET_ID]
    if environ.get(ENV_API_HOST):
        poly['host'] = environ[ENV_API_HOST]
    if environ.get(ENV_CHAIN_ID):
        poly['chain_id'] = environ[ENV_CHAIN_ID]
    if environ.get(ENV_FUNDER):
        poly['funder'] = environ[ENV_FUNDER]

    if environ.get(ENV_LOG_LEVEL):
        config['logging']['level'] = environ[ENV_LOG_LEVEL]

    return config


def _parse_chain_id(value) -> int:
    try:
        return int(value)
    except (TypeError, ValueError):
        raise ConfigError(f"{ENV_CHAIN_ID} must be numeric, got {value!r}")


def load_settings(
    config_path: Optional[str] = None,
    environ: Optional[Mapping[str, str]] = None,
    use_dotenv: bool = True,
) -> Settings:
    """
    Build Settings from defaults, an optional YAML file and the environment.

    Args:
        config_path: Optional path to a YAML config file
        environ: Environment mapping (defaults to os.environ)
        use_dotenv: Load a .env file into os.environ first

    Raises:
        ConfigError: if the private key or market id is missing, or a
            value cannot be parsed
    """
    if use_dotenv:
        load_dotenv()
    if environ is None:
        environ = os.environ

    config = _apply_env_overrides(_load_yaml(config_path), environ)
    poly = config['polymarket']
    log_config = config['logging']

    # The private key is never read from the YAML file
    if not environ.get(ENV_PRIVATE_KEY):
        raise ConfigError(f"Missing required environment variable: {ENV_PRIVATE_KEY}")
    if not poly.get('market_id'):
        raise ConfigError(f"Missing required environment variable: {ENV_MARKET_ID}")

    return Settings(
        private_key=environ[ENV_PRIVATE_KEY],
        market_id=str(poly['market_id']),
        host=poly.get('host') or DEFAULT_HOST,
        chain_id=_parse_chain_id(poly.get('chain_id', DEFAULT_CHAIN_ID)),
        funder=poly.get('funder') or None,
        log_level=str(log_config.get('level') or 'INFO').upper(),
        log_file=log_config.get('file') or None,
    )
