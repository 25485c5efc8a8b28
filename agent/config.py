"""
Configuration for the SOL/USDC swap agent.
"""

import logging
import os
from dataclasses import dataclass, replace
from decimal import Decimal, InvalidOperation
from typing import Any, Dict, Optional

import base58
import yaml
from dotenv import load_dotenv
from solders.keypair import Keypair
from solders.pubkey import Pubkey

from .exceptions import ConfigError

# Load environment variables from .env file
load_dotenv()

logger = logging.getLogger(__name__)

# Token mints
SOL_MINT = "So11111111111111111111111111111111111111112"
USDC_MINT = "EPjFWdd5AufqSSqeM2qN1xzybapC8G4wEGGkZwyTDt1v"

SOL_DECIMALS = 9
USDC_DECIMALS = 6

# Routing service
JUPITER_QUOTE_API = "https://quote-api.jup.ag/v6/quote"
JUPITER_SWAP_API = "https://quote-api.jup.ag/v6/swap"

DEFAULT_RPC_URL = "https://api.mainnet-beta.solana.com"
DEFAULT_CONFIG_FILE = "config.yml"
PLACEHOLDER_PRIVATE_KEY = "YOUR_PRIVATE_KEY_HERE"

# Timeouts (seconds)
HTTP_TIMEOUT = 10
RPC_TIMEOUT = 10
CONFIRM_TIMEOUT = 30
CONFIRM_POLL_INTERVAL = 2


@dataclass(frozen=True)
class BotConfig:
    """Immutable agent configuration. Built once at startup."""

    wallet_address: str
    private_key: str
    rpc_url: str = DEFAULT_RPC_URL
    initial_balance_usd: Decimal = Decimal("0")
    price_check_interval_seconds: int = 60
    swap_threshold_min_percent: Decimal = Decimal("3.0")
    swap_threshold_max_percent: Decimal = Decimal("5.0")
    max_swaps_per_day: int = 3
    slippage_bps: int = 50
    simulate_mode: bool = True
    priority_fee_lamports: int = 0
    quote_api_url: str = JUPITER_QUOTE_API
    swap_api_url: str = JUPITER_SWAP_API
    log_level: str = "INFO"
    log_file: str = "logs/swap_agent.log"

    def __repr__(self) -> str:
        # never leak the signing key into logs or tracebacks
        return (
            f"BotConfig(wallet_address={self.wallet_address!r}, rpc_url={self.rpc_url!r}, "
            f"simulate_mode={self.simulate_mode})"
        )


def load_yaml_config(file_path: str) -> dict:
    """Load YAML configuration from a file safely."""
    try:
        with open(file_path, 'r', encoding='utf-8') as file:
            data = yaml.safe_load(file)
    except FileNotFoundError:
        raise ConfigError(f"Configuration file {file_path} not found.")
    except yaml.YAMLError as e:
        raise ConfigError(f"Error parsing YAML file {file_path}: {e}")

    if data is None:
        return {}
    if not isinstance(data, dict):
        raise ConfigError(f"Configuration file {file_path} must contain a mapping")
    return data


def _as_bool(value: Any) -> bool:
    if isinstance(value, bool):
        return value
    return str(value).strip().lower() in ("1", "true", "yes", "on")


def _as_decimal(name: str, value: Any) -> Decimal:
    try:
        result = Decimal(str(value))
    except InvalidOperation:
        raise ConfigError(f"{name} must be numeric, got {value!r}")
    if not result.is_finite():
        raise ConfigError(f"{name} must be a finite number, got {value!r}")
    return result


def _as_int(name: str, value: Any) -> int:
    if isinstance(value, float) and not value.is_integer():
        raise ConfigError(f"{name} must be a whole number, got {value!r}")
    try:
        return int(value)
    except (TypeError, ValueError, OverflowError):
        raise ConfigError(f"{name} must be an integer, got {value!r}")


def _env_overrides() -> Dict[str, Any]:
    """Collect settings supplied through the environment."""
    mapping = {
        "SOLANA_PRIVATE_KEY": "private_key",
        "SOLANA_RPC_URL": "rpc_url",
        "WALLET_ADDRESS": "wallet_address",
        "SIMULATE_MODE": "simulate_mode",
        "LOG_LEVEL": "log_level",
        "LOG_FILE": "log_file",
    }
    return {key: os.environ[env] for env, key in mapping.items() if os.getenv(env)}


def build_config(raw: Dict[str, Any]) -> BotConfig:
    """
    Build a BotConfig from a raw mapping.

    Accepts the original JSON key names, including
    ``priority_fee_microlamports`` as an alias for ``priority_fee_lamports``.
    """
    data = dict(raw)
    if "priority_fee_lamports" not in data and "priority_fee_microlamports" in data:
        data["priority_fee_lamports"] = data.pop("priority_fee_microlamports")

    defaults = BotConfig(wallet_address="", private_key="")
    return BotConfig(
        wallet_address=str(data.get("wallet_address") or "").strip(),
        private_key=str(data.get("private_key") or "").strip(),
        rpc_url=str(data.get("rpc_url") or defaults.rpc_url),
        initial_balance_usd=_as_decimal(
            "initial_balance_usd", data.get("initial_balance_usd", defaults.initial_balance_usd)),
        price_check_interval_seconds=_as_int(
            "price_check_interval_seconds",
            data.get("price_check_interval_seconds", defaults.price_check_interval_seconds)),
        swap_threshold_min_percent=_as_decimal(
            "swap_threshold_min_percent",
            data.get("swap_threshold_min_percent", defaults.swap_threshold_min_percent)),
        swap_threshold_max_percent=_as_decimal(
            "swap_threshold_max_percent",
            data.get("swap_threshold_max_percent", defaults.swap_threshold_max_percent)),
        max_swaps_per_day=_as_int("max_swaps_per_day", data.get("max_swaps_per_day", defaults.max_swaps_per_day)),
        slippage_bps=_as_int("slippage_bps", data.get("slippage_bps", defaults.slippage_bps)),
        simulate_mode=_as_bool(data.get("simulate_mode", defaults.simulate_mode)),
        priority_fee_lamports=_as_int(
            "priority_fee_lamports", data.get("priority_fee_lamports", defaults.priority_fee_lamports)),
        quote_api_url=str(data.get("quote_api_url") or defaults.quote_api_url),
        swap_api_url=str(data.get("swap_api_url") or defaults.swap_api_url),
        log_level=str(data.get("log_level") or defaults.log_level).upper(),
        log_file=str(data.get("log_file") or defaults.log_file),
    )


def load_config(file_path: str = DEFAULT_CONFIG_FILE, simulate: Optional[bool] = None) -> BotConfig:
    """Load the config file, apply environment overrides and validate the result."""
    raw = load_yaml_config(file_path)
    raw.update(_env_overrides())
    cfg = build_config(raw)
    if simulate is not None:
        cfg = replace(cfg, simulate_mode=simulate)
    validate_config(cfg)
    return cfg


def parse_wallet_address(address: str) -> Pubkey:
    """Parse a base58 wallet address, raising ConfigError if it is malformed."""
    try:
        return Pubkey.from_string(address)
    except ValueError as e:
        raise ConfigError(f"invalid wallet_address {address!r}: {e}")


def validate_config(cfg: BotConfig):
    """Validate configuration settings."""
    if not cfg.private_key or cfg.private_key == PLACEHOLDER_PRIVATE_KEY:
        raise ConfigError("Please set your private key in the config file or SOLANA_PRIVATE_KEY")
    if cfg.wallet_address:
        parse_wallet_address(cfg.wallet_address)
    if cfg.price_check_interval_seconds <= 0:
        raise ConfigError("price_check_interval_seconds must be positive")
    if cfg.swap_threshold_min_percent <= 0:
        raise ConfigError("swap_threshold_min_percent must be positive")
    if cfg.swap_threshold_max_percent < cfg.swap_threshold_min_percent:
        raise ConfigError("swap_threshold_max_percent must be >= swap_threshold_min_percent")
    if cfg.max_swaps_per_day < 0:
        raise ConfigError("max_swaps_per_day must not be negative")
    if not 0 <= cfg.slippage_bps <= 10_000:
        raise ConfigError("slippage_bps must be between 0 and 10000")
    if cfg.initial_balance_usd < 0:
        raise ConfigError("initial_balance_usd must not be negative")
    if cfg.priority_fee_lamports < 0:
        raise ConfigError("priority_fee_lamports must not be negative")


def load_keypair(cfg: BotConfig) -> Keypair:
    """
    Decode the base58 private key into a signing keypair.

    The key must decode to exactly 64 bytes. A configured wallet address that
    does not match the derived public key is reported but not fatal.
    """
    try:
        key_bytes = base58.b58decode(cfg.private_key)
    except ValueError as e:
        raise ConfigError(f"invalid base58 private key: {e}")

    if len(key_bytes) != 64:
        raise ConfigError(f"private key decoded to {len(key_bytes)} bytes, expected 64")

    try:
        keypair = Keypair.from_bytes(key_bytes)
    except ValueError as e:
        raise ConfigError(f"invalid private key: {e}")
    logger.info("Successfully loaded wallet from base58 private key")

    derived = str(keypair.pubkey())
    if cfg.wallet_address and parse_wallet_address(cfg.wallet_address) != keypair.pubkey():
        logger.warning(
            f"Generated public key ({derived}) doesn't match provided wallet address "
            f"({cfg.wallet_address}); balances are read from the configured address"
        )
    return keypair
