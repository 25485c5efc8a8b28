"""
Solana SOL/USDC Swap Agent

An unattended agent that watches the SOL/USDC rate and rebalances the wallet
between the two assets through the Jupiter routing API, under a daily swap
cap, a slippage bound and transaction expiry.
"""

from .config import BotConfig, load_config, validate_config
from .exceptions import TradingError, ConfigError
from .state import Asset, BotState, SwapDirection
from .utils import format_currency, setup_logging

__version__ = "1.0.0"

# Expose main types for external use
__all__ = [
    "BotConfig",
    "load_config",
    "validate_config",
    "TradingError",
    "ConfigError",
    "Asset",
    "BotState",
    "SwapDirection",
    "format_currency",
    "setup_logging",
]
