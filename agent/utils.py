"""
Utility functions for the swap agent.
"""

import logging
import os
from decimal import Decimal, ROUND_DOWN
from typing import Union

from rich.console import Console
from rich.logging import RichHandler

# Set up rich console
console = Console()


def setup_logging(level: str = "INFO", log_file: str = "logs/swap_agent.log") -> logging.Logger:
    """Set up logging configuration."""
    log_dir = os.path.dirname(log_file)
    if log_dir:
        os.makedirs(log_dir, exist_ok=True)

    logging.basicConfig(
        level=getattr(logging, level.upper(), logging.INFO),
        format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
        handlers=[
            RichHandler(console=console, rich_tracebacks=True),
            logging.FileHandler(log_file, mode='a')
        ],
        force=True,
    )

    return logging.getLogger("agent")


def to_smallest_unit(amount: Union[Decimal, int, str], decimals: int) -> int:
    """Convert a whole-unit amount to integer base units, rounding down."""
    scaled = Decimal(str(amount)) * (Decimal(10) ** decimals)
    return int(scaled.quantize(Decimal("1"), rounding=ROUND_DOWN))


def from_smallest_unit(amount: Union[int, str], decimals: int) -> Decimal:
    """Convert integer base units to a whole-unit Decimal."""
    return Decimal(int(amount)) / (Decimal(10) ** decimals)


def format_currency(amount: Decimal, currency: str = "USD") -> str:
    """Format a decimal amount as currency."""
    if currency == "USD":
        return f"${amount:,.2f}"
    else:
        return f"{amount} {currency}"


def percent_change(current: Decimal, reference: Decimal) -> Decimal:
    """Percentage move from reference to current."""
    return (current - reference) / reference * Decimal(100)


def short_mint(mint: str) -> str:
    return mint[:8] + "..."
