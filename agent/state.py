"""
Trading state for the swap agent.

``BotState`` is owned by the trading loop and handed to each component
explicitly. Holding asset and USD value are overwritten from chain reads
every tick; the swap fields only change through ``record_swap``.
"""

from dataclasses import dataclass, field
from datetime import datetime
from decimal import Decimal
from enum import Enum

from . import config


class Asset(Enum):
    """The two tracked assets."""
    BASE = "SOL"
    QUOTE = "USDC"

    @property
    def symbol(self) -> str:
        return self.value

    @property
    def mint(self) -> str:
        if self is Asset.BASE:
            return config.SOL_MINT
        return config.USDC_MINT

    @property
    def decimals(self) -> int:
        if self is Asset.BASE:
            return config.SOL_DECIMALS
        return config.USDC_DECIMALS

    @property
    def other(self) -> "Asset":
        if self is Asset.BASE:
            return Asset.QUOTE
        return Asset.BASE


class SwapDirection(Enum):
    """Direction of a swap between the two assets."""
    BASE_TO_QUOTE = (Asset.BASE, Asset.QUOTE)
    QUOTE_TO_BASE = (Asset.QUOTE, Asset.BASE)

    @property
    def source(self) -> Asset:
        return self.value[0]

    @property
    def target(self) -> Asset:
        return self.value[1]

    @classmethod
    def from_asset(cls, held: Asset) -> "SwapDirection":
        """Direction that sells the currently held asset."""
        if held is Asset.BASE:
            return cls.BASE_TO_QUOTE
        return cls.QUOTE_TO_BASE

    def __str__(self) -> str:
        return f"{self.source.symbol} -> {self.target.symbol}"


@dataclass
class BotState:
    """Mutable trading state. Never persisted."""
    current_asset: Asset = Asset.BASE
    balance_usd: Decimal = Decimal("0")
    last_swap_price: Decimal = Decimal("0")
    swap_count: int = 0
    window_start: datetime = field(default_factory=datetime.now)

    def __post_init__(self):
        if self.balance_usd < 0:
            raise ValueError("balance_usd must not be negative")

    @classmethod
    def initial(cls, balance_usd: Decimal, now: datetime = None) -> "BotState":
        return cls(
            current_asset=Asset.BASE,
            balance_usd=Decimal(balance_usd),
            window_start=now or datetime.now(),
        )

    @property
    def has_reference_price(self) -> bool:
        return self.last_swap_price != 0

    def apply_holdings(self, usd_value: Decimal, asset: Asset):
        """Overwrite holding asset and USD value with the reconciled chain view."""
        self.balance_usd = max(Decimal(usd_value), Decimal("0"))
        self.current_asset = asset

    def record_swap(self, direction: SwapDirection, price: Decimal, balance_usd: Decimal):
        """Apply a completed swap. All fields change together."""
        new_balance = max(Decimal(balance_usd), Decimal("0"))
        self.current_asset, self.last_swap_price, self.swap_count, self.balance_usd = (
            direction.target,
            Decimal(price),
            self.swap_count + 1,
            new_balance,
        )

    def reset_window(self, now: datetime):
        self.swap_count = 0
        self.window_start = now
