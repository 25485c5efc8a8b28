"""
Simulated swap outcomes.

In simulate mode no transaction is sent, so the post-swap balance comes from
a policy object. Policies can be swapped without touching the executor.
"""

from abc import ABC, abstractmethod
from decimal import Decimal
from typing import Optional

from agent.state import SwapDirection

from .jupiter_client import Quote


class SimulationPolicy(ABC):
    """Produces the balance after a simulated swap."""

    @abstractmethod
    def post_swap_balance(self, balance_usd: Decimal, direction: SwapDirection, quote: Quote) -> Decimal:
        """
        Args:
            balance_usd: Balance before the swap
            direction: Swap direction
            quote: Execution quote the swap would have used

        Returns:
            Balance after the swap in USD
        """
        pass


class FlatGainPolicy(SimulationPolicy):
    """
    Apply a fixed multiplier on one leg and leave the other leg unchanged.

    The defaults (+3% on SOL -> USDC only) reproduce the agent's historical
    simulation behaviour.
    """

    def __init__(self, gain: Decimal = Decimal("0.03"),
                 direction: Optional[SwapDirection] = SwapDirection.BASE_TO_QUOTE):
        self.gain = Decimal(gain)
        self.direction = direction

    def post_swap_balance(self, balance_usd, direction, quote):
        if self.direction is None or direction is self.direction:
            return balance_usd * (Decimal(1) + self.gain)
        return balance_usd


class NoChangePolicy(SimulationPolicy):
    """Balance is carried over unchanged."""

    def post_swap_balance(self, balance_usd, direction, quote):
        return balance_usd
