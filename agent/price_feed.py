"""
SOL price sampling through the routing service.
"""

from decimal import Decimal

from execution.jupiter_client import JupiterClient

from .exceptions import QuoteUnavailable
from .state import Asset
from .utils import from_smallest_unit

# 1 SOL in lamports
REFERENCE_AMOUNT = 10 ** Asset.BASE.decimals


class PriceFeed:
    """Samples the SOL/USDC rate by quoting 1 SOL into USDC."""

    def __init__(self, jupiter: JupiterClient, slippage_bps: int, reference_amount: int = REFERENCE_AMOUNT):
        self.jupiter = jupiter
        self.slippage_bps = slippage_bps
        self.reference_amount = reference_amount

    def sample(self) -> Decimal:
        """
        Current price of one SOL in USDC.

        Raises:
            QuoteUnavailable: if the quote cannot be fetched, parsed or has no output
        """
        quote = self.jupiter.get_quote(
            Asset.BASE.mint, Asset.QUOTE.mint, self.reference_amount, self.slippage_bps
        )
        if quote.out_amount <= 0:
            raise QuoteUnavailable(f"non-positive output amount {quote.out_amount} for price quote")
        out_amount = from_smallest_unit(quote.out_amount, Asset.QUOTE.decimals)
        # scale back to one whole SOL if a different reference amount is used
        reference = from_smallest_unit(self.reference_amount, Asset.BASE.decimals)
        return out_amount / reference
