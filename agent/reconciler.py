"""
On-chain balance reconciliation.

The chain is the source of truth for what the wallet holds. Every tick the
reconciler reads both balances and decides which asset is dominant.
"""

import logging
from dataclasses import dataclass
from decimal import Decimal

from execution.solana_rpc import SolanaRPC

from .exceptions import BalanceUnavailable, ChainRpcError
from .state import Asset
from .utils import format_currency, from_smallest_unit

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class Holdings:
    """Wallet balances and the USD value of the dominant asset."""
    base_balance: Decimal
    quote_balance: Decimal
    usd_value: Decimal
    asset: Asset


def resolve_holding(base_balance: Decimal, quote_balance: Decimal, price: Decimal) -> Holdings:
    """
    Pick the dominant asset and its USD value.

    SOL wins when its USD value exceeds the USDC balance; otherwise USDC wins
    if there is any; an empty wallet counts as SOL.
    """
    base_usd = base_balance * price
    if base_usd > quote_balance:
        return Holdings(base_balance, quote_balance, base_usd, Asset.BASE)
    elif quote_balance > 0:
        return Holdings(base_balance, quote_balance, quote_balance, Asset.QUOTE)
    return Holdings(base_balance, quote_balance, base_usd, Asset.BASE)


class BalanceReconciler:
    """Reads SOL and USDC balances for the wallet."""

    def __init__(self, rpc: SolanaRPC, wallet_address: str):
        self.rpc = rpc
        self.wallet_address = wallet_address

    def get_base_balance(self) -> Decimal:
        lamports = self.rpc.get_native_balance(self.wallet_address)
        return from_smallest_unit(lamports, Asset.BASE.decimals)

    def get_quote_balance(self) -> Decimal:
        raw = self.rpc.get_token_balance(self.wallet_address, Asset.QUOTE.mint)
        if raw is None:
            # no USDC token account yet
            return Decimal("0")
        return from_smallest_unit(raw, Asset.QUOTE.decimals)

    def reconcile(self, price: Decimal) -> Holdings:
        """
        Read balances and value them at ``price``.

        Raises:
            BalanceUnavailable: if either balance read fails
        """
        try:
            base_balance = self.get_base_balance()
        except ChainRpcError as e:
            raise BalanceUnavailable(f"failed to get SOL balance: {e}") from e
        try:
            quote_balance = self.get_quote_balance()
        except ChainRpcError as e:
            raise BalanceUnavailable(f"failed to get USDC balance: {e}") from e

        holdings = resolve_holding(base_balance, quote_balance, Decimal(price))
        logger.debug(
            f"Balances: {base_balance} SOL, {quote_balance} USDC -> "
            f"{holdings.asset.symbol} {format_currency(holdings.usd_value)}"
        )
        return holdings
