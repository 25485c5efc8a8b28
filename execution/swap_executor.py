"""
Swap execution for the SOL/USDC agent.

This module turns a swap decision into a routed, signed and confirmed
transaction, or into a simulated fill when running in simulate mode.
"""

import logging
import time
from dataclasses import dataclass
from decimal import Decimal
from typing import Callable, Optional

from solders.keypair import Keypair
from solders.transaction import VersionedTransaction

from agent.config import BotConfig
from agent.exceptions import (
    ChainRpcError,
    ConfirmationTimedOut,
    RoutingServiceError,
    SwapExecutionFailed,
    TransactionExpired,
    TransactionRejected,
)
from agent.state import Asset, BotState, SwapDirection
from agent.utils import format_currency, short_mint, to_smallest_unit
from risk.limiter import RiskLimiter

from .confirmation import ConfirmationMonitor, OutcomeStatus, TransactionOutcome
from .jupiter_client import JupiterClient, Quote, UnsignedSwapTransaction
from .simulation import FlatGainPolicy, SimulationPolicy
from .solana_rpc import SolanaRPC


@dataclass(frozen=True)
class SwapResult:
    """A swap that completed (simulated or confirmed on chain)."""
    direction: SwapDirection
    price: Decimal
    amount: int
    quote: Quote
    simulated: bool
    balance_before: Decimal
    balance_after: Decimal
    outcome: Optional[TransactionOutcome] = None

    @property
    def signature(self) -> Optional[str]:
        return self.outcome.signature if self.outcome else None


class SwapExecutor:
    """
    Executes swaps through the routing service.

    State is only touched after a swap has completed; any failure leaves
    the holding asset, reference price and swap count as they were.
    """

    def __init__(self,
                 cfg: BotConfig,
                 jupiter: JupiterClient,
                 rpc: SolanaRPC,
                 keypair: Keypair,
                 risk_limiter: RiskLimiter,
                 monitor: Optional[ConfirmationMonitor] = None,
                 simulation_policy: Optional[SimulationPolicy] = None,
                 clock: Callable[[], float] = time.monotonic):
        """
        Initialize the executor.

        Args:
            cfg: Agent configuration
            jupiter: Routing service client
            rpc: Chain RPC wrapper
            keypair: Signing keypair
            risk_limiter: Daily swap limiter
            monitor: Confirmation monitor (default: built on ``rpc``)
            simulation_policy: Outcome policy for simulate mode (default: FlatGainPolicy)
            clock: Monotonic clock shared with the monitor deadline
        """
        self.cfg = cfg
        self.jupiter = jupiter
        self.rpc = rpc
        self.keypair = keypair
        self.risk_limiter = risk_limiter
        self.monitor = monitor or ConfirmationMonitor(rpc, clock=clock)
        self.simulation_policy = simulation_policy or FlatGainPolicy()
        self.clock = clock
        self.logger = logging.getLogger(__name__)

    def trade_amount(self, state: BotState, price: Decimal) -> int:
        """Amount of the held asset to sell, in base units."""
        if state.current_asset is Asset.BASE:
            return to_smallest_unit(state.balance_usd / price, Asset.BASE.decimals)
        return to_smallest_unit(state.balance_usd, Asset.QUOTE.decimals)

    def execute(self, state: BotState, price: Decimal) -> SwapResult:
        """
        Swap the whole holding into the other asset.

        Args:
            state: Bot state (mutated only on success)
            price: Current SOL price in USDC

        Returns:
            SwapResult

        Raises:
            DailyLimitReached: before any network call when the cap is used up
            SwapExecutionFailed: when any stage fails
        """
        self.risk_limiter.check(state)

        direction = SwapDirection.from_asset(state.current_asset)
        amount = self.trade_amount(state, price)
        if amount <= 0:
            raise SwapExecutionFailed("quote", f"nothing to swap (balance {format_currency(state.balance_usd)})")

        try:
            quote = self.jupiter.get_quote(
                direction.source.mint, direction.target.mint, amount, self.cfg.slippage_bps
            )
        except RoutingServiceError as e:
            raise SwapExecutionFailed("quote", e) from e

        self.logger.info(
            f"Swap quote received: {quote.in_amount} {short_mint(quote.input_mint)} -> "
            f"{quote.out_amount} {short_mint(quote.output_mint)}"
        )

        balance_before = state.balance_usd
        if self.cfg.simulate_mode:
            self.logger.info(f"SIMULATED SWAP: {direction}")
            outcome = None
            balance_after = self.simulation_policy.post_swap_balance(balance_before, direction, quote)
        else:
            self.logger.info(f"EXECUTING REAL SWAP: {direction}")
            outcome = self._execute_live(quote)
            self.logger.info("Swap executed successfully!")
            balance_after = balance_before

        state.record_swap(direction, price, balance_after)

        self.logger.info(f"New balance: {format_currency(state.balance_usd)} in {state.current_asset.symbol}")
        self.logger.info(f"Swaps today: {state.swap_count}/{self.cfg.max_swaps_per_day}")

        return SwapResult(
            direction=direction,
            price=price,
            amount=amount,
            quote=quote,
            simulated=self.cfg.simulate_mode,
            balance_before=balance_before,
            balance_after=state.balance_usd,
            outcome=outcome,
        )

    def sign(self, unsigned: UnsignedSwapTransaction) -> VersionedTransaction:
        """Deserialize the routed transaction and sign it with the wallet keypair."""
        try:
            tx = VersionedTransaction.from_bytes(unsigned.transaction)
        except Exception as e:
            raise SwapExecutionFailed("build", f"failed to parse transaction: {e}") from e

        try:
            return VersionedTransaction(tx.message, [self.keypair])
        except Exception as e:
            raise SwapExecutionFailed("sign", f"failed to sign transaction: {e}") from e

    def _execute_live(self, quote: Quote) -> TransactionOutcome:
        """Build, sign, submit and confirm. Returns only on confirmation."""
        try:
            unsigned = self.jupiter.build_swap_transaction(
                quote, str(self.keypair.pubkey()), self.cfg.priority_fee_lamports
            )
        except RoutingServiceError as e:
            raise SwapExecutionFailed("build", e) from e

        signed = self.sign(unsigned)

        submitted_at = self.clock()
        try:
            signature = self.rpc.send_transaction(bytes(signed))
        except ChainRpcError as e:
            raise SwapExecutionFailed("submit", e) from e
        self.logger.info(f"Transaction sent: {signature}")

        outcome = self.monitor.await_confirmation(
            signature, unsigned.last_valid_block_height, started_at=submitted_at
        )
        if outcome.status is OutcomeStatus.CONFIRMED:
            return outcome
        if outcome.status is OutcomeStatus.FAILED:
            raise TransactionRejected(f"transaction failed: {outcome.reason}", outcome)
        if outcome.status is OutcomeStatus.EXPIRED:
            raise TransactionExpired(f"transaction expired: {outcome.reason}", outcome)
        raise ConfirmationTimedOut(
            f"transaction confirmation timeout, check {outcome.signature} manually", outcome
        )
