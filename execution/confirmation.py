"""
Transaction confirmation tracking.

A submitted transaction is polled until it reaches exactly one terminal
state: confirmed, failed, expired or timed out.
"""

import logging
import time
from dataclasses import dataclass
from enum import Enum
from typing import Callable, Optional

from agent import config
from agent.exceptions import ChainRpcError

from .solana_rpc import SolanaRPC


class OutcomeStatus(Enum):
    """Terminal transaction states."""
    CONFIRMED = "confirmed"
    FAILED = "failed"
    EXPIRED = "expired"
    TIMED_OUT = "timed_out"


@dataclass(frozen=True)
class TransactionOutcome:
    """Result of waiting on a submitted transaction."""
    status: OutcomeStatus
    signature: str
    reason: Optional[str] = None
    confirmation_status: Optional[str] = None
    block_height: Optional[int] = None

    @property
    def confirmed(self) -> bool:
        return self.status is OutcomeStatus.CONFIRMED


class ConfirmationMonitor:
    """
    Polls signature status and block height for a submitted transaction.

    Expiry means the chain moved past the transaction's last valid block
    height, so it can no longer land. A timeout means the deadline ran out
    first and the fate of the transaction is unknown.
    """

    def __init__(self,
                 rpc: SolanaRPC,
                 poll_interval: float = config.CONFIRM_POLL_INTERVAL,
                 timeout: float = config.CONFIRM_TIMEOUT,
                 clock: Callable[[], float] = time.monotonic,
                 sleep: Callable[[float], None] = time.sleep):
        """
        Initialize the monitor.

        Args:
            rpc: Chain RPC wrapper
            poll_interval: Seconds between polls
            timeout: Overall deadline in seconds
            clock: Monotonic clock
            sleep: Sleep function
        """
        self.rpc = rpc
        self.poll_interval = poll_interval
        self.timeout = timeout
        self.clock = clock
        self.sleep = sleep
        self.logger = logging.getLogger(__name__)

    def await_confirmation(self,
                           signature: str,
                           last_valid_block_height: int,
                           started_at: Optional[float] = None) -> TransactionOutcome:
        """
        Wait for the transaction to reach a terminal state.

        Args:
            signature: Transaction signature
            last_valid_block_height: Height beyond which the transaction cannot land
            started_at: Clock reading the deadline counts from (default: now)

        Returns:
            TransactionOutcome
        """
        start = self.clock() if started_at is None else started_at
        deadline = start + self.timeout
        self.logger.info("Waiting for transaction confirmation...")

        try:
            initial_height = self.rpc.get_block_height()
            self.logger.debug(f"Block height at submission: {initial_height} (last valid: {last_valid_block_height})")
        except ChainRpcError as e:
            self.logger.warning(f"Failed to get initial block height: {e}")

        while True:
            remaining = deadline - self.clock()
            if remaining <= 0:
                break
            self.sleep(min(self.poll_interval, remaining))
            if self.clock() >= deadline:
                break

            outcome = self._poll(signature, last_valid_block_height)
            if outcome is not None:
                return outcome

        self.logger.warning(f"Transaction confirmation timeout: {signature}")
        return TransactionOutcome(
            status=OutcomeStatus.TIMED_OUT,
            signature=signature,
            reason=f"no terminal status within {self.timeout:.0f}s",
        )

    def _poll(self, signature: str, last_valid_block_height: int) -> Optional[TransactionOutcome]:
        """One status check. Returns None when the transaction is still pending."""
        try:
            status = self.rpc.get_signature_status(signature)
        except ChainRpcError as e:
            self.logger.warning(f"Error checking transaction status: {e}")
            return None

        if status is not None:
            if status.err:
                self.logger.error(f"Transaction failed: {status.err}")
                return TransactionOutcome(
                    status=OutcomeStatus.FAILED,
                    signature=signature,
                    reason=status.err,
                )
            if status.confirmation_status:
                self.logger.info(f"Transaction confirmed with status: {status.confirmation_status}")
                return TransactionOutcome(
                    status=OutcomeStatus.CONFIRMED,
                    signature=signature,
                    confirmation_status=status.confirmation_status,
                )

        try:
            current_height = self.rpc.get_block_height()
        except ChainRpcError as e:
            self.logger.warning(f"Error getting current block height: {e}")
            return None

        if current_height > last_valid_block_height:
            self.logger.error(
                f"Transaction expired (current block: {current_height}, last valid: {last_valid_block_height})"
            )
            return TransactionOutcome(
                status=OutcomeStatus.EXPIRED,
                signature=signature,
                reason=f"current block {current_height} > last valid {last_valid_block_height}",
                block_height=current_height,
            )
        return None
