"""Shared exception types for the swap agent."""

from typing import Optional


class TradingError(Exception):
    """Base class for every error raised by the agent."""


class ConfigError(TradingError):
    """Configuration or signing credential is missing or invalid. Fatal at startup."""


class RoutingServiceError(TradingError):
    """Raised when the swap-routing service cannot be reached or rejects a request."""

    def __init__(self, message: str, status_code: Optional[int] = None, body: Optional[str] = None):
        super().__init__(message)
        self.status_code = status_code
        self.body = body


class QuoteUnavailable(RoutingServiceError):
    """Raised when a usable quote cannot be obtained."""


class ChainRpcError(TradingError):
    """Raised when a Solana RPC call fails."""

    def __init__(self, method: str, original: Optional[Exception] = None):
        super().__init__(f"{method} failed: {original}")
        self.method = method
        self.original = original


class BalanceUnavailable(TradingError):
    """Raised when on-chain balances cannot be read."""


class DailyLimitReached(TradingError):
    """Raised when the daily swap cap has been used up."""

    def __init__(self, swap_count: int, max_swaps: int):
        super().__init__(f"daily swap limit reached ({swap_count}/{max_swaps})")
        self.swap_count = swap_count
        self.max_swaps = max_swaps


class SwapExecutionFailed(TradingError):
    """
    A swap aborted at a given stage.

    Stages: ``quote``, ``build``, ``sign``, ``submit``, ``confirm``.
    """

    def __init__(self, stage: str, cause):
        super().__init__(f"swap failed at {stage}: {cause}")
        self.stage = stage
        self.cause = cause


class TransactionRejected(SwapExecutionFailed):
    """The chain reported an error for the submitted transaction."""

    def __init__(self, cause, outcome=None):
        super().__init__("confirm", cause)
        self.outcome = outcome


class TransactionExpired(SwapExecutionFailed):
    """The transaction passed its last valid block height; it provably did not land."""

    def __init__(self, cause, outcome=None):
        super().__init__("confirm", cause)
        self.outcome = outcome


class ConfirmationTimedOut(SwapExecutionFailed):
    """No terminal status before the deadline. The fate of the transaction is unknown."""

    def __init__(self, cause, outcome=None):
        super().__init__("confirm", cause)
        self.outcome = outcome
