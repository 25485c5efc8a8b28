"""
Threshold swap signal.

Swaps out of SOL after it rallies by at least the minimum threshold since
the last swap, and back into SOL after it falls by the same amount.
"""

from decimal import Decimal

from agent.state import Asset, BotState, SwapDirection
from agent.utils import percent_change

from .base import BaseSignal, Decision


class ThresholdSignal(BaseSignal):
    """
    Percentage-move signal relative to the last swap price.

    Only the minimum threshold gates the decision. The maximum threshold is
    carried in ``params`` for reporting and is not evaluated.
    """

    def __init__(self, min_threshold_percent: Decimal, max_threshold_percent: Decimal = None):
        """
        Initialize the signal.

        Args:
            min_threshold_percent: Minimum move (in percent) that triggers a swap
            max_threshold_percent: Configured maximum move (not evaluated)
        """
        params = {
            'min_threshold_percent': Decimal(min_threshold_percent),
            'max_threshold_percent': max_threshold_percent,
        }
        super().__init__("threshold", params)
        self.min_threshold = Decimal(min_threshold_percent)

    def evaluate(self, state: BotState, price: Decimal) -> Decision:
        # first observation only sets the reference price
        if not state.has_reference_price:
            state.last_swap_price = Decimal(price)
            return self._remember(Decision.no_swap("Initial price set"))

        last = state.last_swap_price
        change = percent_change(Decimal(price), last)

        if state.current_asset is Asset.BASE and change >= self.min_threshold:
            return self._remember(Decision.swap(
                SwapDirection.BASE_TO_QUOTE,
                f"SOL price increased by {change:.2f}% ({last:.2f} -> {price:.2f}), swapping to USDC",
                change,
            ))

        if state.current_asset is Asset.QUOTE and change <= -self.min_threshold:
            return self._remember(Decision.swap(
                SwapDirection.QUOTE_TO_BASE,
                f"SOL price decreased by {change:.2f}% ({last:.2f} -> {price:.2f}), swapping to SOL",
                change,
            ))

        return self._remember(
            Decision.no_swap(f"Price change {change:.2f}% doesn't meet swap criteria (threshold not met)", change)
        )


# Name used by the scheduler
DecisionEngine = ThresholdSignal
