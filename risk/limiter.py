"""
Daily swap limiter.

Counts swaps inside a rolling 24-hour window and blocks further swaps once
the configured cap is reached. The counter lives in memory only.
"""

import logging
from datetime import datetime, timedelta
from typing import Any, Dict

from agent.exceptions import DailyLimitReached
from agent.state import BotState


class RiskLimiter:
    """
    Gate for the number of swaps per day.

    The window opens at ``BotState.window_start`` and is reset lazily, once
    per tick, by ``maybe_reset``.
    """

    def __init__(self, max_swaps_per_day: int, window: timedelta = timedelta(hours=24)):
        """
        Initialize the limiter.

        Args:
            max_swaps_per_day: Maximum swaps allowed inside one window
            window: Window length (default: 24 hours)
        """
        self.max_swaps_per_day = max_swaps_per_day
        self.window = window
        self.logger = logging.getLogger(__name__)

    def maybe_reset(self, state: BotState, now: datetime) -> bool:
        """
        Start a new window if the current one is at least ``window`` old.

        Returns:
            True if the counter was reset
        """
        if now - state.window_start >= self.window:
            state.reset_window(now)
            self.logger.info("Daily swap count reset")
            return True
        return False

    def remaining(self, state: BotState) -> int:
        return max(self.max_swaps_per_day - state.swap_count, 0)

    def allows_swap(self, state: BotState) -> bool:
        return state.swap_count < self.max_swaps_per_day

    def check(self, state: BotState):
        """Raise DailyLimitReached when no swaps are left in the window."""
        if not self.allows_swap(state):
            raise DailyLimitReached(state.swap_count, self.max_swaps_per_day)

    def get_limit_info(self, state: BotState) -> Dict[str, Any]:
        return {
            'swap_count': state.swap_count,
            'max_swaps_per_day': self.max_swaps_per_day,
            'remaining': self.remaining(state),
            'window_start': state.window_start,
            'window_end': state.window_start + self.window,
        }
