"""
Base signal class for swap decisions.
"""

from abc import ABC, abstractmethod
from dataclasses import dataclass
from datetime import datetime
from decimal import Decimal
from typing import Any, Dict, Optional

from agent.state import BotState, SwapDirection


@dataclass(frozen=True)
class Decision:
    """Outcome of evaluating a price against the bot state."""
    should_swap: bool
    reason: str
    direction: Optional[SwapDirection] = None
    change_percent: Optional[Decimal] = None

    @classmethod
    def no_swap(cls, reason: str, change_percent: Optional[Decimal] = None) -> "Decision":
        return cls(should_swap=False, reason=reason, change_percent=change_percent)

    @classmethod
    def swap(cls, direction: SwapDirection, reason: str, change_percent: Decimal) -> "Decision":
        return cls(should_swap=True, reason=reason, direction=direction, change_percent=change_percent)


class BaseSignal(ABC):
    """
    Abstract base class for swap signals.

    All signals must implement the evaluate method and provide
    a consistent interface for decision making.
    """

    def __init__(self, name: str, params: Dict[str, Any]):
        """
        Initialize the signal.

        Args:
            name: Name of the signal
            params: Dictionary of signal parameters
        """
        self.name = name
        self.params = params
        self.last_decision = None
        self.last_timestamp = None

    @abstractmethod
    def evaluate(self, state: BotState, price: Decimal) -> Decision:
        """
        Decide whether to swap at the given price.

        Args:
            state: Current bot state
            price: Current SOL price in USDC

        Returns:
            Decision
        """
        pass

    def _remember(self, decision: Decision) -> Decision:
        self.last_decision = decision
        self.last_timestamp = datetime.now()
        return decision

    def get_signal_info(self) -> Dict[str, Any]:
        """
        Get information about the signal.

        Returns:
            Dictionary with signal name, parameters, and last decision
        """
        return {
            'name': self.name,
            'params': self.params,
            'last_decision': self.last_decision,
            'last_timestamp': self.last_timestamp
        }
