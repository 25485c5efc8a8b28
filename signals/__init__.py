"""
Swap signals module.

This module contains the decision logic that turns a price observation into
a swap or no-swap decision.
"""

from .base import BaseSignal, Decision
from .threshold import ThresholdSignal, DecisionEngine

__all__ = [
    'BaseSignal',
    'Decision',
    'ThresholdSignal',
    'DecisionEngine'
]
