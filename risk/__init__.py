"""
Risk management module for the swap agent.

This module provides the daily swap limiter that gates swap execution.
"""

from .limiter import RiskLimiter

__all__ = [
    'RiskLimiter'
]
