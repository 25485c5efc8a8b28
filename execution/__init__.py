"""
Execution module public API.

This package exposes the clients for the Jupiter routing service and the
Solana RPC, the swap executor and the confirmation monitor.
"""

from .jupiter_client import JupiterClient, Quote, UnsignedSwapTransaction  # noqa: F401
from .solana_rpc import SolanaRPC, SignatureStatus  # noqa: F401
from .confirmation import ConfirmationMonitor, OutcomeStatus, TransactionOutcome  # noqa: F401
from .simulation import SimulationPolicy, FlatGainPolicy, NoChangePolicy  # noqa: F401
from .swap_executor import SwapExecutor, SwapResult  # noqa: F401

__all__ = [
    'JupiterClient',
    'Quote',
    'UnsignedSwapTransaction',
    'SolanaRPC',
    'SignatureStatus',
    'ConfirmationMonitor',
    'OutcomeStatus',
    'TransactionOutcome',
    'SimulationPolicy',
    'FlatGainPolicy',
    'NoChangePolicy',
    'SwapExecutor',
    'SwapResult',
]
