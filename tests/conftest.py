"""
Shared fixtures for the swap agent tests.
"""

from datetime import datetime
from decimal import Decimal
from unittest.mock import MagicMock

import base58
import pytest
from solders.hash import Hash
from solders.keypair import Keypair
from solders.message import MessageV0
from solders.pubkey import Pubkey
from solders.signature import Signature
from solders.system_program import TransferParams, transfer
from solders.transaction import VersionedTransaction

from agent.config import SOL_MINT, USDC_MINT, BotConfig
from agent.state import Asset, BotState
from execution.jupiter_client import Quote, UnsignedSwapTransaction


class FakeClock:
    """Monotonic clock that only moves when sleep is called."""

    def __init__(self, start: float = 0.0):
        self.now = start
        self.sleeps = []

    def __call__(self) -> float:
        return self.now

    def sleep(self, seconds: float):
        self.sleeps.append(seconds)
        self.now += seconds


def make_quote(input_mint=SOL_MINT, output_mint=USDC_MINT, in_amount=1_000_000_000, out_amount=195_370_000,
               slippage_bps=50) -> Quote:
    raw = {
        "inputMint": input_mint,
        "inAmount": str(in_amount),
        "outputMint": output_mint,
        "outAmount": str(out_amount),
        "otherAmountThreshold": str(out_amount - out_amount * slippage_bps // 10_000),
        "swapMode": "ExactIn",
        "slippageBps": slippage_bps,
        "routePlan": [],
    }
    return Quote.from_response(raw)


def make_unsigned_transaction(payer: Pubkey, last_valid_block_height: int = 500) -> UnsignedSwapTransaction:
    """A real v0 transaction with an empty signature slot, as the router returns it."""
    ix = transfer(TransferParams(from_pubkey=payer, to_pubkey=Keypair().pubkey(), lamports=1_000))
    message = MessageV0.try_compile(payer, [ix], [], Hash.default())
    tx = VersionedTransaction.populate(message, [Signature.default()])
    return UnsignedSwapTransaction(transaction=bytes(tx), last_valid_block_height=last_valid_block_height)


@pytest.fixture
def clock():
    return FakeClock()


@pytest.fixture
def keypair():
    return Keypair()


@pytest.fixture
def private_key(keypair):
    return base58.b58encode(bytes(keypair)).decode()


@pytest.fixture
def cfg(keypair, private_key):
    return BotConfig(
        wallet_address=str(keypair.pubkey()),
        private_key=private_key,
        initial_balance_usd=Decimal("100"),
        price_check_interval_seconds=60,
        swap_threshold_min_percent=Decimal("3.0"),
        swap_threshold_max_percent=Decimal("5.0"),
        max_swaps_per_day=3,
        slippage_bps=50,
        simulate_mode=True,
        priority_fee_lamports=10_000,
    )


@pytest.fixture
def state():
    return BotState(
        current_asset=Asset.BASE,
        balance_usd=Decimal("100"),
        last_swap_price=Decimal("0"),
        swap_count=0,
        window_start=datetime(2024, 1, 1, 12, 0, 0),
    )


@pytest.fixture
def rpc():
    return MagicMock()


@pytest.fixture
def jupiter():
    return MagicMock()
