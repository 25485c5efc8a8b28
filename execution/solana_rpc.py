"""
Solana RPC client wrapper for the swap agent.

Wraps the solana-py client with the handful of calls the agent needs and
translates every failure into ``ChainRpcError``.
"""

import logging
from dataclasses import dataclass
from typing import Optional

from solana.rpc.api import Client
from solana.rpc.commitment import Confirmed, Finalized
from solana.rpc.types import TokenAccountOpts, TxOpts
from solders.pubkey import Pubkey
from solders.signature import Signature

from agent import config
from agent.exceptions import ChainRpcError


@dataclass(frozen=True)
class SignatureStatus:
    """Chain-reported status of a submitted transaction."""
    err: Optional[str]
    confirmation_status: Optional[str]


class SolanaRPC:
    """
    Wrapper for the Solana JSON-RPC API.

    Balance reads and block height use finalized commitment.
    """

    def __init__(self, rpc_url: str = config.DEFAULT_RPC_URL, timeout: float = config.RPC_TIMEOUT,
                 client: Client = None):
        """
        Initialize the RPC wrapper.

        Args:
            rpc_url: RPC endpoint
            timeout: Request timeout in seconds
            client: Optional pre-built solana-py client
        """
        self.rpc_url = rpc_url
        self.timeout = timeout
        self.client = client or Client(rpc_url, timeout=timeout)
        self.logger = logging.getLogger(__name__)

    def _handle_api_call(self, method: str, func, *args, **kwargs):
        """Run an RPC call and translate failures."""
        try:
            return func(*args, **kwargs)
        except Exception as e:
            self.logger.debug(f"RPC call {method} failed: {e}")
            raise ChainRpcError(method, e) from e

    def get_native_balance(self, owner: str) -> int:
        """Native balance in lamports."""
        resp = self._handle_api_call(
            "getBalance",
            lambda: self.client.get_balance(Pubkey.from_string(owner), commitment=Finalized),
        )
        return int(resp.value)

    def get_token_balance(self, owner: str, mint: str) -> Optional[int]:
        """
        Raw token balance of the owner's first account for ``mint``.

        Returns:
            Balance in base units, or None when the owner has no token account
        """
        accounts = self._handle_api_call(
            "getTokenAccountsByOwner",
            lambda: self.client.get_token_accounts_by_owner(
                Pubkey.from_string(owner),
                TokenAccountOpts(mint=Pubkey.from_string(mint)),
                commitment=Finalized,
            ),
        )
        if not accounts.value:
            return None

        token_account = accounts.value[0].pubkey
        balance = self._handle_api_call(
            "getTokenAccountBalance", self.client.get_token_account_balance, token_account, commitment=Finalized
        )
        try:
            return int(balance.value.amount)
        except (TypeError, ValueError) as e:
            raise ChainRpcError("getTokenAccountBalance", e)

    def get_block_height(self) -> int:
        """Current finalized block height."""
        resp = self._handle_api_call("getBlockHeight", self.client.get_block_height, Finalized)
        return int(resp.value)

    def send_transaction(self, raw_transaction: bytes) -> str:
        """Submit a signed, serialized transaction. Returns the signature."""
        resp = self._handle_api_call(
            "sendTransaction",
            self.client.send_raw_transaction,
            raw_transaction,
            opts=TxOpts(skip_confirmation=True, preflight_commitment=Confirmed),
        )
        return str(resp.value)

    def get_signature_status(self, signature: str) -> Optional[SignatureStatus]:
        """Status of a signature, or None when the chain does not know it yet."""
        resp = self._handle_api_call(
            "getSignatureStatuses",
            lambda: self.client.get_signature_statuses(
                [Signature.from_string(signature)], search_transaction_history=True
            ),
        )
        if not resp.value or resp.value[0] is None:
            return None

        status = resp.value[0]
        confirmation = None
        if status.confirmation_status is not None:
            confirmation = str(status.confirmation_status).split(".")[-1].lower()
        return SignatureStatus(
            err=str(status.err) if status.err is not None else None,
            confirmation_status=confirmation,
        )
