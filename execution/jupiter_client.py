"""
Jupiter swap-routing API client.

Thin wrapper around the v6 quote and swap endpoints. Quotes are returned as
``Quote`` objects that keep the raw response, because the swap endpoint
expects the quote echoed back verbatim.
"""

import base64
import binascii
import logging
from dataclasses import dataclass, field
from typing import Any, Dict, Optional

import requests

from agent import config
from agent.exceptions import QuoteUnavailable, RoutingServiceError


@dataclass(frozen=True)
class Quote:
    """Exchange terms proposed by the routing service."""
    input_mint: str
    in_amount: int
    output_mint: str
    out_amount: int
    other_amount_threshold: int
    swap_mode: str
    slippage_bps: int
    raw: Dict[str, Any] = field(default_factory=dict, compare=False, repr=False)

    @classmethod
    def from_response(cls, data: Any) -> "Quote":
        """
        Parse a quote response body.

        Raises:
            QuoteUnavailable: if a field is missing or an amount is not an integer
        """
        if not isinstance(data, dict):
            raise QuoteUnavailable(f"malformed quote response: {data!r}")
        if "error" in data and "outAmount" not in data:
            raise QuoteUnavailable(f"quote rejected: {data['error']}")
        try:
            return cls(
                input_mint=str(data["inputMint"]),
                in_amount=int(data["inAmount"]),
                output_mint=str(data["outputMint"]),
                out_amount=int(data["outAmount"]),
                other_amount_threshold=int(data.get("otherAmountThreshold", 0)),
                swap_mode=str(data.get("swapMode", "ExactIn")),
                slippage_bps=int(data.get("slippageBps", 0)),
                raw=data,
            )
        except KeyError as e:
            raise QuoteUnavailable(f"quote response missing field {e}")
        except (TypeError, ValueError) as e:
            raise QuoteUnavailable(f"failed to parse output amount: {e}")


@dataclass(frozen=True)
class UnsignedSwapTransaction:
    """Serialized transaction built by the routing service, not yet signed."""
    transaction: bytes
    last_valid_block_height: int


class JupiterClient:
    """
    Client for the Jupiter quote and swap endpoints.

    Every request carries a timeout; there are no retries.
    """

    def __init__(self,
                 quote_url: str = config.JUPITER_QUOTE_API,
                 swap_url: str = config.JUPITER_SWAP_API,
                 timeout: float = config.HTTP_TIMEOUT,
                 session: Optional[requests.Session] = None):
        """
        Initialize the client.

        Args:
            quote_url: Quote endpoint (GET)
            swap_url: Swap-build endpoint (POST)
            timeout: Per-request timeout in seconds
            session: Optional requests session (a new one is created by default)
        """
        self.quote_url = quote_url
        self.swap_url = swap_url
        self.timeout = timeout
        self.session = session or requests.Session()
        self.logger = logging.getLogger(__name__)

    def get_quote(self, input_mint: str, output_mint: str, amount: int, slippage_bps: int) -> Quote:
        """
        Request a quote for swapping ``amount`` base units of ``input_mint``.

        Raises:
            QuoteUnavailable: on transport error, bad status or malformed body
        """
        params = {
            "inputMint": input_mint,
            "outputMint": output_mint,
            "amount": int(amount),
            "slippageBps": int(slippage_bps),
        }
        try:
            response = self.session.get(self.quote_url, params=params, timeout=self.timeout)
        except requests.RequestException as e:
            raise QuoteUnavailable(f"failed to get quote: {e}")

        if response.status_code != 200:
            raise QuoteUnavailable(
                f"quote API returned status {response.status_code}: {response.text}",
                status_code=response.status_code,
                body=response.text,
            )

        try:
            data = response.json()
        except ValueError as e:
            raise QuoteUnavailable(f"failed to parse quote response: {e}")

        return Quote.from_response(data)

    def build_swap_transaction(self,
                               quote: Quote,
                               user_public_key: str,
                               priority_fee_lamports: int = 0) -> UnsignedSwapTransaction:
        """
        Ask the routing service to build the swap transaction for a quote.

        Raises:
            RoutingServiceError: on transport error, non-200 status or malformed body
        """
        payload = {
            "quoteResponse": quote.raw,
            "userPublicKey": user_public_key,
            "wrapAndUnwrapSol": True,
            "dynamicComputeUnitLimit": True,
        }
        if priority_fee_lamports:
            payload["priorityFeeLamports"] = int(priority_fee_lamports)

        try:
            response = self.session.post(self.swap_url, json=payload, timeout=self.timeout)
        except requests.RequestException as e:
            raise RoutingServiceError(f"failed to call swap API: {e}")

        if response.status_code != 200:
            raise RoutingServiceError(
                f"swap API returned status {response.status_code}: {response.text}",
                status_code=response.status_code,
                body=response.text,
            )

        try:
            data = response.json()
            encoded = data["swapTransaction"]
            last_valid = int(data["lastValidBlockHeight"])
        except (ValueError, KeyError, TypeError) as e:
            raise RoutingServiceError(f"failed to parse swap response: {e}")

        try:
            tx_bytes = base64.b64decode(encoded, validate=True)
        except (binascii.Error, TypeError) as e:
            raise RoutingServiceError(f"failed to decode transaction: {e}")

        self.logger.debug(f"Swap transaction built ({len(tx_bytes)} bytes, last valid block {last_valid})")
        return UnsignedSwapTransaction(transaction=tx_bytes, last_valid_block_height=last_valid)
