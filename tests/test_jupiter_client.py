"""
Unit tests for the Jupiter client and the price feed.
"""

import base64
from decimal import Decimal
from unittest.mock import Mock

import pytest
import requests

from agent.config import SOL_MINT, USDC_MINT
from agent.exceptions import QuoteUnavailable, RoutingServiceError
from agent.price_feed import PriceFeed
from execution.jupiter_client import JupiterClient, Quote

from conftest import make_quote

QUOTE_BODY = {
    "inputMint": SOL_MINT,
    "inAmount": "1000000000",
    "outputMint": USDC_MINT,
    "outAmount": "195370000",
    "otherAmountThreshold": "194393150",
    "swapMode": "ExactIn",
    "slippageBps": 50,
    "routePlan": [{"percent": 100}],
}


def mock_response(status_code=200, json_data=None, text="", json_error=None):
    response = Mock()
    response.status_code = status_code
    response.text = text
    if json_error is not None:
        response.json.side_effect = json_error
    else:
        response.json.return_value = json_data
    return response


@pytest.fixture
def session():
    return Mock(spec=requests.Session)


@pytest.fixture
def client(session):
    return JupiterClient("https://quote.test/v6/quote", "https://quote.test/v6/swap", timeout=10, session=session)


class TestQuoteParsing:
    """Test Quote.from_response."""

    def test_parse(self):
        quote = Quote.from_response(QUOTE_BODY)
        assert quote.in_amount == 1_000_000_000
        assert quote.out_amount == 195_370_000
        assert quote.other_amount_threshold == 194_393_150
        assert quote.slippage_bps == 50
        assert quote.raw["routePlan"] == [{"percent": 100}]

    def test_non_numeric_out_amount(self):
        with pytest.raises(QuoteUnavailable):
            Quote.from_response(dict(QUOTE_BODY, outAmount="lots"))

    def test_missing_field(self):
        body = dict(QUOTE_BODY)
        del body["outAmount"]
        with pytest.raises(QuoteUnavailable):
            Quote.from_response(body)

    def test_error_body(self):
        with pytest.raises(QuoteUnavailable, match="rejected"):
            Quote.from_response({"error": "No routes found"})

    def test_not_a_mapping(self):
        with pytest.raises(QuoteUnavailable):
            Quote.from_response(["nope"])


class TestGetQuote:
    """Test the quote request."""

    def test_request_parameters(self, client, session):
        session.get.return_value = mock_response(json_data=QUOTE_BODY)

        quote = client.get_quote(SOL_MINT, USDC_MINT, 1_000_000_000, 50)

        assert quote.out_amount == 195_370_000
        args, kwargs = session.get.call_args
        assert args[0] == "https://quote.test/v6/quote"
        assert kwargs["params"] == {
            "inputMint": SOL_MINT,
            "outputMint": USDC_MINT,
            "amount": 1_000_000_000,
            "slippageBps": 50,
        }
        assert kwargs["timeout"] == 10

    def test_transport_error(self, client, session):
        session.get.side_effect = requests.ConnectionError("down")
        with pytest.raises(QuoteUnavailable):
            client.get_quote(SOL_MINT, USDC_MINT, 1, 50)

    def test_bad_status(self, client, session):
        session.get.return_value = mock_response(status_code=429, text="rate limited")
        with pytest.raises(QuoteUnavailable) as exc:
            client.get_quote(SOL_MINT, USDC_MINT, 1, 50)
        assert exc.value.status_code == 429

    def test_malformed_json(self, client, session):
        session.get.return_value = mock_response(json_error=ValueError("not json"))
        with pytest.raises(QuoteUnavailable):
            client.get_quote(SOL_MINT, USDC_MINT, 1, 50)


class TestBuildSwapTransaction:
    """Test the swap-build request."""

    def test_request_body(self, client, session):
        encoded = base64.b64encode(b"\x01\x02\x03").decode()
        session.post.return_value = mock_response(
            json_data={"swapTransaction": encoded, "lastValidBlockHeight": 500}
        )
        quote = Quote.from_response(QUOTE_BODY)

        unsigned = client.build_swap_transaction(quote, "Wallet1111", priority_fee_lamports=10_000)

        assert unsigned.transaction == b"\x01\x02\x03"
        assert unsigned.last_valid_block_height == 500
        args, kwargs = session.post.call_args
        assert args[0] == "https://quote.test/v6/swap"
        assert kwargs["json"] == {
            "quoteResponse": QUOTE_BODY,
            "userPublicKey": "Wallet1111",
            "wrapAndUnwrapSol": True,
            "priorityFeeLamports": 10_000,
            "dynamicComputeUnitLimit": True,
        }

    def test_zero_priority_fee_omitted(self, client, session):
        encoded = base64.b64encode(b"\x01").decode()
        session.post.return_value = mock_response(
            json_data={"swapTransaction": encoded, "lastValidBlockHeight": 1}
        )
        client.build_swap_transaction(Quote.from_response(QUOTE_BODY), "Wallet1111")
        assert "priorityFeeLamports" not in session.post.call_args.kwargs["json"]

    def test_non_200_carries_body(self, client, session):
        session.post.return_value = mock_response(status_code=400, text='{"error":"invalid quote"}')
        with pytest.raises(RoutingServiceError) as exc:
            client.build_swap_transaction(Quote.from_response(QUOTE_BODY), "Wallet1111")
        assert exc.value.body == '{"error":"invalid quote"}'
        assert "invalid quote" in str(exc.value)

    def test_missing_transaction(self, client, session):
        session.post.return_value = mock_response(json_data={"lastValidBlockHeight": 1})
        with pytest.raises(RoutingServiceError):
            client.build_swap_transaction(Quote.from_response(QUOTE_BODY), "Wallet1111")

    def test_invalid_base64(self, client, session):
        session.post.return_value = mock_response(
            json_data={"swapTransaction": "***", "lastValidBlockHeight": 1}
        )
        with pytest.raises(RoutingServiceError, match="decode"):
            client.build_swap_transaction(Quote.from_response(QUOTE_BODY), "Wallet1111")


class TestPriceFeed:
    """Test price sampling."""

    def test_sample(self, jupiter):
        jupiter.get_quote.return_value = make_quote(out_amount=195_370_000)
        feed = PriceFeed(jupiter, slippage_bps=50)

        assert feed.sample() == Decimal("195.37")
        jupiter.get_quote.assert_called_once_with(SOL_MINT, USDC_MINT, 1_000_000_000, 50)

    def test_sample_with_smaller_reference(self, jupiter):
        jupiter.get_quote.return_value = make_quote(in_amount=100_000_000, out_amount=19_537_000)
        feed = PriceFeed(jupiter, slippage_bps=50, reference_amount=100_000_000)
        assert feed.sample() == Decimal("195.37")

    def test_zero_output_rejected(self, jupiter):
        jupiter.get_quote.return_value = make_quote(out_amount=0)
        feed = PriceFeed(jupiter, slippage_bps=50)
        with pytest.raises(QuoteUnavailable, match="non-positive"):
            feed.sample()

    def test_sample_failure_propagates(self, jupiter):
        jupiter.get_quote.side_effect = QuoteUnavailable("down")
        feed = PriceFeed(jupiter, slippage_bps=50)
        with pytest.raises(QuoteUnavailable):
            feed.sample()
