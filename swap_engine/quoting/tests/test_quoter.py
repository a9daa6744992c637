"""
Tests for the quote engine.
"""

from unittest.mock import AsyncMock, Mock

import aiohttp
import pytest
from web3.exceptions import ContractLogicError

from swap_engine.config.protocols import UniswapV3Deployment
from swap_engine.core.amounts import TokenAmount
from swap_engine.core.errors import ConfigurationError, NetworkError, QuoteUnavailable
from swap_engine.core.types import Asset, FeeTier
from swap_engine.quoting.quoter import QuoteExactInputSingleRequest, Quoter

COPM = Asset(137, "0x12050c705152931cfee3dd56c52fb09dea816c23", 18, "COPM")
USDC = Asset(137, "0x3c499c542cef5e3811e1192ce70d8cc03d5c3359", 6, "USDC")

DEPLOYMENT = UniswapV3Deployment(
    factory="0x1f98431c8ad98523631ae4a59f267346ea31f984",
    quoter="0xb27308f9f90d607463bb33ea1bebb41c27ce5ab6",
    swap_router="0xe592427a0aece92de3edee1f18e0157c05861564",
)


def make_quoter(result=None, error=None):
    contract = Mock()
    call = AsyncMock(side_effect=error) if error is not None else AsyncMock(return_value=result)
    contract.functions.quoteExactInputSingle.return_value.call = call
    w3 = Mock()
    w3.eth.contract.return_value = contract
    context = Mock(w3=w3, chain_id=137, deployment=DEPLOYMENT)
    return Quoter(context), contract


@pytest.fixture
def amount_in():
    return TokenAmount.from_units(COPM, "20000")


class TestQuoter:

    @pytest.mark.asyncio
    async def test_successful_quote(self, amount_in):
        quoter, contract = make_quoter(result=4_950_000)

        result = await quoter.quote(COPM, USDC, FeeTier.MEDIUM, amount_in)

        assert result.success
        assert result.available
        assert result.amount == TokenAmount(USDC, 4_950_000)
        assert result.error is None
        contract.functions.quoteExactInputSingle.assert_called_once_with(
            COPM.address, USDC.address, 3000, 20000 * 10**18, 0
        )

    def test_uses_configured_quoter_address(self):
        quoter, _ = make_quoter(result=1)
        quoter.context.w3.eth.contract.assert_called_once()
        assert quoter.context.w3.eth.contract.call_args.kwargs["address"] == DEPLOYMENT.quoter

    @pytest.mark.asyncio
    async def test_zero_quote_is_a_result(self, amount_in):
        quoter, _ = make_quoter(result=0)

        result = await quoter.quote(COPM, USDC, FeeTier.MEDIUM, amount_in)

        assert result.success
        assert result.amount.raw == 0

    @pytest.mark.asyncio
    async def test_revert_is_unavailable(self, amount_in):
        quoter, _ = make_quoter(error=ContractLogicError("execution reverted"))

        result = await quoter.quote(COPM, USDC, FeeTier.MEDIUM, amount_in)

        assert not result.success
        assert not result.available
        assert result.amount is None
        assert isinstance(result.error, QuoteUnavailable)
        assert result.error.step == "quote"

    @pytest.mark.asyncio
    async def test_transport_failure_is_network_error(self, amount_in):
        quoter, _ = make_quoter(error=ConnectionError("connection refused"))

        result = await quoter.quote(COPM, USDC, FeeTier.MEDIUM, amount_in)

        assert not result.success
        assert result.amount is None
        assert isinstance(result.error, NetworkError)

    @pytest.mark.asyncio
    async def test_dropped_http_connection_is_network_error(self, amount_in):
        quoter, _ = make_quoter(error=aiohttp.ServerDisconnectedError())

        result = await quoter.quote(COPM, USDC, FeeTier.MEDIUM, amount_in)

        assert not result.success
        assert isinstance(result.error, NetworkError)
        assert result.error.retryable

    @pytest.mark.asyncio
    async def test_unusable_response(self, amount_in):
        quoter, _ = make_quoter(result=None)

        result = await quoter.quote(COPM, USDC, FeeTier.MEDIUM, amount_in)

        assert not result.success
        assert isinstance(result.error, QuoteUnavailable)

    @pytest.mark.asyncio
    async def test_amount_asset_mismatch(self):
        quoter, contract = make_quoter(result=1)

        with pytest.raises(ConfigurationError, match="expected COPM"):
            await quoter.quote(COPM, USDC, FeeTier.MEDIUM, TokenAmount(USDC, 1))
        contract.functions.quoteExactInputSingle.assert_not_called()

    @pytest.mark.asyncio
    async def test_same_asset(self):
        quoter, _ = make_quoter(result=1)

        with pytest.raises(ConfigurationError):
            await quoter.quote(COPM, COPM, FeeTier.MEDIUM, TokenAmount(COPM, 1))


class TestQuoteRequest:

    def test_as_args(self):
        request = QuoteExactInputSingleRequest(COPM.address, USDC.address, 3000, 5)
        assert request.as_args() == (COPM.address, USDC.address, 3000, 5, 0)

    def test_non_positive_amount(self):
        with pytest.raises(ConfigurationError, match="positive"):
            QuoteExactInputSingleRequest(COPM.address, USDC.address, 3000, 0)
