"""
Tests for the swap executor state machine.

The chain is mocked: the reader and quoter are AsyncMocks and the signer is
an in-memory fake that records every call it receives.
"""

import asyncio
from unittest.mock import AsyncMock, Mock

import pytest
from hexbytes import HexBytes

from swap_engine.config.protocols import UniswapV3Deployment
from swap_engine.core.amounts import TokenAmount
from swap_engine.core.errors import (
    ConfigurationError,
    DeadlineExceeded,
    NetworkError,
    QuoteUnavailable,
    SignerError,
    TransactionReverted,
)
from swap_engine.core.request import TradeRequest
from swap_engine.core.types import Asset, PoolState, TransactionOutcome, TransactionStatus
from swap_engine.core.v3_math import get_sqrt_ratio_at_tick
from swap_engine.execution.models import TradeState
from swap_engine.execution.orchestrator import SwapExecutor
from swap_engine.pools.locator import locate
from swap_engine.quoting.quoter import QuoteExactInputSingleRequest, QuoteResult
from swap_engine.trade.builder import TradeBuilder
from swap_engine.trade.router_calls import decode_exact_input_single

COPM = Asset(137, "0x12050c705152931cfee3dd56c52fb09dea816c23", 18, "COPM")
USDC = Asset(137, "0x3c499c542cef5e3811e1192ce70d8cc03d5c3359", 6, "USDC")
ACCOUNT = "0x000000000000000000000000000000000000dEaD"
NOW = 1_700_000_000
QUOTED = 4_950_000

DEPLOYMENT = UniswapV3Deployment(
    factory="0x1f98431c8ad98523631ae4a59f267346ea31f984",
    quoter="0xb27308f9f90d607463bb33ea1bebb41c27ce5ab6",
    swap_router="0xe592427a0aece92de3edee1f18e0157c05861564",
)


class FakeClock:
    def __init__(self, now: float):
        self.now = now

    def __call__(self) -> float:
        return self.now


class FakeSigner:
    """Records calls; every transaction confirms unless told otherwise."""

    def __init__(self, address=ACCOUNT, statuses=None, send_errors=None, wait_errors=None, on_wait=None):
        self._address = address
        self.statuses = statuses or {}
        self.send_errors = send_errors or {}
        self.wait_errors = wait_errors or {}
        self.on_wait = on_wait
        self.calls = []
        self.requests = []
        self.timeouts = []

    @property
    def address(self):
        return self._address

    async def send_transaction(self, request):
        self.calls.append(("send", request.step))
        self.requests.append(request)
        if request.step in self.send_errors:
            raise self.send_errors[request.step]
        return HexBytes(bytes([len(self.requests)]) * 32)

    async def wait_for_receipt(self, tx_hash, timeout, step=None):
        self.calls.append(("wait", step))
        self.timeouts.append(timeout)
        if self.on_wait is not None:
            await self.on_wait(step)
        if step in self.wait_errors:
            raise self.wait_errors[step]
        status = self.statuses.get(step, TransactionStatus.CONFIRMED)
        return TransactionOutcome(
            tx_hash=HexBytes(tx_hash), status=status, step=step, block_number=100, gas_used=150_000
        )


def make_pool_state(**overrides):
    fields = dict(
        address=locate(DEPLOYMENT.factory, TradeRequest(TokenAmount(COPM, 1), USDC).identity),
        token0=COPM.address,
        token1=USDC.address,
        fee=3000,
        liquidity=10**24,
        sqrt_price_x96=get_sqrt_ratio_at_tick(-357_000) + 1,
        tick=-357_000,
        block_number=55_000_000,
    )
    fields.update(overrides)
    return PoolState(**fields)


def make_quote(amount=QUOTED, error=None):
    request = QuoteExactInputSingleRequest(COPM.address, USDC.address, 3000, 20000 * 10**18)
    if error is not None:
        return QuoteResult(success=False, request=request, error=error)
    return QuoteResult(success=True, request=request, amount=TokenAmount(USDC, amount))


@pytest.fixture
def clock():
    return FakeClock(NOW)


@pytest.fixture
def trade_request():
    return TradeRequest(TokenAmount.from_units(COPM, "20000"), USDC)


def make_executor(signer, clock, pool_state=None, quote=None, reader_error=None, receipt_timeout=120):
    context = Mock(chain_id=137, deployment=DEPLOYMENT)
    reader = Mock()
    if reader_error is not None:
        reader.read = AsyncMock(side_effect=reader_error)
    else:
        reader.read = AsyncMock(return_value=pool_state or make_pool_state())
    quoter = Mock()
    quoter.quote = AsyncMock(return_value=quote or make_quote())
    return SwapExecutor(
        context,
        signer,
        receipt_timeout=receipt_timeout,
        reader=reader,
        quoter=quoter,
        builder=TradeBuilder(DEPLOYMENT.swap_router, clock=clock),
        clock=clock,
    )


class TestSuccessfulSwap:

    @pytest.mark.asyncio
    async def test_full_sequence(self, clock, trade_request):
        signer = FakeSigner()
        executor = make_executor(signer, clock)

        result = await executor.execute(trade_request)

        assert result.success
        assert result.state == TradeState.SWAP_CONFIRMED
        assert result.states == [
            TradeState.IDLE,
            TradeState.QUOTE_PENDING,
            TradeState.QUOTE_READY,
            TradeState.APPROVING,
            TradeState.APPROVAL_CONFIRMED,
            TradeState.SWAPPING,
            TradeState.SWAP_CONFIRMED,
        ]
        assert result.failure is None
        assert result.approval.confirmed
        assert result.swap.confirmed
        assert result.completed_at is not None

    @pytest.mark.asyncio
    async def test_swap_only_after_approval_receipt(self, clock, trade_request):
        signer = FakeSigner()
        executor = make_executor(signer, clock)

        await executor.execute(trade_request)

        assert signer.calls == [
            ("send", "approve"),
            ("wait", "approve"),
            ("send", "swap"),
            ("wait", "swap"),
        ]

    @pytest.mark.asyncio
    async def test_transactions(self, clock, trade_request):
        signer = FakeSigner()
        executor = make_executor(signer, clock)

        result = await executor.execute(trade_request)

        approve, swap = signer.requests
        assert approve.to == COPM.address
        assert approve.data[:4] == HexBytes("0x095ea7b3")
        assert int.from_bytes(approve.data[-32:], "big") == 20000 * 10**18
        assert approve.value == 0

        assert swap.to == DEPLOYMENT.swap_router
        assert swap.value == 0
        params = decode_exact_input_single(swap.data)
        assert params.recipient == ACCOUNT
        assert params.amount_in == 20000 * 10**18
        assert params.amount_out_minimum == QUOTED * 10000 // 10050
        assert params.deadline == NOW + 600
        assert result.parameters.params == params

    @pytest.mark.asyncio
    async def test_reads_pool_at_located_address(self, clock, trade_request):
        executor = make_executor(FakeSigner(), clock)

        result = await executor.execute(trade_request)

        expected = locate(DEPLOYMENT.factory, trade_request.identity)
        executor.reader.read.assert_awaited_once_with(expected)
        assert result.pool_address == expected
        executor.quoter.quote.assert_awaited_once_with(
            COPM, USDC, trade_request.fee, trade_request.amount_in
        )

    @pytest.mark.asyncio
    async def test_confirmation_waits_are_bounded(self, clock):
        signer = FakeSigner()
        executor = make_executor(signer, clock, receipt_timeout=120)
        request = TradeRequest(TokenAmount.from_units(COPM, "20000"), USDC, deadline_seconds=45)

        await executor.execute(request)

        assert signer.timeouts == [120, 45]


class TestFailures:

    @pytest.mark.asyncio
    async def test_no_account(self, clock, trade_request):
        signer = FakeSigner(address=None)
        executor = make_executor(signer, clock)

        result = await executor.execute(trade_request)

        assert result.state == TradeState.FAILED
        assert result.failure.reason == "no account"
        assert isinstance(result.failure.error, SignerError)
        assert result.states == [TradeState.IDLE, TradeState.FAILED]
        executor.reader.read.assert_not_awaited()
        assert signer.calls == []

    @pytest.mark.asyncio
    async def test_pool_state_unavailable(self, clock, trade_request):
        signer = FakeSigner()
        executor = make_executor(
            signer, clock, reader_error=NetworkError("slot0 read failed", step="pool_state")
        )

        result = await executor.execute(trade_request)

        assert result.state == TradeState.FAILED
        assert result.failure.reason == "pool state unavailable"
        assert result.failure.step == "pool_state"
        assert result.failure.retryable
        executor.quoter.quote.assert_not_awaited()
        assert signer.calls == []

    @pytest.mark.asyncio
    async def test_quote_unavailable(self, clock, trade_request):
        signer = FakeSigner()
        error = QuoteUnavailable("execution reverted", step="quote")
        executor = make_executor(signer, clock, quote=make_quote(error=error))

        result = await executor.execute(trade_request)

        assert result.state == TradeState.FAILED
        assert result.failure.reason == "no quoted amount"
        assert result.failure.error is error
        assert result.states == [TradeState.IDLE, TradeState.QUOTE_PENDING, TradeState.FAILED]
        assert signer.calls == []

    @pytest.mark.asyncio
    async def test_invalid_trade(self, clock, trade_request):
        signer = FakeSigner()
        executor = make_executor(signer, clock, pool_state=make_pool_state(fee=500))

        result = await executor.execute(trade_request)

        assert result.failure.reason == "invalid trade"
        assert isinstance(result.failure.error, ConfigurationError)
        assert signer.calls == []

    @pytest.mark.asyncio
    async def test_approval_reverts(self, clock, trade_request):
        signer = FakeSigner(statuses={"approve": TransactionStatus.REVERTED})
        executor = make_executor(signer, clock)

        result = await executor.execute(trade_request)

        assert result.state == TradeState.FAILED
        assert result.failure.reason == "transaction reverted"
        assert isinstance(result.failure.error, TransactionReverted)
        assert result.failure.error.step == "approve"
        assert result.failure.error.tx_hash is not None
        assert not result.approval.confirmed
        assert ("send", "swap") not in signer.calls

    @pytest.mark.asyncio
    async def test_approval_submission_fails(self, clock, trade_request):
        signer = FakeSigner(send_errors={"approve": ConnectionError("connection refused")})
        executor = make_executor(signer, clock)

        result = await executor.execute(trade_request)

        assert result.state == TradeState.FAILED
        assert result.failure.step == "approve"
        assert isinstance(result.failure.error, NetworkError)
        assert signer.calls == [("send", "approve")]

    @pytest.mark.asyncio
    async def test_approval_timeout(self, clock, trade_request):
        signer = FakeSigner(wait_errors={"approve": DeadlineExceeded("no receipt", step="approve")})
        executor = make_executor(signer, clock)

        result = await executor.execute(trade_request)

        assert result.failure.reason == "timeout"
        assert isinstance(result.failure.error, DeadlineExceeded)
        assert result.failure.error.tx_hash is not None
        assert ("send", "swap") not in signer.calls

    @pytest.mark.asyncio
    async def test_swap_reverts_after_confirmed_approval(self, clock, trade_request):
        signer = FakeSigner(statuses={"swap": TransactionStatus.REVERTED})
        executor = make_executor(signer, clock)

        result = await executor.execute(trade_request)

        assert result.state == TradeState.FAILED
        assert result.failure.reason == "transaction reverted"
        assert isinstance(result.failure.error, TransactionReverted)
        assert result.failure.error.step == "swap"
        assert result.approval.confirmed
        assert result.swap.status == TransactionStatus.REVERTED
        assert TradeState.APPROVAL_CONFIRMED in result.states

    @pytest.mark.asyncio
    async def test_swap_timeout(self, clock, trade_request):
        signer = FakeSigner(wait_errors={"swap": DeadlineExceeded("no receipt", step="swap")})
        executor = make_executor(signer, clock)

        result = await executor.execute(trade_request)

        assert result.failure.reason == "timeout"
        assert result.failure.step == "swap"
        assert result.approval.confirmed

    @pytest.mark.asyncio
    async def test_deadline_passed_before_swap(self, clock, trade_request):
        async def slow_block(step):
            clock.now += 700

        signer = FakeSigner(on_wait=slow_block)
        executor = make_executor(signer, clock)

        result = await executor.execute(trade_request)

        assert result.failure.reason == "timeout"
        assert isinstance(result.failure.error, DeadlineExceeded)
        assert ("send", "swap") not in signer.calls


class TestAttempts:

    @pytest.mark.asyncio
    async def test_retry_is_a_fresh_attempt(self, clock, trade_request):
        signer = FakeSigner(statuses={"swap": TransactionStatus.REVERTED})
        executor = make_executor(signer, clock)

        first = await executor.execute(trade_request)
        clock.now += 30
        signer.statuses = {}
        second = await executor.execute(trade_request)

        assert first.state == TradeState.FAILED
        assert second.success
        assert executor.reader.read.await_count == 2
        assert executor.quoter.quote.await_count == 2
        assert second.parameters.deadline == first.parameters.deadline + 30
        assert [call for call in signer.calls if call[0] == "send"] == [
            ("send", "approve"),
            ("send", "swap"),
            ("send", "approve"),
            ("send", "swap"),
        ]

    @pytest.mark.asyncio
    async def test_one_attempt_at_a_time(self, clock, trade_request):
        release = asyncio.Event()

        async def block(step):
            await release.wait()

        executor = make_executor(FakeSigner(on_wait=block), clock)
        task = asyncio.create_task(executor.execute(trade_request))
        while not executor.busy:
            await asyncio.sleep(0)

        with pytest.raises(ConfigurationError, match="already in progress"):
            await executor.execute(trade_request)

        release.set()
        result = await task
        assert result.success
        assert not executor.busy

    @pytest.mark.asyncio
    async def test_cancellation_propagates(self, clock, trade_request):
        started = asyncio.Event()

        async def hang(step):
            started.set()
            await asyncio.Event().wait()

        executor = make_executor(FakeSigner(on_wait=hang), clock)
        task = asyncio.create_task(executor.execute(trade_request))
        await started.wait()
        task.cancel()

        with pytest.raises(asyncio.CancelledError):
            await task
        assert not executor.busy

    @pytest.mark.asyncio
    async def test_result_summary(self, clock, trade_request):
        executor = make_executor(FakeSigner(statuses={"swap": TransactionStatus.REVERTED}), clock)

        result = await executor.execute(trade_request)
        summary = result.to_dict()

        assert summary["state"] == "failed"
        assert summary["approval_tx"] is not None
        assert "transaction reverted" in summary["failure"]
        assert summary["states"][0] == "idle"
