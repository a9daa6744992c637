"""
Swap execution orchestrator.

Drives one swap attempt through locate -> read -> quote -> build -> approve
-> swap, confirming each transaction before the next is submitted. Expected
failures end the attempt in FAILED and are reported in the TradeResult.
"""

import logging
import time
from datetime import datetime
from typing import Callable, Optional

from hexbytes import HexBytes

from ..context import ChainContext
from ..core.errors import (
    ConfigurationError,
    DeadlineExceeded,
    ErrorClassifier,
    NetworkError,
    QuoteUnavailable,
    SignerError,
    SwapEngineError,
    TransactionReverted,
)
from ..core.request import TradeRequest
from ..core.types import TransactionOutcome, TransactionRequest
from ..pools.locator import locate
from ..pools.state_reader import PoolStateReader
from ..quoting.quoter import Quoter
from ..trade.builder import TradeBuilder
from .models import StateTransition, TradeFailure, TradeResult, TradeState, can_transition
from .signer import Signer

DEFAULT_RECEIPT_TIMEOUT = 120


def failure_reason(error: SwapEngineError) -> str:
    """Short reason reported for a failed transaction step."""
    if isinstance(error, TransactionReverted):
        return "transaction reverted"
    if isinstance(error, DeadlineExceeded):
        return "timeout"
    if isinstance(error, SignerError):
        return "signing failed"
    return "submission failed"


class SwapExecutor:
    """
    Executes single-pool swaps for one account.

    Every execute() call is a new attempt: the pool is re-read, the quote is
    re-fetched and a new deadline is set. Nothing is retried automatically
    and only one attempt may run at a time.
    """

    def __init__(
        self,
        context: ChainContext,
        signer: Signer,
        receipt_timeout: float = DEFAULT_RECEIPT_TIMEOUT,
        reader: Optional[PoolStateReader] = None,
        quoter: Optional[Quoter] = None,
        builder: Optional[TradeBuilder] = None,
        clock: Callable[[], float] = time.time,
    ):
        if receipt_timeout <= 0:
            raise ConfigurationError(f"Receipt timeout must be positive, got {receipt_timeout}")
        self.context = context
        self.signer = signer
        self.receipt_timeout = receipt_timeout
        self.clock = clock
        self.reader = reader or PoolStateReader(context)
        self.quoter = quoter or Quoter(context)
        self.builder = builder or TradeBuilder(context.deployment.swap_router, clock=clock)
        self.logger = logging.getLogger(f"{__name__}.{self.__class__.__name__}")
        self.error_handler = ErrorClassifier(self.logger)
        self._in_flight = False

    @property
    def busy(self) -> bool:
        return self._in_flight

    async def execute(self, request: TradeRequest) -> TradeResult:
        """
        Run one swap attempt to a terminal state.

        Args:
            request: Trade to execute

        Returns:
            TradeResult in SWAP_CONFIRMED or FAILED

        Raises:
            ConfigurationError: If another attempt is already running on this executor
        """
        if self._in_flight:
            raise ConfigurationError("A swap attempt is already in progress", step="execute")
        self._in_flight = True
        try:
            result = TradeResult(request=request)
            self._record(result, TradeState.IDLE)
            self.logger.info(f"Starting swap attempt: {request.describe()}")
            await self._run(result)
            return result
        finally:
            self._in_flight = False

    async def _run(self, result: TradeResult) -> None:
        request = result.request

        account = self.signer.address
        if not account:
            self._fail(result, "account", "no account", SignerError("No account connected", step="account"))
            return
        result.account = account
        self._transition(result, TradeState.QUOTE_PENDING)

        deployment = self.context.deployment
        result.pool_address = locate(deployment.factory, request.identity, deployment.init_code_hash)
        try:
            result.pool_state = await self.reader.read(result.pool_address)
        except NetworkError as e:
            self._fail(result, "pool_state", "pool state unavailable", e)
            return

        quote = await self.quoter.quote(
            request.asset_in, request.asset_out, request.fee, request.amount_in
        )
        result.quote = quote
        if not quote.available:
            error = quote.error or QuoteUnavailable("Quoter returned no amount", step="quote")
            self._fail(result, "quote", "no quoted amount", error)
            return
        self._transition(result, TradeState.QUOTE_READY)

        try:
            parameters = self.builder.build(
                result.pool_state,
                request.identity,
                request.amount_in,
                quote.amount,
                recipient=account,
                slippage_tolerance_bps=request.slippage_bps,
                deadline_offset_seconds=request.deadline_seconds,
            )
        except ConfigurationError as e:
            self._fail(result, "build", "invalid trade", e)
            return
        result.parameters = parameters

        self._transition(result, TradeState.APPROVING)
        approval = parameters.approval()
        approval_request = TransactionRequest(
            to=approval.token,
            data=approval.encode(),
            step="approve",
            metadata={"spender": approval.spender, "amount": approval.amount},
        )
        outcome = await self._submit_and_confirm(result, approval_request, self.receipt_timeout)
        if outcome is None:
            return
        result.approval = outcome
        self._transition(result, TradeState.APPROVAL_CONFIRMED)

        self._transition(result, TradeState.SWAPPING)
        remaining = parameters.deadline - self.clock()
        if remaining <= 0:
            self._fail(
                result,
                "swap",
                "timeout",
                DeadlineExceeded(f"Swap deadline {parameters.deadline} passed before submission", step="swap"),
            )
            return
        outcome = await self._submit_and_confirm(
            result,
            parameters.to_transaction_request(),
            lambda: min(self.receipt_timeout, max(parameters.deadline - self.clock(), 0)),
        )
        if outcome is None:
            return
        result.swap = outcome
        self._transition(result, TradeState.SWAP_CONFIRMED)

    async def _submit_and_confirm(
        self, result: TradeResult, tx_request: TransactionRequest, timeout
    ) -> Optional[TransactionOutcome]:
        """
        Submit one transaction and wait for its receipt.

        Returns the confirmed outcome, or None after moving the attempt to FAILED.
        `timeout` is a number of seconds or a callable evaluated after submission.
        """
        step = tx_request.step
        try:
            tx_hash = HexBytes(await self.signer.send_transaction(tx_request))
        except Exception as e:
            error = self._as_engine_error(e, step)
            self._fail(result, step, failure_reason(error), error)
            return None

        wait_for = timeout() if callable(timeout) else timeout
        try:
            outcome = await self.signer.wait_for_receipt(tx_hash, timeout=wait_for, step=step)
        except Exception as e:
            error = self._as_engine_error(e, step)
            if isinstance(error, DeadlineExceeded) and error.tx_hash is None:
                error.tx_hash = tx_hash.hex()
            self._fail(result, step, failure_reason(error), error)
            return None

        if not outcome.confirmed:
            if step == "approve":
                result.approval = outcome
            else:
                result.swap = outcome
            error = TransactionReverted(
                f"{step} transaction {tx_hash.hex()} reverted in block {outcome.block_number}",
                step=step,
                tx_hash=tx_hash.hex(),
                outcome=outcome,
            )
            self._fail(result, step, "transaction reverted", error)
            return None
        return outcome

    def _as_engine_error(self, error: Exception, step: str) -> SwapEngineError:
        if isinstance(error, SwapEngineError):
            return error
        self.error_handler.log_error(error, {"step": step})
        return self.error_handler.to_submission_error(error, step)

    def _record(self, result: TradeResult, state: TradeState) -> None:
        result.state = state
        result.history.append(StateTransition(state=state, at=datetime.now()))

    def _transition(self, result: TradeResult, target: TradeState) -> None:
        if not can_transition(result.state, target):
            raise RuntimeError(f"Illegal transition {result.state.value} -> {target.value}")
        self.logger.debug(f"{result.state.value} -> {target.value}")
        self._record(result, target)
        if target.is_terminal:
            result.completed_at = datetime.now()
        if target == TradeState.SWAP_CONFIRMED:
            self.logger.info(f"Swap confirmed: {result.to_dict()}")

    def _fail(self, result: TradeResult, step: str, reason: str, error: SwapEngineError) -> None:
        result.failure = TradeFailure(step=step, reason=reason, error=error)
        self.logger.warning(
            f"Swap attempt failed at {step} ({reason}): {error}",
            extra={
                "step": step,
                "reason": reason,
                "error_type": type(error).__name__,
                "retryable": error.retryable,
            },
        )
        self._transition(result, TradeState.FAILED)
