"""
Trade builder.

Turns a pool snapshot and a quoted output amount into a Trade and the
SwapRouter calldata that executes it with slippage protection and a deadline.
"""

import logging
import time
from dataclasses import dataclass
from fractions import Fraction
from typing import Callable, Optional, Union

from eth_typing import ChecksumAddress
from hexbytes import HexBytes

from ..core.amounts import TokenAmount, bps_to_fraction
from ..core.errors import ConfigurationError
from ..core.request import DEFAULT_DEADLINE_SECONDS, DEFAULT_SLIPPAGE_BPS
from ..core.types import PoolIdentity, PoolState, TransactionRequest, checksum
from .entities import Pool, Route, Trade, TradeType
from .router_calls import ApproveCall, ExactInputSingleParams, ExactOutputSingleParams

STEP = "build"

SwapParams = Union[ExactInputSingleParams, ExactOutputSingleParams]


@dataclass(frozen=True)
class SwapExecutionParameters:
    """
    Everything needed to submit a swap.

    Attributes:
        trade: The trade being executed
        slippage: Slippage tolerance as an exact fraction
        deadline: Absolute Unix timestamp after which the router reverts
        recipient: Address receiving the output
        router: SwapRouter address the calldata targets
        calldata: Encoded router call
        value: Native currency to attach, in wei
        params: The typed router params encoded in calldata
    """

    trade: Trade
    slippage: Fraction
    deadline: int
    recipient: ChecksumAddress
    router: ChecksumAddress
    calldata: HexBytes
    value: int
    params: SwapParams

    @property
    def amount_out_minimum(self) -> TokenAmount:
        return self.trade.minimum_amount_out(self.slippage)

    @property
    def amount_in_maximum(self) -> TokenAmount:
        return self.trade.maximum_amount_in(self.slippage)

    def approval(self) -> ApproveCall:
        """ERC-20 approval the router needs before this swap can pull the input."""
        return ApproveCall(
            token=self.trade.input_amount.asset.address,
            spender=self.router,
            amount=self.amount_in_maximum.raw,
        )

    def to_transaction_request(self) -> TransactionRequest:
        return TransactionRequest(
            to=self.router,
            data=self.calldata,
            value=self.value,
            step="swap",
            metadata={"deadline": self.deadline, "trade": str(self.trade)},
        )


def swap_call_parameters(
    trade: Trade,
    slippage: Fraction,
    deadline: int,
    recipient: str,
    router: str,
) -> SwapExecutionParameters:
    """
    Encode the SwapRouter call for a single-pool trade.

    Exact-input trades call exactInputSingle with amountOutMinimum; exact-output
    trades call exactOutputSingle with amountInMaximum. Only ERC-20 inputs are
    supported, so value is always zero.
    """
    recipient = checksum(recipient, "recipient")
    router = checksum(router, "router address")
    pool = trade.route.pool
    token_in = trade.route.input.address
    token_out = trade.route.output.address

    if trade.trade_type == TradeType.EXACT_INPUT:
        params: SwapParams = ExactInputSingleParams(
            token_in=token_in,
            token_out=token_out,
            fee=int(pool.fee),
            recipient=recipient,
            deadline=deadline,
            amount_in=trade.input_amount.raw,
            amount_out_minimum=trade.minimum_amount_out(slippage).raw,
        )
    else:
        params = ExactOutputSingleParams(
            token_in=token_in,
            token_out=token_out,
            fee=int(pool.fee),
            recipient=recipient,
            deadline=deadline,
            amount_out=trade.output_amount.raw,
            amount_in_maximum=trade.maximum_amount_in(slippage).raw,
        )

    return SwapExecutionParameters(
        trade=trade,
        slippage=slippage,
        deadline=deadline,
        recipient=recipient,
        router=router,
        calldata=params.encode(),
        value=0,
        params=params,
    )


class TradeBuilder:
    """
    Builds swap execution parameters for one single-pool trade.

    Args:
        router_address: SwapRouter the calldata targets
        clock: Returns the current Unix time in seconds
    """

    def __init__(self, router_address: str, clock: Callable[[], float] = time.time):
        self.router = checksum(router_address, "router address")
        self.clock = clock
        self.logger = logging.getLogger(f"{__name__}.{self.__class__.__name__}")

    def build_pool(self, pool_state: PoolState, identity: PoolIdentity) -> Pool:
        """Check a pool snapshot against the expected identity and wrap it."""
        if identity.token0 == identity.token1:
            raise ConfigurationError("Pool token0 and token1 are the same asset", step=STEP)
        if pool_state.token0.lower() == pool_state.token1.lower():
            raise ConfigurationError(f"Pool {pool_state.address} reports identical tokens", step=STEP)
        expected = (identity.token0.address.lower(), identity.token1.address.lower())
        if (pool_state.token0.lower(), pool_state.token1.lower()) != expected:
            raise ConfigurationError(
                f"Pool {pool_state.address} tokens ({pool_state.token0}, {pool_state.token1}) "
                f"do not match {identity}",
                step=STEP,
            )
        if pool_state.fee != int(identity.fee):
            raise ConfigurationError(
                f"Pool {pool_state.address} fee {pool_state.fee} does not match {int(identity.fee)}",
                step=STEP,
            )
        try:
            return Pool(
                token0=identity.token0,
                token1=identity.token1,
                fee=identity.fee,
                sqrt_price_x96=pool_state.sqrt_price_x96,
                liquidity=pool_state.liquidity,
                tick=pool_state.tick,
                address=pool_state.address,
            )
        except ConfigurationError as e:
            raise ConfigurationError(f"Inconsistent pool state: {e}", step=STEP, cause=e) from e

    def build(
        self,
        pool_state: PoolState,
        identity: PoolIdentity,
        input_amount: TokenAmount,
        quoted_output_amount: Optional[TokenAmount],
        recipient: str,
        slippage_tolerance_bps: int = DEFAULT_SLIPPAGE_BPS,
        deadline_offset_seconds: int = DEFAULT_DEADLINE_SECONDS,
        trade_type: TradeType = TradeType.EXACT_INPUT,
    ) -> SwapExecutionParameters:
        """
        Build the trade and its router calldata.

        Args:
            pool_state: Fresh pool snapshot
            identity: Pool the trade routes through
            input_amount: Amount sold (the quoted input for exact-output trades)
            quoted_output_amount: Quoted amount bought (the exact output for exact-output trades)
            recipient: Address receiving the output
            slippage_tolerance_bps: Slippage tolerance in basis points
            deadline_offset_seconds: Seconds from now until the swap expires
            trade_type: Which side of the trade is fixed

        Returns:
            SwapExecutionParameters

        Raises:
            ConfigurationError: If any input is invalid or inconsistent
        """
        if input_amount is None or not input_amount.is_positive:
            raise ConfigurationError(
                f"Input amount must be positive, got {input_amount}", step=STEP
            )
        if quoted_output_amount is None:
            raise ConfigurationError("A quoted output amount is required", step=STEP)
        if quoted_output_amount.raw < 0:
            raise ConfigurationError(f"Quoted output is negative: {quoted_output_amount.raw}", step=STEP)
        if not identity.involves(input_amount.asset):
            raise ConfigurationError(
                f"{input_amount.asset.symbol} is not part of pool {identity}", step=STEP
            )
        if quoted_output_amount.asset != identity.other(input_amount.asset):
            raise ConfigurationError(
                f"Quoted output is in {quoted_output_amount.asset.symbol}, "
                f"expected {identity.other(input_amount.asset).symbol}",
                step=STEP,
            )
        slippage = bps_to_fraction(slippage_tolerance_bps)
        if (
            isinstance(deadline_offset_seconds, bool)
            or not isinstance(deadline_offset_seconds, int)
            or deadline_offset_seconds <= 0
        ):
            raise ConfigurationError(
                f"Deadline offset must be a positive number of seconds, got {deadline_offset_seconds!r}",
                step=STEP,
            )
        recipient = checksum(recipient, "recipient")

        pool = self.build_pool(pool_state, identity)
        route = Route((pool,), input_amount.asset, quoted_output_amount.asset)
        trade = Trade.create_unchecked_trade(route, input_amount, quoted_output_amount, trade_type)
        deadline = int(self.clock()) + deadline_offset_seconds

        parameters = swap_call_parameters(trade, slippage, deadline, recipient, self.router)
        if trade_type == TradeType.EXACT_INPUT and parameters.params.amount_out_minimum == 0:
            self.logger.warning(
                f"Quoted output {quoted_output_amount} leaves amountOutMinimum at 0: "
                f"the swap has no slippage protection"
            )
        self.logger.info(
            f"Built {trade} on {route}: min out {parameters.amount_out_minimum}, "
            f"deadline {deadline}, recipient {recipient}"
        )
        return parameters
