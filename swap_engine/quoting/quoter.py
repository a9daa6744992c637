"""
Quote simulation against the Uniswap V3 Quoter.

quoteExactInputSingle executes a swap and reverts with the result, so it is
only ever issued as an eth_call. No transaction is sent and no gas is spent.
"""

import asyncio
import logging
from dataclasses import dataclass
from datetime import datetime
from typing import Optional

from eth_typing import ChecksumAddress

from ..context import ChainContext
from ..core.amounts import TokenAmount
from ..core.errors import (
    ConfigurationError,
    ErrorClassifier,
    QuoteUnavailable,
    SwapEngineError,
)
from ..core.types import Asset, FeeTier
from ..core.v3_math import MAX_SQRT_RATIO
from ..pools.abis import UNISWAP_V3_QUOTER_ABI

STEP = "quote"


@dataclass(frozen=True)
class QuoteExactInputSingleRequest:
    """Arguments of Quoter.quoteExactInputSingle."""

    token_in: ChecksumAddress
    token_out: ChecksumAddress
    fee: int
    amount_in: int
    sqrt_price_limit_x96: int = 0

    def __post_init__(self):
        if self.token_in == self.token_out:
            raise ConfigurationError("Quote tokens must differ", step=STEP)
        if self.amount_in <= 0:
            raise ConfigurationError(f"Quote amount must be positive, got {self.amount_in}", step=STEP)
        if not 0 <= self.sqrt_price_limit_x96 < MAX_SQRT_RATIO:
            raise ConfigurationError(
                f"Invalid sqrtPriceLimitX96: {self.sqrt_price_limit_x96}", step=STEP
            )

    def as_args(self) -> tuple:
        return (
            self.token_in,
            self.token_out,
            self.fee,
            self.amount_in,
            self.sqrt_price_limit_x96,
        )


@dataclass
class QuoteResult:
    """
    Result of one quote simulation.

    A successful result always carries an amount, which may be zero. A failed
    result carries the classified error and no amount.
    """

    success: bool
    request: QuoteExactInputSingleRequest
    amount: Optional[TokenAmount] = None
    error: Optional[SwapEngineError] = None
    timestamp: Optional[datetime] = None

    @property
    def available(self) -> bool:
        return self.success and self.amount is not None


class Quoter:
    """
    Obtains expected output amounts from the Quoter contract.

    Failures are classified and returned in the QuoteResult; only caller
    bugs (invalid request arguments) raise.
    """

    def __init__(self, context: ChainContext):
        self.context = context
        self.logger = logging.getLogger(f"{__name__}.{self.__class__.__name__}")
        self.error_handler = ErrorClassifier(self.logger)
        self.contract = context.w3.eth.contract(
            address=context.deployment.quoter, abi=UNISWAP_V3_QUOTER_ABI
        )

    async def quote(
        self,
        input_asset: Asset,
        output_asset: Asset,
        fee: FeeTier,
        exact_input_amount: TokenAmount,
    ) -> QuoteResult:
        """
        Quote an exact-input single-pool swap.

        Args:
            input_asset: Asset sold
            output_asset: Asset bought
            fee: Pool fee tier
            exact_input_amount: Amount of input_asset to sell

        Returns:
            QuoteResult; amount is in output_asset units when successful

        Raises:
            ConfigurationError: If the assets are equal or the amount does not
                match input_asset or is not positive
        """
        if exact_input_amount.asset != input_asset:
            raise ConfigurationError(
                f"Quote amount is in {exact_input_amount.asset.symbol}, expected {input_asset.symbol}",
                step=STEP,
            )
        if input_asset == output_asset:
            raise ConfigurationError(f"Cannot quote {input_asset.symbol} for itself", step=STEP)

        request = QuoteExactInputSingleRequest(
            token_in=input_asset.address,
            token_out=output_asset.address,
            fee=int(FeeTier.parse(fee)),
            amount_in=exact_input_amount.raw,
        )
        self.logger.debug(
            f"Quoting {exact_input_amount} -> {output_asset.symbol} at fee {request.fee}"
        )

        try:
            raw = await self.contract.functions.quoteExactInputSingle(*request.as_args()).call()
        except asyncio.CancelledError:
            raise
        except Exception as e:
            error = self.error_handler.to_quote_error(e, step=STEP)
            self.error_handler.log_error(
                e,
                {
                    "step": STEP,
                    "token_in": request.token_in,
                    "token_out": request.token_out,
                    "fee": request.fee,
                    "amount_in": request.amount_in,
                },
            )
            return QuoteResult(
                success=False, request=request, error=error, timestamp=datetime.now()
            )

        if isinstance(raw, (list, tuple)):
            raw = raw[0] if raw else None
        if isinstance(raw, bool) or not isinstance(raw, int) or raw < 0:
            error = QuoteUnavailable(f"Quoter returned an unusable amount: {raw!r}", step=STEP)
            self.logger.warning(str(error))
            return QuoteResult(
                success=False, request=request, error=error, timestamp=datetime.now()
            )

        amount = TokenAmount(output_asset, raw)
        self.logger.info(f"Quote: {exact_input_amount} -> {amount} (raw {raw})")
        return QuoteResult(success=True, request=request, amount=amount, timestamp=datetime.now())
