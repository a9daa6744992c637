"""
Trade entities: pool, route and trade value objects.

Domain models used by the trade builder to turn a pool snapshot and a quote
into swap parameters.
"""

from dataclasses import dataclass
from decimal import Decimal, localcontext
from enum import Enum
from fractions import Fraction
from typing import Optional, Tuple

from eth_typing import ChecksumAddress

from ..core.amounts import TokenAmount
from ..core.errors import ConfigurationError
from ..core.types import Asset, FeeTier, PoolIdentity
from ..core.v3_math import MAX_TICK, MIN_TICK, Q96, tick_matches_price

_UINT128_MAX = (1 << 128) - 1


class TradeType(Enum):
    """Which side of the trade is fixed."""
    EXACT_INPUT = "exact_input"
    EXACT_OUTPUT = "exact_output"


@dataclass(frozen=True)
class Pool:
    """
    Uniswap V3 pool at a point in time.

    Attributes:
        token0: Lower-sorted asset
        token1: Higher-sorted asset
        fee: Fee tier
        sqrt_price_x96: Current sqrt price in Q64.96
        liquidity: In-range liquidity
        tick: Current tick
        address: Pool contract address (optional)
    """

    token0: Asset
    token1: Asset
    fee: FeeTier
    sqrt_price_x96: int
    liquidity: int
    tick: int
    address: Optional[ChecksumAddress] = None

    def __post_init__(self):
        object.__setattr__(self, "fee", FeeTier.parse(self.fee))
        if self.token0 == self.token1:
            raise ConfigurationError(f"Pool tokens must differ, got {self.token0.symbol} twice")
        if not self.token0.sorts_before(self.token1):
            raise ConfigurationError(
                f"Pool tokens out of order: {self.token0.symbol} must sort before {self.token1.symbol}"
            )
        if not 0 <= self.liquidity <= _UINT128_MAX:
            raise ConfigurationError(f"Pool liquidity out of range: {self.liquidity}")
        if not MIN_TICK <= self.tick <= MAX_TICK:
            raise ConfigurationError(f"Pool tick out of range: {self.tick}")
        if not tick_matches_price(self.tick, self.sqrt_price_x96):
            raise ConfigurationError(
                f"Pool price {self.sqrt_price_x96} is not within tick {self.tick}"
            )

    @property
    def identity(self) -> PoolIdentity:
        return PoolIdentity(self.token0, self.token1, self.fee)

    @property
    def chain_id(self) -> int:
        return self.token0.chain_id

    def involves_token(self, asset: Asset) -> bool:
        return asset == self.token0 or asset == self.token1

    def token0_price(self) -> Fraction:
        """Raw token1-per-token0 price, (sqrtPriceX96 / 2**96) ** 2."""
        return Fraction(self.sqrt_price_x96 * self.sqrt_price_x96, Q96 * Q96)

    def price_of(self, asset: Asset) -> Decimal:
        """Human readable price of `asset` in the other pool token, for display."""
        raw = self.token0_price()
        if asset == self.token0:
            scaled = raw * Fraction(10 ** self.token0.decimals, 10 ** self.token1.decimals)
        elif asset == self.token1:
            if raw == 0:
                raise ConfigurationError("Pool price is zero")
            scaled = (1 / raw) * Fraction(10 ** self.token1.decimals, 10 ** self.token0.decimals)
        else:
            raise ConfigurationError(f"{asset.symbol} is not part of pool {self.identity}")
        with localcontext() as ctx:
            ctx.prec = 40
            return Decimal(scaled.numerator) / Decimal(scaled.denominator)


@dataclass(frozen=True)
class Route:
    """
    Ordered pools from the input asset to the output asset.

    Only single-pool routes are supported.
    """

    pools: Tuple[Pool, ...]
    input: Asset
    output: Asset

    def __post_init__(self):
        object.__setattr__(self, "pools", tuple(self.pools))
        if len(self.pools) != 1:
            raise ConfigurationError(f"Only single-pool routes are supported, got {len(self.pools)} pools")
        if self.input == self.output:
            raise ConfigurationError(f"Route input and output are both {self.input.symbol}")
        pool = self.pools[0]
        if not (pool.involves_token(self.input) and pool.involves_token(self.output)):
            raise ConfigurationError(
                f"Route {self.input.symbol} -> {self.output.symbol} does not match pool {pool.identity}"
            )

    @property
    def pool(self) -> Pool:
        return self.pools[0]

    @property
    def zero_for_one(self) -> bool:
        return self.input == self.pool.token0

    def __str__(self) -> str:
        return f"{self.input.symbol} -> {self.output.symbol} via {self.pool.identity}"


@dataclass(frozen=True)
class Trade:
    """
    A swap along a route with known input and output amounts.

    Built unchecked: the output amount comes from the quote and is trusted
    rather than recomputed from pool state.
    """

    route: Route
    input_amount: TokenAmount
    output_amount: TokenAmount
    trade_type: TradeType = TradeType.EXACT_INPUT

    def __post_init__(self):
        if self.input_amount.asset != self.route.input:
            raise ConfigurationError(
                f"Trade input is {self.input_amount.asset.symbol}, route expects {self.route.input.symbol}"
            )
        if self.output_amount.asset != self.route.output:
            raise ConfigurationError(
                f"Trade output is {self.output_amount.asset.symbol}, route expects {self.route.output.symbol}"
            )
        if self.input_amount.raw < 0 or self.output_amount.raw < 0:
            raise ConfigurationError("Trade amounts must not be negative")

    @classmethod
    def create_unchecked_trade(
        cls,
        route: Route,
        input_amount: TokenAmount,
        output_amount: TokenAmount,
        trade_type: TradeType = TradeType.EXACT_INPUT,
    ) -> "Trade":
        return cls(route, input_amount, output_amount, trade_type)

    def minimum_amount_out(self, slippage: Fraction) -> TokenAmount:
        """
        Least output accepted at the given slippage.

        Exact-input trades use floor(out / (1 + slippage)); exact-output
        trades return the output amount unchanged.
        """
        _check_slippage(slippage)
        if self.trade_type == TradeType.EXACT_OUTPUT:
            return self.output_amount
        return self.output_amount.scale(1 / (1 + slippage))

    def maximum_amount_in(self, slippage: Fraction) -> TokenAmount:
        """
        Most input spent at the given slippage.

        Exact-output trades use floor(in * (1 + slippage)); exact-input
        trades return the input amount unchanged.
        """
        _check_slippage(slippage)
        if self.trade_type == TradeType.EXACT_INPUT:
            return self.input_amount
        return self.input_amount.scale(1 + slippage)

    def execution_price(self) -> Optional[Decimal]:
        """Output per input in display units, or None for an empty input."""
        if self.input_amount.raw == 0:
            return None
        with localcontext() as ctx:
            ctx.prec = 40
            return self.output_amount.to_decimal() / self.input_amount.to_decimal()

    def __str__(self) -> str:
        return f"{self.trade_type.name} {self.input_amount} -> {self.output_amount}"


def _check_slippage(slippage: Fraction):
    if not isinstance(slippage, Fraction) or slippage < 0:
        raise ConfigurationError(f"Slippage must be a non-negative Fraction, got {slippage!r}")
