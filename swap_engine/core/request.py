"""
Trade request submitted by the caller for one swap attempt.
"""

from dataclasses import dataclass

from .amounts import BPS_DENOMINATOR, TokenAmount
from .errors import ConfigurationError
from .types import Asset, FeeTier, PoolIdentity

DEFAULT_SLIPPAGE_BPS = 50
DEFAULT_DEADLINE_SECONDS = 60 * 10


@dataclass(frozen=True)
class TradeRequest:
    """
    Exact-input swap request.

    Attributes:
        amount_in: Exact amount of the input asset to sell
        asset_out: Asset to buy
        fee: Fee tier of the pool to route through
        slippage_bps: Tolerated adverse movement in basis points
        deadline_seconds: Seconds from build time until the swap expires on-chain
    """

    amount_in: TokenAmount
    asset_out: Asset
    fee: FeeTier = FeeTier.MEDIUM
    slippage_bps: int = DEFAULT_SLIPPAGE_BPS
    deadline_seconds: int = DEFAULT_DEADLINE_SECONDS

    def __post_init__(self):
        object.__setattr__(self, "fee", FeeTier.parse(self.fee))
        if not self.amount_in.is_positive:
            raise ConfigurationError(
                f"Input amount must be positive, got {self.amount_in.raw}", step="request"
            )
        if self.asset_in == self.asset_out:
            raise ConfigurationError(
                f"Input and output asset are both {self.asset_in.symbol}", step="request"
            )
        if self.asset_in.chain_id != self.asset_out.chain_id:
            raise ConfigurationError("Input and output assets are on different chains", step="request")
        if not 0 <= self.slippage_bps < BPS_DENOMINATOR:
            raise ConfigurationError(f"Slippage out of range: {self.slippage_bps} bps", step="request")
        if self.deadline_seconds <= 0:
            raise ConfigurationError(
                f"Deadline offset must be positive, got {self.deadline_seconds}", step="request"
            )

    @property
    def asset_in(self) -> Asset:
        return self.amount_in.asset

    @property
    def identity(self) -> PoolIdentity:
        return PoolIdentity(self.asset_in, self.asset_out, self.fee)

    def describe(self) -> str:
        return f"{self.amount_in} -> {self.asset_out.symbol} ({self.fee.percent} pool)"
