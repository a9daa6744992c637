"""
Fixed-point token amounts.

Amounts are exact integers in the asset's smallest unit. Decimal strings are
accepted at the configuration boundary and Decimal is used for display only;
floats are rejected so that no binary rounding reaches calldata.
"""

from dataclasses import dataclass
from decimal import Decimal, InvalidOperation, localcontext
from fractions import Fraction
from typing import Union

from .errors import ConfigurationError
from .types import Asset

BPS_DENOMINATOR = 10_000

DecimalLike = Union[str, int, Decimal]

# Enough digits for any uint256 at any decimal scale.
_PRECISION = 160


def parse_units(value: DecimalLike, decimals: int) -> int:
    """
    Convert a human readable amount into smallest units.

    Args:
        value: Amount as a decimal string, int or Decimal (floats are rejected)
        decimals: Token decimal precision

    Returns:
        Integer amount in smallest units

    Raises:
        ConfigurationError: If the value is a float, malformed, or has more
            fractional digits than the token supports
    """
    if isinstance(value, float) or isinstance(value, bool):
        raise ConfigurationError(f"Refusing non-exact amount {value!r}; pass a string or Decimal")
    try:
        amount = Decimal(str(value).strip().replace("_", ""))
    except InvalidOperation:
        raise ConfigurationError(f"Malformed amount: {value!r}")
    if not amount.is_finite():
        raise ConfigurationError(f"Malformed amount: {value!r}")

    with localcontext() as ctx:
        ctx.prec = _PRECISION
        scaled = amount.scaleb(decimals)
    if scaled != scaled.to_integral_value():
        raise ConfigurationError(
            f"Amount {value} has more than {decimals} fractional digits"
        )
    return int(scaled)


def format_units(raw: int, decimals: int) -> str:
    """Render a smallest-unit integer as a plain decimal string."""
    with localcontext() as ctx:
        ctx.prec = _PRECISION
        text = format(Decimal(raw).scaleb(-decimals), "f")
    if "." in text:
        text = text.rstrip("0").rstrip(".")
    return text


def bps_to_fraction(bps: int) -> Fraction:
    """50 bps -> Fraction(50, 10000)."""
    if isinstance(bps, bool) or not isinstance(bps, int):
        raise ConfigurationError(f"Slippage must be an integer number of bps, got {bps!r}")
    if not 0 <= bps < BPS_DENOMINATOR:
        raise ConfigurationError(f"Slippage out of range: {bps} bps")
    return Fraction(bps, BPS_DENOMINATOR)


@dataclass(frozen=True)
class TokenAmount:
    """
    Exact amount of an asset.

    Attributes:
        asset: Asset this amount measures
        raw: Quantity in the asset's smallest unit
    """

    asset: Asset
    raw: int

    def __post_init__(self):
        if isinstance(self.raw, bool) or not isinstance(self.raw, int):
            raise ConfigurationError(
                f"Raw amount for {self.asset.symbol} must be an int, got {type(self.raw).__name__}"
            )

    @classmethod
    def from_units(cls, asset: Asset, value: DecimalLike) -> "TokenAmount":
        """TokenAmount.from_units(COPM, "20000") -> 20000 * 10**18 raw."""
        return cls(asset, parse_units(value, asset.decimals))

    @classmethod
    def zero(cls, asset: Asset) -> "TokenAmount":
        return cls(asset, 0)

    def to_decimal(self) -> Decimal:
        with localcontext() as ctx:
            ctx.prec = _PRECISION
            return Decimal(self.raw).scaleb(-self.asset.decimals)

    def format(self) -> str:
        """Display string such as '20000 COPM'."""
        return f"{format_units(self.raw, self.asset.decimals)} {self.asset.symbol}"

    @property
    def is_positive(self) -> bool:
        return self.raw > 0

    def _check_same_asset(self, other: "TokenAmount"):
        if not isinstance(other, TokenAmount):
            raise ConfigurationError(f"Expected TokenAmount, got {type(other).__name__}")
        if other.asset != self.asset:
            raise ConfigurationError(
                f"Asset mismatch: {self.asset.symbol} vs {other.asset.symbol}"
            )

    def __add__(self, other: "TokenAmount") -> "TokenAmount":
        self._check_same_asset(other)
        return TokenAmount(self.asset, self.raw + other.raw)

    def __sub__(self, other: "TokenAmount") -> "TokenAmount":
        self._check_same_asset(other)
        return TokenAmount(self.asset, self.raw - other.raw)

    def __lt__(self, other: "TokenAmount") -> bool:
        self._check_same_asset(other)
        return self.raw < other.raw

    def __le__(self, other: "TokenAmount") -> bool:
        self._check_same_asset(other)
        return self.raw <= other.raw

    def scale(self, factor: Fraction) -> "TokenAmount":
        """Multiply by an exact fraction, rounding down."""
        scaled = Fraction(self.raw) * factor
        return TokenAmount(self.asset, scaled.numerator // scaled.denominator)

    def __str__(self) -> str:
        return self.format()
