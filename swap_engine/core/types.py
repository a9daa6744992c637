"""
Core types for the swap engine.

Domain models shared by the pool, quoting, trade and execution modules.
"""

from dataclasses import dataclass, field
from enum import Enum, IntEnum
from typing import Optional, Tuple

from eth_typing import ChecksumAddress
from eth_utils import is_address, to_checksum_address
from hexbytes import HexBytes

from .errors import ConfigurationError


def checksum(address: str, what: str = "address") -> ChecksumAddress:
    """Validate and checksum an address, raising ConfigurationError when malformed."""
    if not isinstance(address, str) or not is_address(address):
        raise ConfigurationError(f"Invalid {what}: {address!r}")
    return to_checksum_address(address)


@dataclass(frozen=True, eq=False)
class Asset:
    """
    Fungible token identity.

    Attributes:
        chain_id: Network the token lives on
        address: Token contract address (checksummed on construction)
        decimals: Decimal precision of the smallest unit
        symbol: Ticker symbol
        name: Human readable name (optional)
    """

    chain_id: int
    address: ChecksumAddress
    decimals: int
    symbol: str
    name: Optional[str] = None

    def __post_init__(self):
        object.__setattr__(self, "address", checksum(self.address, f"{self.symbol} address"))
        if not 0 <= self.decimals <= 255:
            raise ConfigurationError(f"Invalid decimals for {self.symbol}: {self.decimals}")

    def __eq__(self, other) -> bool:
        if not isinstance(other, Asset):
            return NotImplemented
        return self.chain_id == other.chain_id and self.address == other.address

    def __hash__(self) -> int:
        return hash((self.chain_id, self.address))

    def sorts_before(self, other: "Asset") -> bool:
        """Uniswap token ordering: lower address is token0."""
        if self.chain_id != other.chain_id:
            raise ConfigurationError(
                f"Assets on different chains: {self.chain_id} != {other.chain_id}"
            )
        if self == other:
            raise ConfigurationError(f"Identical assets: {self.symbol}")
        return self.address.lower() < other.address.lower()

    def __repr__(self) -> str:
        return f"Asset({self.symbol}, {self.address}, chain={self.chain_id})"


class FeeTier(IntEnum):
    """Uniswap V3 fee tiers in hundredths of a basis point."""

    LOWEST = 100
    LOW = 500
    MEDIUM = 3000
    HIGH = 10000

    @property
    def tick_spacing(self) -> int:
        return {
            FeeTier.LOWEST: 1,
            FeeTier.LOW: 10,
            FeeTier.MEDIUM: 60,
            FeeTier.HIGH: 200,
        }[self]

    @property
    def percent(self) -> str:
        return f"{self.value / 10_000:.2f}%"

    @classmethod
    def parse(cls, value) -> "FeeTier":
        """Accept a tier name ('MEDIUM') or its fee value (3000)."""
        if isinstance(value, FeeTier):
            return value
        try:
            if isinstance(value, str) and not value.strip().isdigit():
                return cls[value.strip().upper()]
            return cls(int(value))
        except (KeyError, ValueError, TypeError):
            raise ConfigurationError(f"Unsupported fee tier: {value!r}")


@dataclass(frozen=True, eq=False)
class PoolIdentity:
    """
    Unordered (asset, asset, fee) pool key.

    The two assets are stored in sorted order so that (A, B, fee) and
    (B, A, fee) are the same identity.
    """

    token_a: Asset
    token_b: Asset
    fee: FeeTier

    def __post_init__(self):
        object.__setattr__(self, "fee", FeeTier.parse(self.fee))
        if not self.token_a.sorts_before(self.token_b):
            a, b = self.token_b, self.token_a
            object.__setattr__(self, "token_a", a)
            object.__setattr__(self, "token_b", b)

    @property
    def token0(self) -> Asset:
        return self.token_a

    @property
    def token1(self) -> Asset:
        return self.token_b

    @property
    def chain_id(self) -> int:
        return self.token0.chain_id

    def involves(self, asset: Asset) -> bool:
        return asset == self.token0 or asset == self.token1

    def other(self, asset: Asset) -> Asset:
        """Return the counterpart of `asset` in this pool."""
        if asset == self.token0:
            return self.token1
        if asset == self.token1:
            return self.token0
        raise ConfigurationError(f"{asset.symbol} is not part of pool {self}")

    def key(self) -> Tuple[str, str, int]:
        return (self.token0.address, self.token1.address, int(self.fee))

    def __eq__(self, other) -> bool:
        if not isinstance(other, PoolIdentity):
            return NotImplemented
        return self.key() == other.key() and self.chain_id == other.chain_id

    def __hash__(self) -> int:
        return hash((self.chain_id, *self.key()))

    def __str__(self) -> str:
        return f"{self.token0.symbol}/{self.token1.symbol} {self.fee.percent}"


@dataclass(frozen=True)
class Slot0:
    """Typed result of the pool slot0() call."""

    sqrt_price_x96: int
    tick: int
    observation_index: int = 0
    observation_cardinality: int = 0
    observation_cardinality_next: int = 0
    fee_protocol: int = 0
    unlocked: bool = True

    @classmethod
    def from_call(cls, raw) -> "Slot0":
        """Build from the raw tuple returned by web3, validating field types."""
        if raw is None or len(raw) < 2:
            raise ValueError(f"Malformed slot0 response: {raw!r}")
        fields = list(raw) + [0] * (7 - len(raw))
        for value in fields[:6]:
            if not isinstance(value, int) or isinstance(value, bool):
                raise ValueError(f"Malformed slot0 response: {raw!r}")
        return cls(
            sqrt_price_x96=fields[0],
            tick=fields[1],
            observation_index=fields[2],
            observation_cardinality=fields[3],
            observation_cardinality_next=fields[4],
            fee_protocol=fields[5],
            unlocked=bool(fields[6]) if len(raw) >= 7 else True,
        )


@dataclass(frozen=True)
class PoolState:
    """
    Snapshot of a pool's mutable on-chain data.

    Attributes:
        address: Pool contract address
        token0: Lower-sorted token address
        token1: Higher-sorted token address
        fee: Fee reported by the pool
        liquidity: In-range liquidity
        sqrt_price_x96: Current sqrt price in Q64.96
        tick: Current tick
        block_number: Block the reads were taken at (optional)
    """

    address: ChecksumAddress
    token0: ChecksumAddress
    token1: ChecksumAddress
    fee: int
    liquidity: int
    sqrt_price_x96: int
    tick: int
    block_number: Optional[int] = None


class TransactionStatus(Enum):
    """Terminal status of a mined transaction."""
    CONFIRMED = "confirmed"
    REVERTED = "reverted"


@dataclass(frozen=True)
class TransactionOutcome:
    """Terminal record of one submitted transaction."""

    tx_hash: HexBytes
    status: TransactionStatus
    step: Optional[str] = None
    block_number: Optional[int] = None
    block_hash: Optional[HexBytes] = None
    gas_used: Optional[int] = None
    effective_gas_price: Optional[int] = None

    @property
    def confirmed(self) -> bool:
        return self.status == TransactionStatus.CONFIRMED

    @classmethod
    def from_receipt(cls, receipt, step: Optional[str] = None) -> "TransactionOutcome":
        """Build from a web3 transaction receipt mapping."""
        status = TransactionStatus.CONFIRMED if receipt["status"] == 1 else TransactionStatus.REVERTED
        block_hash = receipt.get("blockHash")
        return cls(
            tx_hash=HexBytes(receipt["transactionHash"]),
            status=status,
            step=step,
            block_number=receipt.get("blockNumber"),
            block_hash=HexBytes(block_hash) if block_hash is not None else None,
            gas_used=receipt.get("gasUsed"),
            effective_gas_price=receipt.get("effectiveGasPrice"),
        )


@dataclass
class TransactionRequest:
    """Unsigned transaction handed to a signer."""

    to: ChecksumAddress
    data: HexBytes
    value: int = 0
    step: Optional[str] = None
    gas: Optional[int] = None
    metadata: dict = field(default_factory=dict)

    def to_dict(self) -> dict:
        tx = {"to": self.to, "data": HexBytes(self.data), "value": self.value}
        if self.gas is not None:
            tx["gas"] = self.gas
        return tx
