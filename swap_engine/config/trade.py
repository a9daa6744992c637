"""
Trade policy configuration.
"""

from dataclasses import dataclass, field
from typing import Optional

from ..core.request import DEFAULT_DEADLINE_SECONDS, DEFAULT_SLIPPAGE_BPS
from ..core.types import FeeTier
from .base import BaseConfig, ConfigError


@dataclass
class TradeConfig(BaseConfig):
    """The configured pair, amount and execution policy."""

    TOKEN_IN: str = field(default_factory=lambda: BaseConfig.get_env("TOKEN_IN", "COPM"))
    TOKEN_OUT: str = field(default_factory=lambda: BaseConfig.get_env("TOKEN_OUT", "USDC"))
    # Human readable decimal string, parsed exactly against the input token's decimals
    AMOUNT_IN: str = field(default_factory=lambda: BaseConfig.get_env("AMOUNT_IN", "20000"))
    POOL_FEE: str = field(default_factory=lambda: BaseConfig.get_env("POOL_FEE", "MEDIUM"))

    SLIPPAGE_BPS: int = field(
        default_factory=lambda: BaseConfig.get_env_int("SLIPPAGE_BPS", DEFAULT_SLIPPAGE_BPS)
    )
    DEADLINE_SECONDS: int = field(
        default_factory=lambda: BaseConfig.get_env_int("DEADLINE_SECONDS", DEFAULT_DEADLINE_SECONDS)
    )
    # Bound on each confirmation wait, in seconds
    RECEIPT_TIMEOUT: int = field(default_factory=lambda: BaseConfig.get_env_int("RECEIPT_TIMEOUT", 120))
    RECEIPT_POLL_INTERVAL: float = field(
        default_factory=lambda: BaseConfig.get_env_float("RECEIPT_POLL_INTERVAL", 1.0)
    )

    PRIVATE_KEY: Optional[str] = field(default_factory=lambda: BaseConfig.get_env("PRIVATE_KEY"), repr=False)

    @property
    def fee_tier(self) -> FeeTier:
        return FeeTier.parse(self.POOL_FEE)

    def _validate_config(self):
        super()._validate_config()
        if self.TOKEN_IN.upper() == self.TOKEN_OUT.upper():
            raise ConfigError(f"TOKEN_IN and TOKEN_OUT are both {self.TOKEN_IN}")
        if self.RECEIPT_TIMEOUT <= 0:
            raise ConfigError(f"RECEIPT_TIMEOUT must be positive, got {self.RECEIPT_TIMEOUT}")

    def to_dict(self):
        data = super().to_dict()
        data.pop("PRIVATE_KEY", None)
        return data
