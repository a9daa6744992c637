"""
Protocol-specific configuration for the swap engine.
"""

from dataclasses import dataclass, field
from typing import Dict, Optional

from eth_typing import ChecksumAddress

from ..core.errors import ConfigurationError
from ..core.types import checksum
from .base import BaseConfig, ConfigError

UNISWAP_V3_POOL_INIT_CODE_HASH = (
    "0xe34f199b19b2b4f47f68442619d555527d244f78a3297ea89325f843f87b8b54"
)


@dataclass(frozen=True)
class UniswapV3Deployment:
    """Addresses of one Uniswap V3 deployment."""

    factory: ChecksumAddress
    quoter: ChecksumAddress
    swap_router: ChecksumAddress
    init_code_hash: str = UNISWAP_V3_POOL_INIT_CODE_HASH

    def __post_init__(self):
        try:
            for name in ("factory", "quoter", "swap_router"):
                object.__setattr__(self, name, checksum(getattr(self, name), name))
        except ConfigurationError as e:
            raise ConfigError(str(e))
        code_hash = self.init_code_hash.lower()
        if not code_hash.startswith("0x") or len(code_hash) != 66:
            raise ConfigError(f"Invalid pool init code hash: {self.init_code_hash}")


@dataclass
class ProtocolConfig(BaseConfig):
    """Configuration for the Uniswap V3 contracts used by the engine."""

    # Optional overrides, e.g. for forks of the protocol
    FACTORY_OVERRIDE: Optional[str] = field(default_factory=lambda: BaseConfig.get_env("UNISWAP_V3_FACTORY"))
    QUOTER_OVERRIDE: Optional[str] = field(default_factory=lambda: BaseConfig.get_env("UNISWAP_V3_QUOTER"))
    ROUTER_OVERRIDE: Optional[str] = field(default_factory=lambda: BaseConfig.get_env("UNISWAP_V3_ROUTER"))
    INIT_CODE_HASH_OVERRIDE: Optional[str] = field(
        default_factory=lambda: BaseConfig.get_env("UNISWAP_V3_INIT_CODE_HASH")
    )

    @property
    def uniswap_v3_config(self) -> Dict[str, Dict]:
        """Uniswap V3 configuration by network."""
        return {
            "ethereum": {
                "factory": "0x1f98431c8ad98523631ae4a59f267346ea31f984",
                "quoter": "0xb27308f9f90d607463bb33ea1bebb41c27ce5ab6",
                "swap_router": "0xe592427a0aece92de3edee1f18e0157c05861564",
            },
            "polygon": {
                "factory": "0x1f98431c8ad98523631ae4a59f267346ea31f984",
                "quoter": "0xb27308f9f90d607463bb33ea1bebb41c27ce5ab6",
                "swap_router": "0xe592427a0aece92de3edee1f18e0157c05861564",
            },
        }

    def get_deployment(self, network: str) -> UniswapV3Deployment:
        """Get the Uniswap V3 deployment for a network, applying env overrides."""
        if network not in self.uniswap_v3_config:
            raise ConfigError(f"Unsupported network for Uniswap V3: {network}")
        config = self.uniswap_v3_config[network]
        return UniswapV3Deployment(
            factory=self.FACTORY_OVERRIDE or config["factory"],
            quoter=self.QUOTER_OVERRIDE or config["quoter"],
            swap_router=self.ROUTER_OVERRIDE or config["swap_router"],
            init_code_hash=self.INIT_CODE_HASH_OVERRIDE or UNISWAP_V3_POOL_INIT_CODE_HASH,
        )
