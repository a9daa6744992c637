"""
Chain-specific configuration for the swap engine.
"""

from dataclasses import dataclass, field
from typing import Dict, Optional

from .base import BaseConfig, ConfigError

ALCHEMY_POLYGON_URL = "https://polygon-mainnet.g.alchemy.com/v2/{api_key}"


@dataclass
class ChainConfig(BaseConfig):
    """Chain-specific configuration for supported networks."""

    # Default chain settings
    DEFAULT_CHAIN: str = field(default_factory=lambda: BaseConfig.get_env("DEFAULT_CHAIN", "polygon"))

    # RPC endpoints; the local node is expected to be a Polygon fork (anvil/hardhat)
    LOCAL_RPC_URL: str = field(
        default_factory=lambda: BaseConfig.get_env("LOCAL_RPC_URL", "http://localhost:8545")
    )
    POLYGON_RPC_URL: Optional[str] = field(default_factory=lambda: BaseConfig.get_env("POLYGON_RPC_URL"))
    ALCHEMY_API_KEY: Optional[str] = field(default_factory=lambda: BaseConfig.get_env("ALCHEMY_API_KEY"))

    # Chain IDs
    POLYGON_CHAIN_ID: int = 137
    LOCAL_CHAIN_ID: int = field(default_factory=lambda: BaseConfig.get_env_int("LOCAL_CHAIN_ID", 137))

    # RPC request timeout in seconds
    RPC_TIMEOUT: int = field(default_factory=lambda: BaseConfig.get_env_int("RPC_TIMEOUT", 30))

    @property
    def polygon_rpc_url(self) -> str:
        if self.POLYGON_RPC_URL:
            return self.POLYGON_RPC_URL
        if self.ALCHEMY_API_KEY:
            return ALCHEMY_POLYGON_URL.format(api_key=self.ALCHEMY_API_KEY)
        return ""

    @property
    def supported_chains(self) -> Dict[str, Dict]:
        """Get configuration for all supported chains."""
        return {
            "local": {
                "chain_id": self.LOCAL_CHAIN_ID,
                "rpc_url": self.LOCAL_RPC_URL,
                "native_token": "MATIC",
                "explorer_url": "",
                # Contract addresses on a fork are those of the forked network
                "deployment": "polygon",
            },
            "polygon": {
                "chain_id": self.POLYGON_CHAIN_ID,
                "rpc_url": self.polygon_rpc_url,
                "native_token": "MATIC",
                "explorer_url": "https://polygonscan.com",
                "deployment": "polygon",
            },
        }

    def get_chain_config(self, chain_name: str) -> Dict:
        """Get configuration for a specific chain."""
        if chain_name not in self.supported_chains:
            raise ConfigError(f"Unsupported chain: {chain_name}")
        return self.supported_chains[chain_name]

    def get_rpc_url(self, chain_name: str) -> str:
        """Get RPC URL for a specific chain."""
        rpc_url = self.get_chain_config(chain_name)["rpc_url"]
        if not rpc_url:
            raise ConfigError(
                f"No RPC URL for chain '{chain_name}': set POLYGON_RPC_URL or ALCHEMY_API_KEY"
            )
        return rpc_url

    def get_chain_id(self, chain_name: str) -> int:
        """Get chain ID for a specific chain."""
        return self.get_chain_config(chain_name)["chain_id"]

    def get_deployment_name(self, chain_name: str) -> str:
        """Network whose contract and token addresses apply to this chain."""
        return self.get_chain_config(chain_name)["deployment"]

    def explorer_tx_url(self, chain_name: str, tx_hash: str) -> Optional[str]:
        """Block explorer link for a transaction, if the chain has an explorer."""
        explorer = self.get_chain_config(chain_name)["explorer_url"]
        if not explorer:
            return None
        if not tx_hash.startswith("0x"):
            tx_hash = f"0x{tx_hash}"
        return f"{explorer}/tx/{tx_hash}"

    def to_dict(self):
        data = super().to_dict()
        # RPC URLs may embed the API key
        data.pop("ALCHEMY_API_KEY", None)
        data.pop("POLYGON_RPC_URL", None)
        return data
