"""
Token registry.
"""

from dataclasses import dataclass
from typing import Dict, Tuple

from ..core.types import Asset
from .base import BaseConfig, ConfigError


@dataclass
class TokenConfig(BaseConfig):
    """Known ERC-20 tokens per network: symbol -> (address, decimals, name)."""

    @property
    def tokens(self) -> Dict[str, Dict[str, Tuple[str, int, str]]]:
        return {
            "polygon": {
                "COPM": ("0x12050c705152931cfee3dd56c52fb09dea816c23", 18, "COP Minteo"),
                "USDC": ("0x3c499c542cef5e3811e1192ce70d8cc03d5c3359", 6, "USD Coin"),
                "USDC.E": ("0x2791bca1f2de4661ed88a30c99a7a9449aa84174", 6, "USD Coin (PoS)"),
                "WETH": ("0x7ceb23fd6bc0add59e62ac25578270cff1b9f619", 18, "Wrapped Ether"),
                "WMATIC": ("0x0d500b1d8e8ef31e21c99d1db9a6444d3adf1270", 18, "Wrapped Matic"),
            },
            "ethereum": {
                "USDC": ("0xa0b86991c6218b36c1d19d4a2e9eb0ce3606eb48", 6, "USD Coin"),
                "WETH": ("0xc02aaa39b223fe8d0a0e5c4f27ead9083c756cc2", 18, "Wrapped Ether"),
            },
        }

    def get_asset(self, network: str, symbol: str, chain_id: int) -> Asset:
        """
        Resolve a registered token.

        Args:
            network: Network whose addresses apply (e.g. 'polygon')
            symbol: Token symbol, case-insensitive
            chain_id: Chain ID to stamp on the asset (a fork keeps the network's addresses)

        Returns:
            Asset for the token
        """
        registry = self.tokens.get(network)
        if registry is None:
            raise ConfigError(f"No token registry for network: {network}")
        entry = registry.get(symbol.upper())
        if entry is None:
            raise ConfigError(f"Unknown token '{symbol}' on {network}")
        address, decimals, name = entry
        display_symbol = "USDC.e" if symbol.upper() == "USDC.E" else symbol.upper()
        return Asset(chain_id=chain_id, address=address, decimals=decimals, symbol=display_symbol, name=name)
