"""
Configuration management for the swap engine.

Construct a ConfigManager at the application boundary and pass it (or the
values it resolves) to the components; nothing reads configuration globally.

Example:
    from swap_engine.config import ConfigManager

    config = ConfigManager(chain="polygon")

    rpc_url = config.rpc_url
    deployment = config.deployment
    request = config.build_trade_request()
"""

from .base import BaseConfig, ConfigError
from .chains import ChainConfig
from .manager import ConfigManager
from .protocols import ProtocolConfig, UniswapV3Deployment, UNISWAP_V3_POOL_INIT_CODE_HASH
from .tokens import TokenConfig
from .trade import TradeConfig

__all__ = [
    "BaseConfig",
    "ConfigError",
    "ChainConfig",
    "ConfigManager",
    "ProtocolConfig",
    "UniswapV3Deployment",
    "UNISWAP_V3_POOL_INIT_CODE_HASH",
    "TokenConfig",
    "TradeConfig",
]
