"""
Configuration manager for the swap engine.

Bundles the configuration classes for one run. The application boundary
builds a ConfigManager and hands it (or values resolved from it) to the
components; there is no process-wide instance.
"""

import logging
from typing import Any, Dict, Optional

from ..core.amounts import TokenAmount
from ..core.request import TradeRequest
from ..core.types import Asset
from .base import BaseConfig, ConfigError
from .chains import ChainConfig
from .protocols import ProtocolConfig, UniswapV3Deployment
from .tokens import TokenConfig
from .trade import TradeConfig

logger = logging.getLogger(__name__)


class ConfigManager:
    """
    Chain, protocol, token and trade settings for one swap run.

    Args:
        environment: Overrides ENVIRONMENT (local, dev, staging, production)
        chain: Overrides DEFAULT_CHAIN (local, polygon)
    """

    def __init__(self, environment: Optional[str] = None, chain: Optional[str] = None):
        self._chain = chain
        try:
            self.base = BaseConfig()
            if environment:
                self.base.ENVIRONMENT = environment
                self.base._validate_config()
            self.chains = ChainConfig()
            self.protocols = ProtocolConfig()
            self.tokens = TokenConfig()
            self.trade = TradeConfig()
        except ConfigError:
            raise
        except Exception as e:
            logger.error(f"Could not load configuration: {e}")
            raise ConfigError(f"Could not load configuration: {e}") from e

        logger.info(f"Loaded {self.environment} configuration for chain {self.chain}")

    @property
    def environment(self) -> str:
        return self.base.ENVIRONMENT

    @property
    def chain(self) -> str:
        """Chain to trade on."""
        return self._chain or self.chains.DEFAULT_CHAIN

    @property
    def chain_id(self) -> int:
        return self.chains.get_chain_id(self.chain)

    @property
    def rpc_url(self) -> str:
        return self.chains.get_rpc_url(self.chain)

    @property
    def deployment(self) -> UniswapV3Deployment:
        """Uniswap V3 contract addresses for the selected chain."""
        return self.protocols.get_deployment(self.chains.get_deployment_name(self.chain))

    def get_asset(self, symbol: str) -> Asset:
        """Resolve a registered token on the selected chain."""
        network = self.chains.get_deployment_name(self.chain)
        return self.tokens.get_asset(network, symbol, self.chain_id)

    def build_trade_request(self) -> TradeRequest:
        """
        Build the configured trade request.

        Returns:
            TradeRequest for TOKEN_IN -> TOKEN_OUT with the configured amount and policy
        """
        trade = self.trade
        asset_in = self.get_asset(trade.TOKEN_IN)
        return TradeRequest(
            amount_in=TokenAmount.from_units(asset_in, trade.AMOUNT_IN),
            asset_out=self.get_asset(trade.TOKEN_OUT),
            fee=trade.fee_tier,
            slippage_bps=trade.SLIPPAGE_BPS,
            deadline_seconds=trade.DEADLINE_SECONDS,
        )

    def validate_configuration(self) -> bool:
        """
        Check that the chain, deployment and trade request all resolve.

        The RPC URL is not required here so that quote-free checks work offline.

        Raises:
            ConfigError: Describing the first problem found
        """
        try:
            self.chains.get_chain_config(self.chain)
            deployment = self.deployment
            request = self.build_trade_request()
        except Exception as e:
            logger.error(f"Invalid configuration: {e}")
            raise ConfigError(f"Invalid configuration: {e}") from e

        logger.debug(f"Router {deployment.swap_router}, trade {request.describe()}")
        logger.info("Configuration is valid")
        return True

    def to_dict(self) -> Dict[str, Any]:
        """Settings without secrets, for logging."""
        return {
            "environment": self.environment,
            "chain": self.chain,
            "base": self.base.to_dict(),
            "chains": self.chains.to_dict(),
            "protocols": self.protocols.to_dict(),
            "trade": self.trade.to_dict(),
        }

    def __repr__(self) -> str:
        return f"ConfigManager(environment={self.environment}, chain={self.chain})"
