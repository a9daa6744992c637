"""
Explicit network context passed to the reader, quoter and executor.

A ChainContext owns one AsyncWeb3 connection and the contract addresses of
the deployment it talks to. It is created at the application boundary and
closed there; components never construct their own connection.
"""

import logging
from dataclasses import dataclass
from typing import Optional

from web3 import AsyncHTTPProvider, AsyncWeb3

from .config.protocols import UniswapV3Deployment
from .core.errors import ConfigurationError, NetworkError

logger = logging.getLogger(__name__)


@dataclass
class ChainContext:
    """
    Connection plus deployment addresses for one chain.

    Attributes:
        w3: Async web3 client
        chain_id: Expected chain ID
        deployment: Uniswap V3 factory, quoter and router addresses
        chain_name: Configured chain name, for logs and explorer links
    """

    w3: AsyncWeb3
    chain_id: int
    deployment: UniswapV3Deployment
    chain_name: Optional[str] = None

    @classmethod
    async def connect(
        cls,
        rpc_url: str,
        deployment: UniswapV3Deployment,
        chain_id: Optional[int] = None,
        chain_name: Optional[str] = None,
        request_timeout: int = 30,
    ) -> "ChainContext":
        """
        Open a connection and verify the chain ID.

        Args:
            rpc_url: JSON-RPC HTTP endpoint
            deployment: Contract addresses to use
            chain_id: Expected chain ID; checked against the node when given
            chain_name: Name used in logs
            request_timeout: Per-request timeout in seconds

        Returns:
            Connected ChainContext

        Raises:
            NetworkError: If the node is unreachable
            ConfigurationError: If the node reports a different chain ID
        """
        if not rpc_url:
            raise ConfigurationError("RPC URL is required")

        w3 = AsyncWeb3(AsyncHTTPProvider(rpc_url, request_kwargs={"timeout": request_timeout}))
        try:
            node_chain_id = await w3.eth.chain_id
        except Exception as e:
            await w3.provider.disconnect()
            raise NetworkError(f"Failed to connect to RPC: {e}", step="connect", cause=e)

        if chain_id is not None and node_chain_id != chain_id:
            await w3.provider.disconnect()
            raise ConfigurationError(
                f"RPC chain ID {node_chain_id} does not match configured chain ID {chain_id}",
                step="connect",
            )

        logger.info(f"Connected to chain {chain_name or node_chain_id} (chain_id={node_chain_id})")
        return cls(w3=w3, chain_id=node_chain_id, deployment=deployment, chain_name=chain_name)

    @classmethod
    async def from_config(cls, config) -> "ChainContext":
        """Connect using a ConfigManager."""
        return await cls.connect(
            config.rpc_url,
            config.deployment,
            chain_id=config.chain_id,
            chain_name=config.chain,
            request_timeout=config.chains.RPC_TIMEOUT,
        )

    async def close(self) -> None:
        """Release the provider's HTTP session."""
        await self.w3.provider.disconnect()
        logger.debug("Chain context closed")

    async def __aenter__(self) -> "ChainContext":
        return self

    async def __aexit__(self, exc_type, exc, tb) -> None:
        await self.close()
