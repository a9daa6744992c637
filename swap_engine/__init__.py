"""
Single-trade Uniswap V3 swap engine.

Pool Locator -> Pool State Reader -> Quote Engine -> Trade Builder -> Execution Orchestrator.
"""

from .context import ChainContext
from .core import (
    Asset,
    ConfigurationError,
    FeeTier,
    PoolIdentity,
    PoolState,
    SwapEngineError,
    TokenAmount,
    TradeRequest,
)
from .execution import LocalAccountSigner, Signer, SwapExecutor, TradeResult, TradeState
from .pools import PoolStateReader, compute_pool_address, locate
from .quoting import QuoteResult, Quoter
from .trade import SwapExecutionParameters, TradeBuilder

__version__ = "0.1.0"

__all__ = [
    'ChainContext',
    'Asset',
    'ConfigurationError',
    'FeeTier',
    'PoolIdentity',
    'PoolState',
    'SwapEngineError',
    'TokenAmount',
    'TradeRequest',
    'LocalAccountSigner',
    'Signer',
    'SwapExecutor',
    'TradeResult',
    'TradeState',
    'PoolStateReader',
    'compute_pool_address',
    'locate',
    'QuoteResult',
    'Quoter',
    'SwapExecutionParameters',
    'TradeBuilder',
]
