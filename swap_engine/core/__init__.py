"""
Core value types, amounts, tick math and the error taxonomy.
"""

from .amounts import TokenAmount, bps_to_fraction, format_units, parse_units
from .errors import (
    ConfigurationError,
    DeadlineExceeded,
    ErrorClassifier,
    NetworkError,
    QuoteUnavailable,
    SignerError,
    SwapEngineError,
    TransactionReverted,
)
from .request import TradeRequest
from .types import (
    Asset,
    FeeTier,
    PoolIdentity,
    PoolState,
    Slot0,
    TransactionOutcome,
    TransactionRequest,
    TransactionStatus,
)

__all__ = [
    'TradeRequest',
    'TokenAmount',
    'bps_to_fraction',
    'format_units',
    'parse_units',
    'ConfigurationError',
    'DeadlineExceeded',
    'ErrorClassifier',
    'NetworkError',
    'QuoteUnavailable',
    'SignerError',
    'SwapEngineError',
    'TransactionReverted',
    'Asset',
    'FeeTier',
    'PoolIdentity',
    'PoolState',
    'Slot0',
    'TransactionOutcome',
    'TransactionRequest',
    'TransactionStatus',
]
