"""
Approve-then-swap execution.
"""

from .models import StateTransition, TradeFailure, TradeResult, TradeState
from .orchestrator import SwapExecutor
from .signer import LocalAccountSigner, Signer

__all__ = [
    'StateTransition',
    'TradeFailure',
    'TradeResult',
    'TradeState',
    'SwapExecutor',
    'LocalAccountSigner',
    'Signer',
]
