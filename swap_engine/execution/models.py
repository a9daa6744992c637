"""
State and result types for one swap attempt.
"""

from dataclasses import dataclass, field
from datetime import datetime, timedelta
from enum import Enum
from typing import Any, Dict, List, Optional

from ..core.errors import SwapEngineError
from ..core.request import TradeRequest
from ..core.types import PoolState, TransactionOutcome
from ..quoting.quoter import QuoteResult
from ..trade.builder import SwapExecutionParameters


class TradeState(Enum):
    """Execution state of a swap attempt."""
    IDLE = "idle"
    QUOTE_PENDING = "quote_pending"
    QUOTE_READY = "quote_ready"
    APPROVING = "approving"
    APPROVAL_CONFIRMED = "approval_confirmed"
    SWAPPING = "swapping"
    SWAP_CONFIRMED = "swap_confirmed"
    FAILED = "failed"

    @property
    def is_terminal(self) -> bool:
        return self in (TradeState.SWAP_CONFIRMED, TradeState.FAILED)


# Legal forward transitions; FAILED is reachable from any non-terminal state.
TRANSITIONS = {
    TradeState.IDLE: {TradeState.QUOTE_PENDING},
    TradeState.QUOTE_PENDING: {TradeState.QUOTE_READY},
    TradeState.QUOTE_READY: {TradeState.APPROVING},
    TradeState.APPROVING: {TradeState.APPROVAL_CONFIRMED},
    TradeState.APPROVAL_CONFIRMED: {TradeState.SWAPPING},
    TradeState.SWAPPING: {TradeState.SWAP_CONFIRMED},
    TradeState.SWAP_CONFIRMED: set(),
    TradeState.FAILED: set(),
}


def can_transition(current: TradeState, target: TradeState) -> bool:
    if current.is_terminal:
        return False
    return target == TradeState.FAILED or target in TRANSITIONS[current]


@dataclass(frozen=True)
class StateTransition:
    """One recorded state change."""
    state: TradeState
    at: datetime


@dataclass(frozen=True)
class TradeFailure:
    """
    Why an attempt ended in FAILED.

    Attributes:
        step: Pipeline step that failed
        reason: Short reason such as "no quoted amount" or "transaction reverted"
        error: The classified error
    """

    step: str
    reason: str
    error: Optional[SwapEngineError] = None

    @property
    def retryable(self) -> bool:
        return self.error.retryable if self.error is not None else False

    def __str__(self) -> str:
        if self.error is None:
            return f"{self.step}: {self.reason}"
        return f"{self.step}: {self.reason} ({self.error})"


@dataclass
class TradeResult:
    """Terminal report of one swap attempt, including partial progress."""

    request: TradeRequest
    state: TradeState = TradeState.IDLE
    history: List[StateTransition] = field(default_factory=list)
    account: Optional[str] = None
    pool_address: Optional[str] = None
    pool_state: Optional[PoolState] = None
    quote: Optional[QuoteResult] = None
    parameters: Optional[SwapExecutionParameters] = None
    approval: Optional[TransactionOutcome] = None
    swap: Optional[TransactionOutcome] = None
    failure: Optional[TradeFailure] = None
    started_at: datetime = field(default_factory=datetime.now)
    completed_at: Optional[datetime] = None

    @property
    def success(self) -> bool:
        return self.state == TradeState.SWAP_CONFIRMED

    @property
    def duration(self) -> Optional[timedelta]:
        if self.completed_at:
            return self.completed_at - self.started_at
        return None

    @property
    def states(self) -> List[TradeState]:
        return [transition.state for transition in self.history]

    def to_dict(self) -> Dict[str, Any]:
        """Summary suitable for logging."""
        return {
            'trade': self.request.describe(),
            'state': self.state.value,
            'states': [state.value for state in self.states],
            'account': self.account,
            'pool_address': self.pool_address,
            'quoted_amount': str(self.quote.amount) if self.quote and self.quote.amount else None,
            'amount_out_minimum': str(self.parameters.amount_out_minimum) if self.parameters else None,
            'deadline': self.parameters.deadline if self.parameters else None,
            'approval_tx': self.approval.tx_hash.hex() if self.approval else None,
            'swap_tx': self.swap.tx_hash.hex() if self.swap else None,
            'failure': str(self.failure) if self.failure else None,
            'duration': self.duration.total_seconds() if self.duration else None,
        }
