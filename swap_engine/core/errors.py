"""
Error taxonomy for the swap engine.

Every component reports failures with the pipeline step that failed and the
underlying cause, so callers can decide whether a brand-new trade attempt is
worth making.
"""

import logging
import re
from typing import Any, Dict, Optional

import aiohttp
from web3.exceptions import BadFunctionCallOutput, ContractLogicError, TimeExhausted


class SwapEngineError(Exception):
    """Base exception for swap engine failures."""

    def __init__(
        self,
        message: str,
        step: Optional[str] = None,
        cause: Optional[BaseException] = None,
    ):
        super().__init__(message)
        self.step = step
        self.cause = cause

    @property
    def retryable(self) -> bool:
        """Whether a fresh attempt could succeed without caller changes."""
        return False


class ConfigurationError(SwapEngineError):
    """Raised for invalid asset pairs, amounts or other caller bugs."""
    pass


class NetworkError(SwapEngineError):
    """Raised when an RPC read or submission fails."""

    @property
    def retryable(self) -> bool:
        return True


class QuoteUnavailable(SwapEngineError):
    """Raised when the quote simulation reverted or returned nothing."""

    @property
    def retryable(self) -> bool:
        return True


class SignerError(SwapEngineError):
    """Raised when no account is connected or signing was rejected."""
    pass


class TransactionReverted(SwapEngineError):
    """Raised when an approval or swap transaction fails on-chain."""

    def __init__(
        self,
        message: str,
        step: Optional[str] = None,
        cause: Optional[BaseException] = None,
        tx_hash: Optional[str] = None,
        outcome: Any = None,
    ):
        super().__init__(message, step=step, cause=cause)
        self.tx_hash = tx_hash
        self.outcome = outcome


class DeadlineExceeded(SwapEngineError):
    """Raised when a confirmation wait exceeded its bound or the swap deadline."""

    def __init__(
        self,
        message: str,
        step: Optional[str] = None,
        cause: Optional[BaseException] = None,
        tx_hash: Optional[str] = None,
    ):
        super().__init__(message, step=step, cause=cause)
        self.tx_hash = tx_hash


# Lower-cased message fragments per category, checked in this order.
# Status codes must stand alone so they never match inside hex revert data.
_KEYWORDS = (
    ('contract', ('execution reverted', 'revert', 'out of gas', 'gas required exceeds')),
    ('rate_limit', ('rate limit', 'too many requests')),
    ('validation', (
        'nonce too low', 'insufficient funds', 'replacement transaction underpriced',
        'invalid', 'bad request',
    )),
    ('network', ('connection', 'timeout', 'timed out', 'network', 'dns', 'server disconnected')),
)

_STATUS_CODES = (
    ('rate_limit', re.compile(r'\b429\b')),
    ('validation', re.compile(r'\b400\b')),
    ('network', re.compile(r'\b50[234]\b')),
)


class ErrorClassifier:
    """
    Maps raw web3 / JSON-RPC exceptions onto the swap engine taxonomy.

    Providers report the same failure with different exception types, so the
    message is matched against keyword tables once the exception class alone
    is not decisive.
    """

    def __init__(self, logger: Optional[logging.Logger] = None):
        self.logger = logger or logging.getLogger(__name__)

    def classify_error(self, error: BaseException) -> str:
        """
        Classify a raw exception.

        Returns:
            One of 'contract', 'rate_limit', 'network', 'validation', 'unknown'
        """
        if isinstance(error, (ContractLogicError, BadFunctionCallOutput)):
            return 'contract'
        if isinstance(error, aiohttp.ClientResponseError) and error.status == 429:
            return 'rate_limit'
        # aiohttp carries the RPC transport
        if isinstance(error, (TimeExhausted, TimeoutError, aiohttp.ClientError, OSError)):
            return 'network'

        message = str(error).lower()
        for category, keywords in _KEYWORDS:
            if any(keyword in message for keyword in keywords):
                return category
        for category, pattern in _STATUS_CODES:
            if pattern.search(message):
                return category
        return 'unknown'

    def is_retryable(self, error: BaseException) -> bool:
        """Reverts and rejected transactions repeat on retry; transport problems may not."""
        if isinstance(error, SwapEngineError):
            return error.retryable
        return self.classify_error(error) in ('network', 'rate_limit', 'unknown')

    def to_quote_error(self, error: BaseException, step: str = "quote") -> SwapEngineError:
        """Wrap a quote simulation failure."""
        if isinstance(error, SwapEngineError):
            return error
        if self.classify_error(error) in ('network', 'rate_limit'):
            return NetworkError(f"Quote request failed: {error}", step=step, cause=error)
        return QuoteUnavailable(f"Quote simulation failed: {error}", step=step, cause=error)

    def to_submission_error(self, error: BaseException, step: str) -> SwapEngineError:
        """Wrap a transaction submission failure."""
        if isinstance(error, SwapEngineError):
            return error
        category = self.classify_error(error)
        if category == 'contract':
            return TransactionReverted(
                f"{step} transaction would revert: {error}", step=step, cause=error
            )
        if category == 'validation':
            return SignerError(f"{step} transaction rejected: {error}", step=step, cause=error)
        return NetworkError(f"{step} transaction submission failed: {error}", step=step, cause=error)

    def log_error(self, error: BaseException, context: Dict[str, Any]):
        """
        Log a raw exception at a level matching its category.

        Args:
            error: Exception to log
            context: Extra fields such as the step and addresses involved
        """
        category = self.classify_error(error)
        extra = {
            'error_type': type(error).__name__,
            'error_category': category,
            'error_message': str(error),
            **context,
        }
        message = f"{category} error: {type(error).__name__}: {error}"
        if category == 'contract':
            self.logger.error(message, extra=extra)
        elif category == 'rate_limit':
            self.logger.info(message, extra=extra)
        else:
            self.logger.warning(message, extra=extra)
