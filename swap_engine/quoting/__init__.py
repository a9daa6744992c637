"""
Quote simulation.
"""

from .quoter import QuoteExactInputSingleRequest, QuoteResult, Quoter

__all__ = [
    'QuoteExactInputSingleRequest',
    'QuoteResult',
    'Quoter',
]
