"""
Pool discovery and pool state reads.
"""

from .locator import compute_pool_address, locate
from .state_reader import PoolStateReader

__all__ = [
    'compute_pool_address',
    'locate',
    'PoolStateReader',
]
