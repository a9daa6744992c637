"""
Trade assembly and SwapRouter calldata.
"""

from .builder import SwapExecutionParameters, TradeBuilder, swap_call_parameters
from .entities import Pool, Route, Trade, TradeType
from .router_calls import (
    ApproveCall,
    ExactInputSingleParams,
    ExactOutputSingleParams,
    decode_exact_input_single,
    decode_exact_output_single,
)

__all__ = [
    'SwapExecutionParameters',
    'TradeBuilder',
    'swap_call_parameters',
    'Pool',
    'Route',
    'Trade',
    'TradeType',
    'ApproveCall',
    'ExactInputSingleParams',
    'ExactOutputSingleParams',
    'decode_exact_input_single',
    'decode_exact_output_single',
]
