"""
Pool state reads.

Fetches the mutable state of a Uniswap V3 pool with a fixed set of
independent read calls issued concurrently and joined into one PoolState.
"""

import asyncio
import logging
from typing import Any, Awaitable, List, Tuple, Union

from eth_utils import is_address, to_checksum_address

from ..context import ChainContext
from ..core.errors import ErrorClassifier, NetworkError
from ..core.types import PoolState, Slot0, checksum
from .abis import UNISWAP_V3_POOL_ABI

STEP = "pool_state"

_UINT128_MAX = (1 << 128) - 1
_MAX_FEE = 1_000_000


class PoolStateReader:
    """
    Reads token0, token1, fee, liquidity and slot0 of a pool.

    The reads run concurrently; the result is returned only when all of them
    succeeded. Nothing is cached between calls and nothing is retried here.
    """

    def __init__(self, context: ChainContext):
        self.context = context
        self.logger = logging.getLogger(f"{__name__}.{self.__class__.__name__}")
        self.error_handler = ErrorClassifier(self.logger)

    async def read(
        self, pool_address: str, block_identifier: Union[int, str] = "latest"
    ) -> PoolState:
        """
        Read the current state of a pool.

        Args:
            pool_address: Pool contract address
            block_identifier: Block to read at

        Returns:
            PoolState snapshot

        Raises:
            ConfigurationError: If the pool address is malformed
            NetworkError: If any read fails or no contract is deployed at the address
        """
        address = checksum(pool_address, "pool address")
        w3 = self.context.w3
        pool = w3.eth.contract(address=address, abi=UNISWAP_V3_POOL_ABI)

        calls: List[Tuple[str, Awaitable[Any]]] = [
            ("code", w3.eth.get_code(address, block_identifier)),
            ("token0", pool.functions.token0().call(block_identifier=block_identifier)),
            ("token1", pool.functions.token1().call(block_identifier=block_identifier)),
            ("fee", pool.functions.fee().call(block_identifier=block_identifier)),
            ("liquidity", pool.functions.liquidity().call(block_identifier=block_identifier)),
            ("slot0", pool.functions.slot0().call(block_identifier=block_identifier)),
            ("block_number", w3.eth.get_block_number()),
        ]
        names = [name for name, _ in calls]

        results = await asyncio.gather(*(awaitable for _, awaitable in calls), return_exceptions=True)

        for result in results:
            if isinstance(result, BaseException) and not isinstance(result, Exception):
                raise result

        values = dict(zip(names, results))
        # Every pool call fails to decode when nothing is deployed
        code = values["code"]
        if not isinstance(code, Exception) and not code:
            raise NetworkError(f"No contract deployed at pool address {address}", step=STEP)

        for name, result in zip(names, results):
            if isinstance(result, Exception):
                self.error_handler.log_error(result, {"pool": address, "call": name})
                raise NetworkError(
                    f"Pool {address} {name} read failed: {result}", step=STEP, cause=result
                ) from result

        state = self._to_pool_state(address, values)
        self.logger.info(
            f"Pool {address} at block {state.block_number}: liquidity={state.liquidity} "
            f"sqrtPriceX96={state.sqrt_price_x96} tick={state.tick} fee={state.fee}"
        )
        return state

    def _to_pool_state(self, address: str, values: dict) -> PoolState:
        """Validate raw call results into a PoolState."""
        try:
            token0 = self._address(values["token0"], "token0")
            token1 = self._address(values["token1"], "token1")
            fee = self._uint(values["fee"], "fee", _MAX_FEE)
            liquidity = self._uint(values["liquidity"], "liquidity", _UINT128_MAX)
            slot0 = Slot0.from_call(values["slot0"])
        except (ValueError, TypeError) as e:
            raise NetworkError(f"Malformed pool response from {address}: {e}", step=STEP, cause=e) from e

        block_number = values.get("block_number")
        return PoolState(
            address=address,
            token0=token0,
            token1=token1,
            fee=fee,
            liquidity=liquidity,
            sqrt_price_x96=slot0.sqrt_price_x96,
            tick=slot0.tick,
            block_number=block_number if isinstance(block_number, int) else None,
        )

    @staticmethod
    def _address(value: Any, name: str) -> str:
        if not isinstance(value, str) or not is_address(value):
            raise ValueError(f"{name} is not an address: {value!r}")
        return to_checksum_address(value)

    @staticmethod
    def _uint(value: Any, name: str, upper: int) -> int:
        if isinstance(value, bool) or not isinstance(value, int) or not 0 <= value <= upper:
            raise ValueError(f"{name} out of range: {value!r}")
        return value

