"""
Deterministic Uniswap V3 pool address derivation.

Pools are deployed by the factory with CREATE2, so the address follows from
the factory address, the sorted token pair and the fee alone:

    keccak256(0xff ++ factory ++ keccak256(abi.encode(token0, token1, fee)) ++ init_code_hash)[12:]
"""

from eth_abi import encode
from eth_typing import ChecksumAddress
from eth_utils import keccak, to_bytes, to_checksum_address

from ..config.protocols import UNISWAP_V3_POOL_INIT_CODE_HASH
from ..core.errors import ConfigurationError
from ..core.types import FeeTier, PoolIdentity, checksum


def compute_pool_address(
    factory_address: str,
    token_a: str,
    token_b: str,
    fee: int,
    init_code_hash: str = UNISWAP_V3_POOL_INIT_CODE_HASH,
) -> ChecksumAddress:
    """
    Compute a pool address from raw token addresses.

    Args:
        factory_address: Uniswap V3 factory
        token_a: One token of the pair
        token_b: The other token
        fee: Fee tier (100, 500, 3000, 10000)
        init_code_hash: Keccak of the pool creation code

    Returns:
        Checksummed pool address
    """
    factory = checksum(factory_address, "factory address")
    a = checksum(token_a, "token address")
    b = checksum(token_b, "token address")
    if a == b:
        raise ConfigurationError(f"Pool tokens must differ, got {a} twice")
    fee = int(FeeTier.parse(fee))

    token0, token1 = (a, b) if a.lower() < b.lower() else (b, a)
    salt = keccak(encode(["address", "address", "uint24"], [token0, token1, fee]))

    code_hash = to_bytes(hexstr=init_code_hash)
    if len(code_hash) != 32:
        raise ConfigurationError(f"Invalid init code hash: {init_code_hash}")

    digest = keccak(b"\xff" + to_bytes(hexstr=factory) + salt + code_hash)
    return to_checksum_address(digest[12:])


def locate(
    factory_address: str,
    identity: PoolIdentity,
    init_code_hash: str = UNISWAP_V3_POOL_INIT_CODE_HASH,
) -> ChecksumAddress:
    """Address of the pool for a pool identity."""
    return compute_pool_address(
        factory_address,
        identity.token0.address,
        identity.token1.address,
        identity.fee,
        init_code_hash,
    )
