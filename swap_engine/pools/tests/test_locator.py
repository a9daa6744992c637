"""
Tests for CREATE2 pool address derivation.
"""

import pytest

from swap_engine.core.errors import ConfigurationError
from swap_engine.core.types import Asset, FeeTier, PoolIdentity
from swap_engine.pools.locator import compute_pool_address, locate

FACTORY = "0x1F98431c8aD98523631AE4a59f267346ea31F984"
USDC = "0xA0b86991c6218b36c1d19D4a2e9Eb0cE3606eB48"
WETH = "0xC02aaA39b223FE8D0A0e5C4F27eAD9083C756Cc2"


class TestComputePoolAddress:
    """Known mainnet pools."""

    def test_usdc_weth_030(self):
        address = compute_pool_address(FACTORY, USDC, WETH, 3000)
        assert address.lower() == "0x8ad599c3a0ff1de082011efddc58f1908eb6e6d8"

    def test_usdc_weth_005(self):
        address = compute_pool_address(FACTORY, USDC, WETH, FeeTier.LOW)
        assert address.lower() == "0x88e6a0c2ddd26feeb64f039a2c41296fcb3f5640"

    def test_returns_checksum_address(self):
        address = compute_pool_address(FACTORY, USDC, WETH, 3000)
        assert address == "0x8ad599c3A0ff1De082011EFDDc58f1908eb6e6D8"

    def test_order_independent(self):
        assert compute_pool_address(FACTORY, USDC, WETH, 3000) == compute_pool_address(
            FACTORY, WETH, USDC, 3000
        )

    def test_case_insensitive_input(self):
        assert compute_pool_address(FACTORY.lower(), USDC.lower(), WETH.lower(), 3000) == (
            compute_pool_address(FACTORY, USDC, WETH, 3000)
        )

    def test_deterministic(self):
        results = {compute_pool_address(FACTORY, USDC, WETH, 500) for _ in range(5)}
        assert len(results) == 1

    def test_fee_changes_address(self):
        addresses = {compute_pool_address(FACTORY, USDC, WETH, tier) for tier in FeeTier}
        assert len(addresses) == len(FeeTier)

    def test_identical_tokens(self):
        with pytest.raises(ConfigurationError, match="must differ"):
            compute_pool_address(FACTORY, USDC, USDC.lower(), 3000)

    def test_malformed_factory(self):
        with pytest.raises(ConfigurationError, match="factory"):
            compute_pool_address("0xdeadbeef", USDC, WETH, 3000)

    def test_unsupported_fee(self):
        with pytest.raises(ConfigurationError, match="fee tier"):
            compute_pool_address(FACTORY, USDC, WETH, 2500)

    def test_bad_init_code_hash(self):
        with pytest.raises(ConfigurationError, match="init code hash"):
            compute_pool_address(FACTORY, USDC, WETH, 3000, init_code_hash="0x1234")


class TestLocate:

    def test_matches_identity(self):
        usdc = Asset(1, USDC, 6, "USDC")
        weth = Asset(1, WETH, 18, "WETH")
        assert locate(FACTORY, PoolIdentity(weth, usdc, FeeTier.MEDIUM)).lower() == (
            "0x8ad599c3a0ff1de082011efddc58f1908eb6e6d8"
        )
