"""
Tests for tick math.
"""

import pytest

from swap_engine.core.v3_math import (
    MAX_SQRT_RATIO,
    MAX_TICK,
    MIN_SQRT_RATIO,
    MIN_TICK,
    Q96,
    get_sqrt_ratio_at_tick,
    tick_matches_price,
)


class TestSqrtRatioAtTick:

    def test_tick_zero_is_one(self):
        assert get_sqrt_ratio_at_tick(0) == Q96 == 2**96

    def test_min_tick(self):
        assert get_sqrt_ratio_at_tick(MIN_TICK) == MIN_SQRT_RATIO

    def test_max_tick(self):
        assert get_sqrt_ratio_at_tick(MAX_TICK) == MAX_SQRT_RATIO

    @pytest.mark.parametrize("tick", [MIN_TICK - 1, MAX_TICK + 1])
    def test_out_of_range(self, tick):
        with pytest.raises(ValueError, match="out of range"):
            get_sqrt_ratio_at_tick(tick)

    def test_monotonic(self):
        ticks = [-200_000, -60, -1, 0, 1, 60, 200_000]
        ratios = [get_sqrt_ratio_at_tick(t) for t in ticks]
        assert ratios == sorted(ratios)
        assert len(set(ratios)) == len(ratios)


class TestTickMatchesPrice:

    def test_price_at_lower_bound(self):
        assert tick_matches_price(0, Q96)

    def test_price_inside_tick(self):
        price = get_sqrt_ratio_at_tick(-357_000) + 1
        assert tick_matches_price(-357_000, price)

    def test_price_at_upper_bound(self):
        assert tick_matches_price(-1, Q96)

    def test_price_above_tick(self):
        assert not tick_matches_price(1, Q96)
        assert not tick_matches_price(-2, Q96)

    def test_out_of_range_inputs(self):
        assert not tick_matches_price(MAX_TICK + 1, Q96)
        assert not tick_matches_price(0, MIN_SQRT_RATIO - 1)
        assert not tick_matches_price(0, MAX_SQRT_RATIO)
