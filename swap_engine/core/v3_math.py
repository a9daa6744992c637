"""
Uniswap V3 tick math.

Exact integer port of TickMath.getSqrtRatioAtTick, used to check that a
pool snapshot's tick and sqrtPriceX96 agree before a trade is built.

Key concepts:
- sqrtPriceX96: Square root of price in Q96 fixed-point format
- Tick: logarithmic price representation where price = 1.0001^tick
"""

Q96 = 2**96
MIN_TICK = -887272
MAX_TICK = -MIN_TICK
MIN_SQRT_RATIO = 4295128739
MAX_SQRT_RATIO = 1461446703485210103287273052203988822378723970342

_UINT256_MAX = (1 << 256) - 1

_TICK_FACTORS = (
    (0x2, 0xFFF97272373D413259A46990580E213A),
    (0x4, 0xFFF2E50F5F656932EF12357CF3C7FDCC),
    (0x8, 0xFFE5CACA7E10E4E61C3624EAA0941CD0),
    (0x10, 0xFFCB9843D60F6159C9DB58835C926644),
    (0x20, 0xFF973B41FA98C081472E6896DFB254C0),
    (0x40, 0xFF2EA16466C96A3843EC78B326B52861),
    (0x80, 0xFE5DEE046A99A2A811C461F1969C3053),
    (0x100, 0xFCBE86C7900A88AEDCFFC83B479AA3A4),
    (0x200, 0xF987A7253AC413176F2B074CF7815E54),
    (0x400, 0xF3392B0822B70005940C7A398E4B70F3),
    (0x800, 0xE7159475A2C29B7443B29C7FA6E889D9),
    (0x1000, 0xD097F3BDFD2022B8845AD8F792AA5825),
    (0x2000, 0xA9F746462D870FDF8A65DC1F90E061E5),
    (0x4000, 0x70D869A156D2A1B890BB3DF62BAF32F7),
    (0x8000, 0x31BE135F97D08FD981231505542FCFA6),
    (0x10000, 0x9AA508B5B7A84E1C677DE54F3E99BC9),
    (0x20000, 0x5D6AF8DEDB81196699C329225EE604),
    (0x40000, 0x2216E584F5FA1EA926041BEDFE98),
    (0x80000, 0x48A170391F7DC42444E8FA2),
)


def get_sqrt_ratio_at_tick(tick: int) -> int:
    """
    Calculate sqrtPriceX96 at a tick.

    Args:
        tick: Tick in [MIN_TICK, MAX_TICK]

    Returns:
        sqrtPriceX96, rounded up exactly as the core contract does

    Raises:
        ValueError: If tick is out of range
    """
    abs_tick = abs(tick)
    if abs_tick > MAX_TICK:
        raise ValueError(f"Tick out of range: {tick}")

    ratio = 0xFFFCB933BD6FAD37AA2D162D1A594001 if abs_tick & 0x1 else 1 << 128
    for mask, factor in _TICK_FACTORS:
        if abs_tick & mask:
            ratio = (ratio * factor) >> 128

    if tick > 0:
        ratio = _UINT256_MAX // ratio

    # Q128.128 -> Q64.96, rounding up
    return (ratio >> 32) + (0 if ratio % (1 << 32) == 0 else 1)


def tick_matches_price(tick: int, sqrt_price_x96: int) -> bool:
    """True when sqrt_price_x96 lies in [ratio(tick), ratio(tick + 1)]."""
    if not MIN_TICK <= tick <= MAX_TICK:
        return False
    if not MIN_SQRT_RATIO <= sqrt_price_x96 < MAX_SQRT_RATIO:
        return False
    lower = get_sqrt_ratio_at_tick(tick)
    if tick == MAX_TICK:
        return sqrt_price_x96 >= lower
    # A swap that stops exactly on a boundary while moving down leaves the
    # price at ratio(tick + 1).
    return lower <= sqrt_price_x96 <= get_sqrt_ratio_at_tick(tick + 1)
