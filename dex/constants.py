"""Protocol constants for the liquidity pool engine.

Centralizes fee parameters and integer bounds.
"""

# Maximum uint256 value. Reserves, share balances and transfer amounts must fit.
UINT256_MAX = 2**256 - 1

# Fee denominator for basis-point fees (10000 bps = 100%)
BPS_DENOMINATOR = 10_000

# Standard swap fee: 30 bps (0.3%) retained in the input reserve
DEFAULT_FEE_BPS = 30

# Fee multiplier for the standard fee: 9970 / 10000, equivalent to 997 / 1000
DEFAULT_FEE_MULTIPLIER = BPS_DENOMINATOR - DEFAULT_FEE_BPS

# Decimal digits used by the high-precision price query
DEFAULT_PRICE_PRECISION = 28
