"""Pool configuration."""

from dataclasses import dataclass

from dex.constants import BPS_DENOMINATOR, DEFAULT_FEE_BPS, DEFAULT_PRICE_PRECISION
from dex.errors import InvalidConfiguration


@dataclass(frozen=True)
class PoolConfig:
    """Centralized configuration for a pool instance.

    Holds the fee and behavior flags so tests can build pools with
    different settings without touching module constants.

    Attributes:
        fee_bps: Swap fee in basis points retained in the input reserve
            (default: 30 = 0.3%)
        check_invariants: If True, run the full invariant check (including
            the sum over all share balances) after every mutation.
        price_precision: Significant digits for get_price_precise().
    """

    fee_bps: int = DEFAULT_FEE_BPS
    check_invariants: bool = False
    price_precision: int = DEFAULT_PRICE_PRECISION

    def __post_init__(self) -> None:
        if not (0 <= self.fee_bps < BPS_DENOMINATOR):
            raise InvalidConfiguration(f"fee_bps must be in [0, {BPS_DENOMINATOR}): {self.fee_bps}")
        if self.price_precision <= 0:
            raise InvalidConfiguration(f"price_precision must be positive: {self.price_precision}")

    @property
    def fee_multiplier(self) -> int:
        """Fee multiplier for AMM math (10000 - fee_bps).

        For 30 bps this returns 9970, which gives the same integer quotes
        as the 997/1000 form of the formula.
        """
        return BPS_DENOMINATOR - self.fee_bps


# Default configuration instance
DEFAULT_POOL_CONFIG = PoolConfig()
