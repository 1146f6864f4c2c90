"""Constant-product (x * y = k) pricing with a fee retained on input.

The fee portion of every input stays in the input reserve and is never
paid out separately, so k grows with every trade and the growth accrues
to liquidity providers through their share of the reserves.
"""

from __future__ import annotations

import structlog

from dex.amm.base import AMM, SwapResult
from dex.constants import BPS_DENOMINATOR, DEFAULT_FEE_MULTIPLIER, UINT256_MAX
from dex.safe_int import S

logger = structlog.get_logger()


class ConstantProduct(AMM):
    """Constant-product curve.

    With the default 0.3% fee:

        amount_out = amount_in * 997 * reserve_out / (reserve_in * 1000 + amount_in * 997)

    The fee is carried in basis points (9970 over 10000). That is the
    same ratio scaled by ten, so every quote is the same integer.
    """

    def get_amount_out(
        self,
        amount_in: int,
        reserve_in: int,
        reserve_out: int,
        fee_multiplier: int = DEFAULT_FEE_MULTIPLIER,
    ) -> int:
        """Output paid for amount_in, rounded down.

        Args:
            amount_in: Units of the asset being sold
            reserve_in: Pool reserve of the asset being sold
            reserve_out: Pool reserve of the asset being bought
            fee_multiplier: 10000 - fee_bps

        Returns:
            Units of the bought asset. 0 when amount_in is not positive
            or either reserve is empty; always below reserve_out.
        """
        if amount_in <= 0 or reserve_in <= 0 or reserve_out <= 0:
            return 0

        effective_in = S(amount_in) * fee_multiplier
        return (effective_in * reserve_out // (S(reserve_in) * BPS_DENOMINATOR + effective_in)).value

    def get_amount_in(
        self,
        amount_out: int,
        reserve_in: int,
        reserve_out: int,
        fee_multiplier: int = DEFAULT_FEE_MULTIPLIER,
    ) -> int:
        """Input that buys at least amount_out.

        amount_in = reserve_in * amount_out * 10000 / ((reserve_out - amount_out) * fee) + 1

        Returns:
            Units of the sold asset; UINT256_MAX when amount_out would
            drain the reserve, 0 for degenerate arguments
        """
        if amount_out <= 0 or reserve_in <= 0 or reserve_out <= 0:
            return 0
        if amount_out >= reserve_out:
            return UINT256_MAX

        scaled_out = S(reserve_in) * amount_out * BPS_DENOMINATOR
        return (scaled_out // ((S(reserve_out) - amount_out) * fee_multiplier) + 1).value

    def simulate_swap(
        self,
        reserve_in: int,
        reserve_out: int,
        amount_in: int,
        fee_multiplier: int = DEFAULT_FEE_MULTIPLIER,
    ) -> SwapResult:
        """Simulate an exact-input swap without touching any state.

        Returns:
            SwapResult with the output amount and the post-trade reserves
        """
        amount_out = self.get_amount_out(amount_in, reserve_in, reserve_out, fee_multiplier)
        reserve_in_after = S(reserve_in) + S(amount_in)
        reserve_out_after = S(reserve_out) - S(amount_out)

        logger.debug(
            "swap_simulated",
            amount_in=amount_in,
            amount_out=amount_out,
            reserve_in=reserve_in,
            reserve_out=reserve_out,
        )

        return SwapResult(
            amount_in=amount_in,
            amount_out=amount_out,
            reserve_in_after=reserve_in_after.to_uint256(),
            reserve_out_after=reserve_out_after.to_uint256(),
        )


# Singleton instance
constant_product = ConstantProduct()


def quote(amount_in: int, reserve_in: int, reserve_out: int) -> int:
    """Output amount for amount_in at the standard 0.3% fee (pure)."""
    return constant_product.get_amount_out(amount_in, reserve_in, reserve_out)


__all__ = [
    "ConstantProduct",
    "constant_product",
    "quote",
]
