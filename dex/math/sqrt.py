"""Integer square root by Newton's method.

Used to size the first share issuance: shares = floor(sqrt(amount1 * amount2)).
No floating point is involved, so the result is exact for any size of
input.
"""

from __future__ import annotations

from dex.safe_int import S, SafeInt


def isqrt(y: int | SafeInt) -> int:
    """Return floor(sqrt(y)).

    Iterates x <- (y // x + x) // 2 starting from y // 2 + 1 until the
    iterate stops decreasing; the last decreasing iterate is the floor
    root. Terminates in O(log y) steps.

    Args:
        y: Non-negative integer

    Returns:
        The largest z with z * z <= y

    Raises:
        ValueError: If y is negative
    """
    sy = S(y)
    if sy < 0:
        raise ValueError(f"isqrt of negative value: {sy.value}")

    if sy <= 3:
        return 1 if sy != 0 else 0

    z = sy
    x = sy // 2 + 1
    while x < z:
        z = x
        x = (sy // x + x) // 2
    return z.value
