"""Checked integers for reserve, share and balance arithmetic.

Python ints never wrap, so the failure modes left in pool math are a
reserve or balance going negative, a zero divisor (an empty reserve or
share supply), and a stored value leaving the uint256 range that every
amount in the system is bounded by. SafeInt raises on each:

    S(reserve) - amount_out        # Underflow if amount_out > reserve
    S(share) * reserve // total    # DivisionByZero if total == 0
    (S(reserve) + amount_in).to_uint256()  # Uint256Overflow past 2^256-1

Products are left unbounded: reserve1 * reserve2 may exceed uint256 in
an intermediate step. Only values written back to state are narrowed.
"""

from __future__ import annotations

from dex.constants import UINT256_MAX


class SafeIntError(ArithmeticError):
    """Base class for checked arithmetic errors."""


class DivisionByZero(SafeIntError):
    """Divisor was zero."""


class Underflow(SafeIntError):
    """Result of a subtraction was negative."""


class Uint256Overflow(SafeIntError):
    """Value does not fit in [0, 2^256-1]."""


class SafeInt:
    """Immutable integer whose arithmetic raises instead of going negative.

    Accepts int or SafeInt operands on either side, so mixed expressions
    such as ``S(amount) * total // reserve`` stay checked throughout.
    """

    __slots__ = ("_value",)
    _value: int

    def __init__(self, value: int | SafeInt) -> None:
        if isinstance(value, SafeInt):
            value = value._value
        elif not isinstance(value, int) or isinstance(value, bool):
            raise TypeError(f"SafeInt requires int, got {type(value).__name__}")
        self._value = value

    @property
    def value(self) -> int:
        return self._value

    def __repr__(self) -> str:
        return f"SafeInt({self._value})"

    def __str__(self) -> str:
        return str(self._value)

    def __hash__(self) -> int:
        return hash(self._value)

    # --- Arithmetic ---

    def __add__(self, other: SafeInt | int) -> SafeInt:
        return SafeInt(self._value + _raw(other))

    __radd__ = __add__

    def __mul__(self, other: SafeInt | int) -> SafeInt:
        return SafeInt(self._value * _raw(other))

    __rmul__ = __mul__

    def __sub__(self, other: SafeInt | int) -> SafeInt:
        return _checked_sub(self._value, _raw(other))

    def __rsub__(self, other: int) -> SafeInt:
        return _checked_sub(other, self._value)

    def __floordiv__(self, other: SafeInt | int) -> SafeInt:
        return _checked_floordiv(self._value, _raw(other))

    def __rfloordiv__(self, other: int) -> SafeInt:
        return _checked_floordiv(other, self._value)

    def mul_div(self, numerator: SafeInt | int, denominator: SafeInt | int) -> SafeInt:
        """floor(self * numerator / denominator), the pro-rata rounding rule.

        Raises:
            DivisionByZero: If denominator is zero
        """
        return _checked_floordiv(self._value * _raw(numerator), _raw(denominator))

    # --- Comparison ---

    def __eq__(self, other: object) -> bool:
        if isinstance(other, SafeInt):
            return self._value == other._value
        if isinstance(other, int):
            return self._value == other
        return NotImplemented

    def __lt__(self, other: SafeInt | int) -> bool:
        return self._value < _raw(other)

    def __le__(self, other: SafeInt | int) -> bool:
        return self._value <= _raw(other)

    def __gt__(self, other: SafeInt | int) -> bool:
        return self._value > _raw(other)

    def __ge__(self, other: SafeInt | int) -> bool:
        return self._value >= _raw(other)

    # --- Conversion ---

    def __int__(self) -> int:
        return self._value

    def __index__(self) -> int:
        return self._value

    def __bool__(self) -> bool:
        return self._value != 0

    def is_uint256(self) -> bool:
        return 0 <= self._value <= UINT256_MAX

    def to_uint256(self) -> int:
        """Narrow to a storable amount.

        Raises:
            Uint256Overflow: If the value is negative or above 2^256-1
        """
        if not self.is_uint256():
            raise Uint256Overflow(f"{self._value} is outside the uint256 range")
        return self._value


def _raw(x: SafeInt | int) -> int:
    return x._value if isinstance(x, SafeInt) else x


def _checked_sub(a: int, b: int) -> SafeInt:
    if b > a:
        raise Underflow(f"Underflow: {a} - {b} < 0")
    return SafeInt(a - b)


def _checked_floordiv(a: int, b: int) -> SafeInt:
    if b == 0:
        raise DivisionByZero(f"Division by zero: {a} // 0")
    return SafeInt(a // b)


S = SafeInt

__all__ = [
    "UINT256_MAX",
    "DivisionByZero",
    "S",
    "SafeInt",
    "SafeIntError",
    "Uint256Overflow",
    "Underflow",
]
