"""Pricing-curve interface shared by pool implementations."""

from abc import ABC, abstractmethod
from dataclasses import dataclass


@dataclass(frozen=True)
class SwapResult:
    """Outcome of an exact-input trade against a reserve pair.

    reserve_in_after includes the whole input (fee portion too);
    reserve_out_after is reduced by exactly amount_out.
    """

    amount_in: int
    amount_out: int
    reserve_in_after: int
    reserve_out_after: int


class AMM(ABC):
    """A stateless pricing curve over two reserves.

    Curves only compute; the pool owns the reserves and decides when a
    computed trade is applied. Subclasses may accept extra keyword
    arguments (ConstantProduct takes fee_multiplier).
    """

    @abstractmethod
    def get_amount_out(self, amount_in: int, reserve_in: int, reserve_out: int) -> int:
        """Units of the output asset paid for amount_in of the input asset."""
        ...

    @abstractmethod
    def get_amount_in(self, amount_out: int, reserve_in: int, reserve_out: int) -> int:
        """Units of the input asset needed to receive at least amount_out."""
        ...
