"""Ledger interface consumed by pools.

A pool never holds balances itself; it asks a ledger to move assets
between accounts. Any object with these methods can back a pool.
"""

from collections.abc import Sequence
from dataclasses import dataclass
from typing import Literal, Protocol, runtime_checkable

# Asset and account identifiers are opaque strings
AssetId = str
Account = str

PULL = "pull"
PUSH = "push"


@dataclass(frozen=True)
class Transfer:
    """One move of an asset between two accounts.

    A pull consumes from_account's allowance for to_account; a push is
    the sender moving its own holdings and needs no allowance.
    """

    kind: Literal["pull", "push"]
    asset: AssetId
    from_account: Account
    to_account: Account
    amount: int


@runtime_checkable
class Ledger(Protocol):
    """Protocol for fungible-balance ledgers.

    Every method raises dex.errors.TransferFailed when a move is
    rejected, and leaves balances and allowances untouched in that case.
    """

    def pull(self, asset: AssetId, from_account: Account, to_account: Account, amount: int) -> None:
        """Move amount of asset from from_account to to_account.

        Requires from_account to hold at least amount and to have
        authorised to_account to move at least amount on its behalf.
        The authorisation is consumed.
        """
        ...

    def push(self, asset: AssetId, from_account: Account, to_account: Account, amount: int) -> None:
        """Move amount of asset from from_account to to_account.

        Used by a pool moving its own holdings: only the balance is
        checked, no authorisation is required.
        """
        ...

    def transfer_batch(self, transfers: Sequence[Transfer]) -> None:
        """Apply every transfer in order, or none of them.

        Each transfer is checked against the balances and allowances
        left by the ones before it. If any is rejected, nothing changes.
        """
        ...
