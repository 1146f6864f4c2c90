"""Test helpers module for shared test utilities.

- constants: Asset names, participants and amounts
- factories: Pool/ledger factories and a fault-injecting ledger
"""

from tests.helpers.constants import ALICE, BOB, DEFAULT_BALANCE, OWNER, TKA, TKB, WEI, to_wei
from tests.helpers.factories import (
    CHECKED_CONFIG,
    FailingLedger,
    PoolOnlyPushLedger,
    fund,
    make_pool,
    seeded_pool,
)

__all__ = [
    # Constants
    "TKA",
    "TKB",
    "OWNER",
    "ALICE",
    "BOB",
    "WEI",
    "DEFAULT_BALANCE",
    "to_wei",
    # Factories
    "CHECKED_CONFIG",
    "make_pool",
    "fund",
    "seeded_pool",
    "FailingLedger",
    "PoolOnlyPushLedger",
]
