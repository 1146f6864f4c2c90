"""Pytest configuration and fixtures."""

import pytest

from dex.ledger import InMemoryLedger
from dex.pool import Pool
from tests.helpers import ALICE, BOB, OWNER, fund, make_pool, seeded_pool


@pytest.fixture
def ledger() -> InMemoryLedger:
    """A fresh, empty ledger."""
    return InMemoryLedger()


@pytest.fixture
def pool(ledger: InMemoryLedger) -> Pool:
    """An empty pool whose owner, alice and bob are funded and have approved it."""
    p = make_pool(ledger=ledger)
    for account in (OWNER, ALICE, BOB):
        fund(p, account)
    return p


@pytest.fixture
def pool_100_200() -> Pool:
    """Pool seeded by the owner with (100, 200) base units."""
    p = seeded_pool(100, 200, provider=OWNER)
    for account in (ALICE, BOB):
        fund(p, account)
    return p


@pytest.fixture
def events(pool: Pool) -> list:
    """Events delivered to a subscriber of the `pool` fixture."""
    received: list = []
    pool.subscribe(received.append)
    return received
