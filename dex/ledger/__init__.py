"""Fungible-balance ledgers that pools settle against."""

from dex.ledger.base import PULL, PUSH, Account, AssetId, Ledger, Transfer
from dex.ledger.memory import InMemoryLedger

__all__ = [
    "Account",
    "AssetId",
    "Ledger",
    "Transfer",
    "PULL",
    "PUSH",
    "InMemoryLedger",
]
