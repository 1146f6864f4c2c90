"""Observations emitted by pool operations.

Events are immutable records appended to the pool's event log after an
operation commits. Consumers (indexers, monitors, tests) either read the
log or subscribe a callback.
"""

from collections.abc import Callable
from dataclasses import asdict, dataclass
from typing import Any

from dex.ledger.base import Account, AssetId


@dataclass(frozen=True)
class LiquidityAdded:
    """Participant deposited both assets and received new shares."""

    participant: Account
    amount1: int
    amount2: int
    shares_minted: int

    name = "LiquidityAdded"


@dataclass(frozen=True)
class LiquidityRemoved:
    """Participant burned shares and received both assets back."""

    participant: Account
    amount1: int
    amount2: int
    shares_burned: int

    name = "LiquidityRemoved"


@dataclass(frozen=True)
class Swap:
    """Participant traded one asset for the other."""

    participant: Account
    asset_in: AssetId
    asset_out: AssetId
    amount_in: int
    amount_out: int

    name = "Swap"


PoolEvent = LiquidityAdded | LiquidityRemoved | Swap

EventListener = Callable[[PoolEvent], None]


def event_to_dict(event: PoolEvent) -> dict[str, Any]:
    """Flatten an event into a JSON-friendly dict with its name."""
    return {"event": event.name, **asdict(event)}
