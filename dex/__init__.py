"""Constant-product liquidity pool engine."""

from dex.config import DEFAULT_POOL_CONFIG, PoolConfig
from dex.errors import (
    InsufficientShares,
    InvalidConfiguration,
    InvariantViolation,
    NoLiquidity,
    PoolError,
    RatioMismatch,
    TransferFailed,
    ZeroAmount,
    ZeroSharesMinted,
)
from dex.ledger import InMemoryLedger, Ledger
from dex.pool import Direction, Pool, PoolSnapshot

__version__ = "0.1.0"
__all__ = [
    "__version__",
    # Pool
    "Pool",
    "PoolSnapshot",
    "Direction",
    "PoolConfig",
    "DEFAULT_POOL_CONFIG",
    # Ledger
    "Ledger",
    "InMemoryLedger",
    # Errors
    "PoolError",
    "InvalidConfiguration",
    "ZeroAmount",
    "RatioMismatch",
    "ZeroSharesMinted",
    "InsufficientShares",
    "NoLiquidity",
    "TransferFailed",
    "InvariantViolation",
]
