"""Pool error classes.

An operation that raises one of these leaves the pool exactly as it was.
The exception is InvariantViolation from the post-commit check, which
signals a defect rather than a rejected request.
"""


class PoolError(Exception):
    """Base error for pool operations."""

    #: Stable machine-readable kind, used by the HTTP layer
    kind: str = "pool_error"


class InvalidConfiguration(PoolError):
    """Pool parameters are invalid (e.g. both assets are the same)."""

    kind = "invalid_configuration"


class ZeroAmount(PoolError):
    """An amount argument was zero or negative."""

    kind = "zero_amount"


class RatioMismatch(PoolError):
    """Deposit does not match the current reserve ratio exactly."""

    kind = "ratio_mismatch"


class ZeroSharesMinted(PoolError):
    """Deposit is too small to mint a single share."""

    kind = "zero_shares_minted"


class InsufficientShares(PoolError):
    """Participant tried to burn more shares than they own."""

    kind = "insufficient_shares"


class NoLiquidity(PoolError):
    """Swap against a pool with an empty reserve."""

    kind = "no_liquidity"


class TransferFailed(PoolError):
    """The ledger rejected a pull or push (balance or allowance)."""

    kind = "transfer_failed"


class InvariantViolation(PoolError):
    """Pool state broke one of its reserve/share invariants.

    This indicates a defect, not a bad request.
    """

    kind = "invariant_violation"
