"""Two-asset constant-product liquidity pool.

The pool keeps two reserves, a total share supply and a per-participant
share balance, and exposes five operations: provide liquidity, withdraw
liquidity, swap in either direction, and read-only queries.

Every mutating operation follows the same sequence under the pool lock:

1. Validate inputs and compute the new reserves/shares with checked
   integer math. Nothing is written yet.
2. Settle with the ledger in one atomic batch. If any transfer is
   rejected the ledger applies none of them and TransferFailed is
   raised.
3. Commit the staged values and emit an event.

A failure at any step therefore leaves both the pool and the ledger as
they were before the call.
"""

from __future__ import annotations

import threading
from dataclasses import dataclass, field
from decimal import Decimal, localcontext
from enum import Enum

import structlog

from dex.amm.constant_product import constant_product
from dex.config import DEFAULT_POOL_CONFIG, PoolConfig
from dex.errors import (
    InsufficientShares,
    InvalidConfiguration,
    InvariantViolation,
    NoLiquidity,
    RatioMismatch,
    TransferFailed,
    ZeroAmount,
    ZeroSharesMinted,
)
from dex.events import EventListener, LiquidityAdded, LiquidityRemoved, PoolEvent, Swap
from dex.ledger.base import PULL, PUSH, Account, AssetId, Ledger, Transfer
from dex.math import isqrt
from dex.safe_int import S

logger = structlog.get_logger()


class Direction(str, Enum):
    """Swap direction."""

    ONE_FOR_TWO = "1->2"  # Sell asset1, receive asset2
    TWO_FOR_ONE = "2->1"  # Sell asset2, receive asset1


@dataclass(frozen=True)
class PoolSnapshot:
    """Consistent point-in-time view of a pool."""

    asset1: AssetId
    asset2: AssetId
    reserve1: int
    reserve2: int
    total_shares: int
    shares: dict[Account, int] = field(default_factory=dict)


class Pool:
    """Constant-product pool for one asset pair.

    Args:
        asset1: Identifier of the first asset
        asset2: Identifier of the second asset (must differ from asset1)
        ledger: Ledger holding both assets; the pool's holdings live in
            the ledger under the pool's own account
        account: Ledger account of the pool (default: "pool:<asset1>:<asset2>")
        config: Fee and behavior settings

    Raises:
        InvalidConfiguration: If the two assets are the same
    """

    def __init__(
        self,
        asset1: AssetId,
        asset2: AssetId,
        ledger: Ledger,
        *,
        account: Account | None = None,
        config: PoolConfig = DEFAULT_POOL_CONFIG,
    ) -> None:
        if asset1 == asset2:
            raise InvalidConfiguration(f"Pool assets must be distinct, got {asset1!r} twice")

        self.asset1 = asset1
        self.asset2 = asset2
        self.ledger = ledger
        self.account = account if account is not None else f"pool:{asset1}:{asset2}"
        self.config = config

        self._reserve1 = 0
        self._reserve2 = 0
        self._total_shares = 0
        self._shares: dict[Account, int] = {}
        self._lock = threading.RLock()

        self.events: list[PoolEvent] = []
        self._listeners: list[EventListener] = []

        logger.info(
            "pool_created",
            asset1=asset1,
            asset2=asset2,
            account=self.account,
            fee_bps=config.fee_bps,
        )

    def __repr__(self) -> str:
        return (
            f"Pool({self.asset1}/{self.asset2}, "
            f"reserves=({self._reserve1}, {self._reserve2}), "
            f"total_shares={self._total_shares})"
        )

    # --- Liquidity ---

    def provide_liquidity(self, participant: Account, amount1: int, amount2: int) -> int:
        """Deposit both assets and mint pool shares.

        The first deposit into an empty pool sets the price ratio and mints
        floor(sqrt(amount1 * amount2)) shares. Later deposits must match the
        current ratio exactly (amount1 * reserve2 == amount2 * reserve1) and
        mint floor(amount1 * total_shares / reserve1) shares.

        Args:
            participant: Ledger account supplying the assets; must have
                approved the pool account for both amounts
            amount1: Amount of asset1 to deposit
            amount2: Amount of asset2 to deposit

        Returns:
            Number of shares minted

        Raises:
            ZeroAmount: If either amount is not positive
            RatioMismatch: If a non-initial deposit is off the pool ratio
            ZeroSharesMinted: If the deposit is too small to mint a share
            TransferFailed: If the ledger rejects either pull
        """
        _require_positive(amount1=amount1, amount2=amount2)

        with self._lock:
            reserve1, reserve2 = S(self._reserve1), S(self._reserve2)
            total = S(self._total_shares)

            if total == 0:
                minted = isqrt(S(amount1) * S(amount2))
            else:
                if S(amount1) * reserve2 != S(amount2) * reserve1:
                    logger.warning(
                        "liquidity_ratio_mismatch",
                        participant=participant,
                        amount1=amount1,
                        amount2=amount2,
                        reserve1=reserve1.value,
                        reserve2=reserve2.value,
                    )
                    raise RatioMismatch(
                        f"Deposit {amount1}:{amount2} does not match pool ratio "
                        f"{reserve1.value}:{reserve2.value}"
                    )
                minted = S(amount1).mul_div(total, reserve1).value

            if minted == 0:
                logger.warning(
                    "liquidity_zero_shares",
                    participant=participant,
                    amount1=amount1,
                    amount2=amount2,
                )
                raise ZeroSharesMinted(f"Deposit {amount1}:{amount2} mints no shares")

            new_reserve1 = (reserve1 + amount1).to_uint256()
            new_reserve2 = (reserve2 + amount2).to_uint256()
            new_total = (total + minted).to_uint256()
            new_balance = (S(self.shares_of(participant)) + minted).to_uint256()

            self._settle(
                "provide_liquidity",
                participant,
                Transfer(PULL, self.asset1, participant, self.account, amount1),
                Transfer(PULL, self.asset2, participant, self.account, amount2),
            )

            self._reserve1, self._reserve2 = new_reserve1, new_reserve2
            self._total_shares = new_total
            self._shares[participant] = new_balance
            self._after_mutation()

            logger.info(
                "liquidity_added",
                participant=participant,
                amount1=amount1,
                amount2=amount2,
                shares_minted=minted,
                reserve1=new_reserve1,
                reserve2=new_reserve2,
                total_shares=new_total,
            )
            self._emit(LiquidityAdded(participant, amount1, amount2, minted))
            return minted

    def withdraw_liquidity(self, participant: Account, share_amount: int) -> tuple[int, int]:
        """Burn shares and receive the pro-rata slice of both reserves.

        amount_i = floor(share_amount * reserve_i / total_shares), so the
        withdrawer receives accrued fees along with their principal.
        Burning the whole supply empties the pool.

        Args:
            participant: Share owner
            share_amount: Number of shares to burn

        Returns:
            Tuple of (amount1, amount2) paid out

        Raises:
            ZeroAmount: If share_amount is not positive
            InsufficientShares: If participant owns fewer shares
            TransferFailed: If the ledger rejects either push
        """
        _require_positive(share_amount=share_amount)

        with self._lock:
            owned = self.shares_of(participant)
            if owned < share_amount:
                logger.warning(
                    "liquidity_insufficient_shares",
                    participant=participant,
                    requested=share_amount,
                    owned=owned,
                )
                raise InsufficientShares(f"{participant} owns {owned} shares, tried to burn {share_amount}")

            reserve1, reserve2 = S(self._reserve1), S(self._reserve2)
            total = S(self._total_shares)

            amount1 = S(share_amount).mul_div(reserve1, total).value
            amount2 = S(share_amount).mul_div(reserve2, total).value

            new_reserve1 = (reserve1 - amount1).value
            new_reserve2 = (reserve2 - amount2).value
            new_total = (total - share_amount).value
            new_balance = (S(owned) - share_amount).value
            _check_emptiness(new_reserve1, new_reserve2, new_total)

            self._settle(
                "withdraw_liquidity",
                participant,
                Transfer(PUSH, self.asset1, self.account, participant, amount1),
                Transfer(PUSH, self.asset2, self.account, participant, amount2),
            )

            self._reserve1, self._reserve2 = new_reserve1, new_reserve2
            self._total_shares = new_total
            if new_balance == 0:
                del self._shares[participant]
            else:
                self._shares[participant] = new_balance
            self._after_mutation()

            logger.info(
                "liquidity_removed",
                participant=participant,
                amount1=amount1,
                amount2=amount2,
                shares_burned=share_amount,
                reserve1=new_reserve1,
                reserve2=new_reserve2,
                total_shares=new_total,
            )
            self._emit(LiquidityRemoved(participant, amount1, amount2, share_amount))
            return amount1, amount2

    # --- Swaps ---

    def swap(self, participant: Account, direction: Direction, amount_in: int) -> int:
        """Sell amount_in of one asset for the other at the curve price.

        The output is whatever the fee-adjusted constant-product formula
        yields, possibly zero; there is no minimum-output check.

        Args:
            participant: Trader; must have approved the pool for amount_in
            direction: Direction.ONE_FOR_TWO or Direction.TWO_FOR_ONE
            amount_in: Amount of the input asset to sell

        Returns:
            Amount of the output asset received

        Raises:
            ZeroAmount: If amount_in is not positive
            NoLiquidity: If either reserve is empty
            TransferFailed: If the ledger rejects the pull or the push
        """
        direction = Direction(direction)
        _require_positive(amount_in=amount_in)

        with self._lock:
            if direction is Direction.ONE_FOR_TWO:
                asset_in, asset_out = self.asset1, self.asset2
                reserve_in, reserve_out = self._reserve1, self._reserve2
            else:
                asset_in, asset_out = self.asset2, self.asset1
                reserve_in, reserve_out = self._reserve2, self._reserve1

            if reserve_in == 0 or reserve_out == 0:
                logger.warning(
                    "swap_no_liquidity",
                    participant=participant,
                    direction=direction.value,
                    amount_in=amount_in,
                )
                raise NoLiquidity(f"Pool {self.asset1}/{self.asset2} has no liquidity")

            result = constant_product.simulate_swap(
                reserve_in, reserve_out, amount_in, self.config.fee_multiplier
            )
            if S(result.reserve_in_after) * result.reserve_out_after < S(reserve_in) * reserve_out:
                raise InvariantViolation(
                    f"Swap would decrease k: ({reserve_in}, {reserve_out}) -> "
                    f"({result.reserve_in_after}, {result.reserve_out_after})"
                )

            self._settle(
                "swap",
                participant,
                Transfer(PULL, asset_in, participant, self.account, amount_in),
                Transfer(PUSH, asset_out, self.account, participant, result.amount_out),
            )

            if direction is Direction.ONE_FOR_TWO:
                self._reserve1, self._reserve2 = result.reserve_in_after, result.reserve_out_after
            else:
                self._reserve2, self._reserve1 = result.reserve_in_after, result.reserve_out_after
            self._after_mutation()

            logger.info(
                "swap_executed",
                participant=participant,
                asset_in=asset_in,
                asset_out=asset_out,
                amount_in=amount_in,
                amount_out=result.amount_out,
                reserve1=self._reserve1,
                reserve2=self._reserve2,
            )
            self._emit(Swap(participant, asset_in, asset_out, amount_in, result.amount_out))
            return result.amount_out

    def swap_1_for_2(self, participant: Account, amount_in: int) -> int:
        """Sell asset1 for asset2."""
        return self.swap(participant, Direction.ONE_FOR_TWO, amount_in)

    def swap_2_for_1(self, participant: Account, amount_in: int) -> int:
        """Sell asset2 for asset1."""
        return self.swap(participant, Direction.TWO_FOR_ONE, amount_in)

    # --- Queries ---

    @property
    def reserve1(self) -> int:
        return self._reserve1

    @property
    def reserve2(self) -> int:
        return self._reserve2

    @property
    def total_shares(self) -> int:
        return self._total_shares

    def get_reserves(self) -> tuple[int, int]:
        """Return (reserve1, reserve2)."""
        with self._lock:
            return self._reserve1, self._reserve2

    def shares_of(self, participant: Account) -> int:
        """Share balance of participant (0 if never recorded)."""
        return self._shares.get(participant, 0)

    def get_price(self) -> int:
        """Integer spot price of asset1 in asset2: floor(reserve2 / reserve1).

        Any sub-unit part is discarded. Returns 0 for an empty pool.
        """
        with self._lock:
            if self._reserve1 == 0:
                return 0
            return (S(self._reserve2) // self._reserve1).value

    def get_price_precise(self) -> Decimal:
        """Spot price reserve2 / reserve1 as a Decimal (0 for an empty pool)."""
        with self._lock:
            reserve1, reserve2 = self._reserve1, self._reserve2
        if reserve1 == 0:
            return Decimal(0)
        with localcontext() as ctx:
            ctx.prec = self.config.price_precision
            return Decimal(reserve2) / Decimal(reserve1)

    def quote(self, amount_in: int, reserve_in: int, reserve_out: int) -> int:
        """Pure output quote at this pool's fee; does not read or change state."""
        amount_out = constant_product.get_amount_out(
            amount_in, reserve_in, reserve_out, self.config.fee_multiplier
        )
        logger.debug(
            "quote",
            amount_in=amount_in,
            reserve_in=reserve_in,
            reserve_out=reserve_out,
            amount_out=amount_out,
        )
        return amount_out

    def quote_swap(self, direction: Direction, amount_in: int) -> int:
        """Output a swap of amount_in would receive at the current reserves."""
        direction = Direction(direction)
        with self._lock:
            if direction is Direction.ONE_FOR_TWO:
                return self.quote(amount_in, self._reserve1, self._reserve2)
            return self.quote(amount_in, self._reserve2, self._reserve1)

    def snapshot(self) -> PoolSnapshot:
        """Consistent copy of the full pool state."""
        with self._lock:
            return PoolSnapshot(
                asset1=self.asset1,
                asset2=self.asset2,
                reserve1=self._reserve1,
                reserve2=self._reserve2,
                total_shares=self._total_shares,
                shares=dict(self._shares),
            )

    def check_invariants(self) -> None:
        """Verify reserve/share invariants.

        Raises:
            InvariantViolation: If any invariant does not hold
        """
        with self._lock:
            _check_emptiness(self._reserve1, self._reserve2, self._total_shares)
            for name, value in (
                ("reserve1", self._reserve1),
                ("reserve2", self._reserve2),
                ("total_shares", self._total_shares),
            ):
                if not S(value).is_uint256():
                    raise InvariantViolation(f"{name} out of uint256 range: {value}")
            negative = [p for p, balance in self._shares.items() if balance <= 0]
            if negative:
                raise InvariantViolation(f"Non-positive share balances recorded for {negative}")
            share_sum = sum(self._shares.values())
            if share_sum != self._total_shares:
                raise InvariantViolation(
                    f"total_shares {self._total_shares} != sum of balances {share_sum}"
                )

    # --- Events ---

    def subscribe(self, listener: EventListener) -> None:
        """Register a callback invoked with every event after it commits."""
        with self._lock:
            self._listeners.append(listener)

    def _emit(self, event: PoolEvent) -> None:
        self.events.append(event)
        for listener in list(self._listeners):
            try:
                listener(event)
            except Exception:
                # Operation already committed
                logger.exception("event_listener_failed", event_name=event.name)

    # --- Internals ---

    def _settle(self, operation: str, participant: Account, *transfers: Transfer) -> None:
        try:
            self.ledger.transfer_batch(transfers)
        except TransferFailed as exc:
            logger.warning(
                "transfer_failed",
                operation=operation,
                participant=participant,
                error=str(exc),
            )
            raise

    def _after_mutation(self) -> None:
        if self.config.check_invariants:
            self.check_invariants()


def _require_positive(**amounts: int) -> None:
    for name, amount in amounts.items():
        if not isinstance(amount, int) or isinstance(amount, bool):
            raise TypeError(f"{name} must be int, got {type(amount).__name__}")
        if amount <= 0:
            raise ZeroAmount(f"{name} must be positive: {amount}")


def _check_emptiness(reserve1: int, reserve2: int, total_shares: int) -> None:
    # Either fully empty or fully seeded
    empty = (reserve1 == 0, reserve2 == 0, total_shares == 0)
    if any(empty) and not all(empty):
        raise InvariantViolation(
            f"Partially empty pool: reserves=({reserve1}, {reserve2}), total_shares={total_shares}"
        )
