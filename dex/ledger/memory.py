"""In-process ledger with balances and allowances.

Mirrors the behavior of a standard fungible token: minting, approvals,
authorised transfers (pull), owner transfers (push), and batches of
both that apply atomically.
"""

from __future__ import annotations

import threading
from collections import defaultdict
from collections.abc import Sequence

import structlog

from dex.errors import TransferFailed, ZeroAmount
from dex.ledger.base import PULL, PUSH, Account, AssetId, Transfer
from dex.safe_int import S

logger = structlog.get_logger()


class InMemoryLedger:
    """Ledger keeping every balance in memory.

    Balances are keyed by (asset, account); allowances by
    (asset, owner, spender). Unknown keys read as zero.
    """

    def __init__(self) -> None:
        self._balances: defaultdict[tuple[AssetId, Account], int] = defaultdict(int)
        self._allowances: defaultdict[tuple[AssetId, Account, Account], int] = defaultdict(int)
        self._lock = threading.Lock()

    def balance_of(self, asset: AssetId, account: Account) -> int:
        return self._balances.get((asset, account), 0)

    def allowance(self, asset: AssetId, owner: Account, spender: Account) -> int:
        return self._allowances.get((asset, owner, spender), 0)

    def mint(self, asset: AssetId, account: Account, amount: int) -> None:
        """Credit newly created units of asset to account."""
        if amount <= 0:
            raise ZeroAmount(f"Mint amount must be positive: {amount}")
        with self._lock:
            key = (asset, account)
            self._balances[key] = (S(self._balances[key]) + S(amount)).to_uint256()
        logger.debug("ledger_mint", asset=asset, account=account, amount=amount)

    def approve(self, asset: AssetId, owner: Account, spender: Account, amount: int) -> None:
        """Authorise spender to pull up to amount of owner's asset.

        Replaces any existing allowance; 0 revokes it.
        """
        if amount < 0:
            raise ZeroAmount(f"Allowance cannot be negative: {amount}")
        with self._lock:
            self._allowances[(asset, owner, spender)] = S(amount).to_uint256()
        logger.debug("ledger_approve", asset=asset, owner=owner, spender=spender, amount=amount)

    def pull(self, asset: AssetId, from_account: Account, to_account: Account, amount: int) -> None:
        """Authorised transfer: the recipient moves funds it was approved for.

        Raises:
            TransferFailed: On insufficient balance or allowance
        """
        self.transfer_batch([Transfer(PULL, asset, from_account, to_account, amount)])

    def push(self, asset: AssetId, from_account: Account, to_account: Account, amount: int) -> None:
        """Owner transfer: the sender moves its own funds.

        Raises:
            TransferFailed: On insufficient balance
        """
        self.transfer_batch([Transfer(PUSH, asset, from_account, to_account, amount)])

    def transfer_batch(self, transfers: Sequence[Transfer]) -> None:
        """Apply all transfers or none.

        Moves are staged against a scratch copy of the touched balances
        and allowances; the ledger is only written once every move has
        passed its checks.

        Raises:
            TransferFailed: If any move is negative or lacks balance or allowance
        """
        with self._lock:
            balances: dict[tuple[AssetId, Account], int] = {}
            allowances: dict[tuple[AssetId, Account, Account], int] = {}

            for transfer in transfers:
                asset, amount = transfer.asset, transfer.amount
                if amount < 0:
                    raise TransferFailed(f"Transfer amount cannot be negative: {amount}")

                if transfer.kind == PULL:
                    key = (asset, transfer.from_account, transfer.to_account)
                    allowed = allowances.get(key, self._allowances.get(key, 0))
                    if allowed < amount:
                        self._reject("insufficient_allowance", transfer, allowance=allowed)
                        raise TransferFailed(
                            f"Insufficient allowance: {transfer.from_account} approved {allowed} "
                            f"{asset} for {transfer.to_account}, needs {amount}"
                        )
                    allowances[key] = allowed - amount
                elif transfer.kind != PUSH:
                    raise ValueError(f"Unknown transfer kind: {transfer.kind!r}")

                source = (asset, transfer.from_account)
                balance = balances.get(source, self._balances.get(source, 0))
                if balance < amount:
                    self._reject("insufficient_balance", transfer, balance=balance)
                    raise TransferFailed(
                        f"Insufficient balance: {transfer.from_account} holds {balance} {asset}, "
                        f"needs {amount}"
                    )
                balances[source] = balance - amount

                target = (asset, transfer.to_account)
                received = balances.get(target, self._balances.get(target, 0))
                balances[target] = (S(received) + amount).to_uint256()

            self._balances.update(balances)
            self._allowances.update(allowances)

    def _reject(self, reason: str, transfer: Transfer, **context: int) -> None:
        logger.warning(
            "transfer_rejected",
            reason=reason,
            kind=transfer.kind,
            asset=transfer.asset,
            from_account=transfer.from_account,
            to_account=transfer.to_account,
            amount=transfer.amount,
            **context,
        )
