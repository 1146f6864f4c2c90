"""Tests for providing and withdrawing liquidity."""

import math

import pytest

from dex.errors import (
    InsufficientShares,
    InvalidConfiguration,
    RatioMismatch,
    ZeroAmount,
    ZeroSharesMinted,
)
from dex.ledger import InMemoryLedger
from dex.pool import Pool
from tests.helpers import ALICE, BOB, DEFAULT_BALANCE, OWNER, TKA, TKB, fund, seeded_pool, to_wei


class TestPoolCreation:
    def test_starts_empty(self, pool):
        assert pool.get_reserves() == (0, 0)
        assert pool.total_shares == 0
        assert pool.shares_of(OWNER) == 0

    def test_identical_assets_rejected(self):
        with pytest.raises(InvalidConfiguration):
            Pool(TKA, TKA, InMemoryLedger())

    def test_default_account_names_pair(self):
        pool = Pool(TKA, TKB, InMemoryLedger())
        assert pool.account == "pool:TKA:TKB"

    def test_independent_instances(self, ledger):
        """Two pools on one ledger keep separate books."""
        first = Pool(TKA, TKB, ledger, account="pool-1")
        second = Pool(TKA, TKB, ledger, account="pool-2")
        fund(first, ALICE)
        ledger.approve(TKA, ALICE, "pool-2", DEFAULT_BALANCE)
        ledger.approve(TKB, ALICE, "pool-2", DEFAULT_BALANCE)
        first.provide_liquidity(ALICE, 100, 200)
        second.provide_liquidity(ALICE, 300, 300)
        assert first.get_reserves() == (100, 200)
        assert second.get_reserves() == (300, 300)
        assert ledger.balance_of(TKA, "pool-1") == 100
        assert ledger.balance_of(TKA, "pool-2") == 300


class TestFirstDeposit:
    """The first deposit sets the ratio and mints sqrt(a*b) shares."""

    @pytest.mark.parametrize(
        ("amount1", "amount2"),
        [(1, 1), (1, 2), (100, 200), (3, 7), (to_wei(100), to_wei(200)), (10**23, 1), (999_999, 1_000_001)],
    )
    def test_mints_floor_sqrt(self, pool, amount1, amount2):
        minted = pool.provide_liquidity(OWNER, amount1, amount2)
        assert minted == math.isqrt(amount1 * amount2)
        assert pool.get_reserves() == (amount1, amount2)
        assert pool.total_shares == minted
        assert pool.shares_of(OWNER) == minted

    def test_moves_funds_into_pool(self, pool, ledger):
        pool.provide_liquidity(OWNER, 100, 200)
        assert ledger.balance_of(TKA, pool.account) == 100
        assert ledger.balance_of(TKB, pool.account) == 200
        assert ledger.balance_of(TKA, OWNER) == DEFAULT_BALANCE - 100
        assert ledger.balance_of(TKB, OWNER) == DEFAULT_BALANCE - 200

    def test_reference_seed(self, pool):
        """(100, 200) mints floor(sqrt(20000)) = 141."""
        assert pool.provide_liquidity(OWNER, 100, 200) == 141

    @pytest.mark.parametrize(("amount1", "amount2"), [(0, 0), (0, 10), (10, 0), (-1, 10), (10, -5)])
    def test_non_positive_amounts_rejected(self, pool, amount1, amount2):
        with pytest.raises(ZeroAmount):
            pool.provide_liquidity(OWNER, amount1, amount2)
        assert pool.get_reserves() == (0, 0)

    def test_non_int_amount_rejected(self, pool):
        with pytest.raises(TypeError):
            pool.provide_liquidity(OWNER, 1.5, 2)  # type: ignore


class TestSubsequentDeposit:
    """Later deposits must match the pool ratio exactly."""

    def test_on_ratio_deposit(self, pool_100_200):
        total_before = pool_100_200.total_shares
        minted = pool_100_200.provide_liquidity(ALICE, 50, 100)
        assert minted == 50 * total_before // 100
        assert pool_100_200.total_shares == total_before + minted
        assert pool_100_200.get_reserves() == (150, 300)
        assert pool_100_200.shares_of(ALICE) == minted

    def test_on_ratio_deposit_wei(self):
        pool = seeded_pool(to_wei(100), to_wei(200))
        fund(pool, ALICE)
        total = pool.total_shares
        minted = pool.provide_liquidity(ALICE, to_wei(50), to_wei(100))
        assert minted == to_wei(50) * total // to_wei(100)
        assert pool.get_reserves() == (to_wei(150), to_wei(300))

    def test_off_ratio_rejected(self, pool_100_200):
        """(50, 90) against (100, 200) is rejected and nothing moves."""
        balance_before = pool_100_200.ledger.balance_of(TKA, ALICE)
        with pytest.raises(RatioMismatch):
            pool_100_200.provide_liquidity(ALICE, 50, 90)
        assert pool_100_200.get_reserves() == (100, 200)
        assert pool_100_200.shares_of(ALICE) == 0
        assert pool_100_200.ledger.balance_of(TKA, ALICE) == balance_before

    @pytest.mark.parametrize(("amount1", "amount2"), [(1, 1), (50, 101), (51, 100), (2, 3)])
    def test_any_deviation_rejected(self, pool_100_200, amount1, amount2):
        with pytest.raises(RatioMismatch):
            pool_100_200.provide_liquidity(ALICE, amount1, amount2)

    def test_ratio_after_swap(self, pool_100_200):
        """After a swap moves reserves to (110, 182) the new ratio applies."""
        pool_100_200.swap_1_for_2(BOB, 10)
        with pytest.raises(RatioMismatch):
            pool_100_200.provide_liquidity(ALICE, 50, 100)
        minted = pool_100_200.provide_liquidity(ALICE, 55, 91)
        assert minted == 55 * 141 // 110
        assert pool_100_200.get_reserves() == (165, 273)

    def test_zero_shares_minted(self, pool):
        """A deposit below one share's worth is rejected and nothing moves."""
        pool.provide_liquidity(OWNER, 1, 1)
        pool.swap_1_for_2(ALICE, 1)
        pool.swap_2_for_1(ALICE, 1)
        assert pool.get_reserves() == (2, 2)
        assert pool.total_shares == 1

        balance_before = pool.ledger.balance_of(TKA, BOB)
        with pytest.raises(ZeroSharesMinted):
            pool.provide_liquidity(BOB, 1, 1)
        assert pool.get_reserves() == (2, 2)
        assert pool.total_shares == 1
        assert pool.ledger.balance_of(TKA, BOB) == balance_before


class TestWithdraw:
    """Burning shares pays out the pro-rata slice of both reserves."""

    def test_half_withdrawal(self):
        pool = seeded_pool(to_wei(100), to_wei(200), provider=OWNER)
        owned = pool.shares_of(OWNER)
        amount1, amount2 = pool.withdraw_liquidity(OWNER, owned // 2)
        assert (amount1, amount2) == (to_wei(50), to_wei(100))
        assert pool.get_reserves() == (to_wei(50), to_wei(100))
        assert pool.shares_of(OWNER) == owned - owned // 2
        assert pool.total_shares == owned - owned // 2

    def test_full_withdrawal_empties_pool(self, pool):
        minted = pool.provide_liquidity(OWNER, 100, 200)
        assert pool.withdraw_liquidity(OWNER, minted) == (100, 200)
        assert pool.get_reserves() == (0, 0)
        assert pool.total_shares == 0
        assert pool.shares_of(OWNER) == 0
        assert pool.snapshot().shares == {}
        assert pool.ledger.balance_of(TKA, OWNER) == DEFAULT_BALANCE

    @pytest.mark.parametrize(("amount1", "amount2"), [(1, 2), (3, 7), (100, 200), (12_345, 67_890), (10**20, 3)])
    def test_round_trip_never_returns_more(self, pool, amount1, amount2):
        minted = pool.provide_liquidity(OWNER, amount1, amount2)
        out1, out2 = pool.withdraw_liquidity(OWNER, minted)
        assert out1 <= amount1
        assert out2 <= amount2
        assert pool.get_reserves() == (0, 0)
        assert pool.total_shares == 0

    def test_reseed_after_emptying(self, pool):
        minted = pool.provide_liquidity(OWNER, 100, 200)
        pool.withdraw_liquidity(OWNER, minted)
        assert pool.provide_liquidity(ALICE, 300, 100) == math.isqrt(300 * 100)
        assert pool.get_price() == 0

    def test_withdraw_includes_accrued_fees(self, pool_100_200):
        """Fees kept in reserves are paid out to the remaining providers."""
        for _ in range(5):
            pool_100_200.swap_1_for_2(BOB, 10)
            pool_100_200.swap_2_for_1(BOB, 10)
        k_before = 100 * 200
        amount1, amount2 = pool_100_200.withdraw_liquidity(OWNER, pool_100_200.shares_of(OWNER))
        assert amount1 * amount2 > k_before

    def test_more_than_owned_rejected(self, pool_100_200):
        owned = pool_100_200.shares_of(OWNER)
        with pytest.raises(InsufficientShares):
            pool_100_200.withdraw_liquidity(OWNER, owned + 1)
        assert pool_100_200.get_reserves() == (100, 200)
        assert pool_100_200.shares_of(OWNER) == owned

    def test_non_owner_rejected(self, pool_100_200):
        with pytest.raises(InsufficientShares):
            pool_100_200.withdraw_liquidity(ALICE, 1)

    @pytest.mark.parametrize("share_amount", [0, -1])
    def test_non_positive_rejected(self, pool_100_200, share_amount):
        with pytest.raises(ZeroAmount):
            pool_100_200.withdraw_liquidity(OWNER, share_amount)

    def test_two_providers_share_pro_rata(self):
        pool = seeded_pool(to_wei(100), to_wei(200), provider=OWNER)
        fund(pool, ALICE)
        fund(pool, BOB)
        pool.provide_liquidity(ALICE, to_wei(50), to_wei(100))
        pool.swap_1_for_2(BOB, to_wei(10))

        reserve1, reserve2 = pool.get_reserves()
        total = pool.total_shares
        alice_shares = pool.shares_of(ALICE)
        amount1, amount2 = pool.withdraw_liquidity(ALICE, alice_shares)
        assert amount1 == alice_shares * reserve1 // total
        assert amount2 == alice_shares * reserve2 // total
        pool.check_invariants()
