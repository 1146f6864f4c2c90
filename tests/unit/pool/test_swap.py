"""Tests for swaps against the pool."""

import random

import pytest

from dex.config import PoolConfig
from dex.errors import NoLiquidity, ZeroAmount
from dex.pool import Direction
from tests.helpers import ALICE, BOB, DEFAULT_BALANCE, OWNER, TKA, TKB, fund, seeded_pool, to_wei


class TestSwapOneForTwo:
    def test_reference_swap(self, pool_100_200):
        """Selling 10 into (100, 200) pays 18 and leaves (110, 182)."""
        assert pool_100_200.swap_1_for_2(ALICE, 10) == 18
        assert pool_100_200.get_reserves() == (110, 182)

    def test_moves_funds(self, pool_100_200):
        ledger = pool_100_200.ledger
        pool_100_200.swap_1_for_2(ALICE, 10)
        assert ledger.balance_of(TKA, ALICE) == DEFAULT_BALANCE - 10
        assert ledger.balance_of(TKB, ALICE) == DEFAULT_BALANCE + 18
        assert ledger.balance_of(TKA, pool_100_200.account) == 110
        assert ledger.balance_of(TKB, pool_100_200.account) == 182

    def test_output_matches_quote(self, pool_100_200):
        expected = pool_100_200.quote(10, 100, 200)
        assert pool_100_200.swap(ALICE, Direction.ONE_FOR_TWO, 10) == expected

    def test_direction_accepts_value_string(self, pool_100_200):
        assert pool_100_200.swap(ALICE, "1->2", 10) == 18

    def test_consecutive_swaps(self):
        """Two swaps of 5 add 10 to reserve1 like a single swap of 10."""
        pool = seeded_pool(to_wei(100), to_wei(200))
        fund(pool, ALICE)
        pool.swap_1_for_2(ALICE, to_wei(5))
        pool.swap_1_for_2(ALICE, to_wei(5))
        assert pool.get_reserves()[0] == to_wei(110)

    def test_large_swap_high_price_impact(self):
        pool = seeded_pool(to_wei(100), to_wei(200))
        fund(pool, ALICE)
        amount_out = pool.swap_1_for_2(ALICE, to_wei(90))
        assert pool.get_reserves()[0] == to_wei(190)
        # Nearly doubling reserve1 buys less than half of reserve2
        assert amount_out < to_wei(100)


class TestSwapTwoForOne:
    def test_reserves_update(self):
        pool = seeded_pool(to_wei(100), to_wei(200))
        fund(pool, ALICE)
        amount_out = pool.swap_2_for_1(ALICE, to_wei(20))
        reserve1, reserve2 = pool.get_reserves()
        assert reserve2 == to_wei(220)
        assert reserve1 == to_wei(100) - amount_out
        assert amount_out == pool.quote(to_wei(20), to_wei(200), to_wei(100))

    def test_reference_values(self, pool_100_200):
        # 20 * 9970 * 100 // (200 * 10000 + 20 * 9970) = 19_940_000 // 2_199_400 = 9
        assert pool_100_200.swap_2_for_1(ALICE, 20) == 9
        assert pool_100_200.get_reserves() == (91, 220)


class TestSwapInvariant:
    """The reserve product never decreases across swaps."""

    def test_k_increases_with_fee(self, pool_100_200):
        before = 100 * 200
        pool_100_200.swap_1_for_2(ALICE, 10)
        reserve1, reserve2 = pool_100_200.get_reserves()
        assert reserve1 * reserve2 > before

    @pytest.mark.parametrize("seed", [0, 1, 2, 3, 4])
    def test_k_non_decreasing_random_sequence(self, seed):
        rng = random.Random(seed)
        pool = seeded_pool(to_wei(1_000), to_wei(3_000))
        fund(pool, ALICE)
        k = to_wei(1_000) * to_wei(3_000)
        for _ in range(50):
            direction = rng.choice([Direction.ONE_FOR_TWO, Direction.TWO_FOR_ONE])
            pool.swap(ALICE, direction, rng.randint(1, to_wei(50)))
            reserve1, reserve2 = pool.get_reserves()
            assert reserve1 * reserve2 >= k
            k = reserve1 * reserve2
        pool.check_invariants()

    def test_tiny_swap_yields_zero_but_succeeds(self, pool_100_200):
        """No minimum-output guard: a swap may pay out nothing."""
        assert pool_100_200.swap_1_for_2(ALICE, 1) == 1
        assert pool_100_200.swap_2_for_1(ALICE, 1) == 0
        assert pool_100_200.get_reserves() == (101, 200)

    def test_zero_fee_config(self):
        pool = seeded_pool(1_000, 1_000, config=PoolConfig(fee_bps=0, check_invariants=True))
        fund(pool, ALICE)
        assert pool.swap_1_for_2(ALICE, 100) == (100 * 1_000) // 1_100


class TestSwapRejections:
    @pytest.mark.parametrize("amount_in", [0, -10])
    def test_non_positive_amount(self, pool_100_200, amount_in):
        with pytest.raises(ZeroAmount):
            pool_100_200.swap_1_for_2(ALICE, amount_in)
        assert pool_100_200.get_reserves() == (100, 200)

    def test_empty_pool(self, pool):
        with pytest.raises(NoLiquidity):
            pool.swap_1_for_2(ALICE, 10)
        with pytest.raises(NoLiquidity):
            pool.swap_2_for_1(ALICE, 10)

    def test_empty_after_full_withdrawal(self, pool):
        minted = pool.provide_liquidity(OWNER, 100, 200)
        pool.withdraw_liquidity(OWNER, minted)
        with pytest.raises(NoLiquidity):
            pool.swap_1_for_2(BOB, 10)

    def test_unknown_direction(self, pool_100_200):
        with pytest.raises(ValueError):
            pool_100_200.swap(ALICE, "sideways", 10)  # type: ignore
