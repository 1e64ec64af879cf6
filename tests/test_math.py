"""Tests for constant-product pricing, rebalancing and withdrawal math."""

import pytest

from amm_liquidity.core.exceptions import (
    ArithmeticOverflowError,
    DegeneratePoolError,
    InvalidFractionError,
    InvalidInputError,
)
from amm_liquidity.protocols.uniswap_v1.math import (
    DepositPlan,
    Reserves,
    SwapPlan,
    get_input_price,
    plan_deposit,
    plan_rebalance,
    reference_is_major,
    share_of_reserves,
    trim_to_ratio,
    withdrawal_amount,
)


class TestGetInputPrice:
    def test_zero_input_is_zero(self):
        assert get_input_price(0, 100000, 50000) == 0

    def test_zero_input_against_empty_pool_is_zero(self):
        """Nothing sold, nothing to price."""
        assert get_input_price(0, 0, 0) == 0

    def test_known_value(self):
        """500 * 997 * 50000 // (100000 * 1000 + 500 * 997) = 248."""
        assert get_input_price(500, 100000, 50000) == 248

    def test_fee_is_charged(self):
        """Output is strictly below the fee-free spot amount."""
        assert get_input_price(1000, 10**18, 10**18) < 1000

    def test_monotonic_in_input(self):
        outputs = [get_input_price(x, 10**6, 10**6) for x in (1, 10, 100, 1000, 10**4, 10**5)]
        assert outputs == sorted(outputs)

    def test_output_below_reserve(self):
        assert get_input_price(10**30, 1000, 1000) < 1000

    @pytest.mark.parametrize("reserves", [(0, 1000), (1000, 0), (0, 0)])
    def test_empty_reserve_raises(self, reserves):
        with pytest.raises(DegeneratePoolError):
            get_input_price(100, *reserves)

    def test_overflow_raises(self):
        with pytest.raises(ArithmeticOverflowError):
            get_input_price(2**255, 1, 1)


class TestPlanRebalance:
    def test_reference_scenario(self):
        """Reserves 100000/50000, offer 2000/500: swap 500, deposit 1500/742."""
        assert plan_rebalance(100000, 50000, 2000, 500) == SwapPlan(500, 1500, 742)

    def test_balanced_input_needs_no_swap(self):
        plan = plan_rebalance(100000, 50000, 2000, 1000)
        assert plan == SwapPlan(0, 2000, 1000)

    def test_token_major_orientation(self):
        """Same formula with the token as the excess side."""
        assert plan_rebalance(50000, 100000, 5000, 100) == SwapPlan(2478, 2522, 4579)

    def test_clamped_to_supplied_minor(self):
        """Sized minor above supplied + received: capped, major recomputed from it."""
        plan = plan_rebalance(65275, 965615, 367, 444)
        received = get_input_price(plan.swap_amount, 65275, 965615)

        assert plan == SwapPlan(168, 198, 2915)
        assert plan.final_minor == 444 + received
        assert plan.final_major == plan.final_minor * (65275 + 168) // (965615 - received)

    def test_minor_in_excess_raises(self):
        with pytest.raises(InvalidInputError):
            plan_rebalance(1000, 1000, 100, 200)

    @pytest.mark.parametrize("reserves", [(0, 1000), (1000, 0)])
    def test_empty_reserve_raises(self, reserves):
        with pytest.raises(DegeneratePoolError):
            plan_rebalance(*reserves, 100, 0)

    @pytest.mark.parametrize(
        "major_res,minor_res,major,minor",
        [
            (100000, 50000, 2000, 500),
            (1000, 1000, 1000, 0),
            (10**18, 3 * 10**21, 5 * 10**17, 10**20),
            (7, 13, 1000, 1),
            (10**6, 10, 999, 0),
            (50000, 100000, 5000, 100),
            (65275, 965615, 367, 444),
            (340592, 934450, 634, 129),
        ],
    )
    def test_never_spends_more_than_offered(self, major_res, minor_res, major, minor):
        plan = plan_rebalance(major_res, minor_res, major, minor)
        received = get_input_price(plan.swap_amount, major_res, minor_res)

        assert plan.swap_amount + plan.final_major <= major
        assert plan.final_minor <= minor + received

    @pytest.mark.parametrize(
        "major_res,minor_res,major,minor",
        [
            (100000, 50000, 2000, 500),
            (10**18, 3 * 10**21, 5 * 10**17, 10**20),
            (50000, 100000, 5000, 100),
        ],
    )
    def test_deposit_not_above_post_swap_ratio(self, major_res, minor_res, major, minor):
        """final_minor / final_major never exceeds the post-swap pool ratio."""
        plan = plan_rebalance(major_res, minor_res, major, minor)
        received = get_input_price(plan.swap_amount, major_res, minor_res)

        lhs = plan.final_minor * (major_res + plan.swap_amount)
        rhs = plan.final_major * (minor_res - received)
        assert lhs <= rhs


class TestTrimToRatio:
    def test_trim(self):
        assert trim_to_ratio(500, 50000, 100000) == 1000

    def test_floors(self):
        assert trim_to_ratio(1, 3, 2) == 0

    def test_empty_reserve_raises(self):
        with pytest.raises(DegeneratePoolError):
            trim_to_ratio(500, 0, 100000)


class TestPlanDeposit:
    reserves = Reserves(reference=100000, token=50000)

    def test_reference_major(self):
        assert plan_deposit(self.reserves, 2000, 500) == DepositPlan(
            major_is_reference=True, swap_amount=500, reference_amount=1500, token_amount=742)

    def test_token_major(self):
        assert plan_deposit(self.reserves, 100, 5000) == DepositPlan(
            major_is_reference=False, swap_amount=2478, reference_amount=4579, token_amount=2522)

    def test_exact_ratio_goes_reference_major_without_swap(self):
        plan = plan_deposit(self.reserves, 2000, 1000)
        assert plan.major_is_reference
        assert (plan.swap_amount, plan.reference_amount, plan.token_amount) == (0, 2000, 1000)

    def test_prevent_swap_trims_reference(self):
        plan = plan_deposit(self.reserves, 2000, 500, prevent_swap=True)
        assert plan == DepositPlan(True, 0, 1000, 500, prevent_swap=True)

    def test_prevent_swap_trims_token(self):
        plan = plan_deposit(self.reserves, 100, 5000, prevent_swap=True)
        assert plan == DepositPlan(False, 0, 100, 50, prevent_swap=True)

    def test_token_allowance_reference_major(self):
        """Only the deposit pulls tokens."""
        assert plan_deposit(self.reserves, 2000, 500).token_allowance == 742

    def test_token_allowance_token_major(self):
        """Swap input and deposit both pull tokens."""
        assert plan_deposit(self.reserves, 100, 5000).token_allowance == 2478 + 2522

    def test_empty_pool_raises(self):
        with pytest.raises(DegeneratePoolError):
            plan_deposit(Reserves(0, 0), 2000, 500)

    @pytest.mark.parametrize(
        "reserves,reference_amount,token_amount",
        [
            (Reserves(100000, 50000), 2000, 500),
            (Reserves(100000, 50000), 100, 5000),
            (Reserves(65275, 965615), 367, 444),
        ],
    )
    def test_swapping_asset_roles_mirrors_plan(self, reserves, reference_amount, token_amount):
        """Exchanging which asset is the reference mirrors the plan."""
        plan = plan_deposit(reserves, reference_amount, token_amount)
        mirrored = plan_deposit(
            Reserves(reserves.token, reserves.reference), token_amount, reference_amount)

        assert mirrored.major_is_reference is not plan.major_is_reference
        assert mirrored.swap_amount == plan.swap_amount
        assert mirrored.reference_amount == plan.token_amount
        assert mirrored.token_amount == plan.reference_amount

    def test_reference_is_major_cross_multiplies(self):
        assert reference_is_major(2000, 500, self.reserves)
        assert not reference_is_major(100, 5000, self.reserves)
        # No division, so an empty token reserve still answers
        assert reference_is_major(1, 1, Reserves(100, 0)) is False


class TestWithdrawalAmount:
    @pytest.mark.parametrize(
        "shares,bps,expected",
        [
            (1000, 2500, 250),
            (1000, 0, 0),
            (1000, 10000, 1000),
            (999, 5000, 499),
            (0, 10000, 0),
            (3, 1, 0),
        ],
    )
    def test_amount(self, shares, bps, expected):
        assert withdrawal_amount(shares, bps) == expected

    def test_never_exceeds_balance(self):
        for bps in range(0, 10001, 997):
            assert withdrawal_amount(12345, bps) <= 12345

    @pytest.mark.parametrize("bps", [-1, 10001, 2.5, True, "100"])
    def test_invalid_fraction(self, bps):
        with pytest.raises(InvalidFractionError):
            withdrawal_amount(1000, bps)

    def test_invalid_fraction_is_value_error(self):
        with pytest.raises(ValueError):
            withdrawal_amount(1000, 10001)


class TestShareOfReserves:
    def test_quarter_share(self):
        assert share_of_reserves(250, 1000, Reserves(100000, 50000)) == (25000, 12500)

    def test_no_supply(self):
        assert share_of_reserves(0, 0, Reserves(100000, 50000)) == (0, 0)
