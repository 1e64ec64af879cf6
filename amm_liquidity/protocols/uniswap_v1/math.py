"""Math utilities for Uniswap V1 style constant-product pools.

All amounts are integers in the token's smallest unit. Every product is
taken before any division and every division floors, matching the exchange
contract bit-for-bit.
"""

from dataclasses import dataclass

from ...core.exceptions import (
    DegeneratePoolError,
    InsufficientLiquidityError,
    InvalidFractionError,
    InvalidInputError,
)
from ...utils.safe_int import S

# 0.3% trading fee, applied to swap inputs
FEE_NUMERATOR = 997
FEE_DENOMINATOR = 1000

# FEE_DENOMINATOR + FEE_NUMERATOR: single-step estimate of the swap size
# that leaves the remainder at the pool ratio. Not an exact inverse of the
# fee curve.
SWAP_DIVISOR = 1997

BPS_DENOMINATOR = 10000


@dataclass(frozen=True)
class Reserves:
    """Pool holdings snapshot: reference asset (ETH) and token"""

    reference: int
    token: int


@dataclass(frozen=True)
class SwapPlan:
    """
    Result of rebalancing an uneven deposit.

    swap_amount: amount of the major (excess) asset to swap away
    final_major: major asset amount to deposit after the swap
    final_minor: minor asset amount to deposit
    """

    swap_amount: int
    final_major: int
    final_minor: int


def get_input_price(input_amount, input_reserve, output_reserve):
    """
    Output obtainable from swapping input_amount into the pool, net of fee.

    output = in * 997 * out_reserve / (in_reserve * 1000 + in * 997)

    Args:
        input_amount: Amount sold
        input_reserve: Pool reserve of the sold asset
        output_reserve: Pool reserve of the bought asset

    Returns:
        Output amount (floored)

    Raises:
        DegeneratePoolError: If either reserve is zero
        ArithmeticOverflowError: If an intermediate exceeds uint256
    """
    if input_amount == 0:
        return 0
    if input_reserve == 0 or output_reserve == 0:
        raise DegeneratePoolError(
            f"Cannot price against empty reserves ({input_reserve}, {output_reserve})")

    fee_adjusted = S(input_amount) * FEE_NUMERATOR
    numerator = fee_adjusted * S(output_reserve)
    denominator = S(input_reserve) * FEE_DENOMINATOR + fee_adjusted
    return (numerator // denominator).value


def plan_rebalance(major_reserve, minor_reserve, major_amount, minor_amount):
    """
    Compute the swap that brings an uneven deposit to the pool ratio.

    The first asset is always the one in excess: part of it is swapped for
    the minor asset, then both final amounts are sized to the post-swap
    reserves. The minor amount is clamped to what was supplied plus what
    the swap yields, in which case the major amount is recomputed from it.

    Args:
        major_reserve: Pool reserve of the excess asset
        minor_reserve: Pool reserve of the other asset
        major_amount: Supplied amount of the excess asset
        minor_amount: Supplied amount of the other asset

    Returns:
        SwapPlan

    Raises:
        DegeneratePoolError: If either reserve is zero
        InsufficientLiquidityError: If the swap would drain the minor reserve
        InvalidInputError: If the first amount is not in excess
    """
    if major_reserve == 0 or minor_reserve == 0:
        raise DegeneratePoolError(
            f"Cannot plan against empty reserves ({major_reserve}, {minor_reserve})")

    major_res, minor_res = S(major_reserve), S(minor_reserve)
    major, minor = S(major_amount), S(minor_amount)

    minor_value_in_major = minor * major_res // minor_res
    if minor_value_in_major > major:
        raise InvalidInputError(
            f"Major amount {major_amount} is not in excess of minor amount "
            f"{minor_amount} at the pool ratio")

    major_swap = (major - minor_value_in_major) * FEE_DENOMINATOR // SWAP_DIVISOR
    minor_swap = S(get_input_price(major_swap.value, major_reserve, minor_reserve))

    if minor_res <= minor_swap:
        raise InsufficientLiquidityError(
            f"Swap output {minor_swap} would drain minor reserve {minor_reserve}")

    final_major = major - major_swap
    final_minor = final_major * (minor_res - minor_swap) // (major_res + major_swap)

    minor_cap = minor + minor_swap
    if final_minor > minor_cap:
        final_minor = minor_cap
        final_major = final_minor * (major_res + major_swap) // (minor_res - minor_swap)

    return SwapPlan(
        swap_amount=major_swap.value,
        final_major=final_major.value,
        final_minor=final_minor.value,
    )


def trim_to_ratio(scarce_amount, scarce_reserve, other_reserve):
    """Amount of the other asset matching scarce_amount at the pool ratio"""
    if scarce_reserve == 0 or other_reserve == 0:
        raise DegeneratePoolError(
            f"Cannot trim against empty reserves ({scarce_reserve}, {other_reserve})")
    return (S(scarce_amount) * S(other_reserve) // S(scarce_reserve)).value


def reference_is_major(reference_amount, token_amount, reserves):
    """
    True when the reference asset is in excess relative to the pool ratio.

    Cross-multiplies so a zero reserve never reaches a division.
    """
    return S(reference_amount) * S(reserves.token) >= S(token_amount) * S(reserves.reference)


@dataclass(frozen=True)
class DepositPlan:
    """
    Full deposit decision expressed in reference/token terms.

    major_is_reference: the reference asset was in excess at the pool ratio
    swap_amount: amount of the major asset to swap first (0 = no swap)
    reference_amount: reference asset to deposit
    token_amount: token to deposit
    """

    major_is_reference: bool
    swap_amount: int
    reference_amount: int
    token_amount: int
    prevent_swap: bool = False

    @property
    def token_allowance(self):
        """Tokens the pool must be allowed to pull (swap input included)"""
        if self.major_is_reference:
            return self.token_amount
        return self.swap_amount + self.token_amount


def plan_deposit(reserves, reference_amount, token_amount, prevent_swap=False):
    """
    Decide which side is in excess and size the deposit.

    With prevent_swap the scarce side is used in full and the other is
    trimmed to the pool ratio. Otherwise the excess side is partly swapped
    via plan_rebalance, oriented so the excess asset comes first.

    Args:
        reserves: Reserves snapshot
        reference_amount: Reference asset offered
        token_amount: Token offered
        prevent_swap: Skip the rebalancing swap

    Returns:
        DepositPlan
    """
    if reference_is_major(reference_amount, token_amount, reserves):
        if prevent_swap:
            return DepositPlan(
                major_is_reference=True,
                swap_amount=0,
                reference_amount=trim_to_ratio(token_amount, reserves.token, reserves.reference),
                token_amount=token_amount,
                prevent_swap=True,
            )
        plan = plan_rebalance(reserves.reference, reserves.token, reference_amount, token_amount)
        return DepositPlan(
            major_is_reference=True,
            swap_amount=plan.swap_amount,
            reference_amount=plan.final_major,
            token_amount=plan.final_minor,
        )

    if prevent_swap:
        return DepositPlan(
            major_is_reference=False,
            swap_amount=0,
            reference_amount=reference_amount,
            token_amount=trim_to_ratio(reference_amount, reserves.reference, reserves.token),
            prevent_swap=True,
        )
    plan = plan_rebalance(reserves.token, reserves.reference, token_amount, reference_amount)
    return DepositPlan(
        major_is_reference=False,
        swap_amount=plan.swap_amount,
        reference_amount=plan.final_minor,
        token_amount=plan.final_major,
    )


def withdrawal_amount(share_balance, fraction_bps):
    """
    Pool shares to burn for a withdrawal of fraction_bps basis points.

    Args:
        share_balance: Current pool-share balance
        fraction_bps: Fraction to withdraw, 0-10000

    Returns:
        share_balance * fraction_bps // 10000

    Raises:
        InvalidFractionError: If fraction_bps is outside [0, 10000]
    """
    if isinstance(fraction_bps, bool) or not isinstance(fraction_bps, int):
        raise InvalidFractionError(f"Fraction must be integer basis points, got {fraction_bps!r}")
    if fraction_bps < 0 or fraction_bps > BPS_DENOMINATOR:
        raise InvalidFractionError(
            f"Fraction {fraction_bps} bps outside [0, {BPS_DENOMINATOR}]")
    return (S(share_balance) * fraction_bps // BPS_DENOMINATOR).value


def share_of_reserves(shares, total_supply, reserves):
    """
    Underlying (reference, token) amounts redeemable for shares.

    Returns (0, 0) for a pool with no shares issued.
    """
    if total_supply == 0:
        return 0, 0
    reference = S(shares) * S(reserves.reference) // S(total_supply)
    token = S(shares) * S(reserves.token) // S(total_supply)
    return reference.value, token.value
