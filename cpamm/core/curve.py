"""
Constant Product Market Maker (CPMM) quote math.

This module implements the pool's x * y = k operations with integer-only,
floor-rounded arithmetic. Every function is pure: it reads reserves/supply
passed in by the caller and never touches ledger state, so quoting the same
inputs twice always yields the same result.

Algorithm Design:
- Type: Fixed-Point Integer Arithmetic / Floor Rounding
- Time Complexity: O(1) per quote
- Invariant: after a swap, (reserve_in + net_in) * (reserve_out - out) >= k
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Tuple

from ..errors import AmmError, ProgramError
from ..state.balances import Amount, require_u64
from ..state.pool_config import MAX_FEE_BPS

BPS_DENOMINATOR = 10_000

# Decimal precision of the intermediate liquidity ratio used by withdraw quotes.
WITHDRAW_PRECISION_DECIMALS = 6
WITHDRAW_PRECISION = 10 ** WITHDRAW_PRECISION_DECIMALS


@dataclass(frozen=True)
class SwapQuote:
    """
    Result of an exact-in swap quote.

    `deposit` is what the user pays into the input vault (the full input; the
    fee stays in the pool). `withdraw` is what the output vault pays out.
    """

    deposit: Amount
    withdraw: Amount
    fee: Amount
    amount_in_after_fee: Amount


@dataclass(frozen=True)
class DepositQuote:
    amount_x: Amount
    amount_y: Amount
    lp_to_mint: Amount


@dataclass(frozen=True)
class WithdrawQuote:
    amount_x: Amount
    amount_y: Amount
    drains_pool: bool = False


def apply_fee(amount_in: Amount, fee_bps: int) -> Amount:
    """amount_in * (10000 - fee_bps) // 10000."""
    if not (0 <= fee_bps < MAX_FEE_BPS):
        raise AmmError(ProgramError.INVALID_ARGUMENT, f"fee_bps must be in [0, {MAX_FEE_BPS}): {fee_bps}")
    return amount_in * (BPS_DENOMINATOR - fee_bps) // BPS_DENOMINATOR


def swap_quote(
    reserve_in: Amount,
    reserve_out: Amount,
    amount_in: Amount,
    fee_bps: int,
    min_out: Amount,
) -> SwapQuote:
    """
    Quote an exact-in swap against the current reserves.

    This implements:
        net_in = floor(amount_in * (10_000 - fee_bps) / 10_000)
        amount_out = floor(reserve_out * net_in / (reserve_in + net_in))

    Args:
        reserve_in: Current balance of the input vault
        reserve_out: Current balance of the output vault
        amount_in: Exact input amount
        fee_bps: Pool fee in basis points (0-9999)
        min_out: Slippage floor for the output

    Returns:
        SwapQuote

    Raises:
        AmmError(ArithmeticFailure): empty reserves or values outside u64
        AmmError(InvalidArgument): the fee-adjusted input or the output is zero
        AmmError(SlippageViolation): amount_out < min_out
    """
    require_u64(reserve_in, name="reserve_in")
    require_u64(reserve_out, name="reserve_out")
    require_u64(amount_in, name="amount_in")
    require_u64(min_out, name="min_out")
    if reserve_in == 0 or reserve_out == 0:
        raise AmmError(
            ProgramError.ARITHMETIC_FAILURE,
            f"Reserves must be positive: ({reserve_in}, {reserve_out})",
        )

    net_in = apply_fee(amount_in, fee_bps)
    if net_in == 0:
        raise AmmError(ProgramError.INVALID_ARGUMENT, f"amount_in {amount_in} is consumed entirely by the fee")

    amount_out = reserve_out * net_in // (reserve_in + net_in)
    if amount_out == 0:
        raise AmmError(ProgramError.INVALID_ARGUMENT, f"amount_in {amount_in} yields zero output")

    # Verify invariant: the fee never lets k decrease.
    k_before = reserve_in * reserve_out
    k_after = (reserve_in + net_in) * (reserve_out - amount_out)
    if k_after < k_before:
        raise AmmError(
            ProgramError.ARITHMETIC_FAILURE,
            f"Invariant violation: new_k ({k_after}) < old_k ({k_before})",
        )

    if amount_out < min_out:
        raise AmmError(
            ProgramError.SLIPPAGE_VIOLATION,
            f"amount_out {amount_out} below minimum {min_out}",
        )

    return SwapQuote(
        deposit=amount_in,
        withdraw=amount_out,
        fee=amount_in - net_in,
        amount_in_after_fee=net_in,
    )


def swap_quote_for_direction(
    reserve_x: Amount,
    reserve_y: Amount,
    is_x: bool,
    amount_in: Amount,
    fee_bps: int,
    min_out: Amount,
) -> SwapQuote:
    """`is_x` means the user pays X and receives Y."""
    reserve_in, reserve_out = (reserve_x, reserve_y) if is_x else (reserve_y, reserve_x)
    return swap_quote(reserve_in, reserve_out, amount_in, fee_bps, min_out)


def deposit_quote(amount: Amount, max_x: Amount, max_y: Amount) -> DepositQuote:
    """
    Deposit amounts as requested by the caller.

    The LP amount is the caller's choice and the transferred amounts are
    exactly `max_x` / `max_y`; nothing relates them to the reserve ratio.
    Clients are expected to pre-compute a ratio-correct call.
    """
    return DepositQuote(
        amount_x=require_u64(max_x, name="max_x"),
        amount_y=require_u64(max_y, name="max_y"),
        lp_to_mint=require_u64(amount, name="amount"),
    )


def xy_withdraw_amounts(
    reserve_x: Amount,
    reserve_y: Amount,
    lp_supply: Amount,
    lp_amount: Amount,
) -> Tuple[Amount, Amount]:
    """
    Pro-rata payout for burning `lp_amount` of `lp_supply`.

    The share of liquidity that stays in the pool is computed once at
    WITHDRAW_PRECISION_DECIMALS decimals:
        ratio = floor((lp_supply - lp_amount) * 10^6 / lp_supply)
        x = reserve_x - floor(reserve_x * ratio / 10^6)
    and likewise for y. Both outputs are non-decreasing in `lp_amount`.
    """
    require_u64(reserve_x, name="reserve_x")
    require_u64(reserve_y, name="reserve_y")
    require_u64(lp_supply, name="lp_supply")
    require_u64(lp_amount, name="lp_amount")
    if lp_supply == 0:
        raise AmmError(ProgramError.ARITHMETIC_FAILURE, "LP supply is zero")
    if lp_amount > lp_supply:
        raise AmmError(
            ProgramError.ARITHMETIC_FAILURE,
            f"Cannot burn more LP than supply: {lp_amount} > {lp_supply}",
        )

    ratio = (lp_supply - lp_amount) * WITHDRAW_PRECISION // lp_supply
    amount_x = reserve_x - reserve_x * ratio // WITHDRAW_PRECISION
    amount_y = reserve_y - reserve_y * ratio // WITHDRAW_PRECISION
    return amount_x, amount_y


def withdraw_quote(
    reserve_x: Amount,
    reserve_y: Amount,
    lp_supply: Amount,
    lp_amount: Amount,
    min_x: Amount,
    min_y: Amount,
) -> WithdrawQuote:
    """
    Quote a withdrawal and enforce the caller's floors.

    Burning the entire outstanding supply pays out the entire reserves, so
    the last LP never leaves a rounding residue behind.

    Raises:
        AmmError(ArithmeticFailure): zero supply or lp_amount > supply
        AmmError(SlippageViolation): x < min_x or y < min_y
    """
    require_u64(min_x, name="min_x")
    require_u64(min_y, name="min_y")
    if lp_amount == lp_supply:
        quote = WithdrawQuote(
            amount_x=require_u64(reserve_x, name="reserve_x"),
            amount_y=require_u64(reserve_y, name="reserve_y"),
            drains_pool=True,
        )
    else:
        x, y = xy_withdraw_amounts(reserve_x, reserve_y, lp_supply, lp_amount)
        quote = WithdrawQuote(amount_x=x, amount_y=y)

    if quote.amount_x < min_x or quote.amount_y < min_y:
        raise AmmError(
            ProgramError.SLIPPAGE_VIOLATION,
            f"withdraw ({quote.amount_x}, {quote.amount_y}) below minimum ({min_x}, {min_y})",
        )
    return quote
