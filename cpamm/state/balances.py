"""
Integer domains shared by ledger records and curve math.

Token amounts, LP supply and lamports are unsigned 64-bit on the ledger.
Python ints are unbounded, so every value crossing a record boundary is
range-checked here.
"""

from __future__ import annotations

from ..errors import AmmError, ProgramError

# Type aliases
Amount = int  # token base units, u64
Lamports = int  # native balance, u64
UnixTimestamp = int  # i64 seconds

U8_MAX = (1 << 8) - 1
U64_MAX = (1 << 64) - 1


def require_u64(value: int, *, name: str) -> Amount:
    """Return `value` if it fits in a u64, else fail with ArithmeticFailure."""
    if not isinstance(value, int) or isinstance(value, bool):
        raise AmmError(ProgramError.ARITHMETIC_FAILURE, f"{name} must be an int")
    if value < 0 or value > U64_MAX:
        raise AmmError(ProgramError.ARITHMETIC_FAILURE, f"{name} out of u64 range: {value}")
    return value

