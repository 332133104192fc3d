"""Error taxonomy for the AMM instruction core.

Every check raises ``AmmError`` carrying a ``ProgramError`` code. The
dispatcher in ``core/engine.py`` converts it into a ``ProcessResult`` for callers
that prefer result inspection over exceptions.
"""

from __future__ import annotations

from enum import Enum, unique


@unique
class ProgramError(Enum):
    """One member per failure class an instruction can abort with."""
    MALFORMED_INPUT = "MalformedInput"
    NOT_ENOUGH_ACCOUNT_KEYS = "NotEnoughAccountKeys"
    MISSING_REQUIRED_SIGNATURE = "MissingRequiredSignature"
    ACCOUNT_SHAPE_VIOLATION = "AccountShapeViolation"
    ADDRESS_MISMATCH = "AddressMismatch"
    STATE_VIOLATION = "StateViolation"
    ARITHMETIC_FAILURE = "ArithmeticFailure"
    SLIPPAGE_VIOLATION = "SlippageViolation"
    EXPIRED = "Expired"
    INVALID_ARGUMENT = "InvalidArgument"
    EXTERNAL_CALL_FAILED = "ExternalCallFailed"


class AmmError(Exception):
    """Raised when an instruction must abort."""

    def __init__(self, code: ProgramError, message: str = "") -> None:
        self.code = code
        self.message = message
        super().__init__(f"{code.value}: {message}" if message else code.value)
