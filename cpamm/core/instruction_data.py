"""
Instruction payload decoding.

Wire format: one instruction is `[discriminator: u8][payload]`, where every
payload is fixed-width, little-endian and densely packed:

    0 Initialize  seed:u64 fee:u16 mint_x:[32] mint_y:[32] config_bump:u8
                  lp_bump:u8 [authority:[32]]                 76 or 108 bytes
    1 Deposit     amount:u64 max_x:u64 max_y:u64 expiration:i64     32 bytes
    2 Withdraw    amount:u64 min_x:u64 min_y:u64 expiration:i64     32 bytes
    3 Swap        is_x:u8 amount:u64 min:u64 expiration:i64         25 bytes

Parsing is field-by-field from fixed offsets; lengths must match exactly.
Business checks (non-zero amounts, distinct mints) live in each payload's
``validate()`` and run after the account list has been validated, as does
the expiration check, which needs the clock. ``decode_instruction`` does
both steps for callers that have no accounts.
"""

from __future__ import annotations

from dataclasses import dataclass
from enum import IntEnum, unique
from typing import ClassVar, Tuple, Union

from construct import Bytes, Int8ul, Int16ul, Int64sl, Int64ul, Struct
from solders.pubkey import Pubkey

from ..errors import AmmError, ProgramError
from ..integration.runtime import ClockSysvar
from ..state.balances import Amount, UnixTimestamp

INITIALIZE_LAYOUT = Struct(
    "seed" / Int64ul,
    "fee" / Int16ul,
    "mint_x" / Bytes(32),
    "mint_y" / Bytes(32),
    "config_bump" / Int8ul,
    "lp_bump" / Int8ul,
)
AUTHORITY_FIELD = Bytes(32)

DEPOSIT_LAYOUT = Struct(
    "amount" / Int64ul,
    "max_x" / Int64ul,
    "max_y" / Int64ul,
    "expiration" / Int64sl,
)

WITHDRAW_LAYOUT = Struct(
    "amount" / Int64ul,
    "min_x" / Int64ul,
    "min_y" / Int64ul,
    "expiration" / Int64sl,
)

SWAP_LAYOUT = Struct(
    "is_x" / Int8ul,
    "amount" / Int64ul,
    "min" / Int64ul,
    "expiration" / Int64sl,
)


@unique
class Discriminator(IntEnum):
    INITIALIZE = 0
    DEPOSIT = 1
    WITHDRAW = 2
    SWAP = 3


def _require_len(data: bytes, allowed: Tuple[int, ...], *, name: str) -> None:
    if len(data) not in allowed:
        expected = " or ".join(str(n) for n in allowed)
        raise AmmError(
            ProgramError.MALFORMED_INPUT,
            f"{name} payload must be {expected} bytes, got {len(data)}",
        )


def _require_nonzero(value: int, *, name: str) -> None:
    if value == 0:
        raise AmmError(ProgramError.INVALID_ARGUMENT, f"{name} must be non-zero")


def check_expiration(expiration: UnixTimestamp, clock: ClockSysvar) -> None:
    """0 never expires; otherwise fail once the clock is past `expiration`."""
    if expiration != 0 and clock.unix_timestamp > expiration:
        raise AmmError(
            ProgramError.EXPIRED,
            f"expired at {expiration}, clock is {clock.unix_timestamp}",
        )


@dataclass(frozen=True)
class InitializeData:
    DISCRIMINATOR: ClassVar[Discriminator] = Discriminator.INITIALIZE
    LEN_WITHOUT_AUTHORITY: ClassVar[int] = INITIALIZE_LAYOUT.sizeof()
    LEN: ClassVar[int] = INITIALIZE_LAYOUT.sizeof() + 32

    seed: int
    fee: int
    mint_x: Pubkey
    mint_y: Pubkey
    config_bump: int
    lp_bump: int
    authority: Pubkey = Pubkey.default()

    @classmethod
    def from_bytes(cls, data: bytes) -> "InitializeData":
        data = bytes(data)
        _require_len(data, (cls.LEN_WITHOUT_AUTHORITY, cls.LEN), name="Initialize")
        raw = INITIALIZE_LAYOUT.parse(data[: cls.LEN_WITHOUT_AUTHORITY])
        if len(data) == cls.LEN:
            authority = Pubkey.from_bytes(AUTHORITY_FIELD.parse(data[cls.LEN_WITHOUT_AUTHORITY:]))
        else:
            authority = Pubkey.default()

        return cls(
            seed=int(raw.seed),
            fee=int(raw.fee),
            mint_x=Pubkey.from_bytes(raw.mint_x),
            mint_y=Pubkey.from_bytes(raw.mint_y),
            config_bump=int(raw.config_bump),
            lp_bump=int(raw.lp_bump),
            authority=authority,
        )

    def validate(self) -> None:
        if self.mint_x == self.mint_y:
            raise AmmError(ProgramError.INVALID_ARGUMENT, "mint_x and mint_y must differ")

    def to_bytes(self, *, include_authority: bool = True) -> bytes:
        head = INITIALIZE_LAYOUT.build(
            dict(
                seed=self.seed,
                fee=self.fee,
                mint_x=bytes(self.mint_x),
                mint_y=bytes(self.mint_y),
                config_bump=self.config_bump,
                lp_bump=self.lp_bump,
            )
        )
        if not include_authority:
            return head
        return head + AUTHORITY_FIELD.build(bytes(self.authority))


@dataclass(frozen=True)
class DepositData:
    DISCRIMINATOR: ClassVar[Discriminator] = Discriminator.DEPOSIT
    LEN: ClassVar[int] = DEPOSIT_LAYOUT.sizeof()

    amount: Amount
    max_x: Amount
    max_y: Amount
    expiration: UnixTimestamp = 0

    @classmethod
    def from_bytes(cls, data: bytes) -> "DepositData":
        data = bytes(data)
        _require_len(data, (cls.LEN,), name="Deposit")
        raw = DEPOSIT_LAYOUT.parse(data)
        return cls(
            amount=int(raw.amount),
            max_x=int(raw.max_x),
            max_y=int(raw.max_y),
            expiration=int(raw.expiration),
        )

    def validate(self) -> None:
        _require_nonzero(self.amount, name="amount")

    def to_bytes(self) -> bytes:
        return DEPOSIT_LAYOUT.build(
            dict(amount=self.amount, max_x=self.max_x, max_y=self.max_y, expiration=self.expiration)
        )

    def check_expiration(self, clock: ClockSysvar) -> None:
        check_expiration(self.expiration, clock)


@dataclass(frozen=True)
class WithdrawData:
    DISCRIMINATOR: ClassVar[Discriminator] = Discriminator.WITHDRAW
    LEN: ClassVar[int] = WITHDRAW_LAYOUT.sizeof()

    amount: Amount
    min_x: Amount
    min_y: Amount
    expiration: UnixTimestamp = 0

    @classmethod
    def from_bytes(cls, data: bytes) -> "WithdrawData":
        data = bytes(data)
        _require_len(data, (cls.LEN,), name="Withdraw")
        raw = WITHDRAW_LAYOUT.parse(data)
        return cls(
            amount=int(raw.amount),
            min_x=int(raw.min_x),
            min_y=int(raw.min_y),
            expiration=int(raw.expiration),
        )

    def validate(self) -> None:
        _require_nonzero(self.amount, name="amount")

    def to_bytes(self) -> bytes:
        return WITHDRAW_LAYOUT.build(
            dict(amount=self.amount, min_x=self.min_x, min_y=self.min_y, expiration=self.expiration)
        )

    def check_expiration(self, clock: ClockSysvar) -> None:
        check_expiration(self.expiration, clock)


@dataclass(frozen=True)
class SwapData:
    DISCRIMINATOR: ClassVar[Discriminator] = Discriminator.SWAP
    LEN: ClassVar[int] = SWAP_LAYOUT.sizeof()

    is_x: bool
    amount: Amount
    min: Amount
    expiration: UnixTimestamp = 0

    @classmethod
    def from_bytes(cls, data: bytes) -> "SwapData":
        data = bytes(data)
        _require_len(data, (cls.LEN,), name="Swap")
        raw = SWAP_LAYOUT.parse(data)
        if raw.is_x not in (0, 1):
            raise AmmError(ProgramError.MALFORMED_INPUT, f"is_x must be 0 or 1, got {raw.is_x}")
        return cls(
            is_x=bool(raw.is_x),
            amount=int(raw.amount),
            min=int(raw.min),
            expiration=int(raw.expiration),
        )

    def validate(self) -> None:
        _require_nonzero(self.amount, name="amount")
        _require_nonzero(self.min, name="min")

    def to_bytes(self) -> bytes:
        return SWAP_LAYOUT.build(
            dict(is_x=1 if self.is_x else 0, amount=self.amount, min=self.min, expiration=self.expiration)
        )

    def check_expiration(self, clock: ClockSysvar) -> None:
        check_expiration(self.expiration, clock)


InstructionData = Union[InitializeData, DepositData, WithdrawData, SwapData]

_PAYLOAD_TYPES = {
    Discriminator.INITIALIZE: InitializeData,
    Discriminator.DEPOSIT: DepositData,
    Discriminator.WITHDRAW: WithdrawData,
    Discriminator.SWAP: SwapData,
}


def split_discriminator(data: bytes) -> Tuple[Discriminator, bytes]:
    """Split the leading tag byte off an instruction buffer."""
    if not data:
        raise AmmError(ProgramError.MALFORMED_INPUT, "empty instruction data")
    tag = data[0]
    try:
        discriminator = Discriminator(tag)
    except ValueError as exc:
        raise AmmError(ProgramError.MALFORMED_INPUT, f"unknown discriminator: {tag}") from exc
    return discriminator, bytes(data[1:])


def parse_instruction(data: bytes) -> InstructionData:
    """Framing and field layout only; business checks are left to ``validate()``."""
    discriminator, payload = split_discriminator(bytes(data))
    return _PAYLOAD_TYPES[discriminator].from_bytes(payload)


def decode_instruction(data: bytes) -> InstructionData:
    payload = parse_instruction(data)
    payload.validate()
    return payload


def encode_instruction(payload: InstructionData) -> bytes:
    """Client-side helper: discriminator byte followed by the packed payload."""
    return bytes([payload.DISCRIMINATOR]) + payload.to_bytes()
