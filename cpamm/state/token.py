"""
Read-only views of the token ledger's canonical records.

Token account (165 bytes):
    mint(32) owner(32) amount(u64) delegate(COption<Pubkey>)
    state(u8) is_native(COption<u64>) delegated_amount(u64)
    close_authority(COption<Pubkey>)

Mint (82 bytes):
    mint_authority(COption<Pubkey>) supply(u64) decimals(u8)
    is_initialized(u8) freeze_authority(COption<Pubkey>)

COption is a u32 tag (0 = None, 1 = Some) followed by the payload, which is
present (zeroed) even when the tag is None.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import ClassVar, Optional

from construct import Bytes, Int8ul, Int32ul, Int64ul, Struct
from solders.pubkey import Pubkey

from ..errors import AmmError, ProgramError
from .account import AccountView
from .balances import Amount

COPTION_PUBKEY = Struct("tag" / Int32ul, "value" / Bytes(32))
COPTION_U64 = Struct("tag" / Int32ul, "value" / Int64ul)

TOKEN_ACCOUNT_LAYOUT = Struct(
    "mint" / Bytes(32),
    "owner" / Bytes(32),
    "amount" / Int64ul,
    "delegate" / COPTION_PUBKEY,
    "state" / Int8ul,
    "is_native" / COPTION_U64,
    "delegated_amount" / Int64ul,
    "close_authority" / COPTION_PUBKEY,
)

MINT_LAYOUT = Struct(
    "mint_authority" / COPTION_PUBKEY,
    "supply" / Int64ul,
    "decimals" / Int8ul,
    "is_initialized" / Int8ul,
    "freeze_authority" / COPTION_PUBKEY,
)

TOKEN_ACCOUNT_STATE_UNINITIALIZED = 0
TOKEN_ACCOUNT_STATE_INITIALIZED = 1


def _opt_pubkey(raw) -> Optional[Pubkey]:
    if raw.tag == 0:
        return None
    return Pubkey.from_bytes(raw.value)


def _coption_pubkey(value: Optional[Pubkey]) -> dict:
    if value is None:
        return dict(tag=0, value=bytes(32))
    return dict(tag=1, value=bytes(value))


def check_token_record(account: AccountView, *, expected_len: int, token_program_id: Pubkey, role: str) -> None:
    """Length + owner check shared by every consumed token record."""
    if account.data_len() != expected_len or not account.owned_by(token_program_id):
        raise AmmError(
            ProgramError.ACCOUNT_SHAPE_VIOLATION,
            f"{role} {account.address} must be a {expected_len}-byte record owned by the token program",
        )


@dataclass(frozen=True)
class TokenAccount:
    LEN: ClassVar[int] = TOKEN_ACCOUNT_LAYOUT.sizeof()

    mint: Pubkey
    owner: Pubkey
    amount: Amount
    delegate: Optional[Pubkey] = None
    state: int = TOKEN_ACCOUNT_STATE_INITIALIZED
    is_native: Optional[int] = None
    delegated_amount: Amount = 0
    close_authority: Optional[Pubkey] = None

    @classmethod
    def from_bytes(cls, data: bytes) -> "TokenAccount":
        if len(data) != cls.LEN:
            raise AmmError(ProgramError.ACCOUNT_SHAPE_VIOLATION, f"token account must be {cls.LEN} bytes")
        raw = TOKEN_ACCOUNT_LAYOUT.parse(bytes(data))
        return cls(
            mint=Pubkey.from_bytes(raw.mint),
            owner=Pubkey.from_bytes(raw.owner),
            amount=int(raw.amount),
            delegate=_opt_pubkey(raw.delegate),
            state=int(raw.state),
            is_native=None if raw.is_native.tag == 0 else int(raw.is_native.value),
            delegated_amount=int(raw.delegated_amount),
            close_authority=_opt_pubkey(raw.close_authority),
        )

    def to_bytes(self) -> bytes:
        return TOKEN_ACCOUNT_LAYOUT.build(
            dict(
                mint=bytes(self.mint),
                owner=bytes(self.owner),
                amount=self.amount,
                delegate=_coption_pubkey(self.delegate),
                state=self.state,
                is_native=dict(tag=0, value=0) if self.is_native is None else dict(tag=1, value=self.is_native),
                delegated_amount=self.delegated_amount,
                close_authority=_coption_pubkey(self.close_authority),
            )
        )

    def is_initialized(self) -> bool:
        return self.state != TOKEN_ACCOUNT_STATE_UNINITIALIZED


@dataclass(frozen=True)
class Mint:
    LEN: ClassVar[int] = MINT_LAYOUT.sizeof()

    mint_authority: Optional[Pubkey]
    supply: Amount
    decimals: int
    is_initialized: bool = True
    freeze_authority: Optional[Pubkey] = None

    @classmethod
    def from_bytes(cls, data: bytes) -> "Mint":
        if len(data) != cls.LEN:
            raise AmmError(ProgramError.ACCOUNT_SHAPE_VIOLATION, f"mint must be {cls.LEN} bytes")
        raw = MINT_LAYOUT.parse(bytes(data))
        return cls(
            mint_authority=_opt_pubkey(raw.mint_authority),
            supply=int(raw.supply),
            decimals=int(raw.decimals),
            is_initialized=bool(raw.is_initialized),
            freeze_authority=_opt_pubkey(raw.freeze_authority),
        )

    def to_bytes(self) -> bytes:
        return MINT_LAYOUT.build(
            dict(
                mint_authority=_coption_pubkey(self.mint_authority),
                supply=self.supply,
                decimals=self.decimals,
                is_initialized=1 if self.is_initialized else 0,
                freeze_authority=_coption_pubkey(self.freeze_authority),
            )
        )
