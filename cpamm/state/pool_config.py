"""
Persistent pool configuration record and its lifecycle state machine.

Byte layout (108 bytes, little-endian, 1-byte alignment, no padding):

    offset  size  field
    0       1     state        u8 (AmmState)
    1       8     seed         u64
    9       32    authority    address, all-zero = none
    41      32    mint_x       address
    73      32    mint_y       address
    105     2     fee_bps      u16
    107     1     config_bump  u8

The layout is shared with the ledger's account storage and must stay
bit-exact. The record is created once by Initialize and only ever mutated
through the setters below, inside `PoolConfig.load_mut()`.
"""

from __future__ import annotations

from contextlib import contextmanager
from dataclasses import dataclass, field
from enum import IntEnum, unique
from typing import ClassVar, Iterator, Optional, Tuple

from construct import Bytes, Int8ul, Int16ul, Int64ul, Struct
from solders.pubkey import Pubkey

from ..errors import AmmError, ProgramError
from .account import AccountView
from .addresses import (
    PdaSigner,
    config_seeds,
    create_program_address,
    derive_vault_address,
    mint_lp_seeds,
    verify_program_address,
)
from .balances import U8_MAX, U64_MAX

MAX_FEE_BPS = 10_000

POOL_CONFIG_LAYOUT = Struct(
    "state" / Int8ul,
    "seed" / Int64ul,
    "authority" / Bytes(32),
    "mint_x" / Bytes(32),
    "mint_y" / Bytes(32),
    "fee_bps" / Int16ul,
    "config_bump" / Int8ul,
)


@unique
class AmmState(IntEnum):
    UNINITIALIZED = 0
    INITIALIZED = 1
    DISABLED = 2
    WITHDRAW_ONLY = 3


@dataclass
class PoolConfig:
    """
    In-memory copy of a pool's config account.

    `state` keeps the raw stored byte, so a record written by another
    program version with an unknown state value still loads and simply fails
    every `== AmmState.INITIALIZED` gate.
    """

    LEN: ClassVar[int] = POOL_CONFIG_LAYOUT.sizeof()

    state: int = AmmState.UNINITIALIZED
    seed: int = 0
    authority: Pubkey = field(default_factory=Pubkey.default)
    mint_x: Pubkey = field(default_factory=Pubkey.default)
    mint_y: Pubkey = field(default_factory=Pubkey.default)
    fee_bps: int = 0
    config_bump: int = 0

    # -- decoding / encoding ------------------------------------------------

    @classmethod
    def from_bytes(cls, data: bytes) -> "PoolConfig":
        """
        Decode a record without any ownership check.

        Only for data whose account already passed `load()` (or the
        equivalent length/owner checks) earlier in the same instruction.
        """
        if len(data) != cls.LEN:
            raise AmmError(
                ProgramError.ACCOUNT_SHAPE_VIOLATION,
                f"config data must be {cls.LEN} bytes, got {len(data)}",
            )
        raw = POOL_CONFIG_LAYOUT.parse(bytes(data))
        return cls(
            state=int(raw.state),
            seed=int(raw.seed),
            authority=Pubkey.from_bytes(raw.authority),
            mint_x=Pubkey.from_bytes(raw.mint_x),
            mint_y=Pubkey.from_bytes(raw.mint_y),
            fee_bps=int(raw.fee_bps),
            config_bump=int(raw.config_bump),
        )

    def to_bytes(self) -> bytes:
        return POOL_CONFIG_LAYOUT.build(
            dict(
                state=int(self.state),
                seed=self.seed,
                authority=bytes(self.authority),
                mint_x=bytes(self.mint_x),
                mint_y=bytes(self.mint_y),
                fee_bps=self.fee_bps,
                config_bump=self.config_bump,
            )
        )

    # -- validated load paths -----------------------------------------------

    @classmethod
    def check_account(cls, account: AccountView, program_id: Pubkey) -> None:
        """Size and ownership checks every config load goes through."""
        if account.data_len() != cls.LEN:
            raise AmmError(
                ProgramError.ACCOUNT_SHAPE_VIOLATION,
                f"config account must hold {cls.LEN} bytes, holds {account.data_len()}",
            )
        if not account.owned_by(program_id):
            raise AmmError(
                ProgramError.ADDRESS_MISMATCH,
                f"config account {account.address} is not owned by program {program_id}",
            )

    @classmethod
    def load(cls, account: AccountView, program_id: Pubkey) -> "PoolConfig":
        cls.check_account(account, program_id)
        return cls.from_bytes(account.data)

    @classmethod
    @contextmanager
    def load_mut(cls, account: AccountView, program_id: Pubkey) -> Iterator["PoolConfig"]:
        """
        Scoped exclusive access to a config account.

        The record is written back only when the block exits cleanly; an
        exception leaves the account bytes untouched.
        """
        config = cls.load(account, program_id)
        yield config
        account.data[:] = config.to_bytes()

    # -- state machine + setters --------------------------------------------

    def set_state(self, state: int) -> None:
        # WITHDRAW_ONLY is unreachable through this setter.
        if state >= AmmState.WITHDRAW_ONLY or state < 0:
            raise AmmError(ProgramError.INVALID_ARGUMENT, f"invalid pool state: {state}")
        self.state = int(state)

    def set_seed(self, seed: int) -> None:
        if not (0 <= seed <= U64_MAX):
            raise AmmError(ProgramError.INVALID_ARGUMENT, f"seed out of u64 range: {seed}")
        self.seed = int(seed)

    def set_authority(self, authority: Pubkey) -> None:
        self.authority = authority

    def set_mint_x(self, mint_x: Pubkey) -> None:
        self.mint_x = mint_x

    def set_mint_y(self, mint_y: Pubkey) -> None:
        self.mint_y = mint_y

    def set_fee(self, fee_bps: int) -> None:
        if fee_bps >= MAX_FEE_BPS or fee_bps < 0:
            raise AmmError(ProgramError.INVALID_ARGUMENT, f"fee_bps must be in [0, {MAX_FEE_BPS}): {fee_bps}")
        self.fee_bps = int(fee_bps)

    def set_config_bump(self, config_bump: int) -> None:
        if not (0 <= config_bump <= U8_MAX):
            raise AmmError(ProgramError.INVALID_ARGUMENT, f"config_bump must fit in a u8: {config_bump}")
        self.config_bump = int(config_bump)

    def set_inner(
        self,
        seed: int,
        authority: Pubkey,
        mint_x: Pubkey,
        mint_y: Pubkey,
        fee_bps: int,
        config_bump: int,
    ) -> None:
        """Write a fresh pool record; the pool becomes INITIALIZED."""
        self.set_state(AmmState.INITIALIZED)
        self.set_seed(seed)
        self.set_authority(authority)
        self.set_mint_x(mint_x)
        self.set_mint_y(mint_y)
        self.set_fee(fee_bps)
        self.set_config_bump(config_bump)

    def has_authority(self) -> Optional[Pubkey]:
        if self.authority == Pubkey.default():
            return None
        return self.authority

    def is_initialized(self) -> bool:
        return self.state == AmmState.INITIALIZED

    # -- derived addresses + signing capability -----------------------------

    def seeds(self) -> list[bytes]:
        return config_seeds(self.seed, self.mint_x, self.mint_y, self.config_bump)

    def address(self, program_id: Pubkey) -> Pubkey:
        return create_program_address(self.seeds(), program_id)

    def verify_address(self, expected: Pubkey, program_id: Pubkey) -> None:
        verify_program_address(expected, self.seeds(), program_id)

    def signer(self) -> PdaSigner:
        """Authority proof for the config address (vault transfers, LP minting)."""
        return PdaSigner(tuple(self.seeds()))

    @staticmethod
    def mint_lp_signer(config_address: Pubkey, lp_bump: int) -> PdaSigner:
        """Authority proof for the LP mint address (needed once, to create it)."""
        return PdaSigner(tuple(mint_lp_seeds(config_address, lp_bump)))

    def vault_addresses(
        self,
        config_address: Pubkey,
        token_program_id: Pubkey,
        associated_token_program_id: Pubkey,
    ) -> Tuple[Pubkey, Pubkey]:
        """(vault_x, vault_y) recomputed from this record; nothing is stored."""
        return (
            derive_vault_address(config_address, token_program_id, self.mint_x, associated_token_program_id),
            derive_vault_address(config_address, token_program_id, self.mint_y, associated_token_program_id),
        )

    def __repr__(self) -> str:
        return (
            f"PoolConfig(state={self.state}, seed={self.seed}, "
            f"mints=({str(self.mint_x)[:8]}..., {str(self.mint_y)[:8]}...), "
            f"fee_bps={self.fee_bps}, bump={self.config_bump})"
        )
