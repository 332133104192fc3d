"""
Interfaces of the external collaborators the instruction core calls.

The core never implements these; it receives them bundled in an
`InvokeContext`. `cpamm.integration.ledger.LocalLedger` is an in-memory
implementation used by the tests and the offline tools.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Optional, Protocol, runtime_checkable

from solders.pubkey import Pubkey

from ..config import ProgramConfig
from ..state.account import AccountView
from ..state.addresses import PdaSigner
from ..state.balances import Amount, Lamports, UnixTimestamp

# Solana's default rent parameters.
LAMPORTS_PER_BYTE_YEAR = 3_480
EXEMPTION_THRESHOLD_YEARS = 2
ACCOUNT_STORAGE_OVERHEAD = 128


@runtime_checkable
class ClockSysvar(Protocol):
    @property
    def unix_timestamp(self) -> UnixTimestamp: ...


@dataclass(frozen=True)
class Clock:
    unix_timestamp: UnixTimestamp = 0


@dataclass(frozen=True)
class Rent:
    lamports_per_byte_year: int = LAMPORTS_PER_BYTE_YEAR
    exemption_threshold_years: int = EXEMPTION_THRESHOLD_YEARS

    def minimum_balance(self, space: int) -> Lamports:
        """Lamports that make an account of `space` bytes rent-exempt."""
        if space < 0:
            raise ValueError(f"space must be non-negative: {space}")
        return (ACCOUNT_STORAGE_OVERHEAD + space) * self.lamports_per_byte_year * self.exemption_threshold_years


class TokenProgram(Protocol):
    """Token ledger primitives (transfer / mint / burn / initialize mint)."""

    def transfer(
        self,
        source: AccountView,
        destination: AccountView,
        authority: AccountView,
        amount: Amount,
        signer: Optional[PdaSigner] = None,
    ) -> None: ...

    def mint_to(
        self,
        mint: AccountView,
        account: AccountView,
        authority: AccountView,
        amount: Amount,
        signer: Optional[PdaSigner] = None,
    ) -> None: ...

    def burn(
        self,
        account: AccountView,
        mint: AccountView,
        authority: AccountView,
        amount: Amount,
    ) -> None: ...

    def initialize_mint(
        self,
        mint: AccountView,
        decimals: int,
        mint_authority: Pubkey,
        freeze_authority: Optional[Pubkey] = None,
    ) -> None: ...


class SystemProgram(Protocol):
    """Account-creation service."""

    def create_account(
        self,
        payer: AccountView,
        new_account: AccountView,
        lamports: Lamports,
        space: int,
        owner: Pubkey,
        signer: Optional[PdaSigner] = None,
    ) -> None: ...


@dataclass(frozen=True)
class InvokeContext:
    """Everything an instruction may call out to, plus the program identity."""

    config: ProgramConfig
    token: TokenProgram
    system: SystemProgram
    clock: ClockSysvar
    rent: Rent = Rent()

    @property
    def program_id(self) -> Pubkey:
        return self.config.program_id
