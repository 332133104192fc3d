"""
Ledger account records as seen by the instruction core.

`AccountInfo` is the ledger-owned record (address, owner, lamports, data).
`AccountView` is one entry of an instruction's positional account list: a
reference to a live record plus the per-transaction signer/writable flags.
Reads through a view always observe the current record, so a view taken
before an external call sees that call's effects.
"""

from __future__ import annotations

from dataclasses import dataclass, field

from solders.pubkey import Pubkey

from .balances import Lamports


@dataclass
class AccountInfo:
    address: Pubkey
    owner: Pubkey
    lamports: Lamports = 0
    data: bytearray = field(default_factory=bytearray)
    executable: bool = False

    def __post_init__(self) -> None:
        if self.lamports < 0:
            raise ValueError(f"lamports must be non-negative: {self.lamports}")
        if not isinstance(self.data, bytearray):
            self.data = bytearray(self.data)

    def snapshot(self) -> "AccountInfo":
        return AccountInfo(
            address=self.address,
            owner=self.owner,
            lamports=self.lamports,
            data=bytearray(self.data),
            executable=self.executable,
        )


@dataclass(frozen=True)
class AccountView:
    info: AccountInfo
    is_signer: bool = False
    is_writable: bool = False

    @property
    def address(self) -> Pubkey:
        return self.info.address

    @property
    def owner(self) -> Pubkey:
        return self.info.owner

    @property
    def lamports(self) -> Lamports:
        return self.info.lamports

    @property
    def data(self) -> bytearray:
        return self.info.data

    def data_len(self) -> int:
        return len(self.info.data)

    def owned_by(self, program_id: Pubkey) -> bool:
        return self.info.owner == program_id

    def is_empty(self) -> bool:
        """True for an address the ledger holds nothing at (no data, no lamports)."""
        return not self.info.data and self.info.lamports == 0

    def __repr__(self) -> str:
        flags = ("s" if self.is_signer else "-") + ("w" if self.is_writable else "-")
        return f"AccountView({self.address}, owner={self.owner}, len={self.data_len()}, {flags})"
