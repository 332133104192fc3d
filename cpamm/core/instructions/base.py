"""Pieces shared by the instruction processors."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Dict, Tuple

from solders.pubkey import Pubkey

from ...state.account import AccountView
from ...state.balances import Amount
from ...state.token import Mint, TokenAccount
from ..instruction_data import Discriminator


@dataclass(frozen=True)
class InstructionReceipt:
    """What an accepted instruction did, for logging and tests."""

    instruction: Discriminator
    config: Pubkey
    amounts: Dict[str, Amount] = field(default_factory=dict)

    def __str__(self) -> str:
        parts = " ".join(f"{k}={v}" for k, v in self.amounts.items())
        return f"{self.instruction.name} config={self.config} {parts}".rstrip()


def token_amount(account: AccountView) -> Amount:
    # Callers have already checked the record's shape.
    return TokenAccount.from_bytes(account.data).amount


def reserves(vault_x: AccountView, vault_y: AccountView) -> Tuple[Amount, Amount]:
    return token_amount(vault_x), token_amount(vault_y)


def lp_supply(mint_lp: AccountView) -> Amount:
    return Mint.from_bytes(mint_lp.data).supply
