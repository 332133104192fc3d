"""
Client-side helpers: derive a pool's addresses and build the positional
account lists each instruction expects.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import List

from solders.pubkey import Pubkey

from ..config import ProgramConfig
from ..state.addresses import derive_vault_address, find_config_address, find_mint_lp_address
from .ledger import AccountMeta


@dataclass(frozen=True)
class PoolAddresses:
    seed: int
    mint_x: Pubkey
    mint_y: Pubkey
    config: Pubkey
    config_bump: int
    mint_lp: Pubkey
    lp_bump: int
    vault_x: Pubkey
    vault_y: Pubkey

    @classmethod
    def derive(cls, seed: int, mint_x: Pubkey, mint_y: Pubkey, program: ProgramConfig) -> "PoolAddresses":
        """Canonical addresses of the pool identified by (seed, mint_x, mint_y)."""
        config, config_bump = find_config_address(seed, mint_x, mint_y, program.program_id)
        mint_lp, lp_bump = find_mint_lp_address(config, program.program_id)
        return cls(
            seed=seed,
            mint_x=mint_x,
            mint_y=mint_y,
            config=config,
            config_bump=config_bump,
            mint_lp=mint_lp,
            lp_bump=lp_bump,
            vault_x=derive_vault_address(config, program.token_program_id, mint_x, program.associated_token_program_id),
            vault_y=derive_vault_address(config, program.token_program_id, mint_y, program.associated_token_program_id),
        )


def initialize_metas(initializer: Pubkey, pool: PoolAddresses, program: ProgramConfig) -> List[AccountMeta]:
    return [
        AccountMeta(initializer, is_signer=True, is_writable=True),
        AccountMeta(pool.mint_lp, is_writable=True),
        AccountMeta(pool.config, is_writable=True),
        AccountMeta(program.system_program_id),
        AccountMeta(program.token_program_id),
    ]


def liquidity_metas(
    user: Pubkey,
    pool: PoolAddresses,
    user_x: Pubkey,
    user_y: Pubkey,
    user_lp: Pubkey,
    program: ProgramConfig,
) -> List[AccountMeta]:
    """Account list shared by Deposit and Withdraw."""
    return [
        AccountMeta(user, is_signer=True, is_writable=True),
        AccountMeta(pool.mint_lp, is_writable=True),
        AccountMeta(pool.vault_x, is_writable=True),
        AccountMeta(pool.vault_y, is_writable=True),
        AccountMeta(user_x, is_writable=True),
        AccountMeta(user_y, is_writable=True),
        AccountMeta(user_lp, is_writable=True),
        AccountMeta(pool.config),
        AccountMeta(program.token_program_id),
    ]


def swap_metas(
    user: Pubkey,
    pool: PoolAddresses,
    user_x: Pubkey,
    user_y: Pubkey,
    program: ProgramConfig,
) -> List[AccountMeta]:
    return [
        AccountMeta(user, is_signer=True, is_writable=True),
        AccountMeta(user_x, is_writable=True),
        AccountMeta(user_y, is_writable=True),
        AccountMeta(pool.vault_x, is_writable=True),
        AccountMeta(pool.vault_y, is_writable=True),
        AccountMeta(pool.config),
        AccountMeta(program.token_program_id),
    ]
