"""
Initialize: create a pool's config record and its LP mint.

Accounts: initializer (signer, payer), mint_lp, config, system_program,
token_program.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Sequence

from ...errors import AmmError, ProgramError
from ...integration.runtime import InvokeContext
from ...state.account import AccountView
from ...state.addresses import derive_mint_lp_address
from ...state.pool_config import PoolConfig
from ...state.token import Mint
from ..accounts import InitializeAccounts
from ..instruction_data import Discriminator, InitializeData
from .base import InstructionReceipt

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class Initialize:
    accounts: InitializeAccounts
    data: InitializeData
    pool: PoolConfig
    ctx: InvokeContext

    @classmethod
    def try_from(cls, data: InitializeData, accounts: Sequence[AccountView], ctx: InvokeContext) -> "Initialize":
        validated = InitializeAccounts.from_accounts(accounts, ctx)
        data.validate()

        # In-memory record; persisted only after the account exists.
        pool = PoolConfig(
            seed=data.seed,
            authority=data.authority,
            mint_x=data.mint_x,
            mint_y=data.mint_y,
            config_bump=data.config_bump,
        )
        pool.set_fee(data.fee)

        config = validated.config
        if not config.is_empty() or config.owned_by(ctx.program_id):
            raise AmmError(ProgramError.STATE_VIOLATION, f"config {config.address} already exists")
        pool.verify_address(config.address, ctx.program_id)

        expected_mint_lp = derive_mint_lp_address(config.address, data.lp_bump, ctx.program_id)
        if validated.mint_lp.address != expected_mint_lp:
            raise AmmError(
                ProgramError.ADDRESS_MISMATCH,
                f"mint_lp must be {expected_mint_lp}, got {validated.mint_lp.address}",
            )
        return cls(accounts=validated, data=data, pool=pool, ctx=ctx)

    def process(self) -> InstructionReceipt:
        accounts, data, ctx = self.accounts, self.data, self.ctx

        config_lamports = ctx.rent.minimum_balance(PoolConfig.LEN)
        ctx.system.create_account(
            accounts.initializer,
            accounts.config,
            config_lamports,
            PoolConfig.LEN,
            ctx.program_id,
            signer=self.pool.signer(),
        )
        with PoolConfig.load_mut(accounts.config, ctx.program_id) as pool:
            pool.set_inner(
                seed=data.seed,
                authority=data.authority,
                mint_x=data.mint_x,
                mint_y=data.mint_y,
                fee_bps=data.fee,
                config_bump=data.config_bump,
            )

        mint_lamports = ctx.rent.minimum_balance(Mint.LEN)
        ctx.system.create_account(
            accounts.initializer,
            accounts.mint_lp,
            mint_lamports,
            Mint.LEN,
            ctx.config.token_program_id,
            signer=PoolConfig.mint_lp_signer(accounts.config.address, data.lp_bump),
        )
        ctx.token.initialize_mint(
            accounts.mint_lp,
            ctx.config.lp_decimals,
            accounts.config.address,
            None,
        )

        logger.debug(
            "initialized pool %s (seed=%d fee_bps=%d mint_lp=%s)",
            accounts.config.address,
            data.seed,
            data.fee,
            accounts.mint_lp.address,
        )
        return InstructionReceipt(
            instruction=Discriminator.INITIALIZE,
            config=accounts.config.address,
            amounts={"fee_bps": data.fee, "config_lamports": config_lamports, "mint_lamports": mint_lamports},
        )
