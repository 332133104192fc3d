"""Deposit: pay both assets into the vaults and receive freshly minted LP."""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Sequence

from ...errors import AmmError, ProgramError
from ...integration.runtime import InvokeContext
from ...state.account import AccountView
from ..accounts import DepositAccounts
from ..curve import DepositQuote, deposit_quote
from ..instruction_data import DepositData, Discriminator
from .base import InstructionReceipt

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class Deposit:
    accounts: DepositAccounts
    data: DepositData
    quote: DepositQuote
    ctx: InvokeContext

    @classmethod
    def try_from(cls, data: DepositData, accounts: Sequence[AccountView], ctx: InvokeContext) -> "Deposit":
        validated = DepositAccounts.from_accounts(accounts, ctx)
        data.validate()
        data.check_expiration(ctx.clock)
        if not validated.pool.is_initialized():
            raise AmmError(
                ProgramError.STATE_VIOLATION,
                f"pool {validated.config.address} is not accepting deposits (state={validated.pool.state})",
            )
        quote = deposit_quote(data.amount, data.max_x, data.max_y)
        return cls(accounts=validated, data=data, quote=quote, ctx=ctx)

    def process(self) -> InstructionReceipt:
        accounts, quote, token = self.accounts, self.quote, self.ctx.token

        if quote.amount_x > 0:
            token.transfer(accounts.user_x, accounts.vault_x, accounts.user, quote.amount_x)
        if quote.amount_y > 0:
            token.transfer(accounts.user_y, accounts.vault_y, accounts.user, quote.amount_y)
        token.mint_to(
            accounts.mint_lp,
            accounts.user_lp,
            accounts.config,
            quote.lp_to_mint,
            signer=accounts.pool.signer(),
        )

        logger.debug(
            "deposit into %s: x=%d y=%d lp=%d",
            accounts.config.address,
            quote.amount_x,
            quote.amount_y,
            quote.lp_to_mint,
        )
        return InstructionReceipt(
            instruction=Discriminator.DEPOSIT,
            config=accounts.config.address,
            amounts={"amount_x": quote.amount_x, "amount_y": quote.amount_y, "lp": quote.lp_to_mint},
        )
