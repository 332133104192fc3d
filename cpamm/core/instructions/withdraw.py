"""
Withdraw: burn LP and receive the pro-rata share of both vaults.

The payout is quoted during validation and quoted again right before the
calls are made; the two must agree. Withdraw is deliberately not gated on
the pool state, so LPs can always exit.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Sequence

from ...errors import AmmError, ProgramError
from ...integration.runtime import InvokeContext
from ...state.account import AccountView
from ..accounts import WithdrawAccounts
from ..curve import WithdrawQuote, withdraw_quote
from ..instruction_data import Discriminator, WithdrawData
from .base import InstructionReceipt, lp_supply, reserves

logger = logging.getLogger(__name__)


def quote_withdraw(accounts: WithdrawAccounts, data: WithdrawData) -> WithdrawQuote:
    reserve_x, reserve_y = reserves(accounts.vault_x, accounts.vault_y)
    return withdraw_quote(
        reserve_x,
        reserve_y,
        lp_supply(accounts.mint_lp),
        data.amount,
        data.min_x,
        data.min_y,
    )


@dataclass(frozen=True)
class Withdraw:
    accounts: WithdrawAccounts
    data: WithdrawData
    quote: WithdrawQuote
    ctx: InvokeContext

    @classmethod
    def try_from(cls, data: WithdrawData, accounts: Sequence[AccountView], ctx: InvokeContext) -> "Withdraw":
        validated = WithdrawAccounts.from_accounts(accounts, ctx)
        data.validate()
        data.check_expiration(ctx.clock)
        quote = quote_withdraw(validated, data)
        return cls(accounts=validated, data=data, quote=quote, ctx=ctx)

    def process(self) -> InstructionReceipt:
        accounts, token = self.accounts, self.ctx.token

        quote = quote_withdraw(accounts, self.data)
        if quote != self.quote:
            raise AmmError(
                ProgramError.STATE_VIOLATION,
                f"withdraw quote moved between validation and execution: {self.quote} -> {quote}",
            )

        # Burn strictly before paying out.
        token.burn(accounts.user_lp, accounts.mint_lp, accounts.user, self.data.amount)
        signer = accounts.pool.signer()
        if quote.amount_x > 0:
            token.transfer(accounts.vault_x, accounts.user_x, accounts.config, quote.amount_x, signer=signer)
        if quote.amount_y > 0:
            token.transfer(accounts.vault_y, accounts.user_y, accounts.config, quote.amount_y, signer=signer)

        logger.debug(
            "withdraw from %s: lp=%d x=%d y=%d drains_pool=%s",
            accounts.config.address,
            self.data.amount,
            quote.amount_x,
            quote.amount_y,
            quote.drains_pool,
        )
        return InstructionReceipt(
            instruction=Discriminator.WITHDRAW,
            config=accounts.config.address,
            amounts={"lp": self.data.amount, "amount_x": quote.amount_x, "amount_y": quote.amount_y},
        )
