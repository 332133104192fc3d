"""Swap: exact-in trade of one pool asset for the other."""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Sequence

from ...errors import AmmError, ProgramError
from ...integration.runtime import InvokeContext
from ...state.account import AccountView
from ..accounts import SwapAccounts
from ..curve import SwapQuote, swap_quote_for_direction
from ..instruction_data import Discriminator, SwapData
from .base import InstructionReceipt, reserves

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class Swap:
    accounts: SwapAccounts
    data: SwapData
    quote: SwapQuote
    ctx: InvokeContext

    @classmethod
    def try_from(cls, data: SwapData, accounts: Sequence[AccountView], ctx: InvokeContext) -> "Swap":
        validated = SwapAccounts.from_accounts(accounts, ctx)
        data.validate()
        data.check_expiration(ctx.clock)
        pool = validated.pool
        if not pool.is_initialized():
            raise AmmError(
                ProgramError.STATE_VIOLATION,
                f"pool {validated.config.address} is not accepting swaps (state={pool.state})",
            )

        reserve_x, reserve_y = reserves(validated.vault_x, validated.vault_y)
        quote = swap_quote_for_direction(reserve_x, reserve_y, data.is_x, data.amount, pool.fee_bps, data.min)
        return cls(accounts=validated, data=data, quote=quote, ctx=ctx)

    def process(self) -> InstructionReceipt:
        accounts, quote, token = self.accounts, self.quote, self.ctx.token

        if self.data.is_x:
            user_in, vault_in = accounts.user_x, accounts.vault_x
            vault_out, user_out = accounts.vault_y, accounts.user_y
        else:
            user_in, vault_in = accounts.user_y, accounts.vault_y
            vault_out, user_out = accounts.vault_x, accounts.user_x

        token.transfer(user_in, vault_in, accounts.user, quote.deposit)
        token.transfer(vault_out, user_out, accounts.config, quote.withdraw, signer=accounts.pool.signer())

        logger.debug(
            "swap on %s: %s in=%d out=%d fee=%d",
            accounts.config.address,
            "x->y" if self.data.is_x else "y->x",
            quote.deposit,
            quote.withdraw,
            quote.fee,
        )
        return InstructionReceipt(
            instruction=Discriminator.SWAP,
            config=accounts.config.address,
            amounts={"amount_in": quote.deposit, "amount_out": quote.withdraw, "fee": quote.fee},
        )
