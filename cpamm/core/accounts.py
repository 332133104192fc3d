"""
Account list validation.

Each instruction receives a flat, positional list of `AccountView`s. The
classes below map that list into named roles and run every shape, signer,
ownership and derived-address check before any external call happens.

Check order (first failure wins):
1. arity                      -> NotEnoughAccountKeys
2. acting user signed         -> MissingRequiredSignature
3. config size / owner / PDA  -> AccountShapeViolation / AddressMismatch
4. program accounts           -> InvalidArgument
5. vault derivations          -> AddressMismatch
6. token record size / owner  -> AccountShapeViolation
7. LP mint authority          -> AddressMismatch
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Sequence, Tuple

from solders.pubkey import Pubkey

from ..errors import AmmError, ProgramError
from ..integration.runtime import InvokeContext
from ..state.account import AccountView
from ..state.pool_config import PoolConfig
from ..state.token import Mint, TokenAccount, check_token_record


def _unpack(accounts: Sequence[AccountView], count: int, *, name: str) -> Tuple[AccountView, ...]:
    if len(accounts) != count:
        raise AmmError(
            ProgramError.NOT_ENOUGH_ACCOUNT_KEYS,
            f"{name} expects exactly {count} accounts, got {len(accounts)}",
        )
    return tuple(accounts)


def _require_signer(account: AccountView, *, role: str) -> None:
    if not account.is_signer:
        raise AmmError(ProgramError.MISSING_REQUIRED_SIGNATURE, f"{role} {account.address} must sign")


def _require_program(account: AccountView, expected: Pubkey, *, role: str) -> None:
    if account.address != expected:
        raise AmmError(
            ProgramError.INVALID_ARGUMENT,
            f"{role} must be {expected}, got {account.address}",
        )


def load_verified_config(config: AccountView, ctx: InvokeContext) -> PoolConfig:
    """Load a config record and check that it lives at its own derived address."""
    cfg = PoolConfig.load(config, ctx.program_id)
    cfg.verify_address(config.address, ctx.program_id)
    return cfg


def _require_token_accounts(ctx: InvokeContext, **accounts: AccountView) -> None:
    for role, account in accounts.items():
        check_token_record(
            account,
            expected_len=TokenAccount.LEN,
            token_program_id=ctx.config.token_program_id,
            role=role,
        )


def _require_vaults(
    cfg: PoolConfig,
    config: AccountView,
    vault_x: AccountView,
    vault_y: AccountView,
    ctx: InvokeContext,
) -> None:
    expected_x, expected_y = cfg.vault_addresses(
        config.address,
        ctx.config.token_program_id,
        ctx.config.associated_token_program_id,
    )
    for role, expected, supplied in (("vault_x", expected_x, vault_x), ("vault_y", expected_y, vault_y)):
        if supplied.address != expected:
            raise AmmError(
                ProgramError.ADDRESS_MISMATCH,
                f"{role} must be {expected}, got {supplied.address}",
            )


def _require_lp_mint_authority(mint_lp: AccountView, config: AccountView) -> None:
    # Shape already checked; read the record only for its authority.
    mint = Mint.from_bytes(mint_lp.data)
    if mint.mint_authority != config.address:
        raise AmmError(
            ProgramError.ADDRESS_MISMATCH,
            f"mint_lp {mint_lp.address} is not controlled by config {config.address}",
        )


@dataclass(frozen=True)
class InitializeAccounts:
    initializer: AccountView
    mint_lp: AccountView
    config: AccountView
    system_program: AccountView
    token_program: AccountView

    @classmethod
    def from_accounts(cls, accounts: Sequence[AccountView], ctx: InvokeContext) -> "InitializeAccounts":
        initializer, mint_lp, config, system_program, token_program = _unpack(accounts, 5, name="Initialize")
        _require_signer(initializer, role="initializer")
        _require_program(system_program, ctx.config.system_program_id, role="system_program")
        _require_program(token_program, ctx.config.token_program_id, role="token_program")
        return cls(
            initializer=initializer,
            mint_lp=mint_lp,
            config=config,
            system_program=system_program,
            token_program=token_program,
        )


@dataclass(frozen=True)
class LiquidityAccounts:
    """Shared account list of Deposit and Withdraw."""

    user: AccountView
    mint_lp: AccountView
    vault_x: AccountView
    vault_y: AccountView
    user_x: AccountView
    user_y: AccountView
    user_lp: AccountView
    config: AccountView
    token_program: AccountView
    pool: PoolConfig

    NAME = "liquidity"

    @classmethod
    def from_accounts(cls, accounts: Sequence[AccountView], ctx: InvokeContext) -> "LiquidityAccounts":
        (
            user,
            mint_lp,
            vault_x,
            vault_y,
            user_x,
            user_y,
            user_lp,
            config,
            token_program,
        ) = _unpack(accounts, 9, name=cls.NAME)

        _require_signer(user, role="user")
        pool = load_verified_config(config, ctx)
        _require_program(token_program, ctx.config.token_program_id, role="token_program")
        _require_vaults(pool, config, vault_x, vault_y, ctx)

        check_token_record(
            mint_lp,
            expected_len=Mint.LEN,
            token_program_id=ctx.config.token_program_id,
            role="mint_lp",
        )
        _require_token_accounts(
            ctx,
            vault_x=vault_x,
            vault_y=vault_y,
            user_x=user_x,
            user_y=user_y,
            user_lp=user_lp,
        )
        _require_lp_mint_authority(mint_lp, config)

        return cls(
            user=user,
            mint_lp=mint_lp,
            vault_x=vault_x,
            vault_y=vault_y,
            user_x=user_x,
            user_y=user_y,
            user_lp=user_lp,
            config=config,
            token_program=token_program,
            pool=pool,
        )


@dataclass(frozen=True)
class DepositAccounts(LiquidityAccounts):
    NAME = "Deposit"


@dataclass(frozen=True)
class WithdrawAccounts(LiquidityAccounts):
    NAME = "Withdraw"


@dataclass(frozen=True)
class SwapAccounts:
    user: AccountView
    user_x: AccountView
    user_y: AccountView
    vault_x: AccountView
    vault_y: AccountView
    config: AccountView
    token_program: AccountView
    pool: PoolConfig

    @classmethod
    def from_accounts(cls, accounts: Sequence[AccountView], ctx: InvokeContext) -> "SwapAccounts":
        user, user_x, user_y, vault_x, vault_y, config, token_program = _unpack(accounts, 7, name="Swap")

        _require_signer(user, role="user")
        pool = load_verified_config(config, ctx)
        _require_program(token_program, ctx.config.token_program_id, role="token_program")
        _require_vaults(pool, config, vault_x, vault_y, ctx)
        _require_token_accounts(
            ctx,
            user_x=user_x,
            user_y=user_y,
            vault_x=vault_x,
            vault_y=vault_y,
        )

        return cls(
            user=user,
            user_x=user_x,
            user_y=user_y,
            vault_x=vault_x,
            vault_y=vault_y,
            config=config,
            token_program=token_program,
            pool=pool,
        )
