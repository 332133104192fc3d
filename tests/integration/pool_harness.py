"""Shared setup for the end-to-end instruction tests: one pool on a LocalLedger."""

from __future__ import annotations

from dataclasses import dataclass
from typing import List, Optional

from solders.pubkey import Pubkey

from cpamm.config import ProgramConfig
from cpamm.core import (
    DepositData,
    InitializeData,
    ProcessResult,
    SwapData,
    WithdrawData,
    encode_instruction,
    run_transaction,
)
from cpamm.integration import (
    AccountMeta,
    LocalLedger,
    PoolAddresses,
    initialize_metas,
    liquidity_metas,
    swap_metas,
)
from cpamm.state.account import AccountView
from cpamm.state.pool_config import PoolConfig

LAMPORTS = 10**12


@dataclass(frozen=True)
class Trader:
    wallet: Pubkey
    x: Pubkey
    y: Pubkey
    lp: Pubkey


class PoolHarness:
    def __init__(self, *, seed: int = 1, fee_bps: int = 30) -> None:
        self.program = ProgramConfig()
        self.ledger = LocalLedger(self.program)
        self.seed = seed
        self.fee_bps = fee_bps
        self.admin = Pubkey.new_unique()
        self.ledger.fund(self.admin, LAMPORTS)
        self.mint_x = self.ledger.create_mint(authority=self.admin)
        self.mint_y = self.ledger.create_mint(authority=self.admin)
        self.pool = PoolAddresses.derive(seed, self.mint_x, self.mint_y, self.program)

    @classmethod
    def ready(cls, **kw) -> "PoolHarness":
        """Initialized pool with vaults in place."""
        h = cls(**kw)
        result = h.initialize()
        assert result.ok, result
        h.open_vaults()
        return h

    # -- setup ---------------------------------------------------------------

    def init_payload(self, **overrides) -> InitializeData:
        base = dict(
            seed=self.seed,
            fee=self.fee_bps,
            mint_x=self.mint_x,
            mint_y=self.mint_y,
            config_bump=self.pool.config_bump,
            lp_bump=self.pool.lp_bump,
            authority=self.admin,
        )
        base.update(overrides)
        return InitializeData(**base)

    def initialize(self, metas: Optional[List[AccountMeta]] = None, **overrides) -> ProcessResult:
        if metas is None:
            metas = initialize_metas(self.admin, self.pool, self.program)
        return self.run(encode_instruction(self.init_payload(**overrides)), metas)

    def open_vaults(self) -> None:
        self.ledger.create_associated_token_account(self.pool.config, self.mint_x)
        self.ledger.create_associated_token_account(self.pool.config, self.mint_y)

    def trader(self, x: int = 10_000_000, y: int = 10_000_000) -> Trader:
        wallet = Pubkey.new_unique()
        self.ledger.fund(wallet, LAMPORTS)
        return Trader(
            wallet=wallet,
            x=self.ledger.create_token_account(wallet, self.mint_x, x),
            y=self.ledger.create_token_account(wallet, self.mint_y, y),
            lp=self.ledger.create_token_account(wallet, self.pool.mint_lp),
        )

    # -- instructions --------------------------------------------------------

    def run(self, data: bytes, metas) -> ProcessResult:
        return run_transaction(self.ledger, data, metas)

    def liquidity_metas(self, t: Trader) -> List[AccountMeta]:
        return liquidity_metas(t.wallet, self.pool, t.x, t.y, t.lp, self.program)

    def swap_metas(self, t: Trader) -> List[AccountMeta]:
        return swap_metas(t.wallet, self.pool, t.x, t.y, self.program)

    def deposit(self, t: Trader, amount: int, max_x: int, max_y: int, expiration: int = 0) -> ProcessResult:
        data = encode_instruction(DepositData(amount=amount, max_x=max_x, max_y=max_y, expiration=expiration))
        return self.run(data, self.liquidity_metas(t))

    def withdraw(self, t: Trader, amount: int, min_x: int = 0, min_y: int = 0, expiration: int = 0) -> ProcessResult:
        data = encode_instruction(WithdrawData(amount=amount, min_x=min_x, min_y=min_y, expiration=expiration))
        return self.run(data, self.liquidity_metas(t))

    def swap(self, t: Trader, is_x: bool, amount: int, min_out: int = 1, expiration: int = 0) -> ProcessResult:
        data = encode_instruction(SwapData(is_x=is_x, amount=amount, min=min_out, expiration=expiration))
        return self.run(data, self.swap_metas(t))

    # -- inspection ----------------------------------------------------------

    def config(self) -> PoolConfig:
        return PoolConfig.load(AccountView(self.ledger.get(self.pool.config)), self.program.program_id)

    def set_state(self, state: int) -> None:
        view = AccountView(self.ledger.get(self.pool.config), is_writable=True)
        with PoolConfig.load_mut(view, self.program.program_id) as cfg:
            cfg.set_state(state)

    def reserves(self) -> tuple[int, int]:
        return self.ledger.balance(self.pool.vault_x), self.ledger.balance(self.pool.vault_y)

    def balances(self, t: Trader) -> tuple[int, int, int]:
        return self.ledger.balance(t.x), self.ledger.balance(t.y), self.ledger.balance(t.lp)

    def lp_supply(self) -> int:
        return self.ledger.mint(self.pool.mint_lp).supply
