#!/usr/bin/env python3

from __future__ import annotations

import argparse
import logging
import sys
from pathlib import Path

ROOT = Path(__file__).resolve().parents[1]
if str(ROOT) not in sys.path:
    sys.path.insert(0, str(ROOT))

from solders.pubkey import Pubkey

from cpamm.config import load_program_config
from cpamm.core import DepositData, InitializeData, SwapData, WithdrawData, encode_instruction, run_transaction
from cpamm.integration import LocalLedger, PoolAddresses, initialize_metas, liquidity_metas, swap_metas


def _parse_args(argv: list[str] | None) -> argparse.Namespace:
    p = argparse.ArgumentParser(description="Run initialize/deposit/swap/withdraw against an in-memory ledger.")
    p.add_argument("--seed", type=int, default=1)
    p.add_argument("--fee-bps", type=int, default=30)
    p.add_argument("--deposit-x", type=int, default=1_000_000)
    p.add_argument("--deposit-y", type=int, default=1_000_000)
    p.add_argument("--lp", type=int, default=1_000_000, help="LP amount minted by the deposit")
    p.add_argument("--swap-in", type=int, default=10_000)
    p.add_argument("--swap-y-in", action="store_true", help="pay Y and receive X")
    p.add_argument("--config", type=Path, default=None, help="YAML program config")
    p.add_argument("-v", "--verbose", action="store_true")
    return p.parse_args(argv)


def _print_balances(ledger: LocalLedger, label: str, pool: PoolAddresses, user_x: Pubkey, user_y: Pubkey, user_lp: Pubkey) -> None:
    print(
        f"[amm-demo] {label}: "
        f"vault=({ledger.balance(pool.vault_x)}, {ledger.balance(pool.vault_y)}) "
        f"user=({ledger.balance(user_x)}, {ledger.balance(user_y)}) "
        f"lp={ledger.balance(user_lp)} supply={ledger.mint(pool.mint_lp).supply}"
    )


def main(argv: list[str] | None = None) -> int:
    args = _parse_args(argv)
    logging.basicConfig(level=logging.DEBUG if args.verbose else logging.WARNING, format="%(name)s: %(message)s")

    program = load_program_config(args.config)
    ledger = LocalLedger(program)

    user = Pubkey.new_unique()
    ledger.fund(user, 1_000_000_000)
    mint_x = ledger.create_mint(authority=user)
    mint_y = ledger.create_mint(authority=user)
    pool = PoolAddresses.derive(args.seed, mint_x, mint_y, program)
    print(f"[amm-demo] config={pool.config} mint_lp={pool.mint_lp}")

    init = InitializeData(
        seed=args.seed,
        fee=args.fee_bps,
        mint_x=mint_x,
        mint_y=mint_y,
        config_bump=pool.config_bump,
        lp_bump=pool.lp_bump,
        authority=user,
    )
    result = run_transaction(ledger, encode_instruction(init), initialize_metas(user, pool, program))
    if not result.ok:
        print(f"[amm-demo] FAIL (initialize): {result.error.value}: {result.message}")
        return 1

    funding = max(args.deposit_x, args.deposit_y) + args.swap_in
    user_x = ledger.create_token_account(user, mint_x, funding)
    user_y = ledger.create_token_account(user, mint_y, funding)
    user_lp = ledger.create_token_account(user, pool.mint_lp)
    ledger.create_associated_token_account(pool.config, mint_x)
    ledger.create_associated_token_account(pool.config, mint_y)
    liquidity = liquidity_metas(user, pool, user_x, user_y, user_lp, program)

    steps = [
        ("deposit", DepositData(amount=args.lp, max_x=args.deposit_x, max_y=args.deposit_y), liquidity),
        ("swap", SwapData(is_x=not args.swap_y_in, amount=args.swap_in, min=1), swap_metas(user, pool, user_x, user_y, program)),
        ("withdraw", WithdrawData(amount=args.lp, min_x=0, min_y=0), liquidity),
    ]
    for label, payload, metas in steps:
        result = run_transaction(ledger, encode_instruction(payload), metas)
        if not result.ok:
            print(f"[amm-demo] FAIL ({label}): {result.error.value}: {result.message}")
            return 1
        print(f"[amm-demo] {result.receipt}")
        _print_balances(ledger, f"after {label}", pool, user_x, user_y, user_lp)

    print("[amm-demo] OK: pool lifecycle executed")
    return 0


if __name__ == "__main__":
    raise SystemExit(main())
