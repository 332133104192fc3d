from __future__ import annotations

import pytest
from solders.pubkey import Pubkey

from cpamm.config import ProgramConfig
from cpamm.errors import AmmError, ProgramError
from cpamm.state.addresses import (
    PdaSigner,
    config_seeds,
    create_program_address,
    derive_config_address,
    derive_mint_lp_address,
    derive_vault_address,
    find_config_address,
    find_mint_lp_address,
    find_program_address,
    mint_lp_seeds,
    verify_program_address,
)

PROGRAM = ProgramConfig()
MINT_X = Pubkey.new_unique()
MINT_Y = Pubkey.new_unique()


def test_config_seed_layout() -> None:
    seeds = config_seeds(0x0102, MINT_X, MINT_Y, 200)
    assert seeds == [b"config", (0x0102).to_bytes(8, "little"), bytes(MINT_X), bytes(MINT_Y), bytes([200])]


def test_find_matches_create_with_bump() -> None:
    address, bump = find_config_address(3, MINT_X, MINT_Y, PROGRAM.program_id)
    assert derive_config_address(3, MINT_X, MINT_Y, bump, PROGRAM.program_id) == address
    assert not address.is_on_curve()


def test_create_program_address_matches_solders() -> None:
    address, bump = find_program_address([b"abc"], PROGRAM.program_id)
    seeds = [b"abc", bytes([bump])]
    assert create_program_address(seeds, PROGRAM.program_id) == address
    assert create_program_address(seeds, PROGRAM.program_id) == Pubkey.create_program_address(seeds, PROGRAM.program_id)


def test_derivation_is_deterministic_and_seed_sensitive() -> None:
    a, _ = find_config_address(1, MINT_X, MINT_Y, PROGRAM.program_id)
    b, _ = find_config_address(1, MINT_X, MINT_Y, PROGRAM.program_id)
    c, _ = find_config_address(2, MINT_X, MINT_Y, PROGRAM.program_id)
    d, _ = find_config_address(1, MINT_Y, MINT_X, PROGRAM.program_id)
    assert a == b
    assert len({a, c, d}) == 3


def test_mint_lp_address() -> None:
    config, _ = find_config_address(1, MINT_X, MINT_Y, PROGRAM.program_id)
    mint_lp, lp_bump = find_mint_lp_address(config, PROGRAM.program_id)
    assert derive_mint_lp_address(config, lp_bump, PROGRAM.program_id) == mint_lp
    assert PdaSigner(tuple(mint_lp_seeds(config, lp_bump))).address(PROGRAM.program_id) == mint_lp


def test_vault_address_lives_under_associated_token_program() -> None:
    config, _ = find_config_address(1, MINT_X, MINT_Y, PROGRAM.program_id)
    vault = derive_vault_address(config, PROGRAM.token_program_id, MINT_X, PROGRAM.associated_token_program_id)
    expected, _ = Pubkey.find_program_address(
        [bytes(config), bytes(PROGRAM.token_program_id), bytes(MINT_X)],
        PROGRAM.associated_token_program_id,
    )
    assert vault == expected


def test_verify_rejects_other_address() -> None:
    address, bump = find_program_address([b"x"], PROGRAM.program_id)
    verify_program_address(address, [b"x", bytes([bump])], PROGRAM.program_id)
    with pytest.raises(AmmError) as exc:
        verify_program_address(Pubkey.new_unique(), [b"x", bytes([bump])], PROGRAM.program_id)
    assert exc.value.code is ProgramError.ADDRESS_MISMATCH


def test_seed_bounds() -> None:
    with pytest.raises(AmmError) as exc:
        create_program_address([bytes(33)], PROGRAM.program_id)
    assert exc.value.code is ProgramError.ADDRESS_MISMATCH
    with pytest.raises(AmmError) as exc:
        create_program_address([b"a"] * 17, PROGRAM.program_id)
    assert exc.value.code is ProgramError.ADDRESS_MISMATCH
