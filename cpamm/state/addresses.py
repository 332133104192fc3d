"""
Program-derived address (PDA) derivation.

A derived address is accepted only when it is NOT a valid ed25519 point (so
no private key can exist for it). The trailing one-byte "bump" seed is
chosen to push it off the curve. Hashing, seed bounds and the curve check
are solders'.

Verification is always recompute-and-compare; there is no tolerance.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Sequence, Tuple

from solders.pubkey import Pubkey

from ..errors import AmmError, ProgramError

CONFIG_SEED_PREFIX = b"config"
MINT_LP_SEED_PREFIX = b"mint_lp"


def create_program_address(seeds: Sequence[bytes], program_id: Pubkey) -> Pubkey:
    """
    Derive the address for a complete seed list (bump included).

    Raises:
        AmmError(AddressMismatch): the seeds are out of bounds or derive an
            on-curve point (not a valid derived address).
    """
    try:
        return Pubkey.create_program_address([bytes(seed) for seed in seeds], program_id)
    except Exception as exc:
        raise AmmError(ProgramError.ADDRESS_MISMATCH, f"invalid derived-address seeds: {exc}") from exc


def find_program_address(seeds: Sequence[bytes], program_id: Pubkey) -> Tuple[Pubkey, int]:
    """Derive (address, canonical bump) by searching bumps from 255 downwards."""
    return Pubkey.find_program_address([bytes(seed) for seed in seeds], program_id)


def verify_program_address(expected: Pubkey, seeds: Sequence[bytes], program_id: Pubkey) -> None:
    """Fail with AddressMismatch unless `seeds` re-derive exactly `expected`."""
    derived = create_program_address(seeds, program_id)
    if derived != expected:
        raise AmmError(
            ProgramError.ADDRESS_MISMATCH,
            f"derived {derived} does not match supplied {expected}",
        )


def config_seeds(seed: int, mint_x: Pubkey, mint_y: Pubkey, config_bump: int) -> list[bytes]:
    """Seed list of a pool's config address: ["config", seed, mint_x, mint_y, bump]."""
    return [
        CONFIG_SEED_PREFIX,
        int(seed).to_bytes(8, "little"),
        bytes(mint_x),
        bytes(mint_y),
        bytes([config_bump]),
    ]


def mint_lp_seeds(config_address: Pubkey, lp_bump: int) -> list[bytes]:
    return [MINT_LP_SEED_PREFIX, bytes(config_address), bytes([lp_bump])]


def derive_config_address(
    seed: int, mint_x: Pubkey, mint_y: Pubkey, config_bump: int, program_id: Pubkey
) -> Pubkey:
    return create_program_address(config_seeds(seed, mint_x, mint_y, config_bump), program_id)


def find_config_address(seed: int, mint_x: Pubkey, mint_y: Pubkey, program_id: Pubkey) -> Tuple[Pubkey, int]:
    """Canonical (address, bump) for a new pool; used by clients building Initialize."""
    return find_program_address(config_seeds(seed, mint_x, mint_y, 0)[:-1], program_id)


def derive_mint_lp_address(config_address: Pubkey, lp_bump: int, program_id: Pubkey) -> Pubkey:
    return create_program_address(mint_lp_seeds(config_address, lp_bump), program_id)


def find_mint_lp_address(config_address: Pubkey, program_id: Pubkey) -> Tuple[Pubkey, int]:
    return find_program_address([MINT_LP_SEED_PREFIX, bytes(config_address)], program_id)


def derive_vault_address(
    config_address: Pubkey,
    token_program_id: Pubkey,
    mint: Pubkey,
    associated_token_program_id: Pubkey,
) -> Pubkey:
    """
    Associated-token-style vault address: seeds are (owner, token program, mint)
    under the associated-token program, not under this program.
    """
    address, _bump = find_program_address(
        [bytes(config_address), bytes(token_program_id), bytes(mint)],
        associated_token_program_id,
    )
    return address


@dataclass(frozen=True)
class PdaSigner:
    """
    Capability to act as authority for a derived address.

    Holds the full seed list (bump included). The ledger re-derives the
    address under the invoking program's id and accepts the capability only
    for that exact address. Build it with `PoolConfig.signer()` or
    `PoolConfig.mint_lp_signer()`, never from raw bytes at call sites.
    """

    seeds: Tuple[bytes, ...]

    def address(self, program_id: Pubkey) -> Pubkey:
        return create_program_address(self.seeds, program_id)

    def __repr__(self) -> str:
        return f"PdaSigner({len(self.seeds)} seeds)"
