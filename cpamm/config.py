"""
Program identity and well-known collaborator addresses.

The program id is process-wide configuration: it is loaded once (defaults,
then an optional YAML file, then environment overrides) and injected into
every `InvokeContext`. Nothing in the core reads a language-level constant
for its own address.
"""

from __future__ import annotations

import os
from dataclasses import dataclass, fields, replace
from functools import lru_cache
from pathlib import Path
from typing import Any, Mapping, Optional

import yaml
from solders.pubkey import Pubkey

DEFAULT_PROGRAM_ID = "22222222222222222222222222222222222222222222"
TOKEN_PROGRAM_ID = "TokenkegQfeZyiNwAJbNbGKPFXCWuBvf9Ss623VQ5DA"
SYSTEM_PROGRAM_ID = "11111111111111111111111111111111"
ASSOCIATED_TOKEN_PROGRAM_ID = "ATokenGPvbdGVxr1b2hvZbsiqW5xWH25efTNsLJA8knL"

LP_DECIMALS = 6

_ENV_OVERRIDES = {
    "program_id": "CPAMM_PROGRAM_ID",
    "token_program_id": "CPAMM_TOKEN_PROGRAM_ID",
    "system_program_id": "CPAMM_SYSTEM_PROGRAM_ID",
    "associated_token_program_id": "CPAMM_ATA_PROGRAM_ID",
}


@dataclass(frozen=True)
class ProgramConfig:
    """
    Addresses the instruction core needs to know about.

    `program_id` is this program's own address (owner of every PoolConfig
    account and namespace of its derived addresses).
    """

    program_id: Pubkey = Pubkey.from_string(DEFAULT_PROGRAM_ID)
    token_program_id: Pubkey = Pubkey.from_string(TOKEN_PROGRAM_ID)
    system_program_id: Pubkey = Pubkey.from_string(SYSTEM_PROGRAM_ID)
    associated_token_program_id: Pubkey = Pubkey.from_string(ASSOCIATED_TOKEN_PROGRAM_ID)
    lp_decimals: int = LP_DECIMALS

    def __post_init__(self) -> None:
        if not (0 <= self.lp_decimals <= 255):
            raise ValueError(f"lp_decimals must fit in a u8: {self.lp_decimals}")


def _parse_pubkey(value: Any, *, name: str) -> Pubkey:
    if isinstance(value, Pubkey):
        return value
    if not isinstance(value, str) or not value.strip():
        raise ValueError(f"{name} must be a non-empty base58 string")
    try:
        return Pubkey.from_string(value.strip())
    except ValueError as exc:
        raise ValueError(f"{name} is not a valid address: {value!r}") from exc


def _apply_mapping(config: ProgramConfig, values: Mapping[str, Any], *, source: str) -> ProgramConfig:
    known = {f.name for f in fields(ProgramConfig)}
    unknown = sorted(set(values) - known)
    if unknown:
        raise ValueError(f"unknown keys in {source}: {', '.join(unknown)}")

    updates: dict[str, Any] = {}
    for key, raw in values.items():
        if key == "lp_decimals":
            if not isinstance(raw, int) or isinstance(raw, bool):
                raise ValueError(f"lp_decimals in {source} must be an int")
            updates[key] = int(raw)
        else:
            updates[key] = _parse_pubkey(raw, name=f"{source}:{key}")
    return replace(config, **updates)


def _read_yaml(path: Path) -> Mapping[str, Any]:
    obj = yaml.safe_load(path.read_text(encoding="utf-8"))
    if obj is None:
        return {}
    if not isinstance(obj, Mapping):
        raise ValueError(f"config file {path} must contain a mapping")
    return obj


def load_program_config(
    path: Optional[Path] = None,
    env: Optional[Mapping[str, str]] = None,
) -> ProgramConfig:
    """
    Build a ProgramConfig from defaults, an optional YAML file and env overrides.

    The YAML file is `path` if given, else `$CPAMM_CONFIG` if set. Env vars
    win over the file.
    """
    environ = os.environ if env is None else env
    config = ProgramConfig()

    if path is None:
        raw_path = (environ.get("CPAMM_CONFIG") or "").strip()
        if raw_path:
            path = Path(raw_path)
    if path is not None:
        config = _apply_mapping(config, _read_yaml(Path(path)), source=str(path))

    overrides: dict[str, str] = {}
    for key, var in _ENV_OVERRIDES.items():
        raw = environ.get(var)
        if raw is not None and raw.strip():
            overrides[key] = raw.strip()
    if overrides:
        config = _apply_mapping(config, overrides, source="environment")
    return config


@lru_cache(maxsize=1)
def get_program_config() -> ProgramConfig:
    """Process-wide ProgramConfig, loaded on first use."""
    return load_program_config()
