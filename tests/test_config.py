from __future__ import annotations

from pathlib import Path

import pytest
from solders.pubkey import Pubkey

from cpamm.config import (
    ASSOCIATED_TOKEN_PROGRAM_ID,
    DEFAULT_PROGRAM_ID,
    TOKEN_PROGRAM_ID,
    ProgramConfig,
    get_program_config,
    load_program_config,
)


def test_defaults() -> None:
    cfg = load_program_config(env={})
    assert cfg == ProgramConfig()
    assert str(cfg.program_id) == DEFAULT_PROGRAM_ID
    assert str(cfg.token_program_id) == TOKEN_PROGRAM_ID
    assert str(cfg.associated_token_program_id) == ASSOCIATED_TOKEN_PROGRAM_ID
    assert cfg.lp_decimals == 6


def test_yaml_file(tmp_path: Path) -> None:
    program_id = Pubkey.new_unique()
    path = tmp_path / "cpamm.yaml"
    path.write_text(f"program_id: '{program_id}'\nlp_decimals: 9\n", encoding="utf-8")

    cfg = load_program_config(path, env={})

    assert cfg.program_id == program_id
    assert cfg.lp_decimals == 9
    assert str(cfg.token_program_id) == TOKEN_PROGRAM_ID


def test_config_path_from_env(tmp_path: Path) -> None:
    program_id = Pubkey.new_unique()
    path = tmp_path / "cpamm.yaml"
    path.write_text(f"program_id: '{program_id}'\n", encoding="utf-8")
    assert load_program_config(env={"CPAMM_CONFIG": str(path)}).program_id == program_id


def test_env_overrides_file(tmp_path: Path) -> None:
    from_file, from_env = Pubkey.new_unique(), Pubkey.new_unique()
    path = tmp_path / "cpamm.yaml"
    path.write_text(f"program_id: '{from_file}'\n", encoding="utf-8")

    cfg = load_program_config(path, env={"CPAMM_PROGRAM_ID": f"  {from_env}  ", "CPAMM_TOKEN_PROGRAM_ID": ""})

    assert cfg.program_id == from_env
    assert str(cfg.token_program_id) == TOKEN_PROGRAM_ID


def test_empty_file_keeps_defaults(tmp_path: Path) -> None:
    path = tmp_path / "empty.yaml"
    path.write_text("", encoding="utf-8")
    assert load_program_config(path, env={}) == ProgramConfig()


@pytest.mark.parametrize(
    "text",
    [
        "program_idd: 11111111111111111111111111111111\n",
        "program_id: not-base58!\n",
        "lp_decimals: six\n",
        "- just\n- a list\n",
    ],
)
def test_invalid_files(tmp_path: Path, text: str) -> None:
    path = tmp_path / "bad.yaml"
    path.write_text(text, encoding="utf-8")
    with pytest.raises(ValueError):
        load_program_config(path, env={})


def test_invalid_env_value() -> None:
    with pytest.raises(ValueError):
        load_program_config(env={"CPAMM_PROGRAM_ID": "xyz0"})


def test_process_config_is_cached() -> None:
    assert get_program_config() is get_program_config()
