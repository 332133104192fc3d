#!/usr/bin/env python3

from __future__ import annotations

import argparse
import json
import sys
from dataclasses import fields
from pathlib import Path

ROOT = Path(__file__).resolve().parents[1]
if str(ROOT) not in sys.path:
    sys.path.insert(0, str(ROOT))

from solders.pubkey import Pubkey

from cpamm.core import decode_instruction
from cpamm.errors import AmmError


def _jsonable(value):
    if isinstance(value, Pubkey):
        return str(value)
    return value


def _parse_hex(text: str) -> bytes:
    s = text.strip()
    if s.startswith(("0x", "0X")):
        s = s[2:]
    try:
        return bytes.fromhex(s)
    except ValueError as exc:
        raise SystemExit(f"not a hex string: {text!r}") from exc


def main(argv: list[str] | None = None) -> int:
    p = argparse.ArgumentParser(description="Decode a hex-encoded AMM instruction and print it as JSON.")
    p.add_argument("data", help="instruction bytes as hex (discriminator first)")
    args = p.parse_args(argv)

    try:
        payload = decode_instruction(_parse_hex(args.data))
    except AmmError as exc:
        print(json.dumps({"ok": False, "error": exc.code.value, "message": exc.message}))
        return 1

    out = {"ok": True, "instruction": payload.DISCRIMINATOR.name}
    out.update({f.name: _jsonable(getattr(payload, f.name)) for f in fields(payload)})
    print(json.dumps(out, sort_keys=True))
    return 0


if __name__ == "__main__":
    raise SystemExit(main())
