from __future__ import annotations

import struct

import pytest
from solders.pubkey import Pubkey

from cpamm.core.instruction_data import (
    DepositData,
    Discriminator,
    InitializeData,
    SwapData,
    WithdrawData,
    check_expiration,
    decode_instruction,
    encode_instruction,
    parse_instruction,
    split_discriminator,
)
from cpamm.errors import AmmError, ProgramError
from cpamm.integration.runtime import Clock

MINT_X = Pubkey.new_unique()
MINT_Y = Pubkey.new_unique()


def _code(fn, *args):
    with pytest.raises(AmmError) as exc:
        fn(*args)
    return exc.value.code


# ---------------------------------------------------------------------------
# Framing
# ---------------------------------------------------------------------------


class TestFraming:
    def test_empty_buffer(self) -> None:
        assert _code(decode_instruction, b"") is ProgramError.MALFORMED_INPUT

    def test_unknown_discriminator(self) -> None:
        assert _code(decode_instruction, bytes([4]) + bytes(32)) is ProgramError.MALFORMED_INPUT
        assert _code(decode_instruction, bytes([255])) is ProgramError.MALFORMED_INPUT

    def test_split(self) -> None:
        disc, payload = split_discriminator(bytes([3, 1, 2]))
        assert disc is Discriminator.SWAP
        assert payload == bytes([1, 2])

    @pytest.mark.parametrize(
        "cls,length",
        [(InitializeData, 76), (DepositData, 32), (WithdrawData, 32), (SwapData, 25)],
    )
    def test_wrong_lengths_are_malformed(self, cls, length) -> None:
        for bad in (length - 1, length + 1):
            data = bytes([cls.DISCRIMINATOR]) + bytes(bad)
            assert _code(decode_instruction, data) is ProgramError.MALFORMED_INPUT


# ---------------------------------------------------------------------------
# Initialize
# ---------------------------------------------------------------------------


class TestInitializeData:
    def _payload(self, **kw) -> InitializeData:
        base = dict(seed=42, fee=30, mint_x=MINT_X, mint_y=MINT_Y, config_bump=254, lp_bump=253)
        base.update(kw)
        return InitializeData(**base)

    def test_field_offsets(self) -> None:
        raw = self._payload().to_bytes(include_authority=False)
        assert len(raw) == InitializeData.LEN_WITHOUT_AUTHORITY == 76
        assert struct.unpack_from("<QH", raw, 0) == (42, 30)
        assert raw[10:42] == bytes(MINT_X)
        assert raw[42:74] == bytes(MINT_Y)
        assert raw[74] == 254 and raw[75] == 253

    def test_authority_is_optional(self) -> None:
        short = decode_instruction(encode_instruction(self._payload())[:77])
        assert short.authority == Pubkey.default()

        authority = Pubkey.new_unique()
        full = decode_instruction(encode_instruction(self._payload(authority=authority)))
        assert full == self._payload(authority=authority)
        assert len(encode_instruction(full)) == 1 + InitializeData.LEN

    def test_identical_mints_rejected(self) -> None:
        data = encode_instruction(self._payload(mint_y=MINT_X))
        assert _code(decode_instruction, data) is ProgramError.INVALID_ARGUMENT
        assert parse_instruction(data).mint_y == MINT_X


# ---------------------------------------------------------------------------
# Deposit / Withdraw / Swap
# ---------------------------------------------------------------------------


class TestAmountPayloads:
    def test_round_trip(self) -> None:
        for payload in (
            DepositData(amount=10, max_x=20, max_y=30, expiration=-5),
            WithdrawData(amount=10, min_x=0, min_y=0, expiration=1_700_000_000),
            SwapData(is_x=False, amount=7, min=1),
        ):
            assert decode_instruction(encode_instruction(payload)) == payload

    def test_expiration_is_signed(self) -> None:
        raw = DepositData(amount=1, max_x=0, max_y=0, expiration=-1).to_bytes()
        assert raw[24:] == b"\xff" * 8

    def test_zero_amounts_rejected(self) -> None:
        for payload in (DepositData(0, 1, 1), WithdrawData(0, 1, 1), SwapData(True, 0, 1), SwapData(True, 1, 0)):
            assert _code(payload.validate) is ProgramError.INVALID_ARGUMENT
            assert _code(decode_instruction, encode_instruction(payload)) is ProgramError.INVALID_ARGUMENT

    def test_parse_leaves_business_checks_to_validate(self) -> None:
        payload = parse_instruction(encode_instruction(DepositData(0, 1, 1)))
        assert payload == DepositData(0, 1, 1)
        assert _code(payload.validate) is ProgramError.INVALID_ARGUMENT

    def test_zero_floors_allowed_for_deposit_and_withdraw(self) -> None:
        assert DepositData.from_bytes(DepositData(5, 0, 0).to_bytes()).max_x == 0
        assert WithdrawData.from_bytes(WithdrawData(5, 0, 0).to_bytes()).min_y == 0

    def test_swap_direction_byte(self) -> None:
        raw = bytearray(SwapData(True, 1, 1).to_bytes())
        assert raw[0] == 1
        raw[0] = 2
        assert _code(SwapData.from_bytes, bytes(raw)) is ProgramError.MALFORMED_INPUT


# ---------------------------------------------------------------------------
# Expiration
# ---------------------------------------------------------------------------


class TestExpiration:
    def test_zero_never_expires(self) -> None:
        check_expiration(0, Clock(unix_timestamp=2**40))

    def test_boundary(self) -> None:
        check_expiration(1_000, Clock(unix_timestamp=1_000))
        assert _code(check_expiration, 1_000, Clock(unix_timestamp=1_001)) is ProgramError.EXPIRED

    def test_negative_expiration_is_in_the_past(self) -> None:
        assert _code(check_expiration, -1, Clock(unix_timestamp=0)) is ProgramError.EXPIRED

    def test_payload_helper(self) -> None:
        payload = SwapData(is_x=True, amount=1, min=1, expiration=10)
        payload.check_expiration(Clock(unix_timestamp=10))
        with pytest.raises(AmmError) as exc:
            payload.check_expiration(Clock(unix_timestamp=11))
        assert exc.value.code is ProgramError.EXPIRED
