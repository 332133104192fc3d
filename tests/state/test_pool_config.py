# [TESTER] v1

from __future__ import annotations

import struct

import pytest
from solders.pubkey import Pubkey

from cpamm.config import ProgramConfig
from cpamm.errors import AmmError, ProgramError
from cpamm.state.account import AccountInfo, AccountView
from cpamm.state.addresses import find_config_address
from cpamm.state.pool_config import AmmState, PoolConfig

PROGRAM = ProgramConfig()
MINT_X = Pubkey.new_unique()
MINT_Y = Pubkey.new_unique()


def _pool(**kw) -> PoolConfig:
    base = dict(
        state=AmmState.INITIALIZED,
        seed=7,
        authority=Pubkey.new_unique(),
        mint_x=MINT_X,
        mint_y=MINT_Y,
        fee_bps=30,
        config_bump=255,
    )
    base.update(kw)
    return PoolConfig(**base)


def _view(data: bytes, owner: Pubkey = PROGRAM.program_id) -> AccountView:
    return AccountView(AccountInfo(address=Pubkey.new_unique(), owner=owner, data=bytearray(data)), is_writable=True)


class TestLayout:
    def test_record_is_108_bytes(self) -> None:
        assert PoolConfig.LEN == 108
        assert len(_pool().to_bytes()) == 108

    def test_field_offsets(self) -> None:
        pool = _pool(seed=0x0102030405060708, fee_bps=0x1234, config_bump=9)
        raw = pool.to_bytes()
        assert raw[0] == AmmState.INITIALIZED
        assert struct.unpack_from("<Q", raw, 1)[0] == 0x0102030405060708
        assert raw[9:41] == bytes(pool.authority)
        assert raw[41:73] == bytes(MINT_X)
        assert raw[73:105] == bytes(MINT_Y)
        assert struct.unpack_from("<H", raw, 105)[0] == 0x1234
        assert raw[107] == 9

    def test_decode_round_trip(self) -> None:
        pool = _pool()
        assert PoolConfig.from_bytes(pool.to_bytes()) == pool

    def test_unknown_state_byte_loads_but_is_not_initialized(self) -> None:
        raw = bytearray(_pool().to_bytes())
        raw[0] = 9
        pool = PoolConfig.from_bytes(bytes(raw))
        assert pool.state == 9
        assert not pool.is_initialized()


class TestSetters:
    def test_fee_bounds(self) -> None:
        pool = _pool()
        pool.set_fee(9_999)
        assert pool.fee_bps == 9_999
        with pytest.raises(AmmError) as exc:
            pool.set_fee(10_000)
        assert exc.value.code is ProgramError.INVALID_ARGUMENT
        assert pool.fee_bps == 9_999

    @pytest.mark.parametrize("state", [AmmState.UNINITIALIZED, AmmState.INITIALIZED, AmmState.DISABLED])
    def test_state_accepts_below_withdraw_only(self, state) -> None:
        pool = _pool()
        pool.set_state(state)
        assert pool.state == state

    @pytest.mark.parametrize("state", [AmmState.WITHDRAW_ONLY, 4, 255])
    def test_state_rejects_withdraw_only_and_above(self, state) -> None:
        with pytest.raises(AmmError) as exc:
            _pool().set_state(state)
        assert exc.value.code is ProgramError.INVALID_ARGUMENT

    def test_set_inner_initializes(self) -> None:
        pool = PoolConfig()
        authority = Pubkey.new_unique()
        pool.set_inner(seed=1, authority=authority, mint_x=MINT_X, mint_y=MINT_Y, fee_bps=25, config_bump=250)
        assert pool.is_initialized()
        assert pool.has_authority() == authority
        assert (pool.seed, pool.fee_bps, pool.config_bump) == (1, 25, 250)

    def test_no_authority(self) -> None:
        assert _pool(authority=Pubkey.default()).has_authority() is None


class TestLoad:
    def test_load_checks_length(self) -> None:
        with pytest.raises(AmmError) as exc:
            PoolConfig.load(_view(_pool().to_bytes()[:-1]), PROGRAM.program_id)
        assert exc.value.code is ProgramError.ACCOUNT_SHAPE_VIOLATION

    def test_load_checks_owner(self) -> None:
        with pytest.raises(AmmError) as exc:
            PoolConfig.load(_view(_pool().to_bytes(), owner=Pubkey.new_unique()), PROGRAM.program_id)
        assert exc.value.code is ProgramError.ADDRESS_MISMATCH

    def test_load_mut_writes_back_on_success(self) -> None:
        view = _view(_pool().to_bytes())
        with PoolConfig.load_mut(view, PROGRAM.program_id) as pool:
            pool.set_fee(100)
        assert PoolConfig.from_bytes(view.data).fee_bps == 100

    def test_load_mut_leaves_bytes_on_error(self) -> None:
        original = _pool().to_bytes()
        view = _view(original)
        with pytest.raises(AmmError):
            with PoolConfig.load_mut(view, PROGRAM.program_id) as pool:
                pool.set_fee(100)
                pool.set_fee(10_000)
        assert bytes(view.data) == original


class TestDerivedAddresses:
    def test_config_address_rederives_from_stored_fields(self) -> None:
        address, bump = find_config_address(7, MINT_X, MINT_Y, PROGRAM.program_id)
        pool = _pool(config_bump=bump)
        assert pool.address(PROGRAM.program_id) == address
        pool.verify_address(address, PROGRAM.program_id)

    def test_wrong_address_is_rejected(self) -> None:
        address, bump = find_config_address(7, MINT_X, MINT_Y, PROGRAM.program_id)
        pool = _pool(config_bump=bump)
        with pytest.raises(AmmError) as exc:
            pool.verify_address(Pubkey.new_unique(), PROGRAM.program_id)
        assert exc.value.code is ProgramError.ADDRESS_MISMATCH

    def test_vaults_are_deterministic_and_distinct(self) -> None:
        address, bump = find_config_address(7, MINT_X, MINT_Y, PROGRAM.program_id)
        pool = _pool(config_bump=bump)
        first = pool.vault_addresses(address, PROGRAM.token_program_id, PROGRAM.associated_token_program_id)
        second = pool.vault_addresses(address, PROGRAM.token_program_id, PROGRAM.associated_token_program_id)
        assert first == second
        assert first[0] != first[1]

    def test_signer_derives_config_address(self) -> None:
        address, bump = find_config_address(7, MINT_X, MINT_Y, PROGRAM.program_id)
        assert _pool(config_bump=bump).signer().address(PROGRAM.program_id) == address
