"""
In-memory ledger implementing the token and system program interfaces.

`LocalLedger` stores `AccountInfo` records keyed by address and applies the
same rules the on-chain token program enforces (matching mints, authority
signatures, sufficient balances, u64 bounds). It is what the tests and the
offline tools run instructions against.

Notes:
- Authority for a call is proven either by the authority's view being a
  signer, or by a `PdaSigner` whose seeds re-derive the authority address
  under the invoking program's id.
- Every rejection raises `AmmError(ExternalCallFailed)`.
- `transaction()` restores every record if the block raises, which is how
  instruction atomicity is modelled.
"""

from __future__ import annotations

import logging
from contextlib import contextmanager
from dataclasses import dataclass, replace
from typing import Dict, Iterable, Iterator, List, Optional, Tuple, Union

from solders.pubkey import Pubkey

from ..config import LP_DECIMALS, ProgramConfig, get_program_config
from ..errors import AmmError, ProgramError
from ..state.account import AccountInfo, AccountView
from ..state.addresses import PdaSigner, derive_vault_address
from ..state.balances import U64_MAX, Amount, Lamports, UnixTimestamp
from ..state.token import Mint, TokenAccount
from .runtime import Clock, InvokeContext, Rent

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class AccountMeta:
    """One entry of an instruction's account list, as a client writes it."""

    address: Pubkey
    is_signer: bool = False
    is_writable: bool = False


MetaLike = Union[AccountMeta, Tuple[Pubkey, bool, bool]]


@dataclass(frozen=True)
class LedgerCall:
    """Record of one successful external call, in execution order."""

    program: str
    name: str
    accounts: Tuple[Pubkey, ...]
    amount: int = 0


def _fail(message: str) -> AmmError:
    return AmmError(ProgramError.EXTERNAL_CALL_FAILED, message)


class LocalLedger:
    """
    Account store plus token/system program behaviour.

    Example:
        ledger = LocalLedger()
        mint = ledger.create_mint(authority=alice)
        ata = ledger.create_token_account(owner=alice, mint=mint, amount=100)
    """

    def __init__(
        self,
        config: Optional[ProgramConfig] = None,
        *,
        clock: Optional[Clock] = None,
        rent: Optional[Rent] = None,
    ) -> None:
        self.config = config if config is not None else get_program_config()
        self.clock = clock if clock is not None else Clock()
        self.rent = rent if rent is not None else Rent()
        self._accounts: Dict[Pubkey, AccountInfo] = {}
        self.calls: List[LedgerCall] = []

    # ------------------------------------------------------------------
    # Account store
    # ------------------------------------------------------------------

    def __contains__(self, address: Pubkey) -> bool:
        return address in self._accounts

    def get(self, address: Pubkey) -> AccountInfo:
        """Record at `address`; unknown addresses are empty system-owned records."""
        info = self._accounts.get(address)
        if info is None:
            info = AccountInfo(address=address, owner=self.config.system_program_id)
            self._accounts[address] = info
        return info

    def add_account(self, info: AccountInfo) -> AccountInfo:
        if info.address in self._accounts:
            raise ValueError(f"account already exists: {info.address}")
        self._accounts[info.address] = info
        return info

    def fund(self, address: Pubkey, lamports: Lamports) -> None:
        info = self.get(address)
        if lamports < 0 or info.lamports + lamports > U64_MAX:
            raise ValueError(f"cannot fund {address} with {lamports} lamports")
        info.lamports += lamports

    def set_clock(self, unix_timestamp: UnixTimestamp) -> None:
        self.clock = Clock(unix_timestamp=unix_timestamp)

    def create_mint(
        self,
        authority: Optional[Pubkey],
        *,
        decimals: int = LP_DECIMALS,
        supply: Amount = 0,
        address: Optional[Pubkey] = None,
    ) -> Pubkey:
        """Place an initialized mint record directly (test/demo setup)."""
        address = address if address is not None else Pubkey.new_unique()
        data = Mint(mint_authority=authority, supply=supply, decimals=decimals).to_bytes()
        self.add_account(
            AccountInfo(
                address=address,
                owner=self.config.token_program_id,
                lamports=self.rent.minimum_balance(Mint.LEN),
                data=bytearray(data),
            )
        )
        return address

    def create_token_account(
        self,
        owner: Pubkey,
        mint: Pubkey,
        amount: Amount = 0,
        *,
        address: Optional[Pubkey] = None,
    ) -> Pubkey:
        """
        Place a token account record directly.

        `amount` is credited without minting, so the mint's supply is bumped
        by the same amount to keep the records consistent.
        """
        address = address if address is not None else Pubkey.new_unique()
        data = TokenAccount(mint=mint, owner=owner, amount=amount).to_bytes()
        self.add_account(
            AccountInfo(
                address=address,
                owner=self.config.token_program_id,
                lamports=self.rent.minimum_balance(TokenAccount.LEN),
                data=bytearray(data),
            )
        )
        if amount and mint in self._accounts:
            record = Mint.from_bytes(self._accounts[mint].data)
            self._write_mint(self._accounts[mint], replace(record, supply=record.supply + amount))
        return address

    def create_associated_token_account(self, owner: Pubkey, mint: Pubkey, amount: Amount = 0) -> Pubkey:
        """Token account at the associated-token address of (owner, mint)."""
        address = derive_vault_address(
            owner,
            self.config.token_program_id,
            mint,
            self.config.associated_token_program_id,
        )
        return self.create_token_account(owner, mint, amount, address=address)

    def token_account(self, address: Pubkey) -> TokenAccount:
        return TokenAccount.from_bytes(self._accounts[address].data)

    def mint(self, address: Pubkey) -> Mint:
        return Mint.from_bytes(self._accounts[address].data)

    def balance(self, address: Pubkey) -> Amount:
        return self.token_account(address).amount

    def account_views(self, metas: Iterable[MetaLike]) -> List[AccountView]:
        """Positional `AccountView` list backed by the live records."""
        views: List[AccountView] = []
        for meta in metas:
            if not isinstance(meta, AccountMeta):
                meta = AccountMeta(*meta)
            views.append(
                AccountView(self.get(meta.address), is_signer=meta.is_signer, is_writable=meta.is_writable)
            )
        return views

    def context(self) -> InvokeContext:
        return InvokeContext(config=self.config, token=self, system=self, clock=self.clock, rent=self.rent)

    @contextmanager
    def transaction(self) -> Iterator["LocalLedger"]:
        """
        All-or-nothing scope: if the block raises, every record (and the call
        log) is restored to its state at entry and the exception propagates.
        """
        snapshots = {address: info.snapshot() for address, info in self._accounts.items()}
        calls_before = len(self.calls)
        try:
            yield self
        except BaseException:
            for address in list(self._accounts):
                if address not in snapshots:
                    del self._accounts[address]
            for address, saved in snapshots.items():
                live = self._accounts[address]
                live.owner = saved.owner
                live.lamports = saved.lamports
                live.data[:] = saved.data
                live.executable = saved.executable
            del self.calls[calls_before:]
            logger.debug("ledger transaction rolled back")
            raise

    # ------------------------------------------------------------------
    # Internal helpers
    # ------------------------------------------------------------------

    def _record(self, program: str, name: str, accounts: Tuple[Pubkey, ...], amount: int = 0) -> None:
        self.calls.append(LedgerCall(program=program, name=name, accounts=accounts, amount=amount))
        logger.debug("%s.%s %s amount=%d", program, name, [str(a) for a in accounts], amount)

    def _load_token_account(self, view: AccountView, *, role: str) -> TokenAccount:
        if not view.owned_by(self.config.token_program_id) or view.data_len() != TokenAccount.LEN:
            raise _fail(f"{role} {view.address} is not a token account")
        record = TokenAccount.from_bytes(view.data)
        if not record.is_initialized():
            raise _fail(f"{role} {view.address} is not initialized")
        return record

    def _load_mint(self, view: AccountView) -> Mint:
        if not view.owned_by(self.config.token_program_id) or view.data_len() != Mint.LEN:
            raise _fail(f"{view.address} is not a mint")
        record = Mint.from_bytes(view.data)
        if not record.is_initialized:
            raise _fail(f"mint {view.address} is not initialized")
        return record

    def _check_authority(
        self,
        authority: AccountView,
        expected: Optional[Pubkey],
        signer: Optional[PdaSigner],
    ) -> None:
        if expected is None or authority.address != expected:
            raise _fail(f"authority {authority.address} does not own the source")
        if authority.is_signer:
            return
        if signer is None:
            raise _fail(f"authority {authority.address} did not sign")
        try:
            derived = signer.address(self.config.program_id)
        except AmmError as exc:
            raise _fail(f"invalid signer seeds: {exc.message}") from exc
        if derived != authority.address:
            raise _fail(f"signer seeds derive {derived}, not {authority.address}")

    @staticmethod
    def _write_token_account(view_or_info, record: TokenAccount) -> None:
        view_or_info.data[:] = record.to_bytes()

    @staticmethod
    def _write_mint(view_or_info, record: Mint) -> None:
        view_or_info.data[:] = record.to_bytes()

    # ------------------------------------------------------------------
    # TokenProgram
    # ------------------------------------------------------------------

    def transfer(
        self,
        source: AccountView,
        destination: AccountView,
        authority: AccountView,
        amount: Amount,
        signer: Optional[PdaSigner] = None,
    ) -> None:
        src = self._load_token_account(source, role="source")
        dst = self._load_token_account(destination, role="destination")
        if src.mint != dst.mint:
            raise _fail(f"mint mismatch: {src.mint} != {dst.mint}")
        self._check_authority(authority, src.owner, signer)
        if amount > src.amount:
            raise _fail(f"insufficient funds: {src.amount} < {amount}")

        if source.address != destination.address:
            if dst.amount + amount > U64_MAX:
                raise _fail("destination balance overflow")
            self._write_token_account(source, replace(src, amount=src.amount - amount))
            self._write_token_account(destination, replace(dst, amount=dst.amount + amount))
        self._record("token", "transfer", (source.address, destination.address, authority.address), amount)

    def mint_to(
        self,
        mint: AccountView,
        account: AccountView,
        authority: AccountView,
        amount: Amount,
        signer: Optional[PdaSigner] = None,
    ) -> None:
        mint_record = self._load_mint(mint)
        target = self._load_token_account(account, role="destination")
        if target.mint != mint.address:
            raise _fail(f"account {account.address} holds {target.mint}, not {mint.address}")
        self._check_authority(authority, mint_record.mint_authority, signer)
        if mint_record.supply + amount > U64_MAX or target.amount + amount > U64_MAX:
            raise _fail("mint overflow")

        self._write_mint(mint, replace(mint_record, supply=mint_record.supply + amount))
        self._write_token_account(account, replace(target, amount=target.amount + amount))
        self._record("token", "mint_to", (mint.address, account.address, authority.address), amount)

    def burn(
        self,
        account: AccountView,
        mint: AccountView,
        authority: AccountView,
        amount: Amount,
    ) -> None:
        target = self._load_token_account(account, role="source")
        mint_record = self._load_mint(mint)
        if target.mint != mint.address:
            raise _fail(f"account {account.address} holds {target.mint}, not {mint.address}")
        self._check_authority(authority, target.owner, None)
        if amount > target.amount:
            raise _fail(f"insufficient funds: {target.amount} < {amount}")

        self._write_token_account(account, replace(target, amount=target.amount - amount))
        self._write_mint(mint, replace(mint_record, supply=mint_record.supply - amount))
        self._record("token", "burn", (account.address, mint.address, authority.address), amount)

    def initialize_mint(
        self,
        mint: AccountView,
        decimals: int,
        mint_authority: Pubkey,
        freeze_authority: Optional[Pubkey] = None,
    ) -> None:
        if not mint.owned_by(self.config.token_program_id) or mint.data_len() != Mint.LEN:
            raise _fail(f"{mint.address} is not an allocated mint account")
        if Mint.from_bytes(mint.data).is_initialized:
            raise _fail(f"mint {mint.address} is already initialized")
        if mint.lamports < self.rent.minimum_balance(Mint.LEN):
            raise _fail(f"mint {mint.address} is not rent-exempt")

        record = Mint(
            mint_authority=mint_authority,
            supply=0,
            decimals=decimals,
            is_initialized=True,
            freeze_authority=freeze_authority,
        )
        self._write_mint(mint, record)
        self._record("token", "initialize_mint", (mint.address, mint_authority))

    # ------------------------------------------------------------------
    # SystemProgram
    # ------------------------------------------------------------------

    def create_account(
        self,
        payer: AccountView,
        new_account: AccountView,
        lamports: Lamports,
        space: int,
        owner: Pubkey,
        signer: Optional[PdaSigner] = None,
    ) -> None:
        if not payer.is_signer:
            raise _fail(f"payer {payer.address} did not sign")
        if not new_account.is_empty() or not new_account.owned_by(self.config.system_program_id):
            raise _fail(f"account {new_account.address} already in use")
        self._check_authority(new_account, new_account.address, signer)
        if payer.lamports < lamports:
            raise _fail(f"payer has {payer.lamports} lamports, needs {lamports}")

        payer.info.lamports -= lamports
        new_account.info.lamports += lamports
        new_account.info.data = bytearray(space)
        new_account.info.owner = owner
        self._record("system", "create_account", (payer.address, new_account.address, owner), lamports)

