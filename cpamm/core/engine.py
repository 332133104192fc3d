"""
Instruction dispatcher.

``process_instruction(data, accounts, ctx)`` is the single entry point. It:

1. Splits off the discriminator and parses the payload layout.
2. Routes to the matching processor's ``try_from`` (account validation,
   payload checks, expiration, state gate, quote).
3. Runs the processor's external calls.
4. Returns a ``ProcessResult`` (accepted with a receipt, or rejected with
   the ``ProgramError``).

Atomicity of the external calls is the enclosing transaction's job; with a
``LocalLedger`` use ``run_transaction`` to get it.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import ContextManager, Iterable, List, Optional, Protocol, Sequence

from ..errors import AmmError, ProgramError
from ..integration.runtime import InvokeContext
from ..state.account import AccountView
from .instruction_data import Discriminator, parse_instruction
from .instructions import Deposit, Initialize, InstructionReceipt, Swap, Withdraw

logger = logging.getLogger(__name__)

_DISPATCH: dict[Discriminator, type] = {
    Discriminator.INITIALIZE: Initialize,
    Discriminator.DEPOSIT: Deposit,
    Discriminator.WITHDRAW: Withdraw,
    Discriminator.SWAP: Swap,
}


@dataclass(frozen=True)
class ProcessResult:
    """Result of processing one instruction."""

    ok: bool
    receipt: Optional[InstructionReceipt] = None
    error: Optional[ProgramError] = None
    message: str = ""


def process_instruction_or_raise(
    data: bytes,
    accounts: Sequence[AccountView],
    ctx: InvokeContext,
) -> InstructionReceipt:
    """Like ``process_instruction()`` but raises on rejection.

    Raises:
        AmmError: carrying the ``ProgramError`` of the first failed check.
    """
    payload = parse_instruction(data)
    processor = _DISPATCH[payload.DISCRIMINATOR]
    instruction = processor.try_from(payload, accounts, ctx)
    receipt = instruction.process()
    logger.debug("accepted %s", receipt)
    return receipt


def process_instruction(
    data: bytes,
    accounts: Sequence[AccountView],
    ctx: InvokeContext,
) -> ProcessResult:
    try:
        receipt = process_instruction_or_raise(data, accounts, ctx)
    except AmmError as exc:
        logger.warning("rejected instruction: %s", exc)
        return ProcessResult(ok=False, error=exc.code, message=exc.message)
    return ProcessResult(ok=True, receipt=receipt)


class TransactionalLedger(Protocol):
    """What ``run_transaction`` needs from a ledger (``LocalLedger`` fits)."""

    def transaction(self) -> ContextManager[object]: ...

    def account_views(self, metas: Iterable[object]) -> List[AccountView]: ...

    def context(self) -> InvokeContext: ...


def run_transaction(ledger: TransactionalLedger, data: bytes, metas: Iterable[object]) -> ProcessResult:
    """
    Process one instruction against `ledger` atomically.

    On rejection every account is restored before the result is returned.
    """
    try:
        with ledger.transaction():
            accounts = ledger.account_views(metas)
            receipt = process_instruction_or_raise(data, accounts, ledger.context())
    except AmmError as exc:
        logger.warning("rejected instruction: %s", exc)
        return ProcessResult(ok=False, error=exc.code, message=exc.message)
    return ProcessResult(ok=True, receipt=receipt)
