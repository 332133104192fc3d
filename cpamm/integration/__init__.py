"""
Collaborator interfaces (token program, system program, clock, rent) and
the in-memory ledger that implements them.
"""

from .client import PoolAddresses, initialize_metas, liquidity_metas, swap_metas
from .ledger import AccountMeta, LedgerCall, LocalLedger
from .runtime import Clock, ClockSysvar, InvokeContext, Rent, SystemProgram, TokenProgram

__all__ = [
    "PoolAddresses",
    "initialize_metas",
    "liquidity_metas",
    "swap_metas",
    "AccountMeta",
    "LedgerCall",
    "LocalLedger",
    "Clock",
    "ClockSysvar",
    "InvokeContext",
    "Rent",
    "SystemProgram",
    "TokenProgram",
]
