"""
Ledger-facing state for the AMM: account records, derived addresses,
the pool config record and token ledger record views.
"""

from .account import AccountInfo, AccountView
from .addresses import PdaSigner, create_program_address, find_program_address
from .pool_config import AmmState, PoolConfig
from .token import Mint, TokenAccount

__all__ = [
    "AccountInfo",
    "AccountView",
    "PdaSigner",
    "create_program_address",
    "find_program_address",
    "AmmState",
    "PoolConfig",
    "Mint",
    "TokenAccount",
]
