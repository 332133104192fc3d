"""One processor per instruction: ``try_from`` validates, ``process`` executes."""

from .base import InstructionReceipt
from .deposit import Deposit
from .initialize import Initialize
from .swap import Swap
from .withdraw import Withdraw

__all__ = [
    "InstructionReceipt",
    "Deposit",
    "Initialize",
    "Swap",
    "Withdraw",
]
