"""
Instruction core: payload decoding, account validation, curve math and the
per-instruction processors behind one dispatcher.
"""

from .curve import DepositQuote, SwapQuote, WithdrawQuote, deposit_quote, swap_quote, withdraw_quote
from .engine import ProcessResult, process_instruction, process_instruction_or_raise, run_transaction
from .instruction_data import (
    DepositData,
    Discriminator,
    InitializeData,
    SwapData,
    WithdrawData,
    decode_instruction,
    parse_instruction,
    encode_instruction,
)
from .instructions import InstructionReceipt

__all__ = [
    "DepositQuote",
    "SwapQuote",
    "WithdrawQuote",
    "deposit_quote",
    "swap_quote",
    "withdraw_quote",
    "ProcessResult",
    "process_instruction",
    "process_instruction_or_raise",
    "run_transaction",
    "DepositData",
    "Discriminator",
    "InitializeData",
    "SwapData",
    "WithdrawData",
    "decode_instruction",
    "parse_instruction",
    "encode_instruction",
    "InstructionReceipt",
]
