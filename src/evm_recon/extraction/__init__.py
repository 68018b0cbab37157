"""Bytecode extraction utilities."""

from .opcodes import OPCODES, mnemonic, push_size
from .scanner import SelectorScanner, disassemble, scan, to_bytes

__all__ = [
    "OPCODES",
    "SelectorScanner",
    "disassemble",
    "mnemonic",
    "push_size",
    "scan",
    "to_bytes",
]
