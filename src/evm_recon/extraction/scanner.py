"""Linear bytecode walker and dispatcher selector extraction."""

import logging
from typing import List, Union

from ..errors import InputError
from ..models import Instruction
from .opcodes import PUSH4, mnemonic, push_size

logger = logging.getLogger(__name__)


def to_bytes(bytecode: Union[bytes, str]) -> bytes:
    """
    Normalize bytecode given as raw bytes or hex text (with or without `0x`).

    Raises:
        InputError: If the hex text is malformed
    """
    if isinstance(bytecode, (bytes, bytearray)):
        return bytes(bytecode)
    if not isinstance(bytecode, str):
        raise InputError(f"Unsupported bytecode type: {type(bytecode).__name__}")

    hex_code = bytecode.strip()
    if hex_code[:2].lower() == "0x":
        hex_code = hex_code[2:]
    try:
        return bytes.fromhex(hex_code)
    except ValueError as e:
        raise InputError(f"Malformed bytecode hex: {e}") from e


class SelectorScanner:
    """
    Walks deployed bytecode and collects the 4-byte constants pushed by the
    dispatcher (`PUSH4 <selector> EQ PUSH2 <dest> JUMPI`).

    Superset heuristic: any PUSH4 immediate is reported, including 4-byte
    constants unrelated to dispatch.
    """

    def __init__(self, bytecode: Union[bytes, str]):
        self.code = to_bytes(bytecode)
        self._instructions: List[Instruction] = []

    def instructions(self) -> List[Instruction]:
        """
        Decode the bytecode into instructions, skipping PUSH operands.

        A PUSH whose operand would run past the end of the code stops the
        walk: the instruction is recorded without an immediate and nothing
        after it is decoded.

        Returns:
            Instructions in program-counter order (cached after first call)
        """
        if self._instructions:
            return self._instructions

        code = self.code
        pc = 0
        while pc < len(code):
            opcode = code[pc]
            size = push_size(opcode)
            if size and pc + size >= len(code):
                logger.debug(f"Truncated {mnemonic(opcode)} at pc={pc}, stopping scan")
                self._instructions.append(Instruction(offset=pc, opcode=opcode, mnemonic=mnemonic(opcode)))
                break

            immediate = code[pc + 1:pc + 1 + size] if size else None
            self._instructions.append(
                Instruction(offset=pc, opcode=opcode, mnemonic=mnemonic(opcode), immediate=immediate)
            )
            pc += 1 + size

        return self._instructions

    def selectors(self) -> List[str]:
        """
        Distinct PUSH4 immediates as `0x`-prefixed lowercase hex, in the
        order first encountered.
        """
        seen = {}
        for ins in self.instructions():
            if ins.opcode == PUSH4 and ins.immediate is not None and len(ins.immediate) == 4:
                seen.setdefault("0x" + ins.immediate.hex(), None)
        return list(seen)


def scan(bytecode: Union[bytes, str]) -> List[str]:
    """Extract candidate function selectors from deployed bytecode."""
    selectors = SelectorScanner(bytecode).selectors()
    logger.info(f"Extracted {len(selectors)} candidate selectors")
    return selectors


def disassemble(bytecode: Union[bytes, str]) -> List[Instruction]:
    return SelectorScanner(bytecode).instructions()
