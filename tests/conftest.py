"""Shared fixtures for the evm_recon test suite."""

from __future__ import annotations

import threading
import time
from typing import Callable, Dict, List, Optional, Tuple, Union

import pytest
from web3 import Web3

CODEC = Web3().codec


def addr(byte: str) -> str:
    """Checksummed address made of one repeated byte, e.g. addr('11')."""
    return Web3.to_checksum_address("0x" + byte * 20)


def word(address: str) -> bytes:
    """Right-align an address in a 32-byte storage word."""
    return bytes(12) + bytes.fromhex(address[2:])


def encode(types, values) -> bytes:
    return CODEC.encode(types, values)


def dispatcher_bytecode(selectors: List[str]) -> bytes:
    """
    Minimal Solidity-style dispatcher:
    PUSH1 0x80 PUSH1 0x40 MSTORE PUSH1 0x00 CALLDATALOAD PUSH1 0xe0 SHR
    then `DUP1 PUSH4 <sel> EQ PUSH2 <dest> JUMPI` per selector, then STOP.
    """
    code = bytes.fromhex("6080604052600035" + "60e01c")
    for index, selector in enumerate(selectors):
        code += bytes.fromhex("80" + "63" + selector[2:] + "14" + "61" + f"{0x100 + index:04x}" + "57")
    return code + b"\x00"


class RevertError(Exception):
    """Stands in for a provider-side execution revert."""

    def __init__(self, message: str):
        super().__init__(message)
        self.message = message


class FakeChain:
    """In-memory stand-in for ChainClient: code, storage and call handlers per address."""

    def __init__(self):
        self.code: Dict[str, bytes] = {}
        self.storage: Dict[Tuple[str, int], bytes] = {}
        self.handlers: Dict[Tuple[str, str], Union[bytes, Exception, Callable[[bytes], bytes]]] = {}
        self.delays: Dict[Tuple[str, str], float] = {}
        self.calls: List[Tuple[str, str, Optional[str]]] = []
        self.completed: List[str] = []
        self._lock = threading.Lock()

    def set_code(self, address: str, code: bytes):
        self.code[address.lower()] = code

    def set_storage(self, address: str, slot: str, value: bytes):
        self.storage[(address.lower(), int(slot, 16))] = value

    def on_call(self, address: str, selector: str, result, delay: float = 0.0):
        self.handlers[(address.lower(), selector.lower())] = result
        if delay:
            self.delays[(address.lower(), selector.lower())] = delay

    def get_code(self, address: str) -> bytes:
        return self.code.get(address.lower(), b"")

    def get_storage_at(self, address: str, slot) -> bytes:
        position = int(slot, 16) if isinstance(slot, str) else slot
        return self.storage.get((address.lower(), position), bytes(32))

    def call(self, to: str, data, sender: Optional[str] = None) -> bytes:
        data_hex = data if isinstance(data, str) else "0x" + bytes(data).hex()
        key = (to.lower(), data_hex[:10].lower())
        with self._lock:
            self.calls.append((to, data_hex, sender))

        delay = self.delays.get(key)
        if delay:
            time.sleep(delay)

        try:
            if key not in self.handlers:
                raise RevertError("execution reverted")
            result = self.handlers[key]
            if isinstance(result, Exception):
                raise result
            if callable(result):
                return result(bytes.fromhex(data_hex[2:]))
            return result
        finally:
            with self._lock:
                self.completed.append(key[1])


@pytest.fixture
def chain() -> FakeChain:
    return FakeChain()


@pytest.fixture
def token_address() -> str:
    return addr("11")
