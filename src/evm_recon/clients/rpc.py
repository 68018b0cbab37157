"""Read-only chain access over a web3 HTTP provider."""

import logging
from typing import Optional, Union

from web3 import Web3

from ..config import RPC_TIMEOUT

logger = logging.getLogger(__name__)


def _hex_data(data: Union[bytes, str]) -> str:
    if isinstance(data, (bytes, bytearray)):
        return "0x" + bytes(data).hex()
    return data if data.startswith("0x") else "0x" + data


class ChainClient:
    """
    Minimal read-only client: code, storage and eth_call.

    Every method raises on transport or execution errors; callers decide
    whether a failure is fatal or isolated.
    """

    def __init__(self, w3: Web3, rpc_url: Optional[str] = None):
        self.w3 = w3
        self.rpc_url = rpc_url

    @classmethod
    def from_rpc_url(cls, rpc_url: str, timeout: int = RPC_TIMEOUT) -> "ChainClient":
        w3 = Web3(Web3.HTTPProvider(rpc_url, request_kwargs={"timeout": timeout}))
        return cls(w3, rpc_url)

    def get_code(self, address: str) -> bytes:
        code = self.w3.eth.get_code(Web3.to_checksum_address(address))
        return bytes(code)

    def get_storage_at(self, address: str, slot: Union[int, str]) -> bytes:
        position = int(slot, 16) if isinstance(slot, str) else slot
        value = self.w3.eth.get_storage_at(Web3.to_checksum_address(address), position)
        return bytes(value)

    def call(self, to: str, data: Union[bytes, str], sender: Optional[str] = None) -> bytes:
        tx = {"to": Web3.to_checksum_address(to), "data": _hex_data(data)}
        if sender:
            tx["from"] = Web3.to_checksum_address(sender)
        result = self.w3.eth.call(tx)
        return bytes(result)
