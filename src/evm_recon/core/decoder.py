"""Schema-less decoding of raw call return data.

The decoder picks an interpretation from the hex length of the payload
(including the `0x` prefix) and, for a single word, from its magnitude:

    <= 2      no data                -> "execution reverted"
    66        uint256 or address     -> decimal or checksummed address
    130       (uint256, uint256)     -> first value as decimal
    194       string                 -> decoded text
    > 194     unknown                -> "could not decode the response"
    otherwise Error(string) payload  -> revert message

Each rule is tried in order and any exception inside a rule is turned into
that rule's fallback literal, so `decode` never raises.
"""

import logging
from typing import Callable, List, NamedTuple, Union

from web3 import Web3

logger = logging.getLogger(__name__)

EXECUTION_REVERTED = "execution reverted"
COULD_NOT_DECODE = "could not decode the response"

# 0xdead: a common placeholder address that decodes to a short integer
DEAD_SENTINEL = 57005

_codec = Web3().codec


class DecodeRule(NamedTuple):
    name: str
    matches: Callable[[int], bool]
    strategy: Callable[[bytes], str]
    fallback: str


def _to_hex(data: Union[bytes, str, None]) -> str:
    if data is None:
        return "0x"
    if isinstance(data, (bytes, bytearray)):
        return "0x" + bytes(data).hex()
    return data if data[:2].lower() == "0x" else "0x" + data


def _decode_address(data: bytes) -> str:
    return Web3.to_checksum_address(_codec.decode(["address"], data)[0])


def _looks_like_address(value: int) -> bool:
    digits = len(str(value))
    return value == DEAD_SENTINEL or 35 < digits < 50


def _decode_word(data: bytes) -> str:
    try:
        value = _codec.decode(["uint256"], data)[0]
    except Exception:
        return _decode_address(data)

    if _looks_like_address(value):
        try:
            return _decode_address(data)
        except Exception:
            return str(value)
    return str(value)


def _decode_first_of_pair(data: bytes) -> str:
    return str(_codec.decode(["uint256", "uint256"], data)[0])


def _decode_string(data: bytes) -> str:
    return _codec.decode(["string"], data)[0]


def _decode_error_string(data: bytes) -> str:
    if len(data) <= 4:
        return EXECUTION_REVERTED
    return _codec.decode(["string"], data[4:])[0]


def _no_data(data: bytes) -> str:
    return EXECUTION_REVERTED


def _give_up(data: bytes) -> str:
    return COULD_NOT_DECODE


RULES: List[DecodeRule] = [
    DecodeRule("empty", lambda n: n <= 2, _no_data, EXECUTION_REVERTED),
    DecodeRule("word", lambda n: n == 66, _decode_word, EXECUTION_REVERTED),
    DecodeRule("pair", lambda n: n == 130, _decode_first_of_pair, EXECUTION_REVERTED),
    DecodeRule("string", lambda n: n == 194, _decode_string, EXECUTION_REVERTED),
    DecodeRule("oversized", lambda n: n > 194, _give_up, COULD_NOT_DECODE),
    DecodeRule("error-string", lambda n: True, _decode_error_string, EXECUTION_REVERTED),
]


def decode(return_data: Union[bytes, str, None]) -> str:
    """
    Heuristically decode return data without an ABI.

    Args:
        return_data: Raw bytes or `0x`-prefixed hex

    Returns:
        Display text; never raises
    """
    hex_data = _to_hex(return_data)
    length = len(hex_data)

    for rule in RULES:
        if not rule.matches(length):
            continue
        try:
            data = bytes.fromhex(hex_data[2:])
            return rule.strategy(data)
        except Exception as e:
            logger.debug(f"Decode rule '{rule.name}' failed for {length}-char payload: {e}")
            return rule.fallback

    return EXECUTION_REVERTED
