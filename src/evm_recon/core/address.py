"""Address validation and storage-word helpers."""

from typing import Optional, Union

from web3 import Web3


def validate_evm_address(text: str) -> Optional[str]:
    """
    Validate an EVM address, accepting any letter case.

    Args:
        text: Candidate address text

    Returns:
        EIP-55 checksummed address, or None if invalid
    """
    if not isinstance(text, str):
        return None
    candidate = text.strip()
    try:
        if not Web3.is_address(candidate.lower()):
            return None
        return Web3.to_checksum_address(candidate)
    except (ValueError, TypeError):
        return None


def word_to_address(value: Union[bytes, str, None]) -> Optional[str]:
    """
    Read a right-aligned address from a 32-byte word (storage slot or call result).

    Returns:
        Checksummed address from the low 20 bytes, or None when empty/zero
    """
    if value is None:
        return None
    if isinstance(value, str):
        hex_value = value[2:] if value[:2].lower() == "0x" else value
        try:
            value = bytes.fromhex(hex_value)
        except ValueError:
            return None
    if len(value) < 20:
        return None

    low = value[-20:]
    if not any(low):
        return None
    return Web3.to_checksum_address("0x" + low.hex())
