"""EIP-1967 proxy and beacon implementation resolution."""

import logging
from typing import Optional, Tuple

from ..config import ZERO_ADDRESS
from ..models import ProxyResolution
from .address import word_to_address

logger = logging.getLogger(__name__)

# bytes32(uint256(keccak256("eip1967.proxy.implementation")) - 1)
IMPLEMENTATION_SLOT = "0x360894a13ba1a3210667c828492db98dca3e2076cc3735a920a3ca505d382bbc"

# bytes32(uint256(keccak256("eip1967.proxy.beacon")) - 1)
BEACON_SLOT = "0xa3f0ad74e5423aebfd80d3ef4346578335a9a72aeaee59ff6cb3582b35133d50"

# implementation()
BEACON_IMPLEMENTATION_SELECTOR = "0x5c60da1b"


class ProxyResolver:
    """
    Finds the implementation behind an EIP-1967 transparent/UUPS or beacon proxy.

    Every candidate address must have deployed code; a populated slot that
    points at an empty account falls through to the next check.
    """

    def __init__(self, client):
        self.client = client

    def _read_slot_address(self, address: str, slot: str, label: str) -> Optional[str]:
        try:
            value = self.client.get_storage_at(address, slot)
        except Exception as e:
            logger.info(f"  Error reading {label} slot of {address}: {e}")
            return None

        candidate = word_to_address(value)
        if candidate:
            logger.info(f"  {label} slot holds {candidate}")
        else:
            logger.info(f"  {label} slot is empty (all zeros)")
        return candidate

    def _code_at(self, address: str) -> bytes:
        try:
            return self.client.get_code(address)
        except Exception as e:
            logger.info(f"  Error fetching code at {address}: {e}")
            return b""

    def _validated(self, candidate: Optional[str]) -> Optional[Tuple[str, bytes]]:
        if not candidate:
            return None
        code = self._code_at(candidate)
        if not code:
            logger.info(f"  {candidate} has no code, not a valid implementation")
            return None
        return candidate, code

    def _beacon_implementation(self, beacon: str) -> Optional[str]:
        try:
            result = self.client.call(beacon, BEACON_IMPLEMENTATION_SELECTOR)
        except Exception as e:
            logger.info(f"  Beacon {beacon} implementation() call failed: {e}")
            return None
        return word_to_address(result)

    def resolve(self, address: str) -> ProxyResolution:
        """
        Detect if a contract is a proxy and return its implementation.

        Resolution flow:
        1. Read the EIP-1967 implementation slot and validate its code
        2. Otherwise read the beacon slot and call beacon.implementation()
        3. Validate the beacon's implementation code

        Args:
            address: Proxy candidate address

        Returns:
            ProxyResolution; `is_proxy` is False with the zero address and
            empty bytecode when no validated implementation is found
        """
        logger.info(f"Checking if {address} is a proxy contract...")

        found = self._validated(self._read_slot_address(address, IMPLEMENTATION_SLOT, "Implementation"))
        if found:
            implementation, code = found
            logger.info(f"Detected EIP-1967 proxy, implementation: {implementation}")
            return ProxyResolution(
                proxy_address=address,
                is_proxy=True,
                implementation_address=implementation,
                implementation_bytecode="0x" + code.hex(),
            )

        beacon = self._read_slot_address(address, BEACON_SLOT, "Beacon")
        if beacon:
            found = self._validated(self._beacon_implementation(beacon))
            if found:
                implementation, code = found
                logger.info(f"Detected beacon proxy via {beacon}, implementation: {implementation}")
                return ProxyResolution(
                    proxy_address=address,
                    is_proxy=True,
                    implementation_address=implementation,
                    implementation_bytecode="0x" + code.hex(),
                    via_beacon=True,
                )

        logger.info(f"No proxy implementation detected for {address}")
        return ProxyResolution(proxy_address=address, is_proxy=False, implementation_address=ZERO_ADDRESS)
