"""Shared network constants and environment-driven settings."""

import logging
import os
from typing import Dict

from dotenv import load_dotenv
from pydantic import BaseModel, ConfigDict

# Load environment variables
load_dotenv(override=True)

logger = logging.getLogger(__name__)

ZERO_ADDRESS = "0x" + "0" * 40

# Default msg.sender for read calls; some contracts gate views on a non-zero caller
DEFAULT_CALL_SENDER = "0xa180Fe01B906A1bE37BE6c534a3300785b20d947"

# Multicall3 is deployed at the same address on every supported chain
DEFAULT_MULTICALL3_ADDRESS = "0xcA11bde05977b3631167028862bE2a173976CA11"

OPENCHAIN_LOOKUP_URL = "https://api.4byte.sourcify.dev/signature-database/v1/lookup"
FOURBYTE_LOOKUP_URL = "https://www.4byte.directory/api/v1/signatures/"


class NetworkConfig(BaseModel):
    model_config = ConfigDict(frozen=True)

    name: str
    chain_id: int
    rpc_url: str
    multicall_address: str = DEFAULT_MULTICALL3_ADDRESS


DEFAULT_RPC_URLS = {
    "ETH": (1, "https://eth.llamarpc.com"),
    "BSC": (56, "https://bsc-dataseed.bnbchain.org"),
    "AVAX": (43114, "https://api.avax.network/ext/bc/C/rpc"),
    "BASE": (8453, "https://mainnet.base.org"),
    "BLAST": (81457, "https://rpc.blast.io"),
    "ARBITRUM": (42161, "https://arb1.arbitrum.io/rpc"),
}


def _int_env(name: str, default: int) -> int:
    raw = os.getenv(name)
    if not raw:
        return default
    try:
        return int(raw)
    except ValueError:
        logger.warning(f"Ignoring non-integer value for {name}: {raw!r}")
        return default


def load_networks() -> Dict[str, NetworkConfig]:
    """
    Build the supported network table.

    Each RPC URL can be overridden with `<NAME>_RPC_URL` (e.g. `BSC_RPC_URL`).

    Returns:
        Ordered mapping of network name -> NetworkConfig
    """
    multicall = os.getenv("MULTICALL3_ADDRESS") or DEFAULT_MULTICALL3_ADDRESS
    networks = {}
    for name, (chain_id, default_rpc) in DEFAULT_RPC_URLS.items():
        networks[name] = NetworkConfig(
            name=name,
            chain_id=chain_id,
            rpc_url=os.getenv(f"{name}_RPC_URL") or default_rpc,
            multicall_address=multicall,
        )
    return networks


NETWORKS = load_networks()
CALL_SENDER = os.getenv("CALL_SENDER") or DEFAULT_CALL_SENDER
RPC_TIMEOUT = _int_env("RPC_TIMEOUT", 10)
LOOKUP_TIMEOUT = _int_env("LOOKUP_TIMEOUT", 10)
MAX_CONCURRENT_CALLS = _int_env("MAX_CONCURRENT_CALLS", 8)
