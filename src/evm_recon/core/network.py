"""Per-network contract presence and proxy probing."""

import asyncio
import logging
from typing import Callable, List, Mapping

from ..clients.rpc import ChainClient
from ..config import MAX_CONCURRENT_CALLS, NetworkConfig
from ..models import NetworkCheck
from .proxy import ProxyResolver

logger = logging.getLogger(__name__)

ClientFactory = Callable[[NetworkConfig], object]


def default_client_factory(network: NetworkConfig) -> ChainClient:
    return ChainClient.from_rpc_url(network.rpc_url)


def check_contract_in_network(client, address: str, network: str = "", rpc_url: str = "") -> NetworkCheck:
    """
    Check whether `address` holds code on one network and whether it is a proxy.

    Args:
        client: ChainClient for the network
        address: Checksummed address
        network: Network name (for reporting)
        rpc_url: RPC URL (for reporting)

    Returns:
        NetworkCheck; RPC errors propagate to the caller
    """
    code = client.get_code(address)
    if not code:
        return NetworkCheck(network=network, rpc_url=rpc_url, is_contract=False)

    proxy = ProxyResolver(client).resolve(address)
    return NetworkCheck(
        network=network,
        rpc_url=rpc_url,
        is_contract=True,
        is_proxy=proxy.is_proxy,
        implementation=proxy.implementation_address,
    )


async def probe_networks_async(
    address: str,
    networks: Mapping[str, NetworkConfig],
    client_factory: ClientFactory = default_client_factory,
    max_concurrent: int = MAX_CONCURRENT_CALLS,
) -> List[NetworkCheck]:
    """
    Check every network concurrently; results keep the order of `networks`.

    An unreachable network is reported as "not a contract there".
    """
    semaphore = asyncio.Semaphore(max(1, max_concurrent))

    def probe(network: NetworkConfig) -> NetworkCheck:
        try:
            client = client_factory(network)
            return check_contract_in_network(client, address, network.name, network.rpc_url)
        except Exception as e:
            logger.warning(f"Could not check {address} on {network.name}: {e}")
            return NetworkCheck(network=network.name, rpc_url=network.rpc_url, is_contract=False)

    async def probe_limited(network: NetworkConfig) -> NetworkCheck:
        async with semaphore:
            return await asyncio.to_thread(probe, network)

    logger.info(f"Checking {address} in {len(networks)} networks...")
    results = await asyncio.gather(*(probe_limited(n) for n in networks.values()))
    found = [r.network for r in results if r.is_contract]
    logger.info(f"{address} is a contract on: {', '.join(found) if found else 'no network'}")
    return list(results)


def probe_networks(
    address: str,
    networks: Mapping[str, NetworkConfig],
    client_factory: ClientFactory = default_client_factory,
    max_concurrent: int = MAX_CONCURRENT_CALLS,
) -> List[NetworkCheck]:
    """Synchronous wrapper running `probe_networks_async` with asyncio.run()."""
    return asyncio.run(probe_networks_async(address, networks, client_factory, max_concurrent))
