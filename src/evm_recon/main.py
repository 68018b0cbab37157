#!/usr/bin/env python3
"""
Main entry point for the EVM bytecode reconnaissance tool.

This script orchestrates the analysis workflow:
1. Parse command-line arguments
2. Locate the contract (one network, or probe all configured networks)
3. Run analysis, following proxies to their implementation
4. Print the report (and optionally save it as JSON)
"""

import argparse
import logging
import os
import sys
from pathlib import Path

from dotenv import load_dotenv

from .clients.rpc import ChainClient
from .config import CALL_SENDER, MAX_CONCURRENT_CALLS, NETWORKS, NetworkConfig
from .core.address import validate_evm_address
from .core.engine import ContractAnalyzer
from .core.network import probe_networks
from .errors import AnalysisError, InputError
from .reporting import render_report, save_json_results

# Load environment variables
load_dotenv(override=True)

logger = logging.getLogger(__name__)

EXIT_OK = 0
EXIT_NOT_FOUND = 1
EXIT_FAILED = 2


def _configure_logging(debug: bool):
    if debug:
        # Create output directory for log file
        output_dir = Path("output")
        output_dir.mkdir(exist_ok=True)

        logging.basicConfig(
            level=logging.INFO,
            format='%(asctime)s - %(levelname)s - %(message)s',
            handlers=[
                logging.FileHandler(output_dir / 'evm_recon.log')
            ]
        )
    else:
        # Disable logging output when debug is False
        logging.basicConfig(
            level=logging.CRITICAL,
            format='%(asctime)s - %(levelname)s - %(message)s',
            handlers=[
                logging.NullHandler()
            ]
        )


def _select_network(args, address: str):
    """
    Pick the network to analyze on.

    Returns:
        (NetworkConfig, resolve_proxy) or (None, False) if the address is not a contract anywhere
    """
    if args.rpc:
        return NetworkConfig(name="custom", chain_id=0, rpc_url=args.rpc), args.proxy
    if args.network:
        network = NETWORKS.get(args.network.upper())
        if network is None:
            raise InputError(f"Unknown network {args.network!r} (supported: {', '.join(NETWORKS)})")
        return network, args.proxy

    checks = probe_networks(address, NETWORKS)
    found = [c for c in checks if c.is_contract]
    if not found:
        return None, False

    if len(found) > 1:
        names = ", ".join(f"{c.network} ({'proxy' if c.is_proxy else 'single'})" for c in found)
        print(f"Address found in multiple networks: {names}. Using {found[0].network}.")

    check = found[0]
    print(f"Address found on {check.network}: {'Proxy Contract' if check.is_proxy else 'Single Contract'}")
    if check.is_proxy:
        print(f"Implementation: {check.implementation}")
    return NETWORKS[check.network], check.is_proxy or args.proxy


def main(argv=None):
    """Main entry point."""
    parser = argparse.ArgumentParser(
        description='Analyze a deployed EVM contract without ABI or source code',
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Environment Variables (can also be set in .env file):
  <NETWORK>_RPC_URL     RPC endpoint override per network (e.g. ETH_RPC_URL, BSC_RPC_URL)
  CALL_SENDER           Sender address used for read calls
  MULTICALL3_ADDRESS    Aggregator address used with --batch
  MAX_CONCURRENT_CALLS  Concurrent eth_call limit (default: 8)

Priority: Command-line arguments > Environment variables > Defaults
        """
    )
    parser.add_argument('address', help='Contract address to analyze')
    parser.add_argument(
        '--network',
        default=os.getenv('NETWORK'),
        help=f"Network to analyze on ({', '.join(NETWORKS)}); probes all networks when omitted (env: NETWORK)"
    )
    parser.add_argument('--rpc', default=None, help='Explicit RPC URL (overrides --network)')
    parser.add_argument('--proxy', action='store_true', help='Resolve an EIP-1967 proxy and analyze its implementation')
    parser.add_argument('--batch', action='store_true', help='Batch calls through Multicall3 (no revert reasons)')
    parser.add_argument('--json', type=Path, default=None, help='Also save the report as JSON to this path')
    parser.add_argument(
        '--debug',
        action='store_true',
        default=False,
        help='Enable debug mode to log to file (default: False)'
    )

    args = parser.parse_args(argv)
    _configure_logging(args.debug)

    address = validate_evm_address(args.address)
    if not address:
        print(f"Invalid EVM address: {args.address}")
        return EXIT_NOT_FOUND

    try:
        network, resolve_proxy = _select_network(args, address)
    except InputError as e:
        print(str(e))
        return EXIT_NOT_FOUND

    if network is None:
        print(f"Address not found: {address} is not a smart contract in any supported network.")
        return EXIT_NOT_FOUND

    analyzer = ContractAnalyzer(
        ChainClient.from_rpc_url(network.rpc_url),
        sender=CALL_SENDER,
        multicall_address=network.multicall_address,
        max_concurrent_calls=MAX_CONCURRENT_CALLS,
    )

    try:
        report = analyzer.analyze(address, resolve_proxy=resolve_proxy, use_batch=args.batch)
    except AnalysisError as e:
        logger.error(f"Analysis failed: {e}")
        print("Undefined error during decompilation!")
        if e.partial_report is not None and e.partial_report.selector_count:
            print(f"Selectors found before the failure: {e.partial_report.selector_count}")
        return EXIT_FAILED

    print(render_report(report))

    if args.json:
        save_json_results(report, args.json)

    return EXIT_OK if report.is_contract else EXIT_NOT_FOUND


if __name__ == '__main__':
    sys.exit(main())
