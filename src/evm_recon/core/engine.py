"""Contract analysis orchestration: bytecode -> selectors -> calls -> report."""

import asyncio
import logging
from typing import Dict, List, Optional, Sequence

from ..clients.signatures import SignatureLookup, SignatureResolver
from ..config import CALL_SENDER, DEFAULT_MULTICALL3_ADDRESS, MAX_CONCURRENT_CALLS
from ..errors import AnalysisError, InputError
from ..extraction.scanner import scan
from ..models import AnalysisReport, CallOutcome, CallRequest, ProxyResolution, SignatureInfo
from .address import validate_evm_address
from .decoder import decode
from .invoker import ParallelInvoker, error_text, normalize_revert_reason
from .multicall import BatchInvoker, batch_results_to_outcomes
from .partition import classify
from .proxy import ProxyResolver

logger = logging.getLogger(__name__)


class ContractAnalyzer:
    """
    Runs the full bytecode-intelligence pipeline against one chain.

    Each analysis builds its own signature cache and intermediate state;
    nothing is shared between runs.
    """

    def __init__(
        self,
        client,
        sender: Optional[str] = CALL_SENDER,
        lookups: Optional[Sequence[SignatureLookup]] = None,
        multicall_address: str = DEFAULT_MULTICALL3_ADDRESS,
        max_concurrent_calls: int = MAX_CONCURRENT_CALLS,
    ):
        self.client = client
        self.sender = sender
        self.lookups = lookups
        self.multicall_address = multicall_address
        self.max_concurrent_calls = max_concurrent_calls

    def _invoke_batch(self, calls: List[CallRequest]) -> List[CallOutcome]:
        try:
            results = BatchInvoker(self.client, self.multicall_address).invoke_all(calls)
        except Exception as e:
            reason = normalize_revert_reason(error_text(e))
            logger.warning(f"Aggregator call to {self.multicall_address} failed: {type(e).__name__}: {reason}")
            return batch_results_to_outcomes(calls, [], revert_reason=reason)
        return batch_results_to_outcomes(calls, results)

    async def _invoke_async(self, calls: List[CallRequest], use_batch: bool) -> List[CallOutcome]:
        if use_batch:
            return await asyncio.to_thread(self._invoke_batch, calls)
        invoker = ParallelInvoker(self.client, sender=self.sender, max_concurrent=self.max_concurrent_calls)
        return await invoker.invoke_all_async(calls)

    async def analyze_async(
        self, address: str, resolve_proxy: bool = False, use_batch: bool = False
    ) -> AnalysisReport:
        """
        Analyze a deployed contract without ABI or source.

        Blocking RPC and lookup work runs in worker threads, so this is safe
        to await from a running event loop.

        Args:
            address: Contract address
            resolve_proxy: Resolve an EIP-1967 proxy and analyze its implementation
            use_batch: Use the Multicall3 aggregator instead of parallel eth_calls
                       (no revert reasons on this path)

        Returns:
            AnalysisReport; `is_contract` is False when there is no code

        Raises:
            InputError: If the address is invalid
            AnalysisError: On an unexpected failure, with the partial report attached
        """
        checksum = validate_evm_address(address)
        if not checksum:
            raise InputError(f"Invalid EVM address: {address!r}")

        state: Dict = {"address": checksum, "target_address": checksum}
        try:
            return await self._run(state, resolve_proxy, use_batch)
        except InputError:
            raise
        except Exception as e:
            logger.error(f"Analysis of {checksum} failed: {type(e).__name__}: {e}")
            raise AnalysisError(f"Analysis of {checksum} failed: {e}", partial_report=AnalysisReport(**state)) from e

    def analyze(self, address: str, resolve_proxy: bool = False, use_batch: bool = False) -> AnalysisReport:
        """Synchronous wrapper running `analyze_async` with asyncio.run()."""
        return asyncio.run(self.analyze_async(address, resolve_proxy=resolve_proxy, use_batch=use_batch))

    def _prepare(self, state: Dict, resolve_proxy: bool) -> List[CallRequest]:
        """Locate the target code, extract and resolve selectors; returns the calls to make."""
        address = state["address"]
        bytecode = None

        if resolve_proxy:
            proxy: ProxyResolution = ProxyResolver(self.client).resolve(address)
            state["proxy"] = proxy
            if proxy.is_proxy:
                state["target_address"] = proxy.implementation_address
                bytecode = bytes.fromhex(proxy.implementation_bytecode[2:])

        target = state["target_address"]
        if bytecode is None:
            bytecode = self.client.get_code(target)

        if not bytecode:
            logger.info(f"{target} is not a contract (no code)")
            state["is_contract"] = False
            return []

        state["bytecode_size"] = len(bytecode)
        selectors = scan(bytecode)
        state["selector_count"] = len(selectors)
        logger.info(f"{target}: {len(bytecode)} bytes, {len(selectors)} selectors")

        resolver = SignatureResolver(lookups=self.lookups, cache={})
        signatures: Dict[str, SignatureInfo] = {}
        for selector in selectors:
            signatures[selector] = classify(selector, resolver.resolve(selector))
        state["signatures"] = signatures

        calls = [CallRequest(target=target, calldata=s) for s, info in signatures.items() if info.is_callable]
        logger.info(f"{len(calls)} callable selectors, {len(signatures) - len(calls)} require arguments")
        return calls

    async def _run(self, state: Dict, resolve_proxy: bool, use_batch: bool) -> AnalysisReport:
        calls = await asyncio.to_thread(self._prepare, state, resolve_proxy)

        outcomes = await self._invoke_async(calls, use_batch) if calls else []
        state["outcomes"] = {outcome.selector: outcome for outcome in outcomes}
        state["decoded"] = {o.selector: decode(o.return_data) for o in outcomes if o.success}

        return AnalysisReport(**state)
