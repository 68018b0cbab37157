"""Single round-trip batching through an on-chain Multicall3 aggregator."""

import logging
from typing import List, Sequence

from eth_utils import keccak
from web3 import Web3

from ..extraction.scanner import to_bytes
from ..models import BatchCallResult, CallOutcome, CallRequest
from .invoker import EXECUTION_REVERTED

logger = logging.getLogger(__name__)

TRY_AGGREGATE_SIGNATURE = "tryAggregate(bool,(address,bytes)[])"
TRY_AGGREGATE_SELECTOR = "0x" + keccak(text=TRY_AGGREGATE_SIGNATURE).hex()[:8]


class BatchInvoker:
    """
    Aggregates many calls into one `tryAggregate(false, calls)` eth_call.

    requireSuccess is always false, so one failing call does not abort the
    batch. The aggregator does not propagate revert data: callers needing
    revert reasons must use ParallelInvoker.
    """

    def __init__(self, client, aggregator_address: str):
        self.client = client
        self.aggregator_address = aggregator_address
        self.w3 = Web3()

    def encode(self, calls: Sequence[CallRequest]) -> str:
        encoded = self.w3.codec.encode(
            ["bool", "(address,bytes)[]"],
            [False, [(Web3.to_checksum_address(c.target), to_bytes(c.calldata)) for c in calls]],
        )
        return TRY_AGGREGATE_SELECTOR + encoded.hex()

    def decode(self, data: bytes) -> List[BatchCallResult]:
        (results,) = self.w3.codec.decode(["(bool,bytes)[]"], data)
        return [
            BatchCallResult(success=bool(success), return_data="0x" + bytes(return_data).hex())
            for success, return_data in results
        ]

    def invoke_all(self, calls: Sequence[CallRequest]) -> List[BatchCallResult]:
        """
        Execute all calls through the aggregator in one request.

        Args:
            calls: Ordered call requests

        Returns:
            One BatchCallResult per request in call order; empty when the
            aggregator returns no data
        """
        if not calls:
            return []

        logger.info(f"Batching {len(calls)} calls through aggregator {self.aggregator_address}")
        raw = self.client.call(self.aggregator_address, self.encode(calls))
        if not raw:
            logger.warning("Aggregator returned no data")
            return []

        results = self.decode(raw)
        logger.info(f"Aggregator returned {len(results)} results, {sum(r.success for r in results)} succeeded")
        return results


def batch_results_to_outcomes(
    calls: Sequence[CallRequest],
    results: Sequence[BatchCallResult],
    revert_reason: str = EXECUTION_REVERTED,
) -> List[CallOutcome]:
    """
    Adapt aggregator results to CallOutcomes; calls left without a result
    count as failures with `revert_reason`.
    """
    outcomes = []
    for index, request in enumerate(calls):
        selector = request.calldata[:10].lower()
        if index < len(results) and results[index].success:
            outcomes.append(CallOutcome(selector=selector, success=True, return_data=results[index].return_data))
        else:
            outcomes.append(CallOutcome(selector=selector, success=False, revert_reason=revert_reason))
    return outcomes
