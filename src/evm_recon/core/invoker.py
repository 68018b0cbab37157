"""Concurrent read-only calls with per-call failure isolation."""

import asyncio
import logging
import re
import time
from typing import List, Optional, Sequence

from ..config import MAX_CONCURRENT_CALLS
from ..models import CallOutcome, CallRequest

logger = logging.getLogger(__name__)

EXECUTION_REVERTED = "execution reverted"

_HEX_PAYLOAD = re.compile(r"0x[0-9a-fA-F]*")
_EDGE_SEPARATORS = re.compile(r"^[:\s]+|[:\s]+$")


def normalize_revert_reason(text: Optional[str]) -> str:
    """
    Turn raw provider error text into a short human-readable revert reason.

    - embedded hex payloads are removed
    - a leading "execution reverted" is dropped, with its separators
    - empty text becomes "execution reverted"
    - fragments of 10 characters or fewer are prefixed with "execution reverted: "

    Examples:
        "execution reverted: 0xdeadbeef Some reason" -> "Some reason"
        "" -> "execution reverted"
        "ab" -> "execution reverted: ab"
    """
    if not text:
        return EXECUTION_REVERTED

    reason = _HEX_PAYLOAD.sub("", text).strip()
    if reason.lower().startswith(EXECUTION_REVERTED):
        reason = reason[len(EXECUTION_REVERTED):]
    reason = _EDGE_SEPARATORS.sub("", reason)

    if not reason:
        return EXECUTION_REVERTED
    if len(reason) <= 10:
        return f"{EXECUTION_REVERTED}: {reason}"
    return reason


def error_text(error: BaseException) -> str:
    """Best-effort detail text from a web3/provider/transport exception."""
    message = getattr(error, "message", None)
    if isinstance(message, str) and message:
        return message
    for arg in error.args:
        if isinstance(arg, str):
            return arg
        if isinstance(arg, dict) and isinstance(arg.get("message"), str):
            return arg["message"]
    return str(error)


class ParallelInvoker:
    """
    Issues independent eth_calls concurrently.

    Outcomes come back in input order regardless of completion order, and a
    failing call never affects its siblings.
    """

    def __init__(self, client, sender: Optional[str] = None, max_concurrent: int = MAX_CONCURRENT_CALLS):
        self.client = client
        self.sender = sender
        self.max_concurrent = max(1, max_concurrent)

    def _call_once(self, request: CallRequest) -> CallOutcome:
        selector = request.calldata[:10].lower()
        try:
            data = self.client.call(request.target, request.calldata, sender=self.sender)
        except Exception as e:
            reason = normalize_revert_reason(error_text(e))
            logger.debug(f"Call {selector} on {request.target} failed: {type(e).__name__}: {reason}")
            return CallOutcome(selector=selector, success=False, return_data="0x", revert_reason=reason)

        return CallOutcome(selector=selector, success=True, return_data="0x" + bytes(data).hex())

    async def _invoke_one(self, request: CallRequest, semaphore: asyncio.Semaphore) -> CallOutcome:
        async with semaphore:
            return await asyncio.to_thread(self._call_once, request)

    async def invoke_all_async(self, calls: Sequence[CallRequest]) -> List[CallOutcome]:
        """
        Execute all calls concurrently, bounded by `max_concurrent`.

        Args:
            calls: Ordered call requests

        Returns:
            One CallOutcome per request, in the same order as `calls`
        """
        if not calls:
            return []

        start_time = time.time()
        semaphore = asyncio.Semaphore(self.max_concurrent)
        coroutines = [self._invoke_one(request, semaphore) for request in calls]
        results = await asyncio.gather(*coroutines, return_exceptions=True)

        outcomes = []
        for request, result in zip(calls, results):
            if isinstance(result, BaseException):
                logger.error(f"Call {request.calldata[:10]} raised unexpected exception: {result}")
                result = CallOutcome(
                    selector=request.calldata[:10].lower(),
                    success=False,
                    revert_reason=normalize_revert_reason(error_text(result)),
                )
            outcomes.append(result)

        successful = sum(1 for o in outcomes if o.success)
        logger.info(
            f"Invoked {len(outcomes)} calls in {time.time() - start_time:.1f}s: "
            f"{successful} succeeded, {len(outcomes) - successful} failed"
        )
        return outcomes

    def invoke_all(self, calls: Sequence[CallRequest]) -> List[CallOutcome]:
        """Synchronous wrapper running `invoke_all_async` with asyncio.run()."""
        return asyncio.run(self.invoke_all_async(calls))
