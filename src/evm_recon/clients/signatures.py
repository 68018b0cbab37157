"""Selector -> text signature lookups against public signature databases."""

import logging
from typing import Callable, Dict, List, Optional, Sequence

import requests

from ..config import FOURBYTE_LOOKUP_URL, LOOKUP_TIMEOUT, OPENCHAIN_LOOKUP_URL

logger = logging.getLogger(__name__)

# A lookup returns the signature, or the input selector unchanged when unknown
SignatureLookup = Callable[[str], str]


def lookup_openchain(selector: str, timeout: int = LOOKUP_TIMEOUT) -> str:
    """
    Fetch a function signature from the OpenChain/Sourcify signature database.

    Args:
        selector: Function selector (e.g. '0xa9059cbb')
        timeout: Request timeout in seconds

    Returns:
        Text signature, or the selector itself if not found or on error
    """
    try:
        response = requests.get(
            OPENCHAIN_LOOKUP_URL,
            params={"function": selector, "filter": "true"},
            timeout=timeout,
        )
        response.raise_for_status()
        data = response.json()
        matches = (data.get("result") or {}).get("function", {}).get(selector)
        if matches:
            return matches[0]["name"]
    except Exception as e:
        logger.debug(f"OpenChain lookup failed for {selector}: {e}")
    return selector


def lookup_fourbyte(selector: str, timeout: int = LOOKUP_TIMEOUT) -> str:
    """
    Fetch a function signature from 4byte.directory.

    Returns:
        Text signature, or the selector itself if not found or on error
    """
    try:
        response = requests.get(FOURBYTE_LOOKUP_URL, params={"hex_signature": selector}, timeout=timeout)
        response.raise_for_status()
        data = response.json()
        results = data.get("results") or []
        if results:
            return results[0]["text_signature"]
    except Exception as e:
        logger.debug(f"4byte lookup failed for {selector}: {e}")
    return selector


DEFAULT_LOOKUPS: List[SignatureLookup] = [lookup_openchain, lookup_fourbyte]


class SignatureResolver:
    """
    Resolves selectors through a chain of lookups, first hit wins.

    The cache is owned by the caller and is meant to live for one analysis
    run only.
    """

    def __init__(
        self,
        lookups: Optional[Sequence[SignatureLookup]] = None,
        cache: Optional[Dict[str, Optional[str]]] = None,
    ):
        self.lookups = list(lookups) if lookups is not None else list(DEFAULT_LOOKUPS)
        self.cache = cache if cache is not None else {}

    def resolve(self, selector: str) -> Optional[str]:
        if selector in self.cache:
            return self.cache[selector]

        signature = None
        for lookup in self.lookups:
            try:
                result = lookup(selector)
            except Exception as e:
                logger.warning(f"Signature lookup {getattr(lookup, '__name__', lookup)} raised for {selector}: {e}")
                continue
            if result and result != selector:
                signature = result
                break

        if signature:
            logger.debug(f"Resolved {selector} -> {signature}")
        else:
            logger.debug(f"No signature found for {selector}")
        self.cache[selector] = signature
        return signature

    def resolve_all(self, selectors: Sequence[str]) -> Dict[str, Optional[str]]:
        return {selector: self.resolve(selector) for selector in selectors}
