"""Callable / requires-arguments classification of resolved selectors."""

from typing import Optional

from ..models import SignatureInfo


def is_callable_signature(signature: Optional[str]) -> bool:
    """
    Unknown signatures are treated as callable: the call is attempted and an
    argument-expecting function simply fails in isolation.
    """
    if not signature:
        return True
    return signature.endswith("()")


def extract_function_name(signature: str) -> str:
    """'transfer(address,uint256)' -> 'transfer'; text without '(' is returned as-is."""
    if "(" in signature:
        return signature.split("(", 1)[0]
    return signature


def classify(selector: str, signature: Optional[str]) -> SignatureInfo:
    return SignatureInfo(
        selector=selector,
        signature=signature,
        function_name=extract_function_name(signature) if signature else None,
        is_callable=is_callable_signature(signature),
    )
