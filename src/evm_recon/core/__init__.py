"""Analysis pipeline package."""

from .address import validate_evm_address, word_to_address
from .decoder import decode
from .engine import ContractAnalyzer
from .invoker import ParallelInvoker, normalize_revert_reason
from .multicall import BatchInvoker, batch_results_to_outcomes
from .network import check_contract_in_network, probe_networks
from .partition import classify, extract_function_name, is_callable_signature
from .proxy import ProxyResolver

__all__ = [
    "BatchInvoker",
    "ContractAnalyzer",
    "ParallelInvoker",
    "ProxyResolver",
    "batch_results_to_outcomes",
    "check_contract_in_network",
    "classify",
    "decode",
    "extract_function_name",
    "is_callable_signature",
    "normalize_revert_reason",
    "probe_networks",
    "validate_evm_address",
    "word_to_address",
]
