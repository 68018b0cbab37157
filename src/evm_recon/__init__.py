"""Bytecode-level reconnaissance of deployed EVM contracts."""

from .core import ContractAnalyzer, ProxyResolver, decode, probe_networks
from .errors import AnalysisError, InputError
from .extraction import SelectorScanner, scan
from .models import AnalysisReport, CallOutcome, ProxyResolution, SignatureInfo

__all__ = [
    "AnalysisError",
    "AnalysisReport",
    "CallOutcome",
    "ContractAnalyzer",
    "InputError",
    "ProxyResolution",
    "ProxyResolver",
    "SelectorScanner",
    "SignatureInfo",
    "decode",
    "probe_networks",
    "scan",
]
