"""External service clients (chain RPC and signature databases)."""

from .rpc import ChainClient
from .signatures import SignatureResolver, lookup_fourbyte, lookup_openchain

__all__ = ["ChainClient", "SignatureResolver", "lookup_fourbyte", "lookup_openchain"]
