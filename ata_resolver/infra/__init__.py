"""
Infrastructure layer for the token account resolver

Provides:
- RpcClient: HTTP RPC wrapper with endpoint fallback
- AccountStateFetcher: Chain reader protocol used by the resolver
- RpcAccountFetcher: RpcClient-backed chain reader
"""

from .rpc import RpcClient, RpcClientConfig
from .fetcher import (
    AccountStateFetcher,
    RpcAccountFetcher,
    parse_account_state,
    detect_token_programs,
)

__all__ = [
    "RpcClient",
    "RpcClientConfig",
    "AccountStateFetcher",
    "RpcAccountFetcher",
    "parse_account_state",
    "detect_token_programs",
]
