"""
ATA Resolver - Token account resolution and wrapped SOL handling for Solana

Builds the instructions needed before a token account can be used:
- Associated token account creation (plain or idempotent)
- Wrapped SOL funding through associated, keypair or seeded accounts
- Cleanup instructions that unwrap temporary accounts
- Ownership and off-curve owner checks before anything is built

Nothing is signed or submitted here.
"""

from .modules import TokenAccountsModule
from .resolver import (
    ResolverConfig,
    resolve,
    resolve_many,
    build_send_tokens_instructions,
    build_unwrap_instructions,
    derive_canonical,
)
from .infra import RpcClient, RpcClientConfig, RpcAccountFetcher, AccountStateFetcher
from .types import (
    AccountState,
    BatchEntry,
    ResolutionPlan,
    WrappingStrategy,
    TokenProgram,
)
from .errors import (
    ResolverError,
    TransportError,
    RpcError,
    OffCurveOwnerDisallowed,
    OwnershipChanged,
    InvalidStrategyForMint,
    ConfigurationError,
    ErrorCode,
)
from .constants import NATIVE_MINT, NATIVE_MINT_2022, TOKEN_PROGRAM_ID, TOKEN_2022_PROGRAM_ID

__all__ = [
    # Facade
    "TokenAccountsModule",
    # Resolution
    "ResolverConfig",
    "resolve",
    "resolve_many",
    "build_send_tokens_instructions",
    "build_unwrap_instructions",
    "derive_canonical",
    # Chain reader
    "RpcClient",
    "RpcClientConfig",
    "RpcAccountFetcher",
    "AccountStateFetcher",
    # Types
    "AccountState",
    "BatchEntry",
    "ResolutionPlan",
    "WrappingStrategy",
    "TokenProgram",
    # Errors
    "ResolverError",
    "TransportError",
    "RpcError",
    "OffCurveOwnerDisallowed",
    "OwnershipChanged",
    "InvalidStrategyForMint",
    "ConfigurationError",
    "ErrorCode",
    # Constants
    "NATIVE_MINT",
    "NATIVE_MINT_2022",
    "TOKEN_PROGRAM_ID",
    "TOKEN_2022_PROGRAM_ID",
]
