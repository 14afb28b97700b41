"""
Type definitions for the token account resolver
"""

from .common import AccountState, BatchEntry, WrappingStrategy
from .plan import ResolutionPlan
from .solana_tokens import (
    TokenProgram,
    to_pubkey,
    is_native_mint,
    is_native_mint_2022,
    is_token_program,
)

__all__ = [
    "AccountState",
    "BatchEntry",
    "WrappingStrategy",
    "ResolutionPlan",
    "TokenProgram",
    "to_pubkey",
    "is_native_mint",
    "is_native_mint_2022",
    "is_token_program",
]
