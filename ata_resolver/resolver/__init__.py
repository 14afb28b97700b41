"""
Token account resolution

Provides:
- Address derivation (canonical, seeded, ephemeral)
- Ownership validation
- Wrapped SOL strategy selection
- resolve / resolve_many instruction assembly
"""

from .address import (
    derive_canonical,
    derive_seeded,
    make_seed,
    new_ephemeral_keypair,
    is_off_curve,
)
from .validator import validate, ensure_valid
from .wrapping import WrapRequest, WRAPPING_TABLE, effective_strategy, select_wrapping
from .assembler import ResolverConfig, resolve, resolve_many
from .transfer import build_send_tokens_instructions, build_unwrap_instructions

__all__ = [
    "derive_canonical",
    "derive_seeded",
    "make_seed",
    "new_ephemeral_keypair",
    "is_off_curve",
    "validate",
    "ensure_valid",
    "WrapRequest",
    "WRAPPING_TABLE",
    "effective_strategy",
    "select_wrapping",
    "ResolverConfig",
    "resolve",
    "resolve_many",
    "build_send_tokens_instructions",
    "build_unwrap_instructions",
]
