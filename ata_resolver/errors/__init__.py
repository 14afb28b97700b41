"""
Error definitions for the token account resolver
"""

from .exceptions import (
    ErrorCode,
    ResolverError,
    TransportError,
    RpcError,
    OffCurveOwnerDisallowed,
    OwnershipChanged,
    InvalidStrategyForMint,
    ConfigurationError,
)

__all__ = [
    "ErrorCode",
    "ResolverError",
    "TransportError",
    "RpcError",
    "OffCurveOwnerDisallowed",
    "OwnershipChanged",
    "InvalidStrategyForMint",
    "ConfigurationError",
]
