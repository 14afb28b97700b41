"""
Functional modules

Provides high-level operations:
- TokenAccountsModule: Token account resolution, wrapping, transfers
"""

from .token_accounts import TokenAccountsModule

__all__ = [
    "TokenAccountsModule",
]
