"""
Common type definitions
"""

from dataclasses import dataclass
from enum import Enum
from typing import Optional, Union

from solders.pubkey import Pubkey

from .solana_tokens import to_pubkey


class WrappingStrategy(Enum):
    """
    How the temporary wrapped SOL account is created

    NONE: no creation or funding, the canonical address is returned as-is
    ASSOCIATED: the owner's associated token account, funded by transfer + sync
    EPHEMERAL_KEYPAIR: fresh keypair account, funded by transfer + sync
    SEEDED: account derived from the owner and a seed, funded by transfer + sync
    PREFUNDED_KEYPAIR: fresh keypair account created with the amount already in it
    """
    NONE = "none"
    ASSOCIATED = "associated"
    EPHEMERAL_KEYPAIR = "ephemeral-keypair"
    SEEDED = "seeded"
    PREFUNDED_KEYPAIR = "prefunded-keypair"

    @classmethod
    def from_string(cls, value: str) -> "WrappingStrategy":
        """Convert string to WrappingStrategy (case-insensitive, accepts legacy names)"""
        key = value.strip().lower()
        if key in _ALIASES:
            return _ALIASES[key]
        for strategy in cls:
            if strategy.value == key:
                return strategy
        from ..errors import ConfigurationError
        raise ConfigurationError.invalid(
            "wrapping_strategy",
            f"Unknown strategy: {value}. Supported: {', '.join(s.value for s in cls)}",
        )

    @property
    def uses_fresh_address(self) -> bool:
        """Whether the strategy creates a new, non-canonical account"""
        return self in (
            WrappingStrategy.EPHEMERAL_KEYPAIR,
            WrappingStrategy.SEEDED,
            WrappingStrategy.PREFUNDED_KEYPAIR,
        )


_ALIASES = {
    "ata": WrappingStrategy.ASSOCIATED,
    "keypair": WrappingStrategy.EPHEMERAL_KEYPAIR,
    "withseed": WrappingStrategy.SEEDED,
    "seed": WrappingStrategy.SEEDED,
}


@dataclass(frozen=True)
class AccountState:
    """
    Observed on-chain snapshot of one address

    Attributes:
        exists: Whether any account lives at the address
        owner: Token account authority (None if missing or not a token account)
        owner_program: Program that owns the account
        lamports: Account balance at query time
    """
    exists: bool
    owner: Optional[Pubkey] = None
    owner_program: Optional[Pubkey] = None
    lamports: int = 0

    @classmethod
    def missing(cls) -> "AccountState":
        return cls(exists=False)


@dataclass(frozen=True)
class BatchEntry:
    """
    One requested resolution inside a batch

    Attributes:
        mint: Token mint
        funding_amount: Lamports to wrap (native mint only)
        token_program: Token program of the mint (detected from chain if None)
    """
    mint: Pubkey
    funding_amount: int = 0
    token_program: Optional[Pubkey] = None

    @classmethod
    def of(
        cls,
        mint: Union[str, Pubkey],
        funding_amount: int = 0,
        token_program: Optional[Union[str, Pubkey]] = None,
    ) -> "BatchEntry":
        return cls(
            mint=to_pubkey(mint),
            funding_amount=funding_amount,
            token_program=to_pubkey(token_program) if token_program is not None else None,
        )
