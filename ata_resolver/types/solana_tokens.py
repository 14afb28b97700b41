"""
Token Program Registry

Single source of truth for token program identities and native mint checks.
"""

from enum import Enum
from typing import Dict, Optional, Union

from solders.pubkey import Pubkey

from ..constants import (
    TOKEN_PROGRAM_ID,
    TOKEN_2022_PROGRAM_ID,
    NATIVE_MINT,
    NATIVE_MINT_2022,
)


class TokenProgram(Enum):
    """Token program implementations that can govern a mint"""
    TOKEN = TOKEN_PROGRAM_ID
    TOKEN_2022 = TOKEN_2022_PROGRAM_ID

    @property
    def pubkey(self) -> Pubkey:
        return Pubkey.from_string(self.value)

    @classmethod
    def from_pubkey(cls, program: Union[str, Pubkey]) -> Optional["TokenProgram"]:
        """Map a program id to a TokenProgram, None if it is not a token program"""
        return _PROGRAM_LOOKUP.get(str(program))


_PROGRAM_LOOKUP: Dict[str, TokenProgram] = {p.value: p for p in TokenProgram}


def to_pubkey(value: Union[str, Pubkey]) -> Pubkey:
    """Accept base58 strings at the public surface"""
    if isinstance(value, Pubkey):
        return value
    return Pubkey.from_string(value.strip())


def is_native_mint(mint: Union[str, Pubkey]) -> bool:
    """Check if mint is the classic wrapped SOL mint"""
    return str(mint) == NATIVE_MINT


def is_native_mint_2022(mint: Union[str, Pubkey]) -> bool:
    """Check if mint is the Token-2022 wrapped SOL mint (unsupported)"""
    return str(mint) == NATIVE_MINT_2022


def is_token_program(program: Union[str, Pubkey]) -> bool:
    return TokenProgram.from_pubkey(program) is not None
