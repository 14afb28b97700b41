"""
Address derivation

Pure functions for the canonical associated token account and the
alternate addresses used by non-canonical wrapping strategies.
"""

import time
from typing import Optional

from solders.keypair import Keypair
from solders.pubkey import Pubkey

from ..constants import (
    ASSOCIATED_TOKEN_PROGRAM_ID,
    TOKEN_PROGRAM_ID,
    MAX_SEED_LENGTH,
)


def derive_canonical(
    mint: Pubkey,
    owner: Pubkey,
    token_program: Optional[Pubkey] = None,
) -> Pubkey:
    """
    Get associated token account address.

    Works for off-curve owners too; whether such an owner is acceptable is
    decided by the validator, not here.

    Args:
        mint: Token mint
        owner: Wallet owner
        token_program: Token program (defaults to Tokenkeg)

    Returns:
        ATA address
    """
    ata_program = Pubkey.from_string(ASSOCIATED_TOKEN_PROGRAM_ID)
    if token_program is None:
        token_program = Pubkey.from_string(TOKEN_PROGRAM_ID)

    seeds = [
        bytes(owner),
        bytes(token_program),
        bytes(mint),
    ]

    address, _ = Pubkey.find_program_address(seeds, ata_program)
    return address


def derive_seeded(
    owner: Pubkey,
    seed: str,
    program_id: Optional[Pubkey] = None,
) -> Pubkey:
    """
    Derive sha256(owner || seed || program_id), the create_account_with_seed address.

    Raises:
        ValueError: If the seed is longer than 32 bytes
    """
    if len(seed.encode("utf-8")) > MAX_SEED_LENGTH:
        raise ValueError(f"Seed longer than {MAX_SEED_LENGTH} bytes: {seed!r}")
    if program_id is None:
        program_id = Pubkey.from_string(TOKEN_PROGRAM_ID)
    return Pubkey.create_with_seed(owner, seed, program_id)


def make_seed() -> str:
    """Millisecond timestamp padded with random base58, unique per call"""
    seed = str(time.time_ns() // 1_000_000) + str(new_ephemeral_keypair().pubkey())
    return seed[:MAX_SEED_LENGTH]


def new_ephemeral_keypair() -> Keypair:
    """A fresh identity on every call"""
    return Keypair()


def is_off_curve(address: Pubkey) -> bool:
    """Program derived addresses are off the ed25519 curve and cannot sign"""
    return not address.is_on_curve()
