"""
System, Token and Associated Token program instruction builders

Instruction data is encoded by hand (little-endian, bincode layout for the
system program) so no SPL client library is needed.
"""

import struct
from typing import List, Optional

from solders.instruction import Instruction, AccountMeta
from solders.pubkey import Pubkey

from ..constants import (
    ASSOCIATED_TOKEN_PROGRAM_ID,
    SYSTEM_PROGRAM_ID,
    RENT_SYSVAR_ID,
    TOKEN_PROGRAM_ID,
    ATA_IX_CREATE,
    ATA_IX_CREATE_IDEMPOTENT,
    SYSTEM_IX_CREATE_ACCOUNT,
    SYSTEM_IX_TRANSFER,
    SYSTEM_IX_CREATE_ACCOUNT_WITH_SEED,
    TOKEN_IX_INITIALIZE_ACCOUNT,
    TOKEN_IX_CLOSE_ACCOUNT,
    TOKEN_IX_TRANSFER_CHECKED,
    TOKEN_IX_SYNC_NATIVE,
)


def _token_program(token_program: Optional[Pubkey]) -> Pubkey:
    return token_program if token_program is not None else Pubkey.from_string(TOKEN_PROGRAM_ID)


def build_create_ata_instruction(
    payer: Pubkey,
    ata: Pubkey,
    owner: Pubkey,
    mint: Pubkey,
    token_program: Optional[Pubkey] = None,
    idempotent: bool = False,
) -> Instruction:
    """
    Build create_associated_token_account instruction.

    The idempotent variant succeeds if the account already exists at
    execution time; the plain variant fails in that case.

    Args:
        payer: Fee payer
        ata: Associated token account address
        owner: Account owner
        mint: Token mint
        token_program: Token program (defaults to Tokenkeg)
        idempotent: Use CreateIdempotent instead of Create

    Returns:
        Instruction to create ATA
    """
    accounts = [
        AccountMeta(payer, is_signer=True, is_writable=True),
        AccountMeta(ata, is_signer=False, is_writable=True),
        AccountMeta(owner, is_signer=False, is_writable=False),
        AccountMeta(mint, is_signer=False, is_writable=False),
        AccountMeta(Pubkey.from_string(SYSTEM_PROGRAM_ID), is_signer=False, is_writable=False),
        AccountMeta(_token_program(token_program), is_signer=False, is_writable=False),
    ]

    # Create: empty data, CreateIdempotent: single byte 1
    data = ATA_IX_CREATE_IDEMPOTENT if idempotent else ATA_IX_CREATE
    return Instruction(Pubkey.from_string(ASSOCIATED_TOKEN_PROGRAM_ID), data, accounts)


def build_transfer_instruction(
    source: Pubkey,
    destination: Pubkey,
    lamports: int,
) -> Instruction:
    """System transfer of lamports"""
    accounts = [
        AccountMeta(source, is_signer=True, is_writable=True),
        AccountMeta(destination, is_signer=False, is_writable=True),
    ]
    data = struct.pack("<I", SYSTEM_IX_TRANSFER) + struct.pack("<Q", lamports)
    return Instruction(Pubkey.from_string(SYSTEM_PROGRAM_ID), data, accounts)


def build_create_account_instruction(
    payer: Pubkey,
    new_account: Pubkey,
    lamports: int,
    space: int,
    program_id: Pubkey,
) -> Instruction:
    """
    System create_account. The new account must co-sign.
    """
    accounts = [
        AccountMeta(payer, is_signer=True, is_writable=True),
        AccountMeta(new_account, is_signer=True, is_writable=True),
    ]
    data = (
        struct.pack("<I", SYSTEM_IX_CREATE_ACCOUNT)
        + struct.pack("<Q", lamports)
        + struct.pack("<Q", space)
        + bytes(program_id)
    )
    return Instruction(Pubkey.from_string(SYSTEM_PROGRAM_ID), data, accounts)


def build_create_account_with_seed_instruction(
    payer: Pubkey,
    new_account: Pubkey,
    base: Pubkey,
    seed: str,
    lamports: int,
    space: int,
    program_id: Pubkey,
) -> Instruction:
    """
    System create_account_with_seed.

    The derived account does not sign; the base signs instead, and is only
    listed separately when it differs from the payer.
    """
    accounts = [
        AccountMeta(payer, is_signer=True, is_writable=True),
        AccountMeta(new_account, is_signer=False, is_writable=True),
    ]
    if base != payer:
        accounts.append(AccountMeta(base, is_signer=True, is_writable=False))

    seed_bytes = seed.encode("utf-8")
    data = (
        struct.pack("<I", SYSTEM_IX_CREATE_ACCOUNT_WITH_SEED)
        + bytes(base)
        + struct.pack("<Q", len(seed_bytes))  # bincode string length prefix
        + seed_bytes
        + struct.pack("<Q", lamports)
        + struct.pack("<Q", space)
        + bytes(program_id)
    )
    return Instruction(Pubkey.from_string(SYSTEM_PROGRAM_ID), data, accounts)


def build_initialize_account_instruction(
    account: Pubkey,
    mint: Pubkey,
    owner: Pubkey,
    token_program: Optional[Pubkey] = None,
) -> Instruction:
    """Token initialize_account (cmd=1)"""
    accounts = [
        AccountMeta(account, is_signer=False, is_writable=True),
        AccountMeta(mint, is_signer=False, is_writable=False),
        AccountMeta(owner, is_signer=False, is_writable=False),
        AccountMeta(Pubkey.from_string(RENT_SYSVAR_ID), is_signer=False, is_writable=False),
    ]
    return Instruction(_token_program(token_program), bytes([TOKEN_IX_INITIALIZE_ACCOUNT]), accounts)


def build_sync_native_instruction(
    account: Pubkey,
    token_program: Optional[Pubkey] = None,
) -> Instruction:
    """Token sync_native (cmd=17), brings the token amount in line with lamports"""
    accounts = [
        AccountMeta(account, is_signer=False, is_writable=True),
    ]
    return Instruction(_token_program(token_program), bytes([TOKEN_IX_SYNC_NATIVE]), accounts)


def build_close_account_instruction(
    account: Pubkey,
    destination: Pubkey,
    owner: Pubkey,
    token_program: Optional[Pubkey] = None,
) -> Instruction:
    """
    Token close_account (cmd=9)

    Closes the token account and returns its lamports to destination.
    """
    accounts = [
        AccountMeta(account, is_signer=False, is_writable=True),
        AccountMeta(destination, is_signer=False, is_writable=True),
        AccountMeta(owner, is_signer=True, is_writable=False),
    ]
    return Instruction(_token_program(token_program), bytes([TOKEN_IX_CLOSE_ACCOUNT]), accounts)


def build_transfer_checked_instruction(
    source: Pubkey,
    mint: Pubkey,
    destination: Pubkey,
    owner: Pubkey,
    amount: int,
    decimals: int,
    token_program: Optional[Pubkey] = None,
) -> Instruction:
    """Token transfer_checked (cmd=12)"""
    accounts = [
        AccountMeta(source, is_signer=False, is_writable=True),
        AccountMeta(mint, is_signer=False, is_writable=False),
        AccountMeta(destination, is_signer=False, is_writable=True),
        AccountMeta(owner, is_signer=True, is_writable=False),
    ]
    data = (
        bytes([TOKEN_IX_TRANSFER_CHECKED])
        + struct.pack("<Q", amount)
        + struct.pack("<B", decimals)
    )
    return Instruction(_token_program(token_program), data, accounts)


def build_fund_instructions(
    payer: Pubkey,
    account: Pubkey,
    amount_lamports: int,
    token_program: Optional[Pubkey] = None,
) -> List[Instruction]:
    """
    Transfer SOL into a wrapped SOL account and sync its token balance.
    """
    return [
        build_transfer_instruction(payer, account, amount_lamports),
        build_sync_native_instruction(account, token_program),
    ]
