"""
Token transfer and wrapped SOL unwrap helpers built on the resolver
"""

import logging
from typing import Callable, List, Optional, Union

from solders.instruction import Instruction
from solders.pubkey import Pubkey

from .address import derive_canonical, is_off_curve
from .assembler import ResolverConfig, resolve
from .instructions import (
    build_transfer_instruction,
    build_transfer_checked_instruction,
    build_close_account_instruction,
)
from ..constants import NATIVE_MINT
from ..errors import InvalidStrategyForMint, OffCurveOwnerDisallowed
from ..infra.fetcher import AccountStateFetcher, detect_token_programs
from ..types import (
    ResolutionPlan,
    TokenProgram,
    WrappingStrategy,
    to_pubkey,
    is_native_mint,
    is_native_mint_2022,
)

logger = logging.getLogger(__name__)


def build_send_tokens_instructions(
    fetcher: AccountStateFetcher,
    source_wallet: Union[str, Pubkey],
    destination_wallet: Union[str, Pubkey],
    mint: Union[str, Pubkey],
    amount: int,
    decimals: int,
    token_program: Optional[Union[str, Pubkey]] = None,
    payer: Optional[Union[str, Pubkey]] = None,
    allow_off_curve_source: bool = False,
    funding_amount_provider: Optional[Callable[[], int]] = None,
) -> ResolutionPlan:
    """
    Build instructions that send tokens from one wallet to another.

    SOL is sent with a plain system transfer. For SPL tokens the
    destination's associated account is created idempotently if missing,
    then transfer_checked moves the tokens from the source's associated
    account. Transfer hook extra accounts are not resolved.

    Args:
        fetcher: Chain reader
        source_wallet: Sending wallet (signs the transfer)
        destination_wallet: Receiving wallet, may be a PDA
        mint: Token mint
        amount: Amount in base units (must be > 0)
        decimals: Mint decimals for transfer_checked
        token_program: Token program of the mint (read from chain if None)
        payer: Pays for the destination account (defaults to source wallet)
        allow_off_curve_source: Allow a PDA as the source wallet
        funding_amount_provider: Passed through to resolve()

    Returns:
        ResolutionPlan whose address is the destination token account
        (the destination wallet for SOL)

    Raises:
        InvalidStrategyForMint: Zero amount or Token-2022 native mint
        OffCurveOwnerDisallowed: Source is a PDA and not allowed
        OwnershipChanged: Destination account is owned by someone else
    """
    source = to_pubkey(source_wallet)
    destination = to_pubkey(destination_wallet)
    mint = to_pubkey(mint)

    if amount <= 0:
        raise InvalidStrategyForMint.invalid_amount(str(mint), amount)
    if is_native_mint_2022(mint):
        raise InvalidStrategyForMint.unsupported_mint(str(mint))

    # SOL is not an SPL token, send lamports directly
    if is_native_mint(mint):
        plan = ResolutionPlan.existing(destination, TokenProgram.TOKEN.pubkey)
        plan.instructions.append(build_transfer_instruction(source, destination, amount))
        return plan

    if is_off_curve(source) and not allow_off_curve_source:
        raise OffCurveOwnerDisallowed(str(source))

    if token_program is None:
        token_program = detect_token_programs(fetcher, [mint])[0]
    token_program = to_pubkey(token_program)

    source_account = derive_canonical(mint, source, token_program)
    plan = resolve(
        fetcher,
        destination,
        mint,
        token_program=token_program,
        funding_amount_provider=funding_amount_provider,
        payer=payer if payer is not None else source,
        config=ResolverConfig(
            idempotent=True,
            allow_off_curve_owner=True,
            wrapping_strategy=WrappingStrategy.ASSOCIATED,
        ),
    )

    plan.instructions.append(build_transfer_checked_instruction(
        source_account,
        mint,
        plan.address,
        source,
        amount,
        decimals,
        token_program,
    ))

    logger.debug(f"Send {amount} of {mint}: {source_account} -> {plan.address}")
    return plan


def build_unwrap_instructions(
    owner: Union[str, Pubkey],
    destination: Optional[Union[str, Pubkey]] = None,
) -> List[Instruction]:
    """
    Build instructions to unwrap all WSOL back to SOL.

    Closes the owner's wrapped SOL associated account and returns every
    lamport in it to destination (defaults to owner).
    """
    owner = to_pubkey(owner)
    destination = to_pubkey(destination) if destination is not None else owner
    token_program = TokenProgram.TOKEN.pubkey

    # WSOL always uses Tokenkeg
    wsol_ata = derive_canonical(Pubkey.from_string(NATIVE_MINT), owner, token_program)

    return [build_close_account_instruction(wsol_ata, destination, owner, token_program)]
