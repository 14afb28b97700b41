"""
Wrapped SOL strategy selection

Each WrappingStrategy maps to one builder in WRAPPING_TABLE. A builder
receives the request and the lazy funding-amount provider and returns a
complete ResolutionPlan (create -> fund -> sync, plus close as cleanup).
"""

import logging
from dataclasses import dataclass
from typing import Callable, Dict, Optional

from solders.pubkey import Pubkey

from .address import derive_seeded, make_seed, new_ephemeral_keypair
from .instructions import (
    build_create_ata_instruction,
    build_create_account_instruction,
    build_create_account_with_seed_instruction,
    build_initialize_account_instruction,
    build_close_account_instruction,
    build_fund_instructions,
)
from ..constants import NATIVE_MINT, TOKEN_ACCOUNT_SIZE
from ..errors import InvalidStrategyForMint
from ..types import ResolutionPlan, TokenProgram, WrappingStrategy

logger = logging.getLogger(__name__)

FundingAmountProvider = Callable[[], int]


@dataclass(frozen=True)
class WrapRequest:
    """
    Inputs for building a wrapped SOL plan

    Attributes:
        owner: Owner of the wrapped SOL account
        payer: Pays rent and provides the wrapped lamports
        unwrap_destination: Receives lamports when the account is closed
        canonical_address: Owner's wrapped SOL associated token account
        canonical_exists: Snapshot existence of canonical_address
        funding_amount: Lamports to wrap
        idempotent: Use the idempotent ATA create variant
        seed: Seed for the seeded strategy (generated per call if None)
    """
    owner: Pubkey
    payer: Pubkey
    unwrap_destination: Pubkey
    canonical_address: Pubkey
    canonical_exists: bool
    funding_amount: int
    idempotent: bool = False
    seed: Optional[str] = None


WrapBuilder = Callable[[WrapRequest, FundingAmountProvider], ResolutionPlan]


def _native_mint() -> Pubkey:
    return Pubkey.from_string(NATIVE_MINT)


def _token_program() -> Pubkey:
    # Wrapped SOL always lives under Tokenkeg
    return TokenProgram.TOKEN.pubkey


def _close(request: WrapRequest, account: Pubkey):
    return build_close_account_instruction(
        account,
        request.unwrap_destination,
        request.owner,
        _token_program(),
    )


def _wrap_none(request: WrapRequest, provider: FundingAmountProvider) -> ResolutionPlan:
    return ResolutionPlan.existing(request.canonical_address, _token_program())


def _wrap_associated(request: WrapRequest, provider: FundingAmountProvider) -> ResolutionPlan:
    # The ATA program computes rent itself, so provider is never needed here
    address = request.canonical_address
    plan = ResolutionPlan.existing(address, _token_program())

    if not request.canonical_exists:
        plan.instructions.append(build_create_ata_instruction(
            request.payer,
            address,
            request.owner,
            _native_mint(),
            _token_program(),
            idempotent=request.idempotent,
        ))
        # Only an account this plan creates is temporary
        plan.cleanup_instructions.append(_close(request, address))

    if request.funding_amount > 0:
        plan.instructions.extend(build_fund_instructions(
            request.payer,
            address,
            request.funding_amount,
            _token_program(),
        ))

    return plan


def _wrap_ephemeral_keypair(request: WrapRequest, provider: FundingAmountProvider) -> ResolutionPlan:
    temp_account = new_ephemeral_keypair()
    address = temp_account.pubkey()
    rent_exempt = provider()

    instructions = [
        build_create_account_instruction(
            request.payer,
            address,
            rent_exempt,
            TOKEN_ACCOUNT_SIZE,
            _token_program(),
        ),
        build_initialize_account_instruction(address, _native_mint(), request.owner, _token_program()),
    ]
    instructions.extend(build_fund_instructions(
        request.payer,
        address,
        request.funding_amount,
        _token_program(),
    ))

    return ResolutionPlan(
        address=address,
        token_program=_token_program(),
        instructions=instructions,
        cleanup_instructions=[_close(request, address)],
        signers=[temp_account],
    )


def _wrap_seeded(request: WrapRequest, provider: FundingAmountProvider) -> ResolutionPlan:
    seed = request.seed if request.seed is not None else make_seed()
    address = derive_seeded(request.owner, seed, _token_program())
    rent_exempt = provider()

    instructions = [
        build_create_account_with_seed_instruction(
            request.payer,
            address,
            request.owner,
            seed,
            rent_exempt,
            TOKEN_ACCOUNT_SIZE,
            _token_program(),
        ),
        build_initialize_account_instruction(address, _native_mint(), request.owner, _token_program()),
    ]
    instructions.extend(build_fund_instructions(
        request.payer,
        address,
        request.funding_amount,
        _token_program(),
    ))

    return ResolutionPlan(
        address=address,
        token_program=_token_program(),
        instructions=instructions,
        cleanup_instructions=[_close(request, address)],
        signers=[],
    )


def _wrap_prefunded_keypair(request: WrapRequest, provider: FundingAmountProvider) -> ResolutionPlan:
    # Amount rides along with the allocation; sync is implied by initialize
    temp_account = new_ephemeral_keypair()
    address = temp_account.pubkey()
    rent_exempt = provider()

    instructions = [
        build_create_account_instruction(
            request.payer,
            address,
            request.funding_amount + rent_exempt,
            TOKEN_ACCOUNT_SIZE,
            _token_program(),
        ),
        build_initialize_account_instruction(address, _native_mint(), request.owner, _token_program()),
    ]

    return ResolutionPlan(
        address=address,
        token_program=_token_program(),
        instructions=instructions,
        cleanup_instructions=[_close(request, address)],
        signers=[temp_account],
    )


WRAPPING_TABLE: Dict[WrappingStrategy, WrapBuilder] = {
    WrappingStrategy.NONE: _wrap_none,
    WrappingStrategy.ASSOCIATED: _wrap_associated,
    WrappingStrategy.EPHEMERAL_KEYPAIR: _wrap_ephemeral_keypair,
    WrappingStrategy.SEEDED: _wrap_seeded,
    WrappingStrategy.PREFUNDED_KEYPAIR: _wrap_prefunded_keypair,
}


def effective_strategy(strategy: WrappingStrategy, funding_amount: int) -> WrappingStrategy:
    """
    Strategy actually used for a request

    Fresh-address strategies need rent-exempt lamports from the provider.
    With nothing to wrap, the associated account is created instead so the
    provider is never consulted.

    Raises:
        InvalidStrategyForMint: Negative amount, or funding with NONE
    """
    if funding_amount < 0:
        raise InvalidStrategyForMint.invalid_amount(NATIVE_MINT, funding_amount)
    if strategy == WrappingStrategy.NONE and funding_amount > 0:
        raise InvalidStrategyForMint.funding_not_supported(NATIVE_MINT, strategy.value)
    if strategy.uses_fresh_address and funding_amount == 0:
        return WrappingStrategy.ASSOCIATED
    return strategy


def select_wrapping(
    strategy: WrappingStrategy,
    request: WrapRequest,
    funding_amount_provider: FundingAmountProvider,
) -> ResolutionPlan:
    """
    Build the wrapped SOL plan for a request

    Args:
        strategy: Requested wrapping strategy
        request: Wrap inputs (owner, payer, snapshot existence, amount)
        funding_amount_provider: Zero-arg callable returning rent-exempt lamports,
            called at most once and only by fresh-address strategies

    Returns:
        ResolutionPlan for the wrapped SOL account
    """
    chosen = effective_strategy(strategy, request.funding_amount)
    if chosen != strategy:
        logger.debug(f"Nothing to wrap, using {chosen.value} instead of {strategy.value}")

    plan = WRAPPING_TABLE[chosen](request, funding_amount_provider)
    logger.debug(f"Wrapped SOL via {chosen.value}: {plan!r}")
    return plan
