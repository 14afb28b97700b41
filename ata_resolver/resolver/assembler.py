"""
Instruction assembly

resolve() and resolve_many() derive canonical addresses, read their state
in one batch, validate ownership and then build a ResolutionPlan per
entry. Every check runs before the first instruction is built, so a
failure never leaves a partial result.
"""

import logging
from dataclasses import dataclass, field
from functools import partial
from typing import Callable, List, Optional, Sequence, Union

from solders.pubkey import Pubkey

from .address import derive_canonical, is_off_curve
from .instructions import build_create_ata_instruction
from .validator import ensure_valid
from .wrapping import WrapRequest, effective_strategy, select_wrapping
from ..config import config as global_config
from ..constants import TOKEN_ACCOUNT_SIZE
from ..errors import InvalidStrategyForMint
from ..infra.fetcher import AccountStateFetcher, detect_token_programs
from ..types import (
    AccountState,
    BatchEntry,
    ResolutionPlan,
    TokenProgram,
    WrappingStrategy,
    to_pubkey,
    is_native_mint,
    is_native_mint_2022,
)

logger = logging.getLogger(__name__)


@dataclass
class ResolverConfig:
    """
    Per-call resolution settings

    Unset values are taken from the global config (ata_resolver.config.ResolverDefaults).
    Passing one of these per call keeps concurrent resolutions with
    different settings independent.

    Usage:
        # Defaults from environment
        plan = resolve(fetcher, owner, mint)

        # Idempotent creation, wrap through the associated account
        config = ResolverConfig(idempotent=True, wrapping_strategy="associated")
        plan = resolve(fetcher, owner, NATIVE_MINT, funding_amount=10**9, config=config)
    """
    idempotent: bool = None
    allow_off_curve_owner: bool = None
    wrapping_strategy: Union[str, WrappingStrategy] = None
    seed: Optional[str] = None
    # True when the caller named a strategy instead of inheriting the default
    explicit_strategy: bool = field(init=False, default=False)

    def __post_init__(self):
        """Apply defaults from global config for any unset values"""
        if self.idempotent is None:
            self.idempotent = global_config.resolver.idempotent
        if self.allow_off_curve_owner is None:
            self.allow_off_curve_owner = global_config.resolver.allow_off_curve_owner

        self.explicit_strategy = self.wrapping_strategy is not None
        if self.wrapping_strategy is None:
            self.wrapping_strategy = global_config.resolver.wrapping_strategy
        if isinstance(self.wrapping_strategy, str):
            self.wrapping_strategy = WrappingStrategy.from_string(self.wrapping_strategy)


def _once(provider: Callable[[], int]) -> Callable[[], int]:
    """Wrap a provider so the underlying callable runs at most once"""
    cache = []

    def wrapper() -> int:
        if not cache:
            cache.append(provider())
        return cache[0]

    return wrapper


def _check_entries(entries: Sequence[BatchEntry], config: ResolverConfig) -> None:
    """Mint and strategy checks that need no chain data"""
    native_seen = False
    for entry in entries:
        mint = str(entry.mint)
        if is_native_mint_2022(entry.mint):
            raise InvalidStrategyForMint.unsupported_mint(mint)
        if entry.funding_amount < 0:
            raise InvalidStrategyForMint.invalid_amount(mint, entry.funding_amount)

        if is_native_mint(entry.mint):
            if native_seen:
                raise InvalidStrategyForMint.multiple_native(mint)
            native_seen = True
            if entry.token_program is not None and entry.token_program != TokenProgram.TOKEN.pubkey:
                raise InvalidStrategyForMint.token_program_mismatch(mint, str(entry.token_program))
            # Raises for funding with NONE
            effective_strategy(config.wrapping_strategy, entry.funding_amount)
        elif entry.funding_amount > 0:
            raise InvalidStrategyForMint.funding_not_supported(mint, config.wrapping_strategy.value)

    if (
        not native_seen
        and config.explicit_strategy
        and config.wrapping_strategy.uses_fresh_address
    ):
        mint = str(entries[0].mint) if entries else "<none>"
        raise InvalidStrategyForMint.native_only(mint, config.wrapping_strategy.value)


def _uses_canonical(entry: BatchEntry, config: ResolverConfig) -> bool:
    if not is_native_mint(entry.mint):
        return True
    strategy = effective_strategy(config.wrapping_strategy, entry.funding_amount)
    return not strategy.uses_fresh_address


def _assemble(
    entry: BatchEntry,
    token_program: Pubkey,
    address: Pubkey,
    state: AccountState,
    owner: Pubkey,
    payer: Pubkey,
    unwrap_destination: Pubkey,
    funding_amount_provider: Callable[[], int],
    config: ResolverConfig,
) -> ResolutionPlan:
    if is_native_mint(entry.mint):
        request = WrapRequest(
            owner=owner,
            payer=payer,
            unwrap_destination=unwrap_destination,
            canonical_address=address,
            canonical_exists=state.exists,
            funding_amount=entry.funding_amount,
            idempotent=config.idempotent,
            seed=config.seed,
        )
        return select_wrapping(config.wrapping_strategy, request, funding_amount_provider)

    plan = ResolutionPlan.existing(address, token_program)
    if not state.exists:
        plan.instructions.append(build_create_ata_instruction(
            payer,
            address,
            owner,
            entry.mint,
            token_program,
            idempotent=config.idempotent,
        ))
    return plan


def resolve_many(
    fetcher: AccountStateFetcher,
    owner: Union[str, Pubkey],
    entries: Sequence[BatchEntry],
    funding_amount_provider: Optional[Callable[[], int]] = None,
    payer: Optional[Union[str, Pubkey]] = None,
    unwrap_destination: Optional[Union[str, Pubkey]] = None,
    config: Optional[ResolverConfig] = None,
) -> List[ResolutionPlan]:
    """
    Resolve token accounts for several mints of one owner

    All canonical addresses are derived first and read with a single
    fetch_states() call. Entries stay independent: one entry's existing
    account never changes another entry's instructions.

    Args:
        fetcher: Chain reader
        owner: Account owner
        entries: Mints to resolve (at most one native mint)
        funding_amount_provider: Returns rent-exempt lamports for a new wrapped
            SOL account; defaults to asking the fetcher. Called at most once.
        payer: Pays for created accounts (defaults to owner)
        unwrap_destination: Receives lamports of closed wrapped SOL (defaults to owner)
        config: Per-call settings

    Returns:
        One ResolutionPlan per entry, in input order

    Raises:
        InvalidStrategyForMint: Strategy or funding does not fit a mint
        OffCurveOwnerDisallowed: Owner is a PDA and not allowed
        OwnershipChanged: A canonical account is owned by someone else
        TransportError: Chain read failed (unchanged)
    """
    if config is None:
        config = ResolverConfig()
    owner = to_pubkey(owner)
    payer = to_pubkey(payer) if payer is not None else owner
    unwrap_destination = to_pubkey(unwrap_destination) if unwrap_destination is not None else owner
    entries = list(entries)

    if not entries:
        return []

    _check_entries(entries, config)

    # Mint accounts are only read when the caller did not name the program
    token_programs = [entry.token_program for entry in entries]
    unknown = [i for i, program in enumerate(token_programs) if program is None]
    if unknown:
        detected = detect_token_programs(fetcher, [entries[i].mint for i in unknown])
        for i, program in zip(unknown, detected):
            token_programs[i] = program

    addresses = [
        derive_canonical(entry.mint, owner, program)
        for entry, program in zip(entries, token_programs)
    ]
    states = fetcher.fetch_states(addresses)

    owner_off_curve = is_off_curve(owner)
    for entry, address, state in zip(entries, addresses, states):
        # A fresh-address wrapper never touches the canonical account
        observed = state if _uses_canonical(entry, config) else AccountState.missing()
        ensure_valid(
            observed,
            owner,
            owner_off_curve,
            config.allow_off_curve_owner,
            address=address,
        )

    if funding_amount_provider is None:
        funding_amount_provider = partial(fetcher.get_minimum_balance_for_rent_exemption, TOKEN_ACCOUNT_SIZE)
    provider = _once(funding_amount_provider)

    plans = [
        _assemble(
            entry,
            program,
            address,
            state,
            owner,
            payer,
            unwrap_destination,
            provider,
            config,
        )
        for entry, program, address, state in zip(entries, token_programs, addresses, states)
    ]

    logger.debug(
        f"Resolved {len(plans)} accounts for {owner}: "
        f"{sum(len(p.instructions) for p in plans)} instructions, "
        f"{sum(len(p.cleanup_instructions) for p in plans)} cleanup"
    )
    return plans


def resolve(
    fetcher: AccountStateFetcher,
    owner: Union[str, Pubkey],
    mint: Union[str, Pubkey],
    token_program: Optional[Union[str, Pubkey]] = None,
    funding_amount_provider: Optional[Callable[[], int]] = None,
    funding_amount: int = 0,
    payer: Optional[Union[str, Pubkey]] = None,
    unwrap_destination: Optional[Union[str, Pubkey]] = None,
    config: Optional[ResolverConfig] = None,
) -> ResolutionPlan:
    """
    Resolve the token account of one (owner, mint) pair

    Example:
        plan = resolve(fetcher, wallet, USDC_MINT)
        tx_instructions = plan.instructions + [my_swap_ix] + plan.cleanup_instructions

    Returns:
        ResolutionPlan for the mint
    """
    entry = BatchEntry.of(mint, funding_amount, token_program)
    return resolve_many(
        fetcher,
        owner,
        [entry],
        funding_amount_provider=funding_amount_provider,
        payer=payer,
        unwrap_destination=unwrap_destination,
        config=config,
    )[0]
