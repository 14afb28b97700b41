"""
Token Accounts Module

Binds the resolver to one chain reader, one wallet and one set of
resolution settings.
"""

import logging
import threading
from typing import Callable, List, Optional, Sequence, Union

from solders.instruction import Instruction
from solders.pubkey import Pubkey

from ..config import config as global_config
from ..constants import TOKEN_ACCOUNT_SIZE
from ..errors import ConfigurationError
from ..infra import RpcClient, RpcClientConfig, RpcAccountFetcher, AccountStateFetcher
from ..resolver import (
    ResolverConfig,
    resolve,
    resolve_many,
    build_send_tokens_instructions,
    build_unwrap_instructions,
)
from ..types import BatchEntry, ResolutionPlan, to_pubkey

logger = logging.getLogger(__name__)


class TokenAccountsModule:
    """
    Token account resolution for one wallet

    Provides:
    - resolve(): plan for a single mint
    - resolve_many(): plans for several mints with one account read
    - send_tokens(): SOL or SPL transfer to another wallet
    - unwrap(): close the wrapped SOL account

    Usage:
        rpc = RpcClient("https://api.mainnet-beta.solana.com")
        accounts = TokenAccountsModule(rpc, owner=wallet_pubkey)

        plan = accounts.resolve(USDC_MINT)
        plan = accounts.resolve(NATIVE_MINT, funding_amount=1_000_000_000)

        plans = accounts.resolve_many([
            BatchEntry.of(USDC_MINT),
            BatchEntry.of(NATIVE_MINT, funding_amount=5_000_000),
        ])
    """

    def __init__(
        self,
        chain_reader: Union[RpcClient, AccountStateFetcher],
        owner: Union[str, Pubkey],
        config: Optional[ResolverConfig] = None,
        payer: Optional[Union[str, Pubkey]] = None,
    ):
        """
        Initialize token accounts module

        Args:
            chain_reader: RpcClient, or any AccountStateFetcher
            owner: Wallet that owns the resolved accounts
            config: Resolution settings (defaults from environment)
            payer: Pays for created accounts (defaults to owner)
        """
        if isinstance(chain_reader, RpcClient):
            chain_reader = RpcAccountFetcher(chain_reader, commitment=chain_reader.commitment)
        self._fetcher = chain_reader
        self._owner = to_pubkey(owner)
        self._payer = to_pubkey(payer) if payer is not None else self._owner
        self._config = config or ResolverConfig()

        self._rent_exempt: Optional[int] = None
        self._rent_lock = threading.Lock()

    @classmethod
    def from_url(
        cls,
        owner: Union[str, Pubkey],
        rpc_url: Optional[str] = None,
        config: Optional[ResolverConfig] = None,
        rpc_config: Optional[RpcClientConfig] = None,
    ) -> "TokenAccountsModule":
        """
        Create a module backed by a new RpcClient

        Args:
            owner: Wallet owner
            rpc_url: RPC endpoint (defaults to SOLANA_RPC_URL)
            config: Resolution settings
            rpc_config: Client settings (defaults to a single attempt, no retry)
        """
        url = rpc_url or global_config.rpc.url
        if not url:
            raise ConfigurationError.missing("SOLANA_RPC_URL")
        return cls(RpcAccountFetcher.from_url(url, rpc_config=rpc_config), owner, config=config)

    @property
    def owner(self) -> Pubkey:
        return self._owner

    @property
    def fetcher(self) -> AccountStateFetcher:
        return self._fetcher

    @property
    def config(self) -> ResolverConfig:
        return self._config

    def rent_exempt_provider(self) -> Callable[[], int]:
        """
        Funding-amount provider for new token accounts

        The RPC round trip happens on first use only; the value is reused
        for the lifetime of this module.
        """
        def provider() -> int:
            if self._rent_exempt is None:
                with self._rent_lock:
                    if self._rent_exempt is None:
                        self._rent_exempt = self._fetcher.get_minimum_balance_for_rent_exemption(
                            TOKEN_ACCOUNT_SIZE
                        )
                        logger.debug(f"Rent exempt minimum for token account: {self._rent_exempt}")
            return self._rent_exempt

        return provider

    def resolve(
        self,
        mint: Union[str, Pubkey],
        funding_amount: int = 0,
        token_program: Optional[Union[str, Pubkey]] = None,
        unwrap_destination: Optional[Union[str, Pubkey]] = None,
        config: Optional[ResolverConfig] = None,
    ) -> ResolutionPlan:
        """
        Resolve the owner's token account for a mint

        Args:
            mint: Token mint
            funding_amount: Lamports to wrap (native mint only)
            token_program: Token program (read from chain if None)
            unwrap_destination: Receives lamports when wrapped SOL is closed
            config: Overrides the module settings for this call

        Returns:
            ResolutionPlan
        """
        return resolve(
            self._fetcher,
            self._owner,
            mint,
            token_program=token_program,
            funding_amount_provider=self.rent_exempt_provider(),
            funding_amount=funding_amount,
            payer=self._payer,
            unwrap_destination=unwrap_destination,
            config=config or self._config,
        )

    def resolve_many(
        self,
        entries: Sequence[BatchEntry],
        unwrap_destination: Optional[Union[str, Pubkey]] = None,
        config: Optional[ResolverConfig] = None,
    ) -> List[ResolutionPlan]:
        """Resolve several mints with a single account read"""
        return resolve_many(
            self._fetcher,
            self._owner,
            entries,
            funding_amount_provider=self.rent_exempt_provider(),
            payer=self._payer,
            unwrap_destination=unwrap_destination,
            config=config or self._config,
        )

    def send_tokens(
        self,
        destination_wallet: Union[str, Pubkey],
        mint: Union[str, Pubkey],
        amount: int,
        decimals: int,
        token_program: Optional[Union[str, Pubkey]] = None,
    ) -> ResolutionPlan:
        """
        Send tokens from the owner to another wallet

        Args:
            destination_wallet: Receiving wallet
            mint: Token mint (NATIVE_MINT sends SOL)
            amount: Amount in base units
            decimals: Mint decimals
            token_program: Token program (read from chain if None)
        """
        return build_send_tokens_instructions(
            self._fetcher,
            self._owner,
            destination_wallet,
            mint,
            amount,
            decimals,
            token_program=token_program,
            payer=self._payer,
            allow_off_curve_source=self._config.allow_off_curve_owner,
            funding_amount_provider=self.rent_exempt_provider(),
        )

    def unwrap(self, destination: Optional[Union[str, Pubkey]] = None) -> List[Instruction]:
        """Close the owner's wrapped SOL account"""
        return build_unwrap_instructions(self._owner, destination)
