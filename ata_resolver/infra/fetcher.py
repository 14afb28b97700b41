"""
Account state fetching

The resolver only depends on the AccountStateFetcher protocol; RpcAccountFetcher
is the JSON-RPC backed implementation.
"""

from __future__ import annotations

import base64
import logging
from typing import Any, Dict, List, Optional, Protocol, Sequence, Union, runtime_checkable

from solders.pubkey import Pubkey

from .rpc import RpcClient, RpcClientConfig
from ..constants import (
    MAX_ACCOUNTS_PER_REQUEST,
    TOKEN_ACCOUNT_OWNER_OFFSET,
)
from ..errors import InvalidStrategyForMint
from ..types import AccountState, TokenProgram, is_native_mint, is_token_program

logger = logging.getLogger(__name__)


@runtime_checkable
class AccountStateFetcher(Protocol):
    """
    Protocol for chain readers

    Implementations must provide:
    - fetch_states(): one batched existence/owner read for a set of addresses
    - get_minimum_balance_for_rent_exemption(): lamports for a rent-exempt account
    """

    def fetch_states(self, addresses: Sequence[Pubkey]) -> List[AccountState]:
        """
        Fetch account snapshots

        Args:
            addresses: Addresses to query

        Returns:
            One AccountState per address, in input order
        """
        ...

    def get_minimum_balance_for_rent_exemption(self, data_size: int) -> int:
        ...


def parse_account_state(value: Optional[Dict[str, Any]]) -> AccountState:
    """
    Convert a base64-encoded getMultipleAccounts entry into an AccountState

    The token account owner is read from bytes 32..64 of the account data,
    which holds for both token programs (extensions come after the base layout).
    """
    if value is None:
        return AccountState.missing()

    owner_program = Pubkey.from_string(value["owner"])
    lamports = int(value.get("lamports", 0))

    data = value.get("data")
    raw = b""
    if isinstance(data, list) and data:
        raw = base64.b64decode(data[0])

    token_owner: Optional[Pubkey] = None
    end = TOKEN_ACCOUNT_OWNER_OFFSET + 32
    if is_token_program(owner_program) and len(raw) >= end:
        token_owner = Pubkey.from_bytes(raw[TOKEN_ACCOUNT_OWNER_OFFSET:end])

    return AccountState(
        exists=True,
        owner=token_owner,
        owner_program=owner_program,
        lamports=lamports,
    )


class RpcAccountFetcher:
    """
    AccountStateFetcher backed by RpcClient

    Every fetch_states() call issues getMultipleAccounts requests only,
    never a request per address. Transport errors propagate unchanged.

    Usage:
        rpc = RpcClient("https://api.mainnet-beta.solana.com")
        fetcher = RpcAccountFetcher(rpc)

        states = fetcher.fetch_states([ata_a, ata_b])
    """

    def __init__(self, rpc: RpcClient, commitment: Optional[str] = None):
        self._rpc = rpc
        self._commitment = commitment

    @classmethod
    def from_url(
        cls,
        endpoint: Union[str, List[str]],
        rpc_config: Optional[RpcClientConfig] = None,
    ) -> "RpcAccountFetcher":
        """
        Create a fetcher backed by a new RpcClient

        Retry policy belongs to the caller, so unless rpc_config says
        otherwise the client makes a single attempt per endpoint.
        """
        if rpc_config is None:
            rpc_config = RpcClientConfig(max_retries=1)
        rpc = RpcClient(endpoint, config=rpc_config)
        return cls(rpc, commitment=rpc.commitment)

    @property
    def rpc(self) -> RpcClient:
        return self._rpc

    def fetch_states(self, addresses: Sequence[Pubkey]) -> List[AccountState]:
        if not addresses:
            return []

        keys = [str(address) for address in addresses]
        states: List[AccountState] = []
        # Chunked only past the RPC per-request key limit
        for start in range(0, len(keys), MAX_ACCOUNTS_PER_REQUEST):
            chunk = keys[start:start + MAX_ACCOUNTS_PER_REQUEST]
            values = self._rpc.get_multiple_accounts(
                chunk,
                encoding="base64",
                commitment=self._commitment,
            )
            states.extend(parse_account_state(value) for value in values)

        logger.debug(
            f"Fetched {len(states)} account states "
            f"({sum(1 for s in states if s.exists)} existing)"
        )
        return states

    def get_minimum_balance_for_rent_exemption(self, data_size: int) -> int:
        return self._rpc.get_minimum_balance_for_rent_exemption(
            data_size,
            commitment=self._commitment,
        )


def detect_token_programs(
    fetcher: AccountStateFetcher,
    mints: Sequence[Pubkey],
) -> List[Pubkey]:
    """
    Detect the token program for each mint by checking the mint account's owner.

    Wrapped SOL always uses Tokenkeg and is not queried. All remaining
    mints are read in a single batch.

    Raises:
        InvalidStrategyForMint: If a mint account is missing or not owned by a token program
        RpcError: On transport failure
    """
    programs: List[Optional[Pubkey]] = [None] * len(mints)
    pending = []
    for i, mint in enumerate(mints):
        if is_native_mint(mint):
            programs[i] = TokenProgram.TOKEN.pubkey
        else:
            pending.append(i)

    if pending:
        states = fetcher.fetch_states([mints[i] for i in pending])
        for i, state in zip(pending, states):
            if not state.exists or not is_token_program(state.owner_program):
                raise InvalidStrategyForMint.unsupported_mint(str(mints[i]))
            programs[i] = state.owner_program

    return programs


__all__ = [
    "AccountStateFetcher",
    "RpcAccountFetcher",
    "parse_account_state",
    "detect_token_programs",
]
