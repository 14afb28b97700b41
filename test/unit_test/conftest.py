"""
Shared fixtures for resolver unit tests.

FakeFetcher is an in-memory AccountStateFetcher that records every call,
so tests can assert how many chain reads a resolution performed.
"""

import sys
from pathlib import Path

import pytest

# Add project root to path
sys.path.insert(0, str(Path(__file__).parent.parent.parent))

from solders.keypair import Keypair
from solders.pubkey import Pubkey

from ata_resolver.constants import TOKEN_PROGRAM_ID, TOKEN_2022_PROGRAM_ID
from ata_resolver.types import AccountState

TOKEN_PROGRAM = Pubkey.from_string(TOKEN_PROGRAM_ID)
TOKEN_2022_PROGRAM = Pubkey.from_string(TOKEN_2022_PROGRAM_ID)
RENT_EXEMPT_LAMPORTS = 2_039_280


class FakeFetcher:
    """In-memory chain reader"""

    def __init__(self, rent: int = RENT_EXEMPT_LAMPORTS):
        self.accounts = {}
        self.rent = rent
        self.fetch_calls = []
        self.rent_calls = 0

    def fetch_states(self, addresses):
        self.fetch_calls.append(list(addresses))
        return [self.accounts.get(address, AccountState.missing()) for address in addresses]

    def get_minimum_balance_for_rent_exemption(self, data_size):
        self.rent_calls += 1
        return self.rent

    def add_token_account(self, address, owner, program=TOKEN_PROGRAM, lamports=RENT_EXEMPT_LAMPORTS):
        self.accounts[address] = AccountState(
            exists=True,
            owner=owner,
            owner_program=program,
            lamports=lamports,
        )

    def add_mint(self, mint, program=TOKEN_PROGRAM):
        self.accounts[mint] = AccountState(exists=True, owner=None, owner_program=program, lamports=1_461_600)


class CountingProvider:
    """Funding-amount provider that counts invocations"""

    def __init__(self, value: int = RENT_EXEMPT_LAMPORTS):
        self.value = value
        self.calls = 0

    def __call__(self):
        self.calls += 1
        return self.value


@pytest.fixture
def fetcher():
    return FakeFetcher()


@pytest.fixture
def provider():
    return CountingProvider()


@pytest.fixture
def owner():
    return Keypair().pubkey()


@pytest.fixture
def pda_owner():
    """Off-curve owner, e.g. a pool vault authority"""
    address, _ = Pubkey.find_program_address([b"authority"], TOKEN_PROGRAM)
    return address


_SYSTEM_KINDS = {0: "create_account", 2: "transfer", 3: "create_account_with_seed"}
_TOKEN_KINDS = {1: "initialize_account", 9: "close_account", 12: "transfer_checked", 17: "sync_native"}


def instruction_kinds(instructions):
    """Readable name of each instruction, decoded from program id and data"""
    import struct
    from ata_resolver.constants import ASSOCIATED_TOKEN_PROGRAM_ID, SYSTEM_PROGRAM_ID

    kinds = []
    for ix in instructions:
        program = str(ix.program_id)
        data = bytes(ix.data)
        if program == ASSOCIATED_TOKEN_PROGRAM_ID:
            kinds.append("create_ata_idempotent" if data == b"\x01" else "create_ata")
        elif program == SYSTEM_PROGRAM_ID:
            kinds.append(_SYSTEM_KINDS[struct.unpack_from("<I", data)[0]])
        elif program in (TOKEN_PROGRAM_ID, TOKEN_2022_PROGRAM_ID):
            kinds.append(_TOKEN_KINDS[data[0]])
        else:
            kinds.append(program)
    return kinds
