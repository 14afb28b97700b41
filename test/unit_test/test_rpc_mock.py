"""
Test RPC Client with Mocks

Tests for RPC client and RpcAccountFetcher behavior with mocked responses.
"""

import sys
import base64
from pathlib import Path
from unittest.mock import Mock, patch, MagicMock

import httpx

# Add parent to path for imports
sys.path.insert(0, str(Path(__file__).parent.parent.parent))

from solders.keypair import Keypair
from solders.pubkey import Pubkey

TOKEN_PROGRAM_ID = "TokenkegQfeZyiNwAJbNbGKPFXCWuBvf9Ss623VQ5DA"
TOKEN_2022_PROGRAM_ID = "TokenzQdBNbLqP5VEhdkAS6EPFLC1PHnBqCXEpPxuEb"


def _response(payload, status_code=200):
    response = Mock()
    response.status_code = status_code
    response.json.return_value = payload
    response.raise_for_status = Mock()
    return response


def _token_account_value(mint: Pubkey, owner: Pubkey, program: str = TOKEN_PROGRAM_ID):
    """getMultipleAccounts entry for a token account"""
    data = bytes(mint) + bytes(owner) + bytes(165 - 64)
    return {
        "data": [base64.b64encode(data).decode(), "base64"],
        "executable": False,
        "lamports": 2039280,
        "owner": program,
    }


def test_rpc_config_defaults():
    """Test RpcClientConfig default values from global config"""
    from ata_resolver.infra.rpc import RpcClientConfig

    print("Testing RpcClientConfig defaults...")

    config = RpcClientConfig()

    assert config.timeout_seconds > 0, "Should have positive timeout"
    assert config.max_retries > 0, "Should have positive retries"
    assert config.commitment in ("processed", "confirmed", "finalized"), "Invalid commitment"

    print("  RpcClientConfig defaults: PASSED")


def test_rpc_config_override():
    """Test RpcClientConfig with overrides"""
    from ata_resolver.infra.rpc import RpcClientConfig
    from ata_resolver.errors import ConfigurationError

    print("Testing RpcClientConfig override...")

    config = RpcClientConfig(timeout_seconds=60.0, max_retries=1, commitment="finalized")

    assert config.timeout_seconds == 60.0
    assert config.max_retries == 1
    assert config.commitment == "finalized"

    try:
        RpcClientConfig(max_retries=0)
        assert False, "Should reject max_retries=0"
    except ConfigurationError:
        pass

    print("  RpcClientConfig override: PASSED")


def test_rpc_client_init():
    """Test RpcClient initialization"""
    from ata_resolver.infra.rpc import RpcClient
    from ata_resolver.errors import ConfigurationError

    print("Testing RpcClient init...")

    client = RpcClient("https://api.mainnet-beta.solana.com")
    assert client.endpoint == "https://api.mainnet-beta.solana.com"

    client = RpcClient([
        "https://primary.example.com",
        "https://backup.example.com",
    ])
    assert client.endpoint == "https://primary.example.com"

    try:
        RpcClient([])
        assert False, "Should raise for empty endpoints"
    except ConfigurationError:
        pass

    print("  RpcClient init: PASSED")


def test_rpc_call_success():
    """Test successful RPC call"""
    from ata_resolver.infra.rpc import RpcClient

    print("Testing RPC call success...")

    response = _response({"jsonrpc": "2.0", "id": 1, "result": 2039280})

    with patch.object(httpx.Client, 'post', return_value=response) as post:
        with RpcClient("https://api.mainnet-beta.solana.com") as client:
            result = client.get_minimum_balance_for_rent_exemption(165)

        assert result == 2039280
        body = post.call_args.kwargs["json"]
        assert body["method"] == "getMinimumBalanceForRentExemption"
        assert body["params"][0] == 165

    print("  RPC call success: PASSED")


def test_rpc_call_error():
    """Node-side JSON-RPC errors are raised and not retried"""
    from ata_resolver.infra.rpc import RpcClient, RpcClientConfig
    from ata_resolver.errors import RpcError

    print("Testing RPC error handling...")

    response = _response({
        "jsonrpc": "2.0",
        "id": 1,
        "error": {"code": -32600, "message": "Invalid request"},
    })

    with patch.object(httpx.Client, 'post', return_value=response) as post:
        client = RpcClient("https://api.mainnet-beta.solana.com", RpcClientConfig(max_retries=3))

        try:
            client.call("invalidMethod", [])
            assert False, "Should raise RpcError"
        except RpcError as e:
            assert "Invalid request" in str(e)
            assert e.details["rpc_error_code"] == -32600
            assert not e.recoverable

        assert post.call_count == 1

    print("  RPC error handling: PASSED")


def test_rpc_rate_limit():
    """Test rate limit handling"""
    from ata_resolver.infra.rpc import RpcClient, RpcClientConfig

    print("Testing rate limit handling...")

    rate_limit_response = Mock()
    rate_limit_response.status_code = 429
    success_response = _response({"jsonrpc": "2.0", "id": 1, "result": 12345})

    with patch.object(httpx.Client, 'post', side_effect=[rate_limit_response, success_response]):
        config = RpcClientConfig(max_retries=2, retry_delay_seconds=0.01)
        client = RpcClient("https://api.mainnet-beta.solana.com", config)

        assert client.call("getSlot", []) == 12345

    print("  Rate limit handling: PASSED")


def test_rpc_timeout():
    """Test timeout handling"""
    from ata_resolver.infra.rpc import RpcClient, RpcClientConfig
    from ata_resolver.errors import RpcError, ErrorCode

    print("Testing timeout handling...")

    with patch.object(httpx.Client, 'post', side_effect=httpx.TimeoutException("Timeout")):
        config = RpcClientConfig(timeout_seconds=1.0, max_retries=1, retry_delay_seconds=0.01)
        client = RpcClient("https://api.mainnet-beta.solana.com", config)

        try:
            client.call("getSlot", [])
            assert False, "Should raise RpcError for timeout"
        except RpcError as e:
            assert e.recoverable, "Timeout should be recoverable"
            assert e.code == ErrorCode.RPC_TIMEOUT
            assert "timed out" in str(e).lower()

    print("  Timeout handling: PASSED")


def test_rpc_endpoint_rotation():
    """Test endpoint rotation on failure"""
    from ata_resolver.infra.rpc import RpcClient, RpcClientConfig

    print("Testing endpoint rotation...")

    fail_response = Mock()
    fail_response.status_code = 500
    fail_response.raise_for_status = Mock(
        side_effect=httpx.HTTPStatusError("Server Error", request=Mock(), response=fail_response)
    )
    success_response = _response({"jsonrpc": "2.0", "id": 1, "result": 12345})

    # Single attempt per endpoint: first fails, rotate, second succeeds
    with patch.object(httpx.Client, 'post', side_effect=[fail_response, success_response]):
        config = RpcClientConfig(max_retries=1, retry_delay_seconds=0.01)
        client = RpcClient([
            "https://failing.example.com",
            "https://working.example.com",
        ], config)

        assert client.call("getSlot", []) == 12345
        assert client.endpoint == "https://working.example.com"

    print("  Endpoint rotation: PASSED")


def test_get_multiple_accounts():
    """Test get_multiple_accounts and length validation"""
    from ata_resolver.infra.rpc import RpcClient, RpcClientConfig
    from ata_resolver.errors import RpcError

    print("Testing get_multiple_accounts...")

    value = {"data": ["", "base64"], "lamports": 1, "owner": TOKEN_PROGRAM_ID}
    response = _response({"jsonrpc": "2.0", "id": 1, "result": {"context": {"slot": 1}, "value": [value, None]}})

    with patch.object(httpx.Client, 'post', return_value=response):
        client = RpcClient("https://api.mainnet-beta.solana.com", RpcClientConfig(max_retries=1))
        result = client.get_multiple_accounts(["A", "B"])
        assert result == [value, None]

        try:
            client.get_multiple_accounts(["A", "B", "C"])
            assert False, "Should reject a short response"
        except RpcError as e:
            assert "expected 3" in str(e)

    print("  get_multiple_accounts: PASSED")


def test_parse_account_state():
    """Token owner is read from account data bytes 32..64"""
    from ata_resolver.infra import parse_account_state

    print("Testing parse_account_state...")

    mint = Pubkey.new_unique()
    owner = Keypair().pubkey()

    state = parse_account_state(_token_account_value(mint, owner))
    assert state.exists
    assert state.owner == owner
    assert str(state.owner_program) == TOKEN_PROGRAM_ID
    assert state.lamports == 2039280

    state = parse_account_state(_token_account_value(mint, owner, TOKEN_2022_PROGRAM_ID))
    assert state.owner == owner

    # System-owned account at the address: exists, but no token owner
    state = parse_account_state({
        "data": ["", "base64"],
        "lamports": 5,
        "owner": "11111111111111111111111111111111",
    })
    assert state.exists
    assert state.owner is None

    state = parse_account_state(None)
    assert not state.exists

    print("  parse_account_state: PASSED")


def test_rpc_account_fetcher():
    """One getMultipleAccounts per fetch, chunked past 100 keys"""
    from ata_resolver.infra import RpcAccountFetcher

    print("Testing RpcAccountFetcher...")

    rpc = MagicMock()
    rpc.get_multiple_accounts.side_effect = lambda keys, **kwargs: [None] * len(keys)
    fetcher = RpcAccountFetcher(rpc, commitment="finalized")

    assert fetcher.fetch_states([]) == []
    assert rpc.get_multiple_accounts.call_count == 0

    addresses = [Pubkey.new_unique() for _ in range(3)]
    states = fetcher.fetch_states(addresses)
    assert len(states) == 3
    assert rpc.get_multiple_accounts.call_count == 1
    args, kwargs = rpc.get_multiple_accounts.call_args
    assert args[0] == [str(a) for a in addresses]
    assert kwargs["commitment"] == "finalized"

    rpc.get_multiple_accounts.reset_mock()
    states = fetcher.fetch_states([Pubkey.new_unique() for _ in range(150)])
    assert len(states) == 150
    assert rpc.get_multiple_accounts.call_count == 2

    rpc.get_minimum_balance_for_rent_exemption.return_value = 2039280
    assert fetcher.get_minimum_balance_for_rent_exemption(165) == 2039280

    print("  RpcAccountFetcher: PASSED")


def test_rpc_account_fetcher_propagates_errors():
    from ata_resolver.infra import RpcAccountFetcher
    from ata_resolver.errors import RpcError

    print("Testing RpcAccountFetcher error propagation...")

    error = RpcError.connection_failed("https://rpc.example.com")
    rpc = MagicMock()
    rpc.get_multiple_accounts.side_effect = error

    try:
        RpcAccountFetcher(rpc).fetch_states([Pubkey.new_unique()])
        assert False, "Should raise RpcError"
    except RpcError as e:
        assert e is error

    print("  RpcAccountFetcher error propagation: PASSED")


def test_fetcher_from_url_single_attempt():
    """Chain reads made for resolution are not retried or delayed"""
    from ata_resolver.infra import RpcAccountFetcher, RpcClientConfig
    from ata_resolver.modules import TokenAccountsModule
    from ata_resolver.errors import RpcError

    print("Testing single attempt chain reads...")

    fetcher = RpcAccountFetcher.from_url("https://api.mainnet-beta.solana.com")
    assert fetcher.rpc._config.max_retries == 1

    error = httpx.ConnectError("Connection refused")
    with patch.object(httpx.Client, 'post', side_effect=error) as post, \
            patch("ata_resolver.infra.rpc.time.sleep") as sleep:
        try:
            fetcher.fetch_states([Pubkey.new_unique()])
            assert False, "Should raise RpcError"
        except RpcError:
            pass

        assert post.call_count == 1
        sleep.assert_not_called()

    owner = Keypair().pubkey()
    accounts = TokenAccountsModule.from_url(owner, "https://api.mainnet-beta.solana.com")
    with patch.object(httpx.Client, 'post', side_effect=error) as post, \
            patch("ata_resolver.infra.rpc.time.sleep") as sleep:
        try:
            accounts.resolve(Pubkey.new_unique(), token_program=TOKEN_PROGRAM_ID)
            assert False, "Should raise RpcError"
        except RpcError:
            pass

        assert post.call_count == 1
        sleep.assert_not_called()

    # An explicit client config is respected
    fetcher = RpcAccountFetcher.from_url(
        "https://api.mainnet-beta.solana.com",
        rpc_config=RpcClientConfig(max_retries=2, retry_delay_seconds=0.01),
    )
    with patch.object(httpx.Client, 'post', side_effect=error) as post, \
            patch("ata_resolver.infra.rpc.time.sleep"):
        try:
            fetcher.fetch_states([Pubkey.new_unique()])
            assert False, "Should raise RpcError"
        except RpcError:
            pass

        assert post.call_count == 2

    print("  Single attempt chain reads: PASSED")


def test_detect_token_programs():
    from ata_resolver.infra import detect_token_programs
    from ata_resolver.types import AccountState
    from ata_resolver.errors import InvalidStrategyForMint

    print("Testing detect_token_programs...")

    token = Pubkey.from_string(TOKEN_PROGRAM_ID)
    token_2022 = Pubkey.from_string(TOKEN_2022_PROGRAM_ID)
    wsol = Pubkey.from_string("So11111111111111111111111111111111111111112")
    mint_a = Pubkey.new_unique()
    mint_b = Pubkey.new_unique()

    fetcher = MagicMock()
    fetcher.fetch_states.return_value = [
        AccountState(exists=True, owner_program=token),
        AccountState(exists=True, owner_program=token_2022),
    ]

    programs = detect_token_programs(fetcher, [mint_a, wsol, mint_b])
    assert programs == [token, token, token_2022]
    fetcher.fetch_states.assert_called_once_with([mint_a, mint_b])

    fetcher = MagicMock()
    detect_token_programs(fetcher, [wsol])
    fetcher.fetch_states.assert_not_called()

    fetcher = MagicMock()
    fetcher.fetch_states.return_value = [AccountState.missing()]
    try:
        detect_token_programs(fetcher, [mint_a])
        assert False, "Should raise for missing mint"
    except InvalidStrategyForMint:
        pass

    print("  detect_token_programs: PASSED")


def main():
    """Run all RPC mock tests"""
    print("=" * 60)
    print("RPC Mock Tests")
    print("=" * 60)

    tests = [
        test_rpc_config_defaults,
        test_rpc_config_override,
        test_rpc_client_init,
        test_rpc_call_success,
        test_rpc_call_error,
        test_rpc_rate_limit,
        test_rpc_timeout,
        test_rpc_endpoint_rotation,
        test_get_multiple_accounts,
        test_parse_account_state,
        test_rpc_account_fetcher,
        test_rpc_account_fetcher_propagates_errors,
        test_fetcher_from_url_single_attempt,
        test_detect_token_programs,
    ]

    passed = 0
    failed = 0

    for test in tests:
        try:
            test()
            passed += 1
        except Exception as e:
            print(f"  FAILED: {e}")
            import traceback
            traceback.print_exc()
            failed += 1

    print("=" * 60)
    print(f"Results: {passed} passed, {failed} failed")
    print("=" * 60)

    return failed == 0


if __name__ == "__main__":
    success = main()
    sys.exit(0 if success else 1)
