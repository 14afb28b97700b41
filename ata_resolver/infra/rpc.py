"""
RPC Client for Solana

Provides the read-only JSON-RPC calls the resolver needs, with:
- Multiple endpoint fallback
- Transport-level retry (set max_retries=1 to disable)
- Rate limit handling
- Request timeout management
"""

from __future__ import annotations

import logging
import time
import threading
from typing import Any, Dict, List, Optional, Union
from dataclasses import dataclass

import httpx

from ..errors import RpcError, ConfigurationError
from ..config import config as global_config

logger = logging.getLogger(__name__)


@dataclass
class RpcClientConfig:
    """
    RPC client runtime configuration

    Allows per-client overrides while pulling defaults from the global
    config (ata_resolver.config.RpcConfig).

    Usage:
        # Use all defaults from environment
        client = RpcClient(endpoint)

        # Override specific settings
        config = RpcClientConfig(timeout_seconds=60, max_retries=1)
        client = RpcClient(endpoint, config=config)
    """
    timeout_seconds: float = None
    max_retries: int = None
    retry_delay_seconds: float = None
    commitment: str = None

    def __post_init__(self):
        """Apply defaults from global config for any unset values"""
        if self.timeout_seconds is None:
            self.timeout_seconds = global_config.rpc.timeout_seconds
        if self.max_retries is None:
            self.max_retries = global_config.rpc.max_retries
        if self.retry_delay_seconds is None:
            self.retry_delay_seconds = global_config.rpc.retry_delay_seconds
        if self.commitment is None:
            self.commitment = global_config.rpc.commitment
        if self.max_retries < 1:
            raise ConfigurationError.invalid("max_retries", "must be at least 1")


class RpcClient:
    """
    Solana JSON-RPC client

    Usage:
        rpc = RpcClient("https://api.mainnet-beta.solana.com")

        # Multiple endpoints with fallback
        rpc = RpcClient([
            "https://primary-rpc.example.com",
            "https://backup-rpc.example.com",
        ])

        accounts = rpc.get_multiple_accounts(["Address1...", "Address2..."])
        rent = rpc.get_minimum_balance_for_rent_exemption(165)
    """

    def __init__(
        self,
        endpoint: Union[str, List[str]],
        config: Optional[RpcClientConfig] = None,
    ):
        """
        Initialize RPC client

        Args:
            endpoint: RPC endpoint URL or list of URLs (for fallback)
            config: RPC configuration options
        """
        self._endpoints = [endpoint] if isinstance(endpoint, str) else list(endpoint)
        if not self._endpoints or not all(self._endpoints):
            raise ConfigurationError.missing("RPC endpoint")

        self._config = config or RpcClientConfig()
        self._current_endpoint_idx = 0
        self._client: Optional[httpx.Client] = None
        self._client_lock = threading.Lock()

    @property
    def endpoint(self) -> str:
        """Current active endpoint"""
        return self._endpoints[self._current_endpoint_idx]

    @property
    def commitment(self) -> str:
        """Default commitment level"""
        return self._config.commitment

    def _get_client(self) -> httpx.Client:
        """Get or create HTTP client (thread-safe)"""
        if self._client is None:
            with self._client_lock:
                # Double-check after acquiring lock
                if self._client is None:
                    self._client = httpx.Client(
                        timeout=self._config.timeout_seconds,
                        headers={"Content-Type": "application/json"},
                    )
        return self._client

    def _rotate_endpoint(self):
        """Rotate to next endpoint on failure"""
        if len(self._endpoints) > 1:
            self._current_endpoint_idx = (self._current_endpoint_idx + 1) % len(self._endpoints)
            logger.info(f"Rotating to RPC endpoint: {self.endpoint}")

    def call(
        self,
        method: str,
        params: List[Any],
        timeout: Optional[float] = None,
    ) -> Any:
        """
        Make JSON-RPC call

        Args:
            method: RPC method name
            params: RPC parameters
            timeout: Optional timeout override

        Returns:
            RPC result

        Raises:
            RpcError: On RPC failure
        """
        client = self._get_client()
        body = {
            "jsonrpc": "2.0",
            "id": 1,
            "method": method,
            "params": params,
        }

        last_error: Optional[RpcError] = None
        timeout_val = timeout or self._config.timeout_seconds

        for _ in range(len(self._endpoints)):
            for attempt in range(self._config.max_retries):
                try:
                    response = client.post(
                        self.endpoint,
                        json=body,
                        timeout=timeout_val,
                    )

                    if response.status_code == 429:
                        logger.warning(f"Rate limited by {self.endpoint}")
                        last_error = RpcError.rate_limited(self.endpoint)
                    else:
                        response.raise_for_status()
                        return self._unwrap(response.json())

                except httpx.TimeoutException:
                    last_error = RpcError.timeout(self.endpoint, timeout_val)
                    logger.warning(f"RPC timeout (attempt {attempt + 1}): {self.endpoint}")

                except httpx.HTTPStatusError as e:
                    last_error = RpcError(
                        f"HTTP error {e.response.status_code}",
                        endpoint=self.endpoint,
                        original_error=e,
                    )
                    logger.warning(f"RPC HTTP error (attempt {attempt + 1}): {e}")

                except httpx.RequestError as e:
                    last_error = RpcError.connection_failed(self.endpoint, e)
                    logger.warning(f"RPC connection error (attempt {attempt + 1}): {e}")

                except ValueError as e:
                    last_error = RpcError.invalid_response(self.endpoint, str(e))
                    logger.warning(f"RPC returned invalid JSON (attempt {attempt + 1}): {e}")

                if attempt < self._config.max_retries - 1:
                    time.sleep(self._config.retry_delay_seconds * (attempt + 1))

            self._rotate_endpoint()

        raise last_error or RpcError("All RPC endpoints failed")

    def _unwrap(self, payload: Dict[str, Any]) -> Any:
        """Extract result from a JSON-RPC envelope, raising on RPC errors"""
        if "error" in payload:
            error = payload["error"]
            rpc_error = RpcError(
                f"RPC error: {error.get('message', str(error))}",
                endpoint=self.endpoint,
            )
            rpc_error.details["rpc_error_code"] = error.get("code")
            rpc_error.details["rpc_error_data"] = error.get("data")
            # Node-side errors are not transient
            rpc_error.recoverable = False
            raise rpc_error
        return payload.get("result")

    def get_multiple_accounts(
        self,
        addresses: List[str],
        encoding: str = "base64",
        commitment: Optional[str] = None,
    ) -> List[Optional[Dict[str, Any]]]:
        """
        Get multiple account information in one call

        Args:
            addresses: List of account addresses
            encoding: Data encoding
            commitment: Commitment level

        Returns:
            List of account info (None for accounts not found), same order as input
        """
        params = [
            addresses,
            {
                "encoding": encoding,
                "commitment": commitment or self.commitment,
            },
        ]
        result = self.call("getMultipleAccounts", params)
        values = result.get("value", []) if result else []
        if len(values) != len(addresses):
            raise RpcError.invalid_response(
                self.endpoint,
                f"expected {len(addresses)} accounts, got {len(values)}",
            )
        return values

    def get_minimum_balance_for_rent_exemption(
        self,
        data_size: int,
        commitment: Optional[str] = None,
    ) -> int:
        """
        Get lamports required for an account of data_size bytes to be rent exempt
        """
        params = [data_size, {"commitment": commitment or self.commitment}]
        result = self.call("getMinimumBalanceForRentExemption", params)
        if not isinstance(result, int):
            raise RpcError.invalid_response(self.endpoint, f"rent exemption result {result!r}")
        return result

    def close(self):
        """Close HTTP client"""
        if self._client:
            self._client.close()
            self._client = None

    def __enter__(self):
        return self

    def __exit__(self, exc_type, exc_val, exc_tb):
        self.close()
