"""
Exception definitions for the token account resolver
"""

from enum import Enum
from typing import Optional


class ErrorCode(Enum):
    """
    Unified error codes for resolution operations

    1xxx - Transport errors
    2xxx - Ownership errors
    3xxx - Strategy errors
    9xxx - Configuration errors
    """
    # Transport errors (recoverable)
    RPC_CONNECTION_FAILED = "1001"
    RPC_TIMEOUT = "1002"
    RPC_RATE_LIMITED = "1003"
    RPC_INVALID_RESPONSE = "1004"

    # Ownership errors
    OFF_CURVE_OWNER_DISALLOWED = "2001"
    OWNERSHIP_CHANGED = "2002"

    # Strategy errors
    INVALID_STRATEGY_FOR_MINT = "3001"
    MULTIPLE_NATIVE_REQUESTS = "3002"
    UNSUPPORTED_MINT = "3003"
    INVALID_AMOUNT = "3004"

    # Configuration errors
    CONFIG_INVALID = "9001"
    CONFIG_MISSING = "9002"


class ResolverError(Exception):
    """
    Base exception for all resolver errors

    Attributes:
        message: Human-readable error message
        code: Error code for programmatic handling
        recoverable: Whether the error might succeed on retry
        original_error: The underlying exception if any
        details: Additional error context
    """

    def __init__(
        self,
        message: str,
        code: ErrorCode,
        recoverable: bool = False,
        original_error: Optional[Exception] = None,
        details: Optional[dict] = None,
    ):
        super().__init__(message)
        self.message = message
        self.code = code
        self.recoverable = recoverable
        self.original_error = original_error
        self.details = details or {}

    def __str__(self) -> str:
        return f"[{self.code.value}] {self.message}"

    def __repr__(self) -> str:
        return f"{self.__class__.__name__}(code={self.code.value}, message={self.message!r})"

    @property
    def should_retry(self) -> bool:
        """Indicate if the operation should be retried"""
        return self.recoverable


class TransportError(ResolverError):
    """
    Chain reader failures - network or RPC level

    Raised by the chain reader and passed through the resolver unchanged.
    """

    def __init__(
        self,
        message: str,
        code: ErrorCode = ErrorCode.RPC_CONNECTION_FAILED,
        original_error: Optional[Exception] = None,
        endpoint: Optional[str] = None,
    ):
        super().__init__(
            message,
            code,
            recoverable=True,
            original_error=original_error,
            details={"endpoint": endpoint} if endpoint else None,
        )
        self.endpoint = endpoint


class RpcError(TransportError):
    """
    JSON-RPC errors - typically recoverable

    Raised when:
    - Connection to RPC endpoint fails
    - Request times out
    - Rate limit is hit
    - Invalid response received
    """

    @classmethod
    def connection_failed(cls, endpoint: str, error: Exception = None) -> "RpcError":
        return cls(
            f"Failed to connect to RPC endpoint: {endpoint}",
            ErrorCode.RPC_CONNECTION_FAILED,
            original_error=error,
            endpoint=endpoint,
        )

    @classmethod
    def timeout(cls, endpoint: str, timeout_seconds: float) -> "RpcError":
        return cls(
            f"RPC request timed out after {timeout_seconds}s",
            ErrorCode.RPC_TIMEOUT,
            endpoint=endpoint,
        )

    @classmethod
    def rate_limited(cls, endpoint: str) -> "RpcError":
        return cls(
            "RPC rate limit exceeded",
            ErrorCode.RPC_RATE_LIMITED,
            endpoint=endpoint,
        )

    @classmethod
    def invalid_response(cls, endpoint: str, reason: str) -> "RpcError":
        return cls(
            f"Invalid RPC response: {reason}",
            ErrorCode.RPC_INVALID_RESPONSE,
            endpoint=endpoint,
        )


class OffCurveOwnerDisallowed(ResolverError):
    """
    Owner is a program derived address and the caller did not opt in

    Off-curve addresses cannot sign; treating one as a wallet owner is
    only valid when explicitly requested.
    """

    def __init__(self, owner: str):
        super().__init__(
            f"Owner {owner} is off-curve (program derived); pass allow_off_curve_owner=True to use it",
            ErrorCode.OFF_CURVE_OWNER_DISALLOWED,
            recoverable=False,
            details={"owner": owner},
        )
        self.owner = owner


class OwnershipChanged(ResolverError):
    """
    Account at the canonical address is controlled by someone else - not recoverable

    Raised when:
    - The associated token account exists but its authority was moved
      away from the expected owner
    """

    def __init__(self, address: str, expected_owner: str, actual_owner: Optional[str]):
        super().__init__(
            f"ATA with change of ownership detected: {address} "
            f"(expected owner {expected_owner}, found {actual_owner})",
            ErrorCode.OWNERSHIP_CHANGED,
            recoverable=False,
            details={
                "address": address,
                "expected_owner": expected_owner,
                "actual_owner": actual_owner,
            },
        )
        self.address = address
        self.expected_owner = expected_owner
        self.actual_owner = actual_owner


class InvalidStrategyForMint(ResolverError):
    """
    Wrapping strategy or funding request does not fit the mint

    Raised when:
    - A native-only wrapping strategy is requested for a regular mint
    - Funding is requested for a regular mint
    - Funding is requested for the native mint with no wrapping strategy
    - More than one native-mint request appears in one batch
    - The Token-2022 native mint is requested
    - The native mint is paired with a token program other than Tokenkeg
    """

    def __init__(
        self,
        message: str,
        mint: Optional[str] = None,
        strategy: Optional[str] = None,
        code: ErrorCode = ErrorCode.INVALID_STRATEGY_FOR_MINT,
    ):
        super().__init__(
            message,
            code,
            recoverable=False,
            details={"mint": mint, "strategy": strategy},
        )
        self.mint = mint
        self.strategy = strategy

    @classmethod
    def native_only(cls, mint: str, strategy: str) -> "InvalidStrategyForMint":
        return cls(
            f"Wrapping strategy '{strategy}' only applies to the native mint, got {mint}",
            mint=mint,
            strategy=strategy,
        )

    @classmethod
    def funding_not_supported(cls, mint: str, strategy: str) -> "InvalidStrategyForMint":
        return cls(
            f"Funding requested for {mint} but strategy '{strategy}' cannot fund an account",
            mint=mint,
            strategy=strategy,
        )

    @classmethod
    def multiple_native(cls, mint: str) -> "InvalidStrategyForMint":
        return cls(
            "Cannot resolve multiple wrapped native accounts in one batch",
            mint=mint,
            code=ErrorCode.MULTIPLE_NATIVE_REQUESTS,
        )

    @classmethod
    def token_program_mismatch(cls, mint: str, token_program: str) -> "InvalidStrategyForMint":
        return cls(
            f"Mint {mint} is not governed by token program {token_program}",
            mint=mint,
            code=ErrorCode.UNSUPPORTED_MINT,
        )

    @classmethod
    def unsupported_mint(cls, mint: str) -> "InvalidStrategyForMint":
        return cls(
            f"Mint {mint} is not supported",
            mint=mint,
            code=ErrorCode.UNSUPPORTED_MINT,
        )

    @classmethod
    def invalid_amount(cls, mint: str, amount: int) -> "InvalidStrategyForMint":
        return cls(
            f"Invalid amount {amount} for {mint}",
            mint=mint,
            code=ErrorCode.INVALID_AMOUNT,
        )


class ConfigurationError(ResolverError):
    """
    Configuration-related errors

    Raised when:
    - Required configuration is missing
    - Configuration values are invalid
    """

    def __init__(
        self,
        message: str,
        code: ErrorCode = ErrorCode.CONFIG_INVALID,
    ):
        super().__init__(message, code, recoverable=False)

    @classmethod
    def missing(cls, param: str) -> "ConfigurationError":
        return cls(f"Missing required configuration: {param}", ErrorCode.CONFIG_MISSING)

    @classmethod
    def invalid(cls, param: str, reason: str) -> "ConfigurationError":
        return cls(f"Invalid configuration '{param}': {reason}", ErrorCode.CONFIG_INVALID)
