"""
Error Taxonomy

Chain clients raise ``ChainUnavailable``; services catch it at the boundary
closest to the caller and degrade the affected item. Only configuration
errors are allowed to reach the caller as hard failures.
"""

from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Dict, Optional


class ErrorCategory(str, Enum):
    """Categories of errors raised inside the engine."""

    NETWORK = "network"                # RPC transport failure
    TIMEOUT = "timeout"                # RPC call timed out
    PROVIDER = "provider"              # Node or API returned an error payload
    CONFIGURATION = "configuration"    # Bad address, chain or contract config
    DELIVERY = "delivery"              # Alert channel rejected a message
    UNKNOWN = "unknown"


@dataclass
class ErrorContext:
    """Additional context about an error."""

    category: ErrorCategory = ErrorCategory.UNKNOWN
    provider: Optional[str] = None
    chain: Optional[str] = None
    method: Optional[str] = None
    details: Dict[str, Any] = field(default_factory=dict)


class ChainwatchError(Exception):
    """Base class for engine errors."""

    def __init__(
        self,
        message: str,
        category: ErrorCategory = ErrorCategory.UNKNOWN,
        context: Optional[ErrorContext] = None,
    ):
        super().__init__(message)
        self.message = message
        self.category = category
        self.context = context or ErrorContext(category=category)


class ChainUnavailable(ChainwatchError):
    """An RPC call failed, timed out, or returned an error payload."""

    def __init__(
        self,
        chain: str,
        method: str,
        message: str = "RPC call failed",
        category: ErrorCategory = ErrorCategory.NETWORK,
        provider: Optional[str] = None,
        details: Optional[Dict[str, Any]] = None,
    ):
        super().__init__(
            f"{chain} {method}: {message}",
            category=category,
            context=ErrorContext(
                category=category,
                provider=provider,
                chain=chain,
                method=method,
                details=details or {},
            ),
        )
        self.chain = chain
        self.method = method


class ConfigurationError(ChainwatchError):
    """Caller supplied an unusable address, chain or contract config."""

    def __init__(self, message: str, **details: Any):
        super().__init__(
            message,
            category=ErrorCategory.CONFIGURATION,
            context=ErrorContext(category=ErrorCategory.CONFIGURATION, details=details),
        )


class UnsupportedChain(ConfigurationError):
    """Chain identifier has no configured client."""

    def __init__(self, chain: str):
        super().__init__(f"Unsupported chain: {chain}", chain=chain)
        self.chain = chain


__all__ = [
    "ErrorCategory",
    "ErrorContext",
    "ChainwatchError",
    "ChainUnavailable",
    "ConfigurationError",
    "UnsupportedChain",
]
