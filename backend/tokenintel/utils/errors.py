"""
Error types for token intelligence operations.

Every error maps to one HTTP status in ``tokenintel.main``; only
``UpstreamError`` and its subclasses are considered retryable.
"""
from typing import Optional


class TokenIntelError(Exception):
    """Base class for all token intelligence errors."""
    status_code = 500
    code = "INTERNAL_ERROR"


class ValidationError(TokenIntelError):
    """Raised when an input address or payload is malformed. Never retried."""
    status_code = 400
    code = "VALIDATION_ERROR"


class NotFoundError(TokenIntelError):
    """Raised when a requested resource does not exist."""
    status_code = 404
    code = "NOT_FOUND"


class SupplyUnavailable(NotFoundError):
    """Raised when a mint reports no (or zero) token supply."""
    code = "SUPPLY_UNAVAILABLE"


class UpstreamError(TokenIntelError):
    """Raised when a single provider or network call fails."""
    status_code = 502
    code = "UPSTREAM_ERROR"


class NoProviderAvailable(UpstreamError):
    """Raised when no RPC endpoint passes its liveness probe."""
    status_code = 503
    code = "NO_PROVIDER_AVAILABLE"


class AggregateFailure(UpstreamError):
    """Raised when every fallback strategy failed across all retry cycles."""
    code = "ALL_STRATEGIES_FAILED"

    def __init__(self, message: str, last_error: Optional[BaseException] = None):
        super().__init__(message)
        self.last_error = last_error


class FormatError(TokenIntelError):
    """Raised when on-chain binary data does not match the expected layout."""
    status_code = 502
    code = "FORMAT_ERROR"


class EmptyReservesError(TokenIntelError, ZeroDivisionError):
    """Raised when curve math would divide by an empty reserve."""
    status_code = 422
    code = "EMPTY_RESERVES"


class InvalidTransition(TokenIntelError):
    """Raised when a research step is moved to a state it cannot reach."""
    code = "INVALID_TRANSITION"


class ResearchCancelled(TokenIntelError):
    """Raised between research steps once the caller has gone away."""
    status_code = 499
    code = "RESEARCH_CANCELLED"


# Public exports
__all__ = [
    'TokenIntelError',
    'ValidationError',
    'NotFoundError',
    'SupplyUnavailable',
    'UpstreamError',
    'NoProviderAvailable',
    'AggregateFailure',
    'FormatError',
    'EmptyReservesError',
    'InvalidTransition',
    'ResearchCancelled',
]
