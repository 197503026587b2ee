"""
Gateway error types.

Every failure raised by a provider derives from GatewayError so callers
can catch a single type and still branch on the classification.
"""

import copy
from typing import Any, Optional


class GatewayError(Exception):
    """Base exception for gateway errors."""

    code: Optional[str] = None

    def __init__(
        self,
        message: str,
        gateway: str = None,
        code: Optional[str] = None,
        payload: Any = None,
    ):
        self.message = message
        self.gateway = gateway
        if code is not None:
            self.code = code
        self.payload = payload
        super().__init__(message)

    def with_prefix(self, prefix: str) -> "GatewayError":
        """Return a copy of this error with a prefixed message."""
        error = copy.copy(self)
        error.message = f"{prefix}: {self.message}"
        error.args = (error.message,)
        return error


class ConfigurationError(GatewayError):
    """Raised when there is no usable provider configuration."""
    code = "CONFIGURATION_ERROR"


class UnsupportedProviderError(GatewayError):
    """Raised when a provider name matches no registered adapter."""
    code = "UNSUPPORTED_PROVIDER"

    def __init__(self, message: str, gateway: str = None, provider: str = None):
        super().__init__(message, gateway)
        self.provider = provider


class AuthenticationError(GatewayError):
    """Raised when the vendor rejects the credentials (401/403)."""
    code = "AUTH_ERROR"

    def __init__(
        self,
        message: str,
        gateway: str = None,
        status_code: Optional[int] = None,
        payload: Any = None,
    ):
        super().__init__(message, gateway, payload=payload)
        self.status_code = status_code


class RateLimitError(GatewayError):
    """Raised when rate limit is exceeded."""
    code = "RATE_LIMITED"

    def __init__(
        self,
        message: str,
        gateway: str = None,
        retry_after: float = None,
        payload: Any = None,
    ):
        super().__init__(message, gateway, payload=payload)
        self.retry_after = retry_after


class GatewayTimeoutError(GatewayError):
    """Raised when a request misses its deadline."""
    code = "ETIMEDOUT"


class TransportError(GatewayError):
    """Raised when the network call fails before a response arrives."""
    code = "ECONNABORTED"


class MalformedResponseError(GatewayError):
    """Raised when the vendor payload does not have the expected shape."""
    code = "MALFORMED_RESPONSE"


class ProviderHTTPError(GatewayError):
    """Raised for non-success HTTP statuses without a dedicated class."""
    code = "HTTP_ERROR"

    def __init__(
        self,
        message: str,
        gateway: str = None,
        status_code: Optional[int] = None,
        payload: Any = None,
    ):
        super().__init__(message, gateway, payload=payload)
        self.status_code = status_code


class ProviderClosedError(GatewayError):
    """Raised when a closed provider is asked to make another call."""
    code = "PROVIDER_CLOSED"
