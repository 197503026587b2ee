"""
Timeout and retry policy for provider calls.

Timeouts are resolved from the provider, the operation and the prompt
length. Retries are limited to a fixed allow-list of transport error codes.
"""

import asyncio
import logging
from dataclasses import dataclass, field
from typing import Any, Awaitable, Callable, Dict, FrozenSet, Optional, TypeVar

import httpx

from .errors import GatewayError, GatewayTimeoutError

logger = logging.getLogger(__name__)

T = TypeVar("T")

RETRYABLE_ERRORS: FrozenSet[str] = frozenset({
    "ECONNABORTED",
    "ETIMEDOUT",
    "ENOTFOUND",
    "ECONNRESET",
})

# Seconds per provider, with the default completion token budget.
PROVIDER_LIMITS: Dict[str, Dict[str, float]] = {
    "openai": {"timeout": 30.0, "max_tokens": 1000},
    "deepseek": {"timeout": 45.0, "max_tokens": 500},
    "baidu": {"timeout": 35.0, "max_tokens": 800},
    "ali": {"timeout": 40.0, "max_tokens": 600},
}

OPERATION_TIMEOUTS: Dict[str, float] = {
    "polish": 30.0,
    "expand": 45.0,
    "condense": 25.0,
    "summary": 20.0,
    "seo": 15.0,
}

ERROR_MESSAGES: Dict[str, str] = {
    "ECONNABORTED": "Connection aborted, please check your network connection",
    "ETIMEDOUT": "The request timed out, please try again later",
    "ENOTFOUND": "Unable to reach the AI service, please check the network",
    "ECONNRESET": "The connection was reset, please retry",
    "AUTH_ERROR": "The AI service rejected the API credentials",
    "RATE_LIMITED": "Too many requests to the AI service, please slow down",
    "MALFORMED_RESPONSE": "The AI service returned an unexpected response",
    "CONFIGURATION_ERROR": "The AI service is not configured",
    "UNSUPPORTED_PROVIDER": "The configured AI provider is not supported",
}

DEFAULT_ERROR_MESSAGE = "Processing failed, please retry"

_DNS_FAILURE_MARKERS = (
    "name or service not known",
    "nodename nor servname",
    "getaddrinfo failed",
    "temporary failure in name resolution",
    "no address associated",
)


@dataclass
class GatewayPolicy:
    """Timeout and retry settings shared by all providers."""
    api_request_timeout: float = 45.0
    connect_timeout: float = 10.0
    read_timeout: float = 40.0
    max_retries: int = 2
    retry_delay: float = 2.0
    retryable_errors: FrozenSet[str] = RETRYABLE_ERRORS
    max_timeout: Optional[float] = None
    providers: Dict[str, Dict[str, float]] = field(
        default_factory=lambda: {k: dict(v) for k, v in PROVIDER_LIMITS.items()}
    )

    def provider_timeout(self, provider: str) -> float:
        limits = self.providers.get(provider)
        if limits is None:
            return self.api_request_timeout
        return float(limits.get("timeout", self.api_request_timeout))

    def provider_max_tokens(self, provider: str, default: Optional[int] = None) -> Optional[int]:
        limits = self.providers.get(provider) or {}
        value = limits.get("max_tokens", default)
        return int(value) if value is not None else None

    @staticmethod
    def timeout_for_content_length(content_length: int) -> float:
        if content_length < 200:
            return 20.0
        if content_length < 500:
            return 30.0
        if content_length < 1000:
            return 45.0
        return 60.0

    @staticmethod
    def timeout_for_operation(operation: str) -> float:
        return OPERATION_TIMEOUTS.get(operation, 30.0)

    def resolve_timeout(
        self,
        provider: str,
        content_length: int,
        operation: Optional[str] = None,
    ) -> float:
        """
        Resolve the deadline for one completion call.

        Args:
            provider: Provider type identifier
            content_length: Length of the prompt in characters
            operation: Optional operation kind (summary, seo, ...)

        Returns:
            Deadline in seconds, never above ``max_timeout`` when set
        """
        if operation:
            base = self.timeout_for_operation(operation)
        else:
            base = self.provider_timeout(provider)
        timeout = max(base, self.timeout_for_content_length(content_length))
        if self.max_timeout is not None:
            return min(timeout, self.max_timeout)
        return timeout

    def http_timeout(self) -> httpx.Timeout:
        return httpx.Timeout(self.read_timeout, connect=self.connect_timeout)

    def is_retryable(self, error: BaseException) -> bool:
        if not isinstance(error, GatewayError):
            return False
        return error.code in self.retryable_errors


def classify_transport_error(error: httpx.RequestError) -> str:
    """Map an httpx transport failure onto a transport error code."""
    if isinstance(error, httpx.TimeoutException):
        return "ETIMEDOUT"
    if isinstance(error, httpx.ConnectError):
        text = str(error).lower()
        if any(marker in text for marker in _DNS_FAILURE_MARKERS):
            return "ENOTFOUND"
        return "ECONNABORTED"
    if isinstance(error, (httpx.ReadError, httpx.WriteError, httpx.RemoteProtocolError)):
        return "ECONNRESET"
    if isinstance(error, httpx.NetworkError):
        return "ECONNABORTED"
    return "EUNKNOWN"


def get_friendly_error_message(error: BaseException) -> str:
    """User-facing text for an error, without vendor internals."""
    code = getattr(error, "code", None) or type(error).__name__
    return ERROR_MESSAGES.get(code, DEFAULT_ERROR_MESSAGE)


def _consume_result(task: "asyncio.Task[Any]") -> None:
    if not task.cancelled():
        task.exception()


async def run_with_deadline(
    awaitable: Awaitable[T],
    timeout: float,
    gateway: str = None,
) -> T:
    """
    Race an awaitable against a timer.

    The underlying task is left running when the timer wins; its eventual
    result is discarded.
    """
    task = asyncio.ensure_future(awaitable)
    done, _ = await asyncio.wait({task}, timeout=timeout)
    if task in done:
        return task.result()

    task.add_done_callback(_consume_result)
    raise GatewayTimeoutError(
        f"Request did not complete within {timeout:.1f}s",
        gateway=gateway,
    )


async def call_with_retry(
    operation: Callable[[], Awaitable[T]],
    policy: GatewayPolicy,
    gateway: str = None,
) -> T:
    """
    Invoke an operation, retrying allow-listed transport failures.

    The operation runs at most ``policy.max_retries + 1`` times.
    """
    attempt = 0
    while True:
        attempt += 1
        try:
            return await operation()
        except GatewayError as e:
            if attempt > policy.max_retries or not policy.is_retryable(e):
                raise
            logger.warning(
                f"Attempt {attempt} against {gateway} failed ({e.code}): {e.message}; "
                f"retrying in {policy.retry_delay}s"
            )
            await asyncio.sleep(policy.retry_delay)
