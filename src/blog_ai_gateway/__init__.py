"""
Blog AI Provider Gateway

Lets the blog backend request text completions without knowing which
language-model vendor is configured:
- One adapter per vendor behind a shared provider interface
- Deadlines and allow-listed retries for transport failures
- TTL response cache and request performance monitor
- Best-effort generation history
"""

from .core.interface import AIProvider
from .core.registry import ProviderRegistry, create_default_registry, get_provider
from .core.config import GatewayConfig, ProviderConfig, ProviderType, load_config, resolve_active_config
from .core.cache import InMemoryResponseCache, RedisResponseCache, ResponseCache
from .core.monitor import PerformanceMonitor, PerformanceMetrics
from .core.policy import GatewayPolicy, get_friendly_error_message
from .core.errors import (
    GatewayError,
    ConfigurationError,
    UnsupportedProviderError,
    AuthenticationError,
    RateLimitError,
    GatewayTimeoutError,
    TransportError,
    MalformedResponseError,
    ProviderHTTPError,
    ProviderClosedError,
)
from .gateway import AIGateway
from .persistence.recorder import GenerationRecorder

__all__ = [
    "AIGateway",
    "AIProvider",
    "ProviderRegistry",
    "create_default_registry",
    "get_provider",
    "GatewayConfig",
    "ProviderConfig",
    "ProviderType",
    "load_config",
    "resolve_active_config",
    "ResponseCache",
    "InMemoryResponseCache",
    "RedisResponseCache",
    "PerformanceMonitor",
    "PerformanceMetrics",
    "GatewayPolicy",
    "get_friendly_error_message",
    "GenerationRecorder",
    "GatewayError",
    "ConfigurationError",
    "UnsupportedProviderError",
    "AuthenticationError",
    "RateLimitError",
    "GatewayTimeoutError",
    "TransportError",
    "MalformedResponseError",
    "ProviderHTTPError",
    "ProviderClosedError",
]
