"""
Core gateway components.
"""

from .interface import AIProvider, render_template
from .registry import ProviderRegistry, create_default_registry, get_provider, get_registry
from .config import GatewayConfig, ProviderConfig, ProviderType, load_config, resolve_active_config
from .cache import ResponseCache, InMemoryResponseCache, RedisResponseCache, make_cache_key
from .monitor import PerformanceMonitor, PerformanceMetrics, RequestTrace
from .policy import GatewayPolicy, get_friendly_error_message
from .errors import (
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

__all__ = [
    "AIProvider",
    "render_template",
    "ProviderRegistry",
    "create_default_registry",
    "get_provider",
    "get_registry",
    "GatewayConfig",
    "ProviderConfig",
    "ProviderType",
    "load_config",
    "resolve_active_config",
    "ResponseCache",
    "InMemoryResponseCache",
    "RedisResponseCache",
    "make_cache_key",
    "PerformanceMonitor",
    "PerformanceMetrics",
    "RequestTrace",
    "GatewayPolicy",
    "get_friendly_error_message",
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
