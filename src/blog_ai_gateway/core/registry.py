"""
Provider registry: resolves a provider name to an adapter instance.
"""

import logging
from typing import Any, Dict, Iterable, List, Mapping, Optional, Set, Type, Union

import httpx

from .cache import ResponseCache
from .config import ProviderConfig, ProviderType
from .errors import UnsupportedProviderError
from .interface import AIProvider
from .monitor import PerformanceMonitor
from .policy import GatewayPolicy

logger = logging.getLogger(__name__)


class ProviderRegistry:
    """
    Registry of provider adapters.

    Building a provider is side-effect free. The shared cache and monitor
    are attached only to providers listed as instrumented.
    """

    def __init__(
        self,
        policy: Optional[GatewayPolicy] = None,
        cache: Optional[ResponseCache] = None,
        monitor: Optional[PerformanceMonitor] = None,
        instrumented_providers: Optional[Iterable[Union[str, ProviderType]]] = None,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ):
        """
        Initialize the registry.

        Args:
            policy: Timeout and retry policy handed to every provider
            cache: Shared response cache
            monitor: Shared performance monitor
            instrumented_providers: Providers that use the cache and monitor;
                None means all of them
            transport: Optional httpx transport handed to every provider
        """
        self._adapters: Dict[ProviderType, Type[AIProvider]] = {}
        self.policy = policy or GatewayPolicy()
        self.cache = cache
        self.monitor = monitor
        self._transport = transport
        self._instrumented: Optional[Set[ProviderType]] = None
        if instrumented_providers is not None:
            self._instrumented = {ProviderType.parse(p) for p in instrumented_providers}

    def register_adapter(self, provider: Union[str, ProviderType], adapter_class: Type[AIProvider]) -> None:
        """
        Register a provider adapter class.

        Args:
            provider: Provider identifier (e.g., "openai", "deepseek")
            adapter_class: Adapter class to register
        """
        provider_type = ProviderType.parse(provider)
        self._adapters[provider_type] = adapter_class
        logger.info(f"Registered AI provider adapter: {provider_type.value}")

    def supported_providers(self) -> List[str]:
        return [p.value for p in self._adapters]

    def is_instrumented(self, provider: ProviderType) -> bool:
        return self._instrumented is None or provider in self._instrumented

    def build(
        self,
        config: Union[ProviderConfig, Mapping[str, Any]],
        instrumented: bool = True,
        policy: Optional[GatewayPolicy] = None,
    ) -> AIProvider:
        """
        Create a provider instance for a configuration.

        Args:
            config: Provider configuration
            instrumented: False to skip the shared cache and monitor
            policy: Policy for this provider only, instead of the shared one

        Returns:
            Configured provider

        Raises:
            UnsupportedProviderError: If no adapter is registered for the provider
        """
        if not isinstance(config, ProviderConfig):
            config = ProviderConfig(**config)

        adapter_class = self._adapters.get(config.provider)
        if adapter_class is None:
            raise UnsupportedProviderError(
                f"Unsupported AI provider: {config.provider.value}",
                provider=config.provider.value,
            )

        instrumented = instrumented and self.is_instrumented(config.provider)
        provider = adapter_class(
            config,
            policy=policy or self.policy,
            cache=self.cache if instrumented else None,
            monitor=self.monitor if instrumented else None,
            transport=self._transport,
        )

        logger.info(
            f"Created AI provider: {provider.name} (model: {provider.model}, instrumented: {instrumented})"
        )
        return provider


def create_default_registry(**kwargs: Any) -> ProviderRegistry:
    """Registry with every built-in adapter registered."""
    from ..adapters import DashScopeProvider, DeepSeekProvider, ErnieProvider, OpenAIProvider

    registry = ProviderRegistry(**kwargs)
    registry.register_adapter(ProviderType.OPENAI, OpenAIProvider)
    registry.register_adapter(ProviderType.ALI, DashScopeProvider)
    registry.register_adapter(ProviderType.BAIDU, ErnieProvider)
    registry.register_adapter(ProviderType.DEEPSEEK, DeepSeekProvider)
    return registry


# Global registry instance
_registry: Optional[ProviderRegistry] = None


def get_registry() -> ProviderRegistry:
    """Get the global provider registry."""
    global _registry
    if _registry is None:
        _registry = create_default_registry()
    return _registry


def get_provider(config: Union[ProviderConfig, Mapping[str, Any]]) -> AIProvider:
    """Build a provider from the global registry."""
    return get_registry().build(config)
