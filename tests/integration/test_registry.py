"""
Integration tests for the provider registry.
"""
import httpx
import pytest

from blog_ai_gateway.adapters import DashScopeProvider, DeepSeekProvider, ErnieProvider, OpenAIProvider
from blog_ai_gateway.core.cache import InMemoryResponseCache
from blog_ai_gateway.core.config import ProviderConfig
from blog_ai_gateway.core.errors import UnsupportedProviderError
from blog_ai_gateway.core.monitor import PerformanceMonitor
from blog_ai_gateway.core.registry import ProviderRegistry, create_default_registry, get_provider


class TestProviderRegistry:
    """Test adapter registration and provider construction."""

    def test_default_registry_has_all_vendors(self):
        registry = create_default_registry()
        assert set(registry.supported_providers()) == {"openai", "ali", "baidu", "deepseek"}

    @pytest.mark.parametrize("name,adapter_class", [
        ("openai", OpenAIProvider),
        ("ali", DashScopeProvider),
        ("baidu", ErnieProvider),
        ("deepseek", DeepSeekProvider),
        ("DEEPSEEK", DeepSeekProvider),
    ])
    def test_build(self, name, adapter_class):
        registry = create_default_registry()
        provider = registry.build({"provider": name, "api_key": "sk-x", "secret_key": "s", "model": "m"})
        assert isinstance(provider, adapter_class)
        assert not provider.is_connected

    def test_unknown_provider(self, recording_handler, chat_response):
        handler = recording_handler(lambda request: chat_response("unused"))
        registry = create_default_registry(transport=httpx.MockTransport(handler))
        with pytest.raises(UnsupportedProviderError):
            registry.build({"provider": "claude", "api_key": "x", "model": "claude-3"})
        assert handler.calls == 0

    def test_missing_adapter(self):
        registry = ProviderRegistry()
        with pytest.raises(UnsupportedProviderError) as exc_info:
            registry.build(ProviderConfig(provider="openai", api_key="sk-x", model="gpt-4"))
        assert exc_info.value.provider == "openai"

    def test_register_adapter(self):
        registry = ProviderRegistry()
        registry.register_adapter("DeepSeek", DeepSeekProvider)
        assert registry.supported_providers() == ["deepseek"]

    def test_all_providers_instrumented_by_default(self):
        cache = InMemoryResponseCache()
        monitor = PerformanceMonitor()
        registry = create_default_registry(cache=cache, monitor=monitor)

        provider = registry.build({"provider": "openai", "api_key": "sk-x", "model": "gpt-4"})
        assert provider.instrumented
        assert provider._cache is cache
        assert provider._monitor is monitor

    def test_instrumented_providers_list(self):
        """Only listed providers share the cache and monitor."""
        registry = create_default_registry(
            cache=InMemoryResponseCache(),
            monitor=PerformanceMonitor(),
            instrumented_providers=["deepseek"],
        )

        deepseek = registry.build({"provider": "deepseek", "api_key": "sk-x", "model": "deepseek-chat"})
        openai = registry.build({"provider": "openai", "api_key": "sk-x", "model": "gpt-4"})

        assert deepseek.instrumented
        assert not openai.instrumented

    def test_build_uninstrumented(self):
        registry = create_default_registry(cache=InMemoryResponseCache(), monitor=PerformanceMonitor())
        provider = registry.build(
            {"provider": "deepseek", "api_key": "sk-x", "model": "deepseek-chat"},
            instrumented=False,
        )
        assert not provider.instrumented

    def test_default_model(self):
        registry = create_default_registry()
        provider = registry.build({"provider": "ali", "api_key": "sk-x", "model": ""})
        assert provider.model == "qwen-plus"

    def test_global_get_provider(self):
        provider = get_provider({"provider": "openai", "api_key": "sk-x", "model": "gpt-4"})
        assert isinstance(provider, OpenAIProvider)
        assert provider.model == "gpt-4"
