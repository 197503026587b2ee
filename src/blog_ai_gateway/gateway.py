"""
AI gateway composition root.

Owns the shared cache, monitor, registry and recorder, and exposes the AI
assist features the blog backend calls: summaries, writing suggestions,
SEO metadata, connection tests and status checks.
"""

import asyncio
import dataclasses
import logging
from typing import Any, Dict, List, Mapping, Optional, Set, Union

import httpx
from pydantic import BaseModel, Field

from .core.cache import InMemoryResponseCache, RedisResponseCache, ResponseCache
from .core.catalog import ModelInfo, get_model_info
from .core.config import GatewayConfig, ProviderConfig, resolve_active_config
from .core.errors import ConfigurationError
from .core.interface import AIProvider
from .core.monitor import PerformanceMetrics, PerformanceMonitor
from .core.registry import ProviderRegistry, create_default_registry
from .models.history import GenerationRecord, GenerationType
from .models.response import CompletionResult
from .persistence.recorder import GenerationRecorder
from .prompts import (
    CONNECTION_TEST_PROMPT,
    SUMMARY_TEMPLATE,
    WRITING_SUGGESTION_TEMPLATE,
    SeoResult,
    build_seo_prompt,
    history_prompt,
    parse_seo_result,
)

logger = logging.getLogger(__name__)

CONNECTION_TEST_TIMEOUT = 15.0


def _tokens_used(result: CompletionResult) -> int:
    return result.usage.total_tokens if result.usage else 0


class ConnectionTestResult(BaseModel):
    success: bool
    message: str
    response: Optional[str] = None
    model_info: Optional[ModelInfo] = None


class StatusReport(BaseModel):
    available: bool
    message: str
    details: Dict[str, Any] = Field(default_factory=dict)


class AIGateway:
    """
    Entry point for AI features.

    One provider configuration is active at a time. The provider instance
    is reused until the configuration changes, so per-provider state such
    as access tokens survives between requests.
    """

    def __init__(
        self,
        config: Optional[GatewayConfig] = None,
        cache: Optional[ResponseCache] = None,
        monitor: Optional[PerformanceMonitor] = None,
        recorder: Optional[GenerationRecorder] = None,
        registry: Optional[ProviderRegistry] = None,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ):
        self.config = config or GatewayConfig()
        self.cache = cache if cache is not None else InMemoryResponseCache(ttl_seconds=self.config.cache_ttl)
        self.monitor = monitor or PerformanceMonitor()
        self.recorder = recorder
        self.registry = registry or create_default_registry(
            policy=self.config.policy,
            cache=self.cache,
            monitor=self.monitor,
            instrumented_providers=self.config.instrumented_providers,
            transport=transport,
        )
        self._provider: Optional[AIProvider] = None
        self._background: Set[asyncio.Task] = set()

    @classmethod
    async def from_config(cls, config: GatewayConfig, **kwargs: Any) -> "AIGateway":
        """Build a gateway with the backends named in the configuration."""
        if "cache" not in kwargs and config.cache_backend == "redis":
            if not config.redis_url:
                raise ConfigurationError("redis_url is required for the redis cache backend")
            kwargs["cache"] = RedisResponseCache.from_url(config.redis_url, ttl_seconds=config.cache_ttl)

        if "recorder" not in kwargs and config.database_url:
            recorder = await GenerationRecorder.connect(config.database_url)
            await recorder.init_tables()
            kwargs["recorder"] = recorder

        return cls(config, **kwargs)

    # Provider resolution

    def get_provider(self) -> AIProvider:
        """Provider for the active configuration."""
        config = resolve_active_config(self.config.provider)
        if self._provider is None or self._provider.config != config:
            self._provider = self.registry.build(config)
        return self._provider

    async def update_config(self, provider_config: Optional[ProviderConfig]) -> None:
        """Switch the active provider configuration."""
        old = self._provider
        self.config.provider = provider_config
        self._provider = None
        if old is not None:
            await old.disconnect()
        logger.info(
            f"AI configuration updated: {provider_config.provider.value if provider_config else 'none'}"
        )

    def masked_config(self) -> Optional[Dict[str, Any]]:
        if self.config.provider is None:
            return None
        return self.config.provider.to_display_dict()

    def _feature_provider(self, flag: str, feature: str) -> AIProvider:
        provider = self.get_provider()
        if not getattr(provider.config, flag):
            raise ConfigurationError(f"{feature} is disabled", gateway=provider.name)
        return provider

    # Features

    async def generate_summary(self, content: str, user_id: Optional[int] = None) -> str:
        provider = self._feature_provider("enable_summary", "Summary generation")
        summary = await provider.summarize(content, SUMMARY_TEMPLATE)

        self._schedule_record(GenerationRecord(
            user_id=user_id,
            type=GenerationType.SUMMARY.value,
            prompt=history_prompt(SUMMARY_TEMPLATE, content),
            result=summary.text,
            tokens_used=_tokens_used(summary),
            model=provider.model,
            provider=provider.name,
        ))
        return summary.text

    async def generate_writing_suggestion(
        self,
        content: str,
        prompt: Optional[str] = None,
        user_id: Optional[int] = None,
    ) -> str:
        provider = self._feature_provider("enable_writing_help", "Writing help")
        template = prompt or WRITING_SUGGESTION_TEMPLATE
        logger.info(f"Writing suggestion requested, content length: {len(content)}, user: {user_id}")

        suggestion = await provider.suggest(content, template)

        self._schedule_record(GenerationRecord(
            user_id=user_id,
            type=GenerationType.WRITING_SUGGESTION.value,
            prompt=history_prompt(template, content),
            result=suggestion.text,
            tokens_used=_tokens_used(suggestion),
            model=provider.model,
            provider=provider.name,
        ))
        return suggestion.text

    async def generate_seo(self, title: str, content: str, user_id: Optional[int] = None) -> SeoResult:
        provider = self._feature_provider("enable_seo_suggestion", "SEO suggestion")
        prompt = build_seo_prompt(title, content)

        result = await provider.generate(prompt, operation="seo", validate=parse_seo_result)
        seo = parse_seo_result(result.text)

        self._schedule_record(GenerationRecord(
            user_id=user_id,
            type=GenerationType.SEO.value,
            prompt=prompt,
            result=result.text,
            tokens_used=_tokens_used(result),
            model=provider.model,
            provider=provider.name,
        ))
        return seo

    async def test_connection(
        self,
        candidate: Union[ProviderConfig, Mapping[str, Any]],
        timeout: float = CONNECTION_TEST_TIMEOUT,
    ) -> ConnectionTestResult:
        """
        Send a short prompt with a candidate configuration.

        A missing or masked API key falls back to the stored key when the
        stored configuration uses the same provider.
        """
        if not isinstance(candidate, ProviderConfig):
            candidate = ProviderConfig(**candidate)

        if not candidate.api_key or "*" in candidate.api_key:
            stored = self.config.provider
            if stored is None or stored.provider != candidate.provider:
                raise ConfigurationError("API key is unavailable, please enter a valid API key")
            candidate = candidate.model_copy(update={
                "api_key": stored.api_key,
                "secret_key": candidate.secret_key or stored.secret_key,
            })
            logger.info("Using the stored API key for the connection test")

        # One attempt, capped at the test deadline.
        policy = dataclasses.replace(self.registry.policy, max_retries=0, max_timeout=timeout)
        provider = self.registry.build(candidate, instrumented=False, policy=policy)
        try:
            response = await provider.generate_completion(CONNECTION_TEST_PROMPT)
        finally:
            await provider.close()

        return ConnectionTestResult(
            success=True,
            message="Connection test succeeded",
            response=response,
            model_info=get_model_info(provider.name, provider.model),
        )

    def check_status(self) -> StatusReport:
        """Whether the AI writing help is usable with the current configuration."""
        config = self.config.provider

        if config is None:
            return StatusReport(
                available=False,
                message="AI configuration does not exist, please configure the AI service first",
                details={"config_exists": False, "enabled": False, "writing_help_enabled": False},
            )

        details: Dict[str, Any] = {
            "config_exists": True,
            "enabled": config.enabled,
            "writing_help_enabled": config.enable_writing_help,
        }

        if not config.enabled:
            return StatusReport(available=False, message="AI service is disabled", details=details)

        if not config.enable_writing_help:
            return StatusReport(available=False, message="Writing help is disabled", details=details)

        if config.has_placeholder_key():
            details["api_key_configured"] = False
            return StatusReport(available=False, message="API key is not configured", details=details)

        details.update({
            "api_key_configured": True,
            "provider": config.provider.value,
            "model": config.model,
        })
        return StatusReport(available=True, message="AI service is available", details=details)

    # Metrics

    def get_metrics(self) -> PerformanceMetrics:
        return self.monitor.get_metrics()

    def get_performance_advice(self) -> List[str]:
        return self.monitor.get_performance_advice()

    def reset_metrics(self) -> None:
        self.monitor.reset()

    # History

    async def record_generation(self, data: Union[GenerationRecord, Mapping[str, Any]]) -> Optional[int]:
        """Persist a generation; returns None when nothing was stored."""
        if self.recorder is None:
            return None
        return await self.recorder.record(data)

    def _schedule_record(self, record: GenerationRecord) -> None:
        if self.recorder is None:
            return
        task = asyncio.create_task(self.record_generation(record))
        self._background.add(task)
        task.add_done_callback(self._background.discard)

    async def drain(self) -> None:
        """Wait for pending history writes."""
        if self._background:
            await asyncio.gather(*self._background, return_exceptions=True)

    async def aclose(self) -> None:
        await self.drain()
        if self._provider is not None:
            await self._provider.close()
            self._provider = None
        if isinstance(self.cache, RedisResponseCache):
            await self.cache.close()
        if self.recorder is not None:
            await self.recorder.close()
