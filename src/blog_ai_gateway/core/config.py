"""
Configuration loading for the AI provider gateway.
"""

import os
import logging
from enum import Enum
from typing import Dict, List, Any, Optional
from dataclasses import dataclass, field
from pathlib import Path

import yaml
from pydantic import BaseModel, Field, field_validator

from .errors import ConfigurationError, UnsupportedProviderError
from .policy import GatewayPolicy, PROVIDER_LIMITS, RETRYABLE_ERRORS

logger = logging.getLogger(__name__)

CONFIG_ENV_VAR = "BLOG_AI_GATEWAY_CONFIG"

PLACEHOLDER_API_KEYS = {
    "sk-your-api-key",
    "sk-please-configure-your-api-key",
}


class ProviderType(str, Enum):
    """Supported upstream vendors."""
    OPENAI = "openai"
    ALI = "ali"
    BAIDU = "baidu"
    DEEPSEEK = "deepseek"

    @classmethod
    def parse(cls, value: Any) -> "ProviderType":
        """Parse a provider name case-insensitively."""
        if isinstance(value, cls):
            return value
        try:
            return cls(str(value).strip().lower())
        except ValueError:
            raise UnsupportedProviderError(
                f"Unsupported AI provider: {value}",
                provider=str(value),
            )


class ProviderConfig(BaseModel):
    """The active AI provider configuration."""
    provider: ProviderType
    api_key: str = ""
    secret_key: Optional[str] = None
    base_url: Optional[str] = None
    model: str
    temperature: float = Field(default=0.7, ge=0, le=2)
    max_tokens: int = Field(default=2000, ge=1)
    enabled: bool = True

    # Per-feature switches
    enable_summary: bool = True
    enable_seo_suggestion: bool = True
    enable_writing_help: bool = True

    @field_validator("provider", mode="before")
    @classmethod
    def _parse_provider(cls, value: Any) -> ProviderType:
        return ProviderType.parse(value)

    def masked_api_key(self) -> str:
        """API key with everything but the first and last 4 characters hidden."""
        key = self.api_key or ""
        if len(key) <= 8:
            return "*" * len(key)
        return key[:4] + "*" * (len(key) - 8) + key[-4:]

    def has_placeholder_key(self) -> bool:
        return not self.api_key or self.api_key in PLACEHOLDER_API_KEYS

    def to_display_dict(self) -> Dict[str, Any]:
        """Config suitable for display, with the key masked."""
        data = self.model_dump(mode="json")
        data["api_key"] = self.masked_api_key()
        if data.get("secret_key"):
            data["secret_key"] = "*" * len(data["secret_key"])
        return data


@dataclass
class GatewayConfig:
    """Complete gateway configuration."""
    provider: Optional[ProviderConfig] = None
    policy: GatewayPolicy = field(default_factory=GatewayPolicy)
    cache_ttl: float = 300.0
    cache_backend: str = "memory"  # memory, redis
    redis_url: Optional[str] = None
    database_url: Optional[str] = None
    instrumented_providers: Optional[List[str]] = None


def load_config(config_path: Optional[str] = None) -> GatewayConfig:
    """
    Load gateway configuration from YAML file.

    Args:
        config_path: Path to config file. If None, uses the environment
            variable or a default location.

    Returns:
        Loaded configuration
    """
    if config_path is None:
        config_path = os.environ.get(CONFIG_ENV_VAR)

    if config_path is None:
        paths = [
            Path("config/ai-gateway.yaml"),
            Path("/etc/blog-ai-gateway/ai-gateway.yaml"),
            Path.home() / ".config/blog-ai-gateway/ai-gateway.yaml",
        ]
        for p in paths:
            if p.exists():
                config_path = str(p)
                break

    if config_path is None or not Path(config_path).exists():
        logger.warning("No AI gateway config file found, using defaults")
        return GatewayConfig()

    with open(config_path, 'r') as f:
        data = yaml.safe_load(f) or {}

    return parse_config(data)


def _expand_env(value: Any) -> Any:
    """Expand ${VAR} references."""
    if isinstance(value, str) and value.startswith("${") and value.endswith("}"):
        return os.environ.get(value[2:-1], "")
    return value


def parse_config(data: Dict[str, Any]) -> GatewayConfig:
    """Parse configuration dictionary."""
    provider = None
    ai_data = data.get("ai")
    if ai_data:
        provider = ProviderConfig(**{k: _expand_env(v) for k, v in ai_data.items()})

    gw_data = data.get("gateway", {})
    retry_data = gw_data.get("retry", {})
    timeout_data = gw_data.get("timeouts", {})

    providers = {k: dict(v) for k, v in PROVIDER_LIMITS.items()}
    for name, limits in gw_data.get("providers", {}).items():
        providers.setdefault(name, {}).update(limits)

    policy = GatewayPolicy(
        api_request_timeout=float(timeout_data.get("api_request", 45.0)),
        connect_timeout=float(timeout_data.get("connection", 10.0)),
        read_timeout=float(timeout_data.get("read", 40.0)),
        max_retries=int(retry_data.get("max_retries", 2)),
        retry_delay=float(retry_data.get("retry_delay", 2.0)),
        retryable_errors=frozenset(retry_data.get("retryable_errors", RETRYABLE_ERRORS)),
        providers=providers,
    )

    cache_data = gw_data.get("cache", {})

    return GatewayConfig(
        provider=provider,
        policy=policy,
        cache_ttl=float(cache_data.get("ttl", 300.0)),
        cache_backend=cache_data.get("backend", "memory"),
        redis_url=_expand_env(cache_data.get("redis_url")),
        database_url=_expand_env(gw_data.get("database_url")),
        instrumented_providers=gw_data.get("instrumented_providers"),
    )


def resolve_active_config(config: Optional[ProviderConfig]) -> ProviderConfig:
    """
    Check that a provider configuration can be used.

    Raises:
        ConfigurationError: If no config exists, it is disabled, or a
            credential is missing
    """
    if config is None:
        raise ConfigurationError("AI configuration does not exist, please configure the AI service first")

    if not config.enabled:
        raise ConfigurationError("AI service is disabled, please enable it first")

    if not config.api_key:
        raise ConfigurationError(
            f"API key is missing for provider {config.provider.value}",
            gateway=config.provider.value,
        )

    if config.provider == ProviderType.BAIDU and not config.secret_key:
        raise ConfigurationError(
            "Secret key is required for the baidu provider",
            gateway=config.provider.value,
        )

    return config
