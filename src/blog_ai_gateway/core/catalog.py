"""
Static model information for display.

Nothing here is enforced at request time.
"""

from typing import Dict, List

from pydantic import BaseModel

DEFAULT_MAX_TOKENS = 4096

MODEL_MAX_TOKENS: Dict[str, Dict[str, int]] = {
    "openai": {
        "gpt-3.5-turbo": 4096,
        "gpt-4": 8192,
        "gpt-4-turbo": 128000,
    },
    "deepseek": {
        "deepseek-chat": 8000,
        "deepseek-reasoner": 64000,
    },
    "baidu": {
        "ERNIE-Bot-4": 8000,
        "ERNIE-Bot-turbo": 8000,
    },
    "ali": {
        "qwen-plus": 32000,
        "qwen-turbo": 8000,
        "qwen-max": 8000,
    },
}

PROVIDER_REGIONS: Dict[str, str] = {
    "openai": "Global",
    "deepseek": "China",
    "baidu": "China",
    "ali": "China",
}

BASE_CAPABILITIES = ["text generation", "question answering"]


class ModelInfo(BaseModel):
    name: str
    max_tokens: int
    capabilities: List[str]
    region: str


def get_model_max_tokens(provider: str, model: str) -> int:
    return MODEL_MAX_TOKENS.get(provider, {}).get(model, DEFAULT_MAX_TOKENS)


def get_model_capabilities(provider: str, model: str) -> List[str]:
    if provider == "openai":
        if "gpt-4" in model:
            return BASE_CAPABILITIES + ["advanced reasoning", "code generation", "complex tasks"]
        return BASE_CAPABILITIES + ["code generation"]

    if provider == "deepseek":
        if "reasoner" in model:
            return BASE_CAPABILITIES + ["advanced reasoning", "math", "logical analysis"]
        return BASE_CAPABILITIES + ["chinese optimized", "code generation"]

    if provider in ("baidu", "ali"):
        return BASE_CAPABILITIES + ["chinese optimized", "long text"]

    return list(BASE_CAPABILITIES)


def get_provider_region(provider: str) -> str:
    return PROVIDER_REGIONS.get(provider, "Unknown")


def get_model_info(provider: str, model: str) -> ModelInfo:
    return ModelInfo(
        name=model,
        max_tokens=get_model_max_tokens(provider, model),
        capabilities=get_model_capabilities(provider, model),
        region=get_provider_region(provider),
    )
