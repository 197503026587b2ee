"""
Provider adapters for the supported AI vendors.
"""

from .openai_adapter import OpenAIProvider
from .dashscope_adapter import DashScopeProvider
from .ernie_adapter import ErnieProvider, AccessToken
from .deepseek_adapter import DeepSeekProvider

__all__ = [
    "OpenAIProvider",
    "DashScopeProvider",
    "ErnieProvider",
    "AccessToken",
    "DeepSeekProvider",
]
